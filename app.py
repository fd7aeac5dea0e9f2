# Launcher for the relay server
import logging
import asyncio
import os
import sys
import argparse

# Preserve previous environment loader
from dotenv import load_dotenv
load_dotenv()

# Configure logging level from CLI or environment
parser = argparse.ArgumentParser(description='Minecraft WebSocket relay')
parser.add_argument('--level', '-l', default=os.getenv('LOG_LEVEL', 'INFO'), help='Logging level (DEBUG, INFO, WARNING, ERROR)')
parser.add_argument('--port', '-p', type=int, default=None, help='Control API port (WebSocket listens on port + 1 unless WS_PORT is set)')


def configure_logging(level_name):
    level = getattr(logging, (level_name or 'INFO').upper(), logging.INFO)
    logging.basicConfig(level=level, format='%(asctime)s - %(message)s')

    # Ensure root logger and all handlers use the selected level (some libraries preconfigure handlers)
    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    for handler in root_logger.handlers:
        handler.setLevel(level)
    # websockets logs every handshake failure at INFO
    logging.getLogger('websockets').setLevel(max(level, logging.WARNING))


logger = logging.getLogger(__name__)


if __name__ == '__main__':
    args = parser.parse_args()
    configure_logging(args.level)
    if args.port is not None:
        os.environ['PORT'] = str(args.port)

    from mcrelay.main import main
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("\nServer stopped by user")
    except Exception as e:
        logging.error(f'Error starting server: {e}')
        raise
    finally:
        # Clean exit
        sys.exit(0)
