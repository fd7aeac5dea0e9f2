"""Entrypoint that wires up the relay and its control API"""
import asyncio
import logging
import os
import signal
import sys

import psutil

from .config import Settings
from .control import run_http_server
from .lifecycle import RelayServer, SHUTDOWN_MESSAGE

logger = logging.getLogger(__name__)


async def main(settings=None):
    """Run the relay until SIGINT/SIGTERM, then shut down gracefully"""
    settings = settings or Settings.from_env()
    shutdown_event = asyncio.Event()

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, shutdown_event.set)
        except NotImplementedError:
            # Windows event loops have no signal handler support
            signal.signal(sig, lambda signum, frame: loop.call_soon_threadsafe(shutdown_event.set))

    available_memory_gb = psutil.virtual_memory().available / (1024**3)
    logger.info('=' * 60)
    logger.info(f"🎮 Minecraft {settings.supported_version} WebSocket relay")
    logger.info('=' * 60)
    logger.info(f"💻 System: {psutil.cpu_count()} CPUs, {available_memory_gb:.1f} GB available RAM")

    relay = RelayServer(settings)
    runner = None
    try:
        runner = await run_http_server(relay)
        await relay.start()
        logger.info("📍 Press Ctrl+C to gracefully shutdown the server")
        await shutdown_event.wait()
        logger.info("🛑 Termination signal received")
    except Exception as e:
        logger.error(f"❌ Server error: {e}", exc_info=True)
        raise
    finally:
        logger.info("🧹 Cleaning up resources...")
        await relay.stop(SHUTDOWN_MESSAGE)
        if runner is not None:
            logger.info("  • Closing control API...")
            await runner.cleanup()
        logger.info("✅ Server shutdown complete")


def run():
    # Only configure basic logging here if no handlers are present.
    # The launcher (app.py) configures logging and should control level via --level / LOG_LEVEL.
    root = logging.getLogger()
    if not root.handlers:
        level = getattr(logging, os.getenv('LOG_LEVEL', 'INFO').upper(), logging.INFO)
        logging.basicConfig(level=level, format='%(asctime)s - %(message)s')
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        sys.exit(0)


if __name__ == '__main__':
    run()
