"""Per-connection WebSocket loop for game and admin clients."""
import logging

from websockets.exceptions import ConnectionClosed

from .handlers import release_player, route
from .state import Connection

logger = logging.getLogger(__name__)


def request_path(websocket):
    request = getattr(websocket, 'request', None)
    path = getattr(request, 'path', None) or getattr(websocket, 'path', '/')
    return path.split('?', 1)[0]


async def handle_disconnect(state, connection):
    """Clean up after a closed connection. Safe to call more than once."""
    state.discard_connection(connection)
    if connection.player_id is not None:
        await release_player(state, connection.player_id)


async def handle_minecraft_client(relay, websocket):
    """Serve one client until its socket closes."""
    if not relay.accepting:
        await websocket.close(code=1001, reason='Server is not accepting connections')
        return
    if relay.settings.ws_path and request_path(websocket) != relay.settings.ws_path:
        await websocket.close(code=1008, reason='Unknown path')
        return

    state = relay.state
    connection = Connection(websocket)
    state.add_connection(connection)
    logger.info(f"🎮 New connection from {connection.address}")
    try:
        async for message in websocket:
            async with state.lock:
                if not relay.accepting:
                    break
                await route(state, connection, message)
    except ConnectionClosed:
        pass
    finally:
        async with state.lock:
            await handle_disconnect(state, connection)
        logger.info(f"🔌 Connection closed: {connection.address}")
