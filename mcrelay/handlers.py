"""Message router and per-kind handlers.

Handlers run with the state lock held by the caller and have the signature
``async def handle_xxx(state, connection, message)``.
"""
import logging

from . import protocol
from .errors import MalformedMessage, UnauthenticatedAction, VersionMismatch
from .utils import broadcast, send_to

logger = logging.getLogger(__name__)


def require_player(state, connection):
    """Return the Player bound to ``connection`` or raise UnauthenticatedAction."""
    if connection.is_admin:
        raise UnauthenticatedAction('admin connections do not act as players')
    player = state.find(connection.player_id)
    if player is None:
        raise UnauthenticatedAction('connection has not logged in')
    return player


async def release_player(state, player_id):
    """Remove a player from both registries and tell the rest of its world.

    Returns False when the player was already gone, in which case nothing is
    broadcast.
    """
    player = state.unregister(player_id)
    if player is None:
        return False
    if player.connection.player_id == player_id:
        player.connection.player_id = None
    await broadcast(state, player.world, protocol.player_leave(player.id, player.username))
    logger.info(f"👋 Player {player.username} ({player.id}) left {player.world}")
    return True


async def handle_admin_connect(state, connection, message):
    if connection.is_authenticated:
        raise UnauthenticatedAction('a logged-in player cannot become an admin')
    connection.is_admin = True
    logger.info(f"🛡️ Admin panel connected from {connection.address}")
    await send_to(connection, protocol.admin_update(state.snapshot()))


async def handle_login(state, connection, message):
    if connection.is_admin:
        raise UnauthenticatedAction('admin connections cannot log in')
    try:
        if message.version != state.supported_version:
            raise VersionMismatch(message.version, state.supported_version)
        if connection.is_authenticated:
            # One Player per connection: the old session ends before the new one starts
            await release_player(state, connection.player_id)
        player = state.register(connection, message.username, message.version)
    except VersionMismatch as e:
        logger.info(f"🚫 Login from {connection.address} rejected: version {e.version!r}")
        await send_to(connection, protocol.error(str(e)))
        return

    world = state.worlds[player.world]
    await send_to(connection, protocol.login_success(player.id, world.spawn))
    others = [p.snapshot() for p in state.players_in(world.name) if p.id != player.id]
    await send_to(connection, protocol.existing_players(others))
    await broadcast(state, world.name, protocol.player_join(player.snapshot()), exclude_player_id=player.id)
    logger.info(f"🎯 Player {player.username} ({player.id}) joined {world.name}")


async def handle_move(state, connection, message):
    player = require_player(state, connection)
    player.x, player.y, player.z = message.x, message.y, message.z
    await broadcast(state, player.world, protocol.player_move(player.id, message.x, message.y, message.z),
                    exclude_player_id=player.id)


async def handle_block_action(state, connection, message):
    player = require_player(state, connection)
    update = protocol.block_update(message.x, message.y, message.z, message.blockId, message.action, player.id)
    await broadcast(state, player.world, update, exclude_player_id=player.id)


async def handle_chat(state, connection, message):
    player = require_player(state, connection)
    await broadcast(state, player.world, protocol.chat(player.username, message.message))
    logger.info(f"💬 [{player.world}] {player.username}: {message.message}")


async def handle_ping(state, connection, message):
    await send_to(connection, protocol.pong())


HANDLERS = {
    protocol.AdminConnect: handle_admin_connect,
    protocol.Login: handle_login,
    protocol.Move: handle_move,
    protocol.BlockAction: handle_block_action,
    protocol.Chat: handle_chat,
    protocol.Ping: handle_ping,
}


async def route(state, connection, raw):
    """Parse one inbound frame and dispatch it; never raises."""
    try:
        message = protocol.parse_message(raw)
        await HANDLERS[type(message)](state, connection, message)
    except UnauthenticatedAction as e:
        logger.debug(f"Dropped message from {connection.address}: {e}")
    except MalformedMessage as e:
        logger.warning(f"❓ Malformed message from {connection.address}: {e.detail}")
        await send_to(connection, protocol.error(protocol.INVALID_MESSAGE))
    except Exception:
        logger.exception(f"Handler failed for message from {connection.address}")
        await send_to(connection, protocol.error(protocol.INVALID_MESSAGE))
