"""Broadcast helpers shared across modules."""
import logging

from .errors import DeliveryFailure

logger = logging.getLogger(__name__)


async def send_to(connection, message):
    """Send one message to one connection; returns False when delivery failed."""
    if not connection.is_open:
        return False
    try:
        await connection.send(message)
        return True
    except DeliveryFailure as e:
        logger.warning(f"⚠️ {e}")
        return False


async def broadcast(state, world_name, message, exclude_player_id=None):
    """Deliver ``message`` to the open members of a world, then to every admin.

    Recipients are written one after another so a single recipient sees
    broadcasts in the order they were issued. A failing recipient never stops
    delivery to the rest.
    """
    delivered = 0
    for player in state.players_in(world_name):
        if player.id == exclude_player_id or not player.connected:
            continue
        if await send_to(player.connection, message):
            delivered += 1

    # Admins hold no player id, so the exclusion never applies to them
    for admin in state.admins():
        if await send_to(admin, message):
            delivered += 1

    logger.debug(f"📡 {message.get('type')} -> {world_name}: {delivered} recipients")
    return delivered


async def broadcast_to_all(state, message):
    """Deliver ``message`` to every open connection, players and admins alike."""
    delivered = 0
    for connection in state.open_connections():
        if await send_to(connection, message):
            delivered += 1
    return delivered
