"""Inbound message kinds and outbound payload builders for the relay protocol.

Every frame is a UTF-8 JSON object carrying a ``type`` discriminator. Inbound
frames are parsed into one dataclass per kind; coordinates, block ids and
actions are kept exactly as the client sent them.
"""
import json
import time
from dataclasses import dataclass, fields
from typing import Any, Dict, List, Union

from .errors import MalformedMessage

INVALID_MESSAGE = 'Invalid message format'


@dataclass
class AdminConnect:
    type_name = 'admin_connect'


@dataclass
class Login:
    type_name = 'login'
    username: Any
    version: Any


@dataclass
class Move:
    type_name = 'move'
    x: Any
    y: Any
    z: Any


@dataclass
class BlockAction:
    type_name = 'block_action'
    x: Any
    y: Any
    z: Any
    blockId: Any
    action: Any


@dataclass
class Chat:
    type_name = 'chat'
    message: Any


@dataclass
class Ping:
    type_name = 'ping'


Message = Union[AdminConnect, Login, Move, BlockAction, Chat, Ping]

MESSAGE_TYPES = {cls.type_name: cls for cls in (AdminConnect, Login, Move, BlockAction, Chat, Ping)}


def parse_message(raw: Union[str, bytes]) -> Message:
    """Parse a raw frame into a typed message, raising MalformedMessage on any problem."""
    if isinstance(raw, bytes):
        try:
            raw = raw.decode('utf-8')
        except UnicodeDecodeError as e:
            raise MalformedMessage(f"frame is not UTF-8: {e}") from e
    try:
        data = json.loads(raw)
    except (TypeError, ValueError) as e:
        raise MalformedMessage(f"frame is not JSON: {e}") from e
    if not isinstance(data, dict):
        raise MalformedMessage('frame is not a JSON object')

    type_name = data.get('type')
    cls = MESSAGE_TYPES.get(type_name) if isinstance(type_name, str) else None
    if cls is None:
        raise MalformedMessage(f"unknown message type: {type_name!r}")

    kwargs = {}
    for f in fields(cls):
        if f.name not in data:
            raise MalformedMessage(f"{type_name} is missing field {f.name!r}")
        kwargs[f.name] = data[f.name]
    return cls(**kwargs)


def now_millis() -> int:
    return int(time.time() * 1000)


# Outbound payloads

def error(message: str) -> Dict[str, Any]:
    return {'type': 'error', 'message': message}


def admin_update(players: List[Dict[str, Any]]) -> Dict[str, Any]:
    return {'type': 'admin_update', 'players': players}


def login_success(player_id: str, spawn: Dict[str, Any]) -> Dict[str, Any]:
    return {'type': 'login_success', 'playerId': player_id, 'spawn': dict(spawn)}


def existing_players(players: List[Dict[str, Any]]) -> Dict[str, Any]:
    return {'type': 'existing_players', 'players': players}


def player_join(player: Dict[str, Any]) -> Dict[str, Any]:
    return {'type': 'player_join', 'player': player}


def player_move(player_id: str, x, y, z) -> Dict[str, Any]:
    return {'type': 'player_move', 'playerId': player_id, 'x': x, 'y': y, 'z': z}


def block_update(x, y, z, block_id, action, player_id: str) -> Dict[str, Any]:
    return {'type': 'block_update', 'x': x, 'y': y, 'z': z, 'blockId': block_id,
            'action': action, 'playerId': player_id}


def chat(username: str, message, timestamp: int = None) -> Dict[str, Any]:
    return {'type': 'chat', 'username': username, 'message': message,
            'timestamp': now_millis() if timestamp is None else timestamp}


def pong() -> Dict[str, Any]:
    return {'type': 'pong'}


def player_leave(player_id: str, username: str) -> Dict[str, Any]:
    return {'type': 'player_leave', 'playerId': player_id, 'username': username}


def server_shutdown(message: str) -> Dict[str, Any]:
    return {'type': 'server_shutdown', 'message': message}
