"""Shared runtime state for the relay: connections, players and worlds."""
import asyncio
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Set
from uuid import uuid4

from websockets.protocol import State

from .errors import DeliveryFailure, VersionMismatch

logger = logging.getLogger(__name__)

INITIAL_HEALTH = 20
INITIAL_FOOD = 20


class Connection:
    """Non-owning wrapper around a client websocket.

    ``player_id`` is only bound after a successful login; admin connections
    never get one.
    """

    def __init__(self, websocket):
        self.websocket = websocket
        self.player_id: Optional[str] = None
        self.is_admin = False
        try:
            host, port = websocket.remote_address[:2]
            self.address = f"{host}:{port}"
        except Exception:
            self.address = 'unknown'

    @property
    def is_open(self) -> bool:
        return self.websocket.state is State.OPEN

    @property
    def is_authenticated(self) -> bool:
        return self.player_id is not None

    async def send(self, message: Dict[str, Any]) -> None:
        try:
            await self.websocket.send(json.dumps(message))
        except Exception as e:
            raise DeliveryFailure(f"send to {self.address} failed: {e}") from e

    async def close(self, code: int = 1000, reason: str = '') -> None:
        await self.websocket.close(code=code, reason=reason)

    def __repr__(self):
        return f"<Connection {self.address} player={self.player_id} admin={self.is_admin}>"


@dataclass
class Player:
    id: str
    username: str
    connection: Connection
    world: str
    x: Any = 0
    y: Any = 64
    z: Any = 0
    health: int = INITIAL_HEALTH
    food: int = INITIAL_FOOD
    connected: bool = True

    def snapshot(self) -> Dict[str, Any]:
        return {'id': self.id, 'username': self.username, 'x': self.x, 'y': self.y, 'z': self.z}


@dataclass
class World:
    name: str
    spawn: Dict[str, Any]
    members: Set[str] = field(default_factory=set)


class RelayState:
    """Session and world registries shared by every connection.

    All mutations happen while ``lock`` is held by the caller, so a reap
    sweep never interleaves with a login or a disconnect.
    """

    def __init__(self, supported_version: str = '1.12.2', default_world: str = 'overworld',
                 spawn: Optional[Dict[str, Any]] = None):
        self.supported_version = supported_version
        self.default_world = default_world
        self.players: Dict[str, Player] = {}
        self.worlds: Dict[str, World] = {}
        self.connections: Set[Connection] = set()
        self.lock = asyncio.Lock()
        self.add_world(default_world, spawn or {'x': 0, 'y': 64, 'z': 0})

    @classmethod
    def from_settings(cls, settings) -> 'RelayState':
        return cls(supported_version=settings.supported_version,
                   default_world=settings.default_world,
                   spawn=dict(settings.spawn))

    def add_world(self, name: str, spawn: Dict[str, Any]) -> World:
        if name in self.worlds:
            return self.worlds[name]
        world = World(name=name, spawn=dict(spawn))
        self.worlds[name] = world
        logger.debug(f"Created world {name} with spawn {spawn}")
        return world

    # Session registry

    def register(self, connection: Connection, username: str, version: str,
                 world_name: Optional[str] = None) -> Player:
        if version != self.supported_version:
            raise VersionMismatch(version, self.supported_version)
        world = self.worlds[world_name or self.default_world]
        player = Player(
            id=str(uuid4()),
            username=username,
            connection=connection,
            world=world.name,
            x=world.spawn['x'], y=world.spawn['y'], z=world.spawn['z'],
        )
        self.players[player.id] = player
        world.members.add(player.id)
        connection.player_id = player.id
        return player

    def unregister(self, player_id: Optional[str]) -> Optional[Player]:
        player = self.players.pop(player_id, None)
        if player is None:
            return None
        player.connected = False
        world = self.worlds.get(player.world)
        if world is not None:
            world.members.discard(player_id)
        return player

    def find(self, player_id: Optional[str]) -> Optional[Player]:
        return self.players.get(player_id)

    def world_members(self, world_name: str) -> Set[str]:
        world = self.worlds.get(world_name)
        if world is None:
            return set()
        return set(world.members)

    def players_in(self, world_name: str) -> List[Player]:
        return [self.players[pid] for pid in self.world_members(world_name) if pid in self.players]

    def snapshot(self) -> List[Dict[str, Any]]:
        return [p.snapshot() for p in self.players.values()]

    # Connection set

    def add_connection(self, connection: Connection) -> None:
        self.connections.add(connection)

    def discard_connection(self, connection: Connection) -> None:
        self.connections.discard(connection)

    def admins(self) -> List[Connection]:
        return [c for c in self.connections if c.is_admin and c.is_open]

    def open_connections(self) -> List[Connection]:
        return [c for c in self.connections if c.is_open]

    def clear(self) -> None:
        """Drop every session and connection; worlds and their spawns survive."""
        for player in self.players.values():
            player.connected = False
        self.players.clear()
        for world in self.worlds.values():
            world.members.clear()
        self.connections.clear()
