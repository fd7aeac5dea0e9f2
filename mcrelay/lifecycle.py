"""Relay server lifecycle: accept, reap, stats and graceful shutdown."""
import asyncio
import functools
import logging
import time

import psutil
import websockets

from . import protocol
from .handlers import release_player
from .minecraft_ws import handle_minecraft_client
from .state import RelayState
from .utils import broadcast_to_all

logger = logging.getLogger(__name__)

SHUTDOWN_MESSAGE = 'The server is shutting down'
ADMIN_STOP_MESSAGE = 'The server was stopped by an administrator'


class RelayServer:
    """Owns the WebSocket listener, the relay state and the periodic tasks."""

    def __init__(self, settings):
        self.settings = settings
        self.state = RelayState.from_settings(settings)
        self.accepting = False
        self.ws_server = None
        self.reap_task = None
        self.stats_task = None
        self._process = psutil.Process()

    @property
    def running(self):
        return self.ws_server is not None

    @property
    def port(self):
        """Port the listener is bound to (useful when configured with port 0)."""
        if self.ws_server is None:
            return None
        for sock in self.ws_server.sockets:
            return sock.getsockname()[1]
        return None

    async def start(self):
        if self.running:
            logger.info('Relay is already running')
            return
        self.state.clear()
        handler = functools.partial(handle_minecraft_client, self)
        self.ws_server = await websockets.serve(handler, self.settings.host, self.settings.ws_port)
        self.accepting = True
        self.reap_task = asyncio.create_task(self._periodic_reap())
        self.stats_task = asyncio.create_task(self._periodic_stats())
        logger.info(f"✅ Relay listening on ws://{self.settings.host}:{self.port}{self.settings.ws_path}")

    async def stop(self, message=SHUTDOWN_MESSAGE):
        """Notify every open connection, close them and stop listening."""
        if not self.running:
            return
        self.accepting = False
        logger.info('👋 Starting graceful shutdown...')

        async with self.state.lock:
            connections = self.state.open_connections()
            notified = await broadcast_to_all(self.state, protocol.server_shutdown(message))
            logger.info(f"  • Sent server_shutdown to {notified} connections")

        # Peers that stopped reading hold close() for up to close_timeout, so close them together
        results = await asyncio.gather(
            *(connection.close(code=1001, reason='Server shutting down') for connection in connections),
            return_exceptions=True,
        )
        for connection, result in zip(connections, results):
            if isinstance(result, Exception):
                logger.warning(f"Error closing {connection.address}: {result}")

        for task in (self.reap_task, self.stats_task):
            if task is not None:
                task.cancel()
                try:
                    await task
                except asyncio.CancelledError:
                    pass
        self.reap_task = self.stats_task = None

        logger.info('  • Closing WebSocket listener...')
        self.ws_server.close()
        await self.ws_server.wait_closed()
        self.ws_server = None

        async with self.state.lock:
            self.state.clear()
        logger.info('✅ Relay stopped')

    async def reap_once(self):
        """Release every registered player whose connection is no longer open."""
        reaped = 0
        async with self.state.lock:
            for player in list(self.state.players.values()):
                if player.connection.is_open:
                    continue
                # A concurrent explicit close may have released it already
                if await release_player(self.state, player.id):
                    reaped += 1
                self.state.discard_connection(player.connection)
        if reaped:
            logger.info(f"🧹 Reaped {reaped} inactive players")
        return reaped

    def log_stats(self):
        count = len(self.state.players)
        if count == 0:
            return
        rss_mb = self._process.memory_info().rss / (1024 * 1024)
        logger.info(f"📊 Players online: {count} (memory {rss_mb:.1f} MB)")

    def status(self):
        return {
            'status': 'online' if self.running else 'offline',
            'playerCount': len(self.state.players),
            'uptimeSeconds': int(time.time() - self._process.create_time()),
        }

    async def _periodic_reap(self):
        while True:
            await asyncio.sleep(self.settings.reap_interval)
            try:
                await self.reap_once()
            except Exception:
                logger.exception('Reap sweep failed')

    async def _periodic_stats(self):
        while True:
            await asyncio.sleep(self.settings.stats_interval)
            async with self.state.lock:
                self.log_stats()
