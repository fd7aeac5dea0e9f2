"""In-memory websocket stand-ins used by the test modules."""
import asyncio
import itertools
import json

from websockets.protocol import State

from .state import Connection

_ports = itertools.count(40000)


class DummyWebSocket:
    """``close_delay`` mimics a peer that never answers the close handshake."""

    def __init__(self, fail_sends=False, close_delay=0):
        self.remote_address = ('127.0.0.1', next(_ports))
        self.state = State.OPEN
        self.sent = []
        self.fail_sends = fail_sends
        self.close_delay = close_delay
        self.close_code = None

    async def send(self, data):
        if self.fail_sends:
            raise ConnectionResetError('peer went away')
        self.sent.append(data)
        await asyncio.sleep(0)

    async def close(self, code=1000, reason=''):
        self.state = State.CLOSING
        self.close_code = code
        await asyncio.sleep(self.close_delay)
        self.state = State.CLOSED

    def drop(self):
        """Simulate the peer vanishing without a close handshake."""
        self.state = State.CLOSED

    def messages(self, type_name=None):
        decoded = [json.loads(s) for s in self.sent]
        if type_name is None:
            return decoded
        return [m for m in decoded if m.get('type') == type_name]

    def types(self):
        return [m.get('type') for m in self.messages()]


def make_connection(state=None, fail_sends=False, close_delay=0):
    connection = Connection(DummyWebSocket(fail_sends=fail_sends, close_delay=close_delay))
    if state is not None:
        state.add_connection(connection)
    return connection
