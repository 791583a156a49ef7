"""
Shared fixtures for IRC client tests.
"""

import asyncio
import pytest


WAIT = 2.0


class FakeIRCServer:
    """
    In-process IRC server speaking to exactly one client.

    Lines the client sends are collected in order; the test drives the
    server side with ``send`` and ``disconnect``.
    """

    def __init__(self):
        self.host = "127.0.0.1"
        self.port = None
        self.server = None
        self.writer = None
        self.received = None
        self.connected = None

    async def __aenter__(self) -> "FakeIRCServer":
        self.received = asyncio.Queue()
        self.connected = asyncio.Event()
        self.server = await asyncio.start_server(self._handle, self.host, 0)
        self.port = self.server.sockets[0].getsockname()[1]
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.disconnect()
        self.server.close()
        await self.server.wait_closed()

    async def _handle(self, reader, writer):
        self.writer = writer
        self.connected.set()
        try:
            while True:
                data = await reader.readline()
                if not data:
                    break
                await self.received.put(data)
        except OSError:
            pass

    async def send(self, line: bytes) -> None:
        await asyncio.wait_for(self.connected.wait(), WAIT)
        self.writer.write(line)
        await self.writer.drain()

    async def expect(self) -> bytes:
        """Next line received from the client."""
        return await asyncio.wait_for(self.received.get(), WAIT)

    async def disconnect(self) -> None:
        if self.writer is not None and not self.writer.is_closing():
            self.writer.close()
            try:
                await self.writer.wait_closed()
            except OSError:
                pass

    async def register(self, connect_task, nick: str = "alice"):
        """Answer the client's NICK/USER with a welcome and return the connection."""
        assert await self.expect() == f"NICK {nick}\r\n".encode()
        assert await self.expect() == f"USER {nick} 0 * :{nick}\r\n".encode()
        await self.send(f":irc.example.net 001 {nick} :Welcome\r\n".encode())
        return await asyncio.wait_for(connect_task, WAIT)


@pytest.fixture
def irc_server():
    """An unstarted fake server; enter it with ``async with``."""
    return FakeIRCServer()
