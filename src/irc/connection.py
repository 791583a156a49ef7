"""
IRC connection management.

This module owns a single live session with an IRC server: the transport
streams, the outbound queue, the per-command dispatch table and the
background tasks that move lines between them.
"""

import asyncio
import logging
from typing import Dict, List, Optional
from .protocol import (
    Message, Commands, Replies, parse_message, serialize_message,
    encode_line, decode_line,
)
from .exceptions import (
    IRCError, ParseError, ProtocolError, ConnectionError,
    TransportError, RegistrationError,
)


DEFAULT_PORT = 6667

# Large enough that ordinary bursts never block producers.
DEFAULT_QUEUE_SIZE = 1000

logger = logging.getLogger(__name__)


class Connection:
    """
    A live connection to a single IRC server.

    Inbound messages are routed by command: a command with an entry in
    ``handlers`` is delivered to that queue, everything else lands in
    ``unhandled``. Lines put on ``outbound`` are written to the server in
    order. The session ends when the closed signal fires, either because
    the transport failed or because ``close()`` was called.
    """

    def __init__(
        self,
        reader: asyncio.StreamReader,
        writer: asyncio.StreamWriter,
        nick: str,
        host: str = "",
        port: int = DEFAULT_PORT,
        queue_size: int = DEFAULT_QUEUE_SIZE,
    ):
        self.reader = reader
        self.writer = writer
        self.nick = nick
        self.host = host
        self.port = port
        self.outbound: "asyncio.Queue[str]" = asyncio.Queue(maxsize=queue_size)
        self.handlers: Dict[str, "asyncio.Queue[Message]"] = {}
        self.unhandled: "asyncio.Queue[Message]" = asyncio.Queue(maxsize=queue_size)
        self.close_reason: Optional[IRCError] = None
        self.logger = logger
        self._closed = asyncio.Event()
        self._tasks: List[asyncio.Task] = []

    @property
    def closed(self) -> bool:
        """True once the session has terminated."""
        return self._closed.is_set()

    async def wait_closed(self) -> None:
        """Block until the closed signal fires."""
        await self._closed.wait()

    def register(self, command: str, maxsize: int = 1) -> "asyncio.Queue[Message]":
        """
        Route all inbound messages for a command to a dedicated queue.

        Args:
            command: IRC command or numeric reply code
            maxsize: Capacity of the queue; a full queue blocks the reader

        Returns:
            asyncio.Queue: The queue the command's messages will arrive on

        Raises:
            ValueError: If the command already has a consumer
        """
        if command in self.handlers:
            raise ValueError(f"A consumer is already registered for {command}")
        queue: "asyncio.Queue[Message]" = asyncio.Queue(maxsize=maxsize)
        self.handlers[command] = queue
        return queue

    def unregister(self, command: str) -> Optional["asyncio.Queue[Message]"]:
        """Remove a command's queue; its future messages go to ``unhandled``."""
        return self.handlers.pop(command, None)

    async def send(self, command: str, *params: str) -> None:
        """Serialize a command and queue it for the server."""
        await self.send_raw(serialize_message(Message(command, list(params))))

    async def send_raw(self, line: str) -> None:
        """
        Queue a preformatted line for the server.

        Args:
            line: Line content without terminator

        Raises:
            ProtocolError: If the line contains a line break or cannot be encoded
            ConnectionError: If the connection is already closed
        """
        encode_line(line)
        if self.closed:
            raise ConnectionError("Connection is closed")
        await self.outbound.put(line)

    def start(self) -> None:
        """Install the ping responder and start the background tasks."""
        pings = self.register(Commands.PING)
        self._tasks = [
            asyncio.ensure_future(self._read_loop()),
            asyncio.ensure_future(self._write_loop()),
            asyncio.ensure_future(self._ping_loop(pings)),
        ]

    async def close(self) -> None:
        """Shut the session down. Safe to call more than once."""
        self._mark_closed(None)
        current = asyncio.current_task()
        tasks = [task for task in self._tasks if task is not current]
        await asyncio.gather(*tasks, return_exceptions=True)
        try:
            await self.writer.wait_closed()
        except OSError as e:
            self.logger.warning(f"Error during disconnect: {e}")

    def _mark_closed(self, reason: Optional[IRCError]) -> bool:
        # Reader and writer may both fail; only the first caller does the work.
        if self._closed.is_set():
            return False

        self.close_reason = reason
        self._closed.set()
        if reason is None:
            self.logger.info(f"Disconnected from {self.host}:{self.port}")
        else:
            self.logger.error(f"Connection to {self.host}:{self.port} lost: {reason}")

        current = asyncio.current_task()
        for task in self._tasks:
            if task is not current and not task.done():
                task.cancel()
        self.writer.close()
        return True

    async def _read_loop(self) -> None:
        while not self.closed:
            try:
                data = await self.reader.readline()
            except (OSError, ValueError) as e:
                # ValueError means the line overran the stream buffer limit
                self._mark_closed(TransportError(f"Read failed: {e}"))
                return

            if not data.endswith(b"\n"):
                self._mark_closed(TransportError("Server closed the connection"))
                return

            line = decode_line(data)
            self.logger.debug(f"<- {line.rstrip()}")
            try:
                message = parse_message(line)
            except ParseError as e:
                self.logger.warning(f"Dropping malformed line {e.line!r}: {e}")
                continue

            await self._dispatch(message)

    async def _dispatch(self, message: Message) -> None:
        queue = self.handlers.get(message.command)
        if queue is None:
            queue = self.unhandled
        await queue.put(message)

    async def _write_loop(self) -> None:
        while not self.closed:
            line = await self.outbound.get()
            try:
                data = encode_line(line)
            except ProtocolError as e:
                # Only entries put on the queue directly can get here
                self.logger.error(f"Dropping unsendable line {line!r}: {e}")
                continue
            try:
                self.writer.write(data)
                await self.writer.drain()
            except OSError as e:
                self._mark_closed(TransportError(f"Write failed: {e}"))
                return
            self.logger.debug(f"-> {line}")

    async def _ping_loop(self, pings: "asyncio.Queue[Message]") -> None:
        while True:
            message = await pings.get()
            if not message.params:
                self.logger.warning("Ignoring PING without a token")
                continue
            try:
                await self.send(Commands.PONG, message.params[0])
            except ProtocolError as e:
                self.logger.warning(f"Cannot answer PING: {e}")

    async def _wait_for_welcome(self, welcome: "asyncio.Queue[Message]") -> Message:
        received = asyncio.ensure_future(welcome.get())
        closed = asyncio.ensure_future(self.wait_closed())
        try:
            done, _ = await asyncio.wait({received, closed}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            for task in (received, closed):
                if not task.done():
                    task.cancel()

        if received not in done:
            raise RegistrationError(
                f"Connection closed before registration completed: {self.close_reason}"
            )
        return received.result()


def _validate_nick(nick: str) -> None:
    if not nick or nick.startswith(":") or any(c in nick for c in " \r\n"):
        raise ProtocolError(f"Invalid nickname: {nick!r}")


async def connect(
    host: str,
    port: int = DEFAULT_PORT,
    nick: str = "",
    queue_size: int = DEFAULT_QUEUE_SIZE,
) -> Connection:
    """
    Connect to an IRC server and complete registration.

    Does not return until the server has sent its welcome reply. Anything
    received before it stays queued for the handlers or ``unhandled``.

    Args:
        host: Server hostname or IP address
        port: Server port number
        nick: Nickname to register with
        queue_size: Capacity of the outbound and unhandled queues

    Returns:
        Connection: A registered, running connection

    Raises:
        ProtocolError: If the nickname cannot be sent on the wire
        ConnectionError: If the server cannot be reached
        RegistrationError: If the server closes the connection before welcoming us
    """
    _validate_nick(nick)

    logger.info(f"Connecting to {host}:{port}")
    try:
        reader, writer = await asyncio.open_connection(host, port)
    except OSError as e:
        error_msg = f"Failed to connect to {host}:{port}: {e}"
        logger.error(error_msg)
        raise ConnectionError(error_msg) from e

    conn = Connection(reader, writer, nick, host, port, queue_size)
    welcome = conn.register(Replies.WELCOME)
    conn.start()

    try:
        await conn.send(Commands.NICK, nick)
        await conn.send_raw(f"{Commands.USER} {nick} 0 * :{nick}")
        await conn._wait_for_welcome(welcome)
    except BaseException:
        await conn.close()
        raise

    conn.unregister(Replies.WELCOME)
    # A second welcome may have been queued before the entry was removed.
    while not welcome.empty():
        await conn.unhandled.put(welcome.get_nowait())

    logger.info(f"Registered with {host}:{port} as {nick}")
    return conn
