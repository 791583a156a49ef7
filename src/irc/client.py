"""
IRC Line Client command-line front end

Connects to a single IRC server, registers a nickname and prints every
message that no consumer claimed until the server goes away.
"""

import argparse
import asyncio
import logging
import sys
from typing import List, Optional

from rich.console import Console
from rich.text import Text

from .connection import Connection, connect, DEFAULT_PORT, DEFAULT_QUEUE_SIZE
from .exceptions import IRCError
from .protocol import Message
from ..utils.logging import setup_logger, silence_external_loggers


def format_message(message: Message) -> Text:
    """Render a message for the terminal."""
    text = Text()
    if message.prefix:
        text.append(f"{message.prefix} ", style="cyan")
    text.append(message.command, style="bold yellow" if message.command.isdigit() else "bold green")
    if message.params:
        text.append(" " + " ".join(message.params), style="white")
    return text


async def print_unhandled(conn: Connection, console: Console) -> None:
    """Dump every unhandled message to the terminal."""
    while True:
        message = await conn.unhandled.get()
        console.print(format_message(message))


async def run(host: str, port: int, nick: str, queue_size: int, console: Console) -> int:
    """
    Run one session until the server closes the connection.

    Returns:
        int: Process exit code
    """
    conn = await connect(host, port, nick, queue_size=queue_size)
    console.print(f"[bold green]Registered with {host}:{port} as {nick}[/bold green]")

    printer = asyncio.ensure_future(print_unhandled(conn, console))
    try:
        await conn.wait_closed()
    finally:
        printer.cancel()
        await asyncio.gather(printer, return_exceptions=True)
        await conn.close()

    if conn.close_reason is not None:
        console.print(f"[red]Connection closed: {conn.close_reason}[/red]")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Single-connection IRC line client")
    parser.add_argument("--host", required=True, help="Server hostname (like 'irc.libera.chat')")
    parser.add_argument("--port", type=int, default=DEFAULT_PORT, help="Server port number")
    parser.add_argument("--nick", required=True, help="IRC nick to use")
    parser.add_argument("--queue-size", type=int, default=DEFAULT_QUEUE_SIZE,
                        help="Capacity of the outbound and unhandled queues")
    parser.add_argument("--verbose", "-v", action="store_true", help="Log every wire line")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the IRC client."""
    args = build_parser().parse_args(argv)

    setup_logger("src.irc", level=logging.DEBUG if args.verbose else logging.INFO)
    silence_external_loggers()
    console = Console()

    try:
        return asyncio.run(run(args.host, args.port, args.nick, args.queue_size, console))
    except KeyboardInterrupt:
        console.print("\nSession aborted by user")
        return 1
    except IRCError as e:
        console.print(f"[red]CONNECTION FAILED: {e}[/red]")
        return 1


if __name__ == "__main__":
    sys.exit(main())
