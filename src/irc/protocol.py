"""
IRC wire protocol implementation.

This module parses inbound IRC lines into structured messages and renders
outbound messages back into wire lines, following the RFC 1459 grammar:

    [':' prefix SP] command [SP middle]* [SP ':' trailing] CRLF
"""

from typing import List, Optional
from .exceptions import ParseError, ProtocolError


LINE_TERMINATOR = "\r\n"
MAX_PARAMS = 15
MAX_MIDDLE_PARAMS = MAX_PARAMS - 1
ENCODING = "utf-8"


# Protocol Commands
class Commands:
    NICK = "NICK"
    USER = "USER"
    PING = "PING"
    PONG = "PONG"


# Numeric replies
class Replies:
    WELCOME = "001"


class Message:
    """
    Represents a single parsed IRC message.

    Attributes:
        prefix: Origin of the message (server or peer), None when absent
        command: IRC command name or 3-digit numeric reply code
        params: Up to 15 parameters; only the last may contain spaces
    """

    def __init__(self, command: str, params: Optional[List[str]] = None, prefix: Optional[str] = None):
        self.prefix = prefix
        self.command = command
        self.params = list(params) if params else []

    def __eq__(self, other) -> bool:
        if not isinstance(other, Message):
            return NotImplemented
        return (
            self.prefix == other.prefix and
            self.command == other.command and
            self.params == other.params
        )

    def __str__(self) -> str:
        return serialize_message(self)

    def __repr__(self) -> str:
        return f"Message(prefix={self.prefix!r}, command={self.command!r}, params={self.params!r})"


def parse_message(line: str) -> Message:
    """
    Parse one terminated wire line into a Message.

    Args:
        line: Raw line including the trailing CRLF

    Returns:
        Message: The parsed message

    Raises:
        ParseError: If the line is unterminated, holds a stray line break,
            or has no command
    """
    if len(line) < len(LINE_TERMINATOR) or not line.endswith(LINE_TERMINATOR):
        raise ParseError("Line is not terminated by CRLF", line)

    body = line[:-len(LINE_TERMINATOR)]
    if "\r" in body or "\n" in body:
        raise ParseError("Line contains a stray line break", line)

    tokens = body.split(" ")
    prefix = None
    pos = 0

    if tokens[0].startswith(":"):
        prefix = tokens[0][1:]
        if not prefix:
            raise ParseError("Empty prefix", line)
        pos = 1

    # Runs of spaces between tokens leave empty strings behind
    while pos < len(tokens) and not tokens[pos]:
        pos += 1
    if pos >= len(tokens):
        raise ParseError("Missing command", line)

    command = tokens[pos]
    pos += 1

    params: List[str] = []
    while pos < len(tokens):
        token = tokens[pos]
        if not token:
            pos += 1
            continue
        if token.startswith(":") or len(params) == MAX_MIDDLE_PARAMS:
            # Everything from here on is one parameter, spaces included.
            trailing = " ".join(tokens[pos:])
            if trailing.startswith(":"):
                trailing = trailing[1:]
            params.append(trailing)
            break
        params.append(token)
        pos += 1

    return Message(command, params, prefix)


def _needs_colon(param: str) -> bool:
    return not param or " " in param or param.startswith(":")


def serialize_message(message: Message) -> str:
    """
    Render a Message as a wire line, without the terminator.

    The final parameter is written with a leading colon only when it is
    empty, contains a space, or itself begins with a colon.

    Raises:
        ProtocolError: If the message cannot be represented on the wire
    """
    if not message.command or " " in message.command:
        raise ProtocolError(f"Invalid command: {message.command!r}")
    if len(message.params) > MAX_PARAMS:
        raise ProtocolError(f"Too many parameters: {len(message.params)} > {MAX_PARAMS}")

    parts = []
    if message.prefix:
        if " " in message.prefix:
            raise ProtocolError(f"Invalid prefix: {message.prefix!r}")
        parts.append(":" + message.prefix)
    parts.append(message.command)

    last = len(message.params) - 1
    for index, param in enumerate(message.params):
        if not _needs_colon(param):
            parts.append(param)
        elif index == last:
            parts.append(":" + param)
        else:
            raise ProtocolError(f"Only the final parameter may be empty or contain spaces: {param!r}")

    return " ".join(parts)


def validate_line(text: str) -> str:
    """Ensure outbound text holds no line breaks and return it unchanged."""
    if "\r" in text or "\n" in text:
        raise ProtocolError(f"Outbound line contains a line break: {text!r}")
    return text


def encode_line(text: str) -> bytes:
    """
    Encode outbound text as a terminated wire line.

    Args:
        text: Line content without terminator

    Returns:
        bytes: Encoded line ending in CRLF

    Raises:
        ProtocolError: If the text holds a line break or cannot be encoded
    """
    try:
        return (validate_line(text) + LINE_TERMINATOR).encode(ENCODING)
    except UnicodeEncodeError as e:
        raise ProtocolError(f"Outbound line cannot be encoded: {e}") from e


def decode_line(data: bytes) -> str:
    """Decode a raw inbound line, replacing undecodable bytes."""
    return data.decode(ENCODING, errors="replace")
