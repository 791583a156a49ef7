"""
Single-connection IRC protocol client.
"""

from .connection import Connection, connect, DEFAULT_PORT, DEFAULT_QUEUE_SIZE
from .exceptions import (
    IRCError, ProtocolError, ParseError, ConnectionError,
    TransportError, RegistrationError,
)
from .protocol import (
    Message, Commands, Replies, parse_message, serialize_message, encode_line,
)

__all__ = [
    "Connection", "connect", "DEFAULT_PORT", "DEFAULT_QUEUE_SIZE",
    "IRCError", "ProtocolError", "ParseError", "ConnectionError",
    "TransportError", "RegistrationError",
    "Message", "Commands", "Replies", "parse_message", "serialize_message", "encode_line",
]
