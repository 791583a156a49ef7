"""
Custom exceptions for the IRC line client.
"""


class IRCError(Exception):
    """Base exception for all IRC client errors."""
    pass


class ProtocolError(IRCError):
    """Raised when text cannot be represented on the IRC wire."""
    pass


class ParseError(ProtocolError):
    """Raised when an inbound wire line is malformed."""

    def __init__(self, message: str, line: str = ""):
        super().__init__(message)
        self.line = line


class ConnectionError(IRCError):
    """Raised when the transport connection cannot be established."""
    pass


class TransportError(ConnectionError):
    """Describes a read or write failure on a live connection."""
    pass


class RegistrationError(ConnectionError):
    """Raised when the server closes the connection before welcoming us."""
    pass
