"""
IRC Line Client

A single-connection IRC protocol client: registration handshake, wire line
parsing, per-command message routing and automatic keep-alive replies.
"""

__version__ = "1.0.0"
__description__ = "Single-connection IRC protocol client"
