"""Network module for tablekv."""

from .connection import ConnectionHandler, ServerState
from .sessions import Session, SessionRegistry
from .tcp_server import KVServer

__all__ = [
    "ConnectionHandler",
    "ServerState",
    "Session",
    "SessionRegistry",
    "KVServer",
]
