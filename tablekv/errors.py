"""
Error types shared across tablekv.

Client input errors (ParseError) and store errors (StoreError) are
turned into ``Error: <message>`` lines and never close a connection.
ListenError is the only error that reaches the process owner.
"""

from enum import Enum, auto
from typing import Optional


class ParseErrorKind(Enum):
    """Reasons a command line can be rejected."""
    EMPTY_COMMAND = auto()
    UNKNOWN_COMMAND = auto()
    MISSING_ARGUMENT = auto()
    UNEXPECTED_ARGUMENT = auto()
    ARGUMENT_TOO_LONG = auto()


class KVError(Exception):
    """Base class for all tablekv errors."""


class ParseError(KVError):
    """
    Raised when a command line cannot be turned into a Command.

    Attributes:
        kind: Which rule the line broke
        verb: The verb as sent by the client (may be empty)
    """

    def __init__(self, kind: ParseErrorKind, message: str, verb: Optional[str] = None):
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.verb = verb or ""


class StoreError(KVError):
    """Raised by a record store when the backing storage fails."""


class ListenError(KVError):
    """Raised when the server cannot bind its listening socket."""
