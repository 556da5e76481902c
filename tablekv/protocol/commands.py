"""
Protocol Command and Response Definitions

This module defines the data structures for protocol commands and responses.
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import List, Optional, Tuple


class CommandType(Enum):
    """Enumeration of supported command types."""
    PUT = auto()
    GET = auto()
    DELETE = auto()
    LIST = auto()


class ResponseStatus(Enum):
    """Enumeration of response kinds."""
    INSERTED = "Inserted"
    UPDATED = "Updated"
    VALUE = "Value"
    DELETED = "Deleted"
    LIST = "List"
    ERROR = "Error"


@dataclass
class Command:
    """
    Represents a parsed protocol command.

    Attributes:
        type: The type of command (PUT, GET, DELETE, LIST)
        key: The key for the operation (empty for LIST)
        value: The value for PUT operations (empty for other operations)
        raw: The original raw command string
    """
    type: CommandType
    key: str = ""
    value: str = ""
    raw: str = ""


@dataclass
class Response:
    """
    Represents a protocol response.

    Attributes:
        status: What kind of outcome this is
        key: The key the command touched, if any
        value: The stored or returned value, if any
        entries: All entries for LIST responses
        message: Error description for ERROR responses
    """
    status: ResponseStatus
    key: str = ""
    value: Optional[str] = None
    entries: List[Tuple[str, str]] = field(default_factory=list)
    message: str = ""

    @property
    def is_error(self) -> bool:
        return self.status == ResponseStatus.ERROR

    @classmethod
    def inserted(cls, key: str, value: str) -> "Response":
        """Create a response for a PUT that added a new entry."""
        return cls(status=ResponseStatus.INSERTED, key=key, value=value)

    @classmethod
    def updated(cls, key: str, value: str) -> "Response":
        """Create a response for a PUT that replaced an existing value."""
        return cls(status=ResponseStatus.UPDATED, key=key, value=value)

    @classmethod
    def value_response(cls, value: str) -> "Response":
        """Create a GET response with a value."""
        return cls(status=ResponseStatus.VALUE, value=value)

    @classmethod
    def deleted(cls, key: str) -> "Response":
        """Create a 'deleted' response for DELETE operations."""
        return cls(status=ResponseStatus.DELETED, key=key)

    @classmethod
    def listing(cls, entries: List[Tuple[str, str]]) -> "Response":
        """Create a LIST response."""
        return cls(status=ResponseStatus.LIST, entries=list(entries))

    @classmethod
    def error(cls, message: str) -> "Response":
        """Create an error response."""
        return cls(status=ResponseStatus.ERROR, message=message)

    @classmethod
    def key_not_found(cls, key: str) -> "Response":
        """Create a 'key not found' error response."""
        return cls.error(f"key {key} not found")
