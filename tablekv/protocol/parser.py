"""
Protocol Parser Module

This module handles parsing of raw protocol commands and formatting of responses.
"""

from typing import List

from .commands import Command, CommandType, Response, ResponseStatus
from ..config.settings import settings
from ..errors import ParseError, ParseErrorKind


class ProtocolParser:
    """
    Parser for the tablekv text protocol.

    Protocol Format:
        Request:  <COMMAND> [ARGS...]\n
        Response: <LINE>\n

    Commands:
        PUT <key> <value>  -> Inserted <key> <value> | Updated <key> <value>
        GET <key>          -> <value> | Error: key <key> not found
        DELETE <key>       -> Deleted <key>
        LIST               -> <key>: <value>, <key>: <value>, ...

    Constraints:
        - Keys and values may not contain whitespace
        - Keys: max settings.MAX_KEY_LENGTH characters
        - Values: max settings.MAX_VALUE_LENGTH characters
    """

    def __init__(self):
        """Initialize the parser with constraints from settings."""
        self.max_key_length = settings.MAX_KEY_LENGTH
        self.max_value_length = settings.MAX_VALUE_LENGTH

    def parse_request(self, data: str) -> Command:
        """
        Parse a raw request string into a Command object.

        Args:
            data: Raw request string (may include trailing newline)

        Returns:
            Command object representing the parsed request.

        Raises:
            ParseError: If the line is empty, the verb is unknown, or the
                argument count or length is wrong.

        Examples:
            >>> parser = ProtocolParser()
            >>> cmd = parser.parse_request("put mykey myvalue")
            >>> cmd.type == CommandType.PUT
            True
            >>> cmd.key, cmd.value
            ('mykey', 'myvalue')
        """
        raw = data.strip()
        parts = raw.split()
        if not parts:
            raise ParseError(ParseErrorKind.EMPTY_COMMAND, "empty command is not allowed")

        verb = parts[0]
        command_name = verb.upper()

        if command_name == "PUT":
            return self._parse_put(parts, raw)
        if command_name == "GET":
            return self._parse_keyed(CommandType.GET, parts, raw)
        if command_name == "DELETE":
            return self._parse_keyed(CommandType.DELETE, parts, raw)
        if command_name == "LIST":
            # Trailing tokens are ignored
            return Command(type=CommandType.LIST, raw=raw)

        raise ParseError(ParseErrorKind.UNKNOWN_COMMAND, f"unknown command: {verb}", verb)

    def _parse_put(self, parts: List[str], raw: str) -> Command:
        """
        Parse a PUT command.

        Format: PUT <key> <value>
        """
        verb = parts[0]
        if len(parts) < 3:
            raise ParseError(
                ParseErrorKind.MISSING_ARGUMENT,
                "PUT command requires key and value",
                verb,
            )
        if len(parts) > 3:
            raise ParseError(
                ParseErrorKind.UNEXPECTED_ARGUMENT,
                "PUT command takes exactly a key and a value (values may not contain spaces)",
                verb,
            )

        key, value = parts[1], parts[2]
        self._check_key(key, verb)
        if len(value) > self.max_value_length:
            raise ParseError(
                ParseErrorKind.ARGUMENT_TOO_LONG,
                f"value longer than {self.max_value_length} characters",
                verb,
            )

        return Command(type=CommandType.PUT, key=key, value=value, raw=raw)

    def _parse_keyed(self, command_type: CommandType, parts: List[str], raw: str) -> Command:
        """
        Parse a command that takes a single key.

        Format: GET <key> | DELETE <key>
        """
        verb = parts[0]
        if len(parts) < 2:
            raise ParseError(
                ParseErrorKind.MISSING_ARGUMENT,
                f"{command_type.name} command requires key",
                verb,
            )
        if len(parts) > 2:
            raise ParseError(
                ParseErrorKind.UNEXPECTED_ARGUMENT,
                f"{command_type.name} command takes exactly one key",
                verb,
            )

        key = parts[1]
        self._check_key(key, verb)
        return Command(type=command_type, key=key, raw=raw)

    def _check_key(self, key: str, verb: str) -> None:
        if len(key) > self.max_key_length:
            raise ParseError(
                ParseErrorKind.ARGUMENT_TOO_LONG,
                f"key longer than {self.max_key_length} characters",
                verb,
            )

    def format_response(self, response: Response) -> str:
        """
        Format a Response object into a protocol string.

        Args:
            response: Response object to format

        Returns:
            Formatted response string WITH trailing newline.

        Examples:
            >>> parser = ProtocolParser()
            >>> parser.format_response(Response.inserted("foo", "bar"))
            'Inserted foo bar\\n'
            >>> parser.format_response(Response.value_response("bar"))
            'bar\\n'
            >>> parser.format_response(Response.key_not_found("foo"))
            'Error: key foo not found\\n'
        """
        status = response.status

        if status in (ResponseStatus.INSERTED, ResponseStatus.UPDATED):
            return f"{status.value} {response.key} {response.value}\n"
        if status == ResponseStatus.DELETED:
            return f"{status.value} {response.key}\n"
        if status == ResponseStatus.VALUE:
            return f"{response.value}\n"
        if status == ResponseStatus.LIST:
            return ", ".join(f"{key}: {value}" for key, value in response.entries) + "\n"
        return self.format_error(response.message)

    def format_error(self, message: str) -> str:
        """Format an error description as a protocol line."""
        return f"Error: {message}\n"
