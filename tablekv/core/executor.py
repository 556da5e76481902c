"""
Command Executor Module

Maps parsed commands onto record store calls. Every command runs under
one store-wide lock, so store operations from different connections are
totally ordered and never overlap. LIST therefore sees a fully
serialized snapshot.

Store calls are blocking, so each command is applied in a worker thread
via asyncio.to_thread(); waiting for the lock happens there too and the
event loop keeps serving other connections in the meantime.
"""

import asyncio
import logging
import threading

from ..errors import StoreError
from ..protocol.commands import Command, CommandType, Response
from ..storage.base import RecordStore

logger = logging.getLogger(__name__)


class CommandExecutor:
    """
    Applies commands to a shared RecordStore.

    Usage:
        executor = CommandExecutor(SQLiteRecordStore("kv_store.db"))
        response = await executor.execute(command)

    Attributes:
        store: The RecordStore shared by all connections
    """

    def __init__(self, store: RecordStore):
        self.store = store
        self._lock = threading.Lock()
        self._total_commands = 0

    @property
    def total_commands(self) -> int:
        return self._total_commands

    async def execute(self, command: Command) -> Response:
        """
        Execute a parsed command on the store.

        Store failures are turned into error responses; they never
        propagate to the caller.
        """
        self._total_commands += 1
        return await asyncio.to_thread(self._execute_locked, command)

    def _execute_locked(self, command: Command) -> Response:
        with self._lock:
            try:
                return self._apply(command)
            except StoreError as exc:
                logger.error(f"Store failure on {command.type.name} {command.key!r}: {exc}")
                return Response.error(self._failure_message(command))

    def _apply(self, command: Command) -> Response:
        if command.type == CommandType.PUT:
            if self.store.exists(command.key):
                self.store.update(command.key, command.value)
                return Response.updated(command.key, command.value)
            self.store.insert(command.key, command.value)
            return Response.inserted(command.key, command.value)

        if command.type == CommandType.GET:
            value = self.store.get(command.key)
            return Response.value_response(value) if value is not None else Response.key_not_found(command.key)

        if command.type == CommandType.DELETE:
            self.store.delete(command.key)
            return Response.deleted(command.key)

        return Response.listing(self.store.list())

    @staticmethod
    def _failure_message(command: Command) -> str:
        if command.type == CommandType.PUT:
            return "failed to store key-value pair"
        if command.type == CommandType.GET:
            return f"failed to retrieve value for key {command.key}"
        if command.type == CommandType.DELETE:
            return "failed to delete key-value pair"
        return "failed to list key-value pairs"
