"""
Async TCP Server Module

This module implements the listener/dispatcher for tablekv.

Each accepted connection is served by its own ConnectionHandler running
as an independent asyncio task, so the accept loop never waits on a
client. All handlers share one ServerState: the serialized command
executor and the registry of open sessions.
"""

import asyncio
import logging
from asyncio import StreamReader, StreamWriter
from typing import Optional

from ..config.settings import settings
from ..core.executor import CommandExecutor
from ..errors import ListenError
from ..protocol.parser import ProtocolParser
from ..storage.base import RecordStore
from ..storage.memory import MemoryRecordStore
from .connection import ConnectionHandler, ServerState
from .sessions import SessionRegistry

logger = logging.getLogger(__name__)


class KVServer:
    """
    Asynchronous TCP server for the tablekv service.

    Features:
    - Non-blocking I/O with asyncio
    - Persistent connections (multiple commands per connection)
    - One store-wide lock serializing every store operation
    - No connection limit; inbound connections are accepted unboundedly

    Usage:
        server = KVServer(host='0.0.0.0', port=8080, store=SQLiteRecordStore("kv_store.db"))
        await server.start()  # Runs until stop() is called

    Attributes:
        host: Server bind address (e.g., '0.0.0.0')
        port: Server port number; updated to the bound port once listening
        store: The RecordStore shared by all connections
        state: Shared state handed to every connection handler
    """

    def __init__(
            self,
            host: str = None,
            port: int = None,
            store: RecordStore = None,
            read_timeout: float = None,
    ):
        """
        Initialize the server.

        Args:
            host: Bind address (default from settings)
            port: Port number (default from settings, 0 picks a free port)
            store: RecordStore instance (in-memory store if not provided)
            read_timeout: Per-line read timeout in seconds (default from
                settings, 0 or None waits forever)
        """
        self.host = host if host is not None else settings.HOST
        self.port = port if port is not None else settings.PORT
        self.store = store if store is not None else MemoryRecordStore()
        self.parser = ProtocolParser()

        if read_timeout is None:
            read_timeout = settings.READ_TIMEOUT
        self.state = ServerState(
            executor=CommandExecutor(self.store),
            sessions=SessionRegistry(),
            read_timeout=read_timeout or None,
        )

        # Server state
        self._server: Optional[asyncio.Server] = None
        self._running = False
        self._started = asyncio.Event()
        self._stopping = asyncio.Event()
        self._connection_count = 0

    async def handle_client(
            self,
            reader: StreamReader,
            writer: StreamWriter
    ) -> None:
        """
        Register the new connection and serve it.

        Called by asyncio in a fresh task for every accepted connection.
        """
        self._connection_count += 1
        session = self.state.sessions.register(writer.get_extra_info('peername'))
        handler = ConnectionHandler(reader, writer, self.state, session, self.parser)
        await handler.run()

    async def start(self) -> None:
        """
        Bind the listening socket and accept connections until stopped.

        Returns once stop() has closed the listener, even if accepted
        connections are still open.

        Raises:
            ListenError: If the socket cannot be bound.
        """
        if self._running:
            return

        self._stopping.clear()
        try:
            self._server = await asyncio.start_server(
                self.handle_client,
                self.host,
                self.port,
                limit=settings.READ_BUFFER_SIZE,
            )
        except OSError as exc:
            raise ListenError(f"failed to start listener on {self.host}:{self.port}: {exc}") from exc

        self._running = True
        sockets = self._server.sockets or []
        if sockets:
            self.port = sockets[0].getsockname()[1]

        addrs = ', '.join(str(sock.getsockname()) for sock in sockets)
        logger.info(f"Serving on {addrs}")
        self._started.set()

        try:
            await self._stopping.wait()
            logger.debug("Accept loop stopped")
        finally:
            # Accepted connections outlive the listener; no wait_closed() here
            if self._server is not None:
                self._server.close()
                self._server = None
            self._running = False
            self._started.clear()

    async def wait_started(self) -> None:
        """Wait until the listening socket is bound."""
        await self._started.wait()

    async def stop(self) -> None:
        """
        Stop accepting connections.

        Connections that were already accepted are not torn down; their
        handlers run until the client goes away.
        """
        if self._server is None:
            return

        server, self._server = self._server, None
        server.close()
        self._stopping.set()
        self._running = False

        open_sessions = len(self.state.sessions)
        if open_sessions:
            logger.info(f"Listener closed with {open_sessions} connection(s) still open")

    def is_running(self) -> bool:
        """Check if the server is currently running."""
        return self._running

    def get_stats(self) -> dict:
        """
        Get server statistics.

        Returns:
            Dictionary with server stats including connection counts,
            request counts and the currently open sessions.
        """
        active = self.state.sessions.active()
        return {
            "running": self._running,
            "host": self.host,
            "port": self.port,
            "total_connections": self._connection_count,
            "total_requests": self.state.executor.total_commands,
            "active_sessions": len(active),
            "peers": [session.peer for session in active],
        }
