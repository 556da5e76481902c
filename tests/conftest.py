"""
Pytest Configuration and Fixtures

This module provides shared fixtures and configuration for all tests.
"""

import asyncio
import socket
import pytest
import pytest_asyncio
from contextlib import closing
from typing import AsyncGenerator, Generator

from tablekv.core.executor import CommandExecutor
from tablekv.errors import StoreError
from tablekv.network.tcp_server import KVServer
from tablekv.protocol.parser import ProtocolParser
from tablekv.storage.memory import MemoryRecordStore
from tablekv.storage.sqlite import SQLiteRecordStore


def find_free_port() -> int:
    """Find an available port for testing."""
    with closing(socket.socket(socket.AF_INET, socket.SOCK_STREAM)) as s:
        s.bind(('', 0))
        s.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        return s.getsockname()[1]


# ============================================================================
# Record Store Fixtures
# ============================================================================

@pytest.fixture
def store() -> MemoryRecordStore:
    """Create a fresh in-memory record store."""
    return MemoryRecordStore()


@pytest.fixture
def db_path(tmp_path) -> str:
    """Path of a throwaway SQLite database file."""
    return str(tmp_path / "kv_store.db")


@pytest.fixture
def sqlite_store(db_path: str) -> Generator[SQLiteRecordStore, None, None]:
    """Create a SQLite record store on a temporary file."""
    s = SQLiteRecordStore(db_path)
    yield s
    s.close()


# ============================================================================
# Protocol / Executor Fixtures
# ============================================================================

@pytest.fixture
def parser() -> ProtocolParser:
    """Create a ProtocolParser instance."""
    return ProtocolParser()


@pytest.fixture
def executor(store: MemoryRecordStore) -> CommandExecutor:
    """Create a CommandExecutor over the in-memory store."""
    return CommandExecutor(store)


class FailingStore(MemoryRecordStore):
    """Memory store whose calls fail while `failing` is set."""

    def __init__(self):
        super().__init__()
        self.failing = True

    def _check(self):
        if self.failing:
            raise StoreError("disk on fire")

    def get(self, key):
        self._check()
        return super().get(key)

    def exists(self, key):
        self._check()
        return super().exists(key)

    def delete(self, key):
        self._check()
        return super().delete(key)

    def list(self):
        self._check()
        return super().list()


# ============================================================================
# Server Fixtures
# ============================================================================

@pytest.fixture
def server_port() -> int:
    """Get a free port for server testing."""
    return find_free_port()


async def start_background(srv: KVServer) -> asyncio.Task:
    """Run srv.start() in a task and wait until it is listening."""
    task = asyncio.create_task(srv.start())
    await asyncio.wait_for(srv.wait_started(), timeout=5)
    return task


async def stop_background(srv: KVServer, task: asyncio.Task) -> None:
    """Stop a server started with start_background()."""
    await srv.stop()
    task.cancel()
    try:
        await task
    except asyncio.CancelledError:
        pass


@pytest_asyncio.fixture
async def server(server_port: int, store: MemoryRecordStore) -> AsyncGenerator[KVServer, None]:
    """
    Create and start a server instance for testing.

    This fixture:
    1. Creates a KVServer on a random free port over the `store` fixture
    2. Starts it in a background task
    3. Yields the server for testing
    4. Cleans up after the test
    """
    srv = KVServer(host='127.0.0.1', port=server_port, store=store, read_timeout=0)
    server_task = await start_background(srv)

    yield srv

    await stop_background(srv, server_task)


# ============================================================================
# Client Fixtures
# ============================================================================

class AsyncClient:
    """
    Helper class for testing server interactions.

    Provides a simple async context manager interface for
    sending commands and receiving responses.

    Usage:
        async with AsyncClient('127.0.0.1', 8080) as client:
            response = await client.send_command("PUT key value")
            assert response == "Inserted key value"
    """

    def __init__(self, host: str, port: int):
        self.host = host
        self.port = port
        self.reader = None
        self.writer = None

    async def connect(self) -> None:
        """Establish connection to server."""
        self.reader, self.writer = await asyncio.open_connection(
            self.host, self.port
        )

    async def disconnect(self) -> None:
        """Close connection to server."""
        if self.writer:
            self.writer.close()
            try:
                await self.writer.wait_closed()
            except (ConnectionError, OSError):
                pass

    async def send_command(self, command: str) -> str:
        """
        Send a command and receive the response.

        Args:
            command: Command string (newline will be added if missing)

        Returns:
            Response line without its trailing newline
        """
        if not command.endswith('\n'):
            command += '\n'

        self.writer.write(command.encode())
        await self.writer.drain()

        response = await self.reader.readline()
        return response.decode().rstrip('\n')

    async def __aenter__(self):
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.disconnect()


@pytest.fixture
def client_factory(server_port: int):
    """
    Factory fixture to create test clients.

    Usage:
        async def test_something(server, client_factory):
            async with client_factory() as client:
                response = await client.send_command("GET key")
    """
    def factory() -> AsyncClient:
        return AsyncClient('127.0.0.1', server_port)
    return factory


@pytest_asyncio.fixture
async def client_reader_writer(
    server: KVServer,
    server_port: int
) -> AsyncGenerator[tuple, None]:
    """
    Create a raw reader/writer pair connected to the server.

    Useful for low-level protocol testing.
    """
    reader, writer = await asyncio.open_connection('127.0.0.1', server_port)

    yield reader, writer

    writer.close()
    try:
        await writer.wait_closed()
    except (ConnectionError, OSError):
        pass


async def wait_for_sessions(srv: KVServer, count: int, timeout: float = 2.0) -> None:
    """Poll until the server has exactly `count` open sessions."""
    deadline = asyncio.get_running_loop().time() + timeout
    while len(srv.state.sessions) != count:
        if asyncio.get_running_loop().time() > deadline:
            raise AssertionError(
                f"expected {count} sessions, have {len(srv.state.sessions)}"
            )
        await asyncio.sleep(0.01)


# ============================================================================
# Pytest Configuration
# ============================================================================

def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
