"""
Connection Handler Module

Owns one client socket for its whole lifetime: reads newline-delimited
commands, hands them to the executor and writes one response line per
command. Command-level errors are reported to the client and the
connection stays open; socket-level errors end this connection only.
"""

import asyncio
import logging
from asyncio import StreamReader, StreamWriter
from dataclasses import dataclass
from typing import Optional

from ..core.executor import CommandExecutor
from ..errors import ParseError
from ..protocol.parser import ProtocolParser
from .sessions import Session, SessionRegistry

logger = logging.getLogger(__name__)


@dataclass
class ServerState:
    """
    State shared by every connection handler.

    Attributes:
        executor: Serialized access point to the record store
        sessions: Registry of open connections
        read_timeout: Seconds to wait for each line (None waits forever)
    """
    executor: CommandExecutor
    sessions: SessionRegistry
    read_timeout: Optional[float] = None


class ConnectionHandler:
    """
    Read-dispatch-write loop for a single client.

    The handler owns its session: it unregisters it and closes the
    socket when the loop ends, whatever the reason.
    """

    def __init__(
            self,
            reader: StreamReader,
            writer: StreamWriter,
            state: ServerState,
            session: Session,
            parser: ProtocolParser = None,
    ):
        self.reader = reader
        self.writer = writer
        self.state = state
        self.session = session
        self.parser = parser if parser is not None else ProtocolParser()

    async def run(self) -> None:
        """
        Serve the client until it disconnects or the socket fails.

        Protocol flow:
            1. Read a line from the client
            2. Parse it; on error reply with an error line
            3. Execute the command through the shared executor
            4. Write the formatted response
            5. Repeat until stream end, read error or read timeout
        """
        addr = self.session.peer
        logger.debug(f"Client connected: {addr} (session {self.session.id})")

        try:
            while True:
                try:
                    data = await self._read_line()
                except asyncio.TimeoutError:
                    logger.warning(
                        f"Read from {addr} timed out after {self.state.read_timeout}s, closing"
                    )
                    await self._send(self.parser.format_error("read timed out"))
                    break
                except ValueError:
                    # StreamReader raises ValueError when a line exceeds its limit
                    logger.warning(f"Line from {addr} exceeds read buffer, closing")
                    await self._send(self.parser.format_error("line too long"))
                    break

                if not data:
                    logger.debug(f"Client disconnected: {addr}")
                    break

                try:
                    line = data.decode("utf-8")
                except UnicodeDecodeError:
                    await self._send(self.parser.format_error("invalid encoding"))
                    continue

                await self._send(await self._dispatch(line))

        except ConnectionResetError:
            logger.debug(f"Connection reset by client: {addr}")
        except (ConnectionError, OSError) as exc:
            logger.info(f"Connection error with {addr}: {exc}")
        except Exception as exc:  # Log unexpected errors but keep server alive
            logger.exception(f"Error handling client {addr}: {exc}")
        finally:
            self.state.sessions.unregister(self.session)
            await self._close()

    async def _read_line(self) -> bytes:
        if self.state.read_timeout:
            return await asyncio.wait_for(self.reader.readline(), timeout=self.state.read_timeout)
        return await self.reader.readline()

    async def _dispatch(self, line: str) -> str:
        try:
            command = self.parser.parse_request(line)
        except ParseError as exc:
            logger.debug(f"Rejected command from {self.session.peer}: {exc.kind.name} {exc.message}")
            return self.parser.format_error(exc.message)

        logger.debug(f"{command.type.name} request from {self.session.peer}")
        response = await self.state.executor.execute(command)
        return self.parser.format_response(response)

    async def _send(self, line: str) -> None:
        self.writer.write(line.encode("utf-8"))
        await self.writer.drain()

    async def _close(self) -> None:
        try:
            self.writer.close()
            await self.writer.wait_closed()
        except (ConnectionError, OSError) as exc:
            logger.debug(f"Error closing connection to {self.session.peer}: {exc}")
