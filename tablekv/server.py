#!/usr/bin/env python3
"""
tablekv Server Entry Point

This is the main entry point for starting the tablekv server.

Usage:
    python -m tablekv.server                        # Default settings (0.0.0.0:8080)
    python -m tablekv.server --port 9000            # Custom port
    python -m tablekv.server --database /tmp/kv.db  # Custom database file
    python -m tablekv.server --memory               # Non-persistent store
    python -m tablekv.server --debug                # Enable debug logging

Environment Variables:
    KV_TABLE_HOST          - Server bind address
    KV_TABLE_PORT          - Server port
    KV_TABLE_DATABASE      - SQLite database file
    KV_TABLE_READ_TIMEOUT  - Per-line read timeout in seconds (0 = none)
    KV_TABLE_DEBUG         - Enable debug mode (true/false)
"""

import argparse
import asyncio
import logging
import signal
import sys

from .config.settings import settings
from .errors import ListenError, StoreError
from .network.tcp_server import KVServer
from .storage.base import RecordStore
from .storage.memory import MemoryRecordStore
from .storage.sqlite import SQLiteRecordStore


def parse_args(argv=None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="tablekv: Line-Oriented Key-Value Server",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    parser.add_argument(
        "--host",
        type=str,
        default=settings.HOST,
        help="Host address to bind to",
    )

    parser.add_argument(
        "--port",
        type=int,
        default=settings.PORT,
        help="Port number to listen on",
    )

    parser.add_argument(
        "--database",
        type=str,
        default=settings.DATABASE,
        help="SQLite database file holding the key_value_pairs table",
    )

    parser.add_argument(
        "--memory",
        action="store_true",
        help="Keep entries in memory instead of a database",
    )

    parser.add_argument(
        "--read-timeout",
        type=float,
        default=settings.READ_TIMEOUT,
        help="Seconds to wait for each command line (0 waits forever)",
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        default=settings.DEBUG,
        help="Enable debug logging",
    )

    return parser.parse_args(argv)


def setup_logging(debug: bool = False) -> None:
    """Configure logging based on debug flag."""
    level = logging.DEBUG if debug else getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)

    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler(sys.stdout),
        ]
    )


def open_store(args: argparse.Namespace) -> RecordStore:
    """Create the record store selected on the command line."""
    if args.memory:
        return MemoryRecordStore()
    return SQLiteRecordStore(args.database)


def main(argv=None) -> None:
    """Main entry point for the server."""
    args = parse_args(argv)

    setup_logging(debug=args.debug)
    logger = logging.getLogger(__name__)

    try:
        store = open_store(args)
    except StoreError as exc:
        logger.error(f"Error connecting to the database: {exc}")
        sys.exit(1)

    server = KVServer(
        host=args.host,
        port=args.port,
        store=store,
        read_timeout=args.read_timeout,
    )

    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)

    async def shutdown(sig: signal.Signals) -> None:
        """Handle shutdown signal."""
        logger.info(f"Received signal {sig.name}, shutting down server...")
        await server.stop()

    # Register signal handlers (Unix only)
    if sys.platform != 'win32':
        for sig in (signal.SIGTERM, signal.SIGINT):
            loop.add_signal_handler(
                sig,
                lambda s=sig: asyncio.create_task(shutdown(s))
            )

    logger.info("Starting tablekv server")
    logger.info(f"  Host: {args.host}")
    logger.info(f"  Port: {args.port}")
    logger.info(f"  Store: {'memory' if args.memory else args.database}")
    logger.info(f"  Read timeout: {args.read_timeout or 'none'}")

    exit_code = 0
    try:
        loop.run_until_complete(server.start())
    except ListenError as exc:
        logger.error(f"Error starting server: {exc}")
        exit_code = 1
    except KeyboardInterrupt:
        logger.info("Keyboard interrupt received")
        loop.run_until_complete(server.stop())
    finally:
        loop.run_until_complete(loop.shutdown_asyncgens())
        loop.close()
        asyncio.set_event_loop(None)
        try:
            store.close()
        except StoreError as exc:
            logger.error(f"Error closing the database: {exc}")
        logger.info("Server shutdown complete")

    if exit_code:
        sys.exit(exit_code)


if __name__ == "__main__":
    main()
