"""
Integration Tests

End-to-end tests that run the server over a SQLite database file.

Run with: python -m pytest tests/test_integration.py -v
"""

import asyncio
import pytest
from tablekv.network.tcp_server import KVServer
from tablekv.storage.sqlite import SQLiteRecordStore
from tests.conftest import AsyncClient, find_free_port, start_background, stop_background


@pytest.mark.asyncio
@pytest.mark.integration
class TestEndToEnd:
    """End-to-end integration tests."""

    async def test_complete_workflow(self, sqlite_store):
        port = find_free_port()
        srv = KVServer(host='127.0.0.1', port=port, store=sqlite_store, read_timeout=0)
        task = await start_background(srv)
        try:
            async with AsyncClient('127.0.0.1', port) as client:
                assert await client.send_command("PUT user:1 alice") == "Inserted user:1 alice"
                assert await client.send_command("PUT user:2 bob") == "Inserted user:2 bob"
                assert await client.send_command("PUT user:3 charlie") == "Inserted user:3 charlie"

                assert await client.send_command("GET user:1") == "alice"
                assert await client.send_command("GET user:2") == "bob"

                assert await client.send_command("PUT user:1 alice_updated") == "Updated user:1 alice_updated"
                assert await client.send_command("GET user:1") == "alice_updated"

                assert await client.send_command("DELETE user:2") == "Deleted user:2"
                assert await client.send_command("GET user:2") == "Error: key user:2 not found"

                assert await client.send_command("LIST") == "user:1: alice_updated, user:3: charlie"
        finally:
            await stop_background(srv, task)

        assert sqlite_store.list() == [("user:1", "alice_updated"), ("user:3", "charlie")]

    async def test_entries_survive_restart(self, db_path):
        port = find_free_port()

        first_store = SQLiteRecordStore(db_path)
        srv = KVServer(host='127.0.0.1', port=port, store=first_store)
        task = await start_background(srv)
        try:
            async with AsyncClient('127.0.0.1', port) as client:
                assert await client.send_command("PUT durable yes") == "Inserted durable yes"
        finally:
            await stop_background(srv, task)
            first_store.close()

        second_store = SQLiteRecordStore(db_path)
        srv = KVServer(host='127.0.0.1', port=port, store=second_store)
        task = await start_background(srv)
        try:
            async with AsyncClient('127.0.0.1', port) as client:
                assert await client.send_command("GET durable") == "yes"
                assert await client.send_command("PUT durable again") == "Updated durable again"
        finally:
            await stop_background(srv, task)
            second_store.close()

    async def test_multiple_clients_shared_state(self, server, server_port):
        async with AsyncClient('127.0.0.1', server_port) as client1:
            async with AsyncClient('127.0.0.1', server_port) as client2:
                await client1.send_command("PUT shared:key shared:value")
                assert await client2.send_command("GET shared:key") == "shared:value"

                await client2.send_command("PUT shared:key updated:value")
                assert await client1.send_command("GET shared:key") == "updated:value"

                await client1.send_command("DELETE shared:key")
                assert await client2.send_command("GET shared:key") == "Error: key shared:key not found"

    @pytest.mark.slow
    async def test_concurrent_updates(self, sqlite_store):
        """Many clients hammering one SQLite connection stay consistent."""
        port = find_free_port()
        srv = KVServer(host='127.0.0.1', port=port, store=sqlite_store)
        task = await start_background(srv)
        num_clients = 5
        num_operations = 20

        async def client_operations(client_id: int):
            async with AsyncClient('127.0.0.1', port) as client:
                for i in range(num_operations):
                    key = f"key:{client_id}:{i}"
                    value = f"value:{client_id}:{i}"

                    assert await client.send_command(f"PUT {key} {value}") == f"Inserted {key} {value}"
                    assert await client.send_command(f"GET {key}") == value
                    await client.send_command(f"PUT hot {value}")

        try:
            await asyncio.gather(*(client_operations(i) for i in range(num_clients)))

            async with AsyncClient('127.0.0.1', port) as client:
                listing = await client.send_command("LIST")
                hot = await client.send_command("GET hot")
        finally:
            await stop_background(srv, task)

        entries = dict(pair.split(": ", 1) for pair in listing.split(", "))
        assert len(entries) == num_clients * num_operations + 1
        assert entries["hot"] == hot
        assert hot.startswith("value:")

    async def test_error_recovery(self, server, server_port):
        """Bad commands are answered and the session carries on."""
        async with AsyncClient('127.0.0.1', server_port) as client:
            assert (await client.send_command("INVALID")).startswith("Error: ")
            assert (await client.send_command("PUT")).startswith("Error: ")
            assert (await client.send_command("GET")).startswith("Error: ")
            assert (await client.send_command("PUT a b c")).startswith("Error: ")

            assert await client.send_command("PUT key value") == "Inserted key value"
            assert await client.send_command("GET key") == "value"
