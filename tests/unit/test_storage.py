"""
Unit tests for the persistent key-value store and its sinks.
"""

import asyncio

import pytest

from sealbid.core.errors import PersistenceWarning
from sealbid.core.storage import MemorySink, PersistentStore, SQLiteSink


# =============================================================================
# PersistentStore
# =============================================================================


class TestPersistentStore:
    """Tests for in-memory view and durable writes."""

    def test_set_then_get(self, store):
        async def scenario():
            await store.set("auction_1", {"id": 1, "item_name": "Vase"})
            return await store.get("auction_1")

        assert asyncio.run(scenario()) == {"id": 1, "item_name": "Vase"}

    def test_get_missing_returns_none(self, store):
        assert asyncio.run(store.get("nope")) is None

    def test_reads_return_copies(self, store):
        """Mutating a returned value must not change the store."""
        async def scenario():
            await store.set("k", {"tags": ["a"]})
            value = await store.get("k")
            value["tags"].append("b")
            return await store.get("k")

        assert asyncio.run(scenario()) == {"tags": ["a"]}

    def test_set_is_written_to_sink(self, store, sink):
        asyncio.run(store.set("network", "remote"))
        assert sink.data["network"] == '"remote"'

    def test_scan_prefix(self, store):
        async def scenario():
            await store.set_many([("bid_1_a", 1), ("bid_1_b", 2), ("bid_2_a", 3), ("auction_1", 4)])
            return await store.scan_prefix("bid_1_")

        assert sorted(asyncio.run(scenario())) == [1, 2]

    def test_keys_and_contains(self, store):
        asyncio.run(store.set_many([("auction_1", 1), ("auction_2", 2), ("result_1", 3)]))
        assert sorted(store.keys("auction_")) == ["auction_1", "auction_2"]
        assert "result_1" in store
        assert "result_2" not in store

    def test_delete(self, store, sink):
        async def scenario():
            await store.set("walletAddress", "0xabc")
            await store.delete("walletAddress")
            return await store.get("walletAddress")

        assert asyncio.run(scenario()) is None
        assert "walletAddress" not in sink.data

    def test_delete_many(self, store):
        async def scenario():
            await store.set_many([("a", 1), ("b", 2), ("c", 3)])
            await store.delete_many(["a", "b"])

        asyncio.run(scenario())
        assert store.keys() == ["c"]

    def test_clear_prefix(self, store, sink):
        async def scenario():
            await store.set_many([("auction_1", 1), ("bid_1_x", 2), ("appMode", "demo")])
            await store.clear("auction_")

        asyncio.run(scenario())
        assert store.keys() == ["bid_1_x", "appMode"]
        assert set(sink.data) == {"bid_1_x", "appMode"}

    def test_unserializable_value_rejected_without_change(self, store):
        with pytest.raises(TypeError):
            asyncio.run(store.set_many([("ok", 1), ("bad", object())]))
        assert store.keys() == []

    def test_set_many_visible_together(self, store):
        """All items are in memory before the first durable write starts."""
        seen = []

        async def observer():
            seen.append(("a" in store, "b" in store))

        async def scenario():
            writer = asyncio.create_task(store.set_many([("a", 1), ("b", 2)]))
            await asyncio.sleep(0)
            await observer()
            await writer

        asyncio.run(scenario())
        assert seen == [(True, True)]

    def test_concurrent_writes_all_persisted(self, store, sink):
        async def scenario():
            await asyncio.gather(*(store.set(f"bid_1_{i}", i) for i in range(20)))

        asyncio.run(scenario())
        assert len(store.keys("bid_1_")) == 20
        assert len(sink.data) == 20

    def test_load_hydrates_from_sink(self, sink):
        sink.data["appMode"] = '"real"'
        store = PersistentStore(sink)
        asyncio.run(store.load())
        assert asyncio.run(store.get("appMode")) == "real"

    def test_load_skips_undecodable_values(self, sink):
        sink.data["good"] = "1"
        sink.data["bad"] = "{not json"
        store = PersistentStore(sink)
        asyncio.run(store.load())
        assert store.keys() == ["good"]


class TestPersistenceFailures:
    """Sink failures downgrade to warnings and keep the in-memory view."""

    def test_write_failure_warns_and_keeps_memory(self, failing_sink):
        store = PersistentStore(failing_sink)

        with pytest.warns(PersistenceWarning):
            ok = asyncio.run(store.set("walletAddress", "0xabc"))

        assert ok is False
        assert asyncio.run(store.get("walletAddress")) == "0xabc"
        assert store.persist_failures == 1
        assert failing_sink.data == {}

    def test_recovers_after_sink_heals(self, failing_sink):
        store = PersistentStore(failing_sink)
        with pytest.warns(PersistenceWarning):
            asyncio.run(store.set("a", 1))

        failing_sink.healthy = True
        assert asyncio.run(store.set("b", 2)) is True
        assert failing_sink.data == {"b": "2"}

    def test_clear_failure_warns(self, failing_sink):
        store = PersistentStore(failing_sink)
        with pytest.warns(PersistenceWarning):
            asyncio.run(store.set("auction_1", 1))
        with pytest.warns(PersistenceWarning):
            asyncio.run(store.clear("auction_"))
        assert store.keys() == []

    def test_load_failure_starts_empty(self):
        class BrokenSink(MemorySink):
            def load_all(self):
                raise OSError("unreadable")

        store = PersistentStore(BrokenSink())
        with pytest.warns(PersistenceWarning):
            asyncio.run(store.load())
        assert store.keys() == []


# =============================================================================
# SQLiteSink
# =============================================================================


class TestSQLiteSink:
    """Tests for the SQLite durable medium."""

    def test_write_and_load(self, tmp_path):
        sink = SQLiteSink(tmp_path / "kv.db")
        sink.write_batch([("a", "1"), ("b", '"two"')])
        assert sink.load_all() == {"a": "1", "b": '"two"'}
        sink.close()

    def test_batch_delete(self, tmp_path):
        sink = SQLiteSink(tmp_path / "kv.db")
        sink.write_batch([("a", "1"), ("b", "2")])
        sink.write_batch([("a", None)])
        assert sink.load_all() == {"b": "2"}
        sink.close()

    def test_clear_prefix_is_literal(self, tmp_path):
        """Prefix matching must not treat _ as a wildcard."""
        sink = SQLiteSink(tmp_path / "kv.db")
        sink.write_batch([("bid_1_a", "1"), ("bidX1_a", "2"), ("auction_1", "3")])
        sink.clear("bid_")
        assert sink.load_all() == {"bidX1_a": "2", "auction_1": "3"}
        sink.close()

    def test_clear_all(self, tmp_path):
        sink = SQLiteSink(tmp_path / "kv.db")
        sink.write_batch([("a", "1"), ("b", "2")])
        sink.clear()
        assert sink.load_all() == {}
        sink.close()

    def test_creates_parent_directory(self, tmp_path):
        sink = SQLiteSink(tmp_path / "nested" / "dir" / "kv.db")
        assert (tmp_path / "nested" / "dir").exists()
        sink.close()


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
