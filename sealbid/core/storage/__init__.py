"""
Persistent Storage Module.

Provides:
- PersistentStore: in-memory key-value view with best-effort durability
- SQLiteSink: SQLite-backed durable medium
- MemorySink: non-durable medium for tests and ephemeral sessions
"""

from sealbid.core.storage.kv_store import DurableSink, MemorySink, PersistentStore
from sealbid.core.storage.sqlite_adapter import SQLiteSink

__all__ = ["DurableSink", "MemorySink", "PersistentStore", "SQLiteSink"]
