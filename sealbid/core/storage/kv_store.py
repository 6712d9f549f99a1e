"""
Persistent Key-Value Store.

An in-memory map that is the authoritative view for the running process,
backed by a pluggable durable sink. Writes become visible in memory
immediately; the durable copy is written afterwards, best effort.
"""

import asyncio
import json
import sqlite3
import warnings
from typing import Any, Dict, Iterable, List, Optional, Protocol, Tuple

from sealbid.core.errors import PersistenceWarning
from sealbid.utils.logger import get_logger

logger = get_logger("storage.store")

# Failures a sink may raise that are downgraded to warnings
SINK_ERRORS = (sqlite3.Error, OSError)


class DurableSink(Protocol):
    """Durable medium holding JSON text by key."""

    def load_all(self) -> Dict[str, str]: ...

    def write_batch(self, ops: List[Tuple[str, Optional[str]]]) -> None: ...

    def clear(self, prefix: str = "") -> None: ...


class MemorySink:
    """Sink that keeps data only for the lifetime of the object."""

    def __init__(self):
        self.data: Dict[str, str] = {}

    def load_all(self) -> Dict[str, str]:
        return dict(self.data)

    def write_batch(self, ops: List[Tuple[str, Optional[str]]]) -> None:
        for key, value in ops:
            if value is None:
                self.data.pop(key, None)
            else:
                self.data[key] = value

    def clear(self, prefix: str = "") -> None:
        for key in [k for k in self.data if k.startswith(prefix)]:
            del self.data[key]


class PersistentStore:
    """
    String-keyed store of JSON-serializable values.

    Values are held JSON-encoded in memory, so every read returns a fresh
    copy and unserializable values are rejected before anything changes.
    Durable writes are serialized in call order and shielded from caller
    cancellation.
    """

    def __init__(self, sink: Optional[DurableSink] = None):
        self.sink = sink if sink is not None else MemorySink()
        self._data: Dict[str, str] = {}
        self._write_lock = asyncio.Lock()
        self.persist_failures = 0

    async def load(self) -> "PersistentStore":
        """Hydrate the in-memory view from the sink."""
        try:
            stored = await asyncio.to_thread(self.sink.load_all)
        except SINK_ERRORS as e:
            self._report_failure("load", e)
            return self

        for key, raw in stored.items():
            try:
                json.loads(raw)
            except ValueError:
                logger.warning(f"Skipping undecodable value for key {key!r}")
                continue
            self._data[key] = raw
        logger.debug(f"Loaded {len(self._data)} keys from durable sink")
        return self

    # =========================================================================
    # Reads
    # =========================================================================

    async def get(self, key: str) -> Optional[Any]:
        raw = self._data.get(key)
        return json.loads(raw) if raw is not None else None

    async def scan_prefix(self, prefix: str) -> List[Any]:
        """All values whose key starts with prefix, in unspecified order."""
        return [json.loads(raw) for key, raw in self._data.items() if key.startswith(prefix)]

    def keys(self, prefix: str = "") -> List[str]:
        return [key for key in self._data if key.startswith(prefix)]

    def __contains__(self, key: str) -> bool:
        return key in self._data

    # =========================================================================
    # Writes
    # =========================================================================

    async def set(self, key: str, value: Any) -> bool:
        """
        Store a value.

        Returns:
            True if the durable write succeeded as well
        """
        return await self.set_many([(key, value)])

    async def set_many(self, items: Iterable[Tuple[str, Any]]) -> bool:
        """Store several values; all become visible in memory together."""
        ops = [(key, json.dumps(value)) for key, value in items]
        for key, raw in ops:
            self._data[key] = raw
        return await self._persist(ops)

    async def delete(self, key: str) -> bool:
        self._data.pop(key, None)
        return await self._persist([(key, None)])

    async def delete_many(self, keys: Iterable[str]) -> bool:
        ops = [(key, None) for key in keys]
        for key, _ in ops:
            self._data.pop(key, None)
        return await self._persist(ops)

    async def clear(self, prefix: str = "") -> None:
        for key in self.keys(prefix):
            del self._data[key]
        async with self._write_lock:
            try:
                await asyncio.to_thread(self.sink.clear, prefix)
            except SINK_ERRORS as e:
                self._report_failure("clear", e)

    async def _persist(self, ops: List[Tuple[str, Optional[str]]]) -> bool:
        return await asyncio.shield(self._write(ops))

    async def _write(self, ops: List[Tuple[str, Optional[str]]]) -> bool:
        async with self._write_lock:
            try:
                await asyncio.to_thread(self.sink.write_batch, ops)
                return True
            except SINK_ERRORS as e:
                self._report_failure("write", e, keys=[key for key, _ in ops])
                return False

    def _report_failure(self, action: str, error: Exception, keys: Optional[List[str]] = None):
        self.persist_failures += 1
        where = f" for {', '.join(keys)}" if keys else ""
        message = f"Durable {action} failed{where}: {error}"
        logger.warning(message)
        warnings.warn(message, PersistenceWarning, stacklevel=4)
