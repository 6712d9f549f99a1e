import sqlite3
import threading
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from sealbid.utils.logger import get_logger

logger = get_logger("storage.sqlite")


class SQLiteSink:
    """
    SQLite durable medium for the key-value store.

    Keys are text, values are JSON text. One row per key; a batch of
    writes is applied in a single transaction so multi-key updates
    (auction close + result) land together.
    """

    def __init__(self, db_path: Path):
        self.db_path = Path(db_path)
        self._conn_local = threading.local()

        if not self.db_path.parent.exists():
            self.db_path.parent.mkdir(parents=True, exist_ok=True)

        self._init_schema()

    def _get_conn(self) -> sqlite3.Connection:
        """Get or create connection for current thread."""
        if not hasattr(self._conn_local, "conn"):
            self._conn_local.conn = sqlite3.connect(
                self.db_path,
                timeout=30.0,
                check_same_thread=False,
            )
            self._conn_local.conn.row_factory = sqlite3.Row
            self._conn_local.conn.execute("PRAGMA journal_mode=WAL;")
            self._conn_local.conn.execute("PRAGMA synchronous=NORMAL;")
        return self._conn_local.conn

    def _init_schema(self):
        """Initialize database schema."""
        conn = self._get_conn()
        with conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS kv_store (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                )
            """)

    # =========================================================================
    # Key-Value Operations
    # =========================================================================

    def load_all(self) -> Dict[str, str]:
        """Read every stored key-value pair."""
        conn = self._get_conn()
        cursor = conn.execute("SELECT key, value FROM kv_store")
        return {row["key"]: row["value"] for row in cursor}

    def write_batch(self, ops: List[Tuple[str, Optional[str]]]):
        """
        Apply puts and deletes atomically.

        Args:
            ops: (key, value) pairs; a value of None deletes the key
        """
        conn = self._get_conn()
        with conn:
            for key, value in ops:
                if value is None:
                    conn.execute("DELETE FROM kv_store WHERE key = ?", (key,))
                else:
                    conn.execute(
                        "INSERT OR REPLACE INTO kv_store (key, value) VALUES (?, ?)",
                        (key, value),
                    )

    def clear(self, prefix: str = ""):
        """Delete all keys starting with prefix (all keys if empty)."""
        conn = self._get_conn()
        with conn:
            if prefix:
                conn.execute(
                    "DELETE FROM kv_store WHERE substr(key, 1, ?) = ?",
                    (len(prefix), prefix),
                )
            else:
                conn.execute("DELETE FROM kv_store")
        logger.debug(f"Cleared keys with prefix {prefix!r} from {self.db_path}")

    def close(self):
        """Close the calling thread's connection."""
        conn = getattr(self._conn_local, "conn", None)
        if conn is not None:
            conn.close()
            del self._conn_local.conn
