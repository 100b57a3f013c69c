from __future__ import annotations

import os
import pickle
import sqlite3
import threading
import time
from typing import Any

from .base import StorageBackend, StorageError, backend_aliases


@backend_aliases("sqlite", "sqlite3")
class SQLiteBackend(StorageBackend):
    """SQLite-backed snapshot storage.

    Brief:
      Keeps one row per namespace holding the pickled snapshot. Suitable for
      a single process; the connection is shared across the caller thread and
      the write-back worker under an RLock.

    Inputs:
      - **config:
          - db_path (str): Path to sqlite3 DB file, or ':memory:'.
          - path (str): Alias for db_path.
          - table (str): Table name (default 'plugstore_snapshots').
          - journal_mode (str): SQLite journal mode; defaults to 'WAL'.

    Outputs:
      - SQLiteBackend instance.

    Example:
      backend:
        module: sqlite
        config:
          db_path: ./var/plugstore.db
    """

    def __init__(self, **config: object) -> None:
        super().__init__()

        db_path = config.get("db_path")
        if not isinstance(db_path, str) or not db_path.strip():
            db_path = config.get("path")
        if not isinstance(db_path, str) or not db_path.strip():
            db_path = "./var/plugstore.db"
        db_path = db_path.strip()
        if db_path != ":memory:":
            db_path = os.path.abspath(os.path.expanduser(db_path))
        self.db_path: str = db_path

        table = config.get("table", "plugstore_snapshots")
        if not isinstance(table, str) or not table.isidentifier():
            raise ValueError(f"sqlite backend table must be an identifier, got {table!r}")
        self.table: str = table
        self.journal_mode = str(config.get("journal_mode", "WAL") or "WAL")

        self._conn_lock = threading.RLock()
        self._conn = self._init_connection()

    def _init_connection(self) -> sqlite3.Connection:
        """Brief: Create sqlite connection and initialize schema.

        Inputs:
          - None.

        Outputs:
          - sqlite3.Connection: Open sqlite connection with schema ensured.
        """

        if self.db_path != ":memory:":
            dir_path = os.path.dirname(self.db_path)
            if dir_path:
                os.makedirs(dir_path, exist_ok=True)

        conn = sqlite3.connect(self.db_path, check_same_thread=False)
        try:
            conn.execute(f"PRAGMA journal_mode={self.journal_mode}")
        except sqlite3.DatabaseError:
            # Some environments restrict PRAGMAs.
            pass

        conn.execute(
            f"CREATE TABLE IF NOT EXISTS {self.table} ("
            "namespace TEXT PRIMARY KEY, "
            "payload BLOB NOT NULL, "
            "updated REAL NOT NULL"
            ")"
        )
        conn.commit()
        return conn

    def load_sync(self, namespace: str) -> Any | None:
        try:
            with self._conn_lock:
                cur = self._conn.execute(
                    f"SELECT payload FROM {self.table} WHERE namespace=?",
                    (namespace,),
                )
                row = cur.fetchone()
        except sqlite3.Error as exc:
            raise StorageError(f"failed reading snapshot {namespace!r}: {exc}") from exc

        if not row:
            return None
        try:
            return pickle.loads(row[0])
        except Exception as exc:
            raise StorageError(f"corrupt snapshot for {namespace!r}: {exc}") from exc

    def save_sync(self, namespace: str, snapshot: Any) -> None:
        payload = pickle.dumps(snapshot, protocol=pickle.HIGHEST_PROTOCOL)
        try:
            with self._conn_lock:
                self._conn.execute(
                    f"INSERT OR REPLACE INTO {self.table} (namespace, payload, updated) "
                    "VALUES (?, ?, ?)",
                    (namespace, sqlite3.Binary(payload), time.time()),
                )
                self._conn.commit()
        except sqlite3.Error as exc:
            raise StorageError(f"failed writing snapshot {namespace!r}: {exc}") from exc

    def close(self) -> None:
        super().close()
        with self._conn_lock:
            self._conn.close()
