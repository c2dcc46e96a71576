"""Thread-local database connection management with explicit transactions."""

from __future__ import annotations

import sqlite3
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator

from policy_ledger.core.config import AppConfig, get_required_env

try:
    from pysqlcipher3 import dbapi2 as sqlcipher

    SQLCIPHER_AVAILABLE = True
except ImportError:
    sqlcipher = None
    SQLCIPHER_AVAILABLE = False


class ThreadLocalConnection:
    """Maintain one DB connection per thread for SQLite/SQLCipher safety.

    Connections run in autocommit mode; ``transaction()`` opens an explicit
    ``BEGIN IMMEDIATE`` unit so a group of statements commits or rolls back
    together. Statements executed outside a transaction commit on their own.
    """

    def __init__(self, config: AppConfig):
        self._config = config
        self._local = threading.local()

    def _open_connection(self) -> sqlite3.Connection:
        db_path = Path(self._config.database.path)
        db_path.parent.mkdir(parents=True, exist_ok=True)
        timeout = self._config.database.busy_timeout_seconds

        if SQLCIPHER_AVAILABLE:
            connection = sqlcipher.connect(str(db_path), timeout=timeout, check_same_thread=False)
            key = get_required_env(self._config.database.key_env).replace("'", "''")
            connection.execute(f"PRAGMA key = '{key}'")
            connection.execute("PRAGMA cipher_compatibility = 4")
        elif self._config.database.allow_sqlite_fallback:
            connection = sqlite3.connect(str(db_path), timeout=timeout, check_same_thread=False)
        else:
            raise RuntimeError(
                "SQLCipher is required but unavailable. Install pysqlcipher3 or enable fallback."
            )

        connection.isolation_level = None
        connection.execute("PRAGMA foreign_keys = ON")
        connection.row_factory = sqlite3.Row
        return connection

    def get_connection(self) -> sqlite3.Connection:
        """Return current thread's connection, creating it when needed."""
        connection = getattr(self._local, "connection", None)
        if connection is None:
            connection = self._open_connection()
            self._local.connection = connection
            self._local.depth = 0
        return connection

    def close_connection(self) -> None:
        """Close current thread's connection."""
        connection = getattr(self._local, "connection", None)
        if connection is not None:
            connection.close()
            self._local.connection = None
            self._local.depth = 0

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        """Run the enclosed statements as one atomic unit.

        Nested calls join the outermost transaction.
        """
        connection = self.get_connection()
        if self._local.depth:
            self._local.depth += 1
            try:
                yield connection
            finally:
                self._local.depth -= 1
            return

        connection.execute("BEGIN IMMEDIATE")
        self._local.depth = 1
        try:
            yield connection
            connection.execute("COMMIT")
        except BaseException:
            if connection.in_transaction:
                connection.execute("ROLLBACK")
            raise
        finally:
            self._local.depth = 0

    def execute(self, query: str, params: tuple[Any, ...] = ()) -> sqlite3.Cursor:
        """Execute a query on the current thread's connection."""
        connection = self.get_connection()
        cursor = connection.cursor()
        cursor.execute(query, params)
        return cursor

    def fetchall(self, query: str, params: tuple[Any, ...] = ()) -> list[sqlite3.Row]:
        """Fetch all rows for a query."""
        cursor = self.execute(query, params)
        return cursor.fetchall()

    def fetchone(self, query: str, params: tuple[Any, ...] = ()) -> sqlite3.Row | None:
        """Fetch first row for a query."""
        cursor = self.execute(query, params)
        return cursor.fetchone()
