"""
SqliteEntityStore - sqlite adapter for the entity store.

Generic select/insert/upsert/delete over the four entity tables. Every
sqlite error is surfaced as StoreUnavailable.
"""

import os
import uuid
import logging
import sqlite3
import threading
from typing import Any, Optional

from core.db import get_connection, migrate_db, table_columns
from core.errors import StoreUnavailable, ValidationError
from core.models import EntityKind, timestamp
from core.ports import Order, Record

logger = logging.getLogger(__name__)


class SqliteEntityStore:
    """
    Handles all database operations for the entity store.
    """

    def __init__(self, db_path: str):
        """
        Initialize store with database path.

        Args:
            db_path: Path to the SQLite database file
        """
        self.db_path = db_path
        self._conn: Optional[sqlite3.Connection] = None
        self._columns: dict[EntityKind, list[str]] = {}
        self._lock = threading.Lock()

    @classmethod
    def open(cls, db_path: str) -> 'SqliteEntityStore':
        """
        Open a store, creating the database and running migrations if needed.

        Args:
            db_path: Path to the SQLite database file

        Returns:
            Ready-to-use store
        """
        parent = os.path.dirname(os.path.abspath(db_path))
        os.makedirs(parent, exist_ok=True)
        try:
            migrate_db(db_path)
        except sqlite3.Error as e:
            raise StoreUnavailable(f"Could not open database {db_path}: {e}") from e
        return cls(db_path)

    @property
    def conn(self) -> sqlite3.Connection:
        """Get or create database connection."""
        if self._conn is None:
            self._conn = get_connection(self.db_path)
        return self._conn

    def close(self):
        """Close the database connection."""
        with self._lock:
            if self._conn:
                self._conn.close()
                self._conn = None

    # ==================== Schema helpers ====================

    def _table_columns(self, kind: EntityKind) -> list[str]:
        if kind not in self._columns:
            columns = table_columns(self.conn, kind.value)
            if columns is None:
                raise StoreUnavailable(f"Table {kind.value} does not exist")
            self._columns[kind] = columns
        return self._columns[kind]

    def _check_columns(self, kind: EntityKind, names) -> None:
        columns = self._table_columns(kind)
        unknown = [name for name in names if name not in columns]
        if unknown:
            raise ValidationError(f"Unknown column(s) for {kind.value}: {', '.join(unknown)}")

    def _prepare(self, kind: EntityKind, record: Record) -> Record:
        """Fill in id and timestamps the way the remote store would."""
        prepared = dict(record)
        columns = self._table_columns(kind)
        now = timestamp()
        prepared.setdefault('id', uuid.uuid4().hex)
        if 'created_at' in columns:
            prepared.setdefault('created_at', now)
        if 'updated_at' in columns:
            prepared.setdefault('updated_at', now)
        self._check_columns(kind, prepared.keys())
        return prepared

    def _fetch(self, kind: EntityKind, record_id: str) -> Record:
        row = self.conn.execute(
            f"SELECT * FROM {kind.value} WHERE id = ?", (record_id,)
        ).fetchone()
        if row is None:
            raise StoreUnavailable(f"{kind.value} record {record_id} vanished after write")
        return dict(row)

    # ==================== Entity Operations ====================

    def select(
        self,
        kind: EntityKind,
        filters: Optional[dict[str, Any]] = None,
        order: Optional[Order] = None,
    ) -> list[Record]:
        """
        Select records by equality filters.

        Args:
            kind: Table to query
            filters: Column -> value equality filters, all must match
            order: (column, ascending); insertion order breaks ties

        Returns:
            List of records as dicts
        """
        filters = filters or {}
        with self._lock:
            try:
                self._check_columns(kind, filters.keys())
                sql = f"SELECT * FROM {kind.value}"
                if filters:
                    sql += " WHERE " + " AND ".join(f"{col} = ?" for col in filters)
                if order:
                    column, ascending = order
                    self._check_columns(kind, [column])
                    direction = "ASC" if ascending else "DESC"
                    sql += f" ORDER BY {column} {direction}, rowid {direction}"
                else:
                    sql += " ORDER BY rowid"
                rows = self.conn.execute(sql, tuple(filters.values())).fetchall()
                return [dict(row) for row in rows]
            except sqlite3.Error as e:
                logger.error(f"select on {kind.value} failed: {e}")
                raise StoreUnavailable(str(e)) from e

    def insert(self, kind: EntityKind, record: Record) -> Record:
        """
        Insert a new record.

        Args:
            kind: Table to insert into
            record: Column values; id and timestamps are generated if absent

        Returns:
            The stored record
        """
        with self._lock:
            try:
                prepared = self._prepare(kind, record)
                columns = list(prepared.keys())
                self.conn.execute(
                    f"INSERT INTO {kind.value} ({', '.join(columns)}) "
                    f"VALUES ({', '.join('?' for _ in columns)})",
                    tuple(prepared.values()),
                )
                self.conn.commit()
                return self._fetch(kind, prepared['id'])
            except sqlite3.Error as e:
                self.conn.rollback()
                logger.error(f"insert into {kind.value} failed: {e}")
                raise StoreUnavailable(str(e)) from e

    def upsert(self, kind: EntityKind, record: Record, conflict_key: str = "id") -> Record:
        """
        Insert a record or update the one that shares conflict_key.

        created_at of an existing record is preserved.

        Args:
            kind: Table to write
            record: Column values
            conflict_key: Unique column identifying the existing record

        Returns:
            The stored record
        """
        if conflict_key not in record:
            raise ValidationError(f"upsert on {kind.value} requires '{conflict_key}'")
        with self._lock:
            try:
                prepared = self._prepare(kind, record)
                columns = list(prepared.keys())
                updates = [
                    f"{col} = excluded.{col}" for col in columns
                    if col not in (conflict_key, 'id', 'created_at')
                ]
                sql = (
                    f"INSERT INTO {kind.value} ({', '.join(columns)}) "
                    f"VALUES ({', '.join('?' for _ in columns)}) "
                    f"ON CONFLICT({conflict_key}) DO "
                )
                sql += f"UPDATE SET {', '.join(updates)}" if updates else "NOTHING"
                self.conn.execute(sql, tuple(prepared.values()))
                self.conn.commit()
                row = self.conn.execute(
                    f"SELECT * FROM {kind.value} WHERE {conflict_key} = ?",
                    (prepared[conflict_key],),
                ).fetchone()
                return dict(row)
            except sqlite3.Error as e:
                self.conn.rollback()
                logger.error(f"upsert into {kind.value} failed: {e}")
                raise StoreUnavailable(str(e)) from e

    def delete(self, kind: EntityKind, id: str) -> None:
        """
        Delete a record by id.

        Args:
            kind: Table to delete from
            id: ID of the record
        """
        with self._lock:
            try:
                self.conn.execute(f"DELETE FROM {kind.value} WHERE id = ?", (id,))
                self.conn.commit()
            except sqlite3.Error as e:
                self.conn.rollback()
                logger.error(f"delete from {kind.value} failed: {e}")
                raise StoreUnavailable(str(e)) from e
