"""
Database initialization and migrations for Labelled.
"""

import sqlite3
from typing import Optional

# Current schema version
SCHEMA_VERSION = 1


def get_connection(db_path: str) -> sqlite3.Connection:
    """Get a database connection with row factory enabled.

    The connection may be shared by worker threads; callers serialise access.
    """
    conn = sqlite3.connect(db_path, check_same_thread=False)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


def init_db(db_path: str) -> None:
    """
    Initialize a new database with all required tables.

    Args:
        db_path: Path to the SQLite database file
    """
    conn = get_connection(db_path)
    cursor = conn.cursor()

    try:
        # Version tracking table
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS schema_version (
                version INTEGER PRIMARY KEY,
                applied_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)

        # One profile per session identity
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS profiles (
                id TEXT PRIMARY KEY,
                email TEXT NOT NULL,
                full_name TEXT,
                created_at TEXT NOT NULL
            )
        """)

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS projects (
                id TEXT PRIMARY KEY,
                user_id TEXT NOT NULL,
                name TEXT NOT NULL CHECK (length(name) > 0),
                description TEXT DEFAULT '',
                type TEXT NOT NULL CHECK (type IN ('image', 'text')),
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL,
                FOREIGN KEY (user_id) REFERENCES profiles(id) ON DELETE CASCADE
            )
        """)

        # Dataset items: exactly one of file_url/content is set
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS datasets (
                id TEXT PRIMARY KEY,
                project_id TEXT NOT NULL,
                file_name TEXT NOT NULL,
                file_url TEXT,
                content TEXT,
                file_type TEXT DEFAULT '',
                created_at TEXT NOT NULL,
                FOREIGN KEY (project_id) REFERENCES projects(id) ON DELETE CASCADE,
                CHECK ((file_url IS NULL) != (content IS NULL))
            )
        """)

        # Create index for efficient ordering
        cursor.execute("""
            CREATE INDEX IF NOT EXISTS idx_datasets_order
            ON datasets(project_id, created_at)
        """)

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS labels (
                id TEXT PRIMARY KEY,
                dataset_id TEXT NOT NULL,
                label_text TEXT NOT NULL CHECK (length(label_text) > 0),
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL,
                FOREIGN KEY (dataset_id) REFERENCES datasets(id) ON DELETE CASCADE
            )
        """)

        # Create index for efficient lookup by item
        cursor.execute("""
            CREATE INDEX IF NOT EXISTS idx_labels_dataset
            ON labels(dataset_id, created_at)
        """)

        # Record schema version
        cursor.execute("""
            INSERT OR IGNORE INTO schema_version (version) VALUES (?)
        """, (SCHEMA_VERSION,))

        conn.commit()
    finally:
        conn.close()


def get_schema_version(db_path: str) -> int:
    """Get the current schema version of the database."""
    conn = get_connection(db_path)
    try:
        cursor = conn.cursor()
        cursor.execute("SELECT MAX(version) FROM schema_version")
        row = cursor.fetchone()
        return row[0] if row and row[0] else 0
    except sqlite3.OperationalError:
        return 0
    finally:
        conn.close()


def migrate_db(db_path: str) -> None:
    """
    Run any pending migrations on the database.

    Args:
        db_path: Path to the SQLite database file
    """
    current_version = get_schema_version(db_path)

    if current_version < SCHEMA_VERSION:
        # Migration 0 -> 1: Initial schema
        if current_version < 1:
            init_db(db_path)


def table_columns(conn: sqlite3.Connection, table: str) -> Optional[list[str]]:
    """Column names of a table, or None if it does not exist."""
    rows = conn.execute(f"PRAGMA table_info({table})").fetchall()
    return [row['name'] for row in rows] if rows else None
