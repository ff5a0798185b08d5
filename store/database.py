"""SQLite schema and connection management for the primary partial backend."""

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Generator


def init_database(db_path: str) -> None:
    """
    Initialize database and create tables if they don't exist.

    Args:
        db_path: Path to the SQLite file
    """
    Path(db_path).parent.mkdir(parents=True, exist_ok=True)

    with get_db_connection(db_path) as conn:
        cursor = conn.cursor()

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS partials (
                key TEXT PRIMARY KEY,
                body BLOB NOT NULL,
                updated_at REAL NOT NULL
            )
        """)

        conn.commit()


@contextmanager
def get_db_connection(db_path: str) -> Generator[sqlite3.Connection, None, None]:
    """
    Context manager for database connections.
    """
    conn = sqlite3.connect(db_path, timeout=10)
    conn.row_factory = sqlite3.Row
    try:
        yield conn
    finally:
        conn.close()
