"""
SQLite storage for the product catalog.
"""

import sqlite3
from contextlib import contextmanager
from typing import Generator

from .config import ensure_db_directory


@contextmanager
def get_db(db_path: str) -> Generator[sqlite3.Connection, None, None]:
    """Get a SQLite database connection."""
    conn = sqlite3.connect(db_path)
    try:
        yield conn
    finally:
        conn.close()


def init_db(db_path: str):
    """Initialize the database with required tables."""
    ensure_db_directory(db_path)
    with get_db(db_path) as conn:
        cursor = conn.cursor()

        # Price is kept as TEXT so decimals round-trip exactly
        cursor.execute('''
            CREATE TABLE IF NOT EXISTS product (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                name TEXT NOT NULL,
                description TEXT NOT NULL DEFAULT '',
                price TEXT NOT NULL DEFAULT '0',
                image_url TEXT NOT NULL DEFAULT ''
            )
        ''')

        cursor.execute('CREATE INDEX IF NOT EXISTS idx_product_name ON product(name)')

        conn.commit()


def health_check(db_path: str) -> bool:
    """Check if database is accessible."""
    try:
        with get_db(db_path) as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT 1")
            return cursor.fetchone() is not None
    except sqlite3.Error:
        return False
