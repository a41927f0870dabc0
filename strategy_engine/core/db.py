"""
SQLite foundation for the local key-value store and the analysis feature store.
"""

import sqlite3
from contextlib import contextmanager
from typing import Generator
from .config import DB_PATH, ensure_db_directory

REQUIRED_TABLES = ['local_kv', 'analysis_records', 'analysis_features']


@contextmanager
def get_db(db_path: str = None) -> Generator[sqlite3.Connection, None, None]:
    """Get a SQLite database connection."""
    conn = sqlite3.connect(db_path or DB_PATH)
    try:
        yield conn
    finally:
        conn.close()


def init_db(db_path: str = None):
    """Initialize the database with required tables."""
    db_path = db_path or DB_PATH
    if db_path != ":memory:":
        ensure_db_directory(db_path)

    with get_db(db_path) as conn:
        cursor = conn.cursor()

        # Durable local key-value blobs (query history caches)
        cursor.execute('''
            CREATE TABLE IF NOT EXISTS local_kv (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        ''')

        cursor.execute('''
            CREATE TABLE IF NOT EXISTS analysis_records (
                id TEXT PRIMARY KEY,
                text TEXT,
                score REAL,
                created_at TIMESTAMP NOT NULL
            )
        ''')

        # feature_vector holds a JSON array; dimension is not enforced here
        cursor.execute('''
            CREATE TABLE IF NOT EXISTS analysis_features (
                record_id TEXT PRIMARY KEY,
                feature_vector TEXT NOT NULL,
                created_at TIMESTAMP NOT NULL
            )
        ''')

        # Create indexes for recency scans
        cursor.execute('CREATE INDEX IF NOT EXISTS idx_analysis_records_created ON analysis_records(created_at DESC)')
        cursor.execute('CREATE INDEX IF NOT EXISTS idx_analysis_features_created ON analysis_features(created_at DESC)')

        conn.commit()


def health_check(db_path: str = None):
    """Check database health."""
    try:
        with get_db(db_path) as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT name FROM sqlite_master WHERE type='table';")
            table_names = [table[0] for table in cursor.fetchall()]
            return all(table in table_names for table in REQUIRED_TABLES)
    except sqlite3.Error:
        return False
