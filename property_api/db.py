# property_api/db.py
# Database abstraction layer: PostgreSQL in production, SQLite for local dev

import logging
import threading
from contextlib import contextmanager
from typing import Any, Dict, Generator, List, Optional, Union
from urllib.parse import urlparse

from sqlalchemy import create_engine, pool, text
from sqlalchemy.engine import Connection, CursorResult, Engine

from property_api.config import DATABASE_URL

logger = logging.getLogger(__name__)

# Process-wide engine, created on first use and reused by every request
_engine: Optional[Engine] = None
_engine_lock = threading.Lock()


SCHEMA_STATEMENTS = (
    """
    CREATE TABLE IF NOT EXISTS accounts (
        id TEXT PRIMARY KEY,
        name TEXT NOT NULL,
        email TEXT NOT NULL UNIQUE,
        password_hash TEXT NOT NULL,
        role TEXT NOT NULL,
        created_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS listings (
        id TEXT PRIMARY KEY,
        title TEXT NOT NULL,
        description TEXT,
        price DOUBLE PRECISION NOT NULL,
        location TEXT NOT NULL,
        status TEXT NOT NULL DEFAULT 'available',
        created_by TEXT NOT NULL REFERENCES accounts(id),
        is_deleted INTEGER NOT NULL DEFAULT 0,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_listings_active_created ON listings(is_deleted, created_at)",
    "CREATE INDEX IF NOT EXISTS idx_listings_created_by ON listings(created_by)",
)


def is_sqlite_url(url: str) -> bool:
    return url.startswith("sqlite")


def init_engine(url: Optional[str] = None) -> Engine:
    """Create the SQLAlchemy engine on first call and return it.

    Safe to call repeatedly: later calls return the existing engine and
    ignore ``url``. Use :func:`dispose_engine` to switch databases.
    """
    global _engine

    if _engine is not None:
        return _engine

    with _engine_lock:
        if _engine is not None:
            return _engine

        database_url = url or DATABASE_URL
        parsed = urlparse(database_url)
        if not parsed.scheme:
            raise ValueError(f"Invalid DATABASE_URL: {database_url[:20]}...")

        if is_sqlite_url(database_url):
            # Requests are served from a threadpool; SQLite must allow cross-thread use
            _engine = create_engine(
                database_url,
                connect_args={"check_same_thread": False},
            )
            logger.info("[DB] Using SQLite (local dev mode): %s", parsed.path or ":memory:")
        else:
            _engine = create_engine(
                database_url,
                poolclass=pool.QueuePool,
                pool_size=5,
                max_overflow=10,
                pool_pre_ping=True,  # Verify connections before use
            )
            logger.info("[DB] Using %s (%s)", parsed.scheme, parsed.hostname)

    return _engine


def dispose_engine() -> None:
    """Close pooled connections and forget the engine."""
    global _engine

    with _engine_lock:
        if _engine is not None:
            _engine.dispose()
            _engine = None


@contextmanager
def get_db_connection() -> Generator[Connection, None, None]:
    """
    Context manager for a transactional connection.
    Commits when the block exits cleanly, rolls back on error.
    """
    engine = init_engine()
    with engine.begin() as conn:
        yield conn


def execute_query(
    conn: Connection,
    query: str,
    params: Union[Dict[str, Any], None] = None,
) -> CursorResult:
    """
    Execute a query with named parameters (``:name`` placeholders).

    Args:
        conn: Database connection
        query: SQL query
        params: Bind parameters by name

    Returns:
        SQLAlchemy cursor result
    """
    return conn.execute(text(query), params or {})


def row_to_dict(row) -> Dict[str, Any]:
    """Convert a result row mapping to a plain dict ({} for None)."""
    if row is None:
        return {}
    return dict(row)


def fetch_one(conn: Connection, query: str, params: Union[Dict[str, Any], None] = None) -> Optional[Dict[str, Any]]:
    row = execute_query(conn, query, params).mappings().first()
    if row is None:
        return None
    return row_to_dict(row)


def fetch_all(conn: Connection, query: str, params: Union[Dict[str, Any], None] = None) -> List[Dict[str, Any]]:
    return [row_to_dict(row) for row in execute_query(conn, query, params).mappings().all()]


def init_db() -> None:
    """Create tables and indexes if they do not already exist."""
    with get_db_connection() as conn:
        for statement in SCHEMA_STATEMENTS:
            execute_query(conn, statement)
    logger.debug("[DB] Schema ensured")
