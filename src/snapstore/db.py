"""
Database connection and query utilities.

Provides a simple interface for executing queries with psycopg,
returning results as dictionaries, either all at once or streamed
through a server-side cursor.

For testing, use set_connection_override() to inject a connection
that will be used instead of creating new ones. This enables
transaction rollback between tests.
"""

import logging
import uuid
from contextlib import contextmanager
from typing import Any, Iterator, Mapping, Sequence

import psycopg
from psycopg.rows import dict_row

from snapstore.config import config
from snapstore.query import quote_identifier

logger = logging.getLogger(__name__)

# =============================================================================
# Connection Override (for testing)
# =============================================================================

_connection_override: psycopg.Connection | None = None


def set_connection_override(conn: psycopg.Connection) -> None:
    """
    Set a connection to use instead of creating new ones.

    Used by test fixtures to ensure all database operations run
    within a single transaction that can be rolled back.

    Args:
        conn: The connection to use for all subsequent operations
    """
    global _connection_override
    _connection_override = conn


def clear_connection_override() -> None:
    """Clear the connection override, restoring normal behavior."""
    global _connection_override
    _connection_override = None


# =============================================================================
# Connection Management
# =============================================================================


@contextmanager
def get_connection():
    """
    Context manager for database connections.

    In normal operation:
        - Opens a new connection
        - Commits on successful exit
        - Rolls back on exception
        - Closes connection when done

    With override set (testing):
        - Returns the override connection
        - Does NOT commit, rollback, or close
        - Caller (test fixture) manages the transaction

    Usage:
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute("SELECT ...")
    """
    if _connection_override is not None:
        yield _connection_override
        return

    conn = psycopg.connect(config.database_url)
    try:
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


@contextmanager
def get_cursor():
    """
    Context manager for a cursor with dict rows.

    Usage:
        with get_cursor() as cur:
            cur.execute("SELECT * FROM articles")
            rows = cur.fetchall()  # List of dicts
    """
    with get_connection() as conn:
        with conn.cursor(row_factory=dict_row) as cur:
            yield cur


# =============================================================================
# Query Helpers
# =============================================================================


def execute(query: str, params: tuple = None) -> int:
    """
    Execute a query without returning results.

    Use for INSERT, UPDATE, DELETE when you only need the affected row count.

    Args:
        query: SQL query with %s placeholders
        params: Tuple of parameter values

    Returns:
        Number of rows affected
    """
    logger.debug("execute: %s %r", query, params)
    with get_cursor() as cur:
        cur.execute(query, params)
        return cur.rowcount


def fetch_one(query: str, params: tuple = None) -> dict[str, Any] | None:
    """
    Execute a query and return a single row as dict.

    Returns:
        Dict of column names to values, or None if no row found
    """
    logger.debug("fetch_one: %s %r", query, params)
    with get_connection() as conn:
        with conn.cursor(row_factory=dict_row) as cur:
            cur.execute(query, params)
            return cur.fetchone()


def fetch_all(query: str, params: tuple = None) -> list[dict[str, Any]]:
    """
    Execute a query and return all rows as list of dicts.

    Returns:
        List of dicts, empty list if no rows found
    """
    logger.debug("fetch_all: %s %r", query, params)
    with get_connection() as conn:
        with conn.cursor(row_factory=dict_row) as cur:
            cur.execute(query, params)
            return cur.fetchall()


def stream(query: str, params: tuple = None, itersize: int = None) -> Iterator[dict[str, Any]]:
    """
    Execute a query and yield rows one at a time from a server-side cursor.

    Nothing is sent to the server until the first row is requested. The
    cursor and its connection stay open until the generator is exhausted
    or closed; call close() on a partially consumed generator to release
    them.

    Args:
        query: SQL query with %s placeholders
        params: Tuple of parameter values
        itersize: Rows fetched per round-trip (defaults to config.stream_itersize)
    """
    logger.debug("stream: %s %r", query, params)
    with get_connection() as conn:
        name = f"snapstore_{uuid.uuid4().hex}"
        with conn.cursor(name=name, row_factory=dict_row) as cur:
            cur.itersize = itersize or config.stream_itersize
            cur.execute(query, params)
            yield from cur


# =============================================================================
# Write Helpers
# =============================================================================


def _placeholder(column: str, type_hints: Mapping[str, str] | None) -> str:
    if type_hints and column in type_hints:
        return f"%s::{type_hints[column]}"
    return "%s"


def exists(table: str, criteria: Mapping[str, Any], type_hints: Mapping[str, str] = None) -> bool:
    """Check whether any row matches all of the equality criteria."""
    conditions = " AND ".join(
        f"{quote_identifier(c)} = {_placeholder(c, type_hints)}" for c in criteria
    )
    row = fetch_one(
        f"SELECT 1 AS found FROM {quote_identifier(table)} WHERE {conditions} LIMIT 1",
        tuple(criteria.values()),
    )
    return row is not None


def insert(table: str, data: Mapping[str, Any], type_hints: Mapping[str, str] = None) -> int:
    """
    Insert a single row.

    Args:
        table: Target table name
        data: Column name to value mapping
        type_hints: Optional column name to PostgreSQL type mapping, rendered as casts

    Returns:
        Number of rows inserted
    """
    columns = ", ".join(quote_identifier(c) for c in data)
    values = ", ".join(_placeholder(c, type_hints) for c in data)
    return execute(
        f"INSERT INTO {quote_identifier(table)} ({columns}) VALUES ({values})",
        tuple(data.values()),
    )


def update(
    table: str,
    data: Mapping[str, Any],
    criteria: Mapping[str, Any],
    type_hints: Mapping[str, str] = None,
) -> int:
    """
    Update every row matching all of the equality criteria.

    Returns:
        Number of rows updated
    """
    assignments = ", ".join(f"{quote_identifier(c)} = {_placeholder(c, type_hints)}" for c in data)
    conditions = " AND ".join(
        f"{quote_identifier(c)} = {_placeholder(c, type_hints)}" for c in criteria
    )
    return execute(
        f"UPDATE {quote_identifier(table)} SET {assignments} WHERE {conditions}",
        tuple(data.values()) + tuple(criteria.values()),
    )


def insert_or_update_on_conflict(
    table: str,
    data: Mapping[str, Any],
    conflict_columns: Sequence[str],
    type_hints: Mapping[str, str] = None,
) -> int:
    """
    Insert a row, updating the existing one when the conflict columns collide.

    Requires a unique constraint or index over conflict_columns.

    Returns:
        Number of rows inserted or updated
    """
    columns = ", ".join(quote_identifier(c) for c in data)
    values = ", ".join(_placeholder(c, type_hints) for c in data)
    target = ", ".join(quote_identifier(c) for c in conflict_columns)
    updates = [
        f"{quote_identifier(c)} = EXCLUDED.{quote_identifier(c)}"
        for c in data
        if c not in conflict_columns
    ]
    if updates:
        action = "DO UPDATE SET " + ", ".join(updates)
    else:
        action = "DO NOTHING"
    return execute(
        f"""
        INSERT INTO {quote_identifier(table)} ({columns})
        VALUES ({values})
        ON CONFLICT ({target}) {action}
        """,
        tuple(data.values()),
    )
