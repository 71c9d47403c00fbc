"""SQLite database utilities for Pydantic models.

Thin helpers around :mod:`sqlite3` that open connections with a uniform
transaction policy and deserialize rows into Pydantic models.
"""

import re
import sqlite3
from contextlib import contextmanager, suppress
from typing import TYPE_CHECKING, Literal, cast

from pydantic import BaseModel

if TYPE_CHECKING:
    from collections.abc import Iterator

# Valid SQL identifier pattern (alphanumeric and underscores, not starting with digit)
_IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

# SQLite-compatible value types
type SQLValue = str | int | float | bytes | None

# SQLite transaction isolation levels
type IsolationLevel = Literal["DEFERRED", "EXCLUSIVE", "IMMEDIATE"] | None


@contextmanager
def connect(
    path: str,
    *,
    timeout: float = 30.0,
    isolation_level: IsolationLevel = "IMMEDIATE",
    check_same_thread: bool = True,
    wal_mode: bool = True,
) -> Iterator[sqlite3.Connection]:
    """Context manager for SQLite connections with automatic transaction handling.

    Opens a connection, yields it for use, and handles cleanup. On successful
    completion, commits the transaction. On any exception, rolls back and
    re-raises. The connection is always closed on exit.

    Args:
        path: Database file path, or ``:memory:`` for in-memory database.
        timeout: Seconds to wait for a lock before raising OperationalError.
        isolation_level: Transaction isolation level (DEFERRED, IMMEDIATE, EXCLUSIVE).
        check_same_thread: If True, only the creating thread may use the connection.
        wal_mode: If True, enable WAL journal mode for better concurrency.

    Yields:
        SQLite connection with row_factory set to sqlite3.Row.

    Raises:
        sqlite3.OperationalError: If the database cannot be opened or a lock
            is not acquired within ``timeout``.
        Any exception raised within the context block (after rollback).

    Examples:
        >>> with connect(":memory:") as conn:
        ...     conn.execute("CREATE TABLE records (id INTEGER PRIMARY KEY, name TEXT)")
        ...     conn.execute("INSERT INTO records (name) VALUES (?)", ("first",))
        >>> # Transaction is committed automatically on successful exit
    """
    conn = sqlite3.connect(
        path,
        timeout=timeout,
        isolation_level=isolation_level,
        check_same_thread=check_same_thread,
    )
    conn.row_factory = sqlite3.Row

    if wal_mode and path != ":memory:":
        with suppress(sqlite3.OperationalError):
            _ = conn.execute("PRAGMA journal_mode=WAL")
        _ = conn.execute(f"PRAGMA busy_timeout={int(timeout * 1000)}")

    try:
        yield conn
        conn.commit()
    except BaseException:
        with suppress(Exception):
            conn.rollback()
        raise
    finally:
        conn.close()


def safe_identifier(name: str) -> str:
    """Validate and quote a SQL identifier.

    Args:
        name: The identifier to validate and quote.

    Returns:
        The quoted identifier (e.g., ``"versions"``).

    Raises:
        ValueError: If the identifier contains invalid characters.

    Examples:
        >>> safe_identifier("versions")
        '"versions"'
        >>> safe_identifier("123abc")
        Traceback (most recent call last):
            ...
        ValueError: Invalid SQL identifier: '123abc'
    """
    if not _IDENTIFIER_RE.match(name):
        msg = f"Invalid SQL identifier: {name!r}"
        raise ValueError(msg)
    return f'"{name}"'


def fetch_one[T: BaseModel](
    conn: sqlite3.Connection,
    model: type[T],
    sql: str,
    params: tuple[SQLValue, ...] = (),
) -> T | None:
    """Fetch a single row and return it as a Pydantic model.

    Args:
        conn: SQLite connection.
        model: Pydantic model class to deserialize into.
        sql: SQL query string.
        params: Query parameters.

    Returns:
        Model instance or None if no row found.
    """
    row = cast("sqlite3.Row | None", conn.execute(sql, params).fetchone())
    if row is None:
        return None
    return model.model_validate(dict(row))


def fetch_all[T: BaseModel](
    conn: sqlite3.Connection,
    model: type[T],
    sql: str,
    params: tuple[SQLValue, ...] = (),
) -> list[T]:
    """Fetch all rows and return them as Pydantic models.

    Args:
        conn: SQLite connection.
        model: Pydantic model class to deserialize into.
        sql: SQL query string.
        params: Query parameters.

    Returns:
        List of model instances (empty if no rows).
    """
    rows = cast("list[sqlite3.Row]", conn.execute(sql, params).fetchall())
    return [model.model_validate(dict(row)) for row in rows]


def insert(
    conn: sqlite3.Connection,
    table: str,
    obj: BaseModel,
    exclude: set[str] | None = None,
) -> int:
    """Insert a model into a table without committing.

    Args:
        conn: SQLite connection.
        table: Table name.
        obj: Pydantic model to insert.
        exclude: Field names to exclude from the insert.

    Returns:
        The lastrowid of the inserted row, or 0 if not available.
    """
    table = safe_identifier(table)
    data = obj.model_dump(mode="json", exclude=exclude or set(), exclude_none=True)
    cols = ", ".join(safe_identifier(k) for k in data)
    placeholders = ", ".join(f":{k}" for k in data)
    cursor = conn.execute(
        f"INSERT INTO {table} ({cols}) VALUES ({placeholders})",  # noqa: S608
        data,
    )
    return cursor.lastrowid or 0
