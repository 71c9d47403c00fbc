"""SQLite-backed version store."""

import sqlite3
from contextlib import contextmanager
from typing import TYPE_CHECKING, NoReturn, cast

from promptstash.exceptions import (
    ArtifactNotFoundError,
    StorageUnavailableError,
    VersionConflictError,
    VersionNotFoundError,
)
from promptstash.utils import connect, fetch_all, fetch_one, insert

from ._integrity import check_history
from ._models import Artifact, ArtifactRecord, Version, utc_now

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path

    from structlog.typing import FilteringBoundLogger

    from promptstash.enums import ArtifactKind

    from ._integrity import IntegrityProblem

_SQLITE_SCHEMA = """
CREATE TABLE IF NOT EXISTS artifacts (
    id TEXT PRIMARY KEY,
    kind TEXT NOT NULL,
    path TEXT NOT NULL,
    current_version INTEGER NOT NULL CHECK (current_version >= 1),
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS versions (
    artifact_id TEXT NOT NULL REFERENCES artifacts (id),
    number INTEGER NOT NULL CHECK (number >= 1),
    content TEXT NOT NULL,
    created_at TEXT NOT NULL,
    created_by TEXT NOT NULL,
    reverted_from INTEGER,
    UNIQUE (artifact_id, number)
);
"""

_SQL_SELECT_RECORD = "SELECT * FROM artifacts WHERE id = ?"
_SQL_SELECT_RECORDS = "SELECT * FROM artifacts ORDER BY id"
_SQL_SELECT_VERSION = "SELECT * FROM versions WHERE artifact_id = ? AND number = ?"
_SQL_SELECT_HISTORY = "SELECT * FROM versions WHERE artifact_id = ? ORDER BY number"
_SQL_SELECT_NUMBERS = "SELECT artifact_id, number FROM versions ORDER BY artifact_id, number"
_SQL_ADVANCE_POINTER = """
UPDATE artifacts
SET current_version = :next, updated_at = :now
WHERE id = :artifact_id AND current_version = :expected
"""

_LOCK_MESSAGES = ("database is locked", "database table is locked", "busy")


def _is_lock_error(error: sqlite3.OperationalError) -> bool:
    text = str(error).lower()
    return any(message in text for message in _LOCK_MESSAGES)


class SQLiteVersionStore:
    """SQLite-backed implementation of the version store.

    Each write runs in a single ``BEGIN IMMEDIATE`` transaction that advances
    the artifact pointer with a compare-and-set update before inserting the
    new version row. Safe for concurrent writers across threads and
    processes sharing the database file.
    """

    _db_path: str
    _timeout: float
    _logger: FilteringBoundLogger | None

    def __init__(
        self,
        db_path: str | Path,
        *,
        timeout: float = 5.0,
        logger: FilteringBoundLogger | None = None,
    ) -> None:
        """Initialize a SQLite version store.

        Creates the database file and schema if they don't exist.

        Args:
            db_path: Path to the SQLite database file.
            timeout: Seconds to wait for a database lock.
            logger: Optional logger for debug-level operation logging.
                If None, no logging is performed.
        """
        self._db_path = str(db_path)
        self._timeout = timeout
        self._logger = logger
        self._ensure_schema()

    @property
    def db_path(self) -> str:
        return self._db_path

    @contextmanager
    def _connect(self, operation: str) -> Iterator[sqlite3.Connection]:
        """Open a connection, mapping lock timeouts to StorageUnavailableError."""
        try:
            with connect(self._db_path, timeout=self._timeout) as conn:
                yield conn
        except sqlite3.OperationalError as e:
            if not _is_lock_error(e):
                raise
            if self._logger:
                self._logger.warning(
                    "store_unavailable", operation=operation, timeout=self._timeout
                )
            msg = f"Timed out after {self._timeout}s waiting for {self._db_path}"
            raise StorageUnavailableError(
                msg, operation=operation, timeout=self._timeout, cause=e
            ) from e

    def _ensure_schema(self) -> None:
        """Create the database schema if it doesn't exist."""
        with self._connect("ensure_schema") as conn:
            _ = conn.executescript(_SQLITE_SCHEMA)

    def _append(  # noqa: PLR0913
        self,
        conn: sqlite3.Connection,
        artifact_id: str,
        content: str,
        author: str,
        expected_base_version: int,
        reverted_from: int | None = None,
    ) -> Version:
        now = utc_now()
        cursor = conn.execute(
            _SQL_ADVANCE_POINTER,
            {
                "next": expected_base_version + 1,
                "now": now,
                "artifact_id": artifact_id,
                "expected": expected_base_version,
            },
        )
        if cursor.rowcount == 0:
            record = fetch_one(conn, ArtifactRecord, _SQL_SELECT_RECORD, (artifact_id,))
            if record is None:
                msg = f"Artifact not found: {artifact_id}"
                raise ArtifactNotFoundError(msg, artifact_id=artifact_id)
            self._conflict(artifact_id, expected_base_version, record.current_version)

        version = Version(
            artifact_id=artifact_id,
            number=expected_base_version + 1,
            content=content,
            created_at=now,
            created_by=author,
            reverted_from=reverted_from,
        )
        try:
            _ = insert(conn, "versions", version)
        except sqlite3.IntegrityError as e:
            self._conflict(artifact_id, expected_base_version, None, cause=e)
        return version

    def _conflict(
        self,
        artifact_id: str,
        expected: int,
        actual: int | None,
        *,
        cause: Exception | None = None,
    ) -> NoReturn:
        if self._logger:
            self._logger.debug(
                "store_conflict", artifact_id=artifact_id, expected=expected, actual=actual
            )
        msg = f"Artifact {artifact_id} is no longer at version {expected}"
        raise VersionConflictError(
            msg, artifact_id=artifact_id, expected=expected, actual=actual
        ) from cause

    def create(
        self,
        artifact_id: str,
        kind: ArtifactKind,
        path: str,
        content: str,
        author: str,
    ) -> Version:
        """Register a new artifact with its first version.

        Raises:
            VersionConflictError: If the artifact already exists.
            StorageUnavailableError: If the database stays locked past the timeout.
        """
        now = utc_now()
        record = ArtifactRecord(
            id=artifact_id,
            kind=kind,
            path=path,
            current_version=1,
            created_at=now,
            updated_at=now,
        )
        version = Version(
            artifact_id=artifact_id,
            number=1,
            content=content,
            created_at=now,
            created_by=author,
        )
        with self._connect("create") as conn:
            try:
                _ = insert(conn, "artifacts", record)
            except sqlite3.IntegrityError as e:
                existing = fetch_one(
                    conn, ArtifactRecord, _SQL_SELECT_RECORD, (artifact_id,)
                )
                msg = f"Artifact {artifact_id} already exists"
                raise VersionConflictError(
                    msg,
                    artifact_id=artifact_id,
                    expected=0,
                    actual=existing.current_version if existing else None,
                ) from e
            _ = insert(conn, "versions", version)

        if self._logger:
            self._logger.debug(
                "store_create", artifact_id=artifact_id, kind=str(kind), author=author
            )
        return version

    def commit(
        self,
        artifact_id: str,
        content: str,
        author: str,
        expected_base_version: int,
    ) -> Version:
        """Append a version on top of ``expected_base_version``.

        Raises:
            ArtifactNotFoundError: If the artifact does not exist.
            VersionConflictError: If the current version is not the expected one.
            StorageUnavailableError: If the database stays locked past the timeout.
        """
        with self._connect("commit") as conn:
            version = self._append(
                conn, artifact_id, content, author, expected_base_version
            )
        if self._logger:
            self._logger.debug(
                "store_commit",
                artifact_id=artifact_id,
                number=version.number,
                author=author,
            )
        return version

    def revert(
        self,
        artifact_id: str,
        target_version: int,
        author: str,
        expected_base_version: int,
    ) -> Version:
        """Append a copy of an earlier version's content.

        Raises:
            ArtifactNotFoundError: If the artifact does not exist.
            VersionNotFoundError: If the target version does not exist.
            VersionConflictError: If the current version is not the expected one.
            StorageUnavailableError: If the database stays locked past the timeout.
        """
        with self._connect("revert") as conn:
            if fetch_one(conn, ArtifactRecord, _SQL_SELECT_RECORD, (artifact_id,)) is None:
                msg = f"Artifact not found: {artifact_id}"
                raise ArtifactNotFoundError(msg, artifact_id=artifact_id)
            target = self._find(conn, artifact_id, target_version)
            version = self._append(
                conn,
                artifact_id,
                target.content,
                author,
                expected_base_version,
                reverted_from=target_version,
            )
        if self._logger:
            self._logger.debug(
                "store_revert",
                artifact_id=artifact_id,
                number=version.number,
                reverted_from=target_version,
                author=author,
            )
        return version

    @staticmethod
    def _find(conn: sqlite3.Connection, artifact_id: str, number: int) -> Version:
        version = fetch_one(conn, Version, _SQL_SELECT_VERSION, (artifact_id, number))
        if version is None:
            msg = f"Version {number} of {artifact_id} not found"
            raise VersionNotFoundError(msg, artifact_id=artifact_id, number=number)
        return version

    def get_history(self, artifact_id: str) -> list[Version]:
        with self._connect("get_history") as conn:
            return fetch_all(conn, Version, _SQL_SELECT_HISTORY, (artifact_id,))

    def get_version(self, artifact_id: str, number: int) -> Version:
        with self._connect("get_version") as conn:
            return self._find(conn, artifact_id, number)

    def get_artifact(self, artifact_id: str) -> Artifact:
        with self._connect("get_artifact") as conn:
            record = fetch_one(conn, ArtifactRecord, _SQL_SELECT_RECORD, (artifact_id,))
            if record is None:
                msg = f"Artifact not found: {artifact_id}"
                raise ArtifactNotFoundError(msg, artifact_id=artifact_id)
            current = self._find(conn, artifact_id, record.current_version)
        return Artifact.from_record(record, current.content)

    def list_artifacts(self) -> list[Artifact]:
        with self._connect("list_artifacts") as conn:
            records = fetch_all(conn, ArtifactRecord, _SQL_SELECT_RECORDS)
            snapshot = [
                (record, self._find(conn, record.id, record.current_version).content)
                for record in records
            ]
        return [Artifact.from_record(record, content) for record, content in snapshot]

    def check_integrity(self) -> list[IntegrityProblem]:
        """Scan the whole ledger for gaps, duplicates and stale pointers."""
        with self._connect("check_integrity") as conn:
            records = fetch_all(conn, ArtifactRecord, _SQL_SELECT_RECORDS)
            rows = cast(
                "list[sqlite3.Row]", conn.execute(_SQL_SELECT_NUMBERS).fetchall()
            )

        numbers: dict[str, list[int]] = {}
        for row in rows:
            numbers.setdefault(str(row["artifact_id"]), []).append(int(row["number"]))

        problems = [
            problem
            for record in records
            for problem in check_history(
                record.id, numbers.get(record.id, []), record.current_version
            )
        ]
        if self._logger:
            self._logger.debug("store_check_integrity", problems=len(problems))
        return problems
