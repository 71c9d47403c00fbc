import sqlite3
from pathlib import Path
from typing import ClassVar

import pytest
from pydantic import BaseModel, ConfigDict

from promptstash.utils import connect, fetch_all, fetch_one, insert, safe_identifier


class Item(BaseModel):
    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True)

    name: str
    size: int
    note: str | None = None


_SCHEMA = "CREATE TABLE items (name TEXT PRIMARY KEY, size INTEGER, note TEXT)"


@pytest.fixture
def db_path(tmp_path: Path) -> str:
    path = str(tmp_path / "test.db")
    with connect(path) as conn:
        _ = conn.execute(_SCHEMA)
    return path


class TestSafeIdentifier:
    def test_quotes_valid_identifier(self) -> None:
        assert safe_identifier("versions") == '"versions"'

    @pytest.mark.parametrize("name", ["123abc", "a b", "x;DROP", ""])
    def test_rejects_invalid_identifier(self, name: str) -> None:
        with pytest.raises(ValueError, match="Invalid SQL identifier"):
            _ = safe_identifier(name)


class TestConnect:
    def test_commits_on_success(self, db_path: str) -> None:
        with connect(db_path) as conn:
            _ = insert(conn, "items", Item(name="a", size=1))

        with connect(db_path) as conn:
            assert fetch_one(conn, Item, "SELECT * FROM items WHERE name = ?", ("a",)) == Item(
                name="a", size=1
            )

    def test_rolls_back_on_error(self, db_path: str) -> None:
        with pytest.raises(RuntimeError), connect(db_path) as conn:
            _ = insert(conn, "items", Item(name="a", size=1))
            msg = "boom"
            raise RuntimeError(msg)

        with connect(db_path) as conn:
            assert fetch_all(conn, Item, "SELECT * FROM items") == []

    def test_uses_wal_mode(self, db_path: str) -> None:
        with connect(db_path) as conn:
            mode = conn.execute("PRAGMA journal_mode").fetchone()[0]

        assert mode == "wal"

    def test_rows_are_mappings(self) -> None:
        with connect(":memory:") as conn:
            row = conn.execute("SELECT 1 AS one").fetchone()

        assert isinstance(row, sqlite3.Row)
        assert row["one"] == 1


class TestInsertAndFetch:
    def test_insert_skips_none_values(self, db_path: str) -> None:
        with connect(db_path) as conn:
            _ = insert(conn, "items", Item(name="a", size=1))
            row = conn.execute("SELECT note FROM items").fetchone()

        assert row["note"] is None

    def test_insert_exclude(self, db_path: str) -> None:
        with connect(db_path) as conn:
            _ = insert(conn, "items", Item(name="a", size=1, note="n"), exclude={"note"})
            item = fetch_one(conn, Item, "SELECT * FROM items")

        assert item is not None
        assert item.note is None

    def test_duplicate_key_raises_integrity_error(self, db_path: str) -> None:
        with pytest.raises(sqlite3.IntegrityError), connect(db_path) as conn:
            _ = insert(conn, "items", Item(name="a", size=1))
            _ = insert(conn, "items", Item(name="a", size=2))

    def test_fetch_all_in_query_order(self, db_path: str) -> None:
        with connect(db_path) as conn:
            for name, size in (("b", 2), ("a", 1)):
                _ = insert(conn, "items", Item(name=name, size=size))
            items = fetch_all(conn, Item, "SELECT * FROM items ORDER BY size")

        assert [item.name for item in items] == ["a", "b"]

    def test_fetch_one_missing(self, db_path: str) -> None:
        with connect(db_path) as conn:
            assert fetch_one(conn, Item, "SELECT * FROM items WHERE name = ?", ("z",)) is None
