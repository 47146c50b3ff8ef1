import sqlite3

import pytest

from matchmaker.domain.errors import ConflictError, ServerError
from matchmaker.infrastructure.persistence.sqlite import SQLiteDatabase
from matchmaker.infrastructure.repositories.message_repository import MessageRepository
from matchmaker.infrastructure.repositories.user_repository import (
    UserRepository,
    decode_qualities,
    encode_qualities,
)


@pytest.fixture
def database(tmp_path):
    db = SQLiteDatabase(tmp_path / "store.db", pool_size=2, timeout=0.5)
    yield db
    db.close()


def _columns(db, table):
    return {row["name"] for row in db.fetch_all(f"PRAGMA table_info({table})")}


def test_initialization_is_idempotent(tmp_path):
    path = tmp_path / "store.db"
    SQLiteDatabase(path).close()
    again = SQLiteDatabase(path)
    try:
        assert {"show_photo", "is_verified", "verification_code"} <= _columns(again, "users")
    finally:
        again.close()


def test_legacy_users_table_is_migrated(tmp_path):
    path = tmp_path / "legacy.db"
    conn = sqlite3.connect(path)
    conn.execute(
        """
        CREATE TABLE users (
            id TEXT PRIMARY KEY, name TEXT, email TEXT NOT NULL UNIQUE,
            password_hash TEXT NOT NULL, location TEXT, profession TEXT, about TEXT,
            qualities TEXT, looking_for TEXT, joined TEXT, photo TEXT, dob TEXT,
            show_age INTEGER NOT NULL DEFAULT 1
        )
        """
    )
    conn.execute(
        "INSERT INTO users (id, name, email, password_hash, qualities) VALUES (?, ?, ?, ?, ?)",
        ("legacy-1", "Old Timer", "old@example.com", "hash", "Kind, Funny"),
    )
    conn.commit()
    conn.close()

    db = SQLiteDatabase(path)
    try:
        user = UserRepository(db).get_by_id("legacy-1")
        assert user is not None
        assert user.show_photo is True
        assert user.is_verified is False
        assert user.verification_code is None
        assert user.qualities == ["Kind", "Funny"]
    finally:
        db.close()


def test_execute_reports_row_id_and_count(database):
    users = UserRepository(database)
    a = users.create("A", "a@example.com", "hash", "123456")
    b = users.create("B", "b@example.com", "hash", "654321")
    first = MessageRepository(database).create(a.id, b.id, "sealed", "2024-01-01T00:00:00.000Z")
    second = MessageRepository(database).create(a.id, b.id, "sealed", "2024-01-01T00:00:01.000Z")
    assert second.id == first.id + 1

    result = database.execute("UPDATE messages SET is_read = 1 WHERE receiver_id = ?", (b.id,))
    assert result.row_count == 2


def test_unique_email_surfaces_as_conflict(database):
    users = UserRepository(database)
    users.create("A", "a@example.com", "hash", "123456")
    with pytest.raises(ConflictError):
        users.create("A again", "a@example.com", "hash", "654321")


def test_update_profile_reports_missing_rows(database):
    assert UserRepository(database).update_profile("missing", {"location": "Nowhere"}) == 0


def test_closed_database_rejects_queries(tmp_path):
    db = SQLiteDatabase(tmp_path / "store.db")
    db.close()
    with pytest.raises(ServerError):
        db.fetch_all("SELECT * FROM users")


def test_qualities_encoding():
    assert encode_qualities(["Honest", "Calm"]) == '["Honest", "Calm"]'
    assert encode_qualities(None) is None
    assert decode_qualities('["Honest", "Calm"]') == ["Honest", "Calm"]
    assert decode_qualities("Honest, Calm ,") == ["Honest", "Calm"]
    assert decode_qualities("") == []
    assert decode_qualities(None) == []
    assert decode_qualities("null") == ["null"]
    assert decode_qualities("true") == ["true"]
    assert decode_qualities("42") == ["42"]


def test_close_releases_checked_out_connections(tmp_path):
    db = SQLiteDatabase(tmp_path / "store.db")
    with db._connection() as conn:
        db.close()
    with pytest.raises(sqlite3.ProgrammingError):
        conn.execute("SELECT 1")
