"""Repository for User persistence."""

import json
import secrets
import sqlite3
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from ...domain.errors import ConflictError
from ...domain.models.user import User
from ..persistence.sqlite import SQLiteDatabase

# Columns a profile update may touch. Anything else is ignored upstream.
PROFILE_COLUMNS = (
    "name",
    "location",
    "profession",
    "about",
    "qualities",
    "looking_for",
    "photo",
    "dob",
    "show_age",
    "show_photo",
)

_BOOLEAN_COLUMNS = {"show_age", "show_photo"}


class UserRepository:
    """Repository for managing User entities in SQLite."""

    def __init__(self, database: SQLiteDatabase):
        self._db = database

    def create(
        self,
        name: str,
        email: str,
        password_hash: str,
        verification_code: str,
        profile: Optional[Dict[str, Any]] = None,
    ) -> User:
        """Insert a new unverified user and return it."""
        user_id = secrets.token_hex(12)
        values = {column: None for column in PROFILE_COLUMNS}
        values.update({"show_age": 1, "show_photo": 1})
        supplied = {key: value for key, value in (profile or {}).items() if value is not None}
        values.update(self._serialize(supplied))
        values["name"] = name

        try:
            self._insert(user_id, email, password_hash, verification_code, values)
        except sqlite3.IntegrityError as exc:
            # A concurrent signup for the same email won the race.
            if "users.email" in str(exc):
                raise ConflictError("User already exists") from exc
            raise
        user = self.get_by_id(user_id)
        if user is None:
            raise RuntimeError("Failed to persist user.")
        return user

    def _insert(
        self,
        user_id: str,
        email: str,
        password_hash: str,
        verification_code: str,
        values: Dict[str, Any],
    ) -> None:
        self._db.execute(
            """
            INSERT INTO users (
                id, name, email, password_hash, location, profession, about,
                qualities, looking_for, joined, photo, dob, show_age, show_photo,
                is_verified, verification_code
            )
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, 0, ?)
            """,
            (
                user_id,
                values["name"],
                email,
                password_hash,
                values["location"],
                values["profession"],
                values["about"],
                values["qualities"] if values["qualities"] is not None else "[]",
                values["looking_for"],
                self._now(),
                values["photo"],
                values["dob"],
                values["show_age"],
                values["show_photo"],
                verification_code,
            ),
        )

    def get_by_id(self, user_id: str) -> Optional[User]:
        row = self._db.fetch_one("SELECT * FROM users WHERE id = ?", (user_id,))
        return self._row_to_user(row) if row else None

    def get_by_email(self, email: str) -> Optional[User]:
        row = self._db.fetch_one("SELECT * FROM users WHERE email = ?", (email,))
        return self._row_to_user(row) if row else None

    def list_all(self) -> List[User]:
        rows = self._db.fetch_all("SELECT * FROM users ORDER BY joined DESC")
        return [self._row_to_user(row) for row in rows]

    def mark_verified(self, user_id: str) -> None:
        """Flip the verification flag and clear the pending code in one statement."""
        self._db.execute(
            "UPDATE users SET is_verified = 1, verification_code = NULL WHERE id = ?",
            (user_id,),
        )

    def update_verification_code(self, user_id: str, code: str) -> None:
        self._db.execute(
            "UPDATE users SET verification_code = ? WHERE id = ?",
            (code, user_id),
        )

    def update_profile(self, user_id: str, fields: Dict[str, Any]) -> int:
        """Apply allow-listed column updates. Returns the number of rows touched."""
        values = self._serialize(fields)
        if not values:
            return 0
        assignments = ", ".join(f"{column} = ?" for column in values)
        params: List[Any] = list(values.values())
        params.append(user_id)
        result = self._db.execute(f"UPDATE users SET {assignments} WHERE id = ?", params)
        return result.row_count

    def delete(self, user_id: str) -> int:
        result = self._db.execute("DELETE FROM users WHERE id = ?", (user_id,))
        return result.row_count

    # Helpers ----------------------------------------------------------------
    @staticmethod
    def _now() -> str:
        return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")

    @staticmethod
    def _serialize(fields: Dict[str, Any]) -> Dict[str, Any]:
        values: Dict[str, Any] = {}
        for column in PROFILE_COLUMNS:
            if column not in fields:
                continue
            value = fields[column]
            if column == "qualities":
                value = encode_qualities(value)
            elif column in _BOOLEAN_COLUMNS:
                value = 1 if value else 0
            values[column] = value
        return values

    @staticmethod
    def _row_to_user(row: sqlite3.Row) -> User:
        return User(
            id=row["id"],
            name=row["name"],
            email=row["email"],
            password_hash=row["password_hash"],
            location=row["location"],
            profession=row["profession"],
            about=row["about"],
            qualities=decode_qualities(row["qualities"]),
            looking_for=row["looking_for"],
            joined=row["joined"],
            photo=row["photo"],
            dob=row["dob"],
            show_age=bool(row["show_age"]),
            show_photo=bool(row["show_photo"]),
            is_verified=bool(row["is_verified"]),
            verification_code=row["verification_code"],
        )


def encode_qualities(value: Any) -> Optional[str]:
    """Serialize the qualities tag list into its stored text form."""
    if value is None:
        return None
    if isinstance(value, (list, tuple)):
        return json.dumps([str(item) for item in value], ensure_ascii=False)
    return str(value)


def decode_qualities(raw: Optional[str]) -> List[str]:
    """Inverse of :func:`encode_qualities`, tolerant of comma separated legacy values."""
    if not raw:
        return []
    try:
        decoded = json.loads(raw)
    except ValueError:
        decoded = None
    if isinstance(decoded, list):
        return [str(item) for item in decoded]
    return [item.strip() for item in raw.split(",") if item.strip()]
