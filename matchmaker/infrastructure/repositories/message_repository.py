"""Repository for direct message persistence."""

import sqlite3
from typing import List, Optional

from ...domain.models.message import ConversationSummary, Message
from ..persistence.sqlite import SQLiteDatabase


class MessageRepository:
    """Stores messages exactly as handed over; encryption happens upstream."""

    def __init__(self, database: SQLiteDatabase):
        self._db = database

    def create(self, sender_id: str, receiver_id: str, content: str, timestamp: str) -> Message:
        result = self._db.execute(
            """
            INSERT INTO messages (sender_id, receiver_id, content, timestamp, is_read)
            VALUES (?, ?, ?, ?, 0)
            """,
            (sender_id, receiver_id, content, timestamp),
        )
        return Message(
            id=result.last_row_id,
            sender_id=sender_id,
            receiver_id=receiver_id,
            content=content,
            timestamp=timestamp,
            is_read=False,
        )

    def get_by_id(self, message_id: int) -> Optional[Message]:
        row = self._db.fetch_one("SELECT * FROM messages WHERE id = ?", (message_id,))
        return self._row_to_message(row) if row else None

    def list_between(self, user_id: str, other_id: str) -> List[Message]:
        rows = self._db.fetch_all(
            """
            SELECT * FROM messages
            WHERE (sender_id = ? AND receiver_id = ?)
               OR (sender_id = ? AND receiver_id = ?)
            ORDER BY timestamp ASC, id ASC
            """,
            (user_id, other_id, other_id, user_id),
        )
        return [self._row_to_message(row) for row in rows]

    def mark_read(self, sender_id: str, receiver_id: str) -> int:
        """Mark every unread message from ``sender_id`` to ``receiver_id`` as read."""
        result = self._db.execute(
            """
            UPDATE messages SET is_read = 1
            WHERE sender_id = ? AND receiver_id = ? AND is_read = 0
            """,
            (sender_id, receiver_id),
        )
        return result.row_count

    def count_unread(self, receiver_id: str) -> int:
        row = self._db.fetch_one(
            "SELECT COUNT(*) AS unread FROM messages WHERE receiver_id = ? AND is_read = 0",
            (receiver_id,),
        )
        return int(row["unread"]) if row else 0

    def list_conversations(self, user_id: str) -> List[ConversationSummary]:
        """
        Distinct counterparties of ``user_id`` with unread counts.

        Ordered by most recent message first. ``last_message`` is returned as
        stored (still encrypted). ``photo`` is None when the counterparty hides it.
        """
        rows = self._db.fetch_all(
            """
            WITH involved AS (
                SELECT
                    id,
                    content,
                    timestamp,
                    CASE WHEN sender_id = :me THEN receiver_id ELSE sender_id END AS other_id,
                    CASE WHEN receiver_id = :me AND is_read = 0 THEN 1 ELSE 0 END AS unread
                FROM messages
                WHERE sender_id = :me OR receiver_id = :me
            ),
            grouped AS (
                SELECT other_id, MAX(id) AS last_id, SUM(unread) AS unread_count
                FROM involved
                GROUP BY other_id
            )
            SELECT
                grouped.other_id,
                grouped.unread_count,
                last.content AS last_message,
                last.timestamp AS last_timestamp,
                users.name AS name,
                CASE WHEN users.show_photo = 1 THEN users.photo END AS photo
            FROM grouped
            JOIN messages AS last ON last.id = grouped.last_id
            LEFT JOIN users ON users.id = grouped.other_id
            ORDER BY grouped.last_id DESC
            """,
            {"me": user_id},
        )
        return [
            ConversationSummary(
                counterparty_id=row["other_id"],
                name=row["name"],
                photo=row["photo"],
                unread_count=int(row["unread_count"] or 0),
                last_message=row["last_message"],
                last_timestamp=row["last_timestamp"],
            )
            for row in rows
        ]

    def delete_for_user(self, user_id: str) -> int:
        result = self._db.execute(
            "DELETE FROM messages WHERE sender_id = ? OR receiver_id = ?",
            (user_id, user_id),
        )
        return result.row_count

    @staticmethod
    def _row_to_message(row: sqlite3.Row) -> Message:
        return Message(
            id=row["id"],
            sender_id=row["sender_id"],
            receiver_id=row["receiver_id"],
            content=row["content"],
            timestamp=row["timestamp"],
            is_read=bool(row["is_read"]),
        )
