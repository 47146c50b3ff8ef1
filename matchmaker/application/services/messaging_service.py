from __future__ import annotations

import logging
import sqlite3
from datetime import datetime, timezone
from typing import List, Optional

from ...domain.errors import BadRequestError, NotFoundError, ServerError, UnauthorizedError
from ...domain.models import ConversationSummary, Message
from ...domain.ports.persistence import MessageRepository, UserRepository
from ...services.cipher import ContentCipher

logger = logging.getLogger(__name__)


class MessagingService:
    """Encrypted direct messages, conversation discovery and unread tracking."""

    def __init__(
        self,
        messages: MessageRepository,
        users: UserRepository,
        cipher: ContentCipher,
    ) -> None:
        self._messages = messages
        self._users = users
        self._cipher = cipher

    # ------------------------------------------------------------------
    def send(
        self,
        sender_id: Optional[str],
        receiver_id: Optional[str],
        content: Optional[str],
    ) -> Message:
        if not sender_id or not receiver_id or not content:
            raise BadRequestError("Missing fields")
        if self._users.get_by_id(sender_id) is None:
            raise NotFoundError("Sender not found")
        if self._users.get_by_id(receiver_id) is None:
            raise NotFoundError("Receiver not found")

        sealed = self._cipher.encrypt_text(content)
        stored = self._messages.create(sender_id, receiver_id, sealed, self._now())
        if stored.id is None:
            raise ServerError("Failed to store message")
        # The sender already has the plaintext, so echo it instead of decrypting.
        stored.content = content
        return stored

    def list_conversation(self, viewer_id: Optional[str], other_id: str) -> List[Message]:
        """
        Full thread between the viewer and ``other_id``, oldest first.

        Messages from ``other_id`` to the viewer are marked read afterwards;
        the returned list still shows their state before this call.
        """
        viewer = self._require_viewer(viewer_id)
        thread = self._messages.list_between(viewer, other_id)
        for message in thread:
            message.content = self._cipher.decrypt_text(message.content)

        try:
            marked = self._messages.mark_read(sender_id=other_id, receiver_id=viewer)
        except (sqlite3.Error, ServerError) as exc:
            logger.warning("Could not mark messages from %s to %s as read: %s", other_id, viewer, exc)
        else:
            if marked:
                logger.debug("Marked %s messages from %s to %s as read", marked, other_id, viewer)
        return thread

    def list_conversations(self, viewer_id: Optional[str]) -> List[ConversationSummary]:
        """Counterparties of the viewer, most recent message first."""
        viewer = self._require_viewer(viewer_id)
        conversations = self._messages.list_conversations(viewer)
        for item in conversations:
            item.last_message = self._cipher.decrypt_text(item.last_message)
        return conversations

    def unread_count(self, viewer_id: Optional[str]) -> int:
        viewer = self._require_viewer(viewer_id)
        return self._messages.count_unread(viewer)

    # ------------------------------------------------------------------
    @staticmethod
    def _require_viewer(viewer_id: Optional[str]) -> str:
        if not viewer_id:
            raise UnauthorizedError("Unauthorized")
        return viewer_id

    @staticmethod
    def _now() -> str:
        return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")
