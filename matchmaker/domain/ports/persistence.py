from __future__ import annotations

from typing import Any, Dict, List, Optional, Protocol

from ..models import ConversationSummary, Message, User


class UserRepository(Protocol):
    """Persistence functions related to user accounts and profiles."""

    def create(
        self,
        name: str,
        email: str,
        password_hash: str,
        verification_code: str,
        profile: Optional[Dict[str, Any]] = None,
    ) -> User:
        ...

    def get_by_id(self, user_id: str) -> Optional[User]:
        ...

    def get_by_email(self, email: str) -> Optional[User]:
        ...

    def list_all(self) -> List[User]:
        ...

    def mark_verified(self, user_id: str) -> None:
        ...

    def update_verification_code(self, user_id: str, code: str) -> None:
        ...

    def update_profile(self, user_id: str, fields: Dict[str, Any]) -> int:
        ...

    def delete(self, user_id: str) -> int:
        ...


class MessageRepository(Protocol):
    """Persistence functions related to stored (encrypted) direct messages."""

    def create(self, sender_id: str, receiver_id: str, content: str, timestamp: str) -> Message:
        ...

    def get_by_id(self, message_id: int) -> Optional[Message]:
        ...

    def list_between(self, user_id: str, other_id: str) -> List[Message]:
        ...

    def mark_read(self, sender_id: str, receiver_id: str) -> int:
        ...

    def count_unread(self, receiver_id: str) -> int:
        ...

    def list_conversations(self, user_id: str) -> List[ConversationSummary]:
        ...

    def delete_for_user(self, user_id: str) -> int:
        ...
