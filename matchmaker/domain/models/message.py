"""Message domain models for direct messaging between users."""

from dataclasses import dataclass
from typing import Optional


class Message:
    """
    Direct message between two users.

    ``content`` holds whatever the caller handed over: ciphertext when read
    straight from storage, plaintext once the messaging engine decrypted it.
    """

    def __init__(
        self,
        id: int,
        sender_id: str,
        receiver_id: str,
        content: Optional[str],
        timestamp: str,
        is_read: bool = False,
    ):
        self.id = id
        self.sender_id = sender_id
        self.receiver_id = receiver_id
        self.content = content
        self.timestamp = timestamp
        self.is_read = is_read

    def __repr__(self) -> str:
        return f"<Message id={self.id} sender={self.sender_id} receiver={self.receiver_id} read={self.is_read}>"


@dataclass(slots=True)
class ConversationSummary:
    """Derived view of one counterparty in a user's inbox."""

    counterparty_id: str
    name: Optional[str]
    photo: Optional[str]
    unread_count: int
    last_message: Optional[str]
    last_timestamp: Optional[str]
