"""Domain models for the Matchmaker application."""

from .message import ConversationSummary, Message
from .user import User

__all__ = [
    "ConversationSummary",
    "Message",
    "User",
]
