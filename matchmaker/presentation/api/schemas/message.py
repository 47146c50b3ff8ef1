from typing import Any, Dict, Optional

from pydantic import BaseModel

from ....domain.models import ConversationSummary, Message


class SendMessageRequest(BaseModel):
    sender_id: Optional[str] = None
    receiver_id: Optional[str] = None
    content: Optional[str] = None


class UnreadCountResponse(BaseModel):
    count: int


def message_payload(message: Message) -> Dict[str, Any]:
    return {
        "id": message.id,
        "sender_id": message.sender_id,
        "receiver_id": message.receiver_id,
        "content": message.content,
        "timestamp": message.timestamp,
        "is_read": int(message.is_read),
    }


def conversation_payload(item: ConversationSummary) -> Dict[str, Any]:
    return {
        "id": item.counterparty_id,
        "name": item.name,
        "photo": item.photo,
        "unread_count": item.unread_count,
        "last_message": item.last_message,
        "last_timestamp": item.last_timestamp,
    }
