from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, status

from ....application.services.messaging_service import MessagingService
from ....core.dependencies import get_messaging_service
from ..dependencies import get_viewer_id
from ..schemas.message import (
    SendMessageRequest,
    UnreadCountResponse,
    conversation_payload,
    message_payload,
)

router = APIRouter(prefix="/api", tags=["messages"])


@router.get("/notifications/unread-count", response_model=UnreadCountResponse)
def unread_count(
    viewer_id: Optional[str] = Depends(get_viewer_id),
    messaging_service: MessagingService = Depends(get_messaging_service),
) -> UnreadCountResponse:
    return UnreadCountResponse(count=messaging_service.unread_count(viewer_id))


@router.get("/conversations")
def list_conversations(
    viewer_id: Optional[str] = Depends(get_viewer_id),
    messaging_service: MessagingService = Depends(get_messaging_service),
) -> List[Dict[str, Any]]:
    return [conversation_payload(item) for item in messaging_service.list_conversations(viewer_id)]


@router.get("/messages/{other_id}")
def list_thread(
    other_id: str,
    viewer_id: Optional[str] = Depends(get_viewer_id),
    messaging_service: MessagingService = Depends(get_messaging_service),
) -> List[Dict[str, Any]]:
    """Decrypted thread with ``other_id``; marks their messages to the viewer as read."""
    return [message_payload(item) for item in messaging_service.list_conversation(viewer_id, other_id)]


@router.post("/messages", status_code=status.HTTP_201_CREATED)
def send_message(
    request: SendMessageRequest,
    messaging_service: MessagingService = Depends(get_messaging_service),
) -> Dict[str, Any]:
    message = messaging_service.send(request.sender_id, request.receiver_id, request.content)
    return {
        "id": message.id,
        "sender_id": message.sender_id,
        "receiver_id": message.receiver_id,
        "content": message.content,
        "timestamp": message.timestamp,
    }
