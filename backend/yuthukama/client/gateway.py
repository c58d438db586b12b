from __future__ import annotations

from typing import Any, List, Optional, Tuple

from yuthukama.client.transport import ApiClient
from yuthukama.schemas.chat import (
    AIMessageOut,
    ConversationOut,
    MessageOut,
    ReadReceiptOut,
    UnreadCountOut,
)

# (filename, content, content_type) as accepted by requests' files=
FileUpload = Tuple[str, Any, str]


class ChatGateway(ApiClient):
    """Thin HTTP client for the chat endpoints. Every failure raises ChatGatewayError."""

    def list_conversations(self) -> List[ConversationOut]:
        return self._request(
            "GET", "/api/chat", "Failed to fetch conversations",
            model=ConversationOut, many=True,
        )

    def get_or_create_conversation(self, other_participant_id: int) -> ConversationOut:
        return self._request(
            "GET",
            f"/api/chat/user/{other_participant_id}",
            "Failed to create conversation",
            model=ConversationOut,
        )

    def list_messages(self, conversation_id: int) -> List[MessageOut]:
        """Messages oldest first, unpaginated."""
        return self._request(
            "GET",
            f"/api/chat/{conversation_id}/messages",
            "Failed to fetch messages",
            model=MessageOut,
            many=True,
        )

    def send_message(
        self,
        conversation_id: int,
        text: Optional[str] = None,
        file: Optional[FileUpload] = None,
    ) -> MessageOut:
        form = {"conversation_id": str(conversation_id)}
        if text:
            form["text"] = text
        files = {"file": file} if file is not None else None
        return self._request(
            "POST",
            "/api/chat/messages",
            "Failed to send message",
            model=MessageOut,
            data=form,
            files=files,
        )

    def edit_message(self, message_id: int, text: str) -> MessageOut:
        return self._request(
            "PUT",
            f"/api/chat/messages/{message_id}",
            "Failed to edit message",
            model=MessageOut,
            json={"text": text},
        )

    def delete_message(self, message_id: int) -> MessageOut:
        return self._request(
            "DELETE",
            f"/api/chat/messages/{message_id}",
            "Failed to delete message",
            model=MessageOut,
        )

    def mark_messages_as_read(self, conversation_id: int) -> int:
        receipt = self._request(
            "PUT",
            f"/api/chat/{conversation_id}/read",
            "Failed to mark messages as read",
            model=ReadReceiptOut,
        )
        return receipt.updated

    def get_unread_count(self, conversation_id: int) -> int:
        unread = self._request(
            "GET",
            f"/api/chat/{conversation_id}/unread-count",
            "Failed to get unread count",
            model=UnreadCountOut,
        )
        return unread.count

    def ask_ai(self, message: str) -> str:
        reply = self._request(
            "POST",
            "/api/chat/ai-message",
            "Failed to get AI response",
            model=AIMessageOut,
            json={"message": message},
        )
        return reply.response
