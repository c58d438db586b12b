from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from yuthukama.domain.status import MessageStatus, status_from_fields
from yuthukama.security.sanitizer import InputSanitizer, MAX_MESSAGE_LENGTH


class ParticipantOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    profile_picture: Optional[str] = None


class ConversationOut(BaseModel):
    """A direct conversation as seen by one of its two participants."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    participants: List[ParticipantOut]
    last_message: str = ''
    last_message_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class AttachmentOut(BaseModel):
    url: str
    kind: str
    filename: str
    size_bytes: int


class MessageOut(BaseModel):
    """
    Message as returned to clients.

    Deleted messages keep their row and metadata, but text and attachment
    are withheld.
    """

    id: int
    conversation_id: int
    sender_id: int
    text: Optional[str] = None
    attachment: Optional[AttachmentOut] = None
    status: str
    sent_at: datetime
    read_at: Optional[datetime] = None
    read_by: Optional[str] = None
    edited_at: Optional[datetime] = None
    deleted: bool = False

    @classmethod
    def from_model(cls, msg) -> 'MessageOut':
        attachment = None
        if msg.has_attachment and not msg.deleted:
            attachment = AttachmentOut(
                url=msg.attachment_url,
                kind=msg.attachment_kind or 'file',
                filename=msg.attachment_filename or '',
                size_bytes=msg.attachment_size or 0,
            )
        return cls(
            id=msg.id,
            conversation_id=msg.conversation_id,
            sender_id=msg.sender_id,
            text=None if msg.deleted else msg.text,
            attachment=attachment,
            status=msg.status,
            sent_at=msg.sent_at,
            read_at=msg.read_at,
            read_by=msg.read_by.username if msg.read_by is not None else None,
            edited_at=msg.edited_at,
            deleted=msg.deleted,
        )

    def status_variant(self) -> Optional[MessageStatus]:
        return status_from_fields(self.status, self.sent_at, self.read_at, self.read_by)


class MessageEditIn(BaseModel):
    model_config = ConfigDict(extra='forbid')

    text: str = Field(..., min_length=1, max_length=MAX_MESSAGE_LENGTH)

    @field_validator('text')
    @classmethod
    def validate_text(cls, v: str) -> str:
        if not v.strip():
            raise ValueError('Message text cannot be empty')
        return InputSanitizer.sanitize_message_text(v)


class ReadReceiptOut(BaseModel):
    updated: int


class UnreadCountOut(BaseModel):
    count: int


class AIMessageIn(BaseModel):
    # optional here so a missing field gets the same answer as an empty one
    message: Optional[str] = None


class AIMessageOut(BaseModel):
    response: str
