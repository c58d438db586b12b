# backend/yuthukama/api/routes/chat.py
from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status
from sqlalchemy.orm import Session

from yuthukama.api.deps import get_attachment_store
from yuthukama.core.security import get_current_user
from yuthukama.crud import conversations as crud_conversations
from yuthukama.crud import messages as crud_messages
from yuthukama.db.session import get_db
from yuthukama.models.conversation import Conversation
from yuthukama.models.message import Message
from yuthukama.models.user import User
from yuthukama.schemas.chat import (
    ConversationOut,
    MessageEditIn,
    MessageOut,
    ReadReceiptOut,
    UnreadCountOut,
)
from yuthukama.security.sanitizer import InputSanitizer
from yuthukama.services.storage import AttachmentTooLargeError, LocalAttachmentStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/chat", tags=["chat"])


def _conversation_for(db: Session, conversation_id: int, user: User) -> Conversation:
    conv = crud_conversations.get(db, conversation_id)
    if not conv:
        raise HTTPException(status_code=404, detail="Conversation not found")
    if not conv.has_participant(user.id):
        raise HTTPException(status_code=403, detail="Access denied")
    return conv


def _own_live_message(db: Session, message_id: int, user: User) -> Message:
    """Fetch a message the caller may change: their own and not deleted."""
    msg = crud_messages.get(db, message_id)
    if not msg:
        raise HTTPException(status_code=404, detail="Message not found")
    if msg.sender_id != user.id:
        raise HTTPException(status_code=403, detail="You can only modify your own messages")
    if msg.deleted:
        raise HTTPException(status_code=400, detail="Message has been deleted")
    return msg


@router.get("", response_model=List[ConversationOut])
@router.get("/", response_model=List[ConversationOut], include_in_schema=False)
def list_conversations(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Conversations of the caller, most recent activity first."""
    return [ConversationOut.model_validate(c) for c in crud_conversations.list_for_user(db, current_user.id)]


@router.get("/user/{receiver_id}", response_model=ConversationOut)
def get_or_create_conversation(
    receiver_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    if receiver_id == current_user.id:
        raise HTTPException(status_code=400, detail="Cannot start conversation with self")
    if db.get(User, receiver_id) is None:
        raise HTTPException(status_code=404, detail="User not found")

    conv = crud_conversations.get_or_create(db, current_user.id, receiver_id)
    return ConversationOut.model_validate(conv)


@router.get("/{conversation_id}/messages", response_model=List[MessageOut])
def list_messages(
    conversation_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    All messages of a conversation in chronological order.
    Fetching them marks the other participant's messages as read.
    """
    _conversation_for(db, conversation_id, current_user)

    crud_messages.mark_read(db, conversation_id, current_user.id)
    return [MessageOut.from_model(m) for m in crud_messages.list_for_conversation(db, conversation_id)]


@router.post("/messages", response_model=MessageOut, status_code=status.HTTP_201_CREATED)
async def send_message(
    conversation_id: int = Form(...),
    text: Optional[str] = Form(None),
    file: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    store: LocalAttachmentStore = Depends(get_attachment_store),
):
    conv = _conversation_for(db, conversation_id, current_user)

    clean_text = None
    if text is not None and text.strip():
        try:
            clean_text = InputSanitizer.sanitize_message_text(text)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))

    attachment = None
    if file is not None and file.filename:
        content = await file.read()
        try:
            attachment = store.save(file.filename, content, file.content_type)
        except AttachmentTooLargeError as e:
            raise HTTPException(status_code=400, detail=str(e))

    if not clean_text and attachment is None:
        raise HTTPException(status_code=400, detail="Message text or attachment is required")

    msg = crud_messages.create(db, conv, current_user.id, clean_text, attachment)
    return MessageOut.from_model(msg)


@router.put("/messages/{message_id}", response_model=MessageOut)
def edit_message(
    message_id: int,
    payload: MessageEditIn,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    msg = _own_live_message(db, message_id, current_user)
    return MessageOut.from_model(crud_messages.edit(db, msg, payload.text))


@router.delete("/messages/{message_id}", response_model=MessageOut)
def delete_message(
    message_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Soft delete: the row stays for conversation continuity, content is withheld."""
    msg = _own_live_message(db, message_id, current_user)
    return MessageOut.from_model(crud_messages.soft_delete(db, msg))


@router.put("/{conversation_id}/read", response_model=ReadReceiptOut)
def mark_messages_as_read(
    conversation_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    _conversation_for(db, conversation_id, current_user)
    return ReadReceiptOut(updated=crud_messages.mark_read(db, conversation_id, current_user.id))


@router.get("/{conversation_id}/unread-count", response_model=UnreadCountOut)
def get_unread_count(
    conversation_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    _conversation_for(db, conversation_id, current_user)
    return UnreadCountOut(count=crud_messages.unread_count(db, conversation_id, current_user.id))
