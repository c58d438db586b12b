# backend/yuthukama/crud/messages.py
from __future__ import annotations

from datetime import datetime

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from yuthukama.models.conversation import Conversation
from yuthukama.models.message import Message
from yuthukama.services.storage import StoredAttachment

PREVIEW_LENGTH = 255


def get(db: Session, message_id: int) -> Message | None:
    return db.get(Message, message_id)


def list_for_conversation(db: Session, conversation_id: int) -> list[Message]:
    """All messages of a conversation, oldest first."""
    stmt = (
        select(Message)
        .where(Message.conversation_id == conversation_id)
        .order_by(Message.sent_at.asc(), Message.id.asc())
    )
    return list(db.execute(stmt).scalars().all())


def _preview(text: str | None, kind: str | None = None, filename: str | None = None) -> str:
    if text:
        return text[:PREVIEW_LENGTH]
    if kind is not None:
        return f"[{kind}] {filename or ''}"[:PREVIEW_LENGTH]
    return ""


def _refresh_preview(db: Session, conversation_id: int) -> None:
    """Point the conversation preview at its newest message that is not deleted."""
    db.flush()
    latest = db.execute(
        select(Message)
        .where(Message.conversation_id == conversation_id, Message.deleted.is_(False))
        .order_by(Message.sent_at.desc(), Message.id.desc())
        .limit(1)
    ).scalar_one_or_none()

    conversation = db.get(Conversation, conversation_id)
    if latest is None:
        conversation.last_message = ""
    else:
        conversation.last_message = _preview(latest.text, latest.attachment_kind, latest.attachment_filename)


def create(
    db: Session,
    conversation: Conversation,
    sender_id: int,
    text: str | None,
    attachment: StoredAttachment | None = None,
) -> Message:
    now = datetime.utcnow()
    msg = Message(
        conversation_id=conversation.id,
        sender_id=sender_id,
        text=text or None,
        sent_at=now,
    )
    if attachment is not None:
        msg.attachment_url = attachment.url
        msg.attachment_kind = attachment.kind
        msg.attachment_filename = attachment.filename
        msg.attachment_size = attachment.size_bytes
        conversation.last_message = _preview(text, attachment.kind, attachment.filename)
    else:
        conversation.last_message = _preview(text)
    conversation.last_message_at = now

    db.add(msg)
    db.add(conversation)
    db.commit()
    db.refresh(msg)
    return msg


def edit(db: Session, msg: Message, text: str) -> Message:
    msg.text = text
    msg.edited_at = datetime.utcnow()
    db.add(msg)
    _refresh_preview(db, msg.conversation_id)
    db.commit()
    db.refresh(msg)
    return msg


def soft_delete(db: Session, msg: Message) -> Message:
    msg.deleted = True
    msg.deleted_at = datetime.utcnow()
    db.add(msg)
    _refresh_preview(db, msg.conversation_id)
    db.commit()
    db.refresh(msg)
    return msg


def mark_read(db: Session, conversation_id: int, reader_id: int) -> int:
    """Mark the other participant's unread messages as read. read_at is never overwritten."""
    stmt = (
        update(Message)
        .where(
            Message.conversation_id == conversation_id,
            Message.sender_id != reader_id,
            Message.read_at.is_(None),
        )
        .values(read_at=datetime.utcnow(), read_by_id=reader_id)
        .execution_options(synchronize_session=False)
    )
    result = db.execute(stmt)
    db.commit()
    return result.rowcount or 0


def unread_count(db: Session, conversation_id: int, reader_id: int) -> int:
    stmt = select(func.count(Message.id)).where(
        Message.conversation_id == conversation_id,
        Message.sender_id != reader_id,
        Message.read_at.is_(None),
        Message.deleted.is_(False),
    )
    return db.execute(stmt).scalar_one()
