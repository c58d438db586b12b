# backend/yuthukama/crud/conversations.py
from __future__ import annotations

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from yuthukama.models.conversation import Conversation


def ordered_pair(a: int, b: int) -> tuple[int, int]:
    return (a, b) if a < b else (b, a)


def get(db: Session, conversation_id: int) -> Conversation | None:
    return db.get(Conversation, conversation_id)


def get_between(db: Session, a: int, b: int) -> Conversation | None:
    low, high = ordered_pair(a, b)
    stmt = select(Conversation).where(
        Conversation.participant_low_id == low,
        Conversation.participant_high_id == high,
    )
    return db.execute(stmt).scalar_one_or_none()


def get_or_create(db: Session, user_id: int, other_id: int) -> Conversation:
    """
    Return the conversation between two users, creating it on first contact.

    Idempotent on the unordered pair. A concurrent insert of the same pair
    loses on the unique constraint and re-reads the winner.
    """
    if user_id == other_id:
        raise ValueError("Cannot start conversation with self")

    existing = get_between(db, user_id, other_id)
    if existing is not None:
        return existing

    low, high = ordered_pair(user_id, other_id)
    conv = Conversation(participant_low_id=low, participant_high_id=high)
    db.add(conv)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        return get_between(db, user_id, other_id)

    db.refresh(conv)
    return conv


def list_for_user(db: Session, user_id: int) -> list[Conversation]:
    stmt = (
        select(Conversation)
        .where(or_(
            Conversation.participant_low_id == user_id,
            Conversation.participant_high_id == user_id,
        ))
        .order_by(Conversation.last_message_at.desc(), Conversation.id.desc())
    )
    return list(db.execute(stmt).scalars().all())
