# backend/yuthukama/models/conversation.py
from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from yuthukama.db.base import Base


class Conversation(Base):
    """Direct chat between exactly two users.

    The pair is stored ordered (low id first) so that the unique constraint
    covers the unordered pair.
    """

    __tablename__ = "conversations"
    __table_args__ = (
        UniqueConstraint("participant_low_id", "participant_high_id", name="uq_conversation_pair"),
        CheckConstraint("participant_low_id < participant_high_id", name="ck_conversation_pair_order"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)

    participant_low_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False)
    participant_high_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False)

    last_message: Mapped[str] = mapped_column(String(255), default="", nullable=False)
    last_message_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False
    )

    participant_low = relationship("User", foreign_keys=[participant_low_id])
    participant_high = relationship("User", foreign_keys=[participant_high_id])
    messages = relationship(
        "Message",
        back_populates="conversation",
        cascade="all,delete-orphan",
        order_by="Message.id",
    )

    @property
    def participants(self):
        return [self.participant_low, self.participant_high]

    @property
    def participant_ids(self) -> tuple[int, int]:
        return (self.participant_low_id, self.participant_high_id)

    def has_participant(self, user_id: int) -> bool:
        return user_id in self.participant_ids

    def other_participant_id(self, user_id: int) -> int:
        if user_id == self.participant_low_id:
            return self.participant_high_id
        return self.participant_low_id
