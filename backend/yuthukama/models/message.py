# backend/yuthukama/models/message.py
from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from yuthukama.db.base import Base


class Message(Base):
    __tablename__ = "messages"
    __table_args__ = (
        Index("ix_messages_conversation_sent", "conversation_id", "sent_at"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)

    conversation_id: Mapped[int] = mapped_column(ForeignKey("conversations.id", ondelete="CASCADE"), index=True, nullable=False)
    sender_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False)

    # text is optional only when an attachment is present
    text: Mapped[str | None] = mapped_column(Text, nullable=True)

    attachment_url: Mapped[str | None] = mapped_column(String(512), nullable=True)
    attachment_kind: Mapped[str | None] = mapped_column(String(16), nullable=True)
    attachment_filename: Mapped[str | None] = mapped_column(String(255), nullable=True)
    attachment_size: Mapped[int | None] = mapped_column(Integer, nullable=True)

    sent_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)

    # set once, by the first read
    read_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    read_by_id: Mapped[int | None] = mapped_column(ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    edited_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    deleted: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    conversation = relationship("Conversation", back_populates="messages")
    sender = relationship("User", back_populates="sent_messages", foreign_keys=[sender_id])
    read_by = relationship("User", foreign_keys=[read_by_id])

    @property
    def has_attachment(self) -> bool:
        return self.attachment_url is not None

    @property
    def status(self) -> str:
        return "read" if self.read_at is not None else "delivered"
