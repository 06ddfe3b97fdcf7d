"""
Chat Database Models

"""
from datetime import datetime
from typing import Optional
from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from ..base import BaseModel
from medchat.shared.constants import SpecialtyConstants


class ChatSessionModel(BaseModel):
    """
    SQLAlchemy model for ChatSession entity.

    Maps domain ChatSession entity to database representation.
    """
    __tablename__ = "chat_sessions"
    __table_args__ = (
        CheckConstraint(
            "status IN ('active', 'archived', 'deleted')",
            name="ck_chat_sessions_status"
        ),
    )

    # Primary key
    id: Mapped[str] = mapped_column(String(36), primary_key=True)

    # Owner
    user_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("profiles.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    # Session information
    specialty: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        default=SpecialtyConstants.DEFAULT_SPECIALTY
    )
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="active")
    title: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    message_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    # Activity tracking
    last_activity_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        index=True
    )

    def __repr__(self) -> str:
        """String representation of the chat session model."""
        return f"<ChatSessionModel(id={self.id}, user_id={self.user_id}, status={self.status})>"


class MessageModel(BaseModel):
    """
    SQLAlchemy model for Message entity.

    Only conversation turns are stored; the role column is restricted to
    ``user`` and ``assistant``.
    """
    __tablename__ = "messages"
    __table_args__ = (
        CheckConstraint("role IN ('user', 'assistant')", name="ck_messages_role"),
        CheckConstraint(
            "status IN ('pending', 'completed', 'failed')",
            name="ck_messages_status"
        ),
        UniqueConstraint("session_id", "sequence", name="uq_messages_session_sequence"),
    )

    # Primary key
    id: Mapped[str] = mapped_column(String(36), primary_key=True)

    # Foreign key to session
    session_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("chat_sessions.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    # Position inside the session
    sequence: Mapped[int] = mapped_column(Integer, nullable=False)

    # Message information
    role: Mapped[str] = mapped_column(String(20), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="completed")

    # Processing information
    model: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    token_count: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    processing_time_ms: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    error_message: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        """String representation of the message model."""
        return f"<MessageModel(id={self.id}, role={self.role}, status={self.status})>"
