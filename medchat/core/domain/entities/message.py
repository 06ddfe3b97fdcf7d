"""
Message Entity
"""
from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional
import uuid

from ..value_objects import SessionId
from medchat.shared.constants import ChatConstants


FAILED_REPLY_TEXT = "The assistant could not generate a reply. Please try again."


class MessageRole(Enum):
    """
    Message role enumeration.

    Only conversation turns are persisted; system prompts are rebuilt from
    the session's specialty on every request.
    """
    USER = "user"
    ASSISTANT = "assistant"


class MessageStatus(Enum):
    """Message status enumeration."""
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class Message:
    """
    Message entity representing one turn of a conversation.

    ``sequence`` is the message's position inside its session and defines
    the conversation order.
    """
    message_id: str
    session_id: SessionId
    role: MessageRole
    content: str
    sequence: int = 0
    status: MessageStatus = MessageStatus.COMPLETED
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    attachment_ids: List[str] = field(default_factory=list)
    model: Optional[str] = None
    token_count: Optional[int] = None
    processing_time_ms: Optional[int] = None
    error_message: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate message state."""
        self._validate_role()
        self._validate_content()
        self._validate_timestamps()
        self._validate_counters()
        self._validate_status_consistency()

    def _validate_role(self) -> None:
        if not isinstance(self.role, MessageRole):
            raise ValueError(f"Invalid message role: {self.role!r}")

    def _validate_content(self) -> None:
        """Validate message content."""
        if not self.content or not self.content.strip():
            raise ValueError("Message content cannot be empty")

        if len(self.content) > ChatConstants.MAX_MESSAGE_LENGTH and self.role == MessageRole.USER:
            raise ValueError(
                f"Message content too long (max {ChatConstants.MAX_MESSAGE_LENGTH} characters)"
            )

    def _validate_timestamps(self) -> None:
        """Validate timestamp consistency."""
        if self.updated_at < self.created_at:
            raise ValueError("Updated timestamp cannot be before created timestamp")

    def _validate_counters(self) -> None:
        if self.sequence < 0:
            raise ValueError("Sequence cannot be negative")

        if self.token_count is not None:
            if not isinstance(self.token_count, int) or self.token_count < 0:
                raise ValueError("Token count must be a non-negative integer")

        if self.processing_time_ms is not None:
            if not isinstance(self.processing_time_ms, int) or self.processing_time_ms < 0:
                raise ValueError("Processing time must be a non-negative integer")

    def _validate_status_consistency(self) -> None:
        """Validate status consistency with other fields."""
        if self.status == MessageStatus.FAILED and not self.error_message:
            raise ValueError("Failed messages must have an error message")

        if self.role == MessageRole.USER and self.status == MessageStatus.FAILED:
            raise ValueError("User messages cannot fail")

    @classmethod
    def create_user_message(
        cls,
        session_id: SessionId,
        content: str,
        sequence: int,
        attachment_ids: Optional[List[str]] = None
    ) -> Message:
        """Create a new user message."""
        return cls(
            message_id=str(uuid.uuid4()),
            session_id=session_id,
            role=MessageRole.USER,
            content=content,
            sequence=sequence,
            status=MessageStatus.COMPLETED,
            attachment_ids=list(attachment_ids or [])
        )

    @classmethod
    def create_assistant_message(
        cls,
        session_id: SessionId,
        content: str,
        sequence: int,
        model: Optional[str] = None,
        token_count: Optional[int] = None,
        processing_time_ms: Optional[int] = None
    ) -> Message:
        """Create a completed assistant reply."""
        return cls(
            message_id=str(uuid.uuid4()),
            session_id=session_id,
            role=MessageRole.ASSISTANT,
            content=content,
            sequence=sequence,
            status=MessageStatus.COMPLETED,
            model=model,
            token_count=token_count,
            processing_time_ms=processing_time_ms
        )

    @classmethod
    def create_failed_assistant_message(
        cls,
        session_id: SessionId,
        sequence: int,
        error_message: str,
        model: Optional[str] = None
    ) -> Message:
        """Record a reply the provider failed to produce."""
        if not error_message:
            raise ValueError("Error message cannot be empty")

        return cls(
            message_id=str(uuid.uuid4()),
            session_id=session_id,
            role=MessageRole.ASSISTANT,
            content=FAILED_REPLY_TEXT,
            sequence=sequence,
            status=MessageStatus.FAILED,
            model=model,
            error_message=error_message
        )

    @property
    def is_from_user(self) -> bool:
        """Check if message is from user."""
        return self.role == MessageRole.USER

    @property
    def is_from_assistant(self) -> bool:
        """Check if message is from assistant."""
        return self.role == MessageRole.ASSISTANT

    @property
    def is_completed(self) -> bool:
        """Check if message is completed."""
        return self.status == MessageStatus.COMPLETED

    @property
    def is_failed(self) -> bool:
        """Check if message generation failed."""
        return self.status == MessageStatus.FAILED

    def __str__(self) -> str:
        """String representation of the message."""
        content_preview = self.content[:50] + "..." if len(self.content) > 50 else self.content
        return f"Message({self.message_id[:8]}, {self.role.value}, {self.status.value}, '{content_preview}')"
