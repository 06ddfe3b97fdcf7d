"""
Chat API Schemas

"""
from datetime import datetime
from typing import List, Optional, Dict, Any
from pydantic import BaseModel, Field, field_validator

from medchat.core.domain.entities import ChatSession, Message
from medchat.core.domain.services import RateLimitDecision
from medchat.shared.constants import ChatConstants, FileConstants


class StartSessionRequest(BaseModel):
    """Request schema for starting a chat session."""

    specialty: Optional[str] = Field(
        None,
        description="Specialty key; defaults to the profile's preferred specialty",
        examples=["cardiology"]
    )

    title: Optional[str] = Field(
        None,
        description="Optional session title",
        max_length=ChatConstants.MAX_SESSION_TITLE_LENGTH,
        examples=["Chest pain after exercise"]
    )


class RenameSessionRequest(BaseModel):
    """Request schema for renaming a chat session."""

    title: str = Field(..., min_length=1, max_length=ChatConstants.MAX_SESSION_TITLE_LENGTH)


class SessionResponse(BaseModel):
    """Response schema for a chat session."""

    session_id: str
    title: str
    specialty: str
    status: str
    message_count: int = Field(..., ge=0)
    created_at: datetime
    updated_at: datetime
    last_activity_at: datetime

    @classmethod
    def from_entity(cls, session: ChatSession) -> "SessionResponse":
        return cls(
            session_id=session.session_id.value,
            title=session.display_title,
            specialty=session.specialty,
            status=session.status.value,
            message_count=session.message_count,
            created_at=session.created_at,
            updated_at=session.updated_at,
            last_activity_at=session.last_activity_at
        )


class SessionListResponse(BaseModel):
    """Response schema for the caller's sessions."""

    sessions: List[SessionResponse]
    total: int = Field(..., ge=0)


class SendMessageRequest(BaseModel):
    """Request schema for sending a message."""

    content: str = Field(
        ...,
        description="Message content to send",
        min_length=1,
        max_length=ChatConstants.MAX_MESSAGE_LENGTH,
        examples=["I have had a mild headache for three days. What could cause it?"]
    )

    attachment_ids: List[str] = Field(
        default_factory=list,
        description=f"IDs of attachments uploaded to this session and not yet sent (at most {FileConstants.MAX_ATTACHMENTS})"
    )

    model: Optional[str] = Field(
        None,
        description="Optional model override; must be one the provider offers"
    )

    temperature: Optional[float] = Field(
        None,
        description="Response creativity level",
        ge=0.0,
        le=2.0
    )

    @field_validator("content")
    @classmethod
    def validate_content(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Message content cannot be empty")
        return v


class MessageResponse(BaseModel):
    """Response schema for a stored message."""

    message_id: str
    session_id: str
    role: str
    content: str
    sequence: int
    status: str
    attachment_ids: List[str] = Field(default_factory=list)
    model: Optional[str] = None
    token_count: Optional[int] = None
    processing_time_ms: Optional[int] = None
    error_message: Optional[str] = None
    created_at: datetime

    @classmethod
    def from_entity(cls, message: Message) -> "MessageResponse":
        return cls(
            message_id=message.message_id,
            session_id=message.session_id.value,
            role=message.role.value,
            content=message.content,
            sequence=message.sequence,
            status=message.status.value,
            attachment_ids=list(message.attachment_ids),
            model=message.model,
            token_count=message.token_count,
            processing_time_ms=message.processing_time_ms,
            error_message=message.error_message,
            created_at=message.created_at
        )


class RateLimitStatusResponse(BaseModel):
    """Response schema for the caller's request quota."""

    limit: int
    remaining: int
    reset_at: Optional[datetime] = None
    window_seconds: Optional[int] = None
    backend: Optional[str] = None

    @classmethod
    def from_decision(
        cls,
        decision: RateLimitDecision,
        window_seconds: Optional[int] = None,
        backend: Optional[str] = None
    ) -> "RateLimitStatusResponse":
        return cls(
            limit=decision.limit,
            remaining=decision.remaining,
            reset_at=decision.reset_at,
            window_seconds=window_seconds,
            backend=backend
        )


class SendMessageResponse(BaseModel):
    """Response schema for a completed exchange."""

    session_id: str
    user_message: MessageResponse
    assistant_message: MessageResponse
    usage: Optional[Dict[str, Any]] = None
    rate_limit: RateLimitStatusResponse


class ChatHistoryResponse(BaseModel):
    """Response schema for a page of chat history."""

    session: SessionResponse
    messages: List[MessageResponse]
    total_messages: int = Field(..., ge=0)
    has_more: bool


class SessionSummaryResponse(BaseModel):
    """Response schema for session statistics."""

    session_id: str
    title: str
    specialty: str
    status: str
    created_at: str
    last_activity_at: str
    total_messages: int
    user_messages: int
    assistant_messages: int
    failed_messages: int
    attachment_count: int
    total_tokens: int
    duration_seconds: float
    average_response_time_ms: float


class StreamingMessageChunk(BaseModel):
    """One Server-Sent Event of a streamed reply."""

    content: str
    is_complete: bool
    chunk_index: int
    metadata: Optional[Dict[str, Any]] = None


class StreamingErrorEvent(BaseModel):
    """Terminal Server-Sent Event sent when streaming fails."""

    error: str
    error_code: Optional[str] = None
    is_complete: bool = True
