"""
Attachment API Schemas

"""
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field

from medchat.core.domain.entities import Attachment


class AttachmentResponse(BaseModel):
    """Response schema for an uploaded attachment."""

    attachment_id: str
    session_id: str
    filename: str
    content_type: str
    size_bytes: int = Field(..., ge=0)
    message_id: Optional[str] = Field(None, description="Message the attachment was sent with")
    created_at: datetime

    @classmethod
    def from_entity(cls, attachment: Attachment) -> "AttachmentResponse":
        return cls(
            attachment_id=attachment.attachment_id,
            session_id=attachment.session_id.value,
            filename=attachment.metadata.filename,
            content_type=attachment.metadata.content_type,
            size_bytes=attachment.metadata.size_bytes,
            message_id=attachment.message_id,
            created_at=attachment.created_at
        )


class UploadAttachmentsResponse(BaseModel):
    """Response schema for an upload batch."""

    session_id: str
    attachments: List[AttachmentResponse]
    total_size_bytes: int = Field(..., ge=0)
    message: str = "Files uploaded successfully"


class AttachmentListResponse(BaseModel):
    session_id: str
    attachments: List[AttachmentResponse]
    total: int = Field(..., ge=0)
