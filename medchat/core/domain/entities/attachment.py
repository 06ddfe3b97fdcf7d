"""
Attachment Entity
"""
from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional
import uuid

from ..value_objects import SessionId, UserId, AttachmentMetadata


@dataclass
class Attachment:
    """
    A file uploaded into a chat session.

    Attachments are uploaded first and linked to the user message that
    references them; a linked attachment cannot be reused.
    """
    attachment_id: str
    session_id: SessionId
    user_id: UserId
    metadata: AttachmentMetadata
    storage_path: str
    message_id: Optional[str] = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __post_init__(self) -> None:
        if not self.attachment_id:
            raise ValueError("Attachment ID cannot be empty")
        if not self.storage_path:
            raise ValueError("Storage path cannot be empty")

    @staticmethod
    def new_id() -> str:
        """Generate an attachment identifier."""
        return str(uuid.uuid4())

    @classmethod
    def create(
        cls,
        attachment_id: str,
        session_id: SessionId,
        user_id: UserId,
        metadata: AttachmentMetadata,
        storage_path: str
    ) -> Attachment:
        """Create a stored, not yet linked attachment."""
        return cls(
            attachment_id=attachment_id,
            session_id=session_id,
            user_id=user_id,
            metadata=metadata,
            storage_path=storage_path
        )

    def link_to_message(self, message_id: str) -> None:
        """Attach the file to the user message that references it."""
        if self.message_id is not None:
            raise ValueError(f"Attachment {self.attachment_id} is already linked to a message")

        self.message_id = message_id
        self.updated_at = datetime.now(timezone.utc)

    @property
    def is_linked(self) -> bool:
        return self.message_id is not None

    @property
    def filename(self) -> str:
        return self.metadata.filename

    def __str__(self) -> str:
        return f"Attachment({self.attachment_id[:8]}, {self.metadata})"
