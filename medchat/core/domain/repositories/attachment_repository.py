"""
Attachment Repository Interface

"""
from abc import ABC, abstractmethod
from typing import List, Optional

from ..entities import Attachment
from ..value_objects import SessionId


class AttachmentRepository(ABC):
    """Persistence contract for attachment records (file bytes live in FileStorage)."""

    @abstractmethod
    async def save(self, attachment: Attachment) -> Attachment:
        """Save a new attachment record."""
        pass

    @abstractmethod
    async def find_by_id(self, attachment_id: str) -> Optional[Attachment]:
        """Find an attachment by its ID."""
        pass

    @abstractmethod
    async def find_by_ids(self, attachment_ids: List[str]) -> List[Attachment]:
        """Find the attachments among ``attachment_ids`` that exist, in the given order."""
        pass

    @abstractmethod
    async def find_by_session(self, session_id: SessionId) -> List[Attachment]:
        """Find all attachments of a session, oldest first."""
        pass

    @abstractmethod
    async def update(self, attachment: Attachment) -> Attachment:
        """Update an attachment record (used when linking it to a message)."""
        pass

    @abstractmethod
    async def delete(self, attachment_id: str) -> bool:
        """Delete an attachment record; False if it did not exist."""
        pass
