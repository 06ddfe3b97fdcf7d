"""
Domain Value Objects

Value objects are immutable objects that represent concepts in the domain.
They encapsulate validation logic and ensure data integrity.
"""
from .user_id import UserId
from .session_id import SessionId
from .attachment_metadata import AttachmentMetadata, AttachmentRuleViolation

__all__ = [
    "UserId",
    "SessionId",
    "AttachmentMetadata",
    "AttachmentRuleViolation",
]
