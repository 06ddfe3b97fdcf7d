"""
Database Models

SQLAlchemy models for domain entities following hexagonal architecture.
Models are adapters that map domain entities to database representation.
"""
from .profile_model import ProfileModel
from .chat_model import ChatSessionModel, MessageModel
from .attachment_model import AttachmentModel
from .rate_limit_model import RateLimitModel
from .prescription_model import PrescriptionModel

__all__ = [
    "ProfileModel",
    "ChatSessionModel",
    "MessageModel",
    "AttachmentModel",
    "RateLimitModel",
    "PrescriptionModel",
]
