"""
Domain Repository Interfaces

"""
from .profile_repository import ProfileRepository
from .chat_repository import ChatRepository
from .attachment_repository import AttachmentRepository
from .prescription_repository import PrescriptionRepository
from .rate_limit_repository import RateLimitStore

__all__ = [
    "ProfileRepository",
    "ChatRepository",
    "AttachmentRepository",
    "PrescriptionRepository",
    "RateLimitStore",
]
