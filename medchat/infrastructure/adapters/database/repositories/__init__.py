"""
Database Repository Implementations

SQLAlchemy implementations of domain repository interfaces.
These are adapters in the hexagonal architecture pattern.
"""
from .profile_repository_impl import ProfileRepositoryImpl
from .chat_repository_impl import ChatRepositoryImpl
from .attachment_repository_impl import AttachmentRepositoryImpl
from .prescription_repository_impl import PrescriptionRepositoryImpl
from .rate_limit_store_impl import DatabaseRateLimitStore

__all__ = [
    "ProfileRepositoryImpl",
    "ChatRepositoryImpl",
    "AttachmentRepositoryImpl",
    "PrescriptionRepositoryImpl",
    "DatabaseRateLimitStore",
]
