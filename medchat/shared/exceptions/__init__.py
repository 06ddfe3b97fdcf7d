"""
Shared Exceptions

Custom exceptions for domain and application errors.
"""
from .domain_exceptions import (
    DomainException,
    ValidationError,
    AuthenticationError,
    ProfileError,
    ProfileNotFoundError,
    DuplicateProfileError,
    UnknownSpecialtyError,
    ChatError,
    ChatSessionNotFoundError,
    InvalidSessionStateError,
    MessageGenerationError,
    AttachmentError,
    AttachmentNotFoundError,
    AttachmentValidationError,
    PrescriptionError,
    PrescriptionNotFoundError,
    RateLimitExceededError,
    ConfigurationError,
    RepositoryError,
)
from .file_storage_exceptions import FileStorageError

__all__ = [
    "DomainException",
    "ValidationError",
    "AuthenticationError",
    "ProfileError",
    "ProfileNotFoundError",
    "DuplicateProfileError",
    "UnknownSpecialtyError",
    "ChatError",
    "ChatSessionNotFoundError",
    "InvalidSessionStateError",
    "MessageGenerationError",
    "AttachmentError",
    "AttachmentNotFoundError",
    "AttachmentValidationError",
    "PrescriptionError",
    "PrescriptionNotFoundError",
    "RateLimitExceededError",
    "ConfigurationError",
    "RepositoryError",
    "FileStorageError",
]
