"""
Domain Exceptions

Every error raised by the domain and application layers derives from
DomainException and carries a stable error code for API responses.
"""
from typing import Optional, Any, Dict


class DomainException(Exception):
    """Base exception for all domain-related errors."""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}


class ValidationError(DomainException):
    """Raised when domain validation fails."""

    def __init__(
        self,
        message: str,
        field_name: Optional[str] = None,
        field_value: Optional[Any] = None
    ):
        super().__init__(
            message=message,
            error_code="VALIDATION_ERROR",
            details={"field_name": field_name, "field_value": field_value}
        )
        self.field_name = field_name
        self.field_value = field_value


class AuthenticationError(DomainException):
    """Raised when the caller cannot be identified."""

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message=message, error_code="UNAUTHORIZED")


class ProfileError(DomainException):
    """Base exception for profile-related errors."""
    pass


class ProfileNotFoundError(ProfileError):
    """Raised when a profile is not found."""

    def __init__(self, user_id: str):
        super().__init__(
            message=f"Profile not found: {user_id}",
            error_code="PROFILE_NOT_FOUND",
            details={"user_id": user_id}
        )
        self.user_id = user_id


class DuplicateProfileError(ProfileError):
    """Raised when a profile with the same email already exists."""

    def __init__(self, email: str):
        super().__init__(
            message=f"A profile already exists for {email}",
            error_code="DUPLICATE_PROFILE",
            details={"email": email}
        )
        self.email = email


class UnknownSpecialtyError(DomainException):
    """Raised when a specialty key is not in the catalog."""

    def __init__(self, specialty: str, available: Optional[list] = None):
        super().__init__(
            message=f"Unknown specialty: {specialty}",
            error_code="UNKNOWN_SPECIALTY",
            details={"specialty": specialty, "available": available or []}
        )
        self.specialty = specialty


class ChatError(DomainException):
    """Base exception for chat-related errors."""
    pass


class ChatSessionNotFoundError(ChatError):
    """Raised when a chat session is not found."""

    def __init__(self, session_id: str):
        super().__init__(
            message=f"Chat session not found: {session_id}",
            error_code="CHAT_SESSION_NOT_FOUND",
            details={"session_id": session_id}
        )
        self.session_id = session_id


class InvalidSessionStateError(ChatError):
    """Raised when chat session is in invalid state for operation."""

    def __init__(
        self,
        message: str,
        session_id: str,
        current_state: str,
        expected_state: Optional[str] = None
    ):
        super().__init__(
            message=message,
            error_code="INVALID_SESSION_STATE",
            details={
                "session_id": session_id,
                "current_state": current_state,
                "expected_state": expected_state
            }
        )
        self.session_id = session_id
        self.current_state = current_state
        self.expected_state = expected_state


class MessageGenerationError(ChatError):
    """Raised when the inference provider fails to produce a reply."""

    def __init__(
        self,
        message: str,
        session_id: Optional[str] = None,
        model: Optional[str] = None
    ):
        super().__init__(
            message=message,
            error_code="MESSAGE_GENERATION_ERROR",
            details={"session_id": session_id, "model": model}
        )
        self.session_id = session_id
        self.model = model


class AttachmentError(DomainException):
    """Base exception for attachment-related errors."""
    pass


class AttachmentNotFoundError(AttachmentError):
    """Raised when an attachment is not found."""

    def __init__(self, attachment_id: str):
        super().__init__(
            message=f"Attachment not found: {attachment_id}",
            error_code="ATTACHMENT_NOT_FOUND",
            details={"attachment_id": attachment_id}
        )
        self.attachment_id = attachment_id


class AttachmentValidationError(AttachmentError):
    """Raised when an uploaded file violates the upload constraints."""

    def __init__(self, message: str, filename: Optional[str] = None, rule: Optional[str] = None):
        super().__init__(
            message=message,
            error_code="ATTACHMENT_VALIDATION_ERROR",
            details={"filename": filename, "rule": rule}
        )
        self.filename = filename
        self.rule = rule


class PrescriptionError(DomainException):
    """Base exception for prescription-related errors."""
    pass


class PrescriptionNotFoundError(PrescriptionError):
    """Raised when a prescription is not found."""

    def __init__(self, prescription_id: str):
        super().__init__(
            message=f"Prescription not found: {prescription_id}",
            error_code="PRESCRIPTION_NOT_FOUND",
            details={"prescription_id": prescription_id}
        )
        self.prescription_id = prescription_id


class RateLimitExceededError(DomainException):
    """Raised when a user has used up the request quota of the current window."""

    def __init__(self, user_id: str, limit: int, retry_after_seconds: int):
        super().__init__(
            message=f"Rate limit of {limit} requests exceeded, retry in {retry_after_seconds}s",
            error_code="RATE_LIMIT_EXCEEDED",
            details={
                "user_id": user_id,
                "limit": limit,
                "retry_after_seconds": retry_after_seconds
            }
        )
        self.user_id = user_id
        self.limit = limit
        self.retry_after_seconds = retry_after_seconds


class ConfigurationError(DomainException):
    """Raised when configuration is invalid or missing."""

    def __init__(self, message: str, config_key: Optional[str] = None):
        super().__init__(
            message=message,
            error_code="CONFIGURATION_ERROR",
            details={"config_key": config_key}
        )
        self.config_key = config_key


class RepositoryError(DomainException):
    """Base exception for repository-related errors."""

    def __init__(self, message: str):
        super().__init__(message=message, error_code="REPOSITORY_ERROR")
