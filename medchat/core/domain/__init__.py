"""
Core Domain Layer

The domain layer contains the core business logic and rules.
It is independent of external concerns and frameworks.
"""
from .entities import (
    Profile,
    ChatSession,
    SessionStatus,
    Message,
    MessageRole,
    MessageStatus,
    Attachment,
    Prescription,
    Medication,
    RateLimitWindow,
)
from .value_objects import (
    UserId,
    SessionId,
    AttachmentMetadata,
)
from .repositories import (
    ProfileRepository,
    ChatRepository,
    AttachmentRepository,
    PrescriptionRepository,
    RateLimitStore,
)
from .services import (
    ChatService,
    SpecialtyCatalog,
    RateLimiter,
    AttachmentPolicy,
    PrescriptionParser,
    IdentityProvider,
)

__all__ = [
    # Entities
    "Profile",
    "ChatSession",
    "SessionStatus",
    "Message",
    "MessageRole",
    "MessageStatus",
    "Attachment",
    "Prescription",
    "Medication",
    "RateLimitWindow",
    # Value Objects
    "UserId",
    "SessionId",
    "AttachmentMetadata",
    # Repositories
    "ProfileRepository",
    "ChatRepository",
    "AttachmentRepository",
    "PrescriptionRepository",
    "RateLimitStore",
    # Services
    "ChatService",
    "SpecialtyCatalog",
    "RateLimiter",
    "AttachmentPolicy",
    "PrescriptionParser",
    "IdentityProvider",
]
