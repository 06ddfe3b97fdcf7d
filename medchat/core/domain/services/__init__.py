"""
Domain Services

Domain services encapsulate business logic that doesn't naturally fit
within a single entity or value object.
"""
from .chat_service import ChatService, ChatMessage, ChatResponse, StreamingChatChunk
from .specialty_catalog import SpecialtyCatalog, SpecialtyProfile
from .rate_limiter import RateLimiter, RateLimitDecision
from .prescription_parser import PrescriptionParser, ParsedPrescription, PRESCRIPTION_INSTRUCTION
from .attachment_policy import AttachmentPolicy, IncomingFile
from .identity_provider import IdentityProvider

__all__ = [
    "ChatService",
    "ChatMessage",
    "ChatResponse",
    "StreamingChatChunk",
    "SpecialtyCatalog",
    "SpecialtyProfile",
    "RateLimiter",
    "RateLimitDecision",
    "PrescriptionParser",
    "ParsedPrescription",
    "PRESCRIPTION_INSTRUCTION",
    "AttachmentPolicy",
    "IncomingFile",
    "IdentityProvider",
]
