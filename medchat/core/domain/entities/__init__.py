"""
Domain Entities

"""
from .profile import Profile
from .chat_session import ChatSession, SessionStatus
from .message import Message, MessageRole, MessageStatus, FAILED_REPLY_TEXT
from .attachment import Attachment
from .prescription import Prescription, Medication
from .rate_limit import RateLimitWindow

__all__ = [
    "Profile",
    "ChatSession",
    "SessionStatus",
    "Message",
    "MessageRole",
    "MessageStatus",
    "FAILED_REPLY_TEXT",
    "Attachment",
    "Prescription",
    "Medication",
    "RateLimitWindow",
]
