from .profile_use_case import (
    ProfileUseCase,
    CreateProfileRequest,
    UpdateProfileRequest,
)
from .chat_use_case import (
    ChatUseCase,
    StartSessionRequest,
    SendMessageRequest,
    SendMessageResponse,
    PreparedMessage,
    ChatHistoryRequest,
    ChatHistoryResponse,
)
from .attachment_use_case import (
    AttachmentUseCase,
    UploadedFile,
    UploadAttachmentsRequest,
    UploadAttachmentsResponse,
)
from .prescription_use_case import (
    PrescriptionUseCase,
    GeneratePrescriptionRequest,
    GeneratePrescriptionResponse,
)

__all__ = [
    # Profiles
    "ProfileUseCase",
    "CreateProfileRequest",
    "UpdateProfileRequest",

    # Chat
    "ChatUseCase",
    "StartSessionRequest",
    "SendMessageRequest",
    "SendMessageResponse",
    "PreparedMessage",
    "ChatHistoryRequest",
    "ChatHistoryResponse",

    # Attachments
    "AttachmentUseCase",
    "UploadedFile",
    "UploadAttachmentsRequest",
    "UploadAttachmentsResponse",

    # Prescriptions
    "PrescriptionUseCase",
    "GeneratePrescriptionRequest",
    "GeneratePrescriptionResponse",
]
