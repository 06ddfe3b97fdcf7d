"""
Prescription Use Cases

"""
from dataclasses import dataclass
from typing import List, Optional, Union
import logging

from ...domain.entities import Prescription
from ...domain.repositories import ChatRepository, PrescriptionRepository
from ...domain.services import (
    ChatMessage,
    ChatService,
    PrescriptionParser,
    PRESCRIPTION_INSTRUCTION,
    RateLimitDecision,
    RateLimiter,
    SpecialtyCatalog,
)
from ...domain.value_objects import SessionId, UserId
from medchat.shared.constants import ChatConstants
from medchat.shared.exceptions import (
    MessageGenerationError,
    PrescriptionNotFoundError,
    ValidationError,
)
from .session_access import load_owned_session


PRESCRIPTION_TEMPERATURE = 0.2


@dataclass
class GeneratePrescriptionRequest:
    """Request object for drafting a prescription from a conversation."""
    user_id: UserId
    session_id: Union[SessionId, str]
    model: Optional[str] = None


@dataclass
class GeneratePrescriptionResponse:
    prescription: Prescription
    rate_limit: RateLimitDecision


class PrescriptionUseCase:
    """
    Use case for prescription drafts.

    The model is asked for a JSON record; replies that cannot be parsed
    are kept as free-text notes instead of being rejected.
    """

    def __init__(
        self,
        chat_repository: ChatRepository,
        prescription_repository: PrescriptionRepository,
        chat_service: ChatService,
        rate_limiter: RateLimiter,
        specialty_catalog: SpecialtyCatalog,
        prescription_parser: PrescriptionParser,
        max_tokens: int = ChatConstants.DEFAULT_MAX_TOKENS,
        history_window: int = ChatConstants.HISTORY_WINDOW
    ):
        self._chat_repository = chat_repository
        self._prescription_repository = prescription_repository
        self._chat_service = chat_service
        self._rate_limiter = rate_limiter
        self._specialty_catalog = specialty_catalog
        self._prescription_parser = prescription_parser
        self._max_tokens = max_tokens
        self._history_window = history_window
        self._logger = logging.getLogger(__name__)

    async def generate_prescription(self, request: GeneratePrescriptionRequest) -> GeneratePrescriptionResponse:
        """
        Draft a prescription from a session's conversation.

        Args:
            request: Generate prescription request

        Returns:
            The stored prescription and the caller's remaining quota

        Raises:
            ChatSessionNotFoundError: If session doesn't exist for this user
            ValidationError: If the session has no conversation yet
            RateLimitExceededError: If the user's quota is used up
            MessageGenerationError: If the provider fails
        """
        session = await load_owned_session(self._chat_repository, request.user_id, request.session_id)

        history = await self._chat_repository.find_recent_messages(session.session_id, self._history_window)
        conversation = [
            ChatMessage(content=m.content, role=m.role.value, timestamp=m.created_at)
            for m in history
            if not m.is_failed
        ]
        if not conversation:
            raise ValidationError("The session has no conversation to draft a prescription from", "session_id")

        rate_limit = await self._rate_limiter.enforce(request.user_id)

        conversation.append(ChatMessage(content=PRESCRIPTION_INSTRUCTION, role="user"))
        specialty = self._specialty_catalog.get_specialty(session.specialty)

        try:
            response = await self._chat_service.generate_response(
                messages=conversation,
                system_prompt=specialty.system_prompt,
                model=request.model,
                temperature=PRESCRIPTION_TEMPERATURE,
                max_tokens=self._max_tokens
            )
        except MessageGenerationError:
            raise
        except Exception as e:
            self._logger.error(f"Prescription generation failed for session {session.session_id}: {e}")
            raise MessageGenerationError(
                f"Failed to generate prescription: {str(e)}", session.session_id.value, request.model
            )

        parsed = self._prescription_parser.parse(response.message)
        prescription = Prescription.create(
            user_id=request.user_id,
            session_id=session.session_id,
            notes=parsed.notes,
            medications=parsed.medications,
            diagnosis=parsed.diagnosis,
            raw_output=response.message,
            is_structured=parsed.is_structured,
            model=response.model
        )
        saved = await self._prescription_repository.save(prescription)

        self._logger.info(
            f"Generated prescription {saved.prescription_id} for session {session.session_id} "
            f"(structured={saved.is_structured}, medications={saved.medication_count})"
        )
        return GeneratePrescriptionResponse(prescription=saved, rate_limit=rate_limit)

    async def list_prescriptions(self, user_id: UserId) -> List[Prescription]:
        return await self._prescription_repository.find_by_user(user_id)

    async def get_prescription(self, user_id: UserId, prescription_id: str) -> Prescription:
        """
        Get one of the user's prescriptions.

        Raises:
            PrescriptionNotFoundError: If missing or owned by someone else
        """
        prescription = await self._prescription_repository.find_by_id(prescription_id)
        if prescription is None or prescription.user_id != user_id:
            raise PrescriptionNotFoundError(prescription_id)
        return prescription
