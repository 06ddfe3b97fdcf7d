"""
Chat Use Cases

"""
from typing import List, Optional, Dict, Any, AsyncIterator, Union
from dataclasses import dataclass, field
import logging
import time

from ...domain.entities import Attachment, ChatSession, Message, SessionStatus
from ...domain.repositories import AttachmentRepository, ChatRepository, ProfileRepository
from ...domain.services import (
    AttachmentPolicy,
    ChatMessage,
    ChatService,
    RateLimitDecision,
    RateLimiter,
    SpecialtyCatalog,
    StreamingChatChunk,
)
from ...domain.value_objects import SessionId, UserId
from ....infrastructure.adapters.storage.file_storage import FileStorage, session_attachment_directory
from medchat.shared.constants import ChatConstants
from medchat.shared.exceptions import (
    AttachmentNotFoundError,
    AttachmentValidationError,
    ChatSessionNotFoundError,
    MessageGenerationError,
    ValidationError,
    FileStorageError,
)
from medchat.shared.utils import validate_text_content
from .attachment_use_case import read_text_attachments
from .session_access import load_owned_session


@dataclass
class StartSessionRequest:
    """Request object for starting a chat session."""
    user_id: UserId
    specialty: Optional[str] = None
    title: Optional[str] = None


@dataclass
class SendMessageRequest:
    """Request object for sending a message."""
    user_id: UserId
    session_id: Union[SessionId, str]
    content: str
    attachment_ids: List[str] = field(default_factory=list)
    model: Optional[str] = None
    temperature: Optional[float] = None


@dataclass
class SendMessageResponse:
    """Response object for a completed exchange."""
    session_id: str
    user_message: Message
    assistant_message: Message
    rate_limit: RateLimitDecision
    usage: Optional[Dict[str, Any]] = None


@dataclass
class PreparedMessage:
    """
    A persisted user message whose reply has not been generated yet.

    Carries everything needed to generate and store the reply outside the
    request that created it.
    """
    session_id: SessionId
    user_message: Message
    conversation: List[ChatMessage]
    system_prompt: str
    rate_limit: RateLimitDecision
    model: Optional[str] = None
    temperature: Optional[float] = None


@dataclass
class ChatHistoryRequest:
    """Request object for getting chat history."""
    user_id: UserId
    session_id: Union[SessionId, str]
    limit: int = ChatConstants.DEFAULT_HISTORY_LIMIT
    offset: int = 0


@dataclass
class ChatHistoryResponse:
    """Response object for chat history."""
    session: ChatSession
    messages: List[Message]
    total_messages: int
    has_more: bool


class ChatUseCase:
    """
    Use case for chat operations.

    Orchestrates chat sessions, message handling and the call to the
    inference provider. Every operation acts on behalf of a user; sessions
    owned by someone else are reported as missing.
    """

    def __init__(
        self,
        chat_repository: ChatRepository,
        attachment_repository: AttachmentRepository,
        profile_repository: ProfileRepository,
        chat_service: ChatService,
        rate_limiter: RateLimiter,
        specialty_catalog: SpecialtyCatalog,
        attachment_policy: AttachmentPolicy,
        file_storage: FileStorage,
        default_temperature: float = ChatConstants.DEFAULT_TEMPERATURE,
        default_max_tokens: int = ChatConstants.DEFAULT_MAX_TOKENS,
        history_window: int = ChatConstants.HISTORY_WINDOW
    ):
        """
        Initialize chat use case.

        Args:
            chat_repository: Repository for sessions and messages
            attachment_repository: Repository for attachment records
            profile_repository: Repository for profiles
            chat_service: Inference provider
            rate_limiter: Per-user request quota
            specialty_catalog: Specialty prompts
            attachment_policy: Attachment rules and prompt rendering
            file_storage: Storage holding attachment files
            default_temperature: Temperature used when a request sets none
            default_max_tokens: Reply length cap
            history_window: Number of past messages sent to the provider
        """
        self._chat_repository = chat_repository
        self._attachment_repository = attachment_repository
        self._profile_repository = profile_repository
        self._chat_service = chat_service
        self._rate_limiter = rate_limiter
        self._specialty_catalog = specialty_catalog
        self._attachment_policy = attachment_policy
        self._file_storage = file_storage
        self._default_temperature = default_temperature
        self._default_max_tokens = default_max_tokens
        self._history_window = history_window
        self._logger = logging.getLogger(__name__)

    # Sessions

    async def start_session(self, request: StartSessionRequest) -> ChatSession:
        """
        Start a new chat session.

        The specialty defaults to the user's preferred specialty.

        Raises:
            UnknownSpecialtyError: If the specialty is unknown
            ValidationError: If the title is invalid
        """
        specialty_key = request.specialty
        if specialty_key is None or not specialty_key.strip():
            profile = await self._profile_repository.find_by_id(request.user_id)
            specialty_key = profile.preferred_specialty if profile else None

        specialty = self._specialty_catalog.get_specialty(specialty_key)

        try:
            session = ChatSession.create(
                user_id=request.user_id,
                specialty=specialty.key,
                title=request.title
            )
        except ValueError as e:
            raise ValidationError(str(e), "title", request.title)

        saved = await self._chat_repository.save_session(session)
        self._logger.info(f"Started chat session {saved.session_id} ({saved.specialty})")
        return saved

    async def list_sessions(self, user_id: UserId, include_archived: bool = False) -> List[ChatSession]:
        statuses = [SessionStatus.ACTIVE]
        if include_archived:
            statuses.append(SessionStatus.ARCHIVED)
        return await self._chat_repository.find_sessions_by_user(user_id, statuses)

    async def get_session(self, user_id: UserId, session_id: Union[SessionId, str]) -> ChatSession:
        return await load_owned_session(self._chat_repository, user_id, session_id)

    async def rename_session(
        self,
        user_id: UserId,
        session_id: Union[SessionId, str],
        title: str
    ) -> ChatSession:
        session = await load_owned_session(self._chat_repository, user_id, session_id)
        try:
            session.set_title(title)
        except ValueError as e:
            raise ValidationError(str(e), "title", title)
        return await self._chat_repository.update_session(session)

    async def archive_session(self, user_id: UserId, session_id: Union[SessionId, str]) -> ChatSession:
        session = await load_owned_session(self._chat_repository, user_id, session_id)
        session.archive()
        self._logger.info(f"Archived chat session {session.session_id}")
        return await self._chat_repository.update_session(session)

    async def restore_session(self, user_id: UserId, session_id: Union[SessionId, str]) -> ChatSession:
        session = await load_owned_session(self._chat_repository, user_id, session_id)
        session.reactivate()
        return await self._chat_repository.update_session(session)

    async def delete_session(self, user_id: UserId, session_id: Union[SessionId, str]) -> bool:
        """
        Delete a chat session with its messages, attachment records and files.

        Raises:
            ChatSessionNotFoundError: If the session doesn't exist for this user
        """
        session = await load_owned_session(self._chat_repository, user_id, session_id)

        deleted = await self._chat_repository.delete_session(session.session_id)

        try:
            await self._file_storage.delete_directory(
                session_attachment_directory(session.session_id.value)
            )
        except FileStorageError as e:
            self._logger.warning(f"Could not remove files of session {session.session_id}: {e}")

        self._logger.info(f"Deleted chat session {session.session_id}")
        return deleted

    # Messages

    async def send_message(self, request: SendMessageRequest) -> SendMessageResponse:
        """
        Send a message and get the assistant's reply.

        Args:
            request: Send message request

        Returns:
            Both persisted messages and the caller's remaining quota

        Raises:
            ChatSessionNotFoundError: If session doesn't exist for this user
            InvalidSessionStateError: If the session is archived
            ValidationError: If the content is empty or too long
            AttachmentNotFoundError: If a referenced attachment is unknown
            AttachmentValidationError: If attachments are reused or too many
            RateLimitExceededError: If the user's quota is used up
            MessageGenerationError: If the provider fails; a failed
                assistant record is stored first
        """
        prepared = await self.prepare_message(request)
        start = time.perf_counter()

        try:
            response = await self._chat_service.generate_response(
                messages=prepared.conversation,
                system_prompt=prepared.system_prompt,
                model=prepared.model,
                temperature=prepared.temperature,
                max_tokens=self._default_max_tokens
            )
            if not response.message or not response.message.strip():
                raise MessageGenerationError("The provider returned an empty reply")
        except Exception as e:
            await self._record_failure(prepared, e)
            raise self._generation_error(prepared, e)

        processing_time_ms = response.processing_time_ms or int((time.perf_counter() - start) * 1000)
        assistant_message = await self._store_reply(
            prepared,
            content=response.message,
            model=response.model,
            token_count=response.total_tokens,
            processing_time_ms=processing_time_ms
        )

        self._logger.info(
            f"Generated reply for session {prepared.session_id} in {processing_time_ms}ms"
        )

        return SendMessageResponse(
            session_id=prepared.session_id.value,
            user_message=prepared.user_message,
            assistant_message=assistant_message,
            rate_limit=prepared.rate_limit,
            usage=response.usage
        )

    async def prepare_message(self, request: SendMessageRequest) -> PreparedMessage:
        """
        Validate a message, count it against the quota and persist it.

        The user message is committed before the provider is called.

        Raises:
            Same validation, ownership and quota errors as ``send_message``
        """
        session = await load_owned_session(
            self._chat_repository, request.user_id, request.session_id, require_active=True
        )

        if not validate_text_content(request.content):
            raise ValidationError(
                f"Message must be between 1 and {ChatConstants.MAX_MESSAGE_LENGTH} characters",
                "content"
            )
        self._validate_model(request.model)

        attachments = await self._resolve_attachments(request, session)

        rate_limit = await self._rate_limiter.enforce(request.user_id)

        sequence = await self._chat_repository.reserve_message_sequence(session.session_id)
        if sequence is None:
            raise ChatSessionNotFoundError(session.session_id.value)
        session.record_message(sequence)

        user_message = Message.create_user_message(
            session_id=session.session_id,
            content=request.content,
            sequence=sequence,
            attachment_ids=[a.attachment_id for a in attachments]
        )
        await self._chat_repository.save_message(user_message)

        for attachment in attachments:
            attachment.link_to_message(user_message.message_id)
            await self._attachment_repository.update(attachment)

        await self._chat_repository.commit()

        conversation = await self._build_conversation(session.session_id, user_message, attachments)
        specialty = self._specialty_catalog.get_specialty(session.specialty)

        return PreparedMessage(
            session_id=session.session_id,
            user_message=user_message,
            conversation=conversation,
            system_prompt=specialty.system_prompt,
            rate_limit=rate_limit,
            model=request.model,
            temperature=request.temperature if request.temperature is not None else self._default_temperature
        )

    async def complete_stream(self, prepared: PreparedMessage) -> AsyncIterator[StreamingChatChunk]:
        """
        Stream the reply to a prepared message and persist it at the end.

        Provider chunks are passed through; the final chunk carries the
        stored assistant message ID in its metadata.

        Raises:
            MessageGenerationError: If the provider fails mid-stream; a
                failed assistant record is stored first
        """
        start = time.perf_counter()
        parts: List[str] = []
        model_used = prepared.model
        usage: Optional[Dict[str, Any]] = None
        chunk_index = 0

        try:
            async for chunk in self._chat_service.generate_streaming_response(
                messages=prepared.conversation,
                system_prompt=prepared.system_prompt,
                model=prepared.model,
                temperature=prepared.temperature,
                max_tokens=self._default_max_tokens
            ):
                if chunk.metadata and chunk.metadata.get("model"):
                    model_used = chunk.metadata["model"]
                if chunk.content:
                    parts.append(chunk.content)
                if chunk.is_complete:
                    usage = (chunk.metadata or {}).get("usage") or usage
                    continue

                yield StreamingChatChunk(
                    content=chunk.content,
                    is_complete=False,
                    chunk_index=chunk_index,
                    metadata=chunk.metadata
                )
                chunk_index += 1

            if not "".join(parts).strip():
                raise MessageGenerationError("The provider returned an empty reply")
        except Exception as e:
            await self._record_failure(prepared, e)
            raise self._generation_error(prepared, e)

        processing_time_ms = int((time.perf_counter() - start) * 1000)
        assistant_message = await self._store_reply(
            prepared,
            content="".join(parts),
            model=model_used,
            token_count=usage.get("total_tokens") if usage else None,
            processing_time_ms=processing_time_ms
        )

        yield StreamingChatChunk(
            content="",
            is_complete=True,
            chunk_index=chunk_index,
            metadata={
                "message_id": assistant_message.message_id,
                "user_message_id": prepared.user_message.message_id,
                "model": assistant_message.model,
                "processing_time_ms": processing_time_ms,
                "usage": usage,
            }
        )

    async def stream_message(self, request: SendMessageRequest) -> AsyncIterator[StreamingChatChunk]:
        """
        Send a message and stream the reply within one unit of work.
        """
        prepared = await self.prepare_message(request)
        async for chunk in self.complete_stream(prepared):
            yield chunk

    async def get_history(self, request: ChatHistoryRequest) -> ChatHistoryResponse:
        """
        Get a page of a session's messages in conversation order.

        Raises:
            ChatSessionNotFoundError: If session doesn't exist for this user
            ValidationError: If paging parameters are out of range
        """
        if request.limit < 1 or request.limit > ChatConstants.MAX_HISTORY_LIMIT:
            raise ValidationError(
                f"Limit must be between 1 and {ChatConstants.MAX_HISTORY_LIMIT}", "limit", request.limit
            )
        if request.offset < 0:
            raise ValidationError("Offset cannot be negative", "offset", request.offset)

        session = await load_owned_session(self._chat_repository, request.user_id, request.session_id)

        messages = await self._chat_repository.find_messages_by_session(
            session_id=session.session_id,
            limit=request.limit,
            offset=request.offset
        )
        total_messages = await self._chat_repository.get_session_message_count(session.session_id)

        return ChatHistoryResponse(
            session=session,
            messages=messages,
            total_messages=total_messages,
            has_more=(request.offset + len(messages)) < total_messages
        )

    async def get_session_summary(self, user_id: UserId, session_id: Union[SessionId, str]) -> Dict[str, Any]:
        """
        Get summary and statistics for a chat session.

        Raises:
            ChatSessionNotFoundError: If session doesn't exist for this user
        """
        session = await load_owned_session(self._chat_repository, user_id, session_id)
        messages = await self._chat_repository.find_messages_by_session(session.session_id)
        attachments = await self._attachment_repository.find_by_session(session.session_id)

        user_messages = [m for m in messages if m.is_from_user]
        assistant_messages = [m for m in messages if m.is_from_assistant]
        failed_messages = [m for m in assistant_messages if m.is_failed]

        if messages:
            duration_seconds = (messages[-1].created_at - messages[0].created_at).total_seconds()
        else:
            duration_seconds = 0.0

        return {
            "session_id": session.session_id.value,
            "title": session.display_title,
            "specialty": session.specialty,
            "status": session.status.value,
            "created_at": session.created_at.isoformat(),
            "last_activity_at": session.last_activity_at.isoformat(),
            "total_messages": len(messages),
            "user_messages": len(user_messages),
            "assistant_messages": len(assistant_messages),
            "failed_messages": len(failed_messages),
            "attachment_count": len(attachments),
            "total_tokens": sum(m.token_count or 0 for m in assistant_messages),
            "duration_seconds": duration_seconds,
            "average_response_time_ms": self._calculate_average_response_time(assistant_messages),
        }

    # Helpers

    def _validate_model(self, model: Optional[str]) -> None:
        if model is None:
            return
        available = self._chat_service.get_available_models()
        if model not in available:
            raise ValidationError(
                f"Model {model} is not available. Available: {', '.join(available)}", "model", model
            )

    async def _resolve_attachments(self, request: SendMessageRequest, session: ChatSession) -> List[Attachment]:
        attachment_ids = list(dict.fromkeys(request.attachment_ids or []))
        if not attachment_ids:
            return []

        self._attachment_policy.validate_count(len(attachment_ids))

        found = {a.attachment_id: a for a in await self._attachment_repository.find_by_ids(attachment_ids)}
        attachments: List[Attachment] = []
        for attachment_id in attachment_ids:
            attachment = found.get(attachment_id)
            if (
                attachment is None
                or attachment.session_id != session.session_id
                or attachment.user_id != request.user_id
            ):
                raise AttachmentNotFoundError(attachment_id)
            if attachment.is_linked:
                raise AttachmentValidationError(
                    f"Attachment {attachment_id} is already part of another message",
                    filename=attachment.filename,
                    rule="linked"
                )
            attachments.append(attachment)
        return attachments

    async def _build_conversation(
        self,
        session_id: SessionId,
        user_message: Message,
        attachments: List[Attachment]
    ) -> List[ChatMessage]:
        history = await self._chat_repository.find_recent_messages(session_id, self._history_window)

        conversation: List[ChatMessage] = []
        for message in history:
            if message.is_failed:
                continue
            content = message.content
            if message.message_id == user_message.message_id and attachments:
                text_contents = await read_text_attachments(self._file_storage, attachments)
                context = self._attachment_policy.build_context(attachments, text_contents)
                content = f"{content}\n\n{context}"
            conversation.append(ChatMessage(
                content=content,
                role=message.role.value,
                timestamp=message.created_at
            ))
        return conversation

    async def _store_reply(
        self,
        prepared: PreparedMessage,
        content: str,
        model: Optional[str],
        token_count: Optional[int],
        processing_time_ms: int
    ) -> Message:
        sequence = await self._chat_repository.reserve_message_sequence(prepared.session_id)
        if sequence is None:
            # Deleted while the reply was being generated.
            raise MessageGenerationError(
                "Chat session was deleted before the reply was stored", prepared.session_id.value, model
            )

        assistant_message = Message.create_assistant_message(
            session_id=prepared.session_id,
            content=content,
            sequence=sequence,
            model=model,
            token_count=token_count,
            processing_time_ms=processing_time_ms
        )
        await self._chat_repository.save_message(assistant_message)
        return assistant_message

    async def _record_failure(self, prepared: PreparedMessage, error: Exception) -> None:
        self._logger.error(f"Reply generation failed for session {prepared.session_id}: {error}")
        try:
            sequence = await self._chat_repository.reserve_message_sequence(prepared.session_id)
            if sequence is None:
                return
            failed = Message.create_failed_assistant_message(
                session_id=prepared.session_id,
                sequence=sequence,
                error_message=str(error) or error.__class__.__name__,
                model=prepared.model
            )
            await self._chat_repository.save_message(failed)
            await self._chat_repository.commit()
        except Exception as e:
            self._logger.error(f"Failed to record failed reply for session {prepared.session_id}: {e}")

    @staticmethod
    def _generation_error(prepared: PreparedMessage, error: Exception) -> MessageGenerationError:
        if isinstance(error, MessageGenerationError):
            if error.session_id is None:
                error.session_id = prepared.session_id.value
                error.details["session_id"] = prepared.session_id.value
            return error
        return MessageGenerationError(
            f"Failed to generate reply: {str(error)}",
            session_id=prepared.session_id.value,
            model=prepared.model
        )

    @staticmethod
    def _calculate_average_response_time(messages: List[Message]) -> float:
        times = [m.processing_time_ms for m in messages if m.processing_time_ms is not None]
        if not times:
            return 0.0
        return sum(times) / len(times)


__all__ = [
    "StartSessionRequest",
    "SendMessageRequest",
    "SendMessageResponse",
    "PreparedMessage",
    "ChatHistoryRequest",
    "ChatHistoryResponse",
    "ChatUseCase",
]
