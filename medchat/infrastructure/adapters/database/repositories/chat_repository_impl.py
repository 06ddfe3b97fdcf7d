"""
Chat Repository Implementation

"""
from typing import Dict, List, Optional
from sqlalchemy import select, delete, func, update
from sqlalchemy.ext.asyncio import AsyncSession

from medchat.core.domain.entities import ChatSession, Message, SessionStatus, MessageRole, MessageStatus
from medchat.core.domain.repositories import ChatRepository
from medchat.core.domain.value_objects import SessionId, UserId
from medchat.shared.exceptions import ChatSessionNotFoundError, RepositoryError
from medchat.shared.utils import ensure_utc, utc_now
from ..models import ChatSessionModel, MessageModel, AttachmentModel


class ChatRepositoryImpl(ChatRepository):
    """
    SQLAlchemy implementation of ChatRepository.

    Adapter that implements the domain repository interface using SQLAlchemy.
    """

    def __init__(self, session: AsyncSession):
        """
        Initialize repository with database session.

        Args:
            session: Database session for operations
        """
        self._session = session

    async def save_session(self, chat_session: ChatSession) -> ChatSession:
        """
        Save a chat session to the repository.

        Args:
            chat_session: Chat session entity to save

        Returns:
            Saved chat session entity

        Raises:
            RepositoryError: If save operation fails
        """
        try:
            session_model = self._session_domain_to_model(chat_session)

            self._session.add(session_model)
            await self._session.flush()

            return self._session_model_to_domain(session_model)

        except Exception as e:
            raise RepositoryError(f"Failed to save chat session: {str(e)}")

    async def find_session_by_id(self, session_id: SessionId) -> Optional[ChatSession]:
        try:
            stmt = select(ChatSessionModel).where(ChatSessionModel.id == session_id.value)

            result = await self._session.execute(stmt)
            session_model = result.scalar_one_or_none()

            if session_model is None:
                return None

            return self._session_model_to_domain(session_model)

        except Exception as e:
            raise RepositoryError(f"Failed to find chat session by ID: {str(e)}")

    async def find_sessions_by_user(
        self,
        user_id: UserId,
        statuses: Optional[List[SessionStatus]] = None
    ) -> List[ChatSession]:
        try:
            stmt = select(ChatSessionModel).where(ChatSessionModel.user_id == user_id.value)
            if statuses:
                stmt = stmt.where(ChatSessionModel.status.in_([s.value for s in statuses]))
            stmt = stmt.order_by(ChatSessionModel.last_activity_at.desc(), ChatSessionModel.created_at.desc())

            result = await self._session.execute(stmt)
            return [self._session_model_to_domain(model) for model in result.scalars().all()]

        except Exception as e:
            raise RepositoryError(f"Failed to find chat sessions for user: {str(e)}")

    async def update_session(self, chat_session: ChatSession) -> ChatSession:
        """
        Update an existing chat session.

        Raises:
            ChatSessionNotFoundError: If session doesn't exist
            RepositoryError: If update operation fails
        """
        try:
            session_model = await self._session.get(ChatSessionModel, chat_session.session_id.value)
            if session_model is None:
                raise ChatSessionNotFoundError(chat_session.session_id.value)

            session_model.specialty = chat_session.specialty
            session_model.status = chat_session.status.value
            session_model.title = chat_session.title
            session_model.last_activity_at = chat_session.last_activity_at
            session_model.updated_at = chat_session.updated_at

            await self._session.flush()
            return self._session_model_to_domain(session_model)

        except ChatSessionNotFoundError:
            raise
        except Exception as e:
            raise RepositoryError(f"Failed to update chat session: {str(e)}")

    async def delete_session(self, session_id: SessionId) -> bool:
        try:
            # Children first, so the delete does not depend on database-level cascades
            await self._session.execute(
                delete(AttachmentModel).where(AttachmentModel.session_id == session_id.value)
            )
            await self._session.execute(
                delete(MessageModel).where(MessageModel.session_id == session_id.value)
            )
            result = await self._session.execute(
                delete(ChatSessionModel).where(ChatSessionModel.id == session_id.value)
            )
            await self._session.flush()
            self._session.expunge_all()

            return result.rowcount > 0

        except Exception as e:
            raise RepositoryError(f"Failed to delete chat session: {str(e)}")

    async def reserve_message_sequence(self, session_id: SessionId) -> Optional[int]:
        try:
            now = utc_now()
            # The increment takes the row's write lock until the transaction ends
            result = await self._session.execute(
                update(ChatSessionModel)
                .where(ChatSessionModel.id == session_id.value)
                .values(
                    message_count=ChatSessionModel.message_count + 1,
                    last_activity_at=now,
                    updated_at=now
                )
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                return None

            count = await self._session.scalar(
                select(ChatSessionModel.message_count).where(ChatSessionModel.id == session_id.value)
            )
            return count - 1

        except Exception as e:
            raise RepositoryError(f"Failed to reserve message sequence: {str(e)}")

    async def save_message(self, message: Message) -> Message:
        try:
            message_model = self._message_domain_to_model(message)

            self._session.add(message_model)
            await self._session.flush()

            return message

        except Exception as e:
            raise RepositoryError(f"Failed to save message: {str(e)}")

    async def find_messages_by_session(
        self,
        session_id: SessionId,
        limit: Optional[int] = None,
        offset: int = 0
    ) -> List[Message]:
        try:
            stmt = (
                select(MessageModel)
                .where(MessageModel.session_id == session_id.value)
                .order_by(MessageModel.sequence.asc())
                .offset(offset)
            )
            if limit is not None:
                stmt = stmt.limit(limit)

            result = await self._session.execute(stmt)
            return await self._to_domain_messages(list(result.scalars().all()))

        except Exception as e:
            raise RepositoryError(f"Failed to find messages for session: {str(e)}")

    async def find_recent_messages(self, session_id: SessionId, limit: int) -> List[Message]:
        try:
            stmt = (
                select(MessageModel)
                .where(MessageModel.session_id == session_id.value)
                .order_by(MessageModel.sequence.desc())
                .limit(limit)
            )

            result = await self._session.execute(stmt)
            models = list(result.scalars().all())
            models.reverse()
            return await self._to_domain_messages(models)

        except Exception as e:
            raise RepositoryError(f"Failed to find recent messages: {str(e)}")

    async def get_session_message_count(self, session_id: SessionId) -> int:
        try:
            stmt = (
                select(func.count(MessageModel.id))
                .where(MessageModel.session_id == session_id.value)
            )

            result = await self._session.execute(stmt)
            return result.scalar_one()

        except Exception as e:
            raise RepositoryError(f"Failed to count messages: {str(e)}")

    async def commit(self) -> None:
        try:
            await self._session.commit()
        except Exception as e:
            raise RepositoryError(f"Failed to commit chat changes: {str(e)}")

    async def _to_domain_messages(self, models: List[MessageModel]) -> List[Message]:
        attachment_ids = await self._attachment_ids_for([m.id for m in models])
        return [
            self._message_model_to_domain(model, attachment_ids.get(model.id, []))
            for model in models
        ]

    async def _attachment_ids_for(self, message_ids: List[str]) -> Dict[str, List[str]]:
        if not message_ids:
            return {}

        stmt = (
            select(AttachmentModel.id, AttachmentModel.message_id)
            .where(AttachmentModel.message_id.in_(message_ids))
            .order_by(AttachmentModel.created_at.asc())
        )
        result = await self._session.execute(stmt)

        by_message: Dict[str, List[str]] = {}
        for attachment_id, message_id in result.all():
            by_message.setdefault(message_id, []).append(attachment_id)
        return by_message

    def _session_domain_to_model(self, chat_session: ChatSession) -> ChatSessionModel:
        """Convert domain ChatSession to database model."""
        return ChatSessionModel(
            id=chat_session.session_id.value,
            user_id=chat_session.user_id.value,
            specialty=chat_session.specialty,
            status=chat_session.status.value,
            title=chat_session.title,
            message_count=chat_session.message_count,
            last_activity_at=chat_session.last_activity_at,
            created_at=chat_session.created_at,
            updated_at=chat_session.updated_at
        )

    def _session_model_to_domain(self, session_model: ChatSessionModel) -> ChatSession:
        """Convert database model to domain ChatSession."""
        return ChatSession(
            session_id=SessionId(session_model.id),
            user_id=UserId(session_model.user_id),
            specialty=session_model.specialty,
            status=SessionStatus(session_model.status),
            created_at=ensure_utc(session_model.created_at),
            updated_at=ensure_utc(session_model.updated_at),
            last_activity_at=ensure_utc(session_model.last_activity_at),
            message_count=session_model.message_count,
            title=session_model.title
        )

    def _message_domain_to_model(self, message: Message) -> MessageModel:
        """Convert domain Message to database model."""
        return MessageModel(
            id=message.message_id,
            session_id=message.session_id.value,
            sequence=message.sequence,
            role=message.role.value,
            content=message.content,
            status=message.status.value,
            model=message.model,
            token_count=message.token_count,
            processing_time_ms=message.processing_time_ms,
            error_message=message.error_message,
            created_at=message.created_at,
            updated_at=message.updated_at
        )

    def _message_model_to_domain(self, message_model: MessageModel, attachment_ids: List[str]) -> Message:
        """Convert database model to domain Message."""
        return Message(
            message_id=message_model.id,
            session_id=SessionId(message_model.session_id),
            role=MessageRole(message_model.role),
            content=message_model.content,
            sequence=message_model.sequence,
            status=MessageStatus(message_model.status),
            created_at=ensure_utc(message_model.created_at),
            updated_at=ensure_utc(message_model.updated_at),
            attachment_ids=list(attachment_ids),
            model=message_model.model,
            token_count=message_model.token_count,
            processing_time_ms=message_model.processing_time_ms,
            error_message=message_model.error_message
        )
