"""
Attachment Repository Implementation

"""
from typing import List, Optional
from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession

from medchat.core.domain.entities import Attachment
from medchat.core.domain.repositories import AttachmentRepository
from medchat.core.domain.value_objects import AttachmentMetadata, SessionId, UserId
from medchat.shared.exceptions import AttachmentNotFoundError, RepositoryError
from medchat.shared.utils import ensure_utc
from ..models import AttachmentModel


class AttachmentRepositoryImpl(AttachmentRepository):
    """
    SQLAlchemy implementation of AttachmentRepository.
    """

    def __init__(self, session: AsyncSession):
        self._session = session

    async def save(self, attachment: Attachment) -> Attachment:
        try:
            self._session.add(self._domain_to_model(attachment))
            await self._session.flush()
            return attachment

        except Exception as e:
            raise RepositoryError(f"Failed to save attachment: {str(e)}")

    async def find_by_id(self, attachment_id: str) -> Optional[Attachment]:
        try:
            model = await self._session.get(AttachmentModel, attachment_id)
            return self._model_to_domain(model) if model else None

        except Exception as e:
            raise RepositoryError(f"Failed to find attachment by ID: {str(e)}")

    async def find_by_ids(self, attachment_ids: List[str]) -> List[Attachment]:
        if not attachment_ids:
            return []
        try:
            stmt = select(AttachmentModel).where(AttachmentModel.id.in_(attachment_ids))
            result = await self._session.execute(stmt)
            by_id = {model.id: model for model in result.scalars().all()}

            return [self._model_to_domain(by_id[i]) for i in attachment_ids if i in by_id]

        except Exception as e:
            raise RepositoryError(f"Failed to find attachments: {str(e)}")

    async def find_by_session(self, session_id: SessionId) -> List[Attachment]:
        try:
            stmt = (
                select(AttachmentModel)
                .where(AttachmentModel.session_id == session_id.value)
                .order_by(AttachmentModel.created_at.asc())
            )
            result = await self._session.execute(stmt)
            return [self._model_to_domain(model) for model in result.scalars().all()]

        except Exception as e:
            raise RepositoryError(f"Failed to find attachments for session: {str(e)}")

    async def update(self, attachment: Attachment) -> Attachment:
        try:
            model = await self._session.get(AttachmentModel, attachment.attachment_id)
            if model is None:
                raise AttachmentNotFoundError(attachment.attachment_id)

            model.message_id = attachment.message_id
            model.updated_at = attachment.updated_at

            await self._session.flush()
            return attachment

        except AttachmentNotFoundError:
            raise
        except Exception as e:
            raise RepositoryError(f"Failed to update attachment: {str(e)}")

    async def delete(self, attachment_id: str) -> bool:
        try:
            result = await self._session.execute(
                delete(AttachmentModel).where(AttachmentModel.id == attachment_id)
            )
            await self._session.flush()
            return result.rowcount > 0

        except Exception as e:
            raise RepositoryError(f"Failed to delete attachment: {str(e)}")

    def _domain_to_model(self, attachment: Attachment) -> AttachmentModel:
        return AttachmentModel(
            id=attachment.attachment_id,
            session_id=attachment.session_id.value,
            user_id=attachment.user_id.value,
            message_id=attachment.message_id,
            filename=attachment.metadata.filename,
            content_type=attachment.metadata.content_type,
            size_bytes=attachment.metadata.size_bytes,
            storage_path=attachment.storage_path,
            created_at=attachment.created_at,
            updated_at=attachment.updated_at
        )

    def _model_to_domain(self, model: AttachmentModel) -> Attachment:
        return Attachment(
            attachment_id=model.id,
            session_id=SessionId(model.session_id),
            user_id=UserId(model.user_id),
            metadata=AttachmentMetadata(
                filename=model.filename,
                size_bytes=model.size_bytes,
                content_type=model.content_type
            ),
            storage_path=model.storage_path,
            message_id=model.message_id,
            created_at=ensure_utc(model.created_at),
            updated_at=ensure_utc(model.updated_at)
        )
