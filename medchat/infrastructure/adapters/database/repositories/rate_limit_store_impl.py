"""
Database Rate Limit Store

"""
from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession

from medchat.core.domain.entities import RateLimitWindow
from medchat.core.domain.repositories import RateLimitStore
from medchat.core.domain.value_objects import UserId
from medchat.shared.exceptions import RepositoryError
from medchat.shared.utils import ensure_utc, utc_now
from ..connection import DatabaseManager
from ..models import RateLimitModel


class DatabaseRateLimitStore(RateLimitStore):
    """
    Rate-limit windows in the ``rate_limits`` table.

    Each call runs in its own short transaction, so a consumed request
    stays counted even when the request that consumed it later fails.
    """

    def __init__(self, db_manager: DatabaseManager):
        self._db_manager = db_manager

    @property
    def backend_name(self) -> str:
        return "database"

    async def get_window(self, user_id: UserId) -> Optional[RateLimitWindow]:
        try:
            async with self._db_manager.get_session() as session:
                model = await session.get(RateLimitModel, user_id.value)
                return self._model_to_domain(model) if model else None

        except Exception as e:
            raise RepositoryError(f"Failed to read rate limit window: {str(e)}")

    async def save_window(self, window: RateLimitWindow) -> None:
        try:
            async with self._db_manager.get_session() as session:
                await self._upsert(session, window)

        except Exception as e:
            raise RepositoryError(f"Failed to save rate limit window: {str(e)}")

    async def _upsert(self, session: AsyncSession, window: RateLimitWindow) -> None:
        model = await session.get(RateLimitModel, window.user_id.value)
        if model is None:
            session.add(RateLimitModel(
                user_id=window.user_id.value,
                request_count=window.request_count,
                reset_at=window.reset_at
            ))
        else:
            model.request_count = window.request_count
            model.reset_at = window.reset_at
            model.updated_at = utc_now()
        await session.flush()

    def _model_to_domain(self, model: RateLimitModel) -> RateLimitWindow:
        return RateLimitWindow(
            user_id=UserId(model.user_id),
            request_count=model.request_count,
            reset_at=ensure_utc(model.reset_at)
        )
