"""
Profile Repository Implementation

"""
from typing import Optional
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from medchat.core.domain.entities import Profile
from medchat.core.domain.repositories import ProfileRepository
from medchat.core.domain.value_objects import UserId
from medchat.shared.exceptions import DuplicateProfileError, ProfileNotFoundError, RepositoryError
from medchat.shared.utils import ensure_utc
from ..models import ProfileModel


class ProfileRepositoryImpl(ProfileRepository):
    """
    SQLAlchemy implementation of ProfileRepository.
    """

    def __init__(self, session: AsyncSession):
        self._session = session

    async def save(self, profile: Profile) -> Profile:
        try:
            self._session.add(self._domain_to_model(profile))
            await self._session.flush()
            return profile

        except IntegrityError:
            await self._session.rollback()
            raise DuplicateProfileError(profile.email)
        except Exception as e:
            raise RepositoryError(f"Failed to save profile: {str(e)}")

    async def find_by_id(self, user_id: UserId) -> Optional[Profile]:
        try:
            model = await self._session.get(ProfileModel, user_id.value)
            return self._model_to_domain(model) if model else None

        except Exception as e:
            raise RepositoryError(f"Failed to find profile by ID: {str(e)}")

    async def find_by_email(self, email: str) -> Optional[Profile]:
        try:
            stmt = select(ProfileModel).where(ProfileModel.email == email.strip().lower())
            result = await self._session.execute(stmt)
            model = result.scalar_one_or_none()
            return self._model_to_domain(model) if model else None

        except Exception as e:
            raise RepositoryError(f"Failed to find profile by email: {str(e)}")

    async def update(self, profile: Profile) -> Profile:
        try:
            model = await self._session.get(ProfileModel, profile.user_id.value)
            if model is None:
                raise ProfileNotFoundError(profile.user_id.value)

            model.display_name = profile.display_name
            model.preferred_specialty = profile.preferred_specialty
            model.updated_at = profile.updated_at

            await self._session.flush()
            return self._model_to_domain(model)

        except ProfileNotFoundError:
            raise
        except Exception as e:
            raise RepositoryError(f"Failed to update profile: {str(e)}")

    def _domain_to_model(self, profile: Profile) -> ProfileModel:
        return ProfileModel(
            id=profile.user_id.value,
            email=profile.email,
            display_name=profile.display_name,
            preferred_specialty=profile.preferred_specialty,
            created_at=profile.created_at,
            updated_at=profile.updated_at
        )

    def _model_to_domain(self, model: ProfileModel) -> Profile:
        return Profile(
            user_id=UserId(model.id),
            email=model.email,
            display_name=model.display_name,
            preferred_specialty=model.preferred_specialty,
            created_at=ensure_utc(model.created_at),
            updated_at=ensure_utc(model.updated_at)
        )
