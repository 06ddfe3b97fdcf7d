"""
Profile Use Cases

"""
from dataclasses import dataclass
from typing import Optional
import logging

from ...domain.entities import Profile
from ...domain.repositories import ProfileRepository
from ...domain.services import SpecialtyCatalog
from ...domain.value_objects import UserId
from medchat.shared.exceptions import (
    DuplicateProfileError,
    ProfileNotFoundError,
    UnknownSpecialtyError,
    ValidationError,
    RepositoryError,
)


@dataclass
class CreateProfileRequest:
    """Request object for registering a profile."""
    email: str
    display_name: str
    preferred_specialty: Optional[str] = None


@dataclass
class UpdateProfileRequest:
    """Request object for updating a profile; None leaves a field unchanged."""
    user_id: UserId
    display_name: Optional[str] = None
    preferred_specialty: Optional[str] = None


class ProfileUseCase:
    """
    Use case for profile registration and maintenance.
    """

    def __init__(self, profile_repository: ProfileRepository, specialty_catalog: SpecialtyCatalog):
        self._profile_repository = profile_repository
        self._specialty_catalog = specialty_catalog
        self._logger = logging.getLogger(__name__)

    async def create_profile(self, request: CreateProfileRequest) -> Profile:
        """
        Register a new profile.

        Args:
            request: Create profile request

        Returns:
            Created profile

        Raises:
            ValidationError: If email or display name is invalid
            UnknownSpecialtyError: If the preferred specialty is unknown
            DuplicateProfileError: If the email is already registered
        """
        try:
            specialty = self._specialty_catalog.get_specialty(request.preferred_specialty)

            try:
                profile = Profile.create(
                    email=request.email or "",
                    display_name=request.display_name or "",
                    preferred_specialty=specialty.key
                )
            except ValueError as e:
                raise ValidationError(str(e))

            existing = await self._profile_repository.find_by_email(profile.email)
            if existing is not None:
                raise DuplicateProfileError(profile.email)

            saved = await self._profile_repository.save(profile)
            self._logger.info(f"Created profile {saved.user_id}")
            return saved

        except (ValidationError, UnknownSpecialtyError, DuplicateProfileError):
            raise
        except Exception as e:
            self._logger.error(f"Failed to create profile: {e}")
            raise RepositoryError(f"Failed to create profile: {str(e)}")

    async def get_profile(self, user_id: UserId) -> Profile:
        """
        Get a profile.

        Raises:
            ProfileNotFoundError: If the profile doesn't exist
        """
        profile = await self._profile_repository.find_by_id(user_id)
        if profile is None:
            raise ProfileNotFoundError(str(user_id))
        return profile

    async def update_profile(self, request: UpdateProfileRequest) -> Profile:
        """
        Update display name and/or preferred specialty.

        Raises:
            ProfileNotFoundError: If the profile doesn't exist
            ValidationError: If the new display name is invalid
            UnknownSpecialtyError: If the new specialty is unknown
        """
        profile = await self.get_profile(request.user_id)

        if request.preferred_specialty is not None:
            specialty = self._specialty_catalog.get_specialty(request.preferred_specialty)
            profile.set_preferred_specialty(specialty.key)

        if request.display_name is not None:
            try:
                profile.rename(request.display_name)
            except ValueError as e:
                raise ValidationError(str(e), "display_name", request.display_name)

        updated = await self._profile_repository.update(profile)
        self._logger.info(f"Updated profile {updated.user_id}")
        return updated
