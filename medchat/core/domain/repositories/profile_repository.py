"""
Profile Repository Interface

"""
from abc import ABC, abstractmethod
from typing import Optional

from ..entities import Profile
from ..value_objects import UserId


class ProfileRepository(ABC):
    """Persistence contract for user profiles."""

    @abstractmethod
    async def save(self, profile: Profile) -> Profile:
        """
        Save a new profile.

        Raises:
            DuplicateProfileError: If the email is already registered
            RepositoryError: If save operation fails
        """
        pass

    @abstractmethod
    async def find_by_id(self, user_id: UserId) -> Optional[Profile]:
        """Find a profile by its ID."""
        pass

    @abstractmethod
    async def find_by_email(self, email: str) -> Optional[Profile]:
        """Find a profile by its (lower-cased) email."""
        pass

    @abstractmethod
    async def update(self, profile: Profile) -> Profile:
        """
        Update an existing profile.

        Raises:
            ProfileNotFoundError: If the profile doesn't exist
            RepositoryError: If update operation fails
        """
        pass
