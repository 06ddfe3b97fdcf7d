"""
Identity Provider Interface

"""
from abc import ABC, abstractmethod
from typing import Mapping

from ..entities import Profile


class IdentityProvider(ABC):
    """
    Resolves the caller of a request to a profile.

    Kept separate from the web layer so a token-based provider can
    replace the header-based one without touching use cases.
    """

    @abstractmethod
    async def authenticate(self, headers: Mapping[str, str]) -> Profile:
        """
        Identify the caller from request headers.

        Raises:
            AuthenticationError: If the caller cannot be identified
        """
        pass
