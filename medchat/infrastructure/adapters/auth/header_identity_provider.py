"""
Header Identity Provider

"""
import logging
from typing import Mapping

from medchat.core.domain.entities import Profile
from medchat.core.domain.services import IdentityProvider
from medchat.core.domain.value_objects import UserId
from medchat.shared.exceptions import AuthenticationError
from ..database.connection import DatabaseManager
from ..database.repositories import ProfileRepositoryImpl


logger = logging.getLogger(__name__)

USER_ID_HEADER = "X-User-Id"


class HeaderIdentityProvider(IdentityProvider):
    """
    Identifies the caller by the profile ID in the ``X-User-Id`` header.

    Intended to sit behind a gateway that has already authenticated the
    user. The header must name an existing profile.
    """

    def __init__(self, db_manager: DatabaseManager, header_name: str = USER_ID_HEADER):
        self._db_manager = db_manager
        self._header_name = header_name.lower()

    async def authenticate(self, headers: Mapping[str, str]) -> Profile:
        raw_user_id = self._header_value(headers)
        if not raw_user_id:
            raise AuthenticationError(f"Missing {USER_ID_HEADER} header")

        try:
            user_id = UserId(raw_user_id)
        except ValueError:
            raise AuthenticationError("Invalid user identifier")

        async with self._db_manager.get_session() as session:
            profile = await ProfileRepositoryImpl(session).find_by_id(user_id)

        if profile is None:
            logger.info(f"Rejected request for unknown profile {user_id}")
            raise AuthenticationError("Unknown user")

        return profile

    def _header_value(self, headers: Mapping[str, str]) -> str:
        # Starlette headers are case-insensitive; plain dicts are not
        value = headers.get(self._header_name)
        if value is None:
            for key, candidate in headers.items():
                if key.lower() == self._header_name:
                    value = candidate
                    break
        return (value or "").strip()
