"""
Session Access Helpers

Shared lookup of sessions on behalf of a user.
"""
from typing import Union

from ...domain.entities import ChatSession, SessionStatus
from ...domain.repositories import ChatRepository
from ...domain.value_objects import SessionId, UserId
from medchat.shared.exceptions import ChatSessionNotFoundError, InvalidSessionStateError


def parse_session_id(session_id: Union[SessionId, str]) -> SessionId:
    """
    Convert a raw identifier to a SessionId.

    Raises:
        ChatSessionNotFoundError: If the identifier is not a valid session ID
    """
    if isinstance(session_id, SessionId):
        return session_id
    try:
        return SessionId(str(session_id))
    except ValueError:
        raise ChatSessionNotFoundError(str(session_id))


async def load_owned_session(
    chat_repository: ChatRepository,
    user_id: UserId,
    session_id: Union[SessionId, str],
    require_active: bool = False
) -> ChatSession:
    """
    Load a session owned by ``user_id``.

    Sessions of other users and deleted sessions are reported as missing.

    Raises:
        ChatSessionNotFoundError: If the session does not exist for this user
        InvalidSessionStateError: If ``require_active`` and the session is archived
    """
    session_id = parse_session_id(session_id)
    session = await chat_repository.find_session_by_id(session_id)

    if session is None or not session.is_owned_by(user_id) or session.status == SessionStatus.DELETED:
        raise ChatSessionNotFoundError(session_id.value)

    if require_active and not session.can_receive_messages:
        raise InvalidSessionStateError(
            f"Chat session {session_id.value} is {session.status.value} and cannot receive messages",
            session_id=session_id.value,
            current_state=session.status.value,
            expected_state=SessionStatus.ACTIVE.value
        )

    return session
