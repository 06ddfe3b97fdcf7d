"""
Chat Repository Interface

"""
from abc import ABC, abstractmethod
from typing import List, Optional

from ..entities import ChatSession, Message, SessionStatus
from ..value_objects import SessionId, UserId


class ChatRepository(ABC):
    """
    Persistence port for chat sessions and the messages inside them.

    Implementations raise RepositoryError for storage failures and never
    enforce ownership; callers check that a session belongs to the user.
    """

    @abstractmethod
    async def save_session(self, session: ChatSession) -> ChatSession:
        """Insert a new chat session."""
        pass

    @abstractmethod
    async def find_session_by_id(self, session_id: SessionId) -> Optional[ChatSession]:
        pass

    @abstractmethod
    async def find_sessions_by_user(
        self,
        user_id: UserId,
        statuses: Optional[List[SessionStatus]] = None
    ) -> List[ChatSession]:
        """
        List a user's sessions, most recent activity first.

        Args:
            user_id: Owner identifier
            statuses: Only return sessions in one of these states

        Returns:
            Matching sessions, possibly empty
        """
        pass

    @abstractmethod
    async def update_session(self, session: ChatSession) -> ChatSession:
        """
        Persist changes to an existing session.

        Raises:
            ChatSessionNotFoundError: If the session row is gone
        """
        pass

    @abstractmethod
    async def delete_session(self, session_id: SessionId) -> bool:
        """
        Remove a session along with its messages and attachment rows.

        Returns:
            False when there was nothing to delete
        """
        pass

    @abstractmethod
    async def reserve_message_sequence(self, session_id: SessionId) -> Optional[int]:
        """
        Atomically claim the next message position of a session.

        Increments the stored message counter and bumps the activity time
        in one statement, so concurrent writers never share a position.

        Returns:
            The claimed 0-based sequence, or None if the session is gone
        """
        pass

    @abstractmethod
    async def save_message(self, message: Message) -> Message:
        pass

    @abstractmethod
    async def find_messages_by_session(
        self,
        session_id: SessionId,
        limit: Optional[int] = None,
        offset: int = 0
    ) -> List[Message]:
        """Page through a session's messages in sequence order."""
        pass

    @abstractmethod
    async def find_recent_messages(self, session_id: SessionId, limit: int) -> List[Message]:
        """Return the newest ``limit`` messages, oldest of them first."""
        pass

    @abstractmethod
    async def get_session_message_count(self, session_id: SessionId) -> int:
        pass

    @abstractmethod
    async def commit(self) -> None:
        """
        Make pending changes durable.

        Used before raising errors whose records must survive the rollback
        of the surrounding request.
        """
        pass
