"""
Chat Service Interface

"""
from abc import ABC, abstractmethod
from typing import List, Optional, Dict, Any, AsyncIterator
from dataclasses import dataclass, field
from datetime import datetime, timezone


@dataclass
class ChatMessage:
    """
    A single conversation turn handed to an inference provider.
    """
    content: str
    role: str  # "user" or "assistant"
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    metadata: Optional[Dict[str, Any]] = None


@dataclass
class ChatResponse:
    """
    A complete reply produced by an inference provider.
    """
    message: str
    model: str
    usage: Optional[Dict[str, Any]] = None
    processing_time_ms: int = 0
    metadata: Optional[Dict[str, Any]] = None

    @property
    def total_tokens(self) -> Optional[int]:
        if not self.usage:
            return None
        return self.usage.get("total_tokens")


@dataclass
class StreamingChatChunk:
    """
    One piece of a streamed reply; the last chunk has ``is_complete`` set.
    """
    content: str
    is_complete: bool
    chunk_index: int
    metadata: Optional[Dict[str, Any]] = None


class ChatService(ABC):
    """
    Abstract interface for inference providers.

    Implementations receive the conversation history and the system
    prompt separately, so each provider can place the prompt wherever its
    API expects it.
    """

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Short provider name, e.g. ``gemini``."""
        pass

    @abstractmethod
    async def generate_response(
        self,
        messages: List[ChatMessage],
        system_prompt: Optional[str] = None,
        model: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None
    ) -> ChatResponse:
        """
        Generate a chat response.

        Args:
            messages: Conversation history, oldest first
            system_prompt: Instructions that frame the conversation
            model: Optional model name to use
            temperature: Response creativity (0.0 to 1.0)
            max_tokens: Maximum tokens in response

        Returns:
            Chat response

        Raises:
            MessageGenerationError: If response generation fails
        """
        pass

    @abstractmethod
    def generate_streaming_response(
        self,
        messages: List[ChatMessage],
        system_prompt: Optional[str] = None,
        model: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None
    ) -> AsyncIterator[StreamingChatChunk]:
        """
        Generate a streaming chat response.

        Args:
            messages: Conversation history, oldest first
            system_prompt: Instructions that frame the conversation
            model: Optional model name to use
            temperature: Response creativity (0.0 to 1.0)
            max_tokens: Maximum tokens in response

        Yields:
            Streaming chat chunks

        Raises:
            MessageGenerationError: If response generation fails
        """
        pass

    @abstractmethod
    def get_available_models(self) -> List[str]:
        """
        Get list of available chat models.

        Returns:
            List of model names
        """
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """
        Check if the chat service is healthy.

        Returns:
            True if service is healthy
        """
        pass
