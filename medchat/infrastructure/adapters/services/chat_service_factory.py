"""
Chat Service Factory

"""
import logging

from medchat.core.domain.services.chat_service import ChatService
from medchat.shared.exceptions import ConfigurationError
from ...config.settings import AIServiceSettings
from .gemini_chat_service import GeminiChatService
from .openai_chat_service import OpenAIChatService


logger = logging.getLogger(__name__)


class ChatServiceFactory:
    """
    Factory for creating inference provider adapters.

    The provider is chosen by ``llm_provider``; adding a provider means
    adding a branch here and an adapter next to the existing ones.
    """

    @staticmethod
    def create_chat_service(settings: AIServiceSettings) -> ChatService:
        """
        Create the chat service configured in settings.

        Args:
            settings: Inference provider settings

        Returns:
            Configured chat service

        Raises:
            ConfigurationError: If the provider is unknown or lacks credentials
        """
        provider = settings.llm_provider

        if provider == "gemini":
            service = GeminiChatService(
                api_key=settings.gemini_api_key,
                model=settings.gemini_model,
                timeout=settings.request_timeout
            )
        elif provider == "openai":
            service = OpenAIChatService(
                api_key=settings.openai_api_key,
                model=settings.openai_model,
                max_retries=settings.max_retries,
                timeout=settings.request_timeout
            )
        else:
            raise ConfigurationError(f"Unsupported LLM provider: {provider}", "LLM_PROVIDER")

        logger.info(f"Created {provider} chat service")
        return service
