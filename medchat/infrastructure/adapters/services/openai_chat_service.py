"""
OpenAI Chat Service Implementation
"""
from typing import List, Optional, Dict, AsyncIterator
import logging
import time

import openai
from openai import AsyncOpenAI

from medchat.core.domain.services.chat_service import (
    ChatService,
    ChatMessage,
    ChatResponse,
    StreamingChatChunk
)
from medchat.shared.exceptions import MessageGenerationError, ConfigurationError
from medchat.shared.constants import AIConstants, ChatConstants


class OpenAIChatService(ChatService):
    """
    OpenAI implementation of ChatService.

    Handles chat message generation using OpenAI's chat models.
    """

    def __init__(
        self,
        api_key: Optional[str],
        model: str = AIConstants.DEFAULT_OPENAI_MODEL,
        max_retries: int = AIConstants.DEFAULT_MAX_RETRIES,
        timeout: float = AIConstants.DEFAULT_TIMEOUT_SECONDS
    ):
        """
        Initialize OpenAI chat service.

        Args:
            api_key: OpenAI API key
            model: Default chat model
            max_retries: Maximum number of retries
            timeout: Request timeout in seconds

        Raises:
            ConfigurationError: If the API key is missing
        """
        if not api_key:
            raise ConfigurationError("OpenAI API key is required", "OPENAI_API_KEY")

        self._client = AsyncOpenAI(
            api_key=api_key,
            max_retries=max_retries,
            timeout=timeout
        )
        self._default_model = model
        self._logger = logging.getLogger(__name__)

        self._models = list(AIConstants.AVAILABLE_OPENAI_MODELS)
        if model not in self._models:
            self._models.insert(0, model)

    @property
    def provider_name(self) -> str:
        return "openai"

    async def generate_response(
        self,
        messages: List[ChatMessage],
        system_prompt: Optional[str] = None,
        model: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None
    ) -> ChatResponse:
        """
        Generate a chat response using OpenAI.

        Raises:
            MessageGenerationError: If response generation fails
        """
        start_time = time.perf_counter()
        model_name = model or self._default_model

        try:
            response = await self._client.chat.completions.create(
                model=model_name,
                messages=self._prepare_messages(messages, system_prompt),
                temperature=self._temperature(temperature),
                max_tokens=max_tokens or ChatConstants.DEFAULT_MAX_TOKENS,
                stream=False
            )

            choice = response.choices[0] if response.choices else None
            response_content = choice.message.content if choice else None
            if not response_content:
                raise MessageGenerationError("OpenAI returned an empty response", model=model_name)

            processing_time_ms = int((time.perf_counter() - start_time) * 1000)

            return ChatResponse(
                message=response_content,
                model=response.model or model_name,
                usage=response.usage.model_dump() if response.usage else None,
                processing_time_ms=processing_time_ms,
                metadata={
                    "provider": self.provider_name,
                    "finish_reason": choice.finish_reason,
                }
            )

        except MessageGenerationError:
            raise
        except openai.APIError as e:
            self._logger.error(f"OpenAI API error: {e}")
            raise MessageGenerationError(f"OpenAI API error: {str(e)}", model=model_name)
        except Exception as e:
            self._logger.error(f"Chat response generation failed: {e}")
            raise MessageGenerationError(f"Chat response generation failed: {str(e)}", model=model_name)

    async def generate_streaming_response(
        self,
        messages: List[ChatMessage],
        system_prompt: Optional[str] = None,
        model: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None
    ) -> AsyncIterator[StreamingChatChunk]:
        """
        Generate a streaming chat response using OpenAI.

        Yields:
            Streaming chat chunks, then a completion chunk

        Raises:
            MessageGenerationError: If response generation fails
        """
        model_name = model or self._default_model

        try:
            stream = await self._client.chat.completions.create(
                model=model_name,
                messages=self._prepare_messages(messages, system_prompt),
                temperature=self._temperature(temperature),
                max_tokens=max_tokens or ChatConstants.DEFAULT_MAX_TOKENS,
                stream=True,
                stream_options={"include_usage": True}
            )

            chunk_index = 0
            usage = None
            async for chunk in stream:
                # The usage report arrives on a final chunk without choices
                if chunk.usage:
                    usage = chunk.usage.model_dump()
                if chunk.choices and chunk.choices[0].delta.content:
                    yield StreamingChatChunk(
                        content=chunk.choices[0].delta.content,
                        is_complete=False,
                        chunk_index=chunk_index,
                        metadata={"model": model_name}
                    )
                    chunk_index += 1

            yield StreamingChatChunk(
                content="",
                is_complete=True,
                chunk_index=chunk_index,
                metadata={"model": model_name, "total_chunks": chunk_index, "usage": usage}
            )

        except openai.APIError as e:
            self._logger.error(f"OpenAI streaming API error: {e}")
            raise MessageGenerationError(f"OpenAI streaming API error: {str(e)}", model=model_name)
        except Exception as e:
            self._logger.error(f"Streaming response generation failed: {e}")
            raise MessageGenerationError(f"Streaming response generation failed: {str(e)}", model=model_name)

    def get_available_models(self) -> List[str]:
        return list(self._models)

    async def health_check(self) -> bool:
        """
        Check that the API key is accepted.

        Returns:
            True if service is healthy
        """
        try:
            await self._client.models.retrieve(self._default_model)
            return True
        except Exception as e:
            self._logger.error(f"Health check failed: {e}")
            return False

    @staticmethod
    def _temperature(temperature: Optional[float]) -> float:
        return ChatConstants.DEFAULT_TEMPERATURE if temperature is None else temperature

    def _prepare_messages(
        self,
        messages: List[ChatMessage],
        system_prompt: Optional[str] = None
    ) -> List[Dict[str, str]]:
        """
        Prepare messages for OpenAI API format.

        The system prompt becomes the leading ``system`` message.
        """
        openai_messages = []

        if system_prompt:
            openai_messages.append({"role": "system", "content": system_prompt})

        for message in messages:
            openai_messages.append({
                "role": message.role,
                "content": message.content
            })

        return openai_messages
