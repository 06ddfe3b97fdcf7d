"""
Gemini Chat Service Implementation
"""
from typing import Any, Dict, List, Optional, AsyncIterator
import logging
import time

from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from medchat.core.domain.services.chat_service import (
    ChatService,
    ChatMessage,
    ChatResponse,
    StreamingChatChunk
)
from medchat.shared.exceptions import MessageGenerationError, ConfigurationError
from medchat.shared.constants import AIConstants, ChatConstants


class GeminiChatService(ChatService):
    """
    Google Gemini implementation of ChatService.

    Uses the async surface of the google-genai client. The system prompt
    is passed as ``system_instruction`` and assistant turns use Gemini's
    ``model`` role.
    """

    def __init__(
        self,
        api_key: Optional[str],
        model: str = AIConstants.DEFAULT_GEMINI_MODEL,
        timeout: float = AIConstants.DEFAULT_TIMEOUT_SECONDS
    ):
        """
        Initialize Gemini chat service.

        Args:
            api_key: Gemini API key
            model: Default model
            timeout: Request timeout in seconds

        Raises:
            ConfigurationError: If the API key is missing
        """
        if not api_key:
            raise ConfigurationError("Gemini API key is required", "GEMINI_API_KEY")

        self._client = genai.Client(
            api_key=api_key,
            http_options=types.HttpOptions(timeout=int(timeout * 1000))
        )
        self._default_model = model
        self._logger = logging.getLogger(__name__)

        self._models = list(AIConstants.AVAILABLE_GEMINI_MODELS)
        if model not in self._models:
            self._models.insert(0, model)

    @property
    def provider_name(self) -> str:
        return "gemini"

    async def generate_response(
        self,
        messages: List[ChatMessage],
        system_prompt: Optional[str] = None,
        model: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None
    ) -> ChatResponse:
        """
        Generate a chat response using Gemini.

        Raises:
            MessageGenerationError: If response generation fails
        """
        start_time = time.perf_counter()
        model_name = model or self._default_model

        try:
            response = await self._client.aio.models.generate_content(
                model=model_name,
                contents=self._prepare_contents(messages),
                config=self._build_config(system_prompt, temperature, max_tokens)
            )

            text = response.text
            if not text:
                raise MessageGenerationError(
                    f"Gemini returned an empty response ({self._finish_reason(response)})",
                    model=model_name
                )

            processing_time_ms = int((time.perf_counter() - start_time) * 1000)

            return ChatResponse(
                message=text,
                model=model_name,
                usage=self._usage(response),
                processing_time_ms=processing_time_ms,
                metadata={
                    "provider": self.provider_name,
                    "finish_reason": self._finish_reason(response),
                }
            )

        except MessageGenerationError:
            raise
        except genai_errors.APIError as e:
            self._logger.error(f"Gemini API error: {e}")
            raise MessageGenerationError(f"Gemini API error: {str(e)}", model=model_name)
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
        Generate a streaming chat response using Gemini.

        Yields:
            Streaming chat chunks, then a completion chunk

        Raises:
            MessageGenerationError: If response generation fails
        """
        model_name = model or self._default_model

        try:
            stream = await self._client.aio.models.generate_content_stream(
                model=model_name,
                contents=self._prepare_contents(messages),
                config=self._build_config(system_prompt, temperature, max_tokens)
            )

            chunk_index = 0
            usage = None
            async for chunk in stream:
                if chunk.usage_metadata:
                    usage = self._usage(chunk)
                if chunk.text:
                    yield StreamingChatChunk(
                        content=chunk.text,
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

        except genai_errors.APIError as e:
            self._logger.error(f"Gemini streaming API error: {e}")
            raise MessageGenerationError(f"Gemini streaming API error: {str(e)}", model=model_name)
        except Exception as e:
            self._logger.error(f"Streaming response generation failed: {e}")
            raise MessageGenerationError(f"Streaming response generation failed: {str(e)}", model=model_name)

    def get_available_models(self) -> List[str]:
        return list(self._models)

    async def health_check(self) -> bool:
        try:
            await self._client.aio.models.get(model=self._default_model)
            return True
        except Exception as e:
            self._logger.error(f"Health check failed: {e}")
            return False

    def _prepare_contents(self, messages: List[ChatMessage]) -> List[types.Content]:
        """Convert chat messages to Gemini contents."""
        contents = []
        for message in messages:
            role = "model" if message.role == "assistant" else "user"
            contents.append(types.Content(role=role, parts=[types.Part(text=message.content)]))
        return contents

    @staticmethod
    def _build_config(
        system_prompt: Optional[str],
        temperature: Optional[float],
        max_tokens: Optional[int]
    ) -> types.GenerateContentConfig:
        return types.GenerateContentConfig(
            system_instruction=system_prompt or None,
            temperature=ChatConstants.DEFAULT_TEMPERATURE if temperature is None else temperature,
            max_output_tokens=max_tokens or ChatConstants.DEFAULT_MAX_TOKENS
        )

    @staticmethod
    def _usage(response: Any) -> Optional[Dict[str, Any]]:
        metadata = getattr(response, "usage_metadata", None)
        if metadata is None:
            return None
        return {
            "prompt_tokens": metadata.prompt_token_count,
            "completion_tokens": metadata.candidates_token_count,
            "total_tokens": metadata.total_token_count,
        }

    @staticmethod
    def _finish_reason(response: Any) -> Optional[str]:
        candidates = getattr(response, "candidates", None)
        if not candidates:
            return None
        reason = getattr(candidates[0], "finish_reason", None)
        return str(reason) if reason is not None else None
