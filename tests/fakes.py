"""Test doubles and settings shared by the unit and API tests."""

from typing import AsyncIterator, List, Optional

from medchat.core.domain.services import ChatMessage, ChatResponse, ChatService, StreamingChatChunk
from medchat.infrastructure.config.settings import (
    AIServiceSettings,
    DatabaseSettings,
    FileStorageSettings,
    MonitoringSettings,
    RateLimitSettings,
    Settings,
)


DEFAULT_REPLY = "Rest, drink fluids and see a doctor if it gets worse."


class FakeChatService(ChatService):
    """Inference provider that answers from a script and records every call."""

    def __init__(self, replies: Optional[List[str]] = None, model: str = "fake-model"):
        self.replies = list(replies or [])
        self.model = model
        self.calls: List[dict] = []
        self.fail_with: Optional[Exception] = None
        self.healthy = True

    @property
    def provider_name(self) -> str:
        return "fake"

    def _next_reply(self) -> str:
        if self.replies:
            return self.replies.pop(0)
        return DEFAULT_REPLY

    def _record(self, messages, system_prompt, model, temperature, max_tokens) -> None:
        self.calls.append({
            "messages": list(messages),
            "system_prompt": system_prompt,
            "model": model,
            "temperature": temperature,
            "max_tokens": max_tokens,
        })

    async def generate_response(
        self,
        messages: List[ChatMessage],
        system_prompt: Optional[str] = None,
        model: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None
    ) -> ChatResponse:
        self._record(messages, system_prompt, model, temperature, max_tokens)
        if self.fail_with is not None:
            raise self.fail_with
        return ChatResponse(
            message=self._next_reply(),
            model=model or self.model,
            usage={"prompt_tokens": 10, "completion_tokens": 5, "total_tokens": 15},
            processing_time_ms=12
        )

    async def generate_streaming_response(
        self,
        messages: List[ChatMessage],
        system_prompt: Optional[str] = None,
        model: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None
    ) -> AsyncIterator[StreamingChatChunk]:
        self._record(messages, system_prompt, model, temperature, max_tokens)
        words = self._next_reply().split(" ")
        for index, word in enumerate(words):
            # Fails after the first chunk has gone out
            if self.fail_with is not None and index == 1:
                raise self.fail_with
            yield StreamingChatChunk(
                content=word if index == 0 else f" {word}",
                is_complete=False,
                chunk_index=index,
                metadata={"model": model or self.model}
            )
        yield StreamingChatChunk(
            content="",
            is_complete=True,
            chunk_index=len(words),
            metadata={"model": model or self.model, "usage": {"total_tokens": 15}}
        )

    def get_available_models(self) -> List[str]:
        return [self.model, "fake-model-large"]

    async def health_check(self) -> bool:
        return self.healthy


def make_settings(tmp_path, rate_limit_requests: int = 5, rate_limit_backend: str = "memory") -> Settings:
    return Settings(
        environment="testing",
        database=DatabaseSettings(
            database_url=f"sqlite+aiosqlite:///{tmp_path / 'medchat_test.db'}",
            auto_create_tables=True
        ),
        file_storage=FileStorageSettings(upload_dir=str(tmp_path / "uploads")),
        ai_service=AIServiceSettings(llm_provider="gemini"),
        rate_limit=RateLimitSettings(
            rate_limit_backend=rate_limit_backend,
            rate_limit_requests=rate_limit_requests,
            rate_limit_window_seconds=3600
        ),
        monitoring=MonitoringSettings(log_level="WARNING", log_format="text"),
    )
