"""Tests for the inference provider adapters, with the SDK clients mocked."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from medchat.core.domain.services import ChatMessage
from medchat.infrastructure.adapters.services import (
    ChatServiceFactory,
    GeminiChatService,
    OpenAIChatService,
)
from medchat.infrastructure.config.settings import AIServiceSettings
from medchat.shared.exceptions import ConfigurationError, MessageGenerationError


CONVERSATION = [
    ChatMessage(content="I keep sneezing", role="user"),
    ChatMessage(content="How long has it lasted?", role="assistant"),
    ChatMessage(content="Two weeks", role="user"),
]


async def _stream(items):
    for item in items:
        yield item


class TestFactory:
    def test_gemini_is_the_default_provider(self):
        service = ChatServiceFactory.create_chat_service(AIServiceSettings(gemini_api_key="test-key"))
        assert isinstance(service, GeminiChatService)
        assert service.provider_name == "gemini"

    def test_openai_provider(self):
        service = ChatServiceFactory.create_chat_service(
            AIServiceSettings(llm_provider="openai", openai_api_key="test-key")
        )
        assert isinstance(service, OpenAIChatService)

    @pytest.mark.parametrize("provider", ["gemini", "openai"])
    def test_missing_key_is_a_configuration_error(self, provider):
        settings = AIServiceSettings(llm_provider=provider, gemini_api_key=None, openai_api_key=None)
        with pytest.raises(ConfigurationError, match="API key is required"):
            ChatServiceFactory.create_chat_service(settings)

    def test_unknown_provider_is_rejected_by_settings(self):
        with pytest.raises(ValueError):
            AIServiceSettings(llm_provider="llama")


class TestGeminiChatService:
    @pytest.fixture
    def service(self):
        service = GeminiChatService(api_key="test-key", model="gemini-2.0-flash")
        service._client = MagicMock()
        return service

    async def test_roles_and_system_prompt_are_mapped(self, service):
        service._client.aio.models.generate_content = AsyncMock(return_value=SimpleNamespace(
            text="Sounds like allergic rhinitis.",
            usage_metadata=SimpleNamespace(prompt_token_count=20, candidates_token_count=6, total_token_count=26),
            candidates=[SimpleNamespace(finish_reason="STOP")]
        ))

        response = await service.generate_response(CONVERSATION, system_prompt="Be careful", temperature=0.1)

        kwargs = service._client.aio.models.generate_content.call_args.kwargs
        assert [c.role for c in kwargs["contents"]] == ["user", "model", "user"]
        assert kwargs["config"].system_instruction == "Be careful"
        assert kwargs["config"].temperature == 0.1
        assert response.message == "Sounds like allergic rhinitis."
        assert response.total_tokens == 26

    async def test_empty_reply_is_a_generation_error(self, service):
        service._client.aio.models.generate_content = AsyncMock(return_value=SimpleNamespace(
            text=None, usage_metadata=None, candidates=[SimpleNamespace(finish_reason="SAFETY")]
        ))
        with pytest.raises(MessageGenerationError, match="SAFETY"):
            await service.generate_response(CONVERSATION)

    async def test_stream_ends_with_completion_chunk(self, service):
        service._client.aio.models.generate_content_stream = AsyncMock(return_value=_stream([
            SimpleNamespace(text="Try ", usage_metadata=None),
            SimpleNamespace(text="an antihistamine.", usage_metadata=None),
        ]))

        chunks = [c async for c in service.generate_streaming_response(CONVERSATION)]

        assert "".join(c.content for c in chunks) == "Try an antihistamine."
        assert chunks[-1].is_complete
        assert chunks[-1].metadata["total_chunks"] == 2

    async def test_health_check_reports_failures(self, service):
        service._client.aio.models.get = AsyncMock(side_effect=RuntimeError("403"))
        assert await service.health_check() is False

    def test_configured_model_is_offered(self):
        service = GeminiChatService(api_key="test-key", model="gemini-custom")
        assert service.get_available_models()[0] == "gemini-custom"


class TestOpenAIChatService:
    @pytest.fixture
    def service(self):
        service = OpenAIChatService(api_key="test-key", model="gpt-4o-mini")
        service._client = MagicMock()
        return service

    async def test_system_prompt_leads_the_messages(self, service):
        usage = MagicMock()
        usage.model_dump.return_value = {"prompt_tokens": 9, "completion_tokens": 3, "total_tokens": 12}
        service._client.chat.completions.create = AsyncMock(return_value=SimpleNamespace(
            choices=[SimpleNamespace(message=SimpleNamespace(content="Hello"), finish_reason="stop")],
            usage=usage,
            model="gpt-4o-mini"
        ))

        response = await service.generate_response(CONVERSATION, system_prompt="Be careful")

        messages = service._client.chat.completions.create.call_args.kwargs["messages"]
        assert messages[0] == {"role": "system", "content": "Be careful"}
        assert [m["role"] for m in messages[1:]] == ["user", "assistant", "user"]
        assert response.total_tokens == 12

    async def test_client_errors_become_generation_errors(self, service):
        service._client.chat.completions.create = AsyncMock(side_effect=RuntimeError("connection refused"))
        with pytest.raises(MessageGenerationError, match="connection refused"):
            await service.generate_response(CONVERSATION)

    async def test_stream_skips_empty_deltas(self, service):
        def delta(content):
            return SimpleNamespace(choices=[SimpleNamespace(delta=SimpleNamespace(content=content))], usage=None)

        usage = MagicMock()
        usage.model_dump.return_value = {"prompt_tokens": 9, "completion_tokens": 2, "total_tokens": 11}
        service._client.chat.completions.create = AsyncMock(
            return_value=_stream([delta("Drink "), delta(None), delta("water."), SimpleNamespace(choices=[], usage=usage)])
        )

        chunks = [c async for c in service.generate_streaming_response(CONVERSATION)]

        assert [c.content for c in chunks] == ["Drink ", "water.", ""]
        assert chunks[-1].is_complete
        assert chunks[-1].metadata["usage"]["total_tokens"] == 11
        kwargs = service._client.chat.completions.create.call_args.kwargs
        assert kwargs["stream_options"] == {"include_usage": True}
