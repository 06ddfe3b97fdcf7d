"""Use case tests against a real SQLite database and a scripted provider."""

import asyncio

import pytest

from medchat.core.application.use_cases import (
    ChatHistoryRequest,
    GeneratePrescriptionRequest,
    SendMessageRequest,
    StartSessionRequest,
    UploadAttachmentsRequest,
    UploadedFile,
)
from medchat.core.domain.entities import MessageRole, MessageStatus, SessionStatus
from medchat.core.domain.value_objects import UserId
from medchat.infrastructure.adapters.storage.file_storage import session_attachment_directory
from medchat.infrastructure.di.container import DIContainer
from medchat.shared.exceptions import (
    AttachmentNotFoundError,
    AttachmentValidationError,
    ChatSessionNotFoundError,
    InvalidSessionStateError,
    MessageGenerationError,
    RateLimitExceededError,
    UnknownSpecialtyError,
    ValidationError,
)


@pytest.fixture
async def container(settings, db_manager, fake_chat_service):
    container = DIContainer()
    container.register_settings(settings)
    container.register_database_manager(db_manager)
    container.register_chat_service(fake_chat_service)
    await container.initialize()
    yield container
    await container.cleanup()


@pytest.fixture
def user_id(stored_profile) -> UserId:
    return stored_profile.user_id


async def _start_session(container, user_id, specialty="cardiology") -> str:
    async with container.chat_use_case_scope() as chat:
        session = await chat.start_session(StartSessionRequest(user_id=user_id, specialty=specialty))
    return session.session_id.value


async def _send(container, user_id, session_id, content="I get chest pain when climbing stairs", **kwargs):
    async with container.chat_use_case_scope() as chat:
        return await chat.send_message(SendMessageRequest(
            user_id=user_id, session_id=session_id, content=content, **kwargs
        ))


class TestSessions:
    async def test_session_defaults_to_preferred_specialty(self, container, user_id):
        async with container.chat_use_case_scope() as chat:
            session = await chat.start_session(StartSessionRequest(user_id=user_id))
        assert session.specialty == "general"

    async def test_unknown_specialty_is_rejected(self, container, user_id):
        with pytest.raises(UnknownSpecialtyError):
            await _start_session(container, user_id, specialty="astrology")

    async def test_other_users_cannot_see_a_session(self, container, user_id):
        session_id = await _start_session(container, user_id)
        async with container.chat_use_case_scope() as chat:
            with pytest.raises(ChatSessionNotFoundError):
                await chat.get_session(UserId.generate(), session_id)

    async def test_archive_hides_session_from_default_listing(self, container, user_id):
        session_id = await _start_session(container, user_id)
        async with container.chat_use_case_scope() as chat:
            archived = await chat.archive_session(user_id, session_id)
            active = await chat.list_sessions(user_id)
            everything = await chat.list_sessions(user_id, include_archived=True)

        assert archived.status == SessionStatus.ARCHIVED
        assert active == []
        assert [s.session_id.value for s in everything] == [session_id]


class TestSendMessage:
    async def test_exchange_is_persisted_in_order(self, container, user_id, fake_chat_service):
        session_id = await _start_session(container, user_id)
        result = await _send(container, user_id, session_id)

        assert result.user_message.sequence == 0
        assert result.assistant_message.sequence == 1
        assert result.assistant_message.token_count == 15
        assert result.rate_limit.remaining == 4

        call = fake_chat_service.calls[-1]
        assert "cardiology assistant" in call["system_prompt"]
        assert [m.role for m in call["messages"]] == ["user"]
        assert call["temperature"] == 0.4

        async with container.chat_use_case_scope() as chat:
            history = await chat.get_history(ChatHistoryRequest(user_id=user_id, session_id=session_id))
        assert [m.role for m in history.messages] == [MessageRole.USER, MessageRole.ASSISTANT]
        assert history.session.message_count == 2

    async def test_previous_turns_are_sent_as_context(self, container, user_id, fake_chat_service):
        session_id = await _start_session(container, user_id)
        await _send(container, user_id, session_id, content="First question")
        await _send(container, user_id, session_id, content="Follow-up question")

        contents = [m.content for m in fake_chat_service.calls[-1]["messages"]]
        assert contents[0] == "First question"
        assert contents[-1] == "Follow-up question"
        assert len(contents) == 3

    async def test_archived_session_rejects_messages(self, container, user_id):
        session_id = await _start_session(container, user_id)
        async with container.chat_use_case_scope() as chat:
            await chat.archive_session(user_id, session_id)

        with pytest.raises(InvalidSessionStateError):
            await _send(container, user_id, session_id)

    async def test_unknown_model_is_rejected_before_counting(self, container, user_id):
        session_id = await _start_session(container, user_id)
        with pytest.raises(ValidationError):
            await _send(container, user_id, session_id, model="not-a-model")

        status = await container.get_rate_limiter().status(user_id)
        assert status.remaining == 5

    async def test_provider_failure_stores_failed_reply(self, container, user_id, fake_chat_service):
        session_id = await _start_session(container, user_id)
        fake_chat_service.fail_with = RuntimeError("upstream timeout")

        with pytest.raises(MessageGenerationError) as exc_info:
            await _send(container, user_id, session_id)
        assert exc_info.value.session_id == session_id

        fake_chat_service.fail_with = None
        await _send(container, user_id, session_id, content="Trying again")

        async with container.chat_use_case_scope() as chat:
            history = await chat.get_history(ChatHistoryRequest(user_id=user_id, session_id=session_id))
        assert [m.status for m in history.messages] == [
            MessageStatus.COMPLETED, MessageStatus.FAILED, MessageStatus.COMPLETED, MessageStatus.COMPLETED
        ]
        # Failed replies are not replayed to the provider
        assert [m.role for m in fake_chat_service.calls[-1]["messages"]] == ["user", "user"]

    async def test_concurrent_sends_get_distinct_positions(self, container, user_id):
        session_id = await _start_session(container, user_id)

        results = await asyncio.gather(
            _send(container, user_id, session_id, content="First tab"),
            _send(container, user_id, session_id, content="Second tab"),
            return_exceptions=True
        )

        assert not [r for r in results if isinstance(r, Exception)]
        async with container.chat_use_case_scope() as chat:
            history = await chat.get_history(ChatHistoryRequest(user_id=user_id, session_id=session_id))
        assert [m.sequence for m in history.messages] == [0, 1, 2, 3]
        assert history.session.message_count == 4
        status = await container.get_rate_limiter().status(user_id)
        assert status.remaining == 3

    async def test_quota_is_enforced_per_user(self, container, user_id):
        session_id = await _start_session(container, user_id)
        for _ in range(5):
            await _send(container, user_id, session_id)

        with pytest.raises(RateLimitExceededError) as exc_info:
            await _send(container, user_id, session_id)
        assert exc_info.value.retry_after_seconds > 0

        async with container.chat_use_case_scope() as chat:
            history = await chat.get_history(ChatHistoryRequest(user_id=user_id, session_id=session_id))
        assert history.total_messages == 10


class TestHistory:
    async def test_pages_report_has_more(self, container, user_id):
        session_id = await _start_session(container, user_id)
        for index in range(3):
            await _send(container, user_id, session_id, content=f"Question {index}")

        async with container.chat_use_case_scope() as chat:
            first = await chat.get_history(ChatHistoryRequest(user_id=user_id, session_id=session_id, limit=4))
            last = await chat.get_history(
                ChatHistoryRequest(user_id=user_id, session_id=session_id, limit=4, offset=4)
            )

        assert first.total_messages == 6
        assert [m.sequence for m in first.messages] == [0, 1, 2, 3]
        assert first.has_more
        assert [m.sequence for m in last.messages] == [4, 5]
        assert not last.has_more

    @pytest.mark.parametrize("limit, offset", [(0, 0), (201, 0), (10, -1)])
    async def test_out_of_range_paging_is_rejected(self, container, user_id, limit, offset):
        session_id = await _start_session(container, user_id)
        async with container.chat_use_case_scope() as chat:
            with pytest.raises(ValidationError):
                await chat.get_history(ChatHistoryRequest(
                    user_id=user_id, session_id=session_id, limit=limit, offset=offset
                ))


class TestAttachments:
    async def _upload(self, container, user_id, session_id, files):
        async with container.attachment_use_case_scope() as attachments:
            result = await attachments.upload_attachments(UploadAttachmentsRequest(
                user_id=user_id, session_id=session_id, files=files
            ))
        return result.attachments

    async def test_text_attachment_reaches_the_prompt(self, container, user_id, fake_chat_service):
        session_id = await _start_session(container, user_id)
        stored = await self._upload(container, user_id, session_id, [
            UploadedFile("bp.txt", b"BP 150/95 every morning", "text/plain"),
            UploadedFile("ecg.png", b"\x89PNG....", "image/png"),
        ])

        result = await _send(
            container, user_id, session_id,
            content="What do these readings mean?",
            attachment_ids=[a.attachment_id for a in stored]
        )

        prompt = fake_chat_service.calls[-1]["messages"][-1].content
        assert "BP 150/95 every morning" in prompt
        assert "ecg.png (image/png" in prompt
        assert sorted(result.user_message.attachment_ids) == sorted(a.attachment_id for a in stored)

    async def test_attachment_cannot_be_sent_twice(self, container, user_id):
        session_id = await _start_session(container, user_id)
        stored = await self._upload(container, user_id, session_id, [UploadedFile("a.txt", b"a")])
        ids = [stored[0].attachment_id]

        await _send(container, user_id, session_id, attachment_ids=ids)
        with pytest.raises(AttachmentValidationError):
            await _send(container, user_id, session_id, attachment_ids=ids)

    async def test_attachment_from_another_session_is_not_found(self, container, user_id):
        first = await _start_session(container, user_id)
        second = await _start_session(container, user_id)
        stored = await self._upload(container, user_id, first, [UploadedFile("a.txt", b"a")])

        with pytest.raises(AttachmentNotFoundError):
            await _send(container, user_id, second, attachment_ids=[stored[0].attachment_id])

    async def test_invalid_batch_stores_nothing(self, container, user_id):
        session_id = await _start_session(container, user_id)
        with pytest.raises(AttachmentValidationError):
            await self._upload(container, user_id, session_id, [
                UploadedFile("ok.txt", b"fine"),
                UploadedFile("tool.exe", b"MZ"),
            ])

        async with container.attachment_use_case_scope() as attachments:
            assert await attachments.list_attachments(user_id, session_id) == []

    async def test_deleting_session_removes_files(self, container, user_id):
        session_id = await _start_session(container, user_id)
        await self._upload(container, user_id, session_id, [UploadedFile("a.txt", b"a")])
        storage = container.get_file_storage()
        session_dir = storage.base_path / session_attachment_directory(session_id)
        assert session_dir.exists()

        async with container.chat_use_case_scope() as chat:
            await chat.delete_session(user_id, session_id)

        assert not session_dir.exists()
        async with container.chat_use_case_scope() as chat:
            with pytest.raises(ChatSessionNotFoundError):
                await chat.get_session(user_id, session_id)


class TestStreaming:
    async def test_stream_yields_chunks_then_stores_reply(self, container, user_id):
        session_id = await _start_session(container, user_id)

        async with container.chat_use_case_scope() as chat:
            chunks = [c async for c in chat.stream_message(SendMessageRequest(
                user_id=user_id, session_id=session_id, content="Is my heart rate normal?"
            ))]

        final = chunks[-1]
        assert final.is_complete
        assert all(not c.is_complete for c in chunks[:-1])
        streamed = "".join(c.content for c in chunks)

        async with container.chat_use_case_scope() as chat:
            history = await chat.get_history(ChatHistoryRequest(user_id=user_id, session_id=session_id))
        assistant = history.messages[-1]
        assert assistant.message_id == final.metadata["message_id"]
        assert assistant.content == streamed
        assert assistant.token_count == 15

    async def test_stream_failure_records_failed_reply(self, container, user_id, fake_chat_service):
        session_id = await _start_session(container, user_id)
        fake_chat_service.fail_with = RuntimeError("connection reset")

        async with container.chat_use_case_scope() as chat:
            with pytest.raises(MessageGenerationError):
                async for _ in chat.stream_message(SendMessageRequest(
                    user_id=user_id, session_id=session_id, content="Hello"
                )):
                    pass

        async with container.chat_use_case_scope() as chat:
            history = await chat.get_history(ChatHistoryRequest(user_id=user_id, session_id=session_id))
        assert history.messages[-1].is_failed


class TestPrescriptions:
    async def test_prescription_is_drafted_from_conversation(self, container, user_id, fake_chat_service):
        session_id = await _start_session(container, user_id)
        await _send(container, user_id, session_id)
        fake_chat_service.replies = [
            '```json\n{"diagnosis": "Stable angina", "medications": '
            '[{"name": "Aspirin", "dosage": "75 mg", "frequency": "daily"}], "notes": "Book a stress test."}\n```'
        ]

        async with container.prescription_use_case_scope() as prescriptions:
            result = await prescriptions.generate_prescription(
                GeneratePrescriptionRequest(user_id=user_id, session_id=session_id)
            )
            listed = await prescriptions.list_prescriptions(user_id)

        prescription = result.prescription
        assert prescription.is_structured
        assert prescription.diagnosis == "Stable angina"
        assert prescription.medications[0].name == "Aspirin"
        assert prescription.raw_output.startswith("```json")
        assert [p.prescription_id for p in listed] == [prescription.prescription_id]
        assert fake_chat_service.calls[-1]["temperature"] == 0.2
        assert result.rate_limit.remaining == 3

    async def test_empty_session_cannot_draft_prescription(self, container, user_id):
        session_id = await _start_session(container, user_id)
        async with container.prescription_use_case_scope() as prescriptions:
            with pytest.raises(ValidationError):
                await prescriptions.generate_prescription(
                    GeneratePrescriptionRequest(user_id=user_id, session_id=session_id)
                )
