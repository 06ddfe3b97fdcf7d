"""Tests for domain entities and value objects."""

from datetime import datetime, timedelta, timezone

import pytest

from medchat.core.domain.entities import (
    ChatSession,
    FAILED_REPLY_TEXT,
    Medication,
    Message,
    MessageRole,
    MessageStatus,
    Prescription,
    Profile,
    RateLimitWindow,
    SessionStatus,
)
from medchat.core.domain.value_objects import AttachmentMetadata, SessionId, UserId
from medchat.shared.constants import ChatConstants, FileConstants


class TestIdentifiers:
    def test_generated_ids_are_valid_uuids(self):
        assert UserId.generate() != UserId.generate()
        assert SessionId(SessionId.generate().value)

    def test_invalid_ids_are_rejected(self):
        with pytest.raises(ValueError):
            UserId("not-a-uuid")
        with pytest.raises(ValueError):
            SessionId("")

    def test_ids_compare_with_plain_strings(self):
        user_id = UserId.generate()
        assert user_id == user_id.value
        assert len({user_id, UserId(user_id.value)}) == 1


class TestProfile:
    def test_create_normalizes_email_and_name(self):
        profile = Profile.create(email="  Jane@Example.COM ", display_name=" Jane ")
        assert profile.email == "jane@example.com"
        assert profile.display_name == "Jane"
        assert profile.preferred_specialty == "general"

    def test_invalid_email_is_rejected(self):
        with pytest.raises(ValueError, match="Invalid email"):
            Profile.create(email="not-an-email", display_name="Jane")

    def test_rename_rejects_blank_names(self):
        profile = Profile.create(email="jane@example.com", display_name="Jane")
        with pytest.raises(ValueError):
            profile.rename("   ")
        profile.rename("Dr. Jane")
        assert profile.display_name == "Dr. Jane"


class TestChatSession:
    def test_recorded_messages_raise_the_count(self):
        session = ChatSession.create(UserId.generate(), specialty="cardiology")
        session.record_message(2)
        session.record_message(0)
        assert session.message_count == 3

    def test_archived_session_cannot_receive_messages(self):
        session = ChatSession.create(UserId.generate())
        session.archive()
        assert session.status == SessionStatus.ARCHIVED
        assert not session.can_receive_messages

        session.reactivate()
        assert session.can_receive_messages

    def test_deleted_session_cannot_be_archived(self):
        session = ChatSession.create(UserId.generate())
        session.delete()
        with pytest.raises(ValueError):
            session.archive()

    def test_title_length_is_limited(self):
        with pytest.raises(ValueError, match="too long"):
            ChatSession.create(UserId.generate(), title="x" * (ChatConstants.MAX_SESSION_TITLE_LENGTH + 1))

    def test_display_title_falls_back_to_id_prefix(self):
        session = ChatSession.create(UserId.generate())
        assert session.display_title == f"Chat Session {session.session_id.value[:8]}"


class TestMessage:
    def test_roles_are_limited_to_conversation_turns(self):
        assert {role.value for role in MessageRole} == {"user", "assistant"}
        with pytest.raises(ValueError, match="Invalid message role"):
            Message(message_id="m1", session_id=SessionId.generate(), role="system", content="hi")

    def test_user_message_length_is_limited(self):
        with pytest.raises(ValueError, match="too long"):
            Message.create_user_message(
                SessionId.generate(), "x" * (ChatConstants.MAX_MESSAGE_LENGTH + 1), sequence=0
            )

    def test_failed_reply_carries_error(self):
        message = Message.create_failed_assistant_message(
            SessionId.generate(), sequence=1, error_message="timeout"
        )
        assert message.status == MessageStatus.FAILED
        assert message.content == FAILED_REPLY_TEXT
        assert message.is_failed

    def test_user_messages_cannot_fail(self):
        with pytest.raises(ValueError, match="cannot fail"):
            Message(
                message_id="m1",
                session_id=SessionId.generate(),
                role=MessageRole.USER,
                content="hello",
                status=MessageStatus.FAILED,
                error_message="boom"
            )


class TestAttachmentMetadata:
    def test_content_type_comes_from_extension(self):
        metadata = AttachmentMetadata.create("labs.PDF", 2048)
        assert metadata.content_type == "application/pdf"
        assert metadata.extension == ".pdf"
        assert not metadata.is_text

    def test_text_files_are_marked_as_text(self):
        assert AttachmentMetadata.create("notes.md", 10).is_text

    def test_disallowed_extension_is_rejected(self):
        with pytest.raises(ValueError, match="not allowed"):
            AttachmentMetadata.create("script.exe", 10)

    def test_size_ceiling_is_inclusive(self):
        AttachmentMetadata.create("scan.png", FileConstants.MAX_FILE_SIZE_BYTES)
        with pytest.raises(ValueError, match="size limit"):
            AttachmentMetadata.create("scan.png", FileConstants.MAX_FILE_SIZE_BYTES + 1)

    def test_empty_file_is_rejected(self):
        with pytest.raises(ValueError, match="empty"):
            AttachmentMetadata.create("notes.txt", 0)


class TestPrescription:
    def test_notes_are_required(self):
        with pytest.raises(ValueError):
            Prescription.create(user_id=UserId.generate(), session_id=None, notes=" ")

    def test_structured_prescription_needs_content(self):
        with pytest.raises(ValueError, match="Structured"):
            Prescription.create(
                user_id=UserId.generate(), session_id=None, notes="n", is_structured=True
            )

    def test_medication_dict_round_trip(self):
        medication = Medication(name="Ibuprofen", dosage="200 mg", frequency="every 8 hours")
        assert Medication.from_dict(medication.to_dict()) == medication


class TestRateLimitWindow:
    def test_window_expires_at_reset_time(self):
        now = datetime(2024, 1, 1, tzinfo=timezone.utc)
        window = RateLimitWindow.start(UserId.generate(), now, 60)
        assert window.request_count == 1
        assert not window.is_expired(now + timedelta(seconds=59))
        assert window.is_expired(now + timedelta(seconds=60))
