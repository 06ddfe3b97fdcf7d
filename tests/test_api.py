"""End-to-end API tests through FastAPI's TestClient."""

import json
import uuid

import pytest

from medchat.shared.constants import FileConstants
from tests.fakes import make_settings


API = "/api/v1"


def _events(body: str):
    return [json.loads(line[len("data: "):]) for line in body.splitlines() if line.startswith("data: ")]


class TestAuthentication:
    def test_missing_header_is_rejected(self, client):
        response = client.get(f"{API}/profiles/me")
        assert response.status_code == 401
        assert response.json()["error_code"] == "UNAUTHORIZED"

    @pytest.mark.parametrize("value", ["not-a-uuid", str(uuid.uuid4())])
    def test_invalid_or_unknown_user_is_rejected(self, client, value):
        response = client.get(f"{API}/chat/sessions", headers={"X-User-Id": value})
        assert response.status_code == 401


class TestProfiles:
    def test_create_and_fetch_profile(self, client, create_profile):
        headers = create_profile(email="Ann@Example.com", display_name="Ann", specialty="pediatrics")

        response = client.get(f"{API}/profiles/me", headers=headers)
        assert response.status_code == 200
        body = response.json()
        assert body["email"] == "ann@example.com"
        assert body["preferred_specialty"] == "pediatrics"
        assert body["user_id"] == headers["X-User-Id"]

    def test_duplicate_email_conflicts(self, client, create_profile):
        create_profile(email="dup@example.com")
        response = client.post(f"{API}/profiles", json={"email": "DUP@example.com", "display_name": "Other"})
        assert response.status_code == 409

    def test_invalid_email_is_unprocessable(self, client):
        response = client.post(f"{API}/profiles", json={"email": "nope", "display_name": "Nope"})
        assert response.status_code == 422

    def test_update_preferred_specialty(self, client, auth_headers):
        response = client.patch(
            f"{API}/profiles/me", json={"preferred_specialty": "Neurology"}, headers=auth_headers
        )
        assert response.status_code == 200
        assert response.json()["preferred_specialty"] == "neurology"

        response = client.patch(
            f"{API}/profiles/me", json={"preferred_specialty": "astrology"}, headers=auth_headers
        )
        assert response.status_code == 422


class TestSpecialties:
    def test_list_hides_prompts(self, client):
        response = client.get(f"{API}/specialties")
        assert response.status_code == 200
        body = response.json()
        assert body["default"] == "general"
        assert {"key", "name", "color", "description"} == set(body["specialties"][0])

    def test_unknown_specialty_is_unprocessable(self, client):
        assert client.get(f"{API}/specialties/cardiology").status_code == 200
        assert client.get(f"{API}/specialties/astrology").status_code == 422


class TestSessions:
    def test_session_lifecycle(self, client, auth_headers, session_id):
        response = client.patch(
            f"{API}/chat/sessions/{session_id}", json={"title": "Palpitations"}, headers=auth_headers
        )
        assert response.json()["title"] == "Palpitations"

        response = client.post(f"{API}/chat/sessions/{session_id}/archive", headers=auth_headers)
        assert response.json()["status"] == "archived"
        assert client.get(f"{API}/chat/sessions", headers=auth_headers).json()["total"] == 0

        listed = client.get(f"{API}/chat/sessions", params={"include_archived": True}, headers=auth_headers)
        assert listed.json()["total"] == 1

        response = client.post(f"{API}/chat/sessions/{session_id}/restore", headers=auth_headers)
        assert response.json()["status"] == "active"

        response = client.delete(f"{API}/chat/sessions/{session_id}", headers=auth_headers)
        assert response.status_code == 204
        assert client.get(f"{API}/chat/sessions/{session_id}", headers=auth_headers).status_code == 404

    def test_sessions_are_private(self, client, create_profile, session_id):
        intruder = create_profile(email="eve@example.com", display_name="Eve")
        assert client.get(f"{API}/chat/sessions/{session_id}", headers=intruder).status_code == 404

    def test_malformed_session_id_is_not_found(self, client, auth_headers):
        assert client.get(f"{API}/chat/sessions/123", headers=auth_headers).status_code == 404


class TestMessages:
    def test_send_message_returns_both_turns(self, client, auth_headers, session_id):
        response = client.post(
            f"{API}/chat/sessions/{session_id}/messages",
            json={"content": "My blood pressure is 150/95"},
            headers=auth_headers
        )
        assert response.status_code == 200
        body = response.json()
        assert body["user_message"]["role"] == "user"
        assert body["assistant_message"]["role"] == "assistant"
        assert body["rate_limit"]["remaining"] == 4
        assert response.headers["X-RateLimit-Limit"] == "5"
        assert response.headers["X-RateLimit-Remaining"] == "4"

        history = client.get(f"{API}/chat/sessions/{session_id}/history", headers=auth_headers).json()
        assert history["total_messages"] == 2
        assert [m["sequence"] for m in history["messages"]] == [0, 1]

        summary = client.get(f"{API}/chat/sessions/{session_id}/summary", headers=auth_headers).json()
        assert summary["user_messages"] == 1
        assert summary["total_tokens"] == 15

    def test_history_paging(self, client, auth_headers, session_id):
        for content in ("Headache", "Since Monday"):
            client.post(f"{API}/chat/sessions/{session_id}/messages", json={"content": content}, headers=auth_headers)

        url = f"{API}/chat/sessions/{session_id}/history"
        first = client.get(url, params={"limit": 3}, headers=auth_headers).json()
        last = client.get(url, params={"limit": 3, "offset": 3}, headers=auth_headers).json()

        assert first["has_more"] and len(first["messages"]) == 3
        assert not last["has_more"] and [m["sequence"] for m in last["messages"]] == [3]
        assert client.get(url, params={"limit": 0}, headers=auth_headers).status_code == 422

    def test_blank_message_is_unprocessable(self, client, auth_headers, session_id):
        response = client.post(
            f"{API}/chat/sessions/{session_id}/messages", json={"content": "   "}, headers=auth_headers
        )
        assert response.status_code == 422

    def test_archived_session_conflicts(self, client, auth_headers, session_id):
        client.post(f"{API}/chat/sessions/{session_id}/archive", headers=auth_headers)
        response = client.post(
            f"{API}/chat/sessions/{session_id}/messages", json={"content": "Hello"}, headers=auth_headers
        )
        assert response.status_code == 409

    def test_provider_failure_is_bad_gateway(self, client, auth_headers, session_id, fake_chat_service):
        fake_chat_service.fail_with = RuntimeError("secret upstream detail")
        response = client.post(
            f"{API}/chat/sessions/{session_id}/messages", json={"content": "Hello"}, headers=auth_headers
        )
        assert response.status_code == 502
        assert "secret upstream detail" not in response.text

    def test_quota_exhaustion_returns_retry_after(self, client, auth_headers, session_id):
        for _ in range(5):
            response = client.post(
                f"{API}/chat/sessions/{session_id}/messages", json={"content": "Hello"}, headers=auth_headers
            )
            assert response.status_code == 200

        response = client.post(
            f"{API}/chat/sessions/{session_id}/messages", json={"content": "Hello"}, headers=auth_headers
        )
        assert response.status_code == 429
        assert int(response.headers["Retry-After"]) > 0

        quota = client.get(f"{API}/rate-limit", headers=auth_headers).json()
        assert quota["remaining"] == 0
        assert quota["backend"] == "memory"
        assert quota["window_seconds"] == 3600

    def test_streaming_reply(self, client, auth_headers, session_id):
        response = client.post(
            f"{API}/chat/sessions/{session_id}/messages/stream",
            json={"content": "Is 90 bpm normal?"},
            headers=auth_headers
        )
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/event-stream")
        assert response.headers["X-RateLimit-Remaining"] == "4"

        events = _events(response.text)
        assert events[-1]["is_complete"] is True
        message_id = events[-1]["metadata"]["message_id"]

        history = client.get(f"{API}/chat/sessions/{session_id}/history", headers=auth_headers).json()
        assert history["messages"][-1]["message_id"] == message_id
        assert history["messages"][-1]["content"] == "".join(e["content"] for e in events)

    def test_streaming_failure_ends_with_error_event(self, client, auth_headers, session_id, fake_chat_service):
        fake_chat_service.fail_with = RuntimeError("socket closed")
        response = client.post(
            f"{API}/chat/sessions/{session_id}/messages/stream",
            json={"content": "Hello"},
            headers=auth_headers
        )
        events = _events(response.text)
        assert events[-1]["error_code"] == "MESSAGE_GENERATION_ERROR"
        assert "socket closed" not in response.text


class TestAttachments:
    def _upload(self, client, headers, session_id, files):
        return client.post(f"{API}/chat/sessions/{session_id}/attachments", files=files, headers=headers)

    def test_upload_list_and_send(self, client, auth_headers, session_id, fake_chat_service):
        response = self._upload(client, auth_headers, session_id, [
            ("files", ("labs.txt", b"LDL 190 mg/dL", "text/plain")),
            ("files", ("scan.pdf", b"%PDF-1.4", "application/pdf")),
        ])
        assert response.status_code == 201
        ids = [a["attachment_id"] for a in response.json()["attachments"]]
        assert len(ids) == 2

        listed = client.get(f"{API}/chat/sessions/{session_id}/attachments", headers=auth_headers).json()
        assert listed["total"] == 2

        response = client.post(
            f"{API}/chat/sessions/{session_id}/messages",
            json={"content": "Please review my labs", "attachment_ids": ids},
            headers=auth_headers
        )
        assert response.status_code == 200
        assert "LDL 190 mg/dL" in fake_chat_service.calls[-1]["messages"][-1].content

        attachment = client.get(f"{API}/attachments/{ids[0]}", headers=auth_headers).json()
        assert attachment["message_id"] == response.json()["user_message"]["message_id"]

    def test_disallowed_extension_is_rejected(self, client, auth_headers, session_id):
        response = self._upload(client, auth_headers, session_id, [
            ("files", ("setup.exe", b"MZ", "application/octet-stream")),
        ])
        assert response.status_code == 400

    def test_oversized_file_is_rejected(self, client, auth_headers, session_id):
        oversized = b"x" * (FileConstants.MAX_FILE_SIZE_BYTES + 1)
        response = self._upload(client, auth_headers, session_id, [
            ("files", ("big.txt", oversized, "text/plain")),
        ])
        assert response.status_code == 400

    def test_too_many_files_are_rejected(self, client, auth_headers, session_id):
        files = [
            ("files", (f"note{i}.txt", b"x", "text/plain"))
            for i in range(FileConstants.MAX_ATTACHMENTS + 1)
        ]
        response = self._upload(client, auth_headers, session_id, files)
        assert response.status_code == 400

    def test_too_many_attachment_ids_are_rejected(self, client, auth_headers, session_id):
        ids = [str(uuid.uuid4()) for _ in range(FileConstants.MAX_ATTACHMENTS + 1)]
        response = client.post(
            f"{API}/chat/sessions/{session_id}/messages",
            json={"content": "Hello", "attachment_ids": ids},
            headers=auth_headers
        )
        assert response.status_code == 400

    def test_delete_attachment(self, client, auth_headers, session_id):
        response = self._upload(client, auth_headers, session_id, [("files", ("a.md", b"# a", "text/markdown"))])
        attachment_id = response.json()["attachments"][0]["attachment_id"]

        assert client.delete(f"{API}/attachments/{attachment_id}", headers=auth_headers).status_code == 204
        assert client.get(f"{API}/attachments/{attachment_id}", headers=auth_headers).status_code == 404


class TestPrescriptions:
    def test_generate_list_and_get(self, client, auth_headers, session_id, fake_chat_service):
        client.post(
            f"{API}/chat/sessions/{session_id}/messages", json={"content": "I have a sore throat"},
            headers=auth_headers
        )
        fake_chat_service.replies = ["Gargle with warm salt water and rest your voice."]

        response = client.post(f"{API}/chat/sessions/{session_id}/prescriptions", headers=auth_headers)
        assert response.status_code == 201
        prescription = response.json()["prescription"]
        assert prescription["is_structured"] is False
        assert prescription["notes"].startswith("Gargle with warm salt water")
        assert response.headers["X-RateLimit-Remaining"] == "3"

        listed = client.get(f"{API}/prescriptions", headers=auth_headers).json()
        assert listed["total"] == 1

        fetched = client.get(f"{API}/prescriptions/{prescription['prescription_id']}", headers=auth_headers)
        assert fetched.status_code == 200

    def test_other_users_prescriptions_are_hidden(self, client, create_profile, auth_headers, session_id):
        client.post(
            f"{API}/chat/sessions/{session_id}/messages", json={"content": "Hello"}, headers=auth_headers
        )
        created = client.post(f"{API}/chat/sessions/{session_id}/prescriptions", headers=auth_headers).json()
        intruder = create_profile(email="eve@example.com", display_name="Eve")

        prescription_id = created["prescription"]["prescription_id"]
        assert client.get(f"{API}/prescriptions/{prescription_id}", headers=intruder).status_code == 404


class TestHealth:
    def test_health_reports_components(self, client):
        body = client.get(f"{API}/health").json()
        assert body["components"]["database"] == "healthy"
        assert body["components"]["llm_provider"] == "configured"
        assert body["llm_provider"] == "fake"
        assert body["rate_limit_backend"] == "memory"
        assert body["status"] == "healthy"

    def test_provider_check_is_optional(self, client, fake_chat_service):
        fake_chat_service.healthy = False
        body = client.get(f"{API}/health", params={"check_provider": True}).json()
        assert body["components"]["llm_provider"] == "unhealthy"
        assert body["status"] == "degraded"


class TestDatabaseRateLimitBackend:
    def test_quota_survives_in_the_database(self, tmp_path, fake_chat_service):
        from fastapi.testclient import TestClient
        from main import create_app
        from medchat.infrastructure.di.container import get_container

        settings = make_settings(tmp_path, rate_limit_requests=1, rate_limit_backend="database")
        get_container().register_chat_service(fake_chat_service)

        with TestClient(create_app(settings)) as client:
            created = client.post(f"{API}/profiles", json={"email": "db@example.com", "display_name": "Db"})
            headers = {"X-User-Id": created.json()["user_id"]}
            session_id = client.post(f"{API}/chat/sessions", json={}, headers=headers).json()["session_id"]

            first = client.post(
                f"{API}/chat/sessions/{session_id}/messages", json={"content": "Hi"}, headers=headers
            )
            second = client.post(
                f"{API}/chat/sessions/{session_id}/messages", json={"content": "Hi again"}, headers=headers
            )

        assert first.status_code == 200
        assert second.status_code == 429
        assert "Retry-After" in second.headers
