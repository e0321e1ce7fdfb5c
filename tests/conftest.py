"""Shared fixtures: fake providers, in-memory repository and a test client."""

from __future__ import annotations

from pathlib import Path
import sys
from typing import Any, Callable, Optional

import pytest
from fastapi.testclient import TestClient
from pydantic import SecretStr

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from eco_moderation.config.settings import settings  # noqa: E402
from eco_moderation.controllers.dependencies import get_audio_repository  # noqa: E402
from eco_moderation.main import app  # noqa: E402
from eco_moderation.models.audio import AudioRecord, ModerationStatus  # noqa: E402
from eco_moderation.services.transcribe import TranscriptionResult  # noqa: E402

TEST_SECRET = "test-moderation-secret"
PUBLIC_BASE_URL = "https://eco.example.com"


class FakeAudioRepository:
    """In-memory stand-in for ``AudioRepository`` with the same semantics."""

    def __init__(self) -> None:
        self.rows: dict[str, AudioRecord] = {}
        self.moderation_writes = 0

    def add(
        self,
        record_id: str,
        file_url: str = "https://x/audio.mp3",
        *,
        status: str = ModerationStatus.PENDING.value,
        transcript: Optional[str] = None,
        title: Optional[str] = None,
        author: Optional[str] = None,
    ) -> AudioRecord:
        row = AudioRecord(
            id=record_id,
            file_url=file_url,
            title=title,
            author=author,
            moderation_status=status,
            moderation_reason=None,
            transcript=transcript,
        )
        self.rows[record_id] = row
        return row

    async def get(self, record_id: str) -> Optional[AudioRecord]:
        return self.rows.get(record_id)

    async def apply_moderation(self, record_id, *, status, reason, transcript) -> bool:
        row = self.rows.get(record_id)
        if row is None or row.moderation_status != ModerationStatus.PENDING.value:
            return False
        row.moderation_status = status.value
        row.moderation_reason = reason
        row.transcript = transcript
        self.moderation_writes += 1
        return True

    async def mark_safe(self, record_id: str) -> None:
        row = self.rows.get(record_id)
        if row is not None:
            row.moderation_status = ModerationStatus.SAFE.value

    async def delete(self, record_id: str) -> bool:
        return self.rows.pop(record_id, None) is not None


class FakeTranscribeService:
    def __init__(self) -> None:
        self.transcript = "contenido normal"
        self.error: Optional[Exception] = None
        self.calls = 0

    async def transcribe_audio(self, audio_bytes: bytes, *, language_code=None):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return TranscriptionResult(transcript=self.transcript, language_code="es-US")


class FakeLlmClient:
    def __init__(self) -> None:
        self.response: Optional[str] = '{"flagged": false, "categories": {}, "reason": null}'
        self.error: Optional[Exception] = None
        self.prompts: list[dict[str, Any]] = []

    async def invoke(self, *, system_prompt: str, user_prompt: str, **kwargs: Any):
        self.prompts.append({"system": system_prompt, "user": user_prompt, **kwargs})
        if self.error is not None:
            raise self.error
        return self.response


@pytest.fixture(autouse=True)
def configured_settings(monkeypatch: pytest.MonkeyPatch) -> None:
    """Provide every secret the webhook requires."""

    monkeypatch.setattr(settings.moderation, "token_secret", SecretStr(TEST_SECRET))
    monkeypatch.setattr(settings.moderation, "public_base_url", PUBLIC_BASE_URL)
    monkeypatch.setattr(settings.moderation, "admin_email", "admin@example.com")
    monkeypatch.setattr(settings.moderation, "link_max_age_seconds", None)
    monkeypatch.setattr(settings.moderation, "fallback_policy", "review")
    monkeypatch.setattr(settings.mail, "password", SecretStr("re_test_key"))
    monkeypatch.setattr(settings.bedrock, "api_key", SecretStr("dGVzdDp0ZXN0"))


@pytest.fixture
def repository() -> FakeAudioRepository:
    return FakeAudioRepository()


@pytest.fixture
def transcriber(monkeypatch: pytest.MonkeyPatch) -> FakeTranscribeService:
    service = FakeTranscribeService()
    monkeypatch.setattr(
        "eco_moderation.pipelines.moderation.transcription.get_transcribe_service",
        lambda: service,
    )
    return service


@pytest.fixture
def llm(monkeypatch: pytest.MonkeyPatch) -> FakeLlmClient:
    client = FakeLlmClient()
    monkeypatch.setattr(
        "eco_moderation.pipelines.moderation.classification.get_llm_client",
        lambda: client,
    )
    return client


@pytest.fixture
def fetched_urls(monkeypatch: pytest.MonkeyPatch) -> list[str]:
    urls: list[str] = []

    async def fake_fetch(file_url: str) -> bytes:
        urls.append(file_url)
        return b"ID3-fake-mp3-bytes"

    monkeypatch.setattr("eco_moderation.pipelines.moderation.state.fetch_audio_bytes", fake_fetch)
    return urls


@pytest.fixture
def sent_emails(monkeypatch: pytest.MonkeyPatch) -> list[dict[str, Any]]:
    emails: list[dict[str, Any]] = []

    async def fake_send_email(**kwargs: Any) -> None:
        emails.append(kwargs)

    monkeypatch.setattr(
        "eco_moderation.pipelines.moderation.notification.send_email",
        fake_send_email,
    )
    return emails


@pytest.fixture
def client(repository: FakeAudioRepository) -> TestClient:
    app.dependency_overrides[get_audio_repository] = lambda: repository
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def post_record(client: TestClient) -> Callable[..., Any]:
    def _post(record_id: str = "abc123", **fields: Any):
        record = {
            "id": record_id,
            "file_url": "https://x/audio.mp3",
            "moderation_status": "pending",
            **fields,
        }
        return client.post(
            "/moderation/webhook",
            json={"type": "INSERT", "table": "audios", "record": record},
        )

    return _post
