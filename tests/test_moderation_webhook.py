"""Webhook scenarios for ``POST /moderation/webhook``."""

from __future__ import annotations

from urllib.parse import parse_qs, urlparse

import pytest
from pydantic import SecretStr

from eco_moderation.config.settings import settings
from eco_moderation.services.audio_fetch import AudioFetchError
from eco_moderation.services.email import EmailServiceError
from eco_moderation.services.llm_client import LlmInvocationError, LlmQuotaError
from eco_moderation.services.transcribe import TranscriptionError, TranscriptionQuotaError
from eco_moderation.utils.security import verify_record_token

pytestmark = pytest.mark.usefixtures("fetched_urls")


def _links_in(html: str) -> dict[str, dict[str, str]]:
    """Map action -> query parameters for every action link in an email."""

    links: dict[str, dict[str, str]] = {}
    for chunk in html.split('href="')[1:]:
        url = chunk.split('"', 1)[0].replace("&amp;", "&")
        if "/moderation/action" not in url:
            continue
        params = {key: values[0] for key, values in parse_qs(urlparse(url).query).items()}
        links[params["action"]] = params
    return links


def test_clean_transcript_is_marked_safe(repository, transcriber, llm, sent_emails, post_record):
    repository.add("abc123")

    response = post_record()

    assert response.status_code == 200
    assert response.json() == {"success": True, "flagged": False, "transcript": "contenido normal"}
    row = repository.rows["abc123"]
    assert row.moderation_status == "safe"
    assert row.moderation_reason is None
    assert row.transcript == "contenido normal"
    assert sent_emails == []


def test_transcript_reaches_classifier_unmodified(repository, transcriber, llm, sent_emails, post_record):
    repository.add("abc123")
    transcriber.transcript = "  hola,   ¿qué tal? joder  "

    post_record()

    assert llm.prompts[0]["user"] == "  hola,   ¿qué tal? joder  "
    assert "palabrotas leves NO deben ser marcadas" in llm.prompts[0]["system"]


def test_flagged_verdict_stores_reason_and_emails_signed_links(
    repository, transcriber, llm, sent_emails, post_record
):
    repository.add("abc123", title="Mi eco", author="ana")
    llm.response = '{"flagged": true, "categories": {"violence": true}, "reason": "violencia explícita"}'

    response = post_record()

    assert response.status_code == 200
    assert response.json()["flagged"] is True
    row = repository.rows["abc123"]
    assert row.moderation_status == "flagged"
    assert row.moderation_reason == "violencia explícita"

    assert len(sent_emails) == 1
    email = sent_emails[0]
    assert email["recipient"] == "admin@example.com"
    assert "violencia explícita" in email["subject"]
    links = _links_in(email["html_body"])
    assert set(links) == {"keep", "delete"}
    for params in links.values():
        assert params["id"] == "abc123"
        assert verify_record_token("abc123", params["token"])
    assert '<audio controls src="https://x/audio.mp3">' in email["html_body"]


def test_flagged_without_reason_uses_default(repository, transcriber, llm, sent_emails, post_record):
    repository.add("abc123")
    llm.response = '```json\n{"flagged": true}\n```'

    post_record()

    assert repository.rows["abc123"].moderation_reason == "Contenido inapropiado detectado por IA"


def test_redelivery_is_a_no_op(repository, transcriber, llm, sent_emails, post_record):
    repository.add("abc123")
    llm.response = '{"flagged": true, "reason": "odio"}'

    first = post_record()
    second = post_record()

    assert first.json()["flagged"] is True
    assert second.status_code == 200
    assert second.json() == {"message": "Already processed"}
    assert repository.moderation_writes == 1
    assert transcriber.calls == 1
    assert len(sent_emails) == 1


def test_payload_status_not_pending_is_skipped(repository, transcriber, llm, post_record):
    repository.add("abc123")

    response = post_record(moderation_status="safe")

    assert response.json() == {"message": "Already processed"}
    assert transcriber.calls == 0
    assert repository.rows["abc123"].moderation_status == "pending"


def test_missing_record_or_file_url(client):
    assert client.post("/moderation/webhook", json={"type": "INSERT"}).json() == {
        "message": "No audio record found"
    }
    response = client.post("/moderation/webhook", json={"record": {"id": "abc123"}})
    assert response.status_code == 200
    assert response.json() == {"message": "No audio record found"}


def test_unknown_row_is_skipped(repository, transcriber, llm, post_record):
    response = post_record("ghost")

    assert response.json() == {"message": "Audio record not found"}
    assert transcriber.calls == 0


def test_transcription_quota_flags_for_manual_review(
    repository, transcriber, llm, sent_emails, post_record
):
    repository.add("abc123")
    transcriber.error = TranscriptionQuotaError("LimitExceededException")

    response = post_record()

    assert response.status_code == 200
    assert response.json()["flagged"] is True
    row = repository.rows["abc123"]
    assert row.moderation_status == "flagged"
    assert "quota" in row.moderation_reason
    assert "transcription" in row.moderation_reason
    assert row.transcript == "(Transcripción no disponible por falta de cuota)"
    assert llm.prompts == []
    assert len(sent_emails) == 1
    assert set(_links_in(sent_emails[0]["html_body"])) == {"keep", "delete"}


def test_classification_quota_flags_with_distinct_reason(
    repository, transcriber, llm, sent_emails, post_record
):
    repository.add("abc123")
    llm.error = LlmQuotaError("ThrottlingException")

    response = post_record()

    assert response.status_code == 200
    row = repository.rows["abc123"]
    assert row.moderation_status == "flagged"
    assert "quota" in row.moderation_reason
    assert "classification" in row.moderation_reason
    assert row.transcript == "contenido normal"
    assert len(sent_emails) == 1


def test_invalid_verdict_goes_to_manual_review_by_default(
    repository, transcriber, llm, sent_emails, post_record
):
    repository.add("abc123")
    llm.response = "I cannot help with that."

    response = post_record()

    assert response.status_code == 200
    row = repository.rows["abc123"]
    assert row.moderation_status == "flagged"
    assert row.moderation_reason.startswith("manual review required")
    assert "invalid classifier response" in row.moderation_reason
    assert len(sent_emails) == 1


def test_allow_policy_publishes_on_classifier_failure(
    monkeypatch, repository, transcriber, llm, sent_emails, post_record
):
    monkeypatch.setattr(settings.moderation, "fallback_policy", "allow")
    repository.add("abc123")
    llm.error = LlmInvocationError("connection reset")

    response = post_record()

    assert response.status_code == 200
    row = repository.rows["abc123"]
    assert row.moderation_status == "safe"
    assert row.moderation_reason == "moderation skipped: quota exceeded"
    assert len(sent_emails) == 1
    assert "Moderación Omitida" in sent_emails[0]["subject"]


def test_quota_is_never_fail_open_even_with_allow_policy(
    monkeypatch, repository, transcriber, llm, sent_emails, post_record
):
    monkeypatch.setattr(settings.moderation, "fallback_policy", "allow")
    repository.add("abc123")
    llm.error = LlmQuotaError("insufficient_quota")

    post_record()

    assert repository.rows["abc123"].moderation_status == "flagged"


def test_fetch_failure_returns_500_without_state_change(
    monkeypatch, repository, transcriber, llm, sent_emails, post_record
):
    repository.add("abc123")

    async def broken_fetch(file_url: str) -> bytes:
        raise AudioFetchError("Failed to fetch audio file: HTTP 404")

    monkeypatch.setattr("eco_moderation.pipelines.moderation.state.fetch_audio_bytes", broken_fetch)

    response = post_record()

    assert response.status_code == 500
    assert "error" in response.json()
    assert repository.rows["abc123"].moderation_status == "pending"
    assert sent_emails == []


def test_transcription_failure_returns_500_without_state_change(
    repository, transcriber, llm, sent_emails, post_record
):
    repository.add("abc123")
    transcriber.error = TranscriptionError("ffmpeg failed")

    response = post_record()

    assert response.status_code == 500
    assert response.json() == {"error": "ffmpeg failed"}
    assert repository.rows["abc123"].moderation_status == "pending"


def test_cached_transcript_skips_fetch_and_transcription(
    repository, transcriber, llm, sent_emails, fetched_urls, post_record
):
    repository.add("abc123", transcript="ya transcrito")

    response = post_record()

    assert response.json()["transcript"] == "ya transcrito"
    assert transcriber.calls == 0
    assert fetched_urls == []
    assert llm.prompts[0]["user"] == "ya transcrito"


def test_email_failure_does_not_fail_the_pipeline(
    monkeypatch, repository, transcriber, llm, post_record
):
    async def failing_send_email(**kwargs):
        raise EmailServiceError("Failed to send email.")

    monkeypatch.setattr(
        "eco_moderation.pipelines.moderation.notification.send_email",
        failing_send_email,
    )
    repository.add("abc123")
    llm.response = '{"flagged": true, "reason": "acoso"}'

    response = post_record()

    assert response.status_code == 200
    assert repository.rows["abc123"].moderation_status == "flagged"


def test_missing_secrets_return_500_before_processing(
    monkeypatch, repository, transcriber, llm, post_record
):
    monkeypatch.setattr(settings.mail, "password", None)
    repository.add("abc123")

    response = post_record()

    assert response.status_code == 500
    assert response.json() == {"error": "Configuration missing"}
    assert transcriber.calls == 0
    assert repository.rows["abc123"].moderation_status == "pending"


def test_aws_keys_satisfy_llm_credentials(monkeypatch):
    monkeypatch.setattr(settings.bedrock, "api_key", None)
    monkeypatch.setattr(settings.aws, "access_key", "AKIAEXAMPLE")
    monkeypatch.setattr(settings.aws, "secret_key", SecretStr("secret"))

    assert settings.missing_moderation_secrets() == []


def test_cors_preflight_is_permissive(client):
    response = client.options(
        "/moderation/webhook",
        headers={
            "Origin": "https://studio.example.com",
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "content-type",
        },
    )

    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "*"
