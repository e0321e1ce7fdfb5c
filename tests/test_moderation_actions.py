"""Admin link handling for ``GET /moderation/action``."""

from __future__ import annotations

import time

from eco_moderation.config.settings import settings
from eco_moderation.pipelines.moderation import build_action_links
from eco_moderation.utils.security import sign_record_token


def _action(client, **params):
    return client.get("/moderation/action", params=params)


def test_missing_parameters_is_400(client):
    response = _action(client, id="abc123", action="keep")

    assert response.status_code == 400
    assert response.text == "Missing parameters"


def test_wrong_token_is_403_and_changes_nothing(client, repository):
    repository.add("abc123", status="flagged")

    response = _action(client, id="abc123", action="delete", token=sign_record_token("other"))

    assert response.status_code == 403
    assert response.text == "Invalid token"
    assert "abc123" in repository.rows


def test_delete_removes_row_then_404(client, repository):
    repository.add("abc123", status="flagged")
    token = sign_record_token("abc123")

    first = _action(client, id="abc123", action="delete", token=token)
    second = _action(client, id="abc123", action="delete", token=token)

    assert first.status_code == 200
    assert first.headers["content-type"].startswith("text/html")
    assert "Eco Eliminado" in first.text
    assert "abc123" not in repository.rows
    assert second.status_code == 404
    assert second.text == "Audio not found (already deleted?)"


def test_keep_is_idempotent(client, repository):
    repository.add("abc123", status="flagged")
    token = sign_record_token("abc123")

    for _ in range(2):
        response = _action(client, id="abc123", action="keep", token=token)
        assert response.status_code == 200
        assert "Eco Aprobado" in response.text
        assert repository.rows["abc123"].moderation_status == "safe"


def test_unknown_action_is_400(client, repository):
    repository.add("abc123", status="flagged")

    response = _action(client, id="abc123", action="publish", token=sign_record_token("abc123"))

    assert response.status_code == 400
    assert response.text == "Invalid action"
    assert repository.rows["abc123"].moderation_status == "flagged"


def test_email_links_work_end_to_end(client, repository):
    repository.add("abc123", status="flagged")
    links = build_action_links("abc123")

    response = client.get(links.keep.replace("https://eco.example.com", ""))

    assert response.status_code == 200
    assert repository.rows["abc123"].moderation_status == "safe"


def test_expiring_links_reject_old_and_legacy_tokens(monkeypatch, client, repository):
    monkeypatch.setattr(settings.moderation, "link_max_age_seconds", 3600)
    repository.add("abc123", status="flagged")
    stale = sign_record_token("abc123", issued_at=int(time.time()) - 7200)

    assert _action(client, id="abc123", action="keep", token=stale).status_code == 403
    assert (
        _action(client, id="abc123", action="keep", token=sign_record_token("abc123")).status_code
        == 403
    )

    fresh = build_action_links("abc123")
    response = client.get(fresh.keep.replace("https://eco.example.com", ""))
    assert response.status_code == 200


def test_non_ascii_tokens_are_rejected(client, repository):
    repository.add("abc123", status="flagged")

    for token in ("ñ", "1.ñ", "１２.abc"):
        response = _action(client, id="abc123", action="delete", token=token)
        assert response.status_code == 403
        assert response.text == "Invalid token"

    assert "abc123" in repository.rows


def test_missing_secret_is_plain_text_500(monkeypatch, client, repository):
    repository.add("abc123", status="flagged")
    token = sign_record_token("abc123")
    monkeypatch.setattr(settings.moderation, "token_secret", None)

    response = _action(client, id="abc123", action="delete", token=token)

    assert response.status_code == 500
    assert response.headers["content-type"].startswith("text/plain")
    assert response.text == "Configuration missing"
    assert "abc123" in repository.rows
