"""Request URL masking in the structured logging middleware."""

from __future__ import annotations

from urllib.parse import parse_qs, urlparse

from starlette.requests import Request

from eco_moderation.middleware.logging import StructuredLoggingMiddleware


def _request(query_string: bytes) -> Request:
    return Request(
        {
            "type": "http",
            "method": "GET",
            "scheme": "http",
            "server": ("testserver", 80),
            "root_path": "",
            "path": "/moderation/action",
            "query_string": query_string,
            "headers": [],
        }
    )


def test_token_is_masked_and_other_values_stay_encoded():
    request = _request(b"id=a%26b%3Dc+d&action=keep&token=s3cret")

    url = StructuredLoggingMiddleware._safe_url(request)

    assert "s3cret" not in url
    params = parse_qs(urlparse(url).query)
    assert params == {"id": ["a&b=c d"], "action": ["keep"], "token": ["***"]}


def test_url_without_token_is_unchanged():
    request = _request(b"id=abc123")

    assert StructuredLoggingMiddleware._safe_url(request) == "http://testserver/moderation/action?id=abc123"
