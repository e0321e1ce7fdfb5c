"""Signing helpers for admin action links.

Links sent to moderators carry a token bound to the record id so they can be
used without a login session. The bare form is a SHA-256 hex digest over
``record_id + secret`` and never expires. When a maximum link age is
configured the token is ``"<issued_at>.<digest>"`` where the digest is an
HMAC-SHA256 keyed with the secret over the record id and issue time, and
verification rejects tokens past that age. The two digests are computed
differently so a bare token can never be replayed as a timestamped one.
"""

from __future__ import annotations

import hashlib
import hmac
import time
from typing import Optional

from eco_moderation.config.settings import settings

_CLOCK_SKEW_SECONDS = 300


class TokenConfigurationError(RuntimeError):
    """Raised when no signing secret is configured."""


def _secret() -> str:
    token_secret = settings.moderation.token_secret
    if token_secret is None:
        raise TokenConfigurationError("MODERATION_TOKEN_SECRET is not configured.")
    return token_secret.get_secret_value()


def _bare_digest(record_id: str, secret: str) -> str:
    return hashlib.sha256(f"{record_id}{secret}".encode("utf-8")).hexdigest()


def _timestamped_digest(record_id: str, issued_at: int, secret: str) -> str:
    # Length prefix keeps (id, issued_at) pairs unambiguous.
    message = f"{len(record_id)}|{record_id}|{issued_at}".encode("utf-8")
    return hmac.new(secret.encode("utf-8"), message, hashlib.sha256).hexdigest()


def _matches(token: str, expected: str) -> bool:
    return hmac.compare_digest(token.encode("utf-8"), expected.encode("utf-8"))


def sign_record_token(record_id: str, issued_at: Optional[int] = None) -> str:
    """Return the action token for ``record_id``."""

    secret = _secret()
    if issued_at is None:
        return _bare_digest(record_id, secret)
    return f"{issued_at}.{_timestamped_digest(record_id, issued_at, secret)}"


def verify_record_token(
    record_id: str,
    token: str,
    *,
    max_age: Optional[int] = None,
    now: Optional[float] = None,
) -> bool:
    """Check ``token`` against the digest recomputed for ``record_id``."""

    if not record_id or not token:
        return False

    issued_part, separator, _ = token.partition(".")
    if not separator:
        if max_age is not None:
            return False
        return _matches(token, sign_record_token(record_id))

    if not issued_part.isascii() or not issued_part.isdigit():
        return False
    issued_at = int(issued_part)

    if not _matches(token, sign_record_token(record_id, issued_at=issued_at)):
        return False

    if max_age is None:
        return True

    current = time.time() if now is None else now
    if issued_at > current + _CLOCK_SKEW_SECONDS:
        return False
    return current - issued_at <= max_age


__all__ = [
    "TokenConfigurationError",
    "sign_record_token",
    "verify_record_token",
]
