"""Utility helpers for the Eco moderation service."""

from .security import (
    TokenConfigurationError,
    sign_record_token,
    verify_record_token,
)

__all__ = [
    "sign_record_token",
    "verify_record_token",
    "TokenConfigurationError",
]
