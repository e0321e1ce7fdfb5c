"""Pydantic schemas used as views in the MVC architecture."""

from .common import ErrorResponse, MessageResponse
from .moderation import (
    AudioRecordPayload,
    ModerationWebhookPayload,
    ModerationWebhookResponse,
)

__all__ = [
    "AudioRecordPayload",
    "ErrorResponse",
    "MessageResponse",
    "ModerationWebhookPayload",
    "ModerationWebhookResponse",
]
