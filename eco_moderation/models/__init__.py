"""SQLAlchemy models for the moderation service."""

from .audio import AudioRecord, ModerationStatus  # noqa: F401
from .base import Base

__all__ = [
    "Base",
    "AudioRecord",
    "ModerationStatus",
]
