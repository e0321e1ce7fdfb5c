"""Typed containers shared across the moderation pipeline stages.

Kept in their own module so `state`, `notification` and the controller can
import them without circular dependencies.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from eco_moderation.models.audio import ModerationStatus

TRANSCRIPT_UNAVAILABLE = "(Transcripción no disponible por falta de cuota)"
DEFAULT_FLAG_REASON = "Contenido inapropiado detectado por IA"
TRANSCRIPTION_QUOTA_REASON = "manual review required: transcription quota exceeded"
CLASSIFICATION_QUOTA_REASON = "manual review required: classification quota exceeded"
MODERATION_UNAVAILABLE_REASON = "manual review required: moderation unavailable"
MODERATION_SKIPPED_REASON = "moderation skipped: quota exceeded"


class NotificationKind(str, Enum):
    """Which admin email template to render."""

    FLAGGED = "flagged"
    MANUAL_REVIEW = "manual_review"
    OUTAGE = "outage"


@dataclass(frozen=True)
class RecordSnapshot:
    """The fields of an audio record the pipeline reads."""

    id: str
    file_url: str
    title: Optional[str] = None
    author: Optional[str] = None
    moderation_status: str = ModerationStatus.PENDING.value
    transcript: Optional[str] = None


@dataclass(frozen=True)
class ModerationOutcome:
    """Result of one webhook delivery."""

    record_id: str
    status: Optional[ModerationStatus]
    reason: Optional[str] = None
    transcript: Optional[str] = None
    notified: bool = False
    skipped: bool = False
    message: Optional[str] = None

    @property
    def flagged(self) -> bool:
        return self.status is ModerationStatus.FLAGGED

    def to_response(self) -> dict[str, object]:
        """JSON body returned to the webhook caller."""

        if self.skipped:
            return {"message": self.message}
        body: dict[str, object] = {
            "success": True,
            "flagged": self.flagged,
            "transcript": self.transcript,
        }
        if self.message:
            body["message"] = self.message
        return body


__all__ = [
    "CLASSIFICATION_QUOTA_REASON",
    "DEFAULT_FLAG_REASON",
    "MODERATION_SKIPPED_REASON",
    "MODERATION_UNAVAILABLE_REASON",
    "ModerationOutcome",
    "NotificationKind",
    "RecordSnapshot",
    "TRANSCRIPTION_QUOTA_REASON",
    "TRANSCRIPT_UNAVAILABLE",
]
