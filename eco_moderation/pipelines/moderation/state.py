"""Moderation state machine (Stage 04): one pass per webhook delivery.

Transitions are ``pending -> safe`` or ``pending -> flagged``. Nothing else
is written by this module; admin overrides live in ``actions``.

* A record whose status is no longer ``pending`` (in the payload or in the
  table) is skipped.
* Audio fetch errors and non-quota transcription errors propagate; the row
  stays ``pending`` so a redelivery can try again.
* Quota errors from either provider flag the eco for manual review and
  notify the admin.
* Any other classifier failure goes through the configured fallback policy:
  ``review`` flags for manual review, ``allow`` publishes the eco as safe.
* The final write is conditional on the row still being ``pending``; when a
  concurrent delivery won the race no email is sent.
"""

from __future__ import annotations

import logging

from eco_moderation.config.settings import settings
from eco_moderation.models.audio import ModerationStatus
from eco_moderation.services.audio_fetch import fetch_audio_bytes
from eco_moderation.services.audio_repository import AudioRepository
from eco_moderation.services.transcribe import TranscriptionQuotaError
from eco_moderation.telemetry import record_moderation_outcome

from .classification import (
    ClassificationContractError,
    ClassificationError,
    ClassificationQuotaError,
    classify_transcript,
)
from .notification import notify_admin
from .transcription import cached_transcript, transcribe_record_audio
from .types import (
    CLASSIFICATION_QUOTA_REASON,
    DEFAULT_FLAG_REASON,
    MODERATION_SKIPPED_REASON,
    MODERATION_UNAVAILABLE_REASON,
    TRANSCRIPT_UNAVAILABLE,
    TRANSCRIPTION_QUOTA_REASON,
    ModerationOutcome,
    NotificationKind,
    RecordSnapshot,
)

logger = logging.getLogger("eco_moderation.services.moderation_pipeline")
transcript_logger = logging.getLogger("eco_moderation.logs.transcript")

ALREADY_PROCESSED = "Already processed"
RECORD_NOT_FOUND = "Audio record not found"
QUOTA_MESSAGE = "Quota exceeded, admin notified"


class ModerationPipeline:
    """Runs the fetch → transcribe → classify → persist → notify sequence."""

    def __init__(self, repository: AudioRepository) -> None:
        self._repository = repository

    async def process(self, record: RecordSnapshot) -> ModerationOutcome:
        if record.moderation_status != ModerationStatus.PENDING.value:
            logger.info("Eco ya procesado record=%s status=%s", record.id, record.moderation_status)
            return self._skipped(record.id, ALREADY_PROCESSED)

        stored = await self._repository.get(record.id)
        if stored is None:
            logger.warning("Eco no encontrado en la base de datos record=%s", record.id)
            return self._skipped(record.id, RECORD_NOT_FOUND)
        if stored.moderation_status != ModerationStatus.PENDING.value:
            logger.info("Eco ya procesado record=%s status=%s", record.id, stored.moderation_status)
            return self._skipped(record.id, ALREADY_PROCESSED)

        snapshot = RecordSnapshot(
            id=stored.id,
            file_url=stored.file_url or record.file_url,
            title=stored.title or record.title,
            author=stored.author or record.author,
            moderation_status=stored.moderation_status,
            transcript=stored.transcript,
        )

        transcript = cached_transcript(snapshot)
        if transcript is None:
            logger.info("Descargando audio record=%s url=%s", snapshot.id, snapshot.file_url)
            audio_bytes = await fetch_audio_bytes(snapshot.file_url)
            try:
                transcript = await transcribe_record_audio(snapshot, audio_bytes)
            except TranscriptionQuotaError:
                return await self._finish(
                    snapshot,
                    status=ModerationStatus.FLAGGED,
                    reason=TRANSCRIPTION_QUOTA_REASON,
                    transcript=TRANSCRIPT_UNAVAILABLE,
                    notification=NotificationKind.MANUAL_REVIEW,
                    path="transcription_quota",
                    message=QUOTA_MESSAGE,
                )
        else:
            logger.info("Usando transcripción en caché record=%s", snapshot.id)

        transcript_logger.info("record=%s | text=%s", snapshot.id, transcript)

        try:
            verdict = await classify_transcript(transcript)
        except ClassificationQuotaError:
            return await self._finish(
                snapshot,
                status=ModerationStatus.FLAGGED,
                reason=CLASSIFICATION_QUOTA_REASON,
                transcript=transcript,
                notification=NotificationKind.MANUAL_REVIEW,
                path="classification_quota",
                message=QUOTA_MESSAGE,
            )
        except ClassificationError as exc:
            return await self._fallback(snapshot, transcript, exc)

        if verdict.flagged:
            return await self._finish(
                snapshot,
                status=ModerationStatus.FLAGGED,
                reason=verdict.reason or DEFAULT_FLAG_REASON,
                transcript=transcript,
                notification=NotificationKind.FLAGGED,
                path="classified",
            )

        return await self._finish(
            snapshot,
            status=ModerationStatus.SAFE,
            reason=None,
            transcript=transcript,
            notification=None,
            path="classified",
        )

    async def _fallback(
        self,
        record: RecordSnapshot,
        transcript: str,
        exc: ClassificationError,
    ) -> ModerationOutcome:
        logger.error("Clasificación fallida record=%s: %s", record.id, exc)

        if settings.moderation.fallback_policy == "allow":
            return await self._finish(
                record,
                status=ModerationStatus.SAFE,
                reason=MODERATION_SKIPPED_REASON,
                transcript=transcript,
                notification=NotificationKind.OUTAGE,
                path="fallback_allow",
                message="Moderation skipped, admin notified",
            )

        if isinstance(exc, ClassificationContractError):
            cause = "invalid classifier response"
        else:
            cause = "classifier request failed"
        return await self._finish(
            record,
            status=ModerationStatus.FLAGGED,
            reason=f"{MODERATION_UNAVAILABLE_REASON} ({cause})",
            transcript=transcript,
            notification=NotificationKind.MANUAL_REVIEW,
            path="fallback_review",
            message="Moderation unavailable, admin notified",
        )

    async def _finish(
        self,
        record: RecordSnapshot,
        *,
        status: ModerationStatus,
        reason: str | None,
        transcript: str | None,
        notification: NotificationKind | None,
        path: str,
        message: str | None = None,
    ) -> ModerationOutcome:
        applied = await self._repository.apply_moderation(
            record.id,
            status=status,
            reason=reason,
            transcript=transcript,
        )
        if not applied:
            return self._skipped(record.id, ALREADY_PROCESSED)

        logger.info(
            "Moderación aplicada record=%s status=%s path=%s reason=%s",
            record.id,
            status.value,
            path,
            reason,
        )
        record_moderation_outcome(status.value, path)

        notified = False
        if notification is not None:
            notified = await notify_admin(
                notification,
                record,
                reason=reason,
                transcript=transcript,
            )

        return ModerationOutcome(
            record_id=record.id,
            status=status,
            reason=reason,
            transcript=transcript,
            notified=notified,
            message=message,
        )

    @staticmethod
    def _skipped(record_id: str, message: str) -> ModerationOutcome:
        return ModerationOutcome(
            record_id=record_id,
            status=None,
            skipped=True,
            message=message,
        )


__all__ = ["ALREADY_PROCESSED", "ModerationPipeline", "QUOTA_MESSAGE", "RECORD_NOT_FOUND"]
