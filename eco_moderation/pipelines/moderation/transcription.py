"""Transcription stage (Stage 02) of the moderation pipeline."""

from __future__ import annotations

import logging

from eco_moderation.services.transcribe import (
    TranscriptionError,
    TranscriptionQuotaError,
    get_transcribe_service,
)

from .types import TRANSCRIPT_UNAVAILABLE, RecordSnapshot

logger = logging.getLogger("eco_moderation.services.moderation_pipeline")


def cached_transcript(record: RecordSnapshot) -> str | None:
    """Transcript stored by an earlier successful pass, if any."""

    transcript = (record.transcript or "").strip()
    if not transcript or transcript == TRANSCRIPT_UNAVAILABLE:
        return None
    return transcript


async def transcribe_record_audio(record: RecordSnapshot, audio_bytes: bytes) -> str:
    """Return the transcript for ``record``.

    Raises ``TranscriptionQuotaError`` for quota failures and
    ``TranscriptionError`` for everything else.
    """

    service = get_transcribe_service()
    try:
        result = await service.transcribe_audio(audio_bytes)
    except TranscriptionQuotaError:
        logger.warning("Cuota de transcripción agotada record=%s", record.id)
        raise
    except TranscriptionError:
        logger.exception("Fallo en transcripción record=%s", record.id)
        raise

    return result.transcript


__all__ = ["cached_transcript", "transcribe_record_audio"]
