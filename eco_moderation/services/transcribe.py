"""Amazon Transcribe integration helpers using Streaming API."""

from __future__ import annotations

import asyncio
import logging
import os
import subprocess
import tempfile
from dataclasses import dataclass
from functools import lru_cache

from amazon_transcribe.client import TranscribeStreamingClient
from amazon_transcribe.handlers import TranscriptResultStreamHandler
from amazon_transcribe.model import TranscriptEvent
from fastapi.concurrency import run_in_threadpool

from eco_moderation.config.settings import settings
from eco_moderation.services.aws import is_quota_error

logger = logging.getLogger(__name__)

_CHUNK_SIZE = 8192


@dataclass(frozen=True)
class TranscriptionResult:
    """Structured transcription outcome returned to the pipeline."""

    transcript: str
    language_code: str | None = None


class TranscriptionError(RuntimeError):
    """Raised when Amazon Transcribe fails to process audio successfully."""


class TranscriptionQuotaError(TranscriptionError):
    """Raised when the provider rejects the request for rate or quota reasons."""


class TranscribeService:
    """High-level facade for streaming audio to Amazon Transcribe."""

    def __init__(
        self,
        region: str,
        language_code: str = "es-US",
        media_sample_rate_hz: int = 16000,
        media_encoding: str = "pcm",
    ) -> None:
        self._region = region
        self._language_code = language_code
        self._media_sample_rate_hz = media_sample_rate_hz
        self._media_encoding = media_encoding

        # The streaming SDK resolves credentials from the environment only.
        if settings.aws.has_credentials():
            os.environ.setdefault("AWS_ACCESS_KEY_ID", settings.aws.access_key)
            os.environ.setdefault(
                "AWS_SECRET_ACCESS_KEY",
                settings.aws.secret_key.get_secret_value(),
            )

        self._client = TranscribeStreamingClient(region=region)

    async def transcribe_audio(
        self,
        audio_bytes: bytes,
        *,
        language_code: str | None = None,
    ) -> TranscriptionResult:
        """Stream audio to Transcribe and return the full transcript."""

        if not audio_bytes:
            raise TranscriptionError("The audio payload is empty.")

        target_language = language_code or self._language_code

        try:
            pcm_data = await self._convert_to_pcm(audio_bytes)
        except TranscriptionError:
            raise
        except Exception as exc:
            raise TranscriptionError(f"Audio conversion failed: {exc}") from exc

        if not pcm_data:
            raise TranscriptionError("Audio conversion produced no samples.")

        try:
            stream = await self._client.start_stream_transcription(
                language_code=target_language,
                media_sample_rate_hz=self._media_sample_rate_hz,
                media_encoding=self._media_encoding,
            )
            handler = _SimpleTranscriptHandler(stream.output_stream)
            await asyncio.gather(
                self._write_chunks(stream, pcm_data),
                handler.handle_events(),
            )
        except Exception as exc:
            if is_quota_error(exc):
                logger.warning("Transcribe quota exhausted: %s", exc)
                raise TranscriptionQuotaError(str(exc)) from exc
            logger.error("Streaming loop failed: %s", exc)
            raise TranscriptionError(f"Streaming transcription failed: {exc}") from exc

        logger.info("Transcription complete. Length: %s", len(handler.transcript))
        return TranscriptionResult(
            transcript=handler.transcript.strip(),
            language_code=target_language,
        )

    async def _write_chunks(self, stream, pcm_data: bytes) -> None:
        # 16-bit mono PCM: pace chunks at roughly real time.
        bytes_per_sec = self._media_sample_rate_hz * 2
        sleep_time = _CHUNK_SIZE / bytes_per_sec

        logger.debug(
            "Starting stream. Total bytes: %s. Chunk size: %s.",
            len(pcm_data),
            _CHUNK_SIZE,
        )
        for offset in range(0, len(pcm_data), _CHUNK_SIZE):
            chunk = pcm_data[offset : offset + _CHUNK_SIZE]
            await stream.input_stream.send_audio_event(audio_chunk=chunk)
            await asyncio.sleep(sleep_time)

        await stream.input_stream.end_stream()

    async def _convert_to_pcm(self, audio_bytes: bytes) -> bytes:
        """Convert input audio to raw PCM s16le via ffmpeg using a thread."""
        return await run_in_threadpool(self._convert_to_pcm_sync, audio_bytes)

    def _convert_to_pcm_sync(self, audio_bytes: bytes) -> bytes:
        """Synchronous ffmpeg conversion using a temporary file to support seeking."""

        with tempfile.NamedTemporaryFile(delete=False, suffix=".tmp") as tmp_file:
            tmp_file.write(audio_bytes)
            tmp_path = tmp_file.name

        try:
            process = subprocess.run(
                [
                    "ffmpeg",
                    "-y",
                    "-i", tmp_path,
                    "-f", "s16le",
                    "-ac", "1",
                    "-ar", str(self._media_sample_rate_hz),
                    "pipe:1",
                ],
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                check=True,
            )
            if not process.stdout:
                logger.warning(
                    "ffmpeg produced empty output. stderr: %s",
                    process.stderr.decode("utf-8", errors="replace"),
                )
            return process.stdout
        except subprocess.CalledProcessError as exc:
            error_msg = exc.stderr.decode("utf-8", errors="replace") if exc.stderr else "No stderr"
            logger.error("ffmpeg failed. stderr: %s", error_msg)
            raise TranscriptionError(f"ffmpeg failed to convert audio to PCM: {error_msg}") from exc
        finally:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)


class _SimpleTranscriptHandler(TranscriptResultStreamHandler):
    def __init__(self, transcript_result_stream):
        super().__init__(transcript_result_stream)
        self.transcript = ""

    async def handle_transcript_event(self, transcript_event: TranscriptEvent):
        for result in transcript_event.transcript.results:
            if not result.is_partial and result.alternatives:
                # First alternative is the most likely one.
                self.transcript += result.alternatives[0].transcript + " "


@lru_cache(maxsize=1)
def get_transcribe_service() -> TranscribeService:
    """Return a lazily-instantiated transcribe service singleton."""

    return TranscribeService(
        region=settings.transcribe.region or settings.aws.region,
        language_code=settings.transcribe.language_code,
        media_sample_rate_hz=settings.transcribe.sample_rate_hz,
    )


__all__ = [
    "TranscribeService",
    "TranscriptionError",
    "TranscriptionQuotaError",
    "TranscriptionResult",
    "get_transcribe_service",
]
