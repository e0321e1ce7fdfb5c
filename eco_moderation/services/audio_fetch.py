"""Download uploaded audio payloads from their public storage URL."""

from __future__ import annotations

import logging

import httpx

from eco_moderation.config.settings import settings

logger = logging.getLogger(__name__)


class AudioFetchError(RuntimeError):
    """Raised when the audio payload cannot be retrieved."""


async def fetch_audio_bytes(
    file_url: str,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> bytes:
    """Return the bytes stored at ``file_url``.

    The body is streamed so oversized uploads are rejected without being
    held in memory.
    """

    max_bytes = settings.moderation.max_audio_bytes
    timeout = settings.moderation.fetch_timeout_seconds

    async with httpx.AsyncClient(
        timeout=timeout,
        follow_redirects=True,
        transport=transport,
    ) as client:
        try:
            async with client.stream("GET", file_url) as response:
                response.raise_for_status()
                chunks: list[bytes] = []
                received = 0
                async for chunk in response.aiter_bytes():
                    received += len(chunk)
                    if received > max_bytes:
                        raise AudioFetchError(
                            f"Audio payload exceeds {max_bytes} bytes."
                        )
                    chunks.append(chunk)
        except httpx.HTTPStatusError as exc:
            raise AudioFetchError(
                f"Failed to fetch audio file: HTTP {exc.response.status_code}"
            ) from exc
        except httpx.RequestError as exc:
            raise AudioFetchError(f"Failed to fetch audio file: {exc}") from exc

    audio_bytes = b"".join(chunks)
    if not audio_bytes:
        raise AudioFetchError("Fetched audio file is empty.")

    logger.debug("Fetched %s bytes from %s", len(audio_bytes), file_url)
    return audio_bytes


__all__ = ["AudioFetchError", "fetch_audio_bytes"]
