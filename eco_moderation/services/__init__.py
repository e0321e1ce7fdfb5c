"""Service layer exposing integrations with external providers."""

from .audio_fetch import AudioFetchError, fetch_audio_bytes
from .audio_repository import AudioRepository
from .email import EmailServiceError, send_email
from .llm_client import BedrockLlmClient, LlmInvocationError, LlmQuotaError, get_llm_client
from .response_contract import ModerationVerdict, ResponseContractError
from .transcribe import (
    TranscribeService,
    TranscriptionError,
    TranscriptionQuotaError,
    TranscriptionResult,
    get_transcribe_service,
)

__all__ = [
    "AudioFetchError",
    "AudioRepository",
    "BedrockLlmClient",
    "EmailServiceError",
    "LlmInvocationError",
    "LlmQuotaError",
    "ModerationVerdict",
    "ResponseContractError",
    "TranscribeService",
    "TranscriptionError",
    "TranscriptionQuotaError",
    "TranscriptionResult",
    "fetch_audio_bytes",
    "get_llm_client",
    "get_transcribe_service",
    "send_email",
]
