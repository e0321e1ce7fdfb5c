"""Classification stage (Stage 03): ask the LLM for a moderation verdict."""

from __future__ import annotations

import logging

from eco_moderation.services.llm_client import LlmInvocationError, LlmQuotaError, get_llm_client
from eco_moderation.services.response_contract import ModerationVerdict, ResponseContractError

from .prompts import SYSTEM_PROMPT, build_user_prompt

logger = logging.getLogger("eco_moderation.services.moderation_pipeline")


class ClassificationError(RuntimeError):
    """Raised when the classifier cannot produce a verdict."""


class ClassificationQuotaError(ClassificationError):
    """Raised when the classifier provider is out of quota or throttling."""


class ClassificationContractError(ClassificationError):
    """Raised when the classifier answers with an unexpected shape."""


def _truncate(value: str, max_length: int = 500) -> str:
    if len(value) <= max_length:
        return value
    return value[: max_length - 3] + "..."


async def classify_transcript(transcript: str) -> ModerationVerdict:
    """Run the moderation prompt over ``transcript``."""

    if not transcript.strip():
        # Nothing was said; the provider rejects empty messages anyway.
        return ModerationVerdict(flagged=False)

    client = get_llm_client()
    try:
        raw_response = await client.invoke(
            system_prompt=SYSTEM_PROMPT,
            user_prompt=build_user_prompt(transcript),
            temperature=0.0,
        )
    except LlmQuotaError as exc:
        logger.warning("Cuota del clasificador agotada: %s", exc)
        raise ClassificationQuotaError(str(exc)) from exc
    except LlmInvocationError as exc:
        logger.error("Fallo al invocar el clasificador: %s", exc)
        raise ClassificationError(str(exc)) from exc

    if not raw_response:
        raise ClassificationContractError("El clasificador devolvió una respuesta vacía.")

    logger.info("Respuesta cruda del clasificador: %s", _truncate(raw_response))

    try:
        return ModerationVerdict.from_json(raw_response)
    except ResponseContractError as exc:
        logger.warning("Veredicto inválido: %s", exc)
        raise ClassificationContractError(str(exc)) from exc


__all__ = [
    "ClassificationContractError",
    "ClassificationError",
    "ClassificationQuotaError",
    "classify_transcript",
]
