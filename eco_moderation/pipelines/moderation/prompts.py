"""Prompt text for the moderation classifier."""

from __future__ import annotations

SYSTEM_PROMPT = (
    "Eres un sistema de moderación de contenido. Analiza el siguiente texto "
    "transcrito de un audio. Tu tarea es identificar si contiene contenido "
    "inapropiado severo: discurso de odio, acoso grave, violencia explícita, "
    "autolesiones o contenido sexual explícito. Sé razonable: el lenguaje "
    "coloquial o las palabrotas leves NO deben ser marcadas. Solo marca "
    "contenido verdaderamente dañino o ilegal. Devuelve ÚNICAMENTE un objeto "
    "JSON con la estructura: "
    '{"flagged": boolean, "categories": {"hate": boolean, "harassment": boolean, '
    '"sexual": boolean, "violence": boolean}, "reason": string | null}.'
)


def build_user_prompt(transcript: str) -> str:
    """The transcript goes to the model verbatim."""

    return transcript


__all__ = ["SYSTEM_PROMPT", "build_user_prompt"]
