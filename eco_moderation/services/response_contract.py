"""Pydantic models for validating LLM JSON responses.

The classifier is asked for a fixed JSON shape, but the model is free to wrap
it in Markdown or prose. These schemas strip that noise and hand the pipeline
a normalized, type-safe verdict.
"""

from __future__ import annotations

import json
from typing import Optional

from pydantic import BaseModel, Field, ValidationError, field_validator


class ResponseContractError(RuntimeError):
    """Raised when the LLM response contract cannot be validated."""


class ModerationCategories(BaseModel):
    hate: bool = False
    harassment: bool = False
    sexual: bool = False
    violence: bool = False

    model_config = {"extra": "allow"}


class ModerationVerdict(BaseModel):
    flagged: bool
    categories: ModerationCategories = Field(default_factory=ModerationCategories)
    reason: Optional[str] = None

    model_config = {"extra": "ignore"}

    @field_validator("categories", mode="before")
    @classmethod
    def default_categories(cls, value):
        return {} if value is None else value

    @field_validator("reason")
    @classmethod
    def blank_reason_to_none(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        cleaned = value.strip()
        return cleaned or None

    @classmethod
    def from_json(cls, payload: str) -> "ModerationVerdict":
        cleaned = _clean_json_payload(payload)
        try:
            data = json.loads(cleaned)
        except json.JSONDecodeError as exc:
            raise ResponseContractError(f"Invalid JSON from classifier: {exc}") from exc
        if not isinstance(data, dict):
            raise ResponseContractError("Classifier response is not a JSON object.")
        try:
            return cls.model_validate(data)
        except ValidationError as exc:
            raise ResponseContractError(f"Classifier response has the wrong shape: {exc}") from exc


def _clean_json_payload(payload: str) -> str:
    """Strip Markdown code blocks and find the first/last brace to extract JSON."""
    if not payload:
        return ""

    cleaned = payload.strip()
    if cleaned.startswith("```json"):
        cleaned = cleaned[7:]
    elif cleaned.startswith("```"):
        cleaned = cleaned[3:]

    if cleaned.endswith("```"):
        cleaned = cleaned[:-3]

    cleaned = cleaned.strip()

    start = cleaned.find("{")
    end = cleaned.rfind("}")

    if start != -1 and end != -1 and end > start:
        cleaned = cleaned[start : end + 1]

    return cleaned


__all__ = [
    "ModerationCategories",
    "ModerationVerdict",
    "ResponseContractError",
]
