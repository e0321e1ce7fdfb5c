"""Pydantic schemas for the moderation webhook."""

from __future__ import annotations

from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from eco_moderation.models.audio import ModerationStatus
from eco_moderation.pipelines.moderation.types import RecordSnapshot


class AudioRecordPayload(BaseModel):
    """The ``record`` object of a database webhook for the audios table."""

    id: str
    file_url: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("file_url", "fileUrl"),
    )
    title: Optional[str] = None
    author: Optional[str] = None
    moderation_status: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("moderation_status", "moderationStatus"),
    )
    transcript: Optional[str] = None

    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    def to_snapshot(self) -> RecordSnapshot:
        return RecordSnapshot(
            id=self.id,
            file_url=self.file_url or "",
            title=self.title,
            author=self.author,
            moderation_status=self.moderation_status or ModerationStatus.PENDING.value,
            transcript=self.transcript,
        )


class ModerationWebhookPayload(BaseModel):
    """Envelope posted by the database on insert/update of an audio row."""

    type: Optional[str] = None
    table: Optional[str] = None
    schema_name: Optional[str] = Field(default=None, alias="schema")
    record: Optional[AudioRecordPayload] = None
    old_record: Optional[dict[str, Any]] = None

    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class ModerationWebhookResponse(BaseModel):
    success: bool
    flagged: bool
    transcript: Optional[str] = None
    message: Optional[str] = None
