"""High-level orchestration map for the moderation pipeline.

``state.ModerationPipeline`` performs the actual choreography; this module
documents the canonical execution order so team members can navigate the
codebase more easily:

1. ``services.audio_fetch`` – download the uploaded audio.
2. ``transcription`` – call Amazon Transcribe (or reuse a cached transcript).
3. ``classification`` – ask the LLM for a structured moderation verdict.
4. ``state`` – decide and persist ``safe``/``flagged``.
5. ``notification`` – email the admin with signed keep/delete links.
6. ``actions`` – apply the admin's decision from ``GET /moderation/action``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List


@dataclass(frozen=True)
class PipelineStage:
    """Human-readable description of one stage in the moderation pipeline."""

    order: int
    name: str
    module: str
    summary: str


class ModerationFlow:
    """Utility wrapper for documenting the webhook and admin-action flow."""

    _STAGES: List[PipelineStage] = [
        PipelineStage(
            1,
            "Audio Fetch",
            "eco_moderation.services.audio_fetch",
            "Download the uploaded eco from its storage URL; failures leave the row pending.",
        ),
        PipelineStage(
            2,
            "Transcription",
            "eco_moderation.pipelines.moderation.transcription",
            "Stream the audio to Amazon Transcribe; quota errors trigger manual review.",
        ),
        PipelineStage(
            3,
            "Classification",
            "eco_moderation.pipelines.moderation.classification",
            "Call Bedrock with the moderation prompt and validate the JSON verdict.",
        ),
        PipelineStage(
            4,
            "Status Transition",
            "eco_moderation.pipelines.moderation.state",
            "Conditionally move the record from pending to safe or flagged.",
        ),
        PipelineStage(
            5,
            "Admin Notification",
            "eco_moderation.pipelines.moderation.notification",
            "Email the verdict with signed keep/delete links (best effort).",
        ),
        PipelineStage(
            6,
            "Admin Action",
            "eco_moderation.pipelines.moderation.actions",
            "Verify the link token and delete the eco or mark it safe.",
        ),
    ]

    @classmethod
    def describe(cls) -> Iterable[PipelineStage]:
        """Expose the ordered list of stages for debugging and documentation."""

        return tuple(cls._STAGES)


__all__ = ["ModerationFlow", "PipelineStage"]
