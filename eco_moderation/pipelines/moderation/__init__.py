"""Content moderation pipeline package.

Modules are organised by the order in which the webhook executes:

1. `transcription` – turn the fetched audio into text.
2. `prompts` / `classification` – ask the LLM for a verdict.
3. `state` – the pending → safe/flagged transition and its fallbacks.
4. `notification` – admin email with signed action links.
5. `actions` / `pages` – the admin's keep/delete decision.

The FastAPI controller imports from here so contributors can jump straight
to the relevant stage.
"""

from .actions import ActionResult, AdminAction, apply_admin_action
from .classification import (
    ClassificationContractError,
    ClassificationError,
    ClassificationQuotaError,
    classify_transcript,
)
from .flow import ModerationFlow, PipelineStage
from .notification import ActionLinks, build_action_links, notify_admin, render_notification
from .state import ModerationPipeline
from .transcription import cached_transcript, transcribe_record_audio
from .types import ModerationOutcome, NotificationKind, RecordSnapshot

__all__ = [
    "ActionLinks",
    "ActionResult",
    "AdminAction",
    "ClassificationContractError",
    "ClassificationError",
    "ClassificationQuotaError",
    "ModerationFlow",
    "ModerationOutcome",
    "ModerationPipeline",
    "NotificationKind",
    "PipelineStage",
    "RecordSnapshot",
    "apply_admin_action",
    "build_action_links",
    "cached_transcript",
    "classify_transcript",
    "notify_admin",
    "render_notification",
    "transcribe_record_audio",
]
