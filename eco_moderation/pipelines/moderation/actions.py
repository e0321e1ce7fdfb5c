"""Admin action handling for the signed links sent by email.

The handler is a small state machine over one request: validate the
parameters, verify the token, then apply ``delete`` or ``keep``. Results are
returned as ``ActionResult`` so the controller only maps them onto HTTP.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from eco_moderation.config.settings import settings
from eco_moderation.services.audio_repository import AudioRepository
from eco_moderation.utils.security import TokenConfigurationError, verify_record_token

from .pages import DELETED_PAGE, KEPT_PAGE

logger = logging.getLogger("eco_moderation.services.moderation_pipeline")


class AdminAction(str, Enum):
    DELETE = "delete"
    KEEP = "keep"


@dataclass(frozen=True)
class ActionResult:
    status_code: int
    body: str
    is_html: bool = False


MISSING_PARAMETERS = ActionResult(400, "Missing parameters")
INVALID_TOKEN = ActionResult(403, "Invalid token")
INVALID_ACTION = ActionResult(400, "Invalid action")
NOT_FOUND = ActionResult(404, "Audio not found (already deleted?)")
CONFIGURATION_MISSING = ActionResult(500, "Configuration missing")


async def apply_admin_action(
    repository: AudioRepository,
    *,
    record_id: Optional[str],
    action: Optional[str],
    token: Optional[str],
) -> ActionResult:
    """Validate and apply one admin decision."""

    if not record_id or not action or not token:
        return MISSING_PARAMETERS

    try:
        valid = verify_record_token(
            record_id,
            token,
            max_age=settings.moderation.link_max_age_seconds,
        )
    except TokenConfigurationError as exc:
        logger.error("No se puede verificar la acción record=%s: %s", record_id, exc)
        return CONFIGURATION_MISSING

    if not valid:
        logger.warning("Token de acción inválido record=%s action=%s", record_id, action)
        return INVALID_TOKEN

    if action == AdminAction.DELETE.value:
        if await repository.get(record_id) is None:
            return NOT_FOUND
        # Only the row goes; the stored audio object is not removed here.
        await repository.delete(record_id)
        logger.info("Eco eliminado por admin record=%s", record_id)
        return ActionResult(200, DELETED_PAGE, is_html=True)

    if action == AdminAction.KEEP.value:
        await repository.mark_safe(record_id)
        logger.info("Eco aprobado por admin record=%s", record_id)
        return ActionResult(200, KEPT_PAGE, is_html=True)

    return INVALID_ACTION


__all__ = ["ActionResult", "AdminAction", "apply_admin_action"]
