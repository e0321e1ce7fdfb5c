"""Moderation endpoints.

For a stage-by-stage map see `eco_moderation.pipelines.moderation.flow`.

* ``POST /moderation/webhook`` runs one moderation pass for a newly
  uploaded eco (database webhook on the ``audios`` table).
* ``GET /moderation/action`` applies an admin decision from a signed email
  link and answers with a small HTML page.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Query, status
from fastapi.responses import HTMLResponse, JSONResponse, PlainTextResponse, Response

from eco_moderation.config.settings import settings
from eco_moderation.controllers.dependencies import AudioRepositoryDep
from eco_moderation.pipelines.moderation import (
    ModerationFlow,
    ModerationPipeline,
    apply_admin_action,
)
from eco_moderation.services.audio_fetch import AudioFetchError
from eco_moderation.services.transcribe import TranscriptionError
from eco_moderation.views import ErrorResponse, MessageResponse, ModerationWebhookPayload, ModerationWebhookResponse

router = APIRouter(prefix="/moderation", tags=["moderation"])

logger = logging.getLogger(__name__)

PIPELINE_STAGES = tuple(ModerationFlow.describe())
"""Ordered pipeline metadata used for quick reference and debugging."""

NO_RECORD_MESSAGE = "No audio record found"

_ID_QUERY = Query(default=None, alias="id")
_ACTION_QUERY = Query(default=None)
_TOKEN_QUERY = Query(default=None)


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=message).model_dump(exclude_none=True),
    )


@router.post(
    "/webhook",
    response_model=ModerationWebhookResponse | MessageResponse,
    responses={500: {"model": ErrorResponse}},
)
async def moderation_webhook(
    payload: ModerationWebhookPayload,
    repository: AudioRepositoryDep,
) -> Response:
    """Transcribe, classify and persist the moderation status of a new eco."""

    missing = settings.missing_moderation_secrets()
    if missing:
        logger.error("Missing moderation secrets: %s", ", ".join(missing))
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Configuration missing")

    record = payload.record
    if record is None or not record.file_url:
        return JSONResponse(content=MessageResponse(message=NO_RECORD_MESSAGE).model_dump())

    pipeline = ModerationPipeline(repository)
    try:
        outcome = await pipeline.process(record.to_snapshot())
    except AudioFetchError as exc:
        logger.error("No se pudo descargar el audio record=%s: %s", record.id, exc)
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, str(exc))
    except TranscriptionError as exc:
        logger.error("Transcripción fallida record=%s: %s", record.id, exc)
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, str(exc))

    return JSONResponse(content=outcome.to_response())


@router.get("/action", response_class=HTMLResponse)
async def moderation_action(
    repository: AudioRepositoryDep,
    record_id: Optional[str] = _ID_QUERY,
    action: Optional[str] = _ACTION_QUERY,
    token: Optional[str] = _TOKEN_QUERY,
) -> Response:
    """Apply ``keep``/``delete`` from an admin email link."""

    result = await apply_admin_action(
        repository,
        record_id=record_id,
        action=action,
        token=token,
    )
    if result.is_html:
        return HTMLResponse(content=result.body, status_code=result.status_code)
    return PlainTextResponse(content=result.body, status_code=result.status_code)
