"""Common FastAPI dependencies reused across controllers."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from eco_moderation.database import get_session
from eco_moderation.services.audio_repository import AudioRepository

SessionDep = Annotated[AsyncSession, Depends(get_session)]


async def get_audio_repository(session: SessionDep) -> AudioRepository:
    """Repository bound to the request-scoped session."""

    return AudioRepository(session)


AudioRepositoryDep = Annotated[AudioRepository, Depends(get_audio_repository)]


__all__ = ["AudioRepositoryDep", "SessionDep", "get_audio_repository"]
