"""Persistence helpers for the `audios` table.

Every moderation write goes through :meth:`AudioRepository.apply_moderation`,
which only touches rows still in ``pending``. Two deliveries of the same
webhook therefore race harmlessly: the second update matches no row.
"""

from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from eco_moderation.models.audio import AudioRecord, ModerationStatus

logger = logging.getLogger(__name__)


class AudioRepository:
    """Thin async data-access wrapper bound to one session."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, record_id: str) -> Optional[AudioRecord]:
        result = await self._session.execute(
            select(AudioRecord).where(AudioRecord.id == record_id)
        )
        return result.scalar_one_or_none()

    async def apply_moderation(
        self,
        record_id: str,
        *,
        status: ModerationStatus,
        reason: str | None,
        transcript: str | None,
    ) -> bool:
        """Move a pending record to its moderation result.

        Returns False when the record is gone or was already moderated.
        """

        result = await self._session.execute(
            update(AudioRecord)
            .where(
                AudioRecord.id == record_id,
                AudioRecord.moderation_status == ModerationStatus.PENDING.value,
            )
            .values(
                moderation_status=status.value,
                moderation_reason=reason,
                transcript=transcript,
            )
            .execution_options(synchronize_session=False)
        )
        await self._session.commit()
        applied = (result.rowcount or 0) > 0
        if not applied:
            logger.info("Moderation update skipped for %s: no pending row", record_id)
        return applied

    async def mark_safe(self, record_id: str) -> None:
        """Admin override; applies regardless of the current status."""

        await self._session.execute(
            update(AudioRecord)
            .where(AudioRecord.id == record_id)
            .values(moderation_status=ModerationStatus.SAFE.value)
            .execution_options(synchronize_session=False)
        )
        await self._session.commit()

    async def delete(self, record_id: str) -> bool:
        """Remove the row; the stored audio object is left untouched."""

        result = await self._session.execute(
            delete(AudioRecord)
            .where(AudioRecord.id == record_id)
            .execution_options(synchronize_session=False)
        )
        await self._session.commit()
        return (result.rowcount or 0) > 0


__all__ = ["AudioRepository"]
