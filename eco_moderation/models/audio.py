"""SQLAlchemy model for user-recorded audio clips ("ecos")."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from sqlalchemy import Column, DateTime, String, Text

from eco_moderation.models.base import Base


class ModerationStatus(str, Enum):
    """Lifecycle of an eco through the moderation pipeline."""

    PENDING = "pending"
    SAFE = "safe"
    FLAGGED = "flagged"


class AudioRecord(Base):
    __tablename__ = "audios"

    id = Column(String(64), primary_key=True, index=True)
    file_url = Column(String(2048), nullable=False)
    title = Column(String(255), nullable=True)
    author = Column(String(255), nullable=True)
    # Plain strings so the column maps onto the existing text column.
    moderation_status = Column(
        String(16),
        nullable=False,
        default=ModerationStatus.PENDING.value,
        index=True,
    )
    moderation_reason = Column(Text, nullable=True)
    transcript = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)


__all__ = ["AudioRecord", "ModerationStatus"]
