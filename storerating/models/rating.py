"""
Rating model — one 1..5 score per (user, store) pair.

The composite unique constraint is what the ledger's upsert conflicts on,
so it must stay in sync with ``RATING_UNIQUE_COLUMNS``.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import (CheckConstraint, Column, DateTime, ForeignKey, Index,
                        Integer, UniqueConstraint)
from sqlalchemy.orm import relationship

from storerating.db.base import Base

RATING_UNIQUE_COLUMNS = ("user_id", "store_id")
MIN_RATING = 1
MAX_RATING = 5


class Rating(Base):
    __tablename__ = "ratings"
    __table_args__ = (
        UniqueConstraint(*RATING_UNIQUE_COLUMNS, name="uq_rating_user_store"),
        CheckConstraint(
            f"value >= {MIN_RATING} AND value <= {MAX_RATING}", name="ck_rating_value_range"
        ),
        Index("ix_rating_store_created", "store_id", "created_at"),
    )

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    value: int = Column(Integer, nullable=False)  # type: ignore[assignment]
    user_id: int = Column(  # type: ignore[assignment]
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    store_id: int = Column(  # type: ignore[assignment]
        Integer, ForeignKey("stores.id", ondelete="CASCADE"), nullable=False
    )
    created_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        index=True,
    )
    updated_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    user = relationship("User", back_populates="ratings")
    store = relationship("Store", back_populates="ratings")
