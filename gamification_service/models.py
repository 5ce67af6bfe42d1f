from datetime import datetime, timezone
from sqlalchemy import Column, Integer, String, DateTime, Date, CheckConstraint
from gamification_service.core.db import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Hearts(Base):
    """Heart balance per user. Recovery is derived from last_refill, never stored."""
    __tablename__ = "hearts"

    user_id = Column(String(255), primary_key=True)
    count = Column(Integer, nullable=False)
    max_count = Column(Integer, nullable=False)
    last_refill = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

    __table_args__ = (
        CheckConstraint("count >= 0", name="ck_hearts_count_non_negative"),
        CheckConstraint("max_count > 0", name="ck_hearts_max_count_positive"),
        CheckConstraint("count <= max_count", name="ck_hearts_count_within_max"),
    )


class Streak(Base):
    """Daily streak per user. last_active_date is a calendar date in the server offset."""
    __tablename__ = "streaks"

    user_id = Column(String(255), primary_key=True)
    current_count = Column(Integer, nullable=False, default=0)
    longest_count = Column(Integer, nullable=False, default=0)
    last_active_date = Column(Date, nullable=True)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

    __table_args__ = (
        CheckConstraint("current_count >= 0", name="ck_streaks_current_non_negative"),
        CheckConstraint("longest_count >= current_count", name="ck_streaks_longest_gte_current"),
    )


class CompletionDay(Base):
    """One row per user and calendar day with at least one completion."""
    __tablename__ = "completion_days"

    user_id = Column(String(255), primary_key=True)
    completed_date = Column(Date, primary_key=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
