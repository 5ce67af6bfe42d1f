"""
Schemas for the daily streak system
"""
from datetime import date
from typing import List, Optional
from pydantic import BaseModel, Field, model_validator


class StreakState(BaseModel):
    """Stored streak. last_active_date is a calendar date in the configured offset."""
    current_count: int = Field(default=0, ge=0)
    longest_count: int = Field(default=0, ge=0)
    last_active_date: Optional[date] = None

    @model_validator(mode="after")
    def check_longest_covers_current(self) -> "StreakState":
        if self.longest_count < self.current_count:
            raise ValueError(
                f"longest_count {self.longest_count} is below current_count {self.current_count}"
            )
        return self


class StreakSnapshot(StreakState):
    """Read-only view returned by get_streak."""
    updated_today: bool = False
    completed_dates: List[date] = Field(default_factory=list)


class RecordStreakResult(BaseModel):
    """Outcome of record_streak."""
    current_count: int = Field(..., ge=0)
    longest_count: int = Field(..., ge=0)
    updated: bool


# ==================== API ====================

class StreakResponse(BaseModel):
    """GET /api/streak data."""
    currentCount: int = Field(..., ge=0, description="Current consecutive days")
    longestCount: int = Field(..., ge=0, description="Best streak achieved")
    lastActiveDate: Optional[str] = Field(None, description="Last activity date (YYYY-MM-DD)")
    updatedToday: bool = Field(..., description="Whether today's activity is already recorded")
    completedDates: List[str] = Field(default_factory=list, description="Completed days (YYYY-MM-DD), newest first")

    @classmethod
    def from_snapshot(cls, snapshot: StreakSnapshot) -> "StreakResponse":
        return cls(
            currentCount=snapshot.current_count,
            longestCount=snapshot.longest_count,
            lastActiveDate=snapshot.last_active_date.isoformat() if snapshot.last_active_date else None,
            updatedToday=snapshot.updated_today,
            completedDates=[day.isoformat() for day in snapshot.completed_dates],
        )
