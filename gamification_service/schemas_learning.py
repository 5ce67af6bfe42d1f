"""
Schemas for content completion (lessons, tsumeshogi, future content)
"""
from datetime import date, datetime
from typing import List, Optional
from pydantic import BaseModel, Field

from gamification_service.schemas_hearts import ConsumeResult, ContentType


class RecordCompletionOptions(BaseModel):
    """Options for LearningService.record_completion."""
    consume_heart: bool
    heart_amount: int = Field(default=1, ge=1)
    content_type: Optional[ContentType] = None
    content_id: Optional[str] = None


class StreakOutcome(BaseModel):
    current_count: int = Field(..., ge=0)
    longest_count: int = Field(..., ge=0)
    updated: bool
    is_new_record: bool


class CompletionResult(BaseModel):
    """Ephemeral result of one completion; hearts is None when no heart was consumed."""
    streak: StreakOutcome
    hearts: Optional[ConsumeResult] = None
    completed_dates: List[date] = Field(default_factory=list)


# ==================== API ====================

class CompleteLearningRequest(BaseModel):
    """POST /api/learning/complete body."""
    consumeHeart: bool = Field(..., description="Whether this attempt spends hearts")
    heartAmount: Optional[int] = Field(None, ge=1, le=10, description="Hearts to spend (default 1)")
    contentType: Optional[ContentType] = None
    contentId: Optional[str] = Field(None, max_length=255)

    def to_options(self) -> RecordCompletionOptions:
        return RecordCompletionOptions(
            consume_heart=self.consumeHeart,
            heart_amount=self.heartAmount or 1,
            content_type=self.contentType,
            content_id=self.contentId,
        )


class StreakOutcomeResponse(BaseModel):
    currentCount: int
    longestCount: int
    updated: bool
    isNewRecord: bool


class HeartsOutcomeResponse(BaseModel):
    consumed: int
    remaining: int
    lastRefill: datetime


class CompletionResponse(BaseModel):
    streak: StreakOutcomeResponse
    hearts: Optional[HeartsOutcomeResponse] = None
    completedDates: List[str] = Field(default_factory=list, description="Completed days (YYYY-MM-DD), newest first")

    @classmethod
    def from_result(cls, result: CompletionResult) -> "CompletionResponse":
        hearts = None
        if result.hearts is not None:
            hearts = HeartsOutcomeResponse(
                consumed=result.hearts.consumed,
                remaining=result.hearts.remaining,
                lastRefill=result.hearts.last_refill,
            )
        return cls(
            streak=StreakOutcomeResponse(
                currentCount=result.streak.current_count,
                longestCount=result.streak.longest_count,
                updated=result.streak.updated,
                isNewRecord=result.streak.is_new_record,
            ),
            hearts=hearts,
            completedDates=[day.isoformat() for day in result.completed_dates],
        )
