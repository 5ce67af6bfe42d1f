"""
Schemas for the hearts system.

Domain models use snake_case; API payloads use camelCase like the app client.
"""
from datetime import datetime
from typing import Literal, Optional
from pydantic import BaseModel, Field, model_validator

ContentType = Literal["lesson", "tsumeshogi"]


class HeartsState(BaseModel):
    """Stored heart balance. Recovery is applied on demand, never persisted at rest."""
    count: int = Field(..., ge=0, description="Stored heart count (before recovery)")
    max_count: int = Field(..., gt=0, description="Heart cap")
    last_refill: datetime = Field(..., description="Recovery anchor (UTC)")

    @model_validator(mode="after")
    def check_count_within_max(self) -> "HeartsState":
        if self.count > self.max_count:
            raise ValueError(f"count {self.count} exceeds max_count {self.max_count}")
        return self


class HeartsStatus(HeartsState):
    """Stored state plus the derived recovery view."""
    effective_count: int = Field(..., ge=0, description="Count after applying recovery")
    next_recovery_at: Optional[datetime] = Field(None, description="When the next heart recovers (None when full)")
    full_recovery_at: Optional[datetime] = Field(None, description="When the balance reaches max (None when full)")


class ConsumeResult(BaseModel):
    """Outcome of one heart consumption."""
    consumed: int = Field(..., ge=1)
    remaining: int = Field(..., ge=0)
    last_refill: datetime


# ==================== API ====================

class ConsumeHeartsRequest(BaseModel):
    """POST /api/hearts/consume body."""
    amount: int = Field(..., ge=1, le=10, description="Hearts to consume")
    contentType: Optional[ContentType] = Field(None, description="Content that triggered the consumption")
    contentId: Optional[str] = Field(None, max_length=255)

    class Config:
        json_schema_extra = {
            "example": {
                "amount": 1,
                "contentType": "tsumeshogi",
                "contentId": "tsume-001"
            }
        }


class HeartsResponse(BaseModel):
    """GET /api/hearts data."""
    count: int = Field(..., ge=0)
    maxCount: int = Field(..., gt=0)
    lastRefill: datetime
    effectiveCount: int = Field(..., ge=0)
    nextRecoveryAt: Optional[datetime] = None
    fullRecoveryAt: Optional[datetime] = None

    @classmethod
    def from_status(cls, status: HeartsStatus) -> "HeartsResponse":
        return cls(
            count=status.count,
            maxCount=status.max_count,
            lastRefill=status.last_refill,
            effectiveCount=status.effective_count,
            nextRecoveryAt=status.next_recovery_at,
            fullRecoveryAt=status.full_recovery_at,
        )
