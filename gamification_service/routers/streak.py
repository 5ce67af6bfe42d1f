"""
Streak API endpoints

Streak updates only happen through content completion; there is no
standalone record endpoint.
"""
from fastapi import APIRouter, Depends

from gamification_service.dependencies import get_current_user_id, get_streak_service
from gamification_service.logic.streak_service import StreakService
from gamification_service.schemas import Envelope
from gamification_service.schemas_streak import StreakResponse

router = APIRouter(prefix="/streak", tags=["Streak"])


@router.get("", response_model=Envelope[StreakResponse])
async def get_streak(
    user_id: str = Depends(get_current_user_id),
    service: StreakService = Depends(get_streak_service),
):
    """Get current streak status (read-only)."""
    snapshot = await service.get_streak(user_id)
    return Envelope(data=StreakResponse.from_snapshot(snapshot))
