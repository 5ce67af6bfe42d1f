"""
Learning Router

- POST /api/learning/complete
"""
from fastapi import APIRouter, Depends

from gamification_service.dependencies import get_current_user_id, get_learning_service
from gamification_service.schemas import Envelope
from gamification_service.schemas_learning import CompleteLearningRequest, CompletionResponse
from gamification_service.services.learning_service import LearningService

router = APIRouter(prefix="/learning", tags=["Learning"])


@router.post("/complete", response_model=Envelope[CompletionResponse])
async def complete_learning(
    request: CompleteLearningRequest,
    user_id: str = Depends(get_current_user_id),
    service: LearningService = Depends(get_learning_service),
):
    """
    Record a completed lesson or problem.

    With consumeHeart=false (free content) only the streak is recorded and
    data.hearts is null.
    """
    result = await service.record_completion(user_id, request.to_options())
    return Envelope(data=CompletionResponse.from_result(result))
