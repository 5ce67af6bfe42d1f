"""
Hearts Router

- GET  /api/hearts
- POST /api/hearts/consume  (hearts + streak in one transaction)
"""
from fastapi import APIRouter, Depends

from gamification_service.dependencies import get_current_user_id, get_hearts_service, get_learning_service
from gamification_service.schemas import Envelope
from gamification_service.schemas_hearts import ConsumeHeartsRequest, HeartsResponse
from gamification_service.schemas_learning import CompletionResponse, RecordCompletionOptions
from gamification_service.services.hearts_service import HeartsService
from gamification_service.services.learning_service import LearningService

router = APIRouter(prefix="/hearts", tags=["Hearts"])


@router.get("", response_model=Envelope[HeartsResponse])
async def get_hearts(
    user_id: str = Depends(get_current_user_id),
    service: HeartsService = Depends(get_hearts_service),
):
    """Stored heart state plus the recovery view. Creates the default balance on first call."""
    hearts = await service.get_hearts(user_id)
    return Envelope(data=HeartsResponse.from_status(service.calculate_status(hearts)))


@router.post("/consume", response_model=Envelope[CompletionResponse])
async def consume_hearts(
    request: ConsumeHeartsRequest,
    user_id: str = Depends(get_current_user_id),
    service: LearningService = Depends(get_learning_service),
):
    """Consume hearts for a content attempt and record today's streak."""
    result = await service.record_completion(
        user_id,
        RecordCompletionOptions(
            consume_heart=True,
            heart_amount=request.amount,
            content_type=request.contentType,
            content_id=request.contentId,
        ),
    )
    return Envelope(data=CompletionResponse.from_result(result))
