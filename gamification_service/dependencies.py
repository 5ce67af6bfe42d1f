"""
FastAPI dependencies

Authentication is verified upstream (API gateway); the verified user id
arrives in the X-User-ID header.
"""
from typing import Optional
from datetime import timedelta

from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import async_sessionmaker

from gamification_service.core.clock import Clock
from gamification_service.core.config import get_settings
from gamification_service.core.db import get_session_factory
from gamification_service.core.errors import AppError
from gamification_service.logic.streak_service import StreakService
from gamification_service.services.hearts_repository import HeartsRepository
from gamification_service.services.hearts_service import HeartsService
from gamification_service.services.learning_service import LearningService
from gamification_service.services.streak_repository import StreakRepository


async def get_current_user_id(x_user_id: Optional[str] = Header(None, alias="X-User-ID")) -> str:
    if not x_user_id:
        raise AppError("UNAUTHORIZED")
    return x_user_id


def get_clock() -> Clock:
    return Clock(offset_hours=get_settings().DAY_BOUNDARY_OFFSET_HOURS)


def get_db_session_factory() -> async_sessionmaker:
    return get_session_factory()


def get_hearts_service(
    clock: Clock = Depends(get_clock),
    session_factory: async_sessionmaker = Depends(get_db_session_factory),
) -> HeartsService:
    settings = get_settings()
    return HeartsService(
        HeartsRepository(session_factory),
        clock=clock,
        default_count=settings.HEARTS_DEFAULT_COUNT,
        max_count=settings.HEARTS_MAX_COUNT,
        recovery_interval=timedelta(minutes=settings.HEARTS_RECOVERY_MINUTES),
    )


def get_streak_service(
    clock: Clock = Depends(get_clock),
    session_factory: async_sessionmaker = Depends(get_db_session_factory),
) -> StreakService:
    return StreakService(StreakRepository(session_factory), clock=clock)


def get_learning_service(
    hearts_service: HeartsService = Depends(get_hearts_service),
    streak_service: StreakService = Depends(get_streak_service),
) -> LearningService:
    return LearningService(hearts_service, streak_service)
