"""
Pytest configuration for gamification-service tests

Each test gets its own SQLite file (aiosqlite) so that separate sessions
see committed data and rollbacks are real.
"""
import pytest
import pytest_asyncio
from datetime import datetime, timezone

from gamification_service.core.clock import FrozenClock
from gamification_service.core.db import build_engine, build_session_factory, init_db
from gamification_service.logic.streak_service import StreakService
from gamification_service.services.completion_day_repository import CompletionDayRepository
from gamification_service.services.hearts_repository import HeartsRepository
from gamification_service.services.hearts_service import HeartsService
from gamification_service.services.learning_service import LearningService
from gamification_service.services.streak_repository import StreakRepository

# 2025-06-10 12:00 JST
NOW = datetime(2025, 6, 10, 3, 0, tzinfo=timezone.utc)


@pytest.fixture
def clock():
    return FrozenClock(NOW)


@pytest_asyncio.fixture
async def engine(tmp_path):
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'gamification.db'}")
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return build_session_factory(engine)


@pytest.fixture
def hearts_repository(session_factory):
    return HeartsRepository(session_factory)


@pytest.fixture
def streak_repository(session_factory):
    return StreakRepository(session_factory)


@pytest.fixture
def completion_day_repository(session_factory):
    return CompletionDayRepository(session_factory)


@pytest.fixture
def hearts_service(hearts_repository, clock):
    return HeartsService(hearts_repository, clock=clock)


@pytest.fixture
def streak_service(streak_repository, completion_day_repository, clock):
    return StreakService(streak_repository, clock=clock, completion_days=completion_day_repository)


@pytest.fixture
def learning_service(hearts_service, streak_service):
    return LearningService(hearts_service, streak_service)
