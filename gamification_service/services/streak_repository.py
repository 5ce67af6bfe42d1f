"""Streak Repository - Data Access Layer"""
from typing import Optional
import logging

from sqlalchemy import select

from gamification_service.core.db import Transaction
from gamification_service.models import Streak
from gamification_service.schemas_streak import StreakState
from gamification_service.services.repository import SQLRepository

logger = logging.getLogger(__name__)


class StreakRepository(SQLRepository):
    """Repository para rachas diarias (tabla streaks)."""

    async def find_by_user_id(
        self,
        user_id: str,
        tx: Optional[Transaction] = None,
        for_update: bool = False,
    ) -> Optional[StreakState]:
        query = select(Streak).where(Streak.user_id == user_id)
        if for_update:
            query = query.with_for_update()

        async with self.session(tx) as session:
            result = await session.execute(query)
            row = result.scalar_one_or_none()

        if row is None:
            return None
        return StreakState(
            current_count=row.current_count,
            longest_count=row.longest_count,
            last_active_date=row.last_active_date,
        )

    async def upsert(
        self,
        user_id: str,
        state: StreakState,
        tx: Optional[Transaction] = None,
    ) -> StreakState:
        async with self.session(tx) as session:
            row = await session.get(Streak, user_id)
            if row is None:
                row = Streak(user_id=user_id)
                session.add(row)
            row.current_count = state.current_count
            row.longest_count = state.longest_count
            row.last_active_date = state.last_active_date
            await session.flush()

        logger.debug(
            f"Upserted streak for user {user_id}: current={state.current_count}, "
            f"longest={state.longest_count}, last_active={state.last_active_date}"
        )
        return state
