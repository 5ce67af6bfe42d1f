"""Completion Day Repository - Data Access Layer"""
from datetime import date, timedelta
from typing import List, Optional
import logging

from sqlalchemy import select

from gamification_service.core.db import Transaction
from gamification_service.models import CompletionDay
from gamification_service.services.repository import SQLRepository

logger = logging.getLogger(__name__)


class CompletionDayRepository(SQLRepository):
    """Repository para los días con actividad (tabla completion_days)."""

    async def add(self, user_id: str, day: date, tx: Optional[Transaction] = None) -> bool:
        """Marks ``day`` as completed. Returns False when it was already marked."""
        async with self.session(tx) as session:
            row = await session.get(CompletionDay, (user_id, day))
            if row is not None:
                return False
            session.add(CompletionDay(user_id=user_id, completed_date=day))
            await session.flush()

        logger.debug(f"Marked {day} as completed for user {user_id}")
        return True

    async def find_completed_dates(
        self,
        user_id: str,
        days: int,
        today: date,
        tx: Optional[Transaction] = None,
    ) -> List[date]:
        """
        Distinct completed days in the ``days``-long window ending at ``today``,
        newest first.
        """
        since = today - timedelta(days=days - 1)
        query = (
            select(CompletionDay.completed_date)
            .where(
                CompletionDay.user_id == user_id,
                CompletionDay.completed_date >= since,
                CompletionDay.completed_date <= today,
            )
            .order_by(CompletionDay.completed_date.desc())
        )

        async with self.session(tx) as session:
            result = await session.execute(query)
            return list(result.scalars().all())
