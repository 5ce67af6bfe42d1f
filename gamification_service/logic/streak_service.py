"""
Streak Service - Business logic for the daily streak

Handles:
- Day evaluation at the configured offset (server: JST)
- Once-per-day increment, reset after a gap, longest-streak bookkeeping
- Read-only streak status
"""
from datetime import date
from typing import List, Optional, Tuple
import logging

from gamification_service.core.clock import Clock
from gamification_service.core.db import Transaction
from gamification_service.schemas_streak import RecordStreakResult, StreakSnapshot, StreakState
from gamification_service.services.completion_day_repository import CompletionDayRepository
from gamification_service.services.streak_repository import StreakRepository

logger = logging.getLogger(__name__)

# Window of completed days returned for the weekly calendar
COMPLETED_DATES_DAYS = 14


def calculate_streak_state(
    current_count: int,
    longest_count: int,
    last_active_date: Optional[date],
    today: date,
    yesterday: date,
) -> Tuple[int, int, bool]:
    """
    Calculate the streak after an activity today.

    Args:
        current_count: Stored consecutive days
        longest_count: Stored best streak
        last_active_date: Last recorded day, None if never active
        today: Today's date at the configured offset
        yesterday: Yesterday's date at the configured offset

    Returns:
        Tuple of (new_current, new_longest, updated)

    Logic:
        - Already active today: unchanged, updated=False
        - Active yesterday: current + 1
        - Anything else (first activity, gap, future date): restart at 1

    Examples:
        >>> calculate_streak_state(6, 6, date(2025, 1, 1), date(2025, 1, 2), date(2025, 1, 1))
        (7, 7, True)
        >>> calculate_streak_state(3, 9, date(2024, 12, 20), date(2025, 1, 2), date(2025, 1, 1))
        (1, 9, True)
    """
    if last_active_date == today:
        return current_count, longest_count, False

    if last_active_date == yesterday:
        new_count = current_count + 1
    else:
        new_count = 1

    return new_count, max(longest_count, new_count), True


class StreakService:
    """One-per-day streak tracker."""

    def __init__(
        self,
        repository: StreakRepository,
        clock: Optional[Clock] = None,
        completion_days: Optional[CompletionDayRepository] = None,
    ):
        self.repository = repository
        self.clock = clock or Clock()
        self.completion_days = completion_days or CompletionDayRepository(repository.session_factory)

    async def get_streak(self, user_id: str) -> StreakSnapshot:
        """Current streak status (no DB writes, defaults when the user has no row)."""
        today = self.clock.today()
        completed_dates = await self.completion_days.find_completed_dates(user_id, COMPLETED_DATES_DAYS, today)

        streak = await self.repository.find_by_user_id(user_id)
        if streak is None:
            return StreakSnapshot(completed_dates=completed_dates)

        return StreakSnapshot(
            current_count=streak.current_count,
            longest_count=streak.longest_count,
            last_active_date=streak.last_active_date,
            updated_today=streak.last_active_date == today,
            completed_dates=completed_dates,
        )

    async def record_streak(self, user_id: str, tx: Optional[Transaction] = None) -> RecordStreakResult:
        """
        Record today's activity. Idempotent within a calendar day.

        Returns:
            RecordStreakResult with updated=False when today was already recorded
        """
        if tx is None:
            return await self.repository.run_in_transaction(lambda session: self.record_streak(user_id, session))

        today = self.clock.today()
        yesterday = self.clock.yesterday()

        stored = await self.repository.find_by_user_id(user_id, tx, for_update=True) or StreakState()

        new_count, new_longest, updated = calculate_streak_state(
            current_count=stored.current_count,
            longest_count=stored.longest_count,
            last_active_date=stored.last_active_date,
            today=today,
            yesterday=yesterday,
        )

        if not updated:
            logger.info(f"Streak already recorded today ({today}) for user {user_id}: {stored.current_count}")
            return RecordStreakResult(current_count=stored.current_count, longest_count=stored.longest_count, updated=False)

        await self.repository.upsert(
            user_id,
            StreakState(current_count=new_count, longest_count=new_longest, last_active_date=today),
            tx,
        )

        if stored.last_active_date == yesterday:
            logger.info(f"Streak continued for user {user_id}: {stored.current_count} -> {new_count}")
        else:
            logger.info(
                f"Streak restarted for user {user_id}: last active {stored.last_active_date}, today {today}"
            )
        return RecordStreakResult(current_count=new_count, longest_count=new_longest, updated=True)

    async def record_completed_day(self, user_id: str, tx: Optional[Transaction] = None) -> List[date]:
        """
        Mark today as a completed day and return the recent completed days.

        Repeated completions on the same day keep a single entry.
        """
        if tx is None:
            return await self.repository.run_in_transaction(lambda session: self.record_completed_day(user_id, session))

        today = self.clock.today()
        await self.completion_days.add(user_id, today, tx)
        return await self.completion_days.find_completed_dates(user_id, COMPLETED_DATES_DAYS, today, tx)
