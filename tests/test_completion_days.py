"""
Tests for the completed-days calendar

Validates:
- One entry per calendar day
- Window of the most recent days, newest first
- Isolation between users
"""
import pytest
from datetime import date, timedelta

TODAY = date(2025, 6, 10)


class TestCompletionDayRepository:

    @pytest.mark.asyncio
    async def test_same_day_is_stored_once(self, completion_day_repository):
        assert await completion_day_repository.add("user-1", TODAY) is True
        assert await completion_day_repository.add("user-1", TODAY) is False

        assert await completion_day_repository.find_completed_dates("user-1", 14, TODAY) == [TODAY]

    @pytest.mark.asyncio
    async def test_window_ends_today_newest_first(self, completion_day_repository):
        for offset in [20, 14, 13, 5, 0]:
            await completion_day_repository.add("user-1", TODAY - timedelta(days=offset))

        dates = await completion_day_repository.find_completed_dates("user-1", 14, TODAY)

        assert dates == [TODAY, TODAY - timedelta(days=5), TODAY - timedelta(days=13)]

    @pytest.mark.asyncio
    async def test_future_days_excluded(self, completion_day_repository):
        await completion_day_repository.add("user-1", TODAY + timedelta(days=1))

        assert await completion_day_repository.find_completed_dates("user-1", 14, TODAY) == []

    @pytest.mark.asyncio
    async def test_users_are_isolated(self, completion_day_repository):
        await completion_day_repository.add("user-1", TODAY)

        assert await completion_day_repository.find_completed_dates("user-2", 14, TODAY) == []


class TestStreakCalendar:

    @pytest.mark.asyncio
    async def test_record_completed_day_deduplicates(self, streak_service):
        first = await streak_service.record_completed_day("user-1")
        second = await streak_service.record_completed_day("user-1")

        assert first == second == [TODAY]

    @pytest.mark.asyncio
    async def test_get_streak_lists_recent_days(self, streak_service, clock):
        # active on June 1, 9 and 10; on June 22 the window starts at June 9
        clock.advance(timedelta(days=-9))
        await streak_service.record_completed_day("user-1")
        clock.advance(timedelta(days=8))
        await streak_service.record_completed_day("user-1")
        clock.advance(timedelta(days=1))
        await streak_service.record_completed_day("user-1")
        clock.advance(timedelta(days=12))

        snapshot = await streak_service.get_streak("user-1")

        assert snapshot.completed_dates == [date(2025, 6, 10), date(2025, 6, 9)]

    @pytest.mark.asyncio
    async def test_get_streak_without_activity(self, streak_service):
        assert (await streak_service.get_streak("user-1")).completed_dates == []
