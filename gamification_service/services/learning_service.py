"""
Learning Service - content completion

Composes heart consumption and the daily streak into one transaction per
completed lesson, tsumeshogi problem or any later content type.

Policy: the streak advances whenever the hearts phase succeeded or was
skipped, whatever the content type. A rejected heart consumption aborts the
whole completion, so it never counts as daily activity.
"""
from typing import Awaitable, Callable, Optional, TypeVar
import logging

from gamification_service.core.db import Transaction
from gamification_service.logic.streak_service import StreakService
from gamification_service.schemas_learning import CompletionResult, RecordCompletionOptions, StreakOutcome
from gamification_service.services.hearts_service import HeartsService

logger = logging.getLogger(__name__)

T = TypeVar("T")
TransactionRunner = Callable[[Callable[[Transaction], Awaitable[T]]], Awaitable[T]]


def is_new_record(updated: bool, current_count: int, longest_count: int) -> bool:
    """A freshly tied or broken personal best, excluding the first day."""
    return updated and current_count == longest_count and current_count > 1


class LearningService:
    """Stateless coordinator around one atomic unit of work."""

    def __init__(
        self,
        hearts_service: HeartsService,
        streak_service: StreakService,
        run_in_transaction: Optional[TransactionRunner] = None,
    ):
        self.hearts_service = hearts_service
        self.streak_service = streak_service
        self.run_in_transaction = run_in_transaction or hearts_service.repository.run_in_transaction

    async def record_completion(self, user_id: str, options: RecordCompletionOptions) -> CompletionResult:
        """
        Record a completed piece of content.

        1. Begin transaction
        2. Consume hearts (only if options.consume_heart)
        3. Record today's streak and mark today as a completed day
        4. Commit all writes, or roll back all of them on any failure

        Raises:
            InsufficientResource: not enough hearts; nothing is written
            SQLAlchemyError: store failure; nothing is written, retry as a fresh attempt
        """

        async def unit_of_work(tx: Transaction) -> CompletionResult:
            hearts_result = None
            if options.consume_heart:
                hearts_result = await self.hearts_service.consume_hearts(user_id, options.heart_amount, tx)

            streak_result = await self.streak_service.record_streak(user_id, tx)
            completed_dates = await self.streak_service.record_completed_day(user_id, tx)

            return CompletionResult(
                streak=StreakOutcome(
                    current_count=streak_result.current_count,
                    longest_count=streak_result.longest_count,
                    updated=streak_result.updated,
                    is_new_record=is_new_record(
                        streak_result.updated, streak_result.current_count, streak_result.longest_count
                    ),
                ),
                hearts=hearts_result,
                completed_dates=completed_dates,
            )

        result = await self.run_in_transaction(unit_of_work)

        logger.info(
            f"Completion recorded for user {user_id}: content={options.content_type}:{options.content_id}, "
            f"hearts={'-' if result.hearts is None else result.hearts.remaining}, "
            f"streak={result.streak.current_count} (updated={result.streak.updated}, "
            f"new_record={result.streak.is_new_record})"
        )
        return result
