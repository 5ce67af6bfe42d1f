"""Hearts Service - Business Logic Layer"""
from datetime import datetime, timedelta
from typing import Optional
import logging

from gamification_service.core.clock import Clock
from gamification_service.core.db import Transaction
from gamification_service.core.errors import AppError, InsufficientResource
from gamification_service.schemas_hearts import ConsumeResult, HeartsState, HeartsStatus
from gamification_service.services.hearts_repository import HeartsRepository

logger = logging.getLogger(__name__)

RECOVERY_INTERVAL = timedelta(hours=1)
DEFAULT_HEARTS = 10
DEFAULT_MAX_HEARTS = 10


def elapsed_intervals(last_refill: datetime, now: datetime, interval: timedelta = RECOVERY_INTERVAL) -> int:
    """Whole recovery intervals since last_refill; clock skew never yields a negative."""
    return max(0, (now - last_refill) // interval)


def calculate_current_hearts(state: HeartsState, now: datetime, interval: timedelta = RECOVERY_INTERVAL) -> int:
    """
    Effective heart count at ``now``.

    min(count + floor((now - last_refill) / interval), max_count)
    Partial intervals never grant a heart.
    """
    recovered = elapsed_intervals(state.last_refill, now, interval)
    return min(state.count + recovered, state.max_count)


class HeartsService:
    """Recovery math and the consume path for one user's heart balance."""

    def __init__(
        self,
        repository: HeartsRepository,
        clock: Optional[Clock] = None,
        default_count: int = DEFAULT_HEARTS,
        max_count: int = DEFAULT_MAX_HEARTS,
        recovery_interval: timedelta = RECOVERY_INTERVAL,
    ):
        self.repository = repository
        self.clock = clock or Clock()
        self.default_count = default_count
        self.max_count = max_count
        self.recovery_interval = recovery_interval

    def default_state(self, now: datetime) -> HeartsState:
        return HeartsState(count=self.default_count, max_count=self.max_count, last_refill=now)

    def calculate_current_hearts(self, state: HeartsState, now: Optional[datetime] = None) -> int:
        return calculate_current_hearts(state, now or self.clock.now(), self.recovery_interval)

    def calculate_status(self, state: HeartsState, now: Optional[datetime] = None) -> HeartsStatus:
        """Stored state plus effective count and next/full recovery times."""
        now = now or self.clock.now()
        intervals = elapsed_intervals(state.last_refill, now, self.recovery_interval)
        effective = min(state.count + intervals, state.max_count)

        next_recovery_at = None
        full_recovery_at = None
        if effective < state.max_count:
            next_recovery_at = state.last_refill + self.recovery_interval * (intervals + 1)
            missing = state.max_count - effective
            full_recovery_at = next_recovery_at + self.recovery_interval * (missing - 1)

        return HeartsStatus(
            count=state.count,
            max_count=state.max_count,
            last_refill=state.last_refill,
            effective_count=effective,
            next_recovery_at=next_recovery_at,
            full_recovery_at=full_recovery_at,
        )

    async def get_hearts(self, user_id: str, tx: Optional[Transaction] = None) -> HeartsState:
        """
        Stored heart state; creates the default full balance on first read.

        Count is returned as stored. Recovery is not written back here.
        """
        if tx is None:
            return await self.repository.run_in_transaction(lambda session: self.get_hearts(user_id, session))

        hearts = await self.repository.find_by_user_id(user_id, tx)
        if hearts is None:
            hearts = await self.repository.upsert(user_id, self.default_state(self.clock.now()), tx)
            logger.info(f"Created default hearts for user {user_id}: {hearts.count}/{hearts.max_count}")
        return hearts

    async def consume_hearts(self, user_id: str, amount: int, tx: Optional[Transaction] = None) -> ConsumeResult:
        """
        Recompute the effective balance, debit ``amount`` and persist.

        The recovery anchor moves to now whenever a whole interval elapsed since
        the previous anchor; otherwise it is left untouched.

        Raises:
            AppError(INVALID_INPUT): amount < 1
            InsufficientResource: amount exceeds the effective balance
        """
        if amount < 1:
            raise AppError("INVALID_INPUT", {"amount": "must be an integer >= 1"})

        if tx is None:
            return await self.repository.run_in_transaction(
                lambda session: self.consume_hearts(user_id, amount, session)
            )

        now = self.clock.now()
        stored = await self.repository.find_by_user_id(user_id, tx, for_update=True)
        if stored is None:
            stored = self.default_state(now)

        intervals = elapsed_intervals(stored.last_refill, now, self.recovery_interval)
        effective = min(stored.count + intervals, stored.max_count)

        if effective < amount:
            logger.warning(
                f"Rejected heart consumption for user {user_id}: requested={amount}, available={effective}"
            )
            raise InsufficientResource(requested=amount, available=effective)

        remaining = effective - amount
        # Also resets when already full: time banked at the cap must not refill the heart just spent
        last_refill = now if intervals > 0 else stored.last_refill

        await self.repository.upsert(
            user_id,
            HeartsState(count=remaining, max_count=stored.max_count, last_refill=last_refill),
            tx,
        )

        logger.info(
            f"Hearts consumed for user {user_id}: {effective} -> {remaining} "
            f"(stored={stored.count}, recovered={effective - min(stored.count, stored.max_count)}, "
            f"anchor_reset={intervals > 0})"
        )
        return ConsumeResult(consumed=amount, remaining=remaining, last_refill=last_refill)
