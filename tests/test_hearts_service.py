"""
Tests para Hearts Service

Valida:
- Recuperación por tiempo (floor, tope en max)
- Consumo con validaciones
- Reinicio del ancla de recuperación
- Creación perezosa del estado por defecto
"""
import asyncio
import pytest
from datetime import timedelta

from gamification_service.core.errors import AppError, InsufficientResource
from gamification_service.schemas_hearts import HeartsState
from gamification_service.services.hearts_service import calculate_current_hearts

from tests.conftest import NOW


def state(count, max_count=10, ago=timedelta(0)):
    return HeartsState(count=count, max_count=max_count, last_refill=NOW - ago)


class TestCalculateCurrentHearts:
    """Cálculo de corazones efectivos."""

    def test_no_time_elapsed(self):
        assert calculate_current_hearts(state(3), NOW) == 3

    def test_partial_interval_grants_nothing(self):
        assert calculate_current_hearts(state(3, ago=timedelta(minutes=59, seconds=59)), NOW) == 3

    def test_whole_intervals_recover(self):
        assert calculate_current_hearts(state(3, ago=timedelta(hours=2, minutes=30)), NOW) == 5

    def test_capped_at_max(self):
        assert calculate_current_hearts(state(8, ago=timedelta(hours=48)), NOW) == 10

    def test_future_anchor_grants_nothing(self):
        assert calculate_current_hearts(state(4, ago=-timedelta(hours=3)), NOW) == 4

    def test_non_decreasing_over_time(self):
        hearts = state(0)
        counts = [calculate_current_hearts(hearts, NOW + timedelta(minutes=m)) for m in range(0, 15 * 60, 7)]
        assert counts == sorted(counts)
        assert counts[-1] == 10


class TestCalculateStatus:

    def test_status_when_recovering(self, hearts_service):
        status = hearts_service.calculate_status(state(3, ago=timedelta(minutes=90)), NOW)

        assert status.effective_count == 4
        assert status.next_recovery_at == NOW - timedelta(minutes=90) + timedelta(hours=2)
        assert status.full_recovery_at == status.next_recovery_at + timedelta(hours=5)

    def test_status_when_full(self, hearts_service):
        status = hearts_service.calculate_status(state(10, ago=timedelta(hours=5)), NOW)

        assert status.effective_count == 10
        assert status.next_recovery_at is None
        assert status.full_recovery_at is None


class TestGetHearts:

    @pytest.mark.asyncio
    async def test_creates_default_on_first_read(self, hearts_service, hearts_repository):
        hearts = await hearts_service.get_hearts("user-1")

        assert hearts.count == 10
        assert hearts.max_count == 10
        assert hearts.last_refill == NOW

        stored = await hearts_repository.find_by_user_id("user-1")
        assert stored == hearts

    @pytest.mark.asyncio
    async def test_does_not_apply_recovery_at_rest(self, hearts_service, hearts_repository):
        await hearts_repository.upsert("user-1", state(2, ago=timedelta(hours=3)))

        hearts = await hearts_service.get_hearts("user-1")

        assert hearts.count == 2
        assert hearts.last_refill == NOW - timedelta(hours=3)


class TestConsumeHearts:

    @pytest.mark.asyncio
    async def test_consume_with_recovery_resets_anchor(self, hearts_service, hearts_repository, clock):
        await hearts_repository.upsert("user-1", state(3, ago=timedelta(hours=2)))

        result = await hearts_service.consume_hearts("user-1", 4)

        assert result.consumed == 4
        assert result.remaining == 1
        assert result.last_refill == clock.now()
        assert await hearts_repository.find_by_user_id("user-1") == state(1)

    @pytest.mark.asyncio
    async def test_anchor_unchanged_without_recovery(self, hearts_service, hearts_repository):
        anchor_ago = timedelta(minutes=40)
        await hearts_repository.upsert("user-1", state(5, ago=anchor_ago))

        result = await hearts_service.consume_hearts("user-1", 1)

        assert result.remaining == 4
        assert result.last_refill == NOW - anchor_ago
        stored = await hearts_repository.find_by_user_id("user-1")
        assert stored.last_refill == NOW - anchor_ago

    @pytest.mark.asyncio
    async def test_full_balance_with_stale_anchor_restarts_clock(self, hearts_service, hearts_repository):
        await hearts_repository.upsert("user-1", state(10, ago=timedelta(days=3)))

        result = await hearts_service.consume_hearts("user-1", 1)

        assert result.remaining == 9
        assert result.last_refill == NOW
        # la deuda de recuperación acumulada no se devuelve después
        stored = await hearts_repository.find_by_user_id("user-1")
        assert hearts_service.calculate_current_hearts(stored, NOW + timedelta(minutes=59)) == 9

    @pytest.mark.asyncio
    async def test_consume_exact_balance(self, hearts_service, hearts_repository):
        await hearts_repository.upsert("user-1", state(3))

        result = await hearts_service.consume_hearts("user-1", 3)

        assert result.remaining == 0

    @pytest.mark.asyncio
    async def test_insufficient_hearts(self, hearts_service, hearts_repository):
        await hearts_repository.upsert("user-1", state(1, ago=timedelta(minutes=30)))

        with pytest.raises(InsufficientResource) as exc_info:
            await hearts_service.consume_hearts("user-1", 2)

        assert exc_info.value.code == "NO_HEARTS_LEFT"
        assert exc_info.value.requested == 2
        assert exc_info.value.available == 1
        assert await hearts_repository.find_by_user_id("user-1") == state(1, ago=timedelta(minutes=30))

    @pytest.mark.asyncio
    async def test_zero_hearts_blocked(self, hearts_service, hearts_repository):
        await hearts_repository.upsert("user-1", state(0))

        with pytest.raises(InsufficientResource):
            await hearts_service.consume_hearts("user-1", 1)

    @pytest.mark.asyncio
    async def test_consume_for_new_user_starts_full(self, hearts_service, hearts_repository):
        result = await hearts_service.consume_hearts("new-user", 1)

        assert result.remaining == 9
        stored = await hearts_repository.find_by_user_id("new-user")
        assert stored.count == 9
        assert stored.max_count == 10

    @pytest.mark.asyncio
    @pytest.mark.parametrize("amount", [0, -1])
    async def test_invalid_amount(self, hearts_service, amount):
        with pytest.raises(AppError, match="Invalid input"):
            await hearts_service.consume_hearts("user-1", amount)

    @pytest.mark.asyncio
    async def test_consecutive_consumptions_each_deduct(self, hearts_service, hearts_repository):
        await hearts_repository.upsert("user-1", state(5))

        await hearts_service.consume_hearts("user-1", 1)
        result = await hearts_service.consume_hearts("user-1", 1)

        assert result.remaining == 3

    @pytest.mark.asyncio
    async def test_consume_inside_caller_transaction_rolls_back(self, hearts_service, hearts_repository):
        await hearts_repository.upsert("user-1", state(5))

        async def consume_then_fail(tx):
            await hearts_service.consume_hearts("user-1", 2, tx)
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError):
            await hearts_repository.run_in_transaction(consume_then_fail)

        assert (await hearts_repository.find_by_user_id("user-1")).count == 5

    @pytest.mark.asyncio
    async def test_consume_logs_balance_change(self, hearts_service, hearts_repository, caplog):
        import logging
        await hearts_repository.upsert("user-1", state(5))

        with caplog.at_level(logging.INFO):
            await hearts_service.consume_hearts("user-1", 1)

        assert "5 -> 4" in caplog.text

    @pytest.mark.asyncio
    async def test_concurrent_consumptions_never_overdraw(self, hearts_service, hearts_repository):
        await hearts_repository.upsert("user-1", state(2))

        results = await asyncio.gather(
            *[hearts_service.consume_hearts("user-1", 1) for _ in range(3)],
            return_exceptions=True,
        )

        assert sorted(r.remaining for r in results if not isinstance(r, Exception)) == [0, 1]
        assert sum(isinstance(r, InsufficientResource) for r in results) == 1
        assert (await hearts_repository.find_by_user_id("user-1")).count == 0
