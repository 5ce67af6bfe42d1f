"""Hearts Repository - Data Access Layer"""
from typing import Optional
import logging

from sqlalchemy import select

from gamification_service.core.db import Transaction, as_utc
from gamification_service.models import Hearts
from gamification_service.schemas_hearts import HeartsState
from gamification_service.services.repository import SQLRepository

logger = logging.getLogger(__name__)


class HeartsRepository(SQLRepository):
    """Repository para el balance de corazones (tabla hearts)."""

    async def find_by_user_id(
        self,
        user_id: str,
        tx: Optional[Transaction] = None,
        for_update: bool = False,
    ) -> Optional[HeartsState]:
        """
        Returns the stored balance, or None when the user has no row yet.

        With ``for_update`` the row stays locked until the transaction ends.
        """
        query = select(Hearts).where(Hearts.user_id == user_id)
        if for_update:
            query = query.with_for_update()

        async with self.session(tx) as session:
            result = await session.execute(query)
            row = result.scalar_one_or_none()

        if row is None:
            return None
        return HeartsState(
            count=row.count,
            max_count=row.max_count,
            last_refill=as_utc(row.last_refill),
        )

    async def upsert(
        self,
        user_id: str,
        state: HeartsState,
        tx: Optional[Transaction] = None,
    ) -> HeartsState:
        async with self.session(tx) as session:
            row = await session.get(Hearts, user_id)
            if row is None:
                row = Hearts(user_id=user_id)
                session.add(row)
            row.count = state.count
            row.max_count = state.max_count
            row.last_refill = state.last_refill
            await session.flush()

        logger.debug(
            f"Upserted hearts for user {user_id}: count={state.count}, "
            f"max={state.max_count}, last_refill={state.last_refill.isoformat()}"
        )
        return state
