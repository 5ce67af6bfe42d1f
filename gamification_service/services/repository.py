"""Shared plumbing for SQLAlchemy-backed repositories."""
from typing import Awaitable, Callable, Optional, TypeVar

from sqlalchemy.ext.asyncio import async_sessionmaker

from gamification_service.core.db import Transaction, get_session_factory, run_in_transaction, session_scope

T = TypeVar("T")


class SQLRepository:
    """
    Base repository.

    Every method takes an optional ``tx``. With a tx, work joins the caller's
    transaction; without one, the call runs in its own short transaction.
    """

    def __init__(self, session_factory: Optional[async_sessionmaker] = None):
        self.session_factory = session_factory or get_session_factory()

    def session(self, tx: Optional[Transaction] = None):
        return session_scope(self.session_factory, tx)

    async def run_in_transaction(self, fn: Callable[[Transaction], Awaitable[T]]) -> T:
        return await run_in_transaction(fn, self.session_factory)
