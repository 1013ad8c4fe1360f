"""Fee collection for paid ledger operations.

A paid operation runs inside ``charge(required, provided)``::

    async with fee_collector.charge(price, payment):
        ledger.issue(...)

The payment is checked before the body runs.  If the body raises, the
collector ends up with nothing, so a rejected issue or renewal never keeps
the caller's money.  The Redis backend reserves the payment before the
body and refunds it on failure: an unreachable Redis fails the operation
before the ledger changes, never after.

Exact payment is required: overpayment is refused outright.

Same Protocol + InMemory + Redis layout as the other shared-state
services; the Redis backend keeps one balance for all API instances.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from typing import Protocol, runtime_checkable

from membership.core.errors import InsufficientBalance, InsufficientFee, InvalidValue
from membership.core.metrics import FEE_REFUND_FAILURES, FEES_COLLECTED
from membership.db.redis import redis_pool

logger = logging.getLogger(__name__)


def verify_fee(required: int, provided: int) -> None:
    if provided != required:
        logger.warning("Fee rejected: required=%d provided=%d", required, provided)
        raise InsufficientFee(required, provided)


@runtime_checkable
class FeeCollector(Protocol):
    def charge(
        self, required: int, provided: int
    ) -> AbstractAsyncContextManager[None]: ...

    async def balance(self) -> int: ...

    async def withdraw(self, amount: int | None = None) -> int:
        """Remove ``amount`` (everything when None) from the balance."""
        ...


class InMemoryFeeCollector:
    """Per-process balance for tests and local runs."""

    def __init__(self) -> None:
        self._balance = 0

    @asynccontextmanager
    async def charge(self, required: int, provided: int) -> AsyncIterator[None]:
        verify_fee(required, provided)
        yield
        self._balance += provided
        FEES_COLLECTED.inc(provided)

    async def balance(self) -> int:
        return self._balance

    async def withdraw(self, amount: int | None = None) -> int:
        if amount is None:
            amount = self._balance
        if amount < 0:
            raise InvalidValue("amount must be >= 0")
        if amount > self._balance:
            raise InsufficientBalance(amount, self._balance)
        self._balance -= amount
        return amount


class RedisFeeCollector:
    """Balance stored under one Redis key, shared by every instance."""

    _KEY = "fees:balance"

    # Check-and-decrement must be atomic or two concurrent withdrawals
    # could both pass the balance check.
    # KEYS[1] = balance key, ARGV[1] = amount (-1 means everything)
    # Returns: {ok (0/1), amount withdrawn or balance available}
    _WITHDRAW_LUA = """
    local balance = tonumber(redis.call('GET', KEYS[1]) or '0')
    local amount = tonumber(ARGV[1])
    if amount < 0 then
        amount = balance
    end
    if amount > balance then
        return {0, balance}
    end
    redis.call('DECRBY', KEYS[1], amount)
    return {1, amount}
    """

    def __init__(self, redis_client) -> None:
        self._redis = redis_client
        self._script = None

    async def _get_script(self):
        if self._script is None:
            self._script = self._redis.register_script(self._WITHDRAW_LUA)
        return self._script

    @asynccontextmanager
    async def charge(self, required: int, provided: int) -> AsyncIterator[None]:
        verify_fee(required, provided)
        await self._redis.incrby(self._KEY, provided)
        try:
            yield
        except BaseException:
            await self._refund(provided)
            raise
        FEES_COLLECTED.inc(provided)

    async def _refund(self, amount: int) -> None:
        # A failed refund leaves the balance over by `amount`.
        try:
            await self._redis.decrby(self._KEY, amount)
        except Exception:
            FEE_REFUND_FAILURES.inc()
            logger.exception("Failed to refund reserved fee amount=%d", amount)

    async def balance(self) -> int:
        value = await self._redis.get(self._KEY)
        return int(value) if value is not None else 0

    async def withdraw(self, amount: int | None = None) -> int:
        if amount is not None and amount < 0:
            raise InvalidValue("amount must be >= 0")
        script = await self._get_script()
        ok, value = await script(
            keys=[self._KEY],
            args=[-1 if amount is None else amount],
        )
        if not ok:
            raise InsufficientBalance(amount or 0, int(value))
        return int(value)


# ---------------------------------------------------------------------------
# Module-level singleton
# ---------------------------------------------------------------------------

if redis_pool is not None:
    fee_collector: FeeCollector = RedisFeeCollector(redis_pool)
else:
    fee_collector = InMemoryFeeCollector()
