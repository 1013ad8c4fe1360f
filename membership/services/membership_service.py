"""Membership operations as callers see them.

Composes the independent collaborators by delegation:

    caller -> AccessGate -> FeeCollector -> MembershipLedger -> EventSink

Every mutating operation runs under one asyncio.Lock, so the
check-then-write sequence inside the ledger never interleaves with
another operation.  The clock is read once per operation, inside the
lock.  Events are published after the ledger commits and before the
lock is released, which keeps the event order equal to the commit order.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass

from membership.core.config import SETTINGS
from membership.core.errors import LedgerError
from membership.core.metrics import EVENTS_DROPPED, MEMBERSHIP_OPERATIONS
from membership.models.credential import NO_CREDENTIAL
from membership.models.events import (
    CredentialIssued,
    CredentialRenewed,
    CredentialRevoked,
    DurationChanged,
    FundsWithdrawn,
    LedgerEvent,
    PauseChanged,
    PriceChanged,
)
from membership.models.principal import Principal
from membership.services.access_gate import AccessGate
from membership.services.clock import Clock, SystemClock
from membership.services.event_sink import EventSink, event_sink
from membership.services.fee_collector import FeeCollector, fee_collector
from membership.services.ledger import MembershipLedger
from membership.services.terms import MembershipTerms, Terms

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class MembershipStatus:
    holder: str
    credential_id: int
    expires_at: int
    valid: bool

    @property
    def enrolled(self) -> bool:
        return self.credential_id != NO_CREDENTIAL


@contextmanager
def _track(operation: str) -> Iterator[None]:
    try:
        yield
    except LedgerError as e:
        MEMBERSHIP_OPERATIONS.labels(operation=operation, result=e.code).inc()
        raise
    MEMBERSHIP_OPERATIONS.labels(operation=operation, result="ok").inc()


class MembershipService:
    def __init__(
        self,
        *,
        ledger: MembershipLedger,
        fees: FeeCollector,
        gate: AccessGate,
        terms: MembershipTerms,
        events: EventSink,
        clock: Clock,
    ) -> None:
        self.ledger = ledger
        self.fees = fees
        self.gate = gate
        self.terms = terms
        self.events = events
        self.clock = clock
        self._lock = asyncio.Lock()

    # ------------------------------------------------------------------
    # Holder operations
    # ------------------------------------------------------------------

    async def issue(self, caller: Principal, payment: int) -> CredentialIssued:
        with _track("issue"):
            async with self._lock:
                self.gate.require_not_paused()
                now = self.clock.now()
                async with self.fees.charge(self.terms.price, payment):
                    event = self.ledger.issue(
                        caller.user_id, self.terms.duration, now
                    )
                await self._publish(event)
        return event

    async def renew(self, caller: Principal, payment: int) -> CredentialRenewed:
        with _track("renew"):
            async with self._lock:
                self.gate.require_not_paused()
                now = self.clock.now()
                async with self.fees.charge(self.terms.price, payment):
                    event = self.ledger.renew(
                        caller.user_id, self.terms.duration, now
                    )
                await self._publish(event)
        return event

    def is_valid(self, holder: str) -> bool:
        return self.ledger.is_valid(holder, self.clock.now())

    def status(self, holder: str) -> MembershipStatus:
        now = self.clock.now()
        return MembershipStatus(
            holder=holder,
            credential_id=self.ledger.credential_of(holder),
            expires_at=self.ledger.expiration_of(holder),
            valid=self.ledger.is_valid(holder, now),
        )

    async def revoke(self, caller: Principal, credential_id: int) -> CredentialRevoked:
        with _track("revoke"):
            async with self._lock:
                event = self.ledger.revoke(
                    credential_id,
                    caller.user_id,
                    is_admin=self.gate.is_admin(caller),
                )
                await self._publish(event)
        return event

    async def transfer(
        self, caller: Principal, credential_id: int, to_holder: str
    ) -> None:
        with _track("transfer"):
            logger.info(
                "Transfer requested by user=%s credential id=%d",
                caller.user_id,
                credential_id,
            )
            self.ledger.transfer(credential_id, to_holder)

    # ------------------------------------------------------------------
    # Administration
    # ------------------------------------------------------------------

    def current_terms(self) -> Terms:
        return self.terms.snapshot()

    async def set_price(self, caller: Principal, price: int) -> PriceChanged:
        with _track("set_price"):
            async with self._lock:
                self.gate.require_admin(caller)
                event = self.terms.set_price(price)
                await self._publish(event)
        return event

    async def set_duration(self, caller: Principal, duration: int) -> DurationChanged:
        with _track("set_duration"):
            async with self._lock:
                self.gate.require_admin(caller)
                event = self.terms.set_duration(duration)
                await self._publish(event)
        return event

    async def set_paused(self, caller: Principal, paused: bool) -> PauseChanged | None:
        """Toggle the pause switch; returns the event, or None if unchanged."""
        with _track("pause" if paused else "unpause"):
            async with self._lock:
                if not self.gate.set_paused(caller, paused):
                    return None
                event = PauseChanged(paused=paused, by=caller.user_id)
                await self._publish(event)
        return event

    async def balance(self, caller: Principal) -> int:
        self.gate.require_admin(caller)
        return await self.fees.balance()

    async def withdraw(
        self, caller: Principal, amount: int | None = None
    ) -> FundsWithdrawn:
        with _track("withdraw"):
            async with self._lock:
                self.gate.require_admin(caller)
                withdrawn = await self.fees.withdraw(amount)
                event = FundsWithdrawn(amount=withdrawn, to=caller.user_id)
                logger.info("Withdrew %d to user=%s", withdrawn, caller.user_id)
                await self._publish(event)
        return event

    async def recent_events(self, caller: Principal, limit: int = 50) -> list[LedgerEvent]:
        self.gate.require_admin(caller)
        return await self.events.recent(limit)

    async def _publish(self, event: LedgerEvent) -> None:
        # The operation has already committed; a sink outage must not
        # turn it into a reported failure.
        try:
            await self.events.publish(event)
        except Exception:
            EVENTS_DROPPED.labels(event_type=event.type).inc()
            logger.exception("Failed to publish event type=%s", event.type)


def build_membership_service(
    *,
    clock: Clock | None = None,
    fees: FeeCollector | None = None,
    events: EventSink | None = None,
) -> MembershipService:
    return MembershipService(
        ledger=MembershipLedger(),
        fees=fees if fees is not None else fee_collector,
        gate=AccessGate(SETTINGS.admin_ids),
        terms=MembershipTerms(
            price=SETTINGS.membership_price,
            duration=SETTINGS.membership_duration_seconds,
        ),
        events=events if events is not None else event_sink,
        clock=clock if clock is not None else SystemClock(),
    )


membership_service = build_membership_service()


def get_membership_service() -> MembershipService:
    """FastAPI dependency returning the process-wide service."""
    return membership_service
