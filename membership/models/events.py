"""Structured ledger events.

Events describe what a committed operation did.  They are published to
the event sink for external observers and never read back by the ledger.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import ClassVar


@dataclass(frozen=True, slots=True)
class LedgerEvent:
    type: ClassVar[str] = "event"

    def to_dict(self) -> dict:
        return {"type": self.type, **asdict(self)}


@dataclass(frozen=True, slots=True)
class CredentialIssued(LedgerEvent):
    type: ClassVar[str] = "credential.issued"

    holder: str
    credential_id: int
    expires_at: int


@dataclass(frozen=True, slots=True)
class CredentialRenewed(LedgerEvent):
    type: ClassVar[str] = "credential.renewed"

    holder: str
    credential_id: int
    old_expires_at: int
    new_expires_at: int


@dataclass(frozen=True, slots=True)
class CredentialRevoked(LedgerEvent):
    type: ClassVar[str] = "credential.revoked"

    holder: str
    credential_id: int
    revoked_by: str = ""


@dataclass(frozen=True, slots=True)
class PriceChanged(LedgerEvent):
    type: ClassVar[str] = "terms.price_changed"

    old: int
    new: int


@dataclass(frozen=True, slots=True)
class DurationChanged(LedgerEvent):
    type: ClassVar[str] = "terms.duration_changed"

    old: int
    new: int


@dataclass(frozen=True, slots=True)
class PauseChanged(LedgerEvent):
    type: ClassVar[str] = "gate.pause_changed"

    paused: bool
    by: str


@dataclass(frozen=True, slots=True)
class FundsWithdrawn(LedgerEvent):
    type: ClassVar[str] = "fees.withdrawn"

    amount: int
    to: str


_EVENT_TYPES: dict[str, type[LedgerEvent]] = {
    cls.type: cls
    for cls in (
        CredentialIssued,
        CredentialRenewed,
        CredentialRevoked,
        PriceChanged,
        DurationChanged,
        PauseChanged,
        FundsWithdrawn,
    )
}


def event_from_dict(data: dict) -> LedgerEvent:
    """Rebuild an event from its ``to_dict()`` form."""
    payload = dict(data)
    cls = _EVENT_TYPES.get(payload.pop("type", ""))
    if cls is None:
        raise ValueError(f"unknown event type in {data!r}")
    return cls(**payload)
