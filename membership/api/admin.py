"""Administrative endpoints.

Every route here requires an administrator; the check happens in the
service through the access gate, so a non-admin gets 403 from the
shared ledger error handler.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Query
from pydantic import BaseModel, Field

from membership.api.dependencies import CurrentUser, Service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])


class PriceIn(BaseModel):
    price: int


class DurationIn(BaseModel):
    duration_seconds: int


class ChangeOut(BaseModel):
    old: int
    new: int


class PauseOut(BaseModel):
    paused: bool
    changed: bool


class BalanceOut(BaseModel):
    balance: int


class WithdrawIn(BaseModel):
    # None withdraws the whole balance.
    amount: int | None = Field(default=None, ge=0)


class WithdrawOut(BaseModel):
    amount: int
    to: str


class EventOut(BaseModel):
    type: str
    data: dict


@router.put("/terms/price", response_model=ChangeOut)
async def set_price(body: PriceIn, principal: CurrentUser, service: Service) -> ChangeOut:
    event = await service.set_price(principal, body.price)
    return ChangeOut(old=event.old, new=event.new)


@router.put("/terms/duration", response_model=ChangeOut)
async def set_duration(
    body: DurationIn, principal: CurrentUser, service: Service
) -> ChangeOut:
    event = await service.set_duration(principal, body.duration_seconds)
    return ChangeOut(old=event.old, new=event.new)


@router.post("/pause", response_model=PauseOut)
async def pause(principal: CurrentUser, service: Service) -> PauseOut:
    event = await service.set_paused(principal, True)
    return PauseOut(paused=True, changed=event is not None)


@router.post("/unpause", response_model=PauseOut)
async def unpause(principal: CurrentUser, service: Service) -> PauseOut:
    event = await service.set_paused(principal, False)
    return PauseOut(paused=False, changed=event is not None)


@router.get("/balance", response_model=BalanceOut)
async def balance(principal: CurrentUser, service: Service) -> BalanceOut:
    return BalanceOut(balance=await service.balance(principal))


@router.post("/withdraw", response_model=WithdrawOut)
async def withdraw(
    body: WithdrawIn, principal: CurrentUser, service: Service
) -> WithdrawOut:
    event = await service.withdraw(principal, body.amount)
    return WithdrawOut(amount=event.amount, to=event.to)


@router.get("/events", response_model=list[EventOut])
async def recent_events(
    principal: CurrentUser,
    service: Service,
    limit: int = Query(default=50, ge=1, le=500),
) -> list[EventOut]:
    logger.info("Event feed requested by user=%s limit=%d", principal.user_id, limit)
    events = await service.recent_events(principal, limit)
    out = []
    for event in events:
        data = event.to_dict()
        out.append(EventOut(type=data.pop("type"), data=data))
    return out
