"""Membership endpoints.

- POST   /v1/memberships                  issue for the caller (paid)
- POST   /v1/memberships/renew            renew the caller's credential (paid)
- GET    /v1/memberships/{holder}         membership status (public)
- GET    /v1/memberships/{holder}/valid   validity check (public)
- DELETE /v1/memberships/{credential_id}  revoke (holder or admin)
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, status
from pydantic import BaseModel, Field

from membership.api.dependencies import CurrentUser, Service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/memberships", tags=["memberships"])


class PaymentIn(BaseModel):
    payment: int = Field(ge=0)


class IssuedOut(BaseModel):
    holder: str
    credential_id: int
    expires_at: int


class RenewedOut(BaseModel):
    holder: str
    credential_id: int
    old_expires_at: int
    new_expires_at: int


class RevokedOut(BaseModel):
    holder: str
    credential_id: int


class StatusOut(BaseModel):
    holder: str
    credential_id: int | None
    expires_at: int | None
    valid: bool


class ValidityOut(BaseModel):
    holder: str
    valid: bool


@router.post("", response_model=IssuedOut, status_code=status.HTTP_201_CREATED)
async def issue_membership(
    body: PaymentIn, principal: CurrentUser, service: Service
) -> IssuedOut:
    event = await service.issue(principal, body.payment)
    return IssuedOut(
        holder=event.holder,
        credential_id=event.credential_id,
        expires_at=event.expires_at,
    )


@router.post("/renew", response_model=RenewedOut)
async def renew_membership(
    body: PaymentIn, principal: CurrentUser, service: Service
) -> RenewedOut:
    event = await service.renew(principal, body.payment)
    return RenewedOut(
        holder=event.holder,
        credential_id=event.credential_id,
        old_expires_at=event.old_expires_at,
        new_expires_at=event.new_expires_at,
    )


@router.get("/{holder}", response_model=StatusOut)
async def membership_status(holder: str, service: Service) -> StatusOut:
    current = service.status(holder)
    if not current.enrolled:
        return StatusOut(holder=holder, credential_id=None, expires_at=None, valid=False)
    return StatusOut(
        holder=holder,
        credential_id=current.credential_id,
        expires_at=current.expires_at,
        valid=current.valid,
    )


@router.get("/{holder}/valid", response_model=ValidityOut)
async def membership_valid(holder: str, service: Service) -> ValidityOut:
    return ValidityOut(holder=holder, valid=service.is_valid(holder))


@router.delete("/{credential_id}", response_model=RevokedOut)
async def revoke_membership(
    credential_id: int, principal: CurrentUser, service: Service
) -> RevokedOut:
    event = await service.revoke(principal, credential_id)
    return RevokedOut(holder=event.holder, credential_id=event.credential_id)
