"""Credential ownership endpoint.

PUT /v1/credentials/{credential_id}/holder exists so that transfer
attempts get an explicit, logged refusal: membership credentials are
bound to their holder and the request always fails with 409.
"""

from __future__ import annotations

from fastapi import APIRouter
from pydantic import BaseModel

from membership.api.dependencies import CurrentUser, Service

router = APIRouter(prefix="/v1/credentials", tags=["credentials"])


class TransferIn(BaseModel):
    to_holder: str


@router.put("/{credential_id}/holder", status_code=204)
async def transfer_credential(
    credential_id: int, body: TransferIn, principal: CurrentUser, service: Service
) -> None:
    await service.transfer(principal, credential_id, body.to_holder)
