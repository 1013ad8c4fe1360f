from __future__ import annotations

from fastapi import APIRouter
from pydantic import BaseModel

from membership.api.dependencies import Service

router = APIRouter(prefix="/v1/terms", tags=["terms"])


class TermsOut(BaseModel):
    price: int
    duration_seconds: int
    paused: bool


@router.get("", response_model=TermsOut)
async def current_terms(service: Service) -> TermsOut:
    """Price and duration a new issue or renewal would use right now."""
    terms = service.current_terms()
    return TermsOut(
        price=terms.price,
        duration_seconds=terms.duration,
        paused=service.gate.is_paused(),
    )
