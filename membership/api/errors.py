"""HTTP mapping for ledger errors.

Services raise LedgerError subclasses; one handler turns them into
JSON responses so every route reports the same failure the same way.
"""

from __future__ import annotations

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from membership.core.errors import (
    AlreadyEnrolled,
    InsufficientBalance,
    InsufficientFee,
    InvalidIdentifier,
    InvalidValue,
    LedgerError,
    NoCredential,
    Paused,
    TransferNotAllowed,
    Unauthorized,
)

_STATUS_BY_ERROR: dict[type[LedgerError], int] = {
    InsufficientFee: status.HTTP_402_PAYMENT_REQUIRED,
    AlreadyEnrolled: status.HTTP_409_CONFLICT,
    NoCredential: status.HTTP_404_NOT_FOUND,
    TransferNotAllowed: status.HTTP_409_CONFLICT,
    InvalidIdentifier: status.HTTP_404_NOT_FOUND,
    Unauthorized: status.HTTP_403_FORBIDDEN,
    Paused: status.HTTP_503_SERVICE_UNAVAILABLE,
    InsufficientBalance: status.HTTP_409_CONFLICT,
    InvalidValue: status.HTTP_422_UNPROCESSABLE_ENTITY,
}


def status_for(exc: LedgerError) -> int:
    return _STATUS_BY_ERROR.get(type(exc), status.HTTP_400_BAD_REQUEST)


async def ledger_error_handler(_request: Request, exc: LedgerError) -> JSONResponse:
    body: dict[str, object] = {"detail": str(exc), "error": exc.code}
    if isinstance(exc, InsufficientFee):
        body["required"] = exc.required
        body["provided"] = exc.provided
    return JSONResponse(status_code=status_for(exc), content=body)


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(LedgerError, ledger_error_handler)  # type: ignore[arg-type]
