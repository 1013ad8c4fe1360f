"""Ledger error taxonomy.

Every error is a terminal precondition failure: the operation that raised
it changed nothing, and the caller must fix its input before resubmitting.
"""

from __future__ import annotations


class LedgerError(Exception):
    code = "ledger_error"


class InsufficientFee(LedgerError):
    code = "insufficient_fee"

    def __init__(self, required: int, provided: int) -> None:
        super().__init__(f"fee mismatch: required={required} provided={provided}")
        self.required = required
        self.provided = provided


class AlreadyEnrolled(LedgerError):
    code = "already_enrolled"

    def __init__(self, holder: str) -> None:
        super().__init__(f"holder {holder!r} already has a credential")
        self.holder = holder


class NoCredential(LedgerError):
    code = "no_credential"

    def __init__(self, holder: str) -> None:
        super().__init__(f"holder {holder!r} has no credential")
        self.holder = holder


class TransferNotAllowed(LedgerError):
    code = "transfer_not_allowed"

    def __init__(self, credential_id: int) -> None:
        super().__init__(f"credential {credential_id} is not transferable")
        self.credential_id = credential_id


class InvalidIdentifier(LedgerError):
    code = "invalid_identifier"

    def __init__(self, credential_id: int) -> None:
        super().__init__(f"credential {credential_id} is not owned by anyone")
        self.credential_id = credential_id


class Unauthorized(LedgerError):
    code = "unauthorized"


class Paused(LedgerError):
    code = "paused"

    def __init__(self) -> None:
        super().__init__("issuance and renewal are paused")


class InsufficientBalance(LedgerError):
    code = "insufficient_balance"

    def __init__(self, requested: int, available: int) -> None:
        super().__init__(
            f"cannot withdraw {requested}: only {available} collected"
        )
        self.requested = requested
        self.available = available


class InvalidValue(LedgerError, ValueError):
    code = "invalid_value"
