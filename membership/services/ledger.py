"""Membership ledger: the credential lifecycle state machine.

Per credential identifier::

    Unissued -> Active -> Active (renewed) -> Expired -> Revoked
                  ^                              |
                  +---------- renew -------------+

An expired credential still occupies its holder's slot; only revocation
frees it.  Revoked is terminal and the identifier is never reused.

The ledger is the only owner of credential records, the holder mapping,
and the identifier sequence.  It performs no locking and no I/O: callers
serialize access (see MembershipService) and pass in the instant the
operation happens at.  Each operation validates everything before it
writes, so a raised error leaves the state untouched.
"""

from __future__ import annotations

import logging
from dataclasses import replace

from membership.core.errors import (
    AlreadyEnrolled,
    InvalidIdentifier,
    InvalidValue,
    NoCredential,
    TransferNotAllowed,
    Unauthorized,
)
from membership.models.credential import NO_CREDENTIAL, NO_EXPIRY, Credential
from membership.models.events import (
    CredentialIssued,
    CredentialRenewed,
    CredentialRevoked,
)

logger = logging.getLogger(__name__)


class MembershipLedger:
    def __init__(self) -> None:
        self._credentials: dict[int, Credential] = {}
        self._holders: dict[str, int] = {}
        self._next_id = NO_CREDENTIAL + 1

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def credential_of(self, holder: str) -> int:
        """Identifier mapped to ``holder``, or NO_CREDENTIAL."""
        return self._holders.get(holder, NO_CREDENTIAL)

    def get(self, credential_id: int) -> Credential | None:
        return self._credentials.get(credential_id)

    def holder_of(self, credential_id: int) -> str | None:
        credential = self._credentials.get(credential_id)
        return credential.holder if credential is not None else None

    def expiration_of(self, holder: str) -> int:
        credential_id = self._holders.get(holder)
        if credential_id is None:
            return NO_EXPIRY
        return self._credentials[credential_id].expires_at

    def is_valid(self, holder: str, now: int) -> bool:
        credential_id = self._holders.get(holder)
        if credential_id is None:
            return False
        return self._credentials[credential_id].is_valid_at(now)

    @property
    def total_issued(self) -> int:
        return self._next_id - 1

    @property
    def holder_count(self) -> int:
        return len(self._holders)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def issue(self, holder: str, duration: int, now: int) -> CredentialIssued:
        if not holder:
            raise InvalidValue("holder must be non-empty")
        if duration < 0:
            raise InvalidValue("duration must be >= 0")
        if holder in self._holders:
            logger.warning(
                "Issue rejected: holder=%s already enrolled",
                holder,
                extra={"holder": holder, "credential_id": self._holders[holder]},
            )
            raise AlreadyEnrolled(holder)

        credential_id = self._next_id
        expires_at = now + duration
        self._move(credential_id, None, holder, expires_at)
        self._next_id += 1

        logger.info(
            "Issued credential id=%d holder=%s expires_at=%d",
            credential_id,
            holder,
            expires_at,
            extra={"holder": holder, "credential_id": credential_id},
        )
        return CredentialIssued(
            holder=holder, credential_id=credential_id, expires_at=expires_at
        )

    def renew(self, holder: str, duration: int, now: int) -> CredentialRenewed:
        if duration < 0:
            raise InvalidValue("duration must be >= 0")
        credential_id = self._holders.get(holder)
        if credential_id is None:
            logger.warning(
                "Renew rejected: holder=%s has no credential",
                holder,
                extra={"holder": holder},
            )
            raise NoCredential(holder)

        current = self._credentials[credential_id]
        old_expires_at = current.expires_at
        # Reaching expires_at exactly counts as lapsed.
        if now >= old_expires_at:
            new_expires_at = now + duration
        else:
            new_expires_at = old_expires_at + duration

        self._credentials[credential_id] = replace(current, expires_at=new_expires_at)

        logger.info(
            "Renewed credential id=%d holder=%s expires_at=%d->%d",
            credential_id,
            holder,
            old_expires_at,
            new_expires_at,
            extra={"holder": holder, "credential_id": credential_id},
        )
        return CredentialRenewed(
            holder=holder,
            credential_id=credential_id,
            old_expires_at=old_expires_at,
            new_expires_at=new_expires_at,
        )

    def revoke(
        self, credential_id: int, requester: str, *, is_admin: bool = False
    ) -> CredentialRevoked:
        holder = self.holder_of(credential_id)
        if holder is None:
            logger.warning(
                "Revoke rejected: credential id=%d resolves to no holder",
                credential_id,
                extra={"credential_id": credential_id},
            )
            raise InvalidIdentifier(credential_id)
        if requester != holder and not is_admin:
            logger.warning(
                "Revoke rejected: requester=%s is neither holder nor admin",
                requester,
                extra={"holder": holder, "credential_id": credential_id},
            )
            raise Unauthorized(
                f"{requester!r} may not revoke credential {credential_id}"
            )

        self._move(credential_id, holder, None, NO_EXPIRY)

        logger.info(
            "Revoked credential id=%d holder=%s by=%s",
            credential_id,
            holder,
            requester,
            extra={"holder": holder, "credential_id": credential_id},
        )
        return CredentialRevoked(
            holder=holder, credential_id=credential_id, revoked_by=requester
        )

    def transfer(self, credential_id: int, to_holder: str) -> None:
        """Reassign a credential to another holder.

        Credentials are bound to their holder for life, so this always
        raises TransferNotAllowed, for administrators too.
        """
        logger.warning(
            "Transfer rejected: credential id=%d to=%s",
            credential_id,
            to_holder,
            extra={"credential_id": credential_id},
        )
        raise TransferNotAllowed(credential_id)

    def _move(
        self,
        credential_id: int,
        from_holder: str | None,
        to_holder: str | None,
        expires_at: int,
    ) -> None:
        # Ownership hook shared by issue (None -> holder) and revoke
        # (holder -> None).  Holder -> holder never passes.
        if from_holder is not None and to_holder is not None:
            raise TransferNotAllowed(credential_id)

        # Record first, mapping second: a holder never points at a missing record.
        self._credentials[credential_id] = Credential(
            id=credential_id, holder=to_holder, expires_at=expires_at
        )
        if from_holder is not None:
            del self._holders[from_holder]
        if to_holder is not None:
            self._holders[to_holder] = credential_id
