from __future__ import annotations

from dataclasses import dataclass

# Identifier 0 never denotes a real credential.
NO_CREDENTIAL = 0
# expires_at of a revoked credential
NO_EXPIRY = 0


@dataclass(frozen=True, slots=True)
class Credential:
    """One holder's membership record.

    ``holder`` is None once the credential is revoked; the identifier is
    retired at that point and never handed out again.
    """

    id: int
    holder: str | None
    expires_at: int

    @property
    def is_revoked(self) -> bool:
        return self.holder is None

    def is_valid_at(self, now: int) -> bool:
        return not self.is_revoked and now < self.expires_at
