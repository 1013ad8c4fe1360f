from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Principal:
    """Caller identity taken from a validated bearer token.

    ``user_id`` is the token subject and doubles as the holder identity
    on the ledger.  Whether the caller is an administrator is decided by
    the access gate, which also consults configured admin ids.
    """

    user_id: str
    roles: frozenset[str] = frozenset()

    def has_role(self, role: str) -> bool:
        return role in self.roles
