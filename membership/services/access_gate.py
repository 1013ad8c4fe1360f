from __future__ import annotations

import logging
from collections.abc import Iterable

from membership.core.errors import Paused, Unauthorized
from membership.models.principal import Principal

logger = logging.getLogger(__name__)

ADMIN_ROLE = "admin"


class AccessGate:
    """Administrator checks and the global pause switch.

    A caller is an administrator when its token carries the admin role or
    its id is in the configured admin list.  The pause switch only gates
    issuance and renewal; validity checks and revocation ignore it.
    """

    def __init__(self, admin_ids: Iterable[str] = ()) -> None:
        self._admin_ids = frozenset(admin_ids)
        self._paused = False

    def is_admin(self, caller: Principal) -> bool:
        return caller.has_role(ADMIN_ROLE) or caller.user_id in self._admin_ids

    def is_paused(self) -> bool:
        return self._paused

    def require_admin(self, caller: Principal) -> None:
        if not self.is_admin(caller):
            logger.warning("Admin action denied for user=%s", caller.user_id)
            raise Unauthorized(f"{caller.user_id!r} is not an administrator")

    def require_not_paused(self) -> None:
        if self._paused:
            logger.warning("Operation refused while paused")
            raise Paused()

    def set_paused(self, caller: Principal, paused: bool) -> bool:
        """Set the pause flag; returns whether it actually changed."""
        self.require_admin(caller)
        changed = self._paused != paused
        self._paused = paused
        logger.info(
            "Pause %s by user=%s%s",
            "enabled" if paused else "disabled",
            caller.user_id,
            "" if changed else " (no change)",
        )
        return changed
