from __future__ import annotations

import logging
from dataclasses import dataclass

from membership.core.errors import InvalidValue
from membership.models.events import DurationChanged, PriceChanged

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Terms:
    price: int
    duration: int


class MembershipTerms:
    """Current membership price and duration.

    The setters validate and return the change event; admin checks are the
    caller's job (MembershipService runs them through the access gate).
    """

    def __init__(self, price: int, duration: int) -> None:
        _validate_price(price)
        _validate_duration(duration)
        self._price = price
        self._duration = duration

    @property
    def price(self) -> int:
        return self._price

    @property
    def duration(self) -> int:
        return self._duration

    def snapshot(self) -> Terms:
        return Terms(price=self._price, duration=self._duration)

    def set_price(self, new: int) -> PriceChanged:
        _validate_price(new)
        old, self._price = self._price, new
        logger.info("Membership price changed %d -> %d", old, new)
        return PriceChanged(old=old, new=new)

    def set_duration(self, new: int) -> DurationChanged:
        _validate_duration(new)
        old, self._duration = self._duration, new
        logger.info("Membership duration changed %ds -> %ds", old, new)
        return DurationChanged(old=old, new=new)


def _validate_price(price: int) -> None:
    if price < 0:
        raise InvalidValue("price must be >= 0")


def _validate_duration(duration: int) -> None:
    if duration <= 0:
        raise InvalidValue("duration must be > 0")
