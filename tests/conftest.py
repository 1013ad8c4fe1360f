from __future__ import annotations

from collections.abc import Iterator

import pytest
from fastapi.testclient import TestClient

from membership.main import app
from membership.services import token_service
from membership.services.access_gate import AccessGate
from membership.services.clock import FixedClock
from membership.services.event_sink import InMemoryEventSink
from membership.services.fee_collector import InMemoryFeeCollector
from membership.services.ledger import MembershipLedger
from membership.services.membership_service import (
    MembershipService,
    get_membership_service,
)
from membership.services.terms import MembershipTerms

PRICE = 100
DURATION = 1000
CONFIGURED_ADMIN = "ops-admin"


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(start=0)


@pytest.fixture
def events() -> InMemoryEventSink:
    return InMemoryEventSink()


@pytest.fixture
def fees() -> InMemoryFeeCollector:
    return InMemoryFeeCollector()


@pytest.fixture
def service(
    clock: FixedClock, events: InMemoryEventSink, fees: InMemoryFeeCollector
) -> MembershipService:
    """Fresh service per test: price=100, duration=1000s, clock at t=0."""
    return MembershipService(
        ledger=MembershipLedger(),
        fees=fees,
        gate=AccessGate({CONFIGURED_ADMIN}),
        terms=MembershipTerms(price=PRICE, duration=DURATION),
        events=events,
        clock=clock,
    )


@pytest.fixture(autouse=True)
def use_test_service(service: MembershipService) -> Iterator[None]:
    """Route every API request to this test's service."""
    app.dependency_overrides[get_membership_service] = lambda: service
    yield
    app.dependency_overrides.pop(get_membership_service, None)


@pytest.fixture
def client() -> TestClient:
    return TestClient(app)


def mint_token(
    username: str = "test-user",
    roles: list[str] | None = None,
) -> str:
    """Create a valid ES256 bearer token for testing."""
    return token_service.create_access_token(sub=username, roles=roles)


def auth(token: str | None) -> dict[str, str]:
    if token is None:
        return {}
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def token() -> str:
    return mint_token(username="alice")


@pytest.fixture
def admin_token() -> str:
    return mint_token(username="test-admin", roles=["admin"])


# ---------------------------------------------------------------------------
# Redis double for the Redis-backed fee collector and event sink
# ---------------------------------------------------------------------------


class FakeRedis:
    """Covers the redis.asyncio calls the Redis backends make, with
    decode_responses=True semantics (values come back as str).

    Command names passed in ``fail`` raise ConnectionError, the way a
    dropped connection surfaces from redis-py.
    """

    def __init__(self, *fail: str) -> None:
        self.values: dict[str, str] = {}
        self.lists: dict[str, list[str]] = {}
        self.fail = set(fail)
        self.calls: list[str] = []

    def _command(self, name: str) -> None:
        self.calls.append(name)
        if name in self.fail:
            raise ConnectionError(f"redis {name} failed")

    async def get(self, key: str) -> str | None:
        self._command("get")
        return self.values.get(key)

    async def incrby(self, key: str, amount: int) -> int:
        self._command("incrby")
        value = int(self.values.get(key, "0")) + amount
        self.values[key] = str(value)
        return value

    async def decrby(self, key: str, amount: int) -> int:
        self._command("decrby")
        value = int(self.values.get(key, "0")) - amount
        self.values[key] = str(value)
        return value

    async def lrange(self, key: str, start: int, stop: int) -> list[str]:
        self._command("lrange")
        items = self.lists.get(key, [])
        return items[start : None if stop == -1 else stop + 1]

    def register_script(self, _source: str):
        # The only script registered is the fee withdrawal.
        async def withdraw(keys: list[str], args: list[int]) -> list[int]:
            self._command("evalsha")
            balance = int(self.values.get(keys[0], "0"))
            amount = balance if int(args[0]) < 0 else int(args[0])
            if amount > balance:
                return [0, balance]
            self.values[keys[0]] = str(balance - amount)
            return [1, amount]

        return withdraw

    def pipeline(self, transaction: bool = True) -> _FakePipeline:
        return _FakePipeline(self)


class _FakePipeline:
    def __init__(self, redis: FakeRedis) -> None:
        self._redis = redis
        self._ops: list[tuple] = []

    async def __aenter__(self) -> _FakePipeline:
        return self

    async def __aexit__(self, *exc) -> None:
        self._ops.clear()

    def lpush(self, key: str, value: str) -> _FakePipeline:
        self._ops.append(("lpush", key, value))
        return self

    def ltrim(self, key: str, start: int, stop: int) -> _FakePipeline:
        self._ops.append(("ltrim", key, start, stop))
        return self

    async def execute(self) -> list:
        self._redis._command("execute")
        for op in self._ops:
            items = self._redis.lists.setdefault(op[1], [])
            if op[0] == "lpush":
                items.insert(0, op[2])
            else:
                self._redis.lists[op[1]] = items[op[2] : op[3] + 1]
        return [True] * len(self._ops)
