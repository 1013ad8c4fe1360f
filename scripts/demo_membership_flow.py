"""Demo: walk a membership through issue, renew, lapse and revoke.

Runs against an in-process app with a controllable clock (price 100,
duration 1000s), so no Redis or real time passes.

Run with:
    python scripts/demo_membership_flow.py
"""

from __future__ import annotations

from fastapi.testclient import TestClient

from membership.main import app
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
from membership.services.token_service import create_access_token

PRICE = 100
DURATION = 1000


def main() -> None:
    clock = FixedClock(start=0)
    service = MembershipService(
        ledger=MembershipLedger(),
        fees=InMemoryFeeCollector(),
        gate=AccessGate(),
        terms=MembershipTerms(price=PRICE, duration=DURATION),
        events=InMemoryEventSink(),
        clock=clock,
    )
    app.dependency_overrides[get_membership_service] = lambda: service
    client = TestClient(app)

    alice = {"Authorization": f"Bearer {create_access_token(sub='alice')}"}
    admin = {
        "Authorization": f"Bearer {create_access_token(sub='ops', roles=['admin'])}"
    }

    # ── Step 1: wrong fee ───────────────────────────────────────────
    r = client.post("/v1/memberships", json={"payment": 99}, headers=alice)
    print(f"1. POST /v1/memberships (99)   → {r.status_code}  {r.json()['detail']}")

    # ── Step 2: issue at t=0 ────────────────────────────────────────
    r = client.post("/v1/memberships", json={"payment": PRICE}, headers=alice)
    body = r.json()
    print(
        f"2. POST /v1/memberships (100)  → {r.status_code}  "
        f"id={body['credential_id']} expires_at={body['expires_at']}"
    )

    # ── Step 3: early renewal rolls over ────────────────────────────
    clock.set(500)
    r = client.post("/v1/memberships/renew", json={"payment": PRICE}, headers=alice)
    print(f"3. renew at t=500              → {r.status_code}  {r.json()['new_expires_at']}")

    # ── Step 4: lapse ───────────────────────────────────────────────
    clock.set(1500)
    r = client.get("/v1/memberships/alice/valid")
    print(f"4. valid at t=1500             → {r.json()['valid']}")

    # ── Step 5: renewal after lapse restarts from now ───────────────
    clock.set(2000)
    r = client.post("/v1/memberships/renew", json={"payment": PRICE}, headers=alice)
    print(f"5. renew at t=2000             → {r.status_code}  {r.json()['new_expires_at']}")

    # ── Step 6: transfer is refused ─────────────────────────────────
    r = client.put(
        "/v1/credentials/1/holder", json={"to_holder": "bob"}, headers=admin
    )
    print(f"6. PUT  /v1/credentials/1/holder → {r.status_code}  {r.json()['error']}")

    # ── Step 7: revoke, then reissue gets a fresh id ────────────────
    r = client.delete("/v1/memberships/1", headers=alice)
    print(f"7. DELETE /v1/memberships/1    → {r.status_code}")
    r = client.post("/v1/memberships", json={"payment": PRICE}, headers=alice)
    print(f"   reissue                     → {r.status_code}  id={r.json()['credential_id']}")

    # ── Step 8: collected fees ──────────────────────────────────────
    r = client.get("/admin/balance", headers=admin)
    print(f"8. GET  /admin/balance         → {r.status_code}  {r.json()['balance']}")

    app.dependency_overrides.clear()
    print("\nAll steps completed.")


if __name__ == "__main__":
    main()
