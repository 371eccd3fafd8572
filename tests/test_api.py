"""HTTP-level tests for the transaction, credibility and notification routes."""

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session

from marketplace.api import deps
from marketplace.database import get_session
from marketplace.main import app
from marketplace.services.auth import create_access_token
from marketplace.services.notifications import DatabaseNotificationGateway


def _auth(user_id: str) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user_id)}"}


@pytest.fixture
def client(engine, lifecycle):
    # Store notifications synchronously so they can be listed straight away
    stored = DatabaseNotificationGateway(engine)
    lifecycle.notifier = stored
    lifecycle.credibility.notifier = stored

    def _session():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[deps.get_lifecycle] = lambda: lifecycle
    app.dependency_overrides[get_session] = _session
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def listing(make_product, trusted_seller):
    trusted_seller("seller")
    return make_product(seller_id="seller", price=30.0)


def test_health(client):
    assert client.get("/api/system/health").json() == {"status": "ok"}


def test_requires_token(client):
    resp = client.get("/api/transactions")
    assert resp.status_code in (401, 403)

    resp = client.get("/api/transactions", headers={"Authorization": "Bearer garbage"})
    assert resp.status_code == 401


def test_full_purchase_flow(client, listing):
    resp = client.post("/api/transactions", json={"product_id": listing.id}, headers=_auth("buyer"))
    assert resp.status_code == 201
    tx = resp.json()
    assert tx["status"] == "pending"
    assert tx["seller_id"] == "seller"
    assert tx["buyer_id"] == "buyer"
    assert tx["amount"] == 30.0

    resp = client.post(f"/api/transactions/{tx['id']}/rating", json={"rating": 4},
                       headers=_auth("seller"))
    assert resp.status_code == 200
    assert resp.json()["status"] == "pending"

    resp = client.post(f"/api/transactions/{tx['id']}/rating", json={"rating": 5},
                       headers=_auth("buyer"))
    body = resp.json()
    assert body["status"] == "completed"
    assert body["completion_time"] is not None

    resp = client.post(f"/api/transactions/{tx['id']}/cancel", headers=_auth("buyer"))
    assert resp.status_code == 409
    assert resp.json()["error"] == "InvalidState"

    resp = client.get("/api/transactions?status=completed", headers=_auth("seller"))
    assert [t["id"] for t in resp.json()] == [tx["id"]]


def test_create_below_threshold(client, make_product, trusted_seller):
    trusted_seller("shaky", score=40.0)
    product = make_product(seller_id="shaky")
    resp = client.post("/api/transactions", json={"product_id": product.id}, headers=_auth("buyer"))
    assert resp.status_code == 403
    assert resp.json()["error"] == "BelowReputationThreshold"


def test_create_unknown_product(client):
    resp = client.post("/api/transactions", json={"product_id": "nope"}, headers=_auth("buyer"))
    assert resp.status_code == 404


def test_rating_validation(client, listing):
    tx = client.post("/api/transactions", json={"product_id": listing.id},
                     headers=_auth("buyer")).json()
    resp = client.post(f"/api/transactions/{tx['id']}/rating", json={"rating": 9},
                       headers=_auth("buyer"))
    assert resp.status_code == 422


def test_stranger_cannot_see_or_act(client, listing):
    tx = client.post("/api/transactions", json={"product_id": listing.id},
                     headers=_auth("buyer")).json()
    assert client.get(f"/api/transactions/{tx['id']}", headers=_auth("mallory")).status_code == 403
    resp = client.post(f"/api/transactions/{tx['id']}/cancel", headers=_auth("mallory"))
    assert resp.status_code == 403
    assert resp.json()["error"] == "Unauthorized"


def test_dispute(client, listing):
    tx = client.post("/api/transactions", json={"product_id": listing.id},
                     headers=_auth("buyer")).json()

    short = client.post(f"/api/transactions/{tx['id']}/dispute", json={"reason": "meh"},
                        headers=_auth("buyer"))
    assert short.status_code == 422

    resp = client.post(f"/api/transactions/{tx['id']}/dispute",
                       json={"reason": "Seller stopped answering"}, headers=_auth("buyer"))
    assert resp.status_code == 200
    assert resp.json()["status"] == "disputed"
    assert resp.json()["dispute_reason"] == "Seller stopped answering"


def test_credibility_for_new_user(client):
    resp = client.get("/api/credibility/newbie", headers=_auth("anyone"))
    assert resp.status_code == 200
    body = resp.json()
    assert body["score"] == 40.0
    assert body["badge"] == "New Member"
    assert body["breakdown"] == {
        "transaction_score": 0.0,
        "rating_score": 0.0,
        "response_score": 20.0,
        "reliability_score": 20.0,
    }
    assert body["stats"]["total_transactions"] == 0
    assert body["stats"]["average_response_time"] is None


def test_notifications_listed_and_marked_read(client, listing):
    client.post("/api/transactions", json={"product_id": listing.id}, headers=_auth("buyer"))

    notes = client.get("/api/notifications", headers=_auth("seller")).json()
    assert [n["type"] for n in notes] == ["TRANSACTION_INITIATED"]
    assert notes[0]["read"] is False

    resp = client.post("/api/notifications/read", json={"notification_ids": [notes[0]["id"]]},
                       headers=_auth("seller"))
    assert resp.json()["updated"] == 1

    unread = client.get("/api/notifications?unread_only=true", headers=_auth("seller")).json()
    assert unread == []
    # Other users cannot see or mark someone else's alerts
    assert client.get("/api/notifications", headers=_auth("buyer")).json() == []


def test_reconcile_endpoint(client, lifecycle):
    lifecycle.recompute_queue.add("buyer")
    resp = client.post("/api/system/reconcile", headers=_auth("admin"))
    assert resp.status_code == 200
    assert resp.json() == {"recomputed": 1, "failed": []}
    assert len(lifecycle.recompute_queue) == 0


def test_scheduler_status_without_running_scheduler(client):
    resp = client.get("/api/system/scheduler", headers=_auth("admin"))
    assert resp.status_code == 200
    body = resp.json()
    assert body["running"] is False
    assert body["job_count"] == 0
