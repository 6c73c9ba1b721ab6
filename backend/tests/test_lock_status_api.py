from datetime import date, datetime

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from lineadmin import config
from lineadmin.constants.lock_config import BUSINESS_TZ
from lineadmin.routers import health, lock_status
from lineadmin.routers.dependencies import get_lock_check_service


@pytest.fixture
def client(service):
    # Bare app: no startup hooks, so no DB pool is needed.
    app = FastAPI()
    app.include_router(health.router)
    app.include_router(lock_status.router)
    app.dependency_overrides[get_lock_check_service] = lambda: service
    with TestClient(app) as c:
        yield c


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


def test_lock_status_returns_locked_and_active_days(client, store, clock):
    store.add_account(7, "bob")
    store.put_stats(7, date(2024, 5, 10), registrations_count=2)
    store.put_stats(7, date(2024, 5, 11), messages_sent_count=1)
    clock.set(datetime(2024, 5, 11, 12, 0, 1, tzinfo=BUSINESS_TZ))

    resp = client.get("/api/lock-status/7")

    assert resp.status_code == 200
    body = resp.json()
    assert body["account_id"] == 7
    assert body["locked_dates"] == ["2024-05-10"]
    assert len(body["active_dates"]) == 1
    active = body["active_dates"][0]
    assert active["date"] == "2024-05-11"
    assert active["hasActivity"] is True
    assert active["hasDeposit"] is False
    assert active["isSubmittable"] is False
    assert active["canSubmitAt"] == "2024-05-11T23:00:00+07:00"
    assert body["now"].endswith("+07:00")
    assert store.locked(7) == [date(2024, 5, 10)]


def test_lock_status_unknown_account_is_empty(client):
    resp = client.get("/api/lock-status/12345")
    assert resp.status_code == 200
    assert resp.json()["locked_dates"] == []
    assert resp.json()["active_dates"] == []


def test_lock_status_store_failure_is_empty_not_error(client, store):
    store.add_account(7, locked_dates=[date(2024, 5, 9)])
    store.fail_lookup.add(7)

    resp = client.get("/api/lock-status/7")

    assert resp.status_code == 200
    assert resp.json()["locked_dates"] == []


def test_lock_status_rejects_non_positive_id(client):
    resp = client.get("/api/lock-status/0")
    assert resp.status_code == 400
    assert resp.json()["detail"] == "INVALID_ACCOUNT_ID"


def test_sweep_returns_counters(client, store, clock):
    store.add_account(1)
    store.put_stats(1, date(2024, 5, 9), registrations_count=1)
    store.add_account(2)
    clock.set(datetime(2024, 5, 11, 13, 0, tzinfo=BUSINESS_TZ))

    resp = client.post("/api/lock-status/sweep", headers={"x-admin-password": config.ADMIN_PASSWORD})

    assert resp.status_code == 200
    body = resp.json()
    assert (body["checked"], body["locked"], body["failed"]) == (2, 1, 0)


def test_sweep_rejects_wrong_admin_password(client):
    resp = client.post("/api/lock-status/sweep", headers={"x-admin-password": "nope"})
    assert resp.status_code == 401
    assert resp.json()["detail"] == "UNAUTHORIZED"
