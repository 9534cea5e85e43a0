"""Shared pytest fixtures for the test suite.

Fixture overview
----------------
client             TestClient on a freshly migrated and seeded SQLite file
login              callable returning auth headers for a seeded account
shipper_headers    shipper@example.com (owns shipments 1, 3 and 5)
shipper2_headers   logistics@company.com (owns shipments 2, 4 and 6)
carrier_headers    carrier@example.com
carrier2_headers   fleet@transport.com
pending_headers    driver@freight.com, a carrier awaiting verification
admin_headers      admin@copallet.com
shipment_payload   a valid body for ``POST /api/shipments``

Seeded ids are stable because every test gets its own database file.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from copallet_api.app.core.config import settings
from copallet_api.app.core.db import init_db, reset_db
from copallet_api.app.core.seed import seed_database
from copallet_api.app.main import app

# ── Seeded ids ───────────────────────────────────────────────────────────────

ADMIN_ID, SHIPPER_ID, CARRIER_ID, SHIPPER2_ID, CARRIER2_ID, PENDING_CARRIER_ID = range(1, 7)

# s1 open (shipper), s2 assigned to carrier, s3 in-transit with carrier2,
# s4 delivered by carrier, s5 open (shipper), s6 open (shipper2)
OPEN_SHIPMENT, ASSIGNED_SHIPMENT, IN_TRANSIT_SHIPMENT, DELIVERED_SHIPMENT = 1, 2, 3, 4

# Pending bids on shipment 1: carrier (280), carrier2 (320), carrier3 (300)
CARRIER_BID_ON_OPEN, CARRIER2_BID_ON_OPEN, PENDING_CARRIER_BID_ON_OPEN = 1, 2, 4


@pytest.fixture
def client(tmp_path, monkeypatch) -> TestClient:
    """Client against an isolated database seeded with the demo fixtures."""
    monkeypatch.setattr(settings, "database_url", str(tmp_path / "copallet-test.db"))
    reset_db()
    init_db()
    seed_database()
    return TestClient(app)


@pytest.fixture
def login(client):
    def _login(email: str, password: str | None = None) -> dict:
        response = client.post(
            "/api/auth/login",
            json={"email": email, "password": password or settings.seed_password},
        )
        assert response.status_code == 200, response.text
        return {"Authorization": f"Bearer {response.json()['tokens']['access_token']}"}

    return _login


@pytest.fixture
def shipper_headers(login) -> dict:
    return login("shipper@example.com")


@pytest.fixture
def shipper2_headers(login) -> dict:
    return login("logistics@company.com")


@pytest.fixture
def carrier_headers(login) -> dict:
    return login("carrier@example.com")


@pytest.fixture
def carrier2_headers(login) -> dict:
    return login("fleet@transport.com")


@pytest.fixture
def pending_headers(login) -> dict:
    return login("driver@freight.com")


@pytest.fixture
def admin_headers(login) -> dict:
    return login("admin@copallet.com")


@pytest.fixture
def shipment_payload() -> dict:
    """Utrecht → Berlin, two pallets, pickup tomorrow."""
    pickup = datetime.now(timezone.utc) + timedelta(days=1)
    delivery = pickup + timedelta(days=1)
    return {
        "from_address": {
            "street": "1 Dock Road", "city": "Utrecht", "postal_code": "3511 AB",
            "country": "Netherlands", "latitude": 52.0907, "longitude": 5.1214,
        },
        "to_address": {
            "street": "2 Lager Strasse", "city": "Berlin", "postal_code": "10115",
            "country": "Germany", "latitude": 52.52, "longitude": 13.405,
        },
        "pickup_window": {"start": pickup.isoformat(), "end": (pickup + timedelta(hours=4)).isoformat()},
        "delivery_window": {"start": delivery.isoformat(), "end": (delivery + timedelta(hours=4)).isoformat()},
        "pallets": {"quantity": 2, "dimensions": {"length": 120, "width": 80, "height": 100}, "weight": 900},
        "constraints": {"tail_lift_required": True},
        "notes": "Fragile",
        "price_guidance": {"min": 400, "max": 600},
    }
