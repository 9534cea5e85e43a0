"""
API tests for the admin panel and the service endpoints.
"""

from __future__ import annotations

from conftest import ADMIN_ID, OPEN_SHIPMENT, PENDING_CARRIER_ID, SHIPPER_ID
from copallet_api.app.core.config import settings


class TestServiceEndpoints:
    def test_health(self, client) -> None:
        body = client.get("/health").json()
        assert body["status"] == "OK"
        assert body["environment"] == settings.environment
        assert body["uptime"] >= 0

    def test_api_test(self, client) -> None:
        body = client.get("/api/test").json()
        assert body["version"] == settings.api_version
        assert "bidding" in body["features"]


class TestUsers:
    def test_list_and_filter(self, client, admin_headers) -> None:
        body = client.get("/api/admin/users", headers=admin_headers).json()
        assert body["total"] == 6
        carriers = client.get("/api/admin/users", params={"role": "carrier"}, headers=admin_headers).json()
        assert carriers["total"] == 3
        assert {u["company_name"] for u in carriers["users"]} >= {"Fast Transport", "Schmidt Logistics"}

    def test_non_admin_is_forbidden(self, client, shipper_headers) -> None:
        assert client.get("/api/admin/users", headers=shipper_headers).status_code == 403

    def test_pending_verifications(self, client, admin_headers) -> None:
        body = client.get("/api/admin/verifications", headers=admin_headers).json()
        assert [u["id"] for u in body["users"]] == [PENDING_CARRIER_ID]

    def test_approval_unlocks_bidding(self, client, admin_headers, pending_headers) -> None:
        response = client.put(
            f"/api/admin/users/{PENDING_CARRIER_ID}/verification",
            json={"status": "approved", "rejection_reason": "ignored"},
            headers=admin_headers,
        )
        assert response.status_code == 200
        user = response.json()["user"]
        assert user["verification_status"] == "approved"
        assert user["rejection_reason"] is None
        # Existing tokens pick up the decision immediately
        bid = client.post("/api/shipments/5/bids", json={"price": 999}, headers=pending_headers)
        assert bid.status_code == 201
        notifications = client.get("/api/notifications", headers=pending_headers).json()["notifications"]
        assert notifications[0]["type"] == "verification_approved"

    def test_rejection_keeps_reason(self, client, admin_headers, pending_headers) -> None:
        response = client.put(
            f"/api/admin/users/{PENDING_CARRIER_ID}/verification",
            json={"status": "rejected", "rejection_reason": "Missing insurance certificate"},
            headers=admin_headers,
        )
        assert response.json()["user"]["rejection_reason"] == "Missing insurance certificate"
        notifications = client.get("/api/notifications", headers=pending_headers).json()["notifications"]
        assert "Missing insurance certificate" in notifications[0]["message"]

    def test_admin_cannot_be_reverified(self, client, admin_headers) -> None:
        response = client.put(
            f"/api/admin/users/{ADMIN_ID}/verification", json={"status": "rejected"}, headers=admin_headers
        )
        assert response.status_code == 400

    def test_deactivation_revokes_access(self, client, admin_headers, shipper_headers) -> None:
        response = client.put(
            f"/api/admin/users/{SHIPPER_ID}/active", json={"is_active": False}, headers=admin_headers
        )
        assert response.status_code == 200
        assert response.json()["is_active"] is False
        assert client.get("/api/auth/me", headers=shipper_headers).status_code == 401
        login = client.post(
            "/api/auth/login", json={"email": "shipper@example.com", "password": settings.seed_password}
        )
        assert login.status_code == 401

    def test_admin_cannot_deactivate_self(self, client, admin_headers) -> None:
        response = client.put(f"/api/admin/users/{ADMIN_ID}/active", json={"is_active": False}, headers=admin_headers)
        assert response.status_code == 400

    def test_unknown_user(self, client, admin_headers) -> None:
        response = client.put("/api/admin/users/999/active", json={"is_active": True}, headers=admin_headers)
        assert response.status_code == 404


class TestStatsAndAudit:
    def test_platform_stats(self, client, admin_headers) -> None:
        stats = client.get("/api/admin/stats", headers=admin_headers).json()
        assert stats["users_total"] == 6
        assert stats["users_by_role"] == {"admin": 1, "carrier": 3, "shipper": 2}
        assert stats["shipments_total"] == 6
        assert stats["open_shipments"] == 3
        assert stats["bids_by_status"] == {"accepted": 3, "declined": 1, "pending": 7}
        assert stats["accepted_bid_value"] == 1910
        assert stats["average_rating"] == 4.5
        assert stats["blog_posts_published"] == 3

    def test_actions_are_audited(self, client, admin_headers, shipper_headers) -> None:
        client.post(f"/api/shipments/{OPEN_SHIPMENT}/cancel", headers=shipper_headers)
        logs = client.get(
            "/api/admin/audit-logs", params={"object_type": "shipment", "action": "cancel"}, headers=admin_headers
        ).json()["logs"]
        assert len(logs) == 1
        assert logs[0]["user_id"] == SHIPPER_ID
        assert logs[0]["object_id"] == OPEN_SHIPMENT
        assert logs[0]["details"] == {"declined_bids": 3}


class TestCalculatorEndpoints:
    def test_route(self, client) -> None:
        response = client.post(
            "/api/calculators/route",
            json={
                "from_address": {"latitude": 52.52, "longitude": 13.405},
                "to_address": {"city": "Munich", "latitude": 48.1351, "longitude": 11.582},
            },
        )
        assert response.status_code == 200
        assert response.json()["route_type"] == "road"

    def test_quote(self, client) -> None:
        body = client.post("/api/calculators/quote", json={"distance": 100, "pallets": 2, "weight": 3000,
                                                           "adr_required": True}).json()
        assert body["price"] == 620

    def test_quote_rejects_unknown_delivery_type(self, client) -> None:
        response = client.post("/api/calculators/quote", json={"distance": 100, "pallets": 2,
                                                               "delivery_type": "teleport"})
        assert response.status_code == 422

    def test_spend(self, client) -> None:
        body = client.post("/api/calculators/spend", json={"distance": 100, "pallets": 2,
                                                           "weight_per_pallet": 500}).json()
        assert body["total"] == 103

    def test_roi_inline(self, client) -> None:
        body = client.post(
            "/api/calculators/roi",
            json={
                "cost_model": {"cost_per_km": 1, "driver_cost_per_hour": 30, "load_time_minutes": 30,
                               "unload_time_minutes": 30, "average_speed_kmh": 60, "platform_fee_percentage": 10},
                "distance": 120,
                "bid_price": 400,
            },
        ).json()
        assert body["roi_percentage"] == 71.4

    def test_roi_needs_a_model(self, client) -> None:
        response = client.post("/api/calculators/roi", json={"distance": 120, "bid_price": 400})
        assert response.status_code == 422

    def test_roi_with_stored_model_requires_login(self, client, carrier_headers) -> None:
        payload = {"cost_model_id": 1, "distance": 120, "bid_price": 400}
        assert client.post("/api/calculators/roi", json=payload).status_code == 401
        response = client.post("/api/calculators/roi", json=payload, headers=carrier_headers)
        assert response.status_code == 200
        assert response.json()["route_km"] == 120

    def test_cost_preview(self, client) -> None:
        body = client.post(
            "/api/calculators/cost-preview",
            json={"cost_per_km": 1, "driver_cost_per_hour": 30, "load_time_minutes": 30, "unload_time_minutes": 30,
                  "average_speed_kmh": 60, "platform_fee_percentage": 10, "fuel_cost_per_km": 0.1,
                  "maintenance_cost_per_km": 0.05, "insurance_cost_per_km": 0.05,
                  "distance": 100, "duration_hours": 2},
        ).json()
        assert body["total_cost"] == 210
