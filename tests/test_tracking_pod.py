"""
Tests for GPS tracking, the tracking simulator, proof of delivery and ratings.
"""

from __future__ import annotations

import random

import pytest

from conftest import (
    ASSIGNED_SHIPMENT,
    CARRIER2_ID,
    CARRIER_ID,
    DELIVERED_SHIPMENT,
    IN_TRANSIT_SHIPMENT,
    OPEN_SHIPMENT,
    SHIPPER_ID,
)
from copallet_api.app.services.tracking_service import SIMULATION_JITTER_DEGREES, simulated_position


class TestSimulatedPosition:
    def test_halfway_point(self) -> None:
        position = simulated_position((50.0, 4.0), (52.0, 6.0), 5, 10, rng=random.Random(7))
        assert position["progress"] == 0.5
        assert position["latitude"] == pytest.approx(51.0, abs=SIMULATION_JITTER_DEGREES)
        assert position["longitude"] == pytest.approx(5.0, abs=SIMULATION_JITTER_DEGREES)

    def test_readings_stay_in_range(self) -> None:
        rng = random.Random(1)
        for step in range(12):
            position = simulated_position((50.0, 4.0), (52.0, 6.0), step, 10, rng=rng)
            assert 3 <= position["accuracy"] <= 13
            assert 50 <= position["speed"] <= 90
            assert 45 <= position["heading"] <= 75
            assert position["progress"] <= 1.0


class TestTracking:
    def test_history_of_seeded_trip(self, client, shipper_headers) -> None:
        body = client.get(f"/api/shipments/{IN_TRANSIT_SHIPMENT}/tracking", headers=shipper_headers).json()
        assert len(body["tracking_points"]) == 3
        assert body["current_location"]["status"] == "Near destination"

    def test_history_is_private(self, client, carrier_headers) -> None:
        response = client.get(f"/api/shipments/{IN_TRANSIT_SHIPMENT}/tracking", headers=carrier_headers)
        assert response.status_code == 403

    def test_first_point_marks_pickup(self, client, carrier_headers, shipper2_headers) -> None:
        response = client.post(
            f"/api/shipments/{ASSIGNED_SHIPMENT}/tracking",
            json={"latitude": 52.09, "longitude": 5.12, "status": "Picked up", "speed": 0},
            headers=carrier_headers,
        )
        assert response.status_code == 201
        assert response.json()["status"] == "Picked up"
        shipment = client.get(f"/api/shipments/{ASSIGNED_SHIPMENT}", headers=shipper2_headers).json()["shipment"]
        assert shipment["status"] == "in-transit"
        notifications = client.get("/api/notifications", headers=shipper2_headers).json()["notifications"]
        assert any(n["type"] == "shipment_picked_up" for n in notifications)

    def test_only_assigned_carrier_tracks(self, client, carrier2_headers) -> None:
        response = client.post(
            f"/api/shipments/{ASSIGNED_SHIPMENT}/tracking",
            json={"latitude": 52.09, "longitude": 5.12},
            headers=carrier2_headers,
        )
        assert response.status_code == 403

    def test_delivered_shipment_cannot_be_tracked(self, client, carrier_headers) -> None:
        response = client.post(
            f"/api/shipments/{DELIVERED_SHIPMENT}/tracking",
            json={"latitude": 50.85, "longitude": 4.35},
            headers=carrier_headers,
        )
        assert response.status_code == 400

    def test_out_of_range_coordinates(self, client, carrier2_headers) -> None:
        response = client.post(
            f"/api/shipments/{IN_TRANSIT_SHIPMENT}/tracking",
            json={"latitude": 95, "longitude": 13.4},
            headers=carrier2_headers,
        )
        assert response.status_code == 422

    def test_simulation_steps(self, client, carrier2_headers) -> None:
        url = f"/api/shipments/{IN_TRANSIT_SHIPMENT}/tracking/simulate"
        middle = client.post(url, json={"step": 10, "total_steps": 20}, headers=carrier2_headers).json()
        assert middle["progress"] == 0.5
        assert middle["completed"] is False
        last = client.post(url, json={"step": 20, "total_steps": 20}, headers=carrier2_headers).json()
        assert last["completed"] is True
        assert last["point"]["status"] == "arrived"
        # Berlin is the destination
        assert last["point"]["latitude"] == pytest.approx(52.52, abs=SIMULATION_JITTER_DEGREES)


class TestProofOfDelivery:
    def test_pod_delivers_shipment(self, client, carrier2_headers, shipper_headers) -> None:
        response = client.post(
            f"/api/shipments/{IN_TRANSIT_SHIPMENT}/pod",
            json={"recipient_name": "Klaus Weber", "delivery_notes": "Dock 4"},
            headers=carrier2_headers,
        )
        assert response.status_code == 201
        assert response.json()["pod"]["carrier_id"] == CARRIER2_ID
        shipment = client.get(f"/api/shipments/{IN_TRANSIT_SHIPMENT}", headers=shipper_headers).json()["shipment"]
        assert shipment["status"] == "delivered"
        pods = client.get(f"/api/shipments/{IN_TRANSIT_SHIPMENT}/pod", headers=shipper_headers).json()["pods"]
        assert [p["recipient_name"] for p in pods] == ["Klaus Weber"]
        notifications = client.get("/api/notifications", headers=shipper_headers).json()["notifications"]
        assert any(n["type"] == "shipment_delivered" and n["shipment_id"] == IN_TRANSIT_SHIPMENT
                   for n in notifications)

    def test_second_pod_conflicts(self, client, carrier_headers) -> None:
        response = client.post(
            f"/api/shipments/{DELIVERED_SHIPMENT}/pod", json={"recipient_name": "Again"}, headers=carrier_headers
        )
        assert response.status_code == 409

    def test_pod_requires_assignment(self, client, carrier_headers) -> None:
        response = client.post(
            f"/api/shipments/{OPEN_SHIPMENT}/pod", json={"recipient_name": "Nobody"}, headers=carrier_headers
        )
        assert response.status_code == 403

    def test_rejected_carrier_is_locked_out(self, client, admin_headers, carrier2_headers) -> None:
        client.put(
            f"/api/admin/users/{CARRIER2_ID}/verification",
            json={"status": "rejected", "rejection_reason": "Licence expired"},
            headers=admin_headers,
        )
        tracking = client.post(
            f"/api/shipments/{IN_TRANSIT_SHIPMENT}/tracking",
            json={"latitude": 52.4, "longitude": 13.1},
            headers=carrier2_headers,
        )
        assert tracking.status_code == 403
        assert tracking.json()["detail"]["verification_status"] == "rejected"
        pod = client.post(
            f"/api/shipments/{IN_TRANSIT_SHIPMENT}/pod", json={"recipient_name": "Klaus Weber"},
            headers=carrier2_headers,
        )
        assert pod.status_code == 403
        assert client.get(f"/api/shipments/{IN_TRANSIT_SHIPMENT}/tracking", headers=carrier2_headers).status_code == 403


class TestRatings:
    def test_seeded_ratings(self, client) -> None:
        body = client.get(f"/api/ratings/users/{CARRIER_ID}").json()
        assert body["count"] == 1
        assert body["average"] == 5

    def test_rate_after_delivery(self, client, carrier2_headers, shipper_headers) -> None:
        client.post(
            f"/api/shipments/{IN_TRANSIT_SHIPMENT}/pod", json={"recipient_name": "Klaus"}, headers=carrier2_headers
        )
        response = client.post(
            "/api/ratings",
            json={"shipment_id": IN_TRANSIT_SHIPMENT, "rating": 4, "comment": " Smooth trip "},
            headers=shipper_headers,
        )
        assert response.status_code == 201
        assert response.json()["ratee_id"] == CARRIER2_ID
        assert client.get(f"/api/ratings/users/{CARRIER2_ID}").json()["average"] == 4

    def test_cannot_rate_twice(self, client, shipper2_headers) -> None:
        response = client.post(
            "/api/ratings", json={"shipment_id": DELIVERED_SHIPMENT, "rating": 3}, headers=shipper2_headers
        )
        assert response.status_code == 409

    def test_cannot_rate_undelivered(self, client, shipper_headers) -> None:
        response = client.post(
            "/api/ratings", json={"shipment_id": IN_TRANSIT_SHIPMENT, "rating": 5}, headers=shipper_headers
        )
        assert response.status_code == 400

    def test_outsider_cannot_rate(self, client, carrier2_headers) -> None:
        response = client.post(
            "/api/ratings", json={"shipment_id": DELIVERED_SHIPMENT, "rating": 1}, headers=carrier2_headers
        )
        assert response.status_code == 403

    def test_rating_range(self, client, shipper2_headers) -> None:
        response = client.post(
            "/api/ratings", json={"shipment_id": DELIVERED_SHIPMENT, "rating": 6}, headers=shipper2_headers
        )
        assert response.status_code == 422

    def test_unknown_user(self, client) -> None:
        assert client.get("/api/ratings/users/999").status_code == 404

    def test_carrier_rates_shipper(self, client, carrier2_headers) -> None:
        client.post(
            f"/api/shipments/{IN_TRANSIT_SHIPMENT}/pod", json={"recipient_name": "Klaus"}, headers=carrier2_headers
        )
        response = client.post(
            "/api/ratings", json={"shipment_id": IN_TRANSIT_SHIPMENT, "rating": 5}, headers=carrier2_headers
        )
        assert response.status_code == 201
        assert response.json()["ratee_id"] == SHIPPER_ID
