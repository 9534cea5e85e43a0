"""
API tests for the shipment lifecycle and bidding.
"""

from __future__ import annotations

from conftest import (
    ASSIGNED_SHIPMENT,
    CARRIER2_BID_ON_OPEN,
    CARRIER_BID_ON_OPEN,
    CARRIER_ID,
    DELIVERED_SHIPMENT,
    OPEN_SHIPMENT,
    PENDING_CARRIER_BID_ON_OPEN,
    SHIPPER_ID,
)


def _statuses(shipments: list) -> set:
    return {s["status"] for s in shipments}


class TestShipmentListing:
    def test_shipper_sees_own_shipments(self, client, shipper_headers) -> None:
        body = client.get("/api/shipments", headers=shipper_headers).json()
        assert body["total"] == 3
        assert {s["shipper_id"] for s in body["shipments"]} == {SHIPPER_ID}

    def test_carrier_sees_marketplace(self, client, carrier_headers) -> None:
        body = client.get("/api/shipments", headers=carrier_headers).json()
        assert body["total"] == 3
        assert _statuses(body["shipments"]) == {"open"}

    def test_admin_sees_everything(self, client, admin_headers) -> None:
        assert client.get("/api/shipments", headers=admin_headers).json()["total"] == 6

    def test_status_filter(self, client, admin_headers) -> None:
        body = client.get("/api/shipments", params={"status": "delivered"}, headers=admin_headers).json()
        assert [s["id"] for s in body["shipments"]] == [DELIVERED_SHIPMENT]

    def test_bid_count(self, client, shipper_headers) -> None:
        shipment = client.get(f"/api/shipments/{OPEN_SHIPMENT}", headers=shipper_headers).json()["shipment"]
        assert shipment["bid_count"] == 3

    def test_detail_includes_route(self, client, carrier_headers) -> None:
        response = client.get(f"/api/shipments/{OPEN_SHIPMENT}", headers=carrier_headers)
        assert response.status_code == 200
        route = response.json()["route"]
        assert route["route_type"] == "combined"
        assert route["distance"] > 0
        assert route["summary"].startswith("Combined route")

    def test_stranger_cannot_view(self, client, shipper2_headers) -> None:
        response = client.get(f"/api/shipments/{OPEN_SHIPMENT}", headers=shipper2_headers)
        assert response.status_code == 403

    def test_unknown_shipment(self, client, admin_headers) -> None:
        assert client.get("/api/shipments/999", headers=admin_headers).status_code == 404


class TestShipmentLifecycle:
    def test_create_and_publish(self, client, shipper_headers, carrier_headers, shipment_payload) -> None:
        created = client.post("/api/shipments", json=shipment_payload, headers=shipper_headers)
        assert created.status_code == 201
        shipment = created.json()["shipment"]
        assert shipment["status"] == "draft"
        assert shipment["constraints"]["tail_lift_required"] is True
        assert shipment["constraints"]["forklift_required"] is False

        # Drafts stay out of the marketplace
        ids = [s["id"] for s in client.get("/api/shipments", headers=carrier_headers).json()["shipments"]]
        assert shipment["id"] not in ids

        published = client.post(f"/api/shipments/{shipment['id']}/publish", headers=shipper_headers)
        assert published.status_code == 200
        assert published.json()["shipment"]["status"] == "open"
        again = client.post(f"/api/shipments/{shipment['id']}/publish", headers=shipper_headers)
        assert again.status_code == 400

    def test_carrier_cannot_create(self, client, carrier_headers, shipment_payload) -> None:
        assert client.post("/api/shipments", json=shipment_payload, headers=carrier_headers).status_code == 403

    def test_unverified_shipper_cannot_create(self, client, shipment_payload) -> None:
        signup = client.post(
            "/api/auth/signup", json={"email": "fresh@example.com", "password": "secret1", "role": "shipper"}
        ).json()
        headers = {"Authorization": f"Bearer {signup['tokens']['access_token']}"}
        assert client.post("/api/shipments", json=shipment_payload, headers=headers).status_code == 403

    def test_delivery_before_pickup_is_rejected(self, client, shipper_headers, shipment_payload) -> None:
        shipment_payload["delivery_window"] = {
            "start": "2020-01-01T00:00:00Z",
            "end": "2020-01-01T04:00:00Z",
        }
        assert client.post("/api/shipments", json=shipment_payload, headers=shipper_headers).status_code == 422

    def test_update_open_shipment(self, client, shipper_headers) -> None:
        response = client.put(
            f"/api/shipments/{OPEN_SHIPMENT}", json={"notes": "Call before arrival"}, headers=shipper_headers
        )
        assert response.status_code == 200
        assert response.json()["shipment"]["notes"] == "Call before arrival"

    def test_assigned_shipment_is_frozen(self, client, shipper2_headers) -> None:
        response = client.put(
            f"/api/shipments/{ASSIGNED_SHIPMENT}", json={"notes": "changed"}, headers=shipper2_headers
        )
        assert response.status_code == 400

    def test_cancel_declines_pending_bids(self, client, shipper_headers, carrier_headers) -> None:
        response = client.post(f"/api/shipments/{OPEN_SHIPMENT}/cancel", headers=shipper_headers)
        assert response.status_code == 200
        assert response.json()["shipment"]["status"] == "cancelled"
        bids = client.get(f"/api/shipments/{OPEN_SHIPMENT}/bids", headers=shipper_headers).json()["bids"]
        assert {b["status"] for b in bids} == {"declined"}
        notifications = client.get("/api/notifications", headers=carrier_headers).json()["notifications"]
        assert any(n["type"] == "bid_declined" and n["shipment_id"] == OPEN_SHIPMENT for n in notifications)

    def test_carrier_marks_pickup(self, client, carrier_headers, carrier2_headers) -> None:
        url = f"/api/shipments/{ASSIGNED_SHIPMENT}/status"
        assert client.put(url, json={"status": "in-transit"}, headers=carrier2_headers).status_code == 403
        assert client.put(url, json={"status": "delivered"}, headers=carrier_headers).status_code == 400
        response = client.put(url, json={"status": "in-transit"}, headers=carrier_headers)
        assert response.status_code == 200
        assert response.json()["shipment"]["status"] == "in-transit"


class TestBidding:
    def test_carrier_bids_on_new_shipment(self, client, shipper_headers, carrier_headers, shipment_payload) -> None:
        shipment_id = client.post("/api/shipments", json=shipment_payload, headers=shipper_headers).json()[
            "shipment"]["id"]
        # Drafts cannot be bid on
        draft_bid = client.post(f"/api/shipments/{shipment_id}/bids", json={"price": 500}, headers=carrier_headers)
        assert draft_bid.status_code == 400
        client.post(f"/api/shipments/{shipment_id}/publish", headers=shipper_headers)

        response = client.post(
            f"/api/shipments/{shipment_id}/bids",
            json={"price": 510, "message": "  Can load tomorrow  "},
            headers=carrier_headers,
        )
        assert response.status_code == 201
        bid = response.json()["bid"]
        assert bid["status"] == "pending"
        assert bid["message"] == "Can load tomorrow"
        assert bid["carrier_company"] == "Fast Transport"

        notifications = client.get("/api/notifications", headers=shipper_headers).json()["notifications"]
        assert any(n["type"] == "bid_received" and n["shipment_id"] == shipment_id for n in notifications)

    def test_second_pending_bid_conflicts(self, client, carrier_headers) -> None:
        response = client.post(f"/api/shipments/{OPEN_SHIPMENT}/bids", json={"price": 250}, headers=carrier_headers)
        assert response.status_code == 409

    def test_unverified_carrier_cannot_bid(self, client, pending_headers) -> None:
        response = client.post(f"/api/shipments/{OPEN_SHIPMENT}/bids", json={"price": 250}, headers=pending_headers)
        assert response.status_code == 403

    def test_shipper_cannot_bid(self, client, shipper2_headers) -> None:
        response = client.post(f"/api/shipments/{OPEN_SHIPMENT}/bids", json={"price": 250}, headers=shipper2_headers)
        assert response.status_code == 403

    def test_owner_sees_all_bids_cheapest_first(self, client, shipper_headers) -> None:
        bids = client.get(f"/api/shipments/{OPEN_SHIPMENT}/bids", headers=shipper_headers).json()["bids"]
        assert [b["price"] for b in bids] == [280, 300, 320]

    def test_carrier_sees_only_own_bids(self, client, carrier_headers) -> None:
        bids = client.get(f"/api/shipments/{OPEN_SHIPMENT}/bids", headers=carrier_headers).json()["bids"]
        assert [b["id"] for b in bids] == [CARRIER_BID_ON_OPEN]
        mine = client.get("/api/shipments/bids", headers=carrier_headers).json()["bids"]
        assert {b["carrier_id"] for b in mine} == {CARRIER_ID}

    def test_accept_assigns_and_declines_the_rest(
        self, client, shipper_headers, carrier_headers, carrier2_headers
    ) -> None:
        response = client.put(
            f"/api/shipments/{OPEN_SHIPMENT}/bids/{CARRIER_BID_ON_OPEN}/accept", headers=shipper_headers
        )
        assert response.status_code == 200
        body = response.json()
        assert body["bid"]["status"] == "accepted"
        assert body["shipment"]["status"] == "assigned"
        assert body["shipment"]["assigned_carrier_id"] == CARRIER_ID
        assert body["shipment"]["accepted_price"] == 280

        bids = client.get(f"/api/shipments/{OPEN_SHIPMENT}/bids", headers=shipper_headers).json()["bids"]
        assert {b["id"]: b["status"] for b in bids} == {
            CARRIER_BID_ON_OPEN: "accepted",
            CARRIER2_BID_ON_OPEN: "declined",
            PENDING_CARRIER_BID_ON_OPEN: "declined",
        }
        carrier_types = {n["type"] for n in client.get("/api/notifications", headers=carrier_headers).json()[
            "notifications"]}
        assert {"bid_accepted", "shipment_assigned"} <= carrier_types
        carrier2_types = {n["type"] for n in client.get("/api/notifications", headers=carrier2_headers).json()[
            "notifications"]}
        assert "bid_declined" in carrier2_types

    def test_only_one_bid_can_win(self, client, shipper_headers) -> None:
        first = client.put(f"/api/shipments/{OPEN_SHIPMENT}/bids/{CARRIER_BID_ON_OPEN}/accept", headers=shipper_headers)
        assert first.status_code == 200
        second = client.put(
            f"/api/shipments/{OPEN_SHIPMENT}/bids/{CARRIER2_BID_ON_OPEN}/accept", headers=shipper_headers
        )
        assert second.status_code == 400

    def test_only_owner_accepts(self, client, shipper2_headers) -> None:
        response = client.put(
            f"/api/shipments/{OPEN_SHIPMENT}/bids/{CARRIER_BID_ON_OPEN}/accept", headers=shipper2_headers
        )
        assert response.status_code == 403

    def test_bid_must_belong_to_shipment(self, client, shipper_headers) -> None:
        response = client.put(f"/api/shipments/{OPEN_SHIPMENT}/bids/8/accept", headers=shipper_headers)
        assert response.status_code == 404

    def test_decline(self, client, shipper_headers) -> None:
        response = client.put(
            f"/api/shipments/{OPEN_SHIPMENT}/bids/{CARRIER2_BID_ON_OPEN}/decline", headers=shipper_headers
        )
        assert response.status_code == 200
        assert response.json()["bid"]["status"] == "declined"

    def test_withdraw(self, client, carrier_headers, carrier2_headers) -> None:
        url = f"/api/shipments/{OPEN_SHIPMENT}/bids/{CARRIER_BID_ON_OPEN}"
        assert client.delete(url, headers=carrier2_headers).status_code == 403
        assert client.delete(url, headers=carrier_headers).status_code == 204
        # Withdrawing frees the slot for a new bid
        again = client.post(f"/api/shipments/{OPEN_SHIPMENT}/bids", json={"price": 260}, headers=carrier_headers)
        assert again.status_code == 201

    def test_withdrawing_a_declined_bid_is_rejected(self, client, shipper_headers, carrier_headers) -> None:
        url = f"/api/shipments/{OPEN_SHIPMENT}/bids/{CARRIER_BID_ON_OPEN}"
        assert client.put(f"{url}/decline", headers=shipper_headers).status_code == 200
        response = client.delete(url, headers=carrier_headers)
        assert response.status_code == 400
        assert response.json()["detail"] == "Only pending bids can be withdrawn"

    def test_bid_roi_with_stored_cost_model(self, client, carrier_headers) -> None:
        response = client.get(
            f"/api/shipments/{OPEN_SHIPMENT}/bids/{CARRIER_BID_ON_OPEN}/roi",
            params={"cost_model_id": 1, "deadhead_km": 10},
            headers=carrier_headers,
        )
        assert response.status_code == 200
        result = response.json()
        assert result["route_km"] > 0
        assert result["deadhead_km"] == 10
        assert result["profit"] > 0

    def test_bid_roi_with_foreign_cost_model(self, client, carrier_headers) -> None:
        response = client.get(
            f"/api/shipments/{OPEN_SHIPMENT}/bids/{CARRIER_BID_ON_OPEN}/roi",
            params={"cost_model_id": 2},
            headers=carrier_headers,
        )
        assert response.status_code == 404
