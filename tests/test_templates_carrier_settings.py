"""
API tests for shipment templates, auto-bid rules and cost models.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone


def _windows() -> dict:
    pickup = datetime.now(timezone.utc) + timedelta(days=2)
    return {
        "pickup_window": {"start": pickup.isoformat(), "end": (pickup + timedelta(hours=2)).isoformat()},
        "delivery_window": {
            "start": (pickup + timedelta(hours=6)).isoformat(),
            "end": (pickup + timedelta(hours=8)).isoformat(),
        },
    }


class TestTemplates:
    def test_list_own_templates(self, client, shipper_headers) -> None:
        templates = client.get("/api/templates", headers=shipper_headers).json()
        assert [t["name"] for t in templates] == ["Electronics - Amsterdam to Rotterdam"]

    def test_crud(self, client, shipper_headers, shipment_payload) -> None:
        body = {
            "name": "Weekly Berlin run",
            "from_address": shipment_payload["from_address"],
            "to_address": shipment_payload["to_address"],
            "pallets": shipment_payload["pallets"],
            "adr_required": True,
        }
        created = client.post("/api/templates", json=body, headers=shipper_headers)
        assert created.status_code == 201
        template_id = created.json()["id"]
        assert created.json()["constraints"]["tail_lift_required"] is False

        updated = client.put(f"/api/templates/{template_id}", json={"name": "Biweekly Berlin run"},
                             headers=shipper_headers)
        assert updated.status_code == 200
        assert updated.json()["name"] == "Biweekly Berlin run"
        assert updated.json()["adr_required"] is True

        assert client.delete(f"/api/templates/{template_id}", headers=shipper_headers).status_code == 204
        assert client.get(f"/api/templates/{template_id}", headers=shipper_headers).status_code == 404

    def test_foreign_template(self, client, shipper_headers) -> None:
        assert client.get("/api/templates/2", headers=shipper_headers).status_code == 403

    def test_carrier_has_no_templates(self, client, carrier_headers) -> None:
        assert client.get("/api/templates", headers=carrier_headers).status_code == 403

    def test_shipment_from_template(self, client, shipper_headers) -> None:
        response = client.post("/api/templates/1/shipments", json=_windows(), headers=shipper_headers)
        assert response.status_code == 201
        shipment = response.json()["shipment"]
        assert shipment["status"] == "draft"
        assert shipment["from_address"]["city"] == "Amsterdam"
        assert shipment["pallets"]["quantity"] == 2
        assert shipment["notes"] == "Standard electronics transport template"


class TestAutoBidRules:
    def test_list_own_rules(self, client, carrier_headers) -> None:
        rules = client.get("/api/auto-bid-rules", headers=carrier_headers).json()
        assert [r["name"] for r in rules] == ["Standard Pallet Transport", "ADR Dangerous Goods"]

    def test_create_update_delete(self, client, carrier2_headers) -> None:
        created = client.post(
            "/api/auto-bid-rules",
            json={"name": "Benelux shuttle", "from_city": "Antwerp", "max_bid_amount": 450},
            headers=carrier2_headers,
        )
        assert created.status_code == 201
        rule = created.json()
        assert rule["is_active"] is True

        updated = client.put(f"/api/auto-bid-rules/{rule['id']}", json={"is_active": False},
                             headers=carrier2_headers)
        assert updated.json()["is_active"] is False
        assert updated.json()["from_city"] == "Antwerp"

        assert client.delete(f"/api/auto-bid-rules/{rule['id']}", headers=carrier2_headers).status_code == 204

    def test_other_carriers_rule_is_not_found(self, client, carrier2_headers) -> None:
        response = client.put("/api/auto-bid-rules/1", json={"name": "Mine now"}, headers=carrier2_headers)
        assert response.status_code == 404

    def test_shippers_cannot_manage_rules(self, client, shipper_headers) -> None:
        assert client.get("/api/auto-bid-rules", headers=shipper_headers).status_code == 403


class TestCostModels:
    def test_list_and_get(self, client, carrier2_headers) -> None:
        models = client.get("/api/cost-models", headers=carrier2_headers).json()
        assert {m["name"] for m in models} == {"Premium Service", "Economy Service"}
        model = client.get(f"/api/cost-models/{models[0]['id']}", headers=carrier2_headers).json()
        assert model["carrier_id"] == models[0]["carrier_id"]

    def test_create_and_update(self, client, carrier_headers) -> None:
        created = client.post(
            "/api/cost-models",
            json={"name": "Night run", "cost_per_km": 0.5, "driver_cost_per_hour": 35, "average_speed_kmh": 75},
            headers=carrier_headers,
        )
        assert created.status_code == 201
        model_id = created.json()["id"]
        assert created.json()["platform_fee_percentage"] == 0

        updated = client.put(f"/api/cost-models/{model_id}", json={"platform_fee_percentage": 8.5},
                             headers=carrier_headers)
        assert updated.status_code == 200
        assert updated.json()["platform_fee_percentage"] == 8.5
        assert updated.json()["cost_per_km"] == 0.5

    def test_invalid_speed(self, client, carrier_headers) -> None:
        response = client.post(
            "/api/cost-models",
            json={"name": "Broken", "cost_per_km": 0.5, "driver_cost_per_hour": 35, "average_speed_kmh": 0},
            headers=carrier_headers,
        )
        assert response.status_code == 422

    def test_other_carriers_model_is_not_found(self, client, carrier_headers) -> None:
        assert client.get("/api/cost-models/2", headers=carrier_headers).status_code == 404
        assert client.delete("/api/cost-models/2", headers=carrier_headers).status_code == 404

    def test_delete(self, client, carrier_headers) -> None:
        assert client.delete("/api/cost-models/1", headers=carrier_headers).status_code == 204
        assert client.get("/api/cost-models", headers=carrier_headers).json() == []
