"""
API tests for shipment messaging and the notification inbox.
"""

from __future__ import annotations

from conftest import ASSIGNED_SHIPMENT, CARRIER_ID, OPEN_SHIPMENT, SHIPPER_ID


def _message_notifications(client, headers) -> list:
    notifications = client.get("/api/notifications", headers=headers).json()["notifications"]
    return [n for n in notifications if n["type"] == "message_received"]


class TestMessages:
    def test_thread_is_oldest_first(self, client, carrier_headers) -> None:
        messages = client.get(f"/api/shipments/{OPEN_SHIPMENT}/messages", headers=carrier_headers).json()[
            "messages"]
        assert [m["sender_id"] for m in messages] == [SHIPPER_ID, CARRIER_ID]
        assert [m["sender_role"] for m in messages] == ["shipper", "carrier"]

    def test_outsider_is_rejected(self, client, shipper2_headers) -> None:
        response = client.get(f"/api/shipments/{OPEN_SHIPMENT}/messages", headers=shipper2_headers)
        assert response.status_code == 403

    def test_admin_can_read(self, client, admin_headers) -> None:
        assert client.get(f"/api/shipments/{OPEN_SHIPMENT}/messages", headers=admin_headers).status_code == 200

    def test_unverified_bidder_cannot_read_or_write(self, client, pending_headers) -> None:
        url = f"/api/shipments/{OPEN_SHIPMENT}/messages"
        assert client.get(url, headers=pending_headers).status_code == 403
        response = client.post(url, json={"content": "Still interested"}, headers=pending_headers)
        assert response.status_code == 403
        assert response.json()["detail"]["message"] == "Account verification required"

    def test_shipper_message_reaches_all_bidders(
        self, client, shipper_headers, carrier_headers, carrier2_headers
    ) -> None:
        response = client.post(
            f"/api/shipments/{OPEN_SHIPMENT}/messages",
            json={"content": "  Loading dock closes at 17:00  "},
            headers=shipper_headers,
        )
        assert response.status_code == 201
        message = response.json()["message"]
        assert message["content"] == "Loading dock closes at 17:00"
        assert message["sender_role"] == "shipper"
        assert len(_message_notifications(client, carrier_headers)) == 1
        assert len(_message_notifications(client, carrier2_headers)) == 1
        assert _message_notifications(client, shipper_headers) == []

    def test_shipper_message_reaches_only_assigned_carrier(
        self, client, shipper2_headers, carrier_headers, carrier2_headers
    ) -> None:
        client.post(
            f"/api/shipments/{ASSIGNED_SHIPMENT}/messages", json={"content": "Gate code 4411"}, headers=shipper2_headers
        )
        assert len(_message_notifications(client, carrier_headers)) == 1
        assert _message_notifications(client, carrier2_headers) == []

    def test_carrier_message_reaches_shipper(self, client, carrier2_headers, shipper_headers) -> None:
        response = client.post(
            f"/api/shipments/{OPEN_SHIPMENT}/messages", json={"content": "Is a tail lift needed?"},
            headers=carrier2_headers,
        )
        assert response.status_code == 201
        notifications = _message_notifications(client, shipper_headers)
        assert [n["shipment_id"] for n in notifications] == [OPEN_SHIPMENT]

    def test_blank_message_is_rejected(self, client, shipper_headers) -> None:
        response = client.post(
            f"/api/shipments/{OPEN_SHIPMENT}/messages", json={"content": "   "}, headers=shipper_headers
        )
        assert response.status_code == 422


class TestNotifications:
    def test_inbox_is_newest_first_with_unread_count(self, client, shipper_headers) -> None:
        body = client.get("/api/notifications", headers=shipper_headers).json()
        assert len(body["notifications"]) == 2
        assert body["unread_count"] == 1
        ids = [n["id"] for n in body["notifications"]]
        assert ids == sorted(ids, reverse=True)

    def test_unread_filter(self, client, shipper_headers) -> None:
        body = client.get("/api/notifications", params={"unread_only": True}, headers=shipper_headers).json()
        assert [n["read"] for n in body["notifications"]] == [False]

    def test_mark_read(self, client, shipper_headers) -> None:
        unread = client.get("/api/notifications", params={"unread_only": True}, headers=shipper_headers).json()[
            "notifications"][0]
        response = client.put(f"/api/notifications/{unread['id']}/read", headers=shipper_headers)
        assert response.status_code == 200
        assert response.json()["read"] is True
        assert client.get("/api/notifications", headers=shipper_headers).json()["unread_count"] == 0

    def test_foreign_notification_is_not_found(self, client, carrier_headers, shipper_headers) -> None:
        own = client.get("/api/notifications", headers=shipper_headers).json()["notifications"][0]
        assert client.put(f"/api/notifications/{own['id']}/read", headers=carrier_headers).status_code == 404
        assert client.delete(f"/api/notifications/{own['id']}", headers=carrier_headers).status_code == 404

    def test_mark_all_read(self, client, shipper_headers, carrier2_headers) -> None:
        client.post(f"/api/shipments/{OPEN_SHIPMENT}/messages", json={"content": "Hello"}, headers=carrier2_headers)
        response = client.put("/api/notifications/read-all", headers=shipper_headers)
        assert response.status_code == 200
        assert client.get("/api/notifications", headers=shipper_headers).json()["unread_count"] == 0

    def test_delete(self, client, shipper_headers) -> None:
        own = client.get("/api/notifications", headers=shipper_headers).json()["notifications"][0]
        assert client.delete(f"/api/notifications/{own['id']}", headers=shipper_headers).status_code == 204
        remaining = client.get("/api/notifications", headers=shipper_headers).json()["notifications"]
        assert own["id"] not in [n["id"] for n in remaining]
