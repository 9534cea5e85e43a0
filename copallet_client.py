"""CoPallet API client.

A thin wrapper around the CoPallet REST API built on ``requests``.  It
covers the flows a script or integration typically needs:

* :meth:`signup`, :meth:`login`, :meth:`refresh` and :meth:`me` for
  accounts and tokens.  ``login`` and ``signup`` remember the returned
  tokens for subsequent calls.
* shipments: :meth:`list_shipments`, :meth:`create_shipment`,
  :meth:`get_shipment` and :meth:`publish_shipment`.
* bidding: :meth:`list_bids`, :meth:`place_bid` and :meth:`accept_bid`.
* tracking and delivery: :meth:`get_tracking`, :meth:`add_tracking_point`
  and :meth:`submit_pod`.
* :meth:`get_messages`, :meth:`send_message`, :meth:`get_notifications`,
  :meth:`get_analytics` and the public calculators.

Every method returns a tuple ``(data, error)``.  On success ``error``
is ``None``; on failure ``data`` is ``None`` (or an empty list for list
calls) and ``error`` is a dict with ``status_code`` and ``message``.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Tuple

import requests


logger = logging.getLogger(__name__)

Result = Tuple[Optional[Dict[str, Any]], Optional[Dict[str, Any]]]
ListResult = Tuple[List[Dict[str, Any]], Optional[Dict[str, Any]]]


class CoPalletAPI:
    """Client for the CoPallet freight marketplace API."""

    def __init__(
        self,
        base_url: str,
        access_token: Optional[str] = None,
        session: Optional[requests.Session] = None,
        timeout: float = 15,
    ) -> None:
        """Initialise the API client.

        Args:
            base_url: Server URL without the ``/api`` prefix, e.g.
                ``http://localhost:8000``.
            access_token: Optional bearer token to start with.
            session: Optional requests session.  If not supplied a
                session will be created automatically.
            timeout: Per-request timeout in seconds.
        """
        self.base_url = base_url.rstrip("/")
        self.access_token = access_token
        self.refresh_token: Optional[str] = None
        self.session = session or requests.Session()
        self.timeout = timeout

    def _request(
        self, method: str, path: str, *, params: Dict[str, Any] | None = None,
        json_body: Any | None = None
    ) -> Result:
        """Perform an HTTP request to the API.

        Args:
            method: HTTP method (``GET``, ``POST``, ``PUT``, ``DELETE``).
            path: Path relative to ``/api`` (e.g. ``/shipments``).
            params: Query parameters to include in the request.
            json_body: JSON body to send with the request.
        Returns:
            A tuple ``(data, error)`` as described in the module
            docstring.  Empty responses (204) yield ``(None, None)``.
        """
        url = f"{self.base_url}/api{path}"
        headers: Dict[str, str] = {}
        if self.access_token:
            headers["Authorization"] = f"Bearer {self.access_token}"
        try:
            logger.debug("Sending %s request to %s", method, url)
            response = self.session.request(
                method=method,
                url=url,
                params=params,
                json=json_body,
                headers=headers,
                timeout=self.timeout,
            )
            response.raise_for_status()
            if response.content:
                return response.json(), None
            return None, None
        except requests.HTTPError as exc:
            status = exc.response.status_code if exc.response is not None else None
            message = ""
            if exc.response is not None:
                try:
                    err_json = exc.response.json()
                    detail = err_json.get("detail") or err_json.get("message") or err_json
                    message = detail if isinstance(detail, str) else str(detail)
                except ValueError:
                    message = exc.response.text
            if not message:
                message = str(exc)
            logger.error("API request failed (%s): %s", status, message)
            return None, {"status_code": status, "message": message}
        except requests.RequestException as exc:
            logger.error("API request failed: %s", exc)
            return None, {"status_code": None, "message": str(exc)}

    def _list(self, path: str, key: str, params: Dict[str, Any] | None = None) -> ListResult:
        data, error = self._request("GET", path, params=params)
        if error:
            return [], error
        return (data or {}).get(key, []), None

    def _remember_tokens(self, data: Optional[Dict[str, Any]]) -> None:
        tokens = (data or {}).get("tokens") or {}
        if tokens.get("access_token"):
            self.access_token = tokens["access_token"]
            self.refresh_token = tokens.get("refresh_token")

    # ------------------------------------------------------------------
    # Accounts
    # ------------------------------------------------------------------
    def signup(self, email: str, password: str, role: str) -> Result:
        data, error = self._request(
            "POST", "/auth/signup", json_body={"email": email, "password": password, "role": role}
        )
        self._remember_tokens(data)
        return data, error

    def login(self, email: str, password: str) -> Result:
        """Log in and keep the returned tokens for later calls."""
        data, error = self._request("POST", "/auth/login", json_body={"email": email, "password": password})
        self._remember_tokens(data)
        return data, error

    def refresh(self) -> Result:
        data, error = self._request("POST", "/auth/refresh", json_body={"refresh_token": self.refresh_token})
        self._remember_tokens(data)
        return data, error

    def me(self) -> Result:
        return self._request("GET", "/auth/me")

    # ------------------------------------------------------------------
    # Shipments and bids
    # ------------------------------------------------------------------
    def list_shipments(self, status: Optional[str] = None) -> ListResult:
        return self._list("/shipments", "shipments", {"status": status} if status else None)

    def create_shipment(self, payload: Dict[str, Any]) -> Result:
        return self._request("POST", "/shipments", json_body=payload)

    def get_shipment(self, shipment_id: int) -> Result:
        return self._request("GET", f"/shipments/{shipment_id}")

    def publish_shipment(self, shipment_id: int) -> Result:
        return self._request("POST", f"/shipments/{shipment_id}/publish")

    def list_bids(self, shipment_id: Optional[int] = None) -> ListResult:
        """Bids on one shipment, or the caller's bids when no id is given."""
        if shipment_id is None:
            return self._list("/shipments/bids", "bids")
        return self._list(f"/shipments/{shipment_id}/bids", "bids")

    def place_bid(self, shipment_id: int, price: float, message: Optional[str] = None,
                  eta_pickup: Optional[str] = None) -> Result:
        payload: Dict[str, Any] = {"price": price}
        if message:
            payload["message"] = message
        if eta_pickup:
            payload["eta_pickup"] = eta_pickup
        return self._request("POST", f"/shipments/{shipment_id}/bids", json_body=payload)

    def accept_bid(self, shipment_id: int, bid_id: int) -> Result:
        return self._request("PUT", f"/shipments/{shipment_id}/bids/{bid_id}/accept")

    # ------------------------------------------------------------------
    # Tracking, delivery and messages
    # ------------------------------------------------------------------
    def get_tracking(self, shipment_id: int) -> Result:
        return self._request("GET", f"/shipments/{shipment_id}/tracking")

    def add_tracking_point(self, shipment_id: int, latitude: float, longitude: float, **extra: Any) -> Result:
        payload = {"latitude": latitude, "longitude": longitude, **extra}
        return self._request("POST", f"/shipments/{shipment_id}/tracking", json_body=payload)

    def submit_pod(self, shipment_id: int, recipient_name: str, **extra: Any) -> Result:
        payload = {"recipient_name": recipient_name, **extra}
        return self._request("POST", f"/shipments/{shipment_id}/pod", json_body=payload)

    def get_messages(self, shipment_id: int) -> ListResult:
        return self._list(f"/shipments/{shipment_id}/messages", "messages")

    def send_message(self, shipment_id: int, content: str) -> Result:
        return self._request("POST", f"/shipments/{shipment_id}/messages", json_body={"content": content})

    def get_notifications(self, unread_only: bool = False) -> Result:
        return self._request("GET", "/notifications", params={"unread_only": str(unread_only).lower()})

    def get_analytics(self, range_key: str = "30d") -> Result:
        """Dashboard figures for the logged-in user over ``7d``, ``30d``, ``90d`` or ``1y``."""
        return self._request("GET", "/analytics/me", params={"range": range_key})

    # ------------------------------------------------------------------
    # Calculators
    # ------------------------------------------------------------------
    def estimate_route(self, origin: Dict[str, Any], destination: Dict[str, Any]) -> Result:
        return self._request(
            "POST", "/calculators/route", json_body={"from_address": origin, "to_address": destination}
        )

    def quote(self, **payload: Any) -> Result:
        return self._request("POST", "/calculators/quote", json_body=payload)

    def roi(self, **payload: Any) -> Result:
        return self._request("POST", "/calculators/roi", json_body=payload)
