"""
Unit tests for translating service errors into HTTP status codes.
"""

from __future__ import annotations

import pytest

from copallet_api.app.api.deps import http_error
from copallet_api.app.core.errors import AccessDenied


@pytest.mark.parametrize(
    "exc,code",
    [
        (AccessDenied("Not authorized to view this shipment"), 403),
        (AccessDenied("Only the shipment owner can accept bids"), 403),
        (AccessDenied("Admin accounts cannot be created through signup"), 403),
        (ValueError("Shipment 9 not found"), 404),
        (ValueError("User with this email already exists"), 409),
        (ValueError("Only delivered shipments can be rated"), 400),
        (ValueError("Only draft shipments can be published (current status: open)"), 400),
        (ValueError("Only pending bids can be withdrawn"), 400),
    ],
)
def test_status_follows_exception_type(exc: ValueError, code: int) -> None:
    error = http_error(exc)
    assert error.status_code == code
    assert error.detail == str(exc)
