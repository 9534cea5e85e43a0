"""
Security helpers for password hashing and JWT authentication.

This module implements a lightweight JSON Web Token (JWT) mechanism
using HMAC‑SHA256 signatures and base64url encoding.  Two token kinds
are issued: short-lived access tokens signed with
``settings.secret_key`` and long-lived refresh tokens signed with
``settings.refresh_secret_key``.  Each token carries a ``typ`` claim so
one kind can never be accepted in place of the other.  Passwords are
hashed with PBKDF2‑HMAC (SHA‑256).

Tokens are stateless: logging out does not revoke anything, a token
simply expires.
"""

import base64
import hashlib
import hmac
import json
import os
import time
from typing import Any, Callable, Dict, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .config import settings
from .db import get_connection


ROLES = ("shipper", "carrier", "dispatcher", "admin")
CARRIER_ROLES = ("carrier", "dispatcher")

PBKDF2_ITERATIONS = 100_000


def _b64_url_encode(data: bytes) -> str:
    """Base64‑url encode bytes without padding."""
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("utf-8")


def _b64_url_decode(data: str) -> bytes:
    """Decode base64‑url encoded string, adding padding if necessary."""
    padding = '=' * (-len(data) % 4)
    return base64.urlsafe_b64decode(data + padding)


def _sign(message: bytes, secret: str) -> bytes:
    """Compute HMAC‑SHA256 signature of a message using the given secret."""
    return hmac.new(secret.encode("utf-8"), message, hashlib.sha256).digest()


def _encode(payload: Dict[str, Any], secret: str) -> str:
    header = {"alg": settings.algorithm, "typ": "JWT"}
    header_b64 = _b64_url_encode(json.dumps(header, separators=(',', ':')).encode("utf-8"))
    payload_b64 = _b64_url_encode(json.dumps(payload, separators=(',', ':')).encode("utf-8"))
    signing_input = f"{header_b64}.{payload_b64}".encode("utf-8")
    signature_b64 = _b64_url_encode(_sign(signing_input, secret))
    return f"{header_b64}.{payload_b64}.{signature_b64}"


def _decode(token: str, secret: str, token_type: str) -> Optional[Dict[str, Any]]:
    parts = token.split('.')
    if len(parts) != 3:
        return None
    header_b64, payload_b64, signature_b64 = parts
    try:
        signing_input = f"{header_b64}.{payload_b64}".encode("utf-8")
        actual_sig = _b64_url_decode(signature_b64)
        # Constant‑time comparison to prevent timing attacks
        if not hmac.compare_digest(_sign(signing_input, secret), actual_sig):
            return None
        data = json.loads(_b64_url_decode(payload_b64).decode("utf-8"))
    except ValueError:
        # Covers malformed base64, invalid UTF‑8 and invalid JSON
        return None
    if not isinstance(data, dict) or data.get("typ") != token_type:
        return None
    if data.get("exp") is None or int(data["exp"]) < int(time.time()):
        return None
    return data


def create_access_token(data: Dict[str, Any], expires_delta: Optional[int] = None) -> str:
    """Create a signed access token with the given payload.

    The payload is extended with ``typ="access"`` and an ``exp`` field
    representing the expiration time as a UNIX timestamp.  Clients must
    include the token in the ``Authorization`` header as
    ``Bearer <token>``.

    Parameters
    ----------
    data : dict
        Claims to embed in the token (e.g. ``{"sub": "user@example.com",
        "user_id": 1, "role": "shipper"}``).
    expires_delta : Optional[int]
        Lifetime of the token in seconds.  Defaults to
        ``settings.access_token_expire_minutes * 60``.

    Returns
    -------
    str
        A signed JWT token.
    """
    to_encode = data.copy()
    exp_seconds = expires_delta or settings.access_token_expire_minutes * 60
    to_encode["typ"] = "access"
    to_encode["exp"] = int(time.time()) + exp_seconds
    return _encode(to_encode, settings.secret_key)


def create_refresh_token(user_id: int, expires_delta: Optional[int] = None) -> str:
    """Create a refresh token that only identifies the user."""
    exp_seconds = expires_delta or settings.refresh_token_expire_minutes * 60
    payload = {"user_id": user_id, "typ": "refresh", "exp": int(time.time()) + exp_seconds}
    return _encode(payload, settings.refresh_secret_key)


def decode_access_token(token: str) -> Optional[Dict[str, Any]]:
    """Verify and decode an access token.

    Verifies the HMAC signature, the ``typ`` claim and the ``exp``
    field.  Returns the payload dictionary on success, otherwise
    ``None``.

    Parameters
    ----------
    token : str
        JWT token string (``header.payload.signature``).

    Returns
    -------
    Optional[dict]
        The decoded payload if valid, else ``None``.
    """
    return _decode(token, settings.secret_key, "access")


def decode_refresh_token(token: str) -> Optional[Dict[str, Any]]:
    """Verify and decode a refresh token; ``None`` when invalid or expired."""
    return _decode(token, settings.refresh_secret_key, "refresh")


def issue_tokens(user: Dict[str, Any]) -> Dict[str, Any]:
    """Issue an access/refresh token pair for a user row or dict."""
    access_token = create_access_token(
        {"sub": user["email"], "user_id": user["id"], "role": user["role"]}
    )
    return {
        "access_token": access_token,
        "refresh_token": create_refresh_token(user["id"]),
        "token_type": "bearer",
        "expires_in": settings.access_token_expire_minutes * 60,
    }


security = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_user(credentials: HTTPAuthorizationCredentials = Depends(security)) -> Dict[str, Any]:
    """Dependency that retrieves the current authenticated user.

    If the request does not contain an ``Authorization`` header or the
    token is invalid/expired, an HTTP 401 error is raised.  The token
    subject is re-read from the database so that role changes,
    verification decisions and deactivation take effect immediately.
    Returns a dict with ``user_id``, ``email``, ``role`` and
    ``verification_status``.
    """
    if credentials is None:
        raise _unauthorized("Not authenticated")
    payload = decode_access_token(credentials.credentials)
    if not payload:
        raise _unauthorized("Invalid or expired token")
    conn = get_connection()
    try:
        user_row = conn.execute(
            "SELECT id, email, role, verification_status, is_active FROM users WHERE id = ?",
            (payload.get("user_id"),),
        ).fetchone()
    finally:
        conn.close()
    if not user_row:
        raise _unauthorized("User no longer exists")
    if not user_row["is_active"]:
        raise _unauthorized("Account is deactivated")
    return {
        "sub": user_row["email"],
        "user_id": user_row["id"],
        "email": user_row["email"],
        "role": user_row["role"],
        "verification_status": user_row["verification_status"],
    }


def get_optional_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> Optional[Dict[str, Any]]:
    """Like ``get_current_user`` but anonymous requests yield ``None``.

    A token that is present but invalid is still rejected with 401.
    """
    if credentials is None:
        return None
    return get_current_user(credentials)


# ---------------------------------------------------------------------------
# Role-based access control (RBAC) helpers
# ---------------------------------------------------------------------------

def _check_verified(current_user: Dict[str, Any]) -> None:
    if current_user.get("role") == "admin":
        return
    if current_user.get("verification_status") != "approved":
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail={
                "message": "Account verification required",
                "verification_status": current_user.get("verification_status"),
            },
        )


def require_verified(current_user: Dict[str, Any] = Depends(get_current_user)) -> Dict[str, Any]:
    """Dependency rejecting accounts whose verification is not approved."""
    _check_verified(current_user)
    return current_user


def require_roles(*roles: str, verified: bool = False) -> Callable[..., Dict[str, Any]]:
    """Dependency factory to enforce that the current user has one of the specified roles.

    Use this in FastAPI endpoints via ``Depends(require_roles("shipper"))``.
    If the authenticated user does not match any of the given roles, an
    HTTP 403 error is raised.

    Parameters
    ----------
    *roles : str
        One or more role names permitted to access the endpoint.
    verified : bool
        Additionally require an approved verification status.

    Returns
    -------
    Callable
        A dependency function that validates the current user's role and
        returns the user payload on success.
    """

    def _role_dependency(current_user: Dict[str, Any] = Depends(get_current_user)) -> Dict[str, Any]:
        if current_user.get("role") not in roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions",
            )
        if verified:
            _check_verified(current_user)
        return current_user

    return _role_dependency


def hash_password(password: str) -> str:
    """Hash a password using PBKDF2‑HMAC with SHA‑256.

    A 16‑byte random salt is generated for each password.  The
    resulting string contains the salt and hash separated by a ``$``
    (salt in hex, then hash in hex).

    Parameters
    ----------
    password : str
        The plain text password to hash.

    Returns
    -------
    str
        Salt and hash concatenated with ``$``.
    """
    salt = os.urandom(16)
    dk = hashlib.pbkdf2_hmac('sha256', password.encode('utf-8'), salt, PBKDF2_ITERATIONS)
    return f"{salt.hex()}${dk.hex()}"


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a plain password against a stored salt+hash string.

    Returns ``False`` for malformed stored values instead of raising.
    """
    try:
        salt_hex, hash_hex = hashed_password.split('$', 1)
        salt = bytes.fromhex(salt_hex)
        stored_hash = bytes.fromhex(hash_hex)
    except ValueError:
        return False
    dk = hashlib.pbkdf2_hmac('sha256', plain_password.encode('utf-8'), salt, PBKDF2_ITERATIONS)
    return hmac.compare_digest(dk, stored_hash)
