"""
Business logic for accounts, authentication and profiles.

Signup creates the user row together with an empty profile.  Shippers,
carriers and dispatchers start with verification status ``pending``
and must be approved by an administrator before they can post
shipments or bid; administrators are approved on creation.  Login and
token refresh re-check that the account is still active.
"""

import logging
import sqlite3
from typing import List, Optional, Tuple

from ..core.config import settings
from ..core.db import from_json, get_connection, to_json, utcnow
from ..core.errors import AccessDenied
from ..core.security import decode_refresh_token, hash_password, issue_tokens, verify_password
from ..schemas.admin import VerificationDecision
from ..schemas.user import (
    AdminUserRead,
    CompanyProfileRead,
    CompanyProfileUpdate,
    ProfileRead,
    ProfileResponse,
    ProfileUpdate,
    TokenPair,
    UserRead,
    UserSignup,
)
from .audit_service import AuditService
from .notification_service import NotificationService


logger = logging.getLogger(__name__)

USER_COLUMNS = "id, email, role, verification_status, is_active, last_login_at, created_at"

ADMIN_USER_QUERY = (
    "SELECT u.id, u.email, u.role, u.verification_status, u.rejection_reason, u.is_active, "
    "u.last_login_at, u.created_at, p.first_name, p.last_name, p.company_name "
    "FROM users u LEFT JOIN user_profiles p ON p.user_id = u.id"
)


def user_from_row(row: sqlite3.Row) -> UserRead:
    return UserRead(
        id=row["id"],
        email=row["email"],
        role=row["role"],
        verification_status=row["verification_status"],
        is_active=bool(row["is_active"]),
        last_login_at=row["last_login_at"],
        created_at=row["created_at"],
    )


def _admin_user_from_row(row: sqlite3.Row) -> AdminUserRead:
    return AdminUserRead(
        id=row["id"],
        email=row["email"],
        role=row["role"],
        verification_status=row["verification_status"],
        rejection_reason=row["rejection_reason"],
        is_active=bool(row["is_active"]),
        last_login_at=row["last_login_at"],
        created_at=row["created_at"],
        first_name=row["first_name"],
        last_name=row["last_name"],
        company_name=row["company_name"],
    )


def _profile_from_row(row: sqlite3.Row) -> ProfileRead:
    return ProfileRead(
        user_id=row["user_id"],
        first_name=row["first_name"],
        last_name=row["last_name"],
        phone=row["phone"],
        company_name=row["company_name"],
        vat_number=row["vat_number"],
        billing_address=from_json(row["billing_address"]),
        default_pickup_contact=from_json(row["default_pickup_contact"]),
        updated_at=row["updated_at"],
    )


def insert_user(
    cursor: sqlite3.Cursor,
    email: str,
    password_hash: str,
    role: str,
    verification_status: str,
    is_active: bool = True,
) -> int:
    """Insert a user row plus its empty profile and return the new id."""
    now = utcnow()
    cursor.execute(
        """
        INSERT INTO users (email, password, role, verification_status, is_active, created_at, updated_at)
        VALUES (?, ?, ?, ?, ?, ?, ?)
        """,
        (email, password_hash, role, verification_status, 1 if is_active else 0, now, now),
    )
    user_id = cursor.lastrowid
    cursor.execute(
        "INSERT INTO user_profiles (user_id, created_at, updated_at) VALUES (?, ?, ?)",
        (user_id, now, now),
    )
    return user_id


class UserService:
    """Accounts, sessions and profiles."""

    @classmethod
    async def signup(cls, data: UserSignup) -> Tuple[UserRead, TokenPair]:
        """Register a new account and sign it in.

        Raises ``ValueError`` when the e-mail is taken or when admin
        self-registration is disabled.
        """
        if data.role == "admin" and not settings.allow_admin_signup:
            raise AccessDenied("Admin accounts cannot be created through signup")
        conn = get_connection()
        try:
            cursor = conn.cursor()
            existing = cursor.execute("SELECT id FROM users WHERE email = ?", (data.email,)).fetchone()
            if existing:
                raise ValueError("User with this email already exists")
            verification_status = "approved" if data.role == "admin" else "pending"
            user_id = insert_user(cursor, data.email, hash_password(data.password), data.role, verification_status)
            conn.commit()
            row = cursor.execute(f"SELECT {USER_COLUMNS} FROM users WHERE id = ?", (user_id,)).fetchone()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()
        logger.info("User %s signed up as %s", data.email, data.role)
        await AuditService.log(user_id, "signup", "user", user_id, {"role": data.role})
        return user_from_row(row), TokenPair(**issue_tokens(dict(row)))

    @classmethod
    async def authenticate(cls, email: str, password: str) -> Tuple[UserRead, TokenPair]:
        """Check credentials, record the login time and issue tokens."""
        conn = get_connection()
        try:
            cursor = conn.cursor()
            row = cursor.execute(
                "SELECT id, email, password, role, is_active FROM users WHERE email = ?",
                (email.strip().lower(),),
            ).fetchone()
            if not row or not verify_password(password, row["password"]):
                logger.info("Failed login attempt for %s", email)
                raise ValueError("Invalid email or password")
            if not row["is_active"]:
                raise ValueError("Account is deactivated")
            cursor.execute("UPDATE users SET last_login_at = ? WHERE id = ?", (utcnow(), row["id"]))
            conn.commit()
            user_row = cursor.execute(f"SELECT {USER_COLUMNS} FROM users WHERE id = ?", (row["id"],)).fetchone()
        finally:
            conn.close()
        logger.info("User %s logged in", email)
        return user_from_row(user_row), TokenPair(**issue_tokens(dict(user_row)))

    @classmethod
    async def refresh(cls, refresh_token: str) -> TokenPair:
        """Exchange a valid refresh token for a fresh token pair."""
        payload = decode_refresh_token(refresh_token)
        if not payload:
            raise ValueError("Invalid or expired refresh token")
        conn = get_connection()
        try:
            row = conn.execute(
                "SELECT id, email, role, is_active FROM users WHERE id = ?",
                (payload.get("user_id"),),
            ).fetchone()
        finally:
            conn.close()
        if not row or not row["is_active"]:
            raise ValueError("User not found or inactive")
        return TokenPair(**issue_tokens(dict(row)))

    @classmethod
    async def get_user(cls, user_id: int) -> UserRead:
        conn = get_connection()
        try:
            row = conn.execute(f"SELECT {USER_COLUMNS} FROM users WHERE id = ?", (user_id,)).fetchone()
            if not row:
                raise ValueError(f"User {user_id} not found")
            return user_from_row(row)
        finally:
            conn.close()

    @classmethod
    async def get_profile(cls, user_id: int) -> ProfileResponse:
        conn = get_connection()
        try:
            user_row = conn.execute(f"SELECT {USER_COLUMNS} FROM users WHERE id = ?", (user_id,)).fetchone()
            if not user_row:
                raise ValueError(f"User {user_id} not found")
            profile_row = conn.execute("SELECT * FROM user_profiles WHERE user_id = ?", (user_id,)).fetchone()
            if not profile_row:
                raise ValueError(f"Profile for user {user_id} not found")
            return ProfileResponse(user=user_from_row(user_row), profile=_profile_from_row(profile_row))
        finally:
            conn.close()

    @classmethod
    async def update_profile(cls, user_id: int, data: ProfileUpdate) -> ProfileResponse:
        """Apply the fields present in ``data`` to the user's profile."""
        updates = data.model_dump(mode="json", exclude_unset=True)
        if updates:
            for key in ("billing_address", "default_pickup_contact"):
                if key in updates:
                    updates[key] = to_json(updates[key])
            await cls._write_profile(user_id, updates)
            await AuditService.log(user_id, "update", "profile", user_id, {"fields": sorted(updates)})
        return await cls.get_profile(user_id)

    @classmethod
    async def get_company_profile(cls, user_id: int) -> CompanyProfileRead:
        response = await cls.get_profile(user_id)
        profile = response.profile
        return CompanyProfileRead(
            company_name=profile.company_name,
            vat_number=profile.vat_number,
            phone=profile.phone,
            address=profile.billing_address,
        )

    @classmethod
    async def update_company_profile(cls, user_id: int, data: CompanyProfileUpdate) -> CompanyProfileRead:
        updates = data.model_dump(mode="json", exclude_unset=True)
        if "address" in updates:
            updates["billing_address"] = to_json(updates.pop("address"))
        if updates:
            await cls._write_profile(user_id, updates)
            await AuditService.log(user_id, "update", "company_profile", user_id, {"fields": sorted(updates)})
        return await cls.get_company_profile(user_id)

    @classmethod
    async def _write_profile(cls, user_id: int, updates: dict) -> None:
        conn = get_connection()
        try:
            assignments = ", ".join(f"{key} = ?" for key in updates)
            params = list(updates.values()) + [utcnow(), user_id]
            cursor = conn.cursor()
            cursor.execute(
                f"UPDATE user_profiles SET {assignments}, updated_at = ? WHERE user_id = ?",
                tuple(params),
            )
            if cursor.rowcount == 0:
                raise ValueError(f"Profile for user {user_id} not found")
            conn.commit()
        finally:
            conn.close()

    # ------------------------------------------------------------------
    # Administration
    # ------------------------------------------------------------------

    @classmethod
    async def list_users(
        cls,
        role: Optional[str] = None,
        verification_status: Optional[str] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> Tuple[List[AdminUserRead], int]:
        """List users with profile names, optionally filtered; newest first."""
        conn = get_connection()
        try:
            where_clauses: List[str] = []
            params: list = []
            if role:
                where_clauses.append("u.role = ?")
                params.append(role)
            if verification_status:
                where_clauses.append("u.verification_status = ?")
                params.append(verification_status)
            where = " WHERE " + " AND ".join(where_clauses) if where_clauses else ""
            total = conn.execute(
                f"SELECT COUNT(*) AS cnt FROM users u{where}", tuple(params)
            ).fetchone()["cnt"]
            rows = conn.execute(
                f"{ADMIN_USER_QUERY}{where} ORDER BY u.created_at DESC, u.id DESC LIMIT ? OFFSET ?",
                tuple(params + [limit, offset]),
            ).fetchall()
            return [_admin_user_from_row(r) for r in rows], total
        finally:
            conn.close()

    @classmethod
    async def pending_verifications(cls) -> List[AdminUserRead]:
        """Non-admin accounts waiting for a verification decision, oldest first."""
        conn = get_connection()
        try:
            rows = conn.execute(
                f"{ADMIN_USER_QUERY} WHERE u.verification_status = 'pending' AND u.role != 'admin' "
                "ORDER BY u.created_at, u.id"
            ).fetchall()
            return [_admin_user_from_row(r) for r in rows]
        finally:
            conn.close()

    @classmethod
    async def set_verification(
        cls, user_id: int, decision: VerificationDecision, current_user: dict
    ) -> AdminUserRead:
        """Approve or reject an account and notify its owner."""
        conn = get_connection()
        try:
            cursor = conn.cursor()
            row = cursor.execute("SELECT id, role FROM users WHERE id = ?", (user_id,)).fetchone()
            if not row:
                raise ValueError(f"User {user_id} not found")
            if row["role"] == "admin":
                raise ValueError("Administrator accounts cannot be re-verified")
            cursor.execute(
                "UPDATE users SET verification_status = ?, rejection_reason = ?, updated_at = ? WHERE id = ?",
                (decision.status, decision.rejection_reason, utcnow(), user_id),
            )
            if decision.status == "approved":
                NotificationService.push(
                    cursor, user_id, "verification_approved", "Account Verified",
                    "Your account has been verified. You now have full access to the marketplace.",
                )
            else:
                reason = f" Reason: {decision.rejection_reason}" if decision.rejection_reason else ""
                NotificationService.push(
                    cursor, user_id, "verification_rejected", "Verification Rejected",
                    f"Your account verification was rejected.{reason}",
                )
            conn.commit()
            updated = cursor.execute(f"{ADMIN_USER_QUERY} WHERE u.id = ?", (user_id,)).fetchone()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()
        logger.info("Admin %s set verification of user %s to %s", current_user["user_id"], user_id, decision.status)
        await AuditService.log(
            current_user["user_id"], "verify", "user", user_id,
            {"status": decision.status, "reason": decision.rejection_reason},
        )
        return _admin_user_from_row(updated)

    @classmethod
    async def set_active(cls, user_id: int, is_active: bool, current_user: dict) -> AdminUserRead:
        """Deactivate or reactivate an account.  Admins cannot deactivate themselves."""
        if user_id == current_user["user_id"] and not is_active:
            raise ValueError("Administrators cannot deactivate their own account")
        conn = get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                "UPDATE users SET is_active = ?, updated_at = ? WHERE id = ?",
                (1 if is_active else 0, utcnow(), user_id),
            )
            if cursor.rowcount == 0:
                raise ValueError(f"User {user_id} not found")
            conn.commit()
            updated = cursor.execute(f"{ADMIN_USER_QUERY} WHERE u.id = ?", (user_id,)).fetchone()
        finally:
            conn.close()
        logger.info("Admin %s set is_active=%s for user %s", current_user["user_id"], is_active, user_id)
        await AuditService.log(
            current_user["user_id"], "activate" if is_active else "deactivate", "user", user_id, None
        )
        return _admin_user_from_row(updated)
