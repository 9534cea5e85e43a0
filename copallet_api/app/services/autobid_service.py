"""
Auto-bid rules: stored carrier preferences, CRUD only.
"""

import sqlite3
from typing import List

from ..core.db import get_connection, utcnow
from ..schemas.autobid import AutoBidRuleCreate, AutoBidRuleRead, AutoBidRuleUpdate
from .audit_service import AuditService


BOOLEAN_COLUMNS = ("adr_allowed", "is_active")


def _rule_from_row(row: sqlite3.Row) -> AutoBidRuleRead:
    data = dict(row)
    for key in BOOLEAN_COLUMNS:
        data[key] = bool(data[key])
    return AutoBidRuleRead(**data)


def _fetch_own(cursor: sqlite3.Cursor, rule_id: int, current_user: dict) -> sqlite3.Row:
    row = cursor.execute("SELECT * FROM auto_bid_rules WHERE id = ?", (rule_id,)).fetchone()
    if not row or row["carrier_id"] != current_user["user_id"]:
        raise ValueError(f"Auto-bid rule {rule_id} not found")
    return row


class AutoBidService:

    @classmethod
    async def list_rules(cls, current_user: dict) -> List[AutoBidRuleRead]:
        conn = get_connection()
        try:
            rows = conn.execute(
                "SELECT * FROM auto_bid_rules WHERE carrier_id = ? ORDER BY created_at ASC, id ASC",
                (current_user["user_id"],),
            ).fetchall()
            return [_rule_from_row(r) for r in rows]
        finally:
            conn.close()

    @classmethod
    async def create_rule(cls, data: AutoBidRuleCreate, current_user: dict) -> AutoBidRuleRead:
        now = utcnow()
        conn = get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                """
                INSERT INTO auto_bid_rules (carrier_id, name, from_city, to_city, max_radius_km,
                    min_margin_percentage, max_bid_amount, adr_allowed, is_active, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    current_user["user_id"],
                    data.name,
                    data.from_city,
                    data.to_city,
                    data.max_radius_km,
                    data.min_margin_percentage,
                    data.max_bid_amount,
                    1 if data.adr_allowed else 0,
                    1 if data.is_active else 0,
                    now,
                    now,
                ),
            )
            rule_id = cursor.lastrowid
            conn.commit()
            row = cursor.execute("SELECT * FROM auto_bid_rules WHERE id = ?", (rule_id,)).fetchone()
        finally:
            conn.close()
        await AuditService.log(current_user["user_id"], "create", "auto_bid_rule", rule_id, {"name": data.name})
        return _rule_from_row(row)

    @classmethod
    async def update_rule(cls, rule_id: int, data: AutoBidRuleUpdate, current_user: dict) -> AutoBidRuleRead:
        updates = data.model_dump(exclude_unset=True)
        # name and the flags are NOT NULL; the optional limits may be cleared
        for key in ("name",) + BOOLEAN_COLUMNS:
            if updates.get(key, True) is None:
                updates.pop(key)
        conn = get_connection()
        try:
            cursor = conn.cursor()
            row = _fetch_own(cursor, rule_id, current_user)
            if updates:
                values = [int(v) if k in BOOLEAN_COLUMNS else v for k, v in updates.items()]
                assignments = ", ".join(f"{key} = ?" for key in updates)
                cursor.execute(
                    f"UPDATE auto_bid_rules SET {assignments}, updated_at = ? WHERE id = ?",
                    tuple(values) + (utcnow(), rule_id),
                )
                conn.commit()
                row = cursor.execute("SELECT * FROM auto_bid_rules WHERE id = ?", (rule_id,)).fetchone()
        finally:
            conn.close()
        await AuditService.log(current_user["user_id"], "update", "auto_bid_rule", rule_id, {"fields": sorted(updates)})
        return _rule_from_row(row)

    @classmethod
    async def delete_rule(cls, rule_id: int, current_user: dict) -> None:
        conn = get_connection()
        try:
            cursor = conn.cursor()
            _fetch_own(cursor, rule_id, current_user)
            cursor.execute("DELETE FROM auto_bid_rules WHERE id = ?", (rule_id,))
            conn.commit()
        finally:
            conn.close()
        await AuditService.log(current_user["user_id"], "delete", "auto_bid_rule", rule_id, None)
