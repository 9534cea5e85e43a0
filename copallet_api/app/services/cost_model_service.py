"""
Stored carrier cost models used by the ROI calculators.
"""

import sqlite3
from typing import List

from ..core.db import get_connection, utcnow
from ..schemas.cost_model import CostModelCreate, CostModelRead, CostModelUpdate
from .audit_service import AuditService


MODEL_COLUMNS = tuple(CostModelCreate.model_fields)


def _model_from_row(row: sqlite3.Row) -> CostModelRead:
    data = dict(row)
    data["is_active"] = bool(data["is_active"])
    return CostModelRead(**data)


def _fetch_own(cursor: sqlite3.Cursor, model_id: int, current_user: dict) -> sqlite3.Row:
    row = cursor.execute("SELECT * FROM cost_models WHERE id = ?", (model_id,)).fetchone()
    if not row or row["carrier_id"] != current_user["user_id"]:
        raise ValueError(f"Cost model {model_id} not found")
    return row


class CostModelService:

    @classmethod
    async def list_models(cls, current_user: dict) -> List[CostModelRead]:
        conn = get_connection()
        try:
            rows = conn.execute(
                "SELECT * FROM cost_models WHERE carrier_id = ? ORDER BY created_at ASC, id ASC",
                (current_user["user_id"],),
            ).fetchall()
            return [_model_from_row(r) for r in rows]
        finally:
            conn.close()

    @classmethod
    async def get_model(cls, model_id: int, current_user: dict) -> CostModelRead:
        conn = get_connection()
        try:
            return _model_from_row(_fetch_own(conn.cursor(), model_id, current_user))
        finally:
            conn.close()

    @classmethod
    async def create_model(cls, data: CostModelCreate, current_user: dict) -> CostModelRead:
        now = utcnow()
        values = data.model_dump()
        values["is_active"] = 1 if data.is_active else 0
        columns = ("carrier_id",) + MODEL_COLUMNS + ("created_at", "updated_at")
        params = (current_user["user_id"],) + tuple(values[c] for c in MODEL_COLUMNS) + (now, now)
        conn = get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                f"INSERT INTO cost_models ({', '.join(columns)}) VALUES ({', '.join('?' for _ in columns)})",
                params,
            )
            model_id = cursor.lastrowid
            conn.commit()
            row = cursor.execute("SELECT * FROM cost_models WHERE id = ?", (model_id,)).fetchone()
        finally:
            conn.close()
        await AuditService.log(current_user["user_id"], "create", "cost_model", model_id, {"name": data.name})
        return _model_from_row(row)

    @classmethod
    async def update_model(cls, model_id: int, data: CostModelUpdate, current_user: dict) -> CostModelRead:
        # Every column is NOT NULL
        updates = {k: v for k, v in data.model_dump(exclude_unset=True).items() if v is not None}
        if "is_active" in updates:
            updates["is_active"] = 1 if updates["is_active"] else 0
        conn = get_connection()
        try:
            cursor = conn.cursor()
            row = _fetch_own(cursor, model_id, current_user)
            if updates:
                assignments = ", ".join(f"{key} = ?" for key in updates)
                cursor.execute(
                    f"UPDATE cost_models SET {assignments}, updated_at = ? WHERE id = ?",
                    tuple(updates.values()) + (utcnow(), model_id),
                )
                conn.commit()
                row = cursor.execute("SELECT * FROM cost_models WHERE id = ?", (model_id,)).fetchone()
        finally:
            conn.close()
        await AuditService.log(current_user["user_id"], "update", "cost_model", model_id, {"fields": sorted(updates)})
        return _model_from_row(row)

    @classmethod
    async def delete_model(cls, model_id: int, current_user: dict) -> None:
        conn = get_connection()
        try:
            cursor = conn.cursor()
            _fetch_own(cursor, model_id, current_user)
            cursor.execute("DELETE FROM cost_models WHERE id = ?", (model_id,))
            conn.commit()
        finally:
            conn.close()
        await AuditService.log(current_user["user_id"], "delete", "cost_model", model_id, None)
