"""
Business logic for shipment templates.

Templates belong to one shipper.  ``create_shipment`` turns a template
plus a pair of time windows into a new draft shipment.
"""

import logging
import sqlite3
from typing import List

from ..core.db import from_json, get_connection, to_json, utcnow
from ..core.errors import AccessDenied
from ..schemas.shipment import ShipmentCreate, ShipmentRead
from ..schemas.template import (
    TemplateCreate,
    TemplateRead,
    TemplateShipmentCreate,
    TemplateUpdate,
)
from .audit_service import AuditService
from .shipment_service import ShipmentService


logger = logging.getLogger(__name__)

JSON_COLUMNS = ("from_address", "to_address", "pallets", "constraints")


def _template_from_row(row: sqlite3.Row) -> TemplateRead:
    return TemplateRead(
        id=row["id"],
        shipper_id=row["shipper_id"],
        name=row["name"],
        from_address=from_json(row["from_address"]),
        to_address=from_json(row["to_address"]),
        pallets=from_json(row["pallets"]),
        adr_required=bool(row["adr_required"]),
        constraints=from_json(row["constraints"], {}),
        notes=row["notes"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def _fetch_own(cursor: sqlite3.Cursor, template_id: int, current_user: dict) -> sqlite3.Row:
    row = cursor.execute("SELECT * FROM shipment_templates WHERE id = ?", (template_id,)).fetchone()
    if not row:
        raise ValueError(f"Template {template_id} not found")
    if row["shipper_id"] != current_user["user_id"]:
        raise AccessDenied("Not authorized to use this template")
    return row


class TemplateService:
    """CRUD for the current shipper's templates."""

    @classmethod
    async def list_templates(cls, current_user: dict) -> List[TemplateRead]:
        conn = get_connection()
        try:
            rows = conn.execute(
                "SELECT * FROM shipment_templates WHERE shipper_id = ? ORDER BY name ASC",
                (current_user["user_id"],),
            ).fetchall()
            return [_template_from_row(r) for r in rows]
        finally:
            conn.close()

    @classmethod
    async def get_template(cls, template_id: int, current_user: dict) -> TemplateRead:
        conn = get_connection()
        try:
            return _template_from_row(_fetch_own(conn.cursor(), template_id, current_user))
        finally:
            conn.close()

    @classmethod
    async def create_template(cls, data: TemplateCreate, current_user: dict) -> TemplateRead:
        payload = data.model_dump(mode="json")
        now = utcnow()
        conn = get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                """
                INSERT INTO shipment_templates (shipper_id, name, from_address, to_address, pallets,
                                                adr_required, constraints, notes, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    current_user["user_id"],
                    data.name,
                    to_json(payload["from_address"]),
                    to_json(payload["to_address"]),
                    to_json(payload["pallets"]),
                    1 if data.adr_required else 0,
                    to_json(payload["constraints"]),
                    data.notes,
                    now,
                    now,
                ),
            )
            template_id = cursor.lastrowid
            conn.commit()
            row = cursor.execute("SELECT * FROM shipment_templates WHERE id = ?", (template_id,)).fetchone()
        finally:
            conn.close()
        await AuditService.log(current_user["user_id"], "create", "template", template_id, {"name": data.name})
        return _template_from_row(row)

    @classmethod
    async def update_template(cls, template_id: int, data: TemplateUpdate, current_user: dict) -> TemplateRead:
        updates = {
            key: value
            for key, value in data.model_dump(mode="json", exclude_unset=True).items()
            if value is not None or key == "notes"
        }
        conn = get_connection()
        try:
            cursor = conn.cursor()
            row = _fetch_own(cursor, template_id, current_user)
            if not updates:
                return _template_from_row(row)
            columns = {}
            for key, value in updates.items():
                if key in JSON_COLUMNS:
                    columns[key] = to_json(value)
                elif key == "adr_required":
                    columns[key] = 1 if value else 0
                else:
                    columns[key] = value
            assignments = ", ".join(f"{key} = ?" for key in columns)
            cursor.execute(
                f"UPDATE shipment_templates SET {assignments}, updated_at = ? WHERE id = ?",
                tuple(columns.values()) + (utcnow(), template_id),
            )
            conn.commit()
            row = cursor.execute("SELECT * FROM shipment_templates WHERE id = ?", (template_id,)).fetchone()
        finally:
            conn.close()
        await AuditService.log(current_user["user_id"], "update", "template", template_id, {"fields": sorted(updates)})
        return _template_from_row(row)

    @classmethod
    async def delete_template(cls, template_id: int, current_user: dict) -> None:
        conn = get_connection()
        try:
            cursor = conn.cursor()
            _fetch_own(cursor, template_id, current_user)
            cursor.execute("DELETE FROM shipment_templates WHERE id = ?", (template_id,))
            conn.commit()
        finally:
            conn.close()
        await AuditService.log(current_user["user_id"], "delete", "template", template_id, None)

    @classmethod
    async def create_shipment(
        cls, template_id: int, data: TemplateShipmentCreate, current_user: dict
    ) -> ShipmentRead:
        """Create a draft shipment from a template and the given windows."""
        template = await cls.get_template(template_id, current_user)
        shipment = ShipmentCreate(
            from_address=template.from_address,
            to_address=template.to_address,
            pickup_window=data.pickup_window,
            delivery_window=data.delivery_window,
            pallets=template.pallets,
            adr_required=template.adr_required,
            constraints=template.constraints,
            notes=data.notes if data.notes is not None else template.notes,
            price_guidance=data.price_guidance,
        )
        logger.info("Creating shipment from template %s", template_id)
        return await ShipmentService.create_shipment(shipment, current_user)
