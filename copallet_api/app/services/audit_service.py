"""
Audit trail of marketplace actions.

Services call :meth:`AuditService.log` once their own change has been
committed: signups, shipment state changes, bids and their outcome,
tracking and POD submissions, verification decisions and admin edits.
The trail is readable by administrators only (``/api/admin/audit-logs``).
"""

from __future__ import annotations

import logging
import sqlite3
from typing import Any, Dict, List, Optional

from copallet_api.app.core.db import from_json, get_connection, to_json, utcnow
from copallet_api.app.schemas.admin import AuditLogRead


logger = logging.getLogger(__name__)

# query parameter -> SQL condition
_FILTERS = {
    "user_id": "user_id = ?",
    "object_type": "object_type = ?",
    "action": "action = ?",
    "start_date": "timestamp >= ?",
    "end_date": "timestamp <= ?",
}


def _row_to_log(row: sqlite3.Row) -> AuditLogRead:
    try:
        details = from_json(row["details"])
    except ValueError:
        details = row["details"]
    return AuditLogRead(
        id=row["id"],
        user_id=row["user_id"],
        action=row["action"],
        object_type=row["object_type"],
        object_id=row["object_id"],
        timestamp=str(row["timestamp"]),
        details=details,
    )


class AuditService:
    @classmethod
    async def log(
        cls,
        user_id: Optional[int],
        action: str,
        object_type: str,
        object_id: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Append an entry to the audit trail.

        Parameters
        ----------
        user_id : Optional[int]
            Acting user; ``None`` for actions taken by the platform itself.
        action : str
            Verb such as ``"publish"``, ``"accept_bid"`` or ``"verify"``.
        object_type : str
            Kind of record touched (``"shipment"``, ``"bid"``, ``"user"``...).
        object_id : Optional[int]
            Primary key of that record.
        details : Optional[dict]
            Extra context, stored as JSON.

        The audited change is already committed, so a write failure
        here is only logged.
        """
        conn = get_connection()
        try:
            conn.execute(
                "INSERT INTO audit_logs (user_id, action, object_type, object_id, timestamp, details) "
                "VALUES (?, ?, ?, ?, ?, ?)",
                (user_id, action, object_type, object_id, utcnow(), to_json(details or None)),
            )
            conn.commit()
        except sqlite3.Error as exc:
            logger.warning("Could not record %s on %s %s: %s", action, object_type, object_id, exc)
        finally:
            conn.close()

    @classmethod
    async def list_logs(cls, limit: int = 100, offset: int = 0, **filters: Any) -> List[AuditLogRead]:
        """Newest entries first, narrowed by any of the keys in ``_FILTERS``.

        Dates are ISO strings and compare lexically with the stored
        timestamps, so ``"2024-05-01"`` selects from that day on.
        """
        conditions: List[str] = []
        params: List[Any] = []
        for name, value in filters.items():
            if value is None or value == "":
                continue
            if name not in _FILTERS:
                raise ValueError(f"Unknown audit filter: {name}")
            conditions.append(_FILTERS[name])
            params.append(value)

        query = "SELECT * FROM audit_logs"
        if conditions:
            query += " WHERE " + " AND ".join(conditions)
        query += " ORDER BY timestamp DESC, id DESC LIMIT ? OFFSET ?"
        params.extend([limit, offset])

        conn = get_connection()
        try:
            rows = conn.execute(query, params).fetchall()
        finally:
            conn.close()
        return [_row_to_log(row) for row in rows]
