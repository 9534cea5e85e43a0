"""
SQLite database integration and simple migration system.

This module provides functions for obtaining a database connection
(``get_connection``), applying migrations on application start
(``init_db``) and wiping the store (``reset_db``).  By default the
database lives in a named shared-cache in-memory SQLite database, so
all data disappears when the process exits.  A module-level "keeper"
connection holds the in-memory database open between requests.

The migration mechanism stores applied migration versions in the
``migrations`` table and executes new migrations in order.  Nested
value objects (addresses, time windows, pallet specs, constraint
flags, tags) are stored as JSON text columns; see ``to_json`` and
``from_json``.
"""

import json
import logging
import os
import sqlite3
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterator, Optional

from .config import settings


MEMORY_DATABASE = ":memory:"
MEMORY_URI = "file:copallet?mode=memory&cache=shared"

logger = logging.getLogger(__name__)

# Holds the shared in-memory database open; SQLite frees it as soon as the
# last connection closes.
_keeper: Optional[sqlite3.Connection] = None


def get_database_path() -> str:
    """Compute the path (or URI) of the SQLite database.

    ``:memory:`` maps to the shared in-memory URI.  An absolute path is
    used directly; anything else is resolved relative to the project
    root.
    """
    db_url = settings.database_url
    if db_url == MEMORY_DATABASE:
        return MEMORY_URI
    if os.path.isabs(db_url):
        return db_url
    base_dir = Path(__file__).resolve().parent.parent.parent  # copallet_api/
    return str((base_dir / db_url).resolve())


def is_memory_database() -> bool:
    return get_database_path() == MEMORY_URI


def get_connection() -> sqlite3.Connection:
    """Create and return a new SQLite connection.

    The connection uses a row factory to access columns by name and
    enables foreign key enforcement.  Values are returned as stored
    (ISO timestamps stay strings, JSON columns stay text).
    """
    db_path = get_database_path()
    conn = sqlite3.connect(db_path, uri=db_path == MEMORY_URI)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


@contextmanager
def get_cursor() -> Iterator[sqlite3.Cursor]:
    """Context manager that yields a cursor and closes the connection on exit."""
    conn = get_connection()
    try:
        yield conn.cursor()
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def _ensure_keeper() -> None:
    global _keeper
    if _keeper is None and is_memory_database():
        _keeper = sqlite3.connect(MEMORY_URI, uri=True, check_same_thread=False)
        logger.debug("Opened keeper connection for in-memory database")


def close_db() -> None:
    """Release the in-memory database (if any).  Its contents are lost."""
    global _keeper
    if _keeper is not None:
        _keeper.close()
        _keeper = None


def utcnow() -> str:
    """Current UTC time as an ISO-8601 string with a ``Z`` suffix."""
    return datetime.now(timezone.utc).isoformat(timespec="seconds").replace("+00:00", "Z")


def to_json(value: Any) -> Optional[str]:
    """Serialise a value for a JSON text column; ``None`` stays NULL."""
    if value is None:
        return None
    return json.dumps(value)


def from_json(text: Optional[str], default: Any = None) -> Any:
    if text is None or text == "":
        return default
    return json.loads(text)


MIGRATIONS: list[tuple[int, str]] = [
    # Migration 1: Initial schema
    (
        1,
        """
        CREATE TABLE IF NOT EXISTS users (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            email TEXT NOT NULL UNIQUE,
            password TEXT NOT NULL,
            role TEXT NOT NULL,
            verification_status TEXT NOT NULL DEFAULT 'pending',
            rejection_reason TEXT,
            is_active INTEGER NOT NULL DEFAULT 1,
            last_login_at TEXT,
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL
        );

        CREATE TABLE IF NOT EXISTS user_profiles (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            user_id INTEGER NOT NULL UNIQUE,
            first_name TEXT,
            last_name TEXT,
            phone TEXT,
            company_name TEXT,
            vat_number TEXT,
            billing_address TEXT,
            default_pickup_contact TEXT,
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL,
            FOREIGN KEY(user_id) REFERENCES users(id) ON DELETE CASCADE
        );

        CREATE TABLE IF NOT EXISTS shipments (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            shipper_id INTEGER NOT NULL,
            status TEXT NOT NULL DEFAULT 'draft',
            from_address TEXT NOT NULL,
            to_address TEXT NOT NULL,
            pickup_window TEXT NOT NULL,
            delivery_window TEXT NOT NULL,
            pallets TEXT NOT NULL,
            adr_required INTEGER NOT NULL DEFAULT 0,
            constraints TEXT NOT NULL,
            notes TEXT,
            price_guidance TEXT,
            assigned_carrier_id INTEGER,
            assigned_at TEXT,
            accepted_price REAL,
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL,
            FOREIGN KEY(shipper_id) REFERENCES users(id),
            FOREIGN KEY(assigned_carrier_id) REFERENCES users(id)
        );

        CREATE TABLE IF NOT EXISTS bids (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            shipment_id INTEGER NOT NULL,
            carrier_id INTEGER NOT NULL,
            price REAL NOT NULL,
            eta_pickup TEXT,
            message TEXT,
            status TEXT NOT NULL DEFAULT 'pending',
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL,
            FOREIGN KEY(shipment_id) REFERENCES shipments(id) ON DELETE CASCADE,
            FOREIGN KEY(carrier_id) REFERENCES users(id)
        );

        CREATE TABLE IF NOT EXISTS messages (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            shipment_id INTEGER NOT NULL,
            sender_id INTEGER NOT NULL,
            content TEXT NOT NULL,
            created_at TEXT NOT NULL,
            FOREIGN KEY(shipment_id) REFERENCES shipments(id) ON DELETE CASCADE,
            FOREIGN KEY(sender_id) REFERENCES users(id)
        );

        CREATE TABLE IF NOT EXISTS notifications (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            user_id INTEGER NOT NULL,
            title TEXT NOT NULL,
            message TEXT NOT NULL,
            type TEXT NOT NULL DEFAULT 'info',
            shipment_id INTEGER,
            read INTEGER NOT NULL DEFAULT 0,
            created_at TEXT NOT NULL,
            FOREIGN KEY(user_id) REFERENCES users(id) ON DELETE CASCADE
        );

        CREATE TABLE IF NOT EXISTS tracking_points (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            shipment_id INTEGER NOT NULL,
            latitude REAL NOT NULL,
            longitude REAL NOT NULL,
            timestamp TEXT NOT NULL,
            status TEXT,
            notes TEXT,
            accuracy REAL,
            speed REAL,
            heading REAL,
            FOREIGN KEY(shipment_id) REFERENCES shipments(id) ON DELETE CASCADE
        );

        CREATE TABLE IF NOT EXISTS pods (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            shipment_id INTEGER NOT NULL,
            carrier_id INTEGER NOT NULL,
            photo_url TEXT,
            signature_url TEXT,
            recipient_name TEXT NOT NULL,
            delivery_notes TEXT,
            delivered_at TEXT NOT NULL,
            created_at TEXT NOT NULL,
            FOREIGN KEY(shipment_id) REFERENCES shipments(id) ON DELETE CASCADE,
            FOREIGN KEY(carrier_id) REFERENCES users(id)
        );

        CREATE TABLE IF NOT EXISTS ratings (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            shipment_id INTEGER NOT NULL,
            rater_id INTEGER NOT NULL,
            ratee_id INTEGER NOT NULL,
            rating INTEGER NOT NULL,
            comment TEXT,
            created_at TEXT NOT NULL,
            UNIQUE(shipment_id, rater_id),
            FOREIGN KEY(shipment_id) REFERENCES shipments(id) ON DELETE CASCADE,
            FOREIGN KEY(rater_id) REFERENCES users(id),
            FOREIGN KEY(ratee_id) REFERENCES users(id)
        );

        CREATE TABLE IF NOT EXISTS shipment_templates (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            shipper_id INTEGER NOT NULL,
            name TEXT NOT NULL,
            from_address TEXT NOT NULL,
            to_address TEXT NOT NULL,
            pallets TEXT NOT NULL,
            adr_required INTEGER NOT NULL DEFAULT 0,
            constraints TEXT NOT NULL,
            notes TEXT,
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL,
            FOREIGN KEY(shipper_id) REFERENCES users(id) ON DELETE CASCADE
        );

        CREATE TABLE IF NOT EXISTS auto_bid_rules (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            carrier_id INTEGER NOT NULL,
            name TEXT NOT NULL,
            from_city TEXT,
            to_city TEXT,
            max_radius_km REAL,
            min_margin_percentage REAL,
            max_bid_amount REAL,
            adr_allowed INTEGER NOT NULL DEFAULT 0,
            is_active INTEGER NOT NULL DEFAULT 1,
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL,
            FOREIGN KEY(carrier_id) REFERENCES users(id) ON DELETE CASCADE
        );

        CREATE TABLE IF NOT EXISTS cost_models (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            carrier_id INTEGER NOT NULL,
            name TEXT NOT NULL,
            cost_per_km REAL NOT NULL,
            driver_cost_per_hour REAL NOT NULL,
            load_time_minutes REAL NOT NULL DEFAULT 0,
            unload_time_minutes REAL NOT NULL DEFAULT 0,
            average_speed_kmh REAL NOT NULL,
            platform_fee_percentage REAL NOT NULL DEFAULT 0,
            fuel_cost_per_km REAL NOT NULL DEFAULT 0,
            maintenance_cost_per_km REAL NOT NULL DEFAULT 0,
            insurance_cost_per_km REAL NOT NULL DEFAULT 0,
            is_active INTEGER NOT NULL DEFAULT 1,
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL,
            FOREIGN KEY(carrier_id) REFERENCES users(id) ON DELETE CASCADE
        );

        CREATE TABLE IF NOT EXISTS blog_posts (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            title TEXT NOT NULL,
            slug TEXT NOT NULL UNIQUE,
            content TEXT NOT NULL,
            excerpt TEXT,
            author TEXT NOT NULL,
            author_bio TEXT,
            author_image TEXT,
            date TEXT NOT NULL,
            category TEXT,
            read_time TEXT,
            image TEXT,
            featured INTEGER NOT NULL DEFAULT 0,
            tags TEXT,
            status TEXT NOT NULL DEFAULT 'draft',
            scheduled_at TEXT,
            published_at TEXT,
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL
        );

        CREATE TABLE IF NOT EXISTS audit_logs (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            user_id INTEGER,
            action TEXT NOT NULL,
            object_type TEXT NOT NULL,
            object_id INTEGER,
            timestamp TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            details TEXT
        );
        """,
    ),
    # Migration 2: indices on foreign keys used by list endpoints
    (
        2,
        """
        CREATE INDEX IF NOT EXISTS idx_shipments_shipper_id ON shipments(shipper_id);
        CREATE INDEX IF NOT EXISTS idx_shipments_status ON shipments(status);
        CREATE INDEX IF NOT EXISTS idx_bids_shipment_id ON bids(shipment_id);
        CREATE INDEX IF NOT EXISTS idx_bids_carrier_id ON bids(carrier_id);
        CREATE INDEX IF NOT EXISTS idx_messages_shipment_id ON messages(shipment_id);
        CREATE INDEX IF NOT EXISTS idx_notifications_user_id ON notifications(user_id);
        CREATE INDEX IF NOT EXISTS idx_tracking_points_shipment_id ON tracking_points(shipment_id);
        CREATE INDEX IF NOT EXISTS idx_ratings_ratee_id ON ratings(ratee_id);
        """,
    ),
]


def init_db() -> None:
    """Initialise the database and apply pending migrations.

    Creates the ``migrations`` table if it does not exist, checks the
    current schema version and applies any newer entries of
    ``MIGRATIONS``.  To change the schema, append a migration with an
    incremented version number.
    """
    _ensure_keeper()
    with get_cursor() as cursor:
        cursor.execute(
            "CREATE TABLE IF NOT EXISTS migrations (version INTEGER PRIMARY KEY)"
        )
        cursor.execute("SELECT MAX(version) as version FROM migrations")
        row = cursor.fetchone()
        current_version = row["version"] if row and row["version"] is not None else 0

        for version, sql in MIGRATIONS:
            if version > current_version:
                cursor.executescript(sql)
                cursor.execute(
                    "INSERT INTO migrations (version) VALUES (?)", (version,)
                )
                current_version = version
                logger.debug("Applied migration %s", version)
    logger.info("Database ready at %s (schema version %s)", get_database_path(), current_version)


def reset_db() -> None:
    """Drop every table so the next ``init_db`` starts from scratch."""
    _ensure_keeper()
    conn = get_connection()
    try:
        conn.execute("PRAGMA foreign_keys = OFF")
        names = [
            row["name"]
            for row in conn.execute(
                "SELECT name FROM sqlite_master WHERE type = 'table' AND name NOT LIKE 'sqlite_%'"
            ).fetchall()
        ]
        for name in names:
            conn.execute(f'DROP TABLE IF EXISTS "{name}"')
        conn.commit()
    finally:
        conn.close()
    logger.info("Dropped %d tables", len(names))
