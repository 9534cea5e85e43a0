"""
Pydantic schema definitions for API payloads.

Each domain (users, shipments, bids, blog, etc.) defines its own
Pydantic models for request and response bodies.  Schemas are
separated from the storage layer so that the JSON shape of the API
does not depend on how rows are laid out in SQLite.
"""
