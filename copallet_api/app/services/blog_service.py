"""
Business logic for the public blog.

Administrators write posts; everyone can read published ones.  Each
post gets a unique slug derived from its title.
"""

import logging
import re
import sqlite3
from datetime import datetime, timezone
from typing import List, Optional, Tuple

from ..core.db import from_json, get_connection, to_json, utcnow
from ..schemas.blog import BlogPostCreate, BlogPostRead, BlogPostUpdate
from .audit_service import AuditService


logger = logging.getLogger(__name__)

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def slugify(title: str) -> str:
    """``"Cost Optimization: 5 Tips!"`` -> ``"cost-optimization-5-tips"``."""
    return _NON_ALNUM.sub("-", title.lower()).strip("-") or "post"


def _unique_slug(cursor: sqlite3.Cursor, title: str, exclude_id: Optional[int] = None) -> str:
    base = slugify(title)
    slug = base
    suffix = 2
    while True:
        row = cursor.execute("SELECT id FROM blog_posts WHERE slug = ?", (slug,)).fetchone()
        if not row or row["id"] == exclude_id:
            return slug
        slug = f"{base}-{suffix}"
        suffix += 1


def _post_date(value: Optional[datetime]) -> str:
    return (value or datetime.now(timezone.utc)).date().isoformat()


def _post_from_row(row: sqlite3.Row) -> BlogPostRead:
    data = dict(row)
    data["featured"] = bool(data["featured"])
    data["tags"] = from_json(data["tags"], [])
    return BlogPostRead(**data)


def _fetch(cursor: sqlite3.Cursor, post_id: int) -> sqlite3.Row:
    row = cursor.execute("SELECT * FROM blog_posts WHERE id = ?", (post_id,)).fetchone()
    if not row:
        raise ValueError(f"Blog post {post_id} not found")
    return row


class BlogService:
    """Service for blog posts."""

    @classmethod
    async def list_posts(
        cls,
        category: Optional[str] = None,
        featured: Optional[bool] = None,
        include_unpublished: bool = False,
    ) -> Tuple[List[BlogPostRead], int]:
        """Posts newest first; only published ones unless ``include_unpublished``."""
        conn = get_connection()
        try:
            where_clauses: List[str] = []
            params: list = []
            if not include_unpublished:
                where_clauses.append("status = 'published'")
            if category:
                where_clauses.append("LOWER(category) = LOWER(?)")
                params.append(category)
            if featured is not None:
                where_clauses.append("featured = ?")
                params.append(1 if featured else 0)
            query = "SELECT * FROM blog_posts"
            if where_clauses:
                query += " WHERE " + " AND ".join(where_clauses)
            query += " ORDER BY date DESC, id DESC"
            posts = [_post_from_row(r) for r in conn.execute(query, tuple(params)).fetchall()]
            return posts, len(posts)
        finally:
            conn.close()

    @classmethod
    async def get_post(cls, post_id: int, include_unpublished: bool = False) -> BlogPostRead:
        conn = get_connection()
        try:
            row = _fetch(conn.cursor(), post_id)
        finally:
            conn.close()
        if row["status"] != "published" and not include_unpublished:
            raise ValueError(f"Blog post {post_id} not found")
        return _post_from_row(row)

    @classmethod
    async def get_by_slug(cls, slug: str, include_unpublished: bool = False) -> BlogPostRead:
        conn = get_connection()
        try:
            row = conn.execute("SELECT * FROM blog_posts WHERE slug = ?", (slug,)).fetchone()
        finally:
            conn.close()
        if not row or (row["status"] != "published" and not include_unpublished):
            raise ValueError(f"Blog post '{slug}' not found")
        return _post_from_row(row)

    @classmethod
    async def create_post(cls, data: BlogPostCreate, current_user: dict) -> BlogPostRead:
        now = utcnow()
        conn = get_connection()
        try:
            cursor = conn.cursor()
            slug = _unique_slug(cursor, data.title)
            cursor.execute(
                """
                INSERT INTO blog_posts (title, slug, content, excerpt, author, author_bio, author_image, date,
                    category, read_time, image, featured, tags, status, scheduled_at, published_at,
                    created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    data.title,
                    slug,
                    data.content,
                    data.excerpt,
                    data.author,
                    data.author_bio,
                    data.author_image,
                    _post_date(data.date),
                    data.category,
                    data.read_time,
                    data.image,
                    1 if data.featured else 0,
                    to_json(data.tags),
                    data.status,
                    data.scheduled_at.isoformat() if data.scheduled_at else None,
                    now if data.status == "published" else None,
                    now,
                    now,
                ),
            )
            post_id = cursor.lastrowid
            conn.commit()
            row = _fetch(cursor, post_id)
        finally:
            conn.close()
        logger.info("Blog post %s created (%s, %s)", post_id, slug, data.status)
        await AuditService.log(current_user["user_id"], "create", "blog_post", post_id, {"slug": slug})
        return _post_from_row(row)

    @classmethod
    async def update_post(cls, post_id: int, data: BlogPostUpdate, current_user: dict) -> BlogPostRead:
        """Update a post; a new title regenerates the slug."""
        updates = data.model_dump(exclude_unset=True)
        conn = get_connection()
        try:
            cursor = conn.cursor()
            row = _fetch(cursor, post_id)
            columns = {}
            for key, value in updates.items():
                if key in ("title", "content", "author", "featured", "status") and value is None:
                    continue
                if key == "tags":
                    columns[key] = to_json(value or [])
                elif key == "featured":
                    columns[key] = 1 if value else 0
                elif key == "date":
                    columns[key] = _post_date(value)
                elif key == "scheduled_at":
                    columns[key] = value.isoformat() if value else None
                else:
                    columns[key] = value
            if "title" in columns and columns["title"] != row["title"]:
                columns["slug"] = _unique_slug(cursor, columns["title"], exclude_id=post_id)
            if columns.get("status") == "published" and not row["published_at"]:
                columns["published_at"] = utcnow()
            if columns:
                assignments = ", ".join(f"{key} = ?" for key in columns)
                cursor.execute(
                    f"UPDATE blog_posts SET {assignments}, updated_at = ? WHERE id = ?",
                    tuple(columns.values()) + (utcnow(), post_id),
                )
                conn.commit()
                row = _fetch(cursor, post_id)
        finally:
            conn.close()
        await AuditService.log(current_user["user_id"], "update", "blog_post", post_id, {"fields": sorted(columns)})
        return _post_from_row(row)

    @classmethod
    async def delete_post(cls, post_id: int, current_user: dict) -> None:
        conn = get_connection()
        try:
            cursor = conn.cursor()
            row = _fetch(cursor, post_id)
            cursor.execute("DELETE FROM blog_posts WHERE id = ?", (post_id,))
            conn.commit()
        finally:
            conn.close()
        await AuditService.log(current_user["user_id"], "delete", "blog_post", post_id, {"slug": row["slug"]})
