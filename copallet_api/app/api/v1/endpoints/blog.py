"""
Blog endpoints for API v1.

Reading published posts is public; the admin routes see drafts too
and manage posts.  ``/blog/admin`` and ``/blog/slug/{slug}`` are
declared before ``/blog/{post_id}`` so they are matched first.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from copallet_api.app.api.deps import http_error
from copallet_api.app.core.security import get_optional_user, require_roles
from copallet_api.app.schemas.blog import BlogPostCreate, BlogPostList, BlogPostResponse, BlogPostUpdate
from copallet_api.app.services.blog_service import BlogService


router = APIRouter()

admin_only = require_roles("admin")


def _is_admin(user: Optional[dict]) -> bool:
    return bool(user) and user.get("role") == "admin"


@router.get("", response_model=BlogPostList)
async def list_posts(
    category: Optional[str] = Query(None),
    featured: Optional[bool] = Query(None),
) -> BlogPostList:
    """Published posts, newest first."""
    posts, total = await BlogService.list_posts(category=category, featured=featured)
    return BlogPostList(posts=posts, total=total)


@router.get("/admin", response_model=BlogPostList)
async def list_all_posts(current_user: dict = Depends(admin_only)) -> BlogPostList:
    posts, total = await BlogService.list_posts(include_unpublished=True)
    return BlogPostList(posts=posts, total=total)


@router.get("/slug/{slug}", response_model=BlogPostResponse)
async def get_post_by_slug(
    slug: str,
    current_user: Optional[dict] = Depends(get_optional_user),
) -> BlogPostResponse:
    try:
        post = await BlogService.get_by_slug(slug, include_unpublished=_is_admin(current_user))
    except ValueError as e:
        raise http_error(e) from e
    return BlogPostResponse(post=post)


@router.get("/{post_id}", response_model=BlogPostResponse)
async def get_post(
    post_id: int,
    current_user: Optional[dict] = Depends(get_optional_user),
) -> BlogPostResponse:
    try:
        post = await BlogService.get_post(post_id, include_unpublished=_is_admin(current_user))
    except ValueError as e:
        raise http_error(e) from e
    return BlogPostResponse(post=post)


@router.post("", response_model=BlogPostResponse, status_code=status.HTTP_201_CREATED)
async def create_post(data: BlogPostCreate, current_user: dict = Depends(admin_only)) -> BlogPostResponse:
    """Create a post.  The slug is derived from the title."""
    return BlogPostResponse(post=await BlogService.create_post(data, current_user))


@router.put("/{post_id}", response_model=BlogPostResponse)
async def update_post(
    post_id: int,
    data: BlogPostUpdate,
    current_user: dict = Depends(admin_only),
) -> BlogPostResponse:
    try:
        post = await BlogService.update_post(post_id, data, current_user)
    except ValueError as e:
        raise http_error(e) from e
    return BlogPostResponse(post=post)


@router.delete("/{post_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_post(post_id: int, current_user: dict = Depends(admin_only)) -> None:
    try:
        await BlogService.delete_post(post_id, current_user)
    except ValueError as e:
        raise http_error(e) from e
    return None
