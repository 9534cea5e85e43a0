"""
Pydantic schemas for blog posts.

Slugs are derived from titles by the service and are not accepted from
clients.  Only ``published`` posts are visible on public endpoints.
"""

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field


PostStatus = Literal["draft", "published", "scheduled"]


class BlogPostBase(BaseModel):
    title: str = Field(..., min_length=1, max_length=300)
    content: str = Field(..., min_length=1)
    excerpt: Optional[str] = Field(None, max_length=1000)
    author: str = Field(..., min_length=1, max_length=200)
    author_bio: Optional[str] = None
    author_image: Optional[str] = None
    category: Optional[str] = Field(None, max_length=100)
    read_time: Optional[str] = Field(None, max_length=50, examples=["5 min read"])
    image: Optional[str] = None
    featured: bool = False
    tags: List[str] = Field(default_factory=list)
    status: PostStatus = "draft"


class BlogPostCreate(BlogPostBase):
    date: Optional[datetime] = None
    scheduled_at: Optional[datetime] = None


class BlogPostUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=300)
    content: Optional[str] = Field(None, min_length=1)
    excerpt: Optional[str] = Field(None, max_length=1000)
    author: Optional[str] = Field(None, min_length=1, max_length=200)
    author_bio: Optional[str] = None
    author_image: Optional[str] = None
    date: Optional[datetime] = None
    category: Optional[str] = Field(None, max_length=100)
    read_time: Optional[str] = Field(None, max_length=50)
    image: Optional[str] = None
    featured: Optional[bool] = None
    tags: Optional[List[str]] = None
    status: Optional[PostStatus] = None
    scheduled_at: Optional[datetime] = None


class BlogPostRead(BlogPostBase):
    id: int
    slug: str
    date: str
    scheduled_at: Optional[str] = None
    published_at: Optional[str] = None
    created_at: str
    updated_at: str


class BlogPostResponse(BaseModel):
    post: BlogPostRead


class BlogPostList(BaseModel):
    posts: List[BlogPostRead]
    total: int
