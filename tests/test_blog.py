"""
API tests for the blog and the slug helper.
"""

from __future__ import annotations

import pytest

from copallet_api.app.services.blog_service import slugify


@pytest.mark.parametrize(
    "title,slug",
    [
        ("Cost Optimization: 5 Tips!", "cost-optimization-5-tips"),
        ("  Pallets & Trucks  ", "pallets-trucks"),
        ("???", "post"),
    ],
)
def test_slugify(title: str, slug: str) -> None:
    assert slugify(title) == slug


def _post(**overrides) -> dict:
    body = {
        "title": "Reducing Empty Miles",
        "content": "<p>Backhauls matter.</p>",
        "author": "CoPallet Team",
        "category": "Industry Insights",
        "tags": ["efficiency"],
    }
    body.update(overrides)
    return body


class TestPublicBlog:
    def test_published_posts_newest_first(self, client) -> None:
        body = client.get("/api/blog").json()
        assert body["total"] == 3
        dates = [p["date"] for p in body["posts"]]
        assert dates == sorted(dates, reverse=True)

    def test_filters(self, client) -> None:
        featured = client.get("/api/blog", params={"featured": True}).json()["posts"]
        assert [p["slug"] for p in featured] == ["future-pallet-freight-digital-transformation"]
        tips = client.get("/api/blog", params={"category": "Shipping Tips"}).json()["posts"]
        assert len(tips) == 1

    def test_get_by_slug_and_id(self, client) -> None:
        post = client.get("/api/blog/slug/cost-optimization-strategies-pallet-shipping").json()["post"]
        assert post["title"] == "Cost Optimization Strategies for Pallet Shipping"
        assert client.get(f"/api/blog/{post['id']}").json()["post"]["slug"] == post["slug"]

    def test_unknown_slug(self, client) -> None:
        assert client.get("/api/blog/slug/nope").status_code == 404


class TestBlogAdmin:
    def test_drafts_are_hidden_from_the_public(self, client, admin_headers) -> None:
        created = client.post("/api/blog", json=_post(), headers=admin_headers)
        assert created.status_code == 201
        post = created.json()["post"]
        assert post["slug"] == "reducing-empty-miles"
        assert post["status"] == "draft"
        assert post["published_at"] is None

        assert client.get(f"/api/blog/{post['id']}").status_code == 404
        assert client.get(f"/api/blog/{post['id']}", headers=admin_headers).status_code == 200
        assert client.get("/api/blog").json()["total"] == 3
        assert client.get("/api/blog/admin", headers=admin_headers).json()["total"] == 4

    def test_publish_sets_published_at(self, client, admin_headers) -> None:
        post = client.post("/api/blog", json=_post(), headers=admin_headers).json()["post"]
        published = client.put(f"/api/blog/{post['id']}", json={"status": "published"}, headers=admin_headers)
        assert published.status_code == 200
        assert published.json()["post"]["published_at"] is not None
        assert client.get(f"/api/blog/slug/{post['slug']}").status_code == 200

    def test_duplicate_titles_get_unique_slugs(self, client, admin_headers) -> None:
        first = client.post("/api/blog", json=_post(), headers=admin_headers).json()["post"]
        second = client.post("/api/blog", json=_post(), headers=admin_headers).json()["post"]
        assert first["slug"] == "reducing-empty-miles"
        assert second["slug"] == "reducing-empty-miles-2"

    def test_retitle_regenerates_slug(self, client, admin_headers) -> None:
        post = client.post("/api/blog", json=_post(status="published"), headers=admin_headers).json()["post"]
        renamed = client.put(f"/api/blog/{post['id']}", json={"title": "Fewer Empty Miles"}, headers=admin_headers)
        assert renamed.json()["post"]["slug"] == "fewer-empty-miles"

    def test_delete(self, client, admin_headers) -> None:
        post = client.post("/api/blog", json=_post(), headers=admin_headers).json()["post"]
        assert client.delete(f"/api/blog/{post['id']}", headers=admin_headers).status_code == 204
        assert client.get(f"/api/blog/{post['id']}", headers=admin_headers).status_code == 404

    def test_only_admins_write(self, client, shipper_headers) -> None:
        assert client.post("/api/blog", json=_post(), headers=shipper_headers).status_code == 403
        assert client.get("/api/blog/admin", headers=shipper_headers).status_code == 403
