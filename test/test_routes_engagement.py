"""
Tests for class and gallery like/save routes.
"""

from contenthub.middleware.rate_limit import ENGAGEMENT_LIMIT
from contenthub.models import ClassItem, Gallery


class TestClassEngagement:
    async def test_like_and_save_toggle(self, client, auth_headers, published_class: ClassItem):
        like = await client.post(f"/api/classes/{published_class.id}/like", headers=auth_headers)
        assert like.json() == {"class_id": published_class.id, "active": True, "count": 1}

        save = await client.post(f"/api/classes/{published_class.id}/save", headers=auth_headers)
        assert save.json() == {"class_id": published_class.id, "active": True, "count": 1}

        unlike = await client.post(f"/api/classes/{published_class.id}/like", headers=auth_headers)
        assert unlike.json() == {"class_id": published_class.id, "active": False, "count": 0}

    async def test_unknown_class(self, client, auth_headers):
        response = await client.post("/api/classes/999/save", headers=auth_headers)
        assert response.status_code == 404


class TestGalleryEngagement:
    async def test_like_and_save_toggle(
        self, client, auth_headers, other_auth_headers, published_gallery: Gallery
    ):
        url = f"/api/galleries/{published_gallery.id}"

        like = await client.post(f"{url}/like", headers=auth_headers)
        assert like.status_code == 200
        assert like.json() == {"gallery_id": published_gallery.id, "active": True, "count": 1}

        other_like = await client.post(f"{url}/like", headers=other_auth_headers)
        assert other_like.json()["count"] == 2

        save = await client.post(f"{url}/save", headers=auth_headers)
        assert save.json() == {"gallery_id": published_gallery.id, "active": True, "count": 1}

        unsave = await client.post(f"{url}/save", headers=auth_headers)
        assert unsave.json() == {"gallery_id": published_gallery.id, "active": False, "count": 0}

    async def test_requires_login(self, client, published_gallery: Gallery):
        response = await client.post(f"/api/galleries/{published_gallery.id}/like")
        assert response.status_code == 401

    async def test_unknown_gallery(self, client, auth_headers):
        response = await client.post("/api/galleries/999/like", headers=auth_headers)
        assert response.status_code == 404
        assert response.json()["error"]["error_code"] == "RESOURCE_NOT_FOUND"

    async def test_rate_limited(self, client, auth_headers, published_gallery: Gallery):
        allowed = int(ENGAGEMENT_LIMIT.split("/")[0])
        url = f"/api/galleries/{published_gallery.id}/like"

        for _ in range(allowed):
            assert (await client.post(url, headers=auth_headers)).status_code == 200

        response = await client.post(url, headers=auth_headers)
        assert response.status_code == 429
