"""
Tests for comment and moderation routes.
"""

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from contenthub.middleware.rate_limit import COMMENT_CREATE_LIMIT
from contenthub.models import ClassComment, ClassItem


async def post_comment(client, class_id: int, headers: dict, content: str = "Nice class", parent_id=None):
    payload = {"content": content}
    if parent_id is not None:
        payload["parent_id"] = parent_id
    return await client.post(f"/api/classes/{class_id}/comments", json=payload, headers=headers)


class TestListComments:
    async def test_requires_login(self, client, published_class: ClassItem):
        response = await client.get("/api/class/comments", params={"classId": published_class.id})
        assert response.status_code == 401
        assert response.json()["error"]["error_code"] == "AUTH_FAILED"

    async def test_page_with_replies(self, client, auth_headers, other_auth_headers, published_class: ClassItem):
        first = (await post_comment(client, published_class.id, auth_headers, "first")).json()
        await post_comment(client, published_class.id, other_auth_headers, "second")
        await post_comment(client, published_class.id, other_auth_headers, "reply", parent_id=first["id"])

        response = await client.get(
            "/api/class/comments",
            params={"classId": published_class.id, "limit": 1, "sortOrder": "latest"},
            headers=auth_headers,
        )

        assert response.status_code == 200
        body = response.json()
        assert body["totalTopLevel"] == 2
        assert [comment["content"] for comment in body["comments"]] == ["second"]

        older = await client.get(
            "/api/class/comments",
            params={"classId": published_class.id, "offset": 1, "limit": 1},
            headers=auth_headers,
        )
        assert [comment["content"] for comment in older.json()["comments"]] == ["first", "reply"]

    async def test_class_id_is_required(self, client, auth_headers):
        response = await client.get("/api/class/comments", headers=auth_headers)
        assert response.status_code == 400

    async def test_unknown_class(self, client, auth_headers):
        response = await client.get("/api/class/comments", params={"classId": 404}, headers=auth_headers)
        assert response.status_code == 404


class TestCreateComment:
    async def test_create(self, client, auth_headers, test_user, published_class: ClassItem, test_db: AsyncSession):
        response = await post_comment(client, published_class.id, auth_headers, "  Loved it  ")

        assert response.status_code == 201
        body = response.json()
        assert body["content"] == "Loved it"
        assert body["author"] == {"id": test_user.id, "name": "Reader", "avatar_url": None}
        assert body["likes_count"] == 0
        assert await test_db.scalar(
            select(ClassItem.comment_count).where(ClassItem.id == published_class.id)
        ) == 1

    async def test_blank_content_is_rejected(self, client, auth_headers, published_class: ClassItem):
        response = await post_comment(client, published_class.id, auth_headers, "   ")
        assert response.status_code == 400

    async def test_nested_reply_is_rejected(self, client, auth_headers, published_class: ClassItem):
        top = (await post_comment(client, published_class.id, auth_headers)).json()
        reply = (await post_comment(client, published_class.id, auth_headers, "r", parent_id=top["id"])).json()

        response = await post_comment(client, published_class.id, auth_headers, "deeper", parent_id=reply["id"])

        assert response.status_code == 400
        assert response.json()["error"]["details"]["field"] == "parent_id"

    async def test_requires_login(self, client, published_class: ClassItem):
        response = await client.post(f"/api/classes/{published_class.id}/comments", json={"content": "hi"})
        assert response.status_code == 401

    async def test_rate_limited(self, client, auth_headers, published_class: ClassItem, test_db: AsyncSession):
        allowed = int(COMMENT_CREATE_LIMIT.split("/")[0])
        for index in range(allowed):
            response = await post_comment(client, published_class.id, auth_headers, f"comment {index}")
            assert response.status_code == 201

        response = await post_comment(client, published_class.id, auth_headers, "one too many")

        assert response.status_code == 429
        assert response.json()["error"]["error_code"] == "RATE_LIMIT_EXCEEDED"
        assert await test_db.scalar(select(func.count()).select_from(ClassComment)) == allowed


class TestEditAndDelete:
    async def test_author_can_edit(self, client, auth_headers, published_class: ClassItem):
        comment = (await post_comment(client, published_class.id, auth_headers)).json()

        response = await client.patch(f"/api/comments/{comment['id']}", json={"content": "Edited"}, headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["content"] == "Edited"

    async def test_other_user_cannot_edit(self, client, auth_headers, other_auth_headers, published_class: ClassItem):
        comment = (await post_comment(client, published_class.id, auth_headers)).json()

        response = await client.patch(
            f"/api/comments/{comment['id']}", json={"content": "Hijacked"}, headers=other_auth_headers
        )

        assert response.status_code == 403
        assert response.json()["error"]["error_code"] == "AUTH_PERMISSION_DENIED"

    async def test_delete_with_replies(self, client, auth_headers, other_auth_headers, published_class: ClassItem):
        top = (await post_comment(client, published_class.id, auth_headers)).json()
        await post_comment(client, published_class.id, other_auth_headers, "reply", parent_id=top["id"])

        response = await client.delete(f"/api/comments/{top['id']}", headers=auth_headers)

        assert response.status_code == 200
        assert response.json() == {"success": True, "deleted_count": 2}

    async def test_admin_can_delete_any_comment(self, client, auth_headers, admin_auth_headers, published_class):
        comment = (await post_comment(client, published_class.id, auth_headers)).json()

        response = await client.delete(f"/api/comments/{comment['id']}", headers=admin_auth_headers)

        assert response.status_code == 200
        assert response.json()["deleted_count"] == 1

    async def test_delete_missing_comment(self, client, auth_headers):
        response = await client.delete("/api/comments/12345", headers=auth_headers)
        assert response.status_code == 404


class TestLikesAndModeration:
    async def test_toggle_like(self, client, auth_headers, other_auth_headers, published_class: ClassItem):
        comment = (await post_comment(client, published_class.id, auth_headers)).json()

        liked = await client.post(f"/api/comments/{comment['id']}/like", headers=other_auth_headers)
        assert liked.json() == {"comment_id": comment["id"], "liked": True, "likes_count": 1}

        unliked = await client.post(f"/api/comments/{comment['id']}/like", headers=other_auth_headers)
        assert unliked.json() == {"comment_id": comment["id"], "liked": False, "likes_count": 0}

    async def test_visibility_requires_admin(self, client, auth_headers, published_class: ClassItem):
        comment = (await post_comment(client, published_class.id, auth_headers)).json()

        response = await client.post(f"/api/comments/{comment['id']}/visibility", headers=auth_headers)

        assert response.status_code == 404

    async def test_hidden_comment_is_admin_only(
        self, client, auth_headers, other_auth_headers, admin_auth_headers, published_class: ClassItem
    ):
        comment = (await post_comment(client, published_class.id, auth_headers)).json()

        hidden = await client.post(f"/api/comments/{comment['id']}/visibility", headers=admin_auth_headers)
        assert hidden.json() == {"id": comment["id"], "is_visible": False}

        params = {"classId": published_class.id}
        as_user = await client.get("/api/class/comments", params=params, headers=other_auth_headers)
        as_admin = await client.get("/api/class/comments", params=params, headers=admin_auth_headers)
        assert as_user.json()["comments"] == []
        assert [c["id"] for c in as_admin.json()["comments"]] == [comment["id"]]

    async def test_bulk_visibility(self, client, auth_headers, admin_auth_headers, published_class, test_db):
        ids = [(await post_comment(client, published_class.id, auth_headers, f"c{i}")).json()["id"] for i in range(2)]

        response = await client.post(
            "/api/admin/comments/visibility",
            json={"ids": [*ids, 999], "is_visible": False},
            headers=admin_auth_headers,
        )

        assert response.status_code == 200
        result = response.json()
        assert result["success"] is False
        assert result["processed"] == ids
        assert [failure["id"] for failure in result["failed"]] == [999]
        hidden = await test_db.scalar(
            select(func.count()).select_from(ClassComment).where(ClassComment.is_visible.is_(False))
        )
        assert hidden == 2

    async def test_admin_comment_list(self, client, auth_headers, admin_auth_headers, published_class: ClassItem):
        first = (await post_comment(client, published_class.id, auth_headers, "first")).json()
        await client.post(f"/api/comments/{first['id']}/visibility", headers=admin_auth_headers)
        await post_comment(client, published_class.id, auth_headers, "reply", parent_id=first["id"])

        response = await client.get("/api/admin/comments", headers=admin_auth_headers)

        assert response.status_code == 200
        body = response.json()
        assert body["total"] == 2
        assert [row["content"] for row in body["items"]] == ["reply", "first"]
        assert body["items"][1]["is_visible"] is False
        assert body["items"][1]["class_slug"] == published_class.slug

    async def test_admin_comment_list_hidden_from_users(self, client, auth_headers):
        response = await client.get("/api/admin/comments", headers=auth_headers)
        assert response.status_code == 404
