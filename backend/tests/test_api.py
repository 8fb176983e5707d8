"""
Murmur Backend — API Endpoint Tests
=====================================

What:  End-to-end flows through the HTTP layer (cookies, routing, status
       codes, camelCase bodies, error envelope).

What we test:
    ✅ register → login → create "hello" → list all: one post by the author
    ✅ follow / unfollow visible through the profile endpoint
    ✅ like toggle, comment, delete permissions over HTTP
    ✅ notifications list / read / delete endpoints
    ✅ image posts are served back from /api/media
    ✅ X-Request-ID is echoed; /health reports dependencies
"""

import pytest


class TestPostFlow:

    @pytest.mark.asyncio
    async def test_register_login_post_list(self, test_client, register):
        alice = await register(test_client, "alice")
        test_client.cookies.clear()

        login = await test_client.post(
            "/api/auth/login", json={"email": "alice@example.com", "password": "secret123"}
        )
        assert login.status_code == 200

        created = await test_client.post("/api/secured/posts/create", json={"text": "hello"})
        assert created.status_code == 201
        assert created.json()["user"]["id"] == alice["id"]

        listing = await test_client.get("/api/secured/posts/all")
        assert listing.status_code == 200
        posts = listing.json()
        assert len(posts) == 1
        assert posts[0]["text"] == "hello"
        assert posts[0]["user"]["id"] == alice["id"]
        assert posts[0]["userId"] == alice["id"]
        assert posts[0]["comments"] == [] and posts[0]["likes"] == []

    @pytest.mark.asyncio
    async def test_empty_post_rejected(self, test_client, register):
        await register(test_client, "alice")

        response = await test_client.post("/api/secured/posts/create", json={"text": ""})

        assert response.status_code == 400
        assert response.json()["message"] == "Post must have text or image"

    @pytest.mark.asyncio
    async def test_image_post_served_from_media_route(
        self, test_client, register, sample_image_bytes, sample_image_data_uri
    ):
        await register(test_client, "alice")

        created = await test_client.post("/api/secured/posts/create", json={"img": sample_image_data_uri})
        assert created.status_code == 201
        img_url = created.json()["img"]

        served = await test_client.get(img_url)
        assert served.status_code == 200
        assert served.content == sample_image_bytes

    @pytest.mark.asyncio
    async def test_media_route_missing_file(self, test_client):
        response = await test_client.get("/api/media/2026/01/01/nope.jpg")
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_like_comment_and_delete_permissions(self, test_client, register):
        await register(test_client, "alice")
        post = (await test_client.post("/api/secured/posts/create", json={"text": "mine"})).json()

        bob = await register(test_client, "bob")
        liked = await test_client.post(f"/api/secured/posts/like/{post['id']}")
        assert liked.status_code == 200
        assert liked.json()["liked"] is True
        assert [like["userId"] for like in liked.json()["data"]] == [bob["id"]]

        commented = await test_client.post(
            f"/api/secured/posts/comment/{post['id']}", json={"text": "nice one"}
        )
        assert commented.status_code == 200
        assert commented.json()["comments"][0]["user"]["username"] == "bob"

        forbidden = await test_client.delete(f"/api/secured/posts/delete/{post['id']}")
        assert forbidden.status_code == 403
        assert forbidden.json()["error"] == "forbidden"

        await test_client.post("/api/auth/login", json={"email": "alice@example.com", "password": "secret123"})
        deleted = await test_client.delete(f"/api/secured/posts/delete/{post['id']}")
        assert deleted.status_code == 200
        assert deleted.json()["post"]["id"] == post["id"]

        assert (await test_client.get("/api/secured/posts/all")).json() == []
        missing = await test_client.delete(f"/api/secured/posts/delete/{post['id']}")
        assert missing.status_code == 404

    @pytest.mark.asyncio
    async def test_following_feed_empty_is_200(self, test_client, register):
        await register(test_client, "alice")
        response = await test_client.get("/api/secured/posts/following")
        assert response.status_code == 200
        assert response.json() == []

    @pytest.mark.asyncio
    async def test_user_posts_unknown_email_is_404(self, test_client, register):
        await register(test_client, "alice")
        response = await test_client.get("/api/secured/posts/user/ghost@example.com")
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_malformed_post_id_is_400(self, test_client, register):
        await register(test_client, "alice")
        response = await test_client.post("/api/secured/posts/like/not-a-uuid")
        assert response.status_code == 400


class TestFollowFlow:

    @pytest.mark.asyncio
    async def test_follow_visible_in_profile_then_gone(self, test_client, register):
        bob = await register(test_client, "bob")
        alice = await register(test_client, "alice")

        followed = await test_client.post(f"/api/secured/user/follow/{bob['id']}")
        assert followed.status_code == 200
        assert followed.json() == {"message": "User followed successfully", "following": True}

        profile = (await test_client.get("/api/secured/user/profile/bob@example.com")).json()
        assert alice["id"] in profile["followers"]
        me = (await test_client.get("/api/secured/user/me")).json()
        assert bob["id"] in me["following"]

        unfollowed = await test_client.post(f"/api/secured/user/follow/{bob['id']}")
        assert unfollowed.json()["following"] is False

        profile = (await test_client.get("/api/secured/user/profile/bob@example.com")).json()
        assert alice["id"] not in profile["followers"]

    @pytest.mark.asyncio
    async def test_self_follow_is_400(self, test_client, register):
        alice = await register(test_client, "alice")
        response = await test_client.post(f"/api/secured/user/follow/{alice['id']}")
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_suggested_excludes_self(self, test_client, register):
        bob = await register(test_client, "bob")
        alice = await register(test_client, "alice")

        suggested = (await test_client.get("/api/secured/user/suggested")).json()

        assert [u["id"] for u in suggested] == [bob["id"]]
        assert alice["id"] not in [u["id"] for u in suggested]

    @pytest.mark.asyncio
    async def test_update_profile(self, test_client, register):
        await register(test_client, "alice")

        response = await test_client.put(
            "/api/secured/user/update",
            json={"fullName": "Alice Updated", "bio": "hi there"},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["fullName"] == "Alice Updated"
        assert body["bio"] == "hi there"
        assert body["username"] == "alice"
        assert body["postCount"] == 0

    @pytest.mark.asyncio
    async def test_profile_image_replacement(self, test_client, register, sample_image_data_uri):
        await register(test_client, "alice")
        first = (await test_client.put(
            "/api/secured/user/update", json={"profileImg": sample_image_data_uri}
        )).json()["profileImg"]

        rejected = await test_client.put(
            "/api/secured/user/update",
            json={"fullName": "Alice", "profileImg": "not-an-image"},
        )
        assert rejected.status_code == 400
        assert (await test_client.get(first)).status_code == 200

        second = (await test_client.put(
            "/api/secured/user/update",
            json={"profileImg": sample_image_data_uri, "currentPassword": "", "newPassword": ""},
        )).json()["profileImg"]

        assert second != first
        assert (await test_client.get(first)).status_code == 404
        assert (await test_client.get(second)).status_code == 200


class TestNotificationFlow:

    @pytest.mark.asyncio
    async def test_list_read_delete(self, test_client, register):
        alice = await register(test_client, "alice")
        await register(test_client, "bob")
        await test_client.post(f"/api/secured/user/follow/{alice['id']}")

        await test_client.post("/api/auth/login", json={"email": "alice@example.com", "password": "secret123"})

        listed = (await test_client.get("/api/secured/notifications")).json()
        assert len(listed) == 1
        assert listed[0]["type"] == "follow"
        assert listed[0]["read"] is False
        assert listed[0]["fromUser"]["username"] == "bob"

        read = await test_client.post("/api/secured/notifications/read")
        assert read.json()["count"] == 1
        assert (await test_client.get("/api/secured/notifications")).json()[0]["read"] is True

        deleted = await test_client.delete("/api/secured/notifications")
        assert deleted.json()["count"] == 1
        assert (await test_client.get("/api/secured/notifications")).json() == []


class TestPlumbing:

    @pytest.mark.asyncio
    async def test_request_id_echoed(self, test_client):
        response = await test_client.get("/api/secured/user/me", headers={"X-Request-ID": "abc12345"})
        assert response.headers["X-Request-ID"] == "abc12345"
        assert response.json()["request_id"] == "abc12345"

    @pytest.mark.asyncio
    async def test_request_id_generated(self, test_client):
        response = await test_client.get("/api/secured/user/me")
        assert len(response.headers["X-Request-ID"]) == 8

    @pytest.mark.asyncio
    async def test_health(self, test_client):
        response = await test_client.get("/health")
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["database"] == "connected"
        assert body["media"] == "available"
