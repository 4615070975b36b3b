"""
SkillSwap Backend: User Directory & Platform API Integration Tests
==================================================================

What:  User endpoints, stored-file serving, health check and the shared
       middleware/error behaviour.
How:   HTTPX AsyncClient against the app; photo uploads are multipart with
       the form field `photo`.

What we test:
    ✅ GET /api/users: public only, search, availability, no credentials in output
    ✅ GET /api/users/{id}: 200 / 404
    ✅ PUT /api/users/{id}: owner only, allow-listed fields
    ✅ PUT /api/users/{id}/profile-photo: upload then fetch via /api/files
    ✅ /api/files traversal is refused
    ✅ /health, unknown routes, X-Request-ID
"""

import uuid

import pytest


class TestBrowseUsers:
    """GET /api/users"""

    @pytest.mark.asyncio
    async def test_lists_public_users_newest_first(self, test_client, make_user):
        ana = await make_user("Ana")
        ben = await make_user("Ben")
        await make_user("Hidden", is_public=False)

        response = await test_client.get("/api/users")

        assert response.status_code == 200
        assert [u["id"] for u in response.json()] == [str(ben.id), str(ana.id)]

    @pytest.mark.asyncio
    async def test_no_credentials_in_output(self, test_client, make_user):
        await make_user("Ana")

        response = await test_client.get("/api/users")

        assert "password_hash" not in response.json()[0]
        assert "password" not in response.text

    @pytest.mark.asyncio
    async def test_search_and_availability(self, test_client, make_user):
        match = await make_user("Ana", skills_offered=["Guitar"], availability="weekends")
        await make_user("Ben", skills_offered=["guitar"], availability="evenings")
        await make_user("Cy", skills_offered=["chess"], availability="weekends")

        response = await test_client.get(
            "/api/users", params={"search": "guitar", "availability": "weekends"}
        )

        assert [u["id"] for u in response.json()] == [str(match.id)]

    @pytest.mark.asyncio
    async def test_browsing_needs_no_token(self, test_client):
        response = await test_client.get("/api/users")

        assert response.status_code == 200
        assert response.json() == []


class TestGetUser:
    """GET /api/users/{id}"""

    @pytest.mark.asyncio
    async def test_get_profile(self, test_client, make_user):
        ana = await make_user("Ana", location="Lisbon", skills_wanted=["cooking"])

        response = await test_client.get(f"/api/users/{ana.id}")

        assert response.status_code == 200
        data = response.json()
        assert data["name"] == "Ana"
        assert data["location"] == "Lisbon"
        assert data["skills_wanted"] == ["cooking"]
        assert "password_hash" not in data

    @pytest.mark.asyncio
    async def test_unknown_user_is_404(self, test_client):
        response = await test_client.get(f"/api/users/{uuid.uuid4()}")

        assert response.status_code == 404
        assert response.json()["error"] == "not_found"
        assert response.json()["message"] == "User not found"


class TestUpdateUser:
    """PUT /api/users/{id}"""

    @pytest.mark.asyncio
    async def test_update_own_profile(self, test_client, make_user, auth_headers):
        ana = await make_user("Ana")

        response = await test_client.put(
            f"/api/users/{ana.id}",
            json={
                "location": "Porto",
                "skills_offered": ["Guitar", "guitar", " Piano "],
                "email": "takeover@example.com",
                "password_hash": "nope",
            },
            headers=auth_headers(ana),
        )

        assert response.status_code == 200
        data = response.json()
        assert data["location"] == "Porto"
        assert data["skills_offered"] == ["Guitar", "Piano"]
        assert data["email"] == ana.email

    @pytest.mark.asyncio
    async def test_update_other_profile_is_403(self, test_client, make_user, auth_headers):
        ana = await make_user("Ana")
        ben = await make_user("Ben")

        response = await test_client.put(
            f"/api/users/{ana.id}", json={"name": "Hacked"}, headers=auth_headers(ben)
        )

        assert response.status_code == 403
        assert (await test_client.get(f"/api/users/{ana.id}")).json()["name"] == "Ana"

    @pytest.mark.asyncio
    async def test_update_requires_token(self, test_client, make_user):
        ana = await make_user("Ana")

        response = await test_client.put(f"/api/users/{ana.id}", json={"name": "X"})

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_blank_name_is_422(self, test_client, make_user, auth_headers):
        ana = await make_user("Ana")

        response = await test_client.put(
            f"/api/users/{ana.id}", json={"name": "   "}, headers=auth_headers(ana)
        )

        assert response.status_code == 422


class TestProfilePhoto:
    """PUT /api/users/{id}/profile-photo and GET /api/files/{path}"""

    @pytest.mark.asyncio
    async def test_upload_then_fetch(self, test_client, make_user, auth_headers, sample_photo_bytes):
        ana = await make_user("Ana")

        response = await test_client.put(
            f"/api/users/{ana.id}/profile-photo",
            files={"photo": ("me.png", sample_photo_bytes, "image/png")},
            headers=auth_headers(ana),
        )

        assert response.status_code == 200
        data = response.json()
        assert data["message"] == "Profile photo updated successfully"
        url = data["profile_photo_url"]
        assert url.startswith("/api/files/photos/")

        profile = await test_client.get(f"/api/users/{ana.id}")
        assert profile.json()["profile_photo_url"] == url

        served = await test_client.get(url)
        assert served.status_code == 200
        assert served.headers["content-type"] == "image/png"
        assert served.content == sample_photo_bytes

    @pytest.mark.asyncio
    async def test_upload_unsupported_type_is_400(self, test_client, make_user, auth_headers):
        ana = await make_user("Ana")

        response = await test_client.put(
            f"/api/users/{ana.id}/profile-photo",
            files={"photo": ("anim.gif", b"GIF89a", "image/gif")},
            headers=auth_headers(ana),
        )

        assert response.status_code == 400
        assert response.json()["details"]["field"] == "photo"

    @pytest.mark.asyncio
    async def test_upload_for_someone_else_is_403(self, test_client, make_user, auth_headers, sample_photo_bytes):
        ana = await make_user("Ana")
        ben = await make_user("Ben")

        response = await test_client.put(
            f"/api/users/{ana.id}/profile-photo",
            files={"photo": ("me.png", sample_photo_bytes, "image/png")},
            headers=auth_headers(ben),
        )

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_missing_file_is_404(self, test_client):
        response = await test_client.get("/api/files/photos/2024/01/01/missing.png")

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_traversal_is_refused(self, test_client):
        response = await test_client.get("/api/files/..%2F..%2Fetc%2Fpasswd")

        assert response.status_code in (400, 404)
        assert "root:" not in response.text


class TestPlatform:
    """Health check, unknown routes and request correlation."""

    @pytest.mark.asyncio
    async def test_health(self, test_client):
        response = await test_client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["database"] == "connected"
        assert data["uptime_seconds"] >= 0

    @pytest.mark.asyncio
    async def test_health_under_api_prefix(self, test_client):
        response = await test_client.get("/api/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    @pytest.mark.asyncio
    async def test_unknown_route(self, test_client):
        response = await test_client.get("/api/does-not-exist")

        assert response.status_code == 404
        assert response.json()["message"] == "Route not found"

    @pytest.mark.asyncio
    async def test_request_id_generated(self, test_client):
        response = await test_client.get("/api/users")

        assert len(response.headers["X-Request-ID"]) == 8

    @pytest.mark.asyncio
    async def test_request_id_echoed(self, test_client):
        response = await test_client.get("/api/users", headers={"X-Request-ID": "abc-123"})

        assert response.headers["X-Request-ID"] == "abc-123"

    @pytest.mark.asyncio
    async def test_lifespan_builds_sqlite_schema(self):
        from sqlalchemy import inspect

        from skillswap import database
        from skillswap.main import app, lifespan

        async with lifespan(app):
            async with database.engine.connect() as conn:
                tables = await conn.run_sync(lambda sync_conn: inspect(sync_conn).get_table_names())

        assert {"users", "swap_requests"} <= set(tables)
