"""
Profiles and team management: own profile, avatar upload, role changes.
"""

import pytest


class TestOwnProfile:
    @pytest.mark.asyncio
    async def test_get(self, member_client):
        resp = await member_client.get("/api/v1/profile")
        assert resp.status_code == 200
        data = resp.json()
        assert data["email"] == "member@example.com"
        assert data["full_name"] == "عضو"
        assert data["role"] == "member"
        assert data["avatar_url"] is None

    @pytest.mark.asyncio
    async def test_update_name(self, member_client):
        resp = await member_client.patch("/api/v1/profile", json={"full_name": "  علی رضایی "})
        assert resp.status_code == 200
        assert resp.json()["full_name"] == "علی رضایی"
        assert (await member_client.get("/api/v1/profile")).json()["full_name"] == "علی رضایی"

    @pytest.mark.asyncio
    async def test_blank_name_rejected(self, member_client):
        resp = await member_client.patch("/api/v1/profile", json={"full_name": "   "})
        assert resp.status_code == 422

    @pytest.mark.asyncio
    async def test_avatar_upload(self, member_client):
        resp = await member_client.post(
            "/api/v1/profile/avatar",
            files={"file": ("me.JPG", b"\xff\xd8\xff fake jpeg", "image/jpeg")},
        )
        assert resp.status_code == 200, resp.text
        url = resp.json()["avatar_url"]
        assert url.startswith(f"/storage/avatars/{member_client.user['user_id']}/")
        assert url.endswith(".jpg")

        served = await member_client.get(url)
        assert served.status_code == 200
        assert served.content == b"\xff\xd8\xff fake jpeg"


class TestTeam:
    @pytest.mark.asyncio
    async def test_list(self, member_client):
        resp = await member_client.get("/api/v1/team")
        assert resp.status_code == 200
        members = resp.json()["data"]
        assert [(m["email"], m["role"]) for m in members] == [
            ("admin@example.com", "admin"),
            ("member@example.com", "member"),
        ]

    @pytest.mark.asyncio
    async def test_member_cannot_change_roles(self, member_client):
        resp = await member_client.patch(
            f"/api/v1/team/{member_client.user['user_id']}", json={"role": "admin"}
        )
        assert resp.status_code == 403

    @pytest.mark.asyncio
    async def test_promote_then_demote(self, admin_client, member_client):
        member_id = member_client.user["user_id"]
        resp = await admin_client.patch(f"/api/v1/team/{member_id}", json={"role": "admin"})
        assert resp.status_code == 200
        assert resp.json()["role"] == "admin"

        # two admins now: the original one may step down
        admin_id = admin_client.user["user_id"]
        resp = await admin_client.patch(f"/api/v1/team/{admin_id}", json={"role": "member"})
        assert resp.status_code == 200

    @pytest.mark.asyncio
    async def test_last_admin_cannot_be_demoted(self, admin_client):
        resp = await admin_client.patch(
            f"/api/v1/team/{admin_client.user['user_id']}", json={"role": "member"}
        )
        assert resp.status_code == 409

    @pytest.mark.asyncio
    async def test_unknown_profile_and_role(self, admin_client):
        resp = await admin_client.patch(
            "/api/v1/team/00000000-0000-4000-8000-000000000000", json={"role": "member"}
        )
        assert resp.status_code == 404
        resp = await admin_client.patch(
            f"/api/v1/team/{admin_client.user['user_id']}", json={"role": "owner"}
        )
        assert resp.status_code == 422
