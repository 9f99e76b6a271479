"""
HTTP-level tests for the v1 API: auth, org scoping, the invite and org-request
flows end to end, and the error envelope.
"""

from __future__ import annotations

import uuid
from datetime import timedelta

import pytest
from httpx import AsyncClient

from app.core.auth import create_jwt
from app.models.base import utcnow
from app.services import notifications
from keeper_shared.schemas.notifications import NotificationType


@pytest.fixture
async def admin(create_user):
    return await create_user(email="root@example.com", is_superadmin=True)


@pytest.fixture
async def org(client: AsyncClient, admin):
    _, headers = admin
    resp = await client.post("/api/v1/orgs", json={"name": "Reptile House"}, headers=headers)
    assert resp.status_code == 201
    return resp.json()


# ---------------------------------------------------------------------------
# Authentication
# ---------------------------------------------------------------------------

class TestAuthentication:

    @pytest.mark.asyncio
    async def test_missing_token(self, client):
        resp = await client.get("/api/v1/orgs")
        assert resp.status_code == 401
        assert resp.json()["error"]["code"] == "AUTHENTICATION_REQUIRED"

    @pytest.mark.asyncio
    async def test_garbage_token(self, client):
        resp = await client.get("/api/v1/orgs", headers={"Authorization": "Bearer nope"})
        assert resp.status_code == 401

    @pytest.mark.asyncio
    async def test_expired_token(self, client, create_user):
        profile, _ = await create_user()
        token = create_jwt(profile.id, profile.email, expires_delta=timedelta(seconds=-5))
        resp = await client.get("/api/v1/orgs", headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 401

    @pytest.mark.asyncio
    async def test_unknown_profile(self, client):
        token = create_jwt(uuid.uuid4(), "ghost@example.com")
        resp = await client.get("/api/v1/orgs", headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 401

    @pytest.mark.asyncio
    async def test_trace_id_echoed(self, client, create_user):
        _, headers = await create_user()
        resp = await client.get("/api/v1/orgs", headers={**headers, "X-Trace-Id": "trc_abc"})
        assert resp.headers["X-Trace-Id"] == "trc_abc"
        assert resp.headers["X-Frame-Options"] == "DENY"


# ---------------------------------------------------------------------------
# Organizations and members
# ---------------------------------------------------------------------------

class TestOrganizations:

    @pytest.mark.asyncio
    async def test_superadmin_creates_and_lists(self, client, admin, org):
        _, headers = admin
        resp = await client.get("/api/v1/orgs", headers=headers)
        assert resp.status_code == 200
        data = resp.json()["data"]
        assert [(o["name"], o["access_lvl"], o["access_lvl_name"]) for o in data] == [
            ("Reptile House", 3, "Superadmin")
        ]

    @pytest.mark.asyncio
    async def test_regular_user_cannot_create(self, client, create_user):
        _, headers = await create_user()
        resp = await client.post("/api/v1/orgs", json={"name": "Mine"}, headers=headers)
        assert resp.status_code == 403
        assert resp.json()["error"]["code"] == "PERMISSION_DENIED"

    @pytest.mark.asyncio
    async def test_blank_name(self, client, admin):
        _, headers = admin
        resp = await client.post("/api/v1/orgs", json={"name": "   "}, headers=headers)
        assert resp.status_code == 422
        assert resp.json() == {
            "error": {
                "code": "EMPTY_NAME",
                "message": "Organization name cannot be empty",
                "status": 422,
            }
        }

    @pytest.mark.asyncio
    async def test_non_member_sees_404(self, client, create_user, org):
        _, headers = await create_user()
        resp = await client.get(f"/api/v1/orgs/{org['org_id']}/members", headers=headers)
        assert resp.status_code == 404
        assert resp.json()["error"]["code"] == "ORG_NOT_FOUND"

    @pytest.mark.asyncio
    async def test_get_and_delete(self, client, admin, org):
        _, headers = admin
        url = f"/api/v1/orgs/{org['org_id']}"
        assert (await client.get(url, headers=headers)).json()["name"] == "Reptile House"

        resp = await client.delete(url, headers=headers)
        assert resp.json() == {"changed": True, "id": org["org_id"]}
        assert (await client.get(url, headers=headers)).status_code == 404


# ---------------------------------------------------------------------------
# Invite flow
# ---------------------------------------------------------------------------

class TestInviteFlow:

    @pytest.mark.asyncio
    async def test_invite_accept_then_members(self, client, admin, org, create_user):
        _, admin_headers = admin
        invitee, invitee_headers = await create_user(email="newbie@example.com")
        base = f"/api/v1/orgs/{org['org_id']}"

        resp = await client.post(
            f"{base}/invites",
            json={"invitee_email": "Newbie@Example.com", "access_lvl": 2},
            headers=admin_headers,
        )
        assert resp.status_code == 201
        invite = resp.json()
        assert invite["status"] == "pending"

        pending = (await client.get("/api/v1/invites", headers=invitee_headers)).json()["data"]
        assert [(i["invite_id"], i["org_name"]) for i in pending] == [
            (invite["invite_id"], "Reptile House")
        ]

        resp = await client.post(
            f"/api/v1/invites/{invite['invite_id']}/accept", headers=invitee_headers
        )
        assert resp.status_code == 200
        assert resp.json() == {"changed": True, "id": org["org_id"]}

        members = (await client.get(f"{base}/members", headers=invitee_headers)).json()["data"]
        levels = {m["user_id"]: m["access_lvl_name"] for m in members}
        assert levels[str(invitee.id)] == "Owner"

        sent = (await client.get(f"{base}/invites", headers=admin_headers)).json()["data"]
        assert sent[0]["status"] == "accepted"

    @pytest.mark.asyncio
    async def test_duplicate_invite_conflict(self, client, admin, org):
        _, headers = admin
        url = f"/api/v1/orgs/{org['org_id']}/invites"
        body = {"invitee_email": "dup@example.com", "access_lvl": 1}
        assert (await client.post(url, json=body, headers=headers)).status_code == 201

        resp = await client.post(url, json=body, headers=headers)
        assert resp.status_code == 409
        assert resp.json()["error"]["code"] == "DUPLICATE_PENDING_INVITE"

    @pytest.mark.asyncio
    async def test_invite_level_three_rejected(self, client, admin, org):
        _, headers = admin
        resp = await client.post(
            f"/api/v1/orgs/{org['org_id']}/invites",
            json={"invitee_email": "boss@example.com", "access_lvl": 3},
            headers=headers,
        )
        assert resp.status_code == 422

    @pytest.mark.asyncio
    async def test_caretaker_cannot_invite(self, client, admin, org, create_user):
        _, admin_headers = admin
        _, keeper_headers = await create_user(email="keeper@example.com")
        base = f"/api/v1/orgs/{org['org_id']}"
        invite = (
            await client.post(
                f"{base}/invites",
                json={"invitee_email": "keeper@example.com"},
                headers=admin_headers,
            )
        ).json()
        await client.post(f"/api/v1/invites/{invite['invite_id']}/accept", headers=keeper_headers)

        resp = await client.post(
            f"{base}/invites",
            json={"invitee_email": "friend@example.com"},
            headers=keeper_headers,
        )
        assert resp.status_code == 403

    @pytest.mark.asyncio
    async def test_reject_then_retract_is_noop(self, client, admin, org, create_user):
        _, admin_headers = admin
        _, invitee_headers = await create_user(email="nah@example.com")
        base = f"/api/v1/orgs/{org['org_id']}"
        invite = (
            await client.post(
                f"{base}/invites", json={"invitee_email": "nah@example.com"}, headers=admin_headers
            )
        ).json()

        resp = await client.post(
            f"/api/v1/invites/{invite['invite_id']}/reject", headers=invitee_headers
        )
        assert resp.json()["changed"] is True

        resp = await client.post(
            f"{base}/invites/{invite['invite_id']}/retract", headers=admin_headers
        )
        assert resp.status_code == 200
        assert resp.json()["changed"] is False

    @pytest.mark.asyncio
    async def test_accept_unknown_invite(self, client, create_user):
        _, headers = await create_user()
        resp = await client.post(f"/api/v1/invites/{uuid.uuid4()}/accept", headers=headers)
        assert resp.status_code == 404
        assert resp.json()["error"]["code"] == "INVITE_NOT_FOUND"


# ---------------------------------------------------------------------------
# Leave / kick
# ---------------------------------------------------------------------------

class TestMembers:

    @pytest.fixture
    async def keeper(self, client, admin, org, create_user):
        _, admin_headers = admin
        profile, headers = await create_user(email="keeper@example.com")
        invite = (
            await client.post(
                f"/api/v1/orgs/{org['org_id']}/invites",
                json={"invitee_email": "keeper@example.com"},
                headers=admin_headers,
            )
        ).json()
        await client.post(f"/api/v1/invites/{invite['invite_id']}/accept", headers=headers)
        return profile, headers

    @pytest.mark.asyncio
    async def test_leave(self, client, org, keeper):
        _, headers = keeper
        url = f"/api/v1/orgs/{org['org_id']}/members/me"
        resp = await client.delete(url, headers=headers)
        assert resp.json()["changed"] is True
        # No longer a member: the org is invisible.
        assert (await client.delete(url, headers=headers)).status_code == 404

    @pytest.mark.asyncio
    async def test_kick(self, client, admin, org, keeper):
        _, admin_headers = admin
        profile, headers = keeper
        resp = await client.delete(
            f"/api/v1/orgs/{org['org_id']}/members/{profile.id}", headers=admin_headers
        )
        assert resp.json() == {"changed": True, "id": str(profile.id)}

    @pytest.mark.asyncio
    async def test_caretaker_cannot_kick(self, client, admin, org, keeper):
        admin_profile, _ = admin
        _, headers = keeper
        resp = await client.delete(
            f"/api/v1/orgs/{org['org_id']}/members/{admin_profile.id}", headers=headers
        )
        assert resp.status_code == 403


# ---------------------------------------------------------------------------
# Org requests
# ---------------------------------------------------------------------------

class TestOrgRequestFlow:

    @pytest.mark.asyncio
    async def test_request_approve(self, client, admin, create_user):
        _, admin_headers = admin
        requester, headers = await create_user()

        resp = await client.post(
            "/api/v1/org-requests", json={"org_name": " Gecko Hollow "}, headers=headers
        )
        assert resp.status_code == 201
        request_id = resp.json()["request_id"]

        queue = (await client.get("/api/v1/admin/org-requests", headers=admin_headers)).json()
        assert queue["data"][0]["request_id"] == request_id

        resp = await client.post(
            f"/api/v1/admin/org-requests/{request_id}/approve", headers=admin_headers
        )
        body = resp.json()
        assert body["changed"] is True
        assert body["org_id"] is not None

        orgs = (await client.get("/api/v1/orgs", headers=headers)).json()["data"]
        assert [(o["name"], o["access_lvl"]) for o in orgs] == [("Gecko Hollow", 3)]

        again = await client.post(
            f"/api/v1/admin/org-requests/{request_id}/approve", headers=admin_headers
        )
        assert again.json() == {"changed": False, "request_id": request_id, "org_id": None}

        mine = (await client.get("/api/v1/org-requests", headers=headers)).json()["data"]
        assert mine[0]["status"] == "approved"

    @pytest.mark.asyncio
    async def test_review_requires_superadmin(self, client, create_user):
        _, headers = await create_user()
        resp = await client.get("/api/v1/admin/org-requests", headers=headers)
        assert resp.status_code == 403

    @pytest.mark.asyncio
    async def test_duplicate_request(self, client, create_user):
        _, headers = await create_user()
        body = {"org_name": "Gecko Hollow"}
        await client.post("/api/v1/org-requests", json=body, headers=headers)
        resp = await client.post("/api/v1/org-requests", json=body, headers=headers)
        assert resp.status_code == 409
        assert resp.json()["error"]["code"] == "DUPLICATE_PENDING_REQUEST"

    @pytest.mark.asyncio
    async def test_retract(self, client, create_user):
        _, headers = await create_user()
        created = (
            await client.post("/api/v1/org-requests", json={"org_name": "X"}, headers=headers)
        ).json()
        url = f"/api/v1/org-requests/{created['request_id']}/retract"
        assert (await client.post(url, headers=headers)).json()["changed"] is True
        assert (await client.post(url, headers=headers)).json()["changed"] is False


# ---------------------------------------------------------------------------
# Profile and notifications
# ---------------------------------------------------------------------------

class TestProfileAndInbox:

    @pytest.mark.asyncio
    async def test_profile_get_and_patch(self, client, admin, org):
        _, headers = admin
        me = (await client.get("/api/v1/profile", headers=headers)).json()
        assert me["email"] == "root@example.com"
        assert me["memberships"][0]["org_name"] == "Reptile House"

        resp = await client.patch(
            "/api/v1/profile", json={"first_name": " Ada ", "last_name": "Root"}, headers=headers
        )
        assert resp.json()["full_name"] == "Ada Root"

        resp = await client.patch(
            "/api/v1/profile", json={"first_name": "", "last_name": "Root"}, headers=headers
        )
        assert resp.status_code == 422

    @pytest.mark.asyncio
    async def test_admin_profile_search(self, client, admin, create_user):
        _, headers = admin
        await create_user(email="findme@example.com", first_name="Fin", last_name="Dme")
        resp = await client.get("/api/v1/admin/profiles", params={"search": "findme"}, headers=headers)
        assert [p["email"] for p in resp.json()["data"]] == ["findme@example.com"]

    @pytest.mark.asyncio
    async def test_inbox(self, client, session_factory, create_user):
        me, headers = await create_user()
        async with session_factory() as s:
            first = await notifications.create_notification(
                me.id, NotificationType.ALERT, "Heater failure", s
            )
            first.created_at = utcnow() - timedelta(hours=1)
            await notifications.create_notification(
                me.id, NotificationType.UPDATE, "Feeding schedule", s
            )
            await s.commit()
            first_id = str(first.id)

        data = (await client.get("/api/v1/notifications", headers=headers)).json()
        assert data["total"] == 2
        assert data["data"][0]["title"] == "Feeding schedule"

        resp = await client.post(f"/api/v1/notifications/{first_id}/viewed", headers=headers)
        assert resp.json()["changed"] is True

        unread = (
            await client.get("/api/v1/notifications", params={"viewed": "unread"}, headers=headers)
        ).json()
        assert [n["title"] for n in unread["data"]] == ["Feeding schedule"]

        resp = await client.post(
            "/api/v1/notifications/bulk-delete",
            json={"ids": [n["id"] for n in data["data"]]},
            headers=headers,
        )
        assert resp.json() == {"deleted": 2}

        resp = await client.delete(f"/api/v1/notifications/{first_id}", headers=headers)
        assert resp.status_code == 404
