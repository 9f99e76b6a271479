"""
Tests for organization requests: filing, review and the recent-window view.
"""

from __future__ import annotations

import uuid
from datetime import timedelta

import pytest
from sqlalchemy import func
from sqlmodel import select

from app.core.errors import (
    DuplicatePendingRequestError,
    EmptyNameError,
    InvalidTransitionError,
)
from app.models.base import utcnow
from app.models.org_request import OrgRequest
from app.models.organization import Organization
from app.services import memberships, org_requests
from keeper_shared.schemas.org_requests import OrgRequestStatus


@pytest.fixture
async def people(session, make_profile):
    requester = await make_profile(first_name="Rex", last_name="Quest")
    admin = await make_profile(is_superadmin=True)
    return requester, admin


async def _org_count(session) -> int:
    return (await session.execute(select(func.count()).select_from(Organization))).scalar_one()


class TestCreateRequest:

    @pytest.mark.asyncio
    async def test_trims_name(self, session, people):
        requester, _ = people
        req = await org_requests.create_request(requester.id, "  Gecko Hollow ", session)
        assert req.org_name == "Gecko Hollow"
        assert req.status == "pending"
        assert req.reviewed_by is None

    @pytest.mark.asyncio
    async def test_empty_name(self, session, people):
        requester, _ = people
        with pytest.raises(EmptyNameError):
            await org_requests.create_request(requester.id, "   ", session)

    @pytest.mark.asyncio
    async def test_duplicate_pending_name(self, session, people):
        requester, _ = people
        await org_requests.create_request(requester.id, "Gecko Hollow", session)
        with pytest.raises(DuplicatePendingRequestError):
            await org_requests.create_request(requester.id, " Gecko Hollow", session)

    @pytest.mark.asyncio
    async def test_same_name_after_rejection(self, session, people):
        requester, admin = people
        first = await org_requests.create_request(requester.id, "Gecko Hollow", session)
        await org_requests.reject_request(first.request_id, admin.id, session)
        second = await org_requests.create_request(requester.id, "Gecko Hollow", session)
        assert second.request_id != first.request_id

    @pytest.mark.asyncio
    async def test_different_requesters_same_name(self, session, people, make_profile):
        requester, _ = people
        other = await make_profile()
        await org_requests.create_request(requester.id, "Gecko Hollow", session)
        await org_requests.create_request(other.id, "Gecko Hollow", session)


class TestApproveRequest:

    @pytest.mark.asyncio
    async def test_approve_creates_org_and_owner(self, session, people):
        requester, admin = people
        req = await org_requests.create_request(requester.id, "Gecko Hollow", session)

        org = await org_requests.approve_request(req.request_id, admin.id, session)

        assert org is not None
        assert org.name == "Gecko Hollow"
        assert await memberships.get_access_level(requester.id, org.org_id, session) == 3
        assert not await memberships.is_member(admin.id, org.org_id, session)
        assert req.status == "approved"
        assert req.reviewed_by == admin.id
        assert req.reviewed_at is not None

    @pytest.mark.asyncio
    async def test_approve_twice_is_noop(self, session, people):
        requester, admin = people
        req = await org_requests.create_request(requester.id, "Gecko Hollow", session)
        await org_requests.approve_request(req.request_id, admin.id, session)

        assert await org_requests.approve_request(req.request_id, admin.id, session) is None
        assert await _org_count(session) == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize("settle", ["reject", "retract"])
    async def test_approve_settled_request_is_noop(self, session, people, settle):
        requester, admin = people
        req = await org_requests.create_request(requester.id, "Gecko Hollow", session)
        if settle == "reject":
            await org_requests.reject_request(req.request_id, admin.id, session)
        else:
            await org_requests.retract_request(req.request_id, requester.id, session)

        assert await org_requests.approve_request(req.request_id, admin.id, session) is None
        assert await _org_count(session) == 0
        assert await memberships.list_user_orgs(requester.id, session) == []

    @pytest.mark.asyncio
    async def test_approve_unknown(self, session, people):
        _, admin = people
        assert await org_requests.approve_request(uuid.uuid4(), admin.id, session) is None


class TestRejectAndRetract:

    @pytest.mark.asyncio
    async def test_reject_records_reviewer(self, session, people):
        requester, admin = people
        req = await org_requests.create_request(requester.id, "Gecko Hollow", session)
        assert await org_requests.reject_request(req.request_id, admin.id, session) is True
        assert req.status == "rejected"
        assert req.reviewed_by == admin.id

    @pytest.mark.asyncio
    async def test_reject_twice_is_noop(self, session, people):
        requester, admin = people
        req = await org_requests.create_request(requester.id, "Gecko Hollow", session)
        await org_requests.reject_request(req.request_id, admin.id, session)
        assert await org_requests.reject_request(req.request_id, admin.id, session) is False

    @pytest.mark.asyncio
    async def test_retract_own(self, session, people):
        requester, _ = people
        req = await org_requests.create_request(requester.id, "Gecko Hollow", session)
        assert await org_requests.retract_request(req.request_id, requester.id, session) is True
        assert req.status == "cancelled"
        assert req.reviewed_by is None

    @pytest.mark.asyncio
    async def test_cannot_retract_someone_elses(self, session, people, make_profile):
        requester, _ = people
        other = await make_profile()
        req = await org_requests.create_request(requester.id, "Gecko Hollow", session)
        assert await org_requests.retract_request(req.request_id, other.id, session) is False
        assert req.status == "pending"

    @pytest.mark.asyncio
    async def test_pending_is_not_a_target_status(self, session, people):
        requester, admin = people
        req = await org_requests.create_request(requester.id, "Gecko Hollow", session)

        with pytest.raises(InvalidTransitionError):
            await org_requests._review(
                req.request_id, OrgRequestStatus.PENDING, session, reviewer_id=admin.id
            )

        await session.refresh(req)
        assert req.status == "pending"
        assert req.reviewed_by is None


class TestRecentWindow:

    def _request(self, status, created_days_ago, reviewed_days_ago=None):
        now = utcnow()
        return OrgRequest(
            requester_id=uuid.uuid4(),
            org_name="Any",
            status=status,
            created_at=now - timedelta(days=created_days_ago),
            reviewed_at=(
                now - timedelta(days=reviewed_days_ago)
                if reviewed_days_ago is not None
                else None
            ),
        )

    def test_pending_always_recent(self):
        req = self._request("pending", created_days_ago=90)
        assert org_requests.is_recent(req, utcnow(), 7)

    def test_recently_reviewed(self):
        req = self._request("rejected", created_days_ago=30, reviewed_days_ago=2)
        assert org_requests.is_recent(req, utcnow(), 7)

    def test_old_review_hidden(self):
        req = self._request("approved", created_days_ago=30, reviewed_days_ago=8)
        assert not org_requests.is_recent(req, utcnow(), 7)

    def test_unreviewed_falls_back_to_created_at(self):
        recent = self._request("cancelled", created_days_ago=1)
        old = self._request("cancelled", created_days_ago=10)
        assert org_requests.is_recent(recent, utcnow(), 7)
        assert not org_requests.is_recent(old, utcnow(), 7)

    @pytest.mark.asyncio
    async def test_list_my_requests_filters_old(self, session, people):
        requester, admin = people
        keep = await org_requests.create_request(requester.id, "Fresh", session)
        old = await org_requests.create_request(requester.id, "Stale", session)
        await org_requests.reject_request(old.request_id, admin.id, session)

        later = utcnow() + timedelta(days=8)
        mine = await org_requests.list_my_requests(requester.id, session, now=later)
        assert [r.request_id for r in mine] == [keep.request_id]

        # Nothing is deleted; the row is only hidden.
        everything = await org_requests.list_my_requests(
            requester.id, session, now=later, window_days=30
        )
        assert len(everything) == 2


class TestListAllRequests:

    @pytest.mark.asyncio
    async def test_pending_first(self, session, people):
        requester, admin = people
        reviewed = await org_requests.create_request(requester.id, "First", session)
        reviewed.created_at = utcnow() + timedelta(minutes=5)
        await session.flush()
        pending = await org_requests.create_request(requester.id, "Second", session)
        await org_requests.reject_request(reviewed.request_id, admin.id, session)

        rows = await org_requests.list_all_requests(session)
        assert [r["request_id"] for r in rows] == [pending.request_id, reviewed.request_id]
        assert rows[0]["requester_name"] == "Rex Quest"
        assert rows[0]["requester_email"] == requester.email
