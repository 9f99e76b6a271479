#!/usr/bin/env python3
"""Seed a development database with profiles, an organization, invites and requests.

Usage:
    KEEPER_DATABASE_URL=... python scripts/seed_dev_data.py

Idempotent: profiles and the org use fixed ids and ON CONFLICT DO NOTHING.
"""

import asyncio
import uuid

from sqlalchemy import text

from app.core.database import engine, get_session_context, init_db
from app.services import invitations, org_requests

# Deterministic UUIDs for reproducibility
ORG_ID = uuid.UUID("00000000-0000-0000-0000-000000000001")
ADMIN_ID = uuid.UUID("00000000-0000-0000-0000-000000000010")
OWNER_ID = uuid.UUID("00000000-0000-0000-0000-000000000011")
CARETAKER_ID = uuid.UUID("00000000-0000-0000-0000-000000000012")
REQUESTER_ID = uuid.UUID("00000000-0000-0000-0000-000000000013")

PROFILES = [
    (ADMIN_ID, "Ada", "Admin", "ada@example.com", True),
    (OWNER_ID, "Otto", "Owner", "otto@example.com", False),
    (CARETAKER_ID, "Cara", "Taker", "cara@example.com", False),
    (REQUESTER_ID, "Rex", "Quest", "rex@example.com", False),
]


async def seed():
    await init_db()

    async with get_session_context() as session:
        for pid, first, last, email, is_superadmin in PROFILES:
            await session.execute(text("""
                INSERT INTO profiles (id, first_name, last_name, full_name, email, is_superadmin)
                VALUES (:id, :first, :last, :full, :email, :sa)
                ON CONFLICT (id) DO NOTHING
            """), {"id": pid, "first": first, "last": last, "full": f"{first} {last}",
                   "email": email, "sa": is_superadmin})

        await session.execute(text("""
            INSERT INTO orgs (org_id, name) VALUES (:id, :name)
            ON CONFLICT (org_id) DO NOTHING
        """), {"id": ORG_ID, "name": "Riverside Reptile House"})

        for uid, lvl in [(ADMIN_ID, 3), (OWNER_ID, 2), (CARETAKER_ID, 1)]:
            await session.execute(text("""
                INSERT INTO user_org_role (user_id, org_id, access_lvl)
                VALUES (:uid, :oid, :lvl)
                ON CONFLICT DO NOTHING
            """), {"uid": uid, "oid": ORG_ID, "lvl": lvl})

    # Lifecycle rows go through the services so they obey the pending rules.
    async with get_session_context() as session:
        pending = await invitations.list_sent_invites(ORG_ID, session)
        if not any(i["invitee_email"] == "rex@example.com" for i in pending):
            await invitations.create_invite(ORG_ID, OWNER_ID, "rex@example.com", 1, session)
        mine = await org_requests.list_my_requests(REQUESTER_ID, session)
        if not any(r.org_name == "Desert Tortoise Trust" for r in mine):
            await org_requests.create_request(REQUESTER_ID, "Desert Tortoise Trust", session)

    await engine.dispose()
    print(f"Seeded org '{ORG_ID}' with 3 members, 1 invite and 1 org request.")


if __name__ == "__main__":
    asyncio.run(seed())
