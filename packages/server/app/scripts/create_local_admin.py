"""
Script to create a superadmin profile for local testing and print a bearer
token for it.

Profiles are normally provisioned by the hosted auth service; locally there is
no such service, so this writes the row directly and mints a token signed with
KEEPER_JWT_SECRET.
"""

import asyncio
import argparse
from datetime import timedelta

from sqlmodel import select

from app.core.auth import create_jwt
from app.core.config import get_settings
from app.core.database import get_session_context, init_db
from app.core.logging_config import configure_logging
from app.models.user import Profile

settings = get_settings()


async def create_admin(email: str, first_name: str, last_name: str, token_hours: int) -> str:
    await init_db()

    async with get_session_context() as session:
        result = await session.execute(select(Profile).where(Profile.email == email))
        profile = result.scalar_one_or_none()

        if not profile:
            profile = Profile(
                email=email,
                first_name=first_name,
                last_name=last_name,
                full_name=f"{first_name} {last_name}",
                is_superadmin=True,
            )
            session.add(profile)
            print(f"Created superadmin profile: {email}")
        else:
            profile.is_superadmin = True
            session.add(profile)
            print(f"Profile {email} already exists; marked as superadmin.")

        await session.flush()
        user_id = profile.id

    return create_jwt(user_id, email, expires_delta=timedelta(hours=token_hours))


def main() -> None:
    parser = argparse.ArgumentParser(description="Create a local superadmin profile.")
    parser.add_argument("--email", required=True, help="Email address for the profile")
    parser.add_argument("--first-name", default="Local")
    parser.add_argument("--last-name", default="Admin")
    parser.add_argument("--token-hours", type=int, default=24, help="Token lifetime")
    args = parser.parse_args()

    configure_logging(settings.log_level, "text")
    token = asyncio.run(
        create_admin(args.email, args.first_name, args.last_name, args.token_hours)
    )
    print(f"Bearer token:\n{token}")


if __name__ == "__main__":
    main()
