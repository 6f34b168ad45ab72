"""
Script to create (or promote) an admin profile with a password for local use.
"""

import argparse
import asyncio

from sqlmodel import select

from app.core.auth import hash_password
from app.core.database import get_session_context, init_db
from app.models.profile import Profile
from daftar_shared.schemas.common import Role


async def create_admin(
    email: str, password: str, full_name: str | None = None, create_tables: bool = False
) -> None:
    if create_tables:
        await init_db()
    email = email.strip().lower()
    async with get_session_context() as session:
        result = await session.execute(select(Profile).where(Profile.email == email))
        profile = result.scalar_one_or_none()

        if not profile:
            profile = Profile(
                email=email,
                full_name=full_name or email.split("@")[0],
                role=Role.ADMIN.value,
                password_hash=hash_password(password),
            )
            session.add(profile)
            print(f"Created admin: {email}")
        else:
            profile.role = Role.ADMIN.value
            profile.password_hash = hash_password(password)
            if full_name:
                profile.full_name = full_name
            session.add(profile)
            print(f"Updated {email}: role set to admin, password reset.")

    print("Done.")


def main() -> None:
    parser = argparse.ArgumentParser(description="Create a local admin user.")
    parser.add_argument("--email", required=True, help="Email address for the user")
    parser.add_argument("--password", required=True, help="Password for the user")
    parser.add_argument("--full-name", default=None, help="Display name (defaults to the email's local part)")
    parser.add_argument("--init-db", action="store_true", help="Create missing tables first (development)")

    args = parser.parse_args()
    if len(args.password) < 8:
        parser.error("password must be at least 8 characters")

    asyncio.run(create_admin(args.email, args.password, args.full_name, create_tables=args.init_db))


if __name__ == "__main__":
    main()
