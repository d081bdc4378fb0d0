"""
Seed an admin user for dashboard sign-in.

Admins sign in with a one-time password emailed to their address, so the
only thing to provision is an active row in ``admin_users``.
This script is idempotent: an existing admin is re-activated, never duplicated.

Usage:
    python scripts/seed_admin.py owner@bigdawgs.example
    python scripts/seed_admin.py owner@bigdawgs.example --deactivate
"""

import argparse
import asyncio
import sys
from pathlib import Path

# Add backend directory to path
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from storefront.core.database import create_schema, session_scope
from storefront.repositories.user import AdminUserRepository


async def seed_admin(email: str, active: bool = True) -> None:
    """
    Create or update the admin row for ``email``.

    Args:
        email: Login email (stored lower-cased)
        active: Whether the admin may sign in
    """
    await create_schema()
    normalized = email.strip().lower()

    async with session_scope() as session:
        repo = AdminUserRepository(session)
        admin = await repo.get_by_email(normalized)

        if admin is None:
            admin = await repo.create(normalized, is_active=active)
            print(f"Admin user created: {admin.email} (id={admin.id})")
        else:
            admin.is_active = active
            print(f"Admin user already exists: {admin.email}; is_active={active}")


def main() -> None:
    parser = argparse.ArgumentParser(description="Provision an admin dashboard account")
    parser.add_argument("email", help="Admin login email")
    parser.add_argument("--deactivate", action="store_true", help="Mark the admin inactive")
    args = parser.parse_args()

    print("Seeding admin user...")
    asyncio.run(seed_admin(args.email, active=not args.deactivate))
    print("Done!")


if __name__ == "__main__":
    main()
