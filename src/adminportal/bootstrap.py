"""
Seed the first ADMIN account on an empty database.

    adminportal-seed-admin --email admin@example.com --name "Portal Admin"

The password is read from ``--password`` or the ``SEED_ADMIN_PASSWORD``
environment variable. Nothing is written when any user already exists.
"""
from __future__ import annotations

import argparse
import asyncio
import os
from typing import Optional

from adminportal.identity.application.ports import PasswordHasher, UnitOfWorkFactory
from adminportal.identity.domain.entities.user import AdminProfile, User
from adminportal.identity.infrastructure.password_hasher import Pbkdf2PasswordHasher
from adminportal.identity.infrastructure.persistence import models  # noqa: F401  (registers tables)
from adminportal.identity.infrastructure.portal_unit_of_work import unit_of_work_factory
from adminportal.shared.config import get_settings
from adminportal.shared.database.session import Database
from adminportal.shared.logging import configure_logging, get_logger, log_security_event

logger = get_logger(__name__)


async def seed_initial_admin(
    uow_factory: UnitOfWorkFactory,
    hasher: PasswordHasher,
    *,
    name: str,
    email: str,
    password: str,
) -> Optional[User]:
    """Create the admin and return it, or None when users already exist."""
    async with uow_factory() as uow:
        existing = await uow.users.count()
        if existing:
            logger.info("seed_admin_skipped", existing_users=existing)
            return None
        admin = User(
            id=User.new_id(),
            name=name,
            email=email,
            profile=AdminProfile(),
            password=hasher.hash(password),
        )
        await uow.users.add(admin)
        await uow.commit()
    log_security_event("user_created", user_id=admin.id, details={"role": admin.role.value, "seeded": True})
    return admin


async def _run(args: argparse.Namespace) -> int:
    settings = get_settings()
    configure_logging(settings)
    password = args.password or os.getenv("SEED_ADMIN_PASSWORD")
    if not password:
        logger.error("seed_admin_missing_password")
        return 2

    database = Database.from_settings(settings)
    try:
        if args.create_tables:
            await database.create_all()
        admin = await seed_initial_admin(
            unit_of_work_factory(database.session_factory),
            Pbkdf2PasswordHasher(),
            name=args.name,
            email=args.email,
            password=password,
        )
    finally:
        await database.dispose()
    if admin is not None:
        print(f"Created admin {admin.email} ({admin.id})")
    else:
        print("Users already exist; nothing to do")
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Create the first ADMIN user")
    parser.add_argument("--email", required=True)
    parser.add_argument("--name", default="Admin")
    parser.add_argument("--password", default=None)
    parser.add_argument("--create-tables", action="store_true", help="Run create_all before seeding")
    return asyncio.run(_run(parser.parse_args(argv)))


if __name__ == "__main__":
    raise SystemExit(main())
