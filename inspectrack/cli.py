"""CLI for Inspectrack: create tables, add users, seed inventory types."""

from __future__ import annotations

import argparse
import asyncio
import getpass
import sys

DEFAULT_INVENTORY_TYPES = (
    "Smoke Detector",
    "CO Detector",
    "Fire Extinguisher",
    "GFCI Outlet",
    "Light Bulb",
    "Outlet Cover",
    "Switch Plate",
    "Window Screen",
    "Blinds",
    "Door Stop",
)


async def cmd_init_db(args):
    from inspectrack.db.engine import create_all

    await create_all()
    print("Database tables created")


async def cmd_create_user(args):
    """Create a login-capable profile."""
    from inspectrack.db import crud
    from inspectrack.db.engine import async_session_factory, create_all
    from inspectrack.services.auth import hash_password

    await create_all()

    password = args.password
    if not password:
        password = getpass.getpass("Password: ")
        confirm = getpass.getpass("Confirm password: ")
        if password != confirm:
            print("Passwords do not match")
            sys.exit(1)

    if len(password) < 8:
        print("Password must be at least 8 characters")
        sys.exit(1)

    async with async_session_factory() as db:
        if await crud.get_profile_by_email(db, args.email):
            print(f"User already exists: {args.email}")
            sys.exit(1)
        profile = await crud.create_profile(
            db, args.email, hash_password(password), args.full_name or None, role=args.role,
        )

    print(f"User created: {profile.email} (id={profile.id}, role={profile.role})")


async def cmd_seed_inventory_types(args):
    from inspectrack.db import crud
    from inspectrack.db.engine import async_session_factory, create_all

    await create_all()
    created = 0
    async with async_session_factory() as db:
        for name in DEFAULT_INVENTORY_TYPES:
            if await crud.get_inventory_type_by_name(db, name):
                continue
            await crud.create_inventory_type(db, name)
            created += 1
    print(f"Seeded {created} inventory types ({len(DEFAULT_INVENTORY_TYPES) - created} already present)")


def main():
    parser = argparse.ArgumentParser(description="Inspectrack CLI")
    subparsers = parser.add_subparsers(dest="command")

    subparsers.add_parser("init-db", help="Create database tables")

    cu = subparsers.add_parser("create-user", help="Create a user profile")
    cu.add_argument("--email", required=True, help="Login email")
    cu.add_argument("--password", default="", help="Password (prompted if not given)")
    cu.add_argument("--full-name", default="", help="Display name")
    cu.add_argument("--role", default="inspector", choices=["admin", "inspector", "viewer"])

    subparsers.add_parser("seed-inventory-types", help="Insert the default inventory types")

    args = parser.parse_args()
    if not args.command:
        parser.print_help()
        sys.exit(1)

    if args.command == "init-db":
        asyncio.run(cmd_init_db(args))
    elif args.command == "create-user":
        asyncio.run(cmd_create_user(args))
    elif args.command == "seed-inventory-types":
        asyncio.run(cmd_seed_inventory_types(args))


if __name__ == "__main__":
    main()
