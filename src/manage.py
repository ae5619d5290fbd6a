"""Krishna Marketing database management CLI.

Creates and drops the grocery schema, and seeds a first admin account.
Reuses the setup_db/drop_db utilities of the domain.

Usage:
    python src/manage.py setup-db                       # Create all tables
    python src/manage.py drop-db                        # Drop all tables
    python src/manage.py create-admin --name N --phone P  # Seed an admin
"""

import argparse
import sys


def setup_database():
    from grocery.domain import grocery
    from grocery.utils.db import setup_db

    print("Initializing grocery domain...")
    grocery.init()
    print("Creating grocery database schema...")
    setup_db(grocery)
    print("Done.")


def drop_database():
    from grocery.domain import grocery
    from grocery.utils.db import drop_db

    print("Initializing grocery domain...")
    grocery.init()
    print("Dropping grocery database schema...")
    drop_db(grocery)
    print("Done.")


def create_admin(name, phone, email=None, superadmin=False):
    """Register an admin account and print a bearer token for it."""
    from grocery.api.auth import create_access_token
    from grocery.domain import grocery
    from grocery.identity.customer import Role
    from grocery.identity.registration import RegisterCustomer

    grocery.init()
    role = Role.SUPERADMIN.value if superadmin else Role.ADMIN.value
    with grocery.domain_context():
        customer_id = grocery.process(
            RegisterCustomer(name=name, phone=phone, email=email, role=role),
            asynchronous=False,
        )
    print(f"Created {role} {customer_id}")
    print(f"Token: {create_access_token(customer_id, role)}")


def main():
    parser = argparse.ArgumentParser(description="Krishna Marketing database management")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("setup-db", help="Create all database tables")
    subparsers.add_parser("drop-db", help="Drop all database tables")

    admin_parser = subparsers.add_parser("create-admin", help="Register an admin account")
    admin_parser.add_argument("--name", required=True)
    admin_parser.add_argument("--phone", required=True)
    admin_parser.add_argument("--email")
    admin_parser.add_argument("--superadmin", action="store_true")

    args = parser.parse_args()

    if args.command == "setup-db":
        setup_database()
    elif args.command == "drop-db":
        drop_database()
    elif args.command == "create-admin":
        create_admin(args.name, args.phone, args.email, args.superadmin)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
