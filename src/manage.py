"""Storefront database management CLI.

Creates or drops the order and coupon tables in the database selected by
``PROTEAN_ENV`` (``sqlite`` or ``postgresql``; see ``ordering/domain.toml``).
``STOREFRONT_DATABASE_URL`` overrides the overlay's default URL.

Usage:
    python src/manage.py setup-db --env sqlite   # Create all tables
    python src/manage.py drop-db --env sqlite    # Drop all tables
"""

import argparse
import os
import sys


def _domain(env):
    if env:
        os.environ["PROTEAN_ENV"] = env

    from ordering.domain import init_domain

    domain = init_domain()
    provider = domain.config["databases"]["default"]["provider"]
    if provider not in ("sqlite", "postgresql"):
        print(f"The {provider!r} provider keeps no schema: pass --env sqlite or --env postgresql.")
        sys.exit(1)
    return domain


def setup_databases(env=None):
    """Create the storefront schema."""
    from ordering.utils.db import setup_db

    domain = _domain(env)
    print("Creating storefront database schema...")
    setup_db(domain)
    print("Done.")


def drop_databases(env=None):
    """Drop the storefront schema."""
    from ordering.utils.db import drop_db

    domain = _domain(env)
    print("Dropping storefront database schema...")
    drop_db(domain)
    print("Done.")


def main():
    parser = argparse.ArgumentParser(description="Storefront database management")
    subparsers = parser.add_subparsers(dest="command", required=True)

    for name, help_text in (("setup-db", "Create all database tables"), ("drop-db", "Drop all database tables")):
        command_parser = subparsers.add_parser(name, help=help_text)
        command_parser.add_argument(
            "--env",
            choices=["sqlite", "postgresql"],
            help="Config environment to use (default: PROTEAN_ENV)",
        )

    args = parser.parse_args()

    if args.command == "setup-db":
        setup_databases(args.env)
    elif args.command == "drop-db":
        drop_databases(args.env)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
