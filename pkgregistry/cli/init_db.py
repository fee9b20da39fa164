#!/usr/bin/env python3
"""
Database initialization script.
Creates all registry tables, optionally auditing star counters afterwards.
"""
import argparse
import logging
import sys

from dotenv import load_dotenv

from pkgregistry.core.config import Settings
from pkgregistry.core.database import create_database
from pkgregistry.crud.system import audit_stargazers
from pkgregistry.utils.logger import setup_logging

logger = logging.getLogger(__name__)


def main(argv=None):
    """Initialize database."""
    parser = argparse.ArgumentParser(description="Create the package registry tables.")
    parser.add_argument("--database-url", help="Override DATABASE_URL")
    parser.add_argument(
        "--audit-stars",
        action="store_true",
        help="Recompute stargazers_count from star edges after initialization",
    )
    args = parser.parse_args(argv)

    load_dotenv()
    setup_logging()

    config = Settings()
    if args.database_url:
        config.database_url = args.database_url

    database = create_database(config)
    try:
        logger.info("Initializing database...")
        database.init_db()

        if args.audit_stars:
            with database.session() as db:
                result = audit_stargazers(db)
            if not result.ok:
                logger.error(f"Star audit failed: {result.content}")
                print(f"\nERROR: Star audit failed: {result.content}")
                return 1
            print(f"Corrected stargazers_count on {len(result.content)} packages")

        logger.info("Database initialization completed successfully!")
        print("\nDatabase initialized successfully!")
        return 0

    except Exception as e:
        logger.error(f"Database initialization failed: {e}")
        print(f"\nERROR: Database initialization failed: {e}")
        return 1

    finally:
        database.dispose()


if __name__ == "__main__":
    sys.exit(main())
