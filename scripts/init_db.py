#!/usr/bin/env python3
"""
Create every Puckstats table in the configured database.

Intended for local development and throwaway SQLite files. Production
databases should be migrated with Alembic instead:

    alembic upgrade head

Usage:
    python scripts/init_db.py
    python scripts/init_db.py --database-url sqlite:///puckstats.db
    python scripts/init_db.py --drop   # drop everything first
"""

import argparse
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from puckstats.config import settings
from puckstats.db.models import Base
from puckstats.db.session import get_engine

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s [%(levelname)s] %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger(__name__)


def init_db(database_url: str, drop: bool = False) -> None:
    engine = get_engine(database_url)
    if drop:
        logger.warning("Dropping all tables in %s", engine.url.render_as_string(hide_password=True))
        Base.metadata.drop_all(engine)

    Base.metadata.create_all(engine)
    logger.info("Created %d tables", len(Base.metadata.tables))
    engine.dispose()


def main():
    parser = argparse.ArgumentParser(description="Create the Puckstats schema")
    parser.add_argument(
        "--database-url",
        default=settings.database_url,
        help="Override DATABASE_URL for this run",
    )
    parser.add_argument("--drop", action="store_true", help="Drop existing tables first")
    args = parser.parse_args()

    init_db(args.database_url, drop=args.drop)


if __name__ == "__main__":
    main()
