#!/usr/bin/env python3
"""Create the sharing tables for local development.

This script creates the companions and attendees tables against the local
Postgres configured by AURORA_* (or DATABASE_URL), matching the Alembic
migration. Existing tables are left as they are.

Usage:
    python scripts/create_local_tables.py
"""

import sys
from pathlib import Path

from sqlalchemy import inspect

# Add src to path for config import
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from tripshare.db import Base, get_engine  # noqa: E402


def main():
    engine = get_engine()
    existing = set(inspect(engine).get_table_names())

    Base.metadata.create_all(engine)

    for table_name in Base.metadata.tables:
        if table_name in existing:
            print(f"✓ {table_name} table already exists")
        else:
            print(f"✓ Created {table_name} table")


if __name__ == "__main__":
    main()
