#!/usr/bin/env python3
"""Reset script for Finanzas.

Deletes the data directory (database and logs), re-applies every migration
and, unless --no-seed is given, seeds the global categories again.
"""

import argparse
import json
import shutil
import sys

from cli.categories import seed_global_categories
from cli.migrate import apply_pending_migrations
from config import get_seed_file, load_config
from db.manager import DatabaseManager
from services.base import Services


def reset(seed: bool = True):
    """Reset the application state."""
    print("Finanzas Reset Script")
    print("=" * 50)

    config = load_config()

    if not config.enable_reset:
        print("\nReset is disabled in configuration (enable_reset=false).")
        print("To enable reset, set enable_reset=true in ~/.config/finanzas.toml")
        sys.exit(1)

    print(f"\nData directory: {config.base_dir}")
    print(f"Database: {config.db_path}")
    print(f"Logs: {config.log_dir}")

    response = input("\nThis will delete ALL data. Continue? (yes/no): ")
    if response.lower() != "yes":
        print("Reset cancelled.")
        sys.exit(0)

    if config.base_dir.exists():
        print(f"\nDeleting {config.base_dir}...")
        shutil.rmtree(config.base_dir)
        print("✓ Data directory deleted")
    else:
        print(f"\n✓ Data directory does not exist: {config.base_dir}")

    print("\nRunning migrations...")
    db_manager = DatabaseManager(config)
    with db_manager.connect() as conn:
        applied = apply_pending_migrations(conn, db_manager.get_migrations_dir())
    print(f"✓ Applied {len(applied)} migration(s)")

    if seed:
        with open(get_seed_file(config), "r") as f:
            entries = json.load(f)
        created, _ = seed_global_categories(Services(config, db_manager), entries)
        print(f"✓ Seeded {created} global categories")

    print("\n" + "=" * 50)
    print("Reset complete! Database has been recreated.")
    print(f"Database location: {config.db_path}")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Wipe and recreate the database")
    parser.add_argument(
        "--no-seed", action="store_true", help="Skip seeding global categories"
    )
    reset(seed=not parser.parse_args().no_seed)
