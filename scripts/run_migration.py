#!/usr/bin/env python3
"""
Run the legacy entry-log migration against the configured data directory.

The app does this on startup; the script is for checking what a
migration would do before shipping, or for migrating a copied data
directory by hand.

Usage:
    python scripts/run_migration.py            # migrate if needed
    python scripts/run_migration.py --dry-run  # report counts only
    python scripts/run_migration.py --data-dir ./backup

Requires:
    - .env file or SWIMLOG_* environment variables (optional)
"""

import argparse
import asyncio
import sys
from pathlib import Path

# Add project root to path so we can import our modules
sys.path.insert(0, str(Path(__file__).parent.parent))

from dotenv import load_dotenv

# Load environment variables
load_dotenv()

from swimlog.config.settings import get_settings
from swimlog.core.entities import StorageKey
from swimlog.infrastructure.kvstore import (
    MigrationService,
    StorageError,
    create_key_value_store,
    load_entities,
)


async def main(data_dir: str, dry_run: bool) -> int:
    store = create_key_value_store(data_dir=data_dir)
    service = MigrationService(store)

    version = await service.get_migration_version()
    try:
        legacy_entries = await load_entities(store, StorageKey.LEGACY_ENTRIES)
    except StorageError as e:
        print(f"Could not read legacy entries: {e}")
        return 1

    print(f"Data directory:     {data_dir}")
    print(f"Migration marker:   {version or '(not set)'}")
    print(f"Target version:     {service.version}")
    print(f"Legacy entries:     {len(legacy_entries)}")

    if version == service.version:
        print("Already migrated, nothing to do.")
        return 0

    if dry_run:
        try:
            result = await service.plan()
        except StorageError as e:
            print(f"Could not plan migration: {e}")
            return 1
        print(f"Would create:       {len(result.swimmers)} swimmers, {len(result.times)} times")
        print(f"Would drop:         {result.dropped_entries} entries (unknown swimmer or stroke)")
        return 0

    if await service.run_if_needed():
        print("Migration complete.")
    elif await service.is_migrated():
        print("No legacy entries; marked as migrated.")
    else:
        print("Migration failed; see log output. It will be retried on next start.")
        return 1
    return 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Migrate the legacy entry log")
    parser.add_argument("--data-dir", help="Override SWIMLOG_STORAGE_DATA_DIR")
    parser.add_argument("--dry-run", action="store_true", help="Report counts without writing")
    args = parser.parse_args()

    settings = get_settings()
    sys.exit(asyncio.run(main(args.data_dir or settings.storage_data_dir, args.dry_run)))
