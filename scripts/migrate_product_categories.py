#!/usr/bin/env python3
"""
Script to backfill full category lineage on legacy products

Older products stored a single category slug (which could be a sub or
sub-sub category). This rewrites category / sub_category / sub_sub_category
to the full path from the category tree so installation rules and shop
filters match them at every level. Safe to run repeatedly.

Usage:
    python scripts/migrate_product_categories.py
"""

import asyncio
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from db import get_db_session
from services.product import ProductService
from utils.logging_config import setup_logging


async def migrate():
    print("🔄 Migrating product categories...")

    async with get_db_session() as session:
        updated = await ProductService.migrate_product_categories(session)

    if updated == 0:
        print("✅ Nothing to migrate. All products already carry their full lineage")
    else:
        print(f"✅ Migration complete! {updated} products updated")


async def main():
    try:
        await migrate()
    except Exception as e:
        print(f"❌ Error: {e}")
        import traceback
        traceback.print_exc()
        sys.exit(1)


if __name__ == "__main__":
    setup_logging()
    asyncio.run(main())
