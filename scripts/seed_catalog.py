#!/usr/bin/env python3
"""
Seed the catalog database with the sample outdoor products.
"""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from product_search.core.catalog import SqliteCatalog
from product_search.core.config import load_settings
from product_search.core.seed import seed_catalog


def main():
    settings = load_settings()
    catalog = SqliteCatalog(settings.db_path)

    inserted = seed_catalog(catalog)
    if inserted:
        print(f"✓ Inserted {inserted} products into {settings.db_path}")
    else:
        print(f"Catalog already has {catalog.count_items()} products, nothing to do")


if __name__ == "__main__":
    main()
