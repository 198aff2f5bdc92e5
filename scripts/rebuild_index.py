#!/usr/bin/env python3
"""
Index Rebuild Utility
Rebuilds the product vector collection from the catalog database.
"""

import argparse
import sys
from dataclasses import replace
from pathlib import Path

# Add the project root to sys.path when run from a checkout
sys.path.insert(0, str(Path(__file__).parent.parent))

from product_search.core.config import load_settings
from product_search.core.errors import ConfigurationError
from product_search.core.service import build_search_service


def main(argv=None):
    """Rebuild the vector collection from the catalog."""
    parser = argparse.ArgumentParser(description="Rebuild the product vector index")
    parser.add_argument("--verify-query", default="tent", help="Query used for the verification search")
    args = parser.parse_args(argv)

    print("Starting vector index rebuild...")
    try:
        # Read-only over the catalog
        settings = replace(load_settings(), rebuild_on_startup=True, seed_catalog=False)
        service = build_search_service(settings)
        report = service.startup()
    except ConfigurationError as e:
        print(f"ERROR: {e}")
        sys.exit(1)

    print(f"Found {service.catalog.count_items()} products in catalog")
    print(f"✓ Indexed {report.indexed} products into '{settings.collection_name}'")
    for failure in report.failures:
        print(f"  ✗ {failure.item_id} {failure.name}: {failure.stage} failed ({failure.message})")

    # Quick smoke test of the read path
    response = service.resolver.resolve(args.verify_query)
    print(f"✓ Verification query [{args.verify_query}] -> {response.response}")

    print("Index rebuild complete!")
    return report


if __name__ == "__main__":
    main()
