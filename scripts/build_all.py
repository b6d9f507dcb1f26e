#!/usr/bin/env python
"""
Build pipeline - builds the catalog from CSV sheets and runs the test suite.

Usage:
    python scripts/build_all.py [source_dir]
"""
import subprocess
import sys
from pathlib import Path

# Add src to path
src_path = Path(__file__).parent.parent / 'src'
sys.path.insert(0, str(src_path))

from product_pricing.config.settings import configure_logging, get_settings
from product_pricing.data.build_catalog import build_catalog
from product_pricing.services.catalog_service import CatalogService


def main():
    settings = get_settings()
    configure_logging(settings)
    source_dir = Path(sys.argv[1]) if len(sys.argv) > 1 else settings.catalog_sources
    output_path = settings.project_root / 'catalog.json'

    print("=" * 60)
    print("PRODUCT PRICING BUILD PIPELINE")
    print("=" * 60)
    print()

    print(f"[1/3] Building catalog from {source_dir}...")
    report = build_catalog(source_dir=source_dir, output_path=output_path, verbose=True)

    if report["status"] != "success":
        print("\n❌ BUILD FAILED")
        for error in report["errors"]:
            print(f"  ERROR: {error}")
        sys.exit(1)

    print()
    print("[2/3] Checking catalog...")
    problems = CatalogService(output_path).validate_catalog()
    for problem in problems:
        print(f"  WARNING: {problem}")

    print()
    print("[3/3] Running tests...")
    test_result = subprocess.run(
        [sys.executable, '-m', 'pytest', 'tests', '-q', '--tb=short'],
        cwd=Path(__file__).parent.parent
    )

    if test_result.returncode != 0:
        print("\n❌ TESTS FAILED")
        sys.exit(1)

    metrics = report['metrics']
    print()
    print("=" * 60)
    print("✅ BUILD COMPLETE")
    print("=" * 60)
    print()
    print("Summary:")
    print(f"  Products: {metrics['product_count']}")
    print(f"  Attributes: {metrics['attribute_count']} ({metrics['option_count']} options)")
    print(f"  Variants: {metrics['variant_count']}")
    print(f"  Catalog problems: {len(problems)}")
    print()
    print("Pricing Types:")
    for pricing_type, count in metrics.get('pricing_types', {}).items():
        print(f"  {pricing_type}: {count}")


if __name__ == "__main__":
    main()
