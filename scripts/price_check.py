#!/usr/bin/env python
"""
Price one product from the command line and print the calculation trace.

Usage:
    python scripts/price_check.py win-upvc-002 width=4 height=5 material=Wood --qty 2
    python scripts/price_check.py glass-panel-001 'size={"width": 2, "height": 3}'
"""
import argparse
import json
import sys
from pathlib import Path

# Add src to path
src_path = Path(__file__).parent.parent / 'src'
sys.path.insert(0, str(src_path))

from product_pricing.config.settings import configure_logging, get_settings
from product_pricing.services.catalog_service import CatalogService, ProductNotFoundError


def parse_value(raw: str):
    """Interpret key=value input as JSON when possible (numbers, booleans, objects)."""
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        return raw


def main():
    parser = argparse.ArgumentParser(description="Price a configured product")
    parser.add_argument('product_id')
    parser.add_argument('selections', nargs='*', help="attribute=value pairs")
    parser.add_argument('--qty', type=float, default=1)
    parser.add_argument('--catalog', type=Path, help="Catalog JSON (default from settings)")
    args = parser.parse_args()

    settings = get_settings()
    configure_logging(settings)
    catalog = CatalogService(args.catalog or settings.catalog_path)
    catalog.rounding = settings.rounding_mode

    configuration = {}
    for item in args.selections:
        key, sep, value = item.partition('=')
        if not sep:
            parser.error(f"Expected attribute=value, got '{item}'")
        configuration[key.strip().lower()] = parse_value(value)

    try:
        result = catalog.calculate(args.product_id, configuration, args.qty)
    except ProductNotFoundError as e:
        print(f"ERROR: {e}")
        sys.exit(1)

    print(f"{result.product_name} × {result.quantity}")
    print(result.get_trace_text())
    print()
    print(f"Unit Price:  ${result.unit_price:,.2f}")
    print(f"Total Price: ${result.total_price:,.2f}")
    print(f"Total Cost:  ${result.total_cost:,.2f}")
    print(f"Margin:      ${result.margin:,.2f} ({result.margin_percent}%)")
    print(f"Tax Rate:    {result.tax_rate}%")
    for warning in result.errors:
        print(f"WARNING: {warning}")


if __name__ == "__main__":
    main()
