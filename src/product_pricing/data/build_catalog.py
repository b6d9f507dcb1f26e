"""
Catalog Builder - Assembles catalog.json from flat CSV sheets.

Input sheets (in one source directory):
- products.csv    one row per product (required)
- attributes.csv  one row per attribute, keyed by productId
- options.csv     one row per option, keyed by productId + attribute name
- variants.csv    one row per variant, configuration as a JSON object

Every assembled record is validated through Product.from_dict before it is
written, and a build report is produced alongside the catalog.
"""
import hashlib
import json
from datetime import datetime
from pathlib import Path
from typing import Optional

import pandas as pd

from ..config.settings import Settings, get_settings
from ..engine.models import Product

SHEETS = ('products', 'attributes', 'options', 'variants')


def get_file_hash(path: Path) -> str:
    """Get SHA256 hash of a file."""
    if not path.exists():
        return ""
    with open(path, 'rb') as f:
        return hashlib.sha256(f.read()).hexdigest()[:12]


def _read_sheet(path: Path) -> list[dict]:
    """Read a CSV sheet as a list of dicts, dropping blank cells."""
    df = pd.read_csv(path, dtype=str).fillna('')
    records = []
    for row in df.to_dict(orient='records'):
        records.append({k.strip(): v.strip() for k, v in row.items() if v.strip() != ''})
    return records


def assemble_products(
    products: list[dict],
    attributes: list[dict],
    options: list[dict],
    variants: list[dict],
    report: dict,
) -> list[dict]:
    """Nest attribute, option and variant rows under their product records."""
    by_id = {}
    for row in products:
        product_id = row.get('id') or row.get('sku')
        if not product_id:
            report["errors"].append(f"Product '{row.get('name', '?')}' has no id or sku")
            continue
        if product_id in by_id:
            report["warnings"].append(f"Duplicate product id {product_id}; keeping first row")
            continue
        by_id[product_id] = dict(row, id=product_id, attributes=[], variants=[])

    attribute_index = {}
    for row in attributes:
        product = by_id.get(row.pop('productId', None))
        if product is None:
            report["warnings"].append(f"Attribute '{row.get('name')}' references an unknown product")
            continue
        attribute = dict(row, options=[])
        product['attributes'].append(attribute)
        attribute_index[(product['id'], row.get('name', '').lower())] = attribute

    for row in options:
        product_id = row.pop('productId', None)
        attribute_name = row.pop('attribute', '')
        attribute = attribute_index.get((product_id, attribute_name.lower()))
        if attribute is None:
            report["warnings"].append(
                f"Option '{row.get('value')}' references unknown attribute {product_id}/{attribute_name}"
            )
            continue
        attribute['options'].append(row)

    for row in variants:
        product = by_id.get(row.pop('productId', None))
        if product is None:
            report["warnings"].append(f"Variant '{row.get('sku') or row.get('name')}' references an unknown product")
            continue
        try:
            row['configuration'] = json.loads(row.get('configuration', '{}'))
        except json.JSONDecodeError as e:
            report["errors"].append(f"Variant '{row.get('sku') or row.get('name')}': bad configuration JSON ({e})")
            continue
        product['variants'].append(row)

    return list(by_id.values())


def build_catalog(
    source_dir: Optional[Path] = None,
    output_path: Optional[Path] = None,
    settings: Optional[Settings] = None,
    verbose: bool = True,
) -> dict:
    """
    Build the catalog from CSV sheets.

    Args:
        source_dir: Directory holding the CSV sheets (default: settings.catalog_sources)
        output_path: catalog.json to write (default: <project root>/catalog.json)
        settings: Optional settings override
        verbose: Print progress messages

    Returns:
        Build report dictionary
    """
    settings = settings or get_settings()
    source_dir = Path(source_dir or settings.catalog_sources)
    output_path = Path(output_path or settings.project_root / 'catalog.json')

    report = {
        "timestamp": datetime.now().isoformat(),
        "status": "pending",
        "input_files": {},
        "metrics": {},
        "warnings": [],
        "errors": []
    }

    products_file = source_dir / 'products.csv'
    if not products_file.exists():
        msg = f"CRITICAL ERROR: {products_file} not found."
        report["errors"].append(msg)
        report["status"] = "failed"
        if verbose:
            print(msg)
        return report

    sheets = {}
    for name in SHEETS:
        path = source_dir / f'{name}.csv'
        if not path.exists():
            sheets[name] = []
            report["warnings"].append(f"WARNING: {name}.csv not found")
            continue
        report["input_files"][name] = {"path": str(path), "hash": get_file_hash(path)}
        try:
            sheets[name] = _read_sheet(path)
        except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as e:
            report["errors"].append(f"ERROR: Failed to read {path}. {e}")
            sheets[name] = []

    records = assemble_products(
        sheets['products'], sheets['attributes'], sheets['options'], sheets['variants'], report
    )

    valid = []
    for record in records:
        try:
            Product.from_dict(record)
        except ValueError as e:
            report["errors"].append(f"Product {record['id']}: {e}")
            continue
        valid.append(record)

    report["metrics"] = {
        "product_count": len(valid),
        "rejected_products": len(records) - len(valid),
        "attribute_count": sum(len(r['attributes']) for r in valid),
        "option_count": sum(len(a['options']) for r in valid for a in r['attributes']),
        "variant_count": sum(len(r['variants']) for r in valid),
        "pricing_types": {
            str(k): int(v) for k, v in pd.Series(
                [r.get('pricingType', 'FIXED').upper() for r in valid], dtype=str
            ).value_counts().items()
        },
    }

    if report["errors"]:
        report["status"] = "failed"
        if verbose:
            for error in report["errors"]:
                print(error)
    else:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, 'w', encoding='utf-8') as f:
            json.dump({"products": valid}, f, indent=2)
        report["output_file"] = str(output_path)
        report["status"] = "success"
        if verbose:
            print(f"\nPROCESS COMPLETE: {output_path} generated with {len(valid)} products.")

    # Save build report
    report_path = settings.build_report
    report_path.parent.mkdir(parents=True, exist_ok=True)
    with open(report_path, 'w') as f:
        json.dump(report, f, indent=2)

    if verbose:
        print(f"Build report saved to: {report_path}")

    return report


if __name__ == "__main__":
    build_catalog()
