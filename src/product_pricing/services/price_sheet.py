"""
Price Sheet - bulk pricing of product configurations into a DataFrame.

Used by the UI export tab, the price-sheet API endpoint and the golden
case generator.
"""
import json
import logging
from pathlib import Path
from typing import Any, Iterable

import pandas as pd

from .catalog_service import CatalogService, ProductNotFoundError

logger = logging.getLogger(__name__)

COLUMNS = [
    'Product ID', 'Product', 'Configuration', 'Quantity', 'Unit Price', 'Unit Cost',
    'Total Price', 'Total Cost', 'Margin', 'Margin %', 'Tax Rate', 'Unit', 'Errors',
]


def build_price_sheet(catalog: CatalogService, requests: Iterable[dict[str, Any]]) -> pd.DataFrame:
    """
    Price a batch of requests.

    Args:
        catalog: Catalog to price against
        requests: Dicts with product_id, configuration and quantity keys

    Returns:
        DataFrame with one row per request (see COLUMNS)
    """
    rows = []
    for request in requests:
        product_id = str(request.get('product_id', ''))
        configuration = request.get('configuration') or {}
        quantity = request.get('quantity', 1)

        try:
            result = catalog.calculate(product_id, configuration, quantity)
        except ProductNotFoundError:
            logger.warning("Price sheet: product %s not found", product_id)
            rows.append({
                'Product ID': product_id,
                'Configuration': json.dumps(configuration, sort_keys=True, default=str),
                'Quantity': float(quantity),
                'Errors': "Product not found",
            })
            continue

        rows.append({
            'Product ID': result.product_id,
            'Product': result.product_name,
            'Configuration': json.dumps(result.configuration, sort_keys=True, default=str),
            'Quantity': float(result.quantity),
            'Unit Price': float(result.unit_price),
            'Unit Cost': float(result.unit_cost),
            'Total Price': float(result.total_price),
            'Total Cost': float(result.total_cost),
            'Margin': float(result.margin),
            'Margin %': float(result.margin_percent),
            'Tax Rate': float(result.tax_rate),
            'Unit': result.unit,
            'Errors': "; ".join(result.errors),
        })

    return pd.DataFrame(rows, columns=COLUMNS)


def write_price_sheet(df: pd.DataFrame, path: Path) -> Path:
    """Write a price sheet as CSV, or Excel when the path ends in .xlsx."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    if path.suffix.lower() == '.xlsx':
        df.to_excel(path, index=False, sheet_name='Price Sheet')
    else:
        df.to_csv(path, index=False)
    return path
