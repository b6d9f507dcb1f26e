"""
Catalog Service - read access to the product catalog snapshot.

Loads catalog.json into immutable Product records, answers product
lookups and prices products by id through the engine.
"""
import json
import logging
from pathlib import Path
from typing import Any, Optional

import pandas as pd

from ..engine.formula import VARIABLES, FormulaError, parse, variables_in
from ..engine.models import PriceCalculationResult, PricingType, Product
from ..engine.pricing_engine import calculate

logger = logging.getLogger(__name__)


class ProductNotFoundError(LookupError):
    """Raised when a product id is not in the catalog (or not sellable)."""

    def __init__(self, product_id: str):
        super().__init__(f"Product '{product_id}' not found")
        self.product_id = product_id


def load_products(path: Path) -> list[Product]:
    """
    Read a catalog file.

    Accepts either {"products": [...]} or a bare list of product records.
    """
    with open(path, 'r', encoding='utf-8') as f:
        data = json.load(f)

    records = data.get('products', []) if isinstance(data, dict) else data
    products = []
    for i, record in enumerate(records):
        try:
            products.append(Product.from_dict(record))
        except ValueError as e:
            raise ValueError(f"{path}: product #{i + 1} is invalid: {e}") from e
    return products


class CatalogService:
    """Service for looking up and pricing catalog products."""

    def __init__(self, catalog_path: Optional[Path] = None, products: Optional[list[Product]] = None):
        """Load the catalog from disk, or wrap an in-memory product list."""
        self.catalog_path = Path(catalog_path) if catalog_path is not None else None
        self.rounding = None
        self._products: dict[str, Product] = {}

        if products is not None:
            self._set_products(products)
        else:
            if catalog_path is None or not catalog_path.exists():
                raise FileNotFoundError(
                    f"Catalog not found at {catalog_path}. "
                    "Run scripts/build_all.py or set PRODUCT_PRICING_CATALOG."
                )
            self.reload()

    def _set_products(self, products: list[Product]):
        snapshot = {}
        for product in products:
            if product.id in snapshot:
                raise ValueError(f"Duplicate product id '{product.id}'")
            snapshot[product.id] = product
        # Swap the whole snapshot so concurrent readers never see a partial catalog
        self._products = snapshot

    def reload(self):
        """Reload the catalog file from disk."""
        products = load_products(self.catalog_path)
        self._set_products(products)
        logger.info("Loaded %d products from %s", len(products), self.catalog_path)

    @property
    def products(self) -> list[Product]:
        return list(self._products.values())

    def list_products(
        self,
        search: Optional[str] = None,
        category: Optional[str] = None,
        product_type: Optional[str] = None,
        is_active: Optional[bool] = None,
    ) -> list[Product]:
        """List products matching the filters, sorted by category then name."""
        results = []
        needle = search.lower().strip() if search else None

        for product in self._products.values():
            if needle:
                haystack = [product.name, product.description or "", product.sku or ""]
                if not any(needle in text.lower() for text in haystack):
                    continue
            if category and product.category != category:
                continue
            if product_type and product.product_type.value != product_type.upper():
                continue
            if is_active is not None and product.is_active != is_active:
                continue
            results.append(product)

        results.sort(key=lambda p: ((p.category or "").lower(), p.name.lower()))
        return results

    def categories(self) -> list[str]:
        return sorted({p.category for p in self._products.values() if p.category})

    def get_product(self, product_id: str) -> Product:
        """Get a single product by id."""
        product = self._products.get(str(product_id))
        if product is None:
            raise ProductNotFoundError(product_id)
        return product

    def calculate(
        self,
        product_id: str,
        configuration: Optional[dict[str, Any]] = None,
        quantity=1,
        rounding: Optional[str] = None,
    ) -> PriceCalculationResult:
        """
        Price an active product by id.

        Raises ProductNotFoundError for unknown or inactive products.
        """
        product = self.get_product(product_id)
        if not product.is_active:
            raise ProductNotFoundError(product_id)

        kwargs = {}
        if rounding or self.rounding:
            kwargs['rounding'] = rounding or self.rounding
        return calculate(product, configuration or {}, quantity, **kwargs)

    def validate_catalog(self) -> list[str]:
        """
        Catalog-level problems that would make pricing fall back.

        Checked: calculated products without a (parsable) formula, formulas
        using unknown identifiers, duplicate SKUs, and variant fingerprints
        keyed on attributes the product does not have.
        """
        problems = []
        seen_skus: dict[str, str] = {}

        for product in self._products.values():
            if product.sku:
                if product.sku in seen_skus:
                    problems.append(
                        f"Duplicate SKU '{product.sku}' on products {seen_skus[product.sku]} and {product.id}"
                    )
                else:
                    seen_skus[product.sku] = product.id

            if product.pricing_type == PricingType.CALCULATED:
                if not product.calculation_formula:
                    problems.append(f"{product.name}: calculated pricing without a formula")
                else:
                    problems.extend(self._check_formula(product))

            if product.pricing_type == PricingType.VARIANT_BASED and product.attributes:
                keys = {a.key for a in product.attributes}
                for variant in product.variants:
                    unknown = [k for k in variant.configuration if k not in keys]
                    if unknown:
                        problems.append(
                            f"{product.name}: variant {variant.name or variant.id} uses unknown attributes: "
                            f"{', '.join(unknown)}"
                        )

        return problems

    @staticmethod
    def _check_formula(product: Product) -> list[str]:
        try:
            unknown = [n for n in variables_in(product.calculation_formula) if n not in VARIABLES]
            if unknown:
                return [f"{product.name}: formula uses unknown identifiers: {', '.join(unknown)}"]
            parse(product.calculation_formula)
        except FormulaError as e:
            return [f"{product.name}: invalid formula: {e}"]
        return []

    def to_frame(self) -> pd.DataFrame:
        """Catalog overview, one row per product."""
        rows = [
            {
                'ID': p.id,
                'SKU': p.sku,
                'Name': p.name,
                'Category': p.category,
                'Product Type': p.product_type.value,
                'Pricing Type': p.pricing_type.value,
                'Base Price': float(p.base_price),
                'Cost Price': float(p.cost_price) if p.cost_price is not None else None,
                'Formula': p.calculation_formula,
                'Unit': p.unit,
                'Tax Rate': float(p.default_tax_rate),
                'Attributes': len(p.attributes),
                'Variants': len(p.variants),
                'Active': p.is_active,
            }
            for p in self.list_products()
        ]
        columns = [
            'ID', 'SKU', 'Name', 'Category', 'Product Type', 'Pricing Type', 'Base Price',
            'Cost Price', 'Formula', 'Unit', 'Tax Rate', 'Attributes', 'Variants', 'Active',
        ]
        return pd.DataFrame(rows, columns=columns)
