"""
Pricing Strategy Resolver.

Derives the base unit price and cost of a product, before attribute
modifiers, using the product's pricing type:

- FIXED: base price and cost price as catalogued
- CALCULATED: catalog formula evaluated against configuration values
- VARIANT_BASED: price of the matching variant, base price otherwise
- PER_UNIT: base price scaled by the configured quantity or area

Problems never raise here. A strategy that cannot do its job falls back
to the base price and records a warning on the returned BaseUnitPrice.
"""
import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Optional

from .formula import FormulaError, evaluate
from .models import PricingType, Product, ProductVariant, parse_number
from .variant_matcher import find_variant

logger = logging.getLogger(__name__)

# Formula variables that are read from the configuration
CONFIG_VARIABLES = ('width', 'height', 'length', 'area', 'quantity')

# Configuration keys consulted for a per-unit multiplier, highest priority first
PER_UNIT_KEYS = ('quantity', 'area')

ZERO = Decimal("0")


@dataclass
class BaseUnitPrice:
    """Unit price and cost produced by a pricing strategy."""
    price: Decimal
    cost: Decimal
    source: str
    variant: Optional[ProductVariant] = None
    multiplier: Optional[Decimal] = None
    errors: list[str] = field(default_factory=list)


def _base(product: Product, source: str) -> BaseUnitPrice:
    return BaseUnitPrice(
        price=product.base_price,
        cost=product.cost_price if product.cost_price is not None else ZERO,
        source=source,
    )


def formula_variables(product: Product, configuration: dict[str, Any]) -> dict[str, Decimal]:
    """
    Bind formula variables from a configuration.

    Only numeric values are bound; anything else stays unbound so that a
    formula using it fails and the product falls back to its base price.
    A Dimension selection ({width, height}) supplies width and height when
    the configuration has no top-level values for them.
    """
    variables = {}
    for name in CONFIG_VARIABLES:
        value = parse_number(configuration.get(name))
        if value is not None:
            variables[name] = value

    for value in configuration.values():
        if isinstance(value, dict):
            for side in ('width', 'height'):
                number = parse_number(value.get(side))
                if side not in variables and number is not None:
                    variables[side] = number

    variables['basePrice'] = product.base_price
    return variables


def resolve_fixed(product: Product, configuration: dict[str, Any]) -> BaseUnitPrice:
    return _base(product, "Fixed price")


def resolve_calculated(product: Product, configuration: dict[str, Any]) -> BaseUnitPrice:
    if not product.calculation_formula:
        unit = _base(product, "Base price (no formula)")
        unit.errors.append("Calculation error: Calculation formula not defined for this product")
        return unit

    variables = formula_variables(product, configuration)
    try:
        price = evaluate(product.calculation_formula, variables)
    except FormulaError as e:
        logger.warning(
            "Formula '%s' failed for product %s: %s",
            product.calculation_formula, product.id, e
        )
        unit = _base(product, "Base price (formula failed)")
        unit.errors.append(f"Calculation error: {e}")
        return unit

    return BaseUnitPrice(
        price=price,
        cost=product.cost_price if product.cost_price is not None else ZERO,
        source=f"Formula {product.calculation_formula}",
    )


def resolve_variant_based(product: Product, configuration: dict[str, Any]) -> BaseUnitPrice:
    variant = find_variant(product.variants, configuration)
    if variant is None:
        # Pricing the base product is valid when no variant matches
        return _base(product, "Base price (no matching variant)")

    if variant.cost_price is not None:
        cost = variant.cost_price
    elif product.cost_price is not None:
        cost = product.cost_price
    else:
        cost = ZERO

    return BaseUnitPrice(
        price=variant.price if variant.price is not None else product.base_price,
        cost=cost,
        source=f"Variant {variant.name or variant.sku or variant.id}",
        variant=variant,
    )


def resolve_per_unit(product: Product, configuration: dict[str, Any]) -> BaseUnitPrice:
    errors = []
    multiplier = None
    for key in PER_UNIT_KEYS:
        raw = configuration.get(key)
        if raw is None or raw == "":
            continue
        value = parse_number(raw)
        if value is None:
            errors.append(f"Invalid per-unit multiplier '{key}': {raw}")
            continue
        if value == 0:
            continue
        multiplier = value
        break

    if multiplier is None:
        multiplier = Decimal("1")

    unit = _base(product, "Per unit")
    unit.price = product.base_price * multiplier
    unit.cost = unit.cost * multiplier
    unit.multiplier = multiplier
    unit.errors.extend(errors)
    return unit


STRATEGIES = {
    PricingType.FIXED: resolve_fixed,
    PricingType.CALCULATED: resolve_calculated,
    PricingType.VARIANT_BASED: resolve_variant_based,
    PricingType.PER_UNIT: resolve_per_unit,
}


def resolve_base_unit(product: Product, configuration: dict[str, Any]) -> BaseUnitPrice:
    """
    Resolve the base unit price and cost for a product and configuration.

    Args:
        product: Catalog product
        configuration: Caller's attribute selections

    Returns:
        BaseUnitPrice with any warnings in ``errors``
    """
    strategy = STRATEGIES.get(product.pricing_type, resolve_fixed)
    return strategy(product, configuration or {})
