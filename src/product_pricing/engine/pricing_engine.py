"""
Price Calculation Orchestrator - the public entry point of the engine.

Pipeline for one product line:
1. Resolve base unit price/cost from the product's pricing strategy
2. Validate required attributes and numeric bounds (warnings only)
3. Add attribute option modifiers to price and cost
4. Round unit price and unit cost to 2 decimals
5. Extend by quantity and round totals independently
6. Derive margin and margin percent from the rounded totals
7. Attach tax rate, unit, warnings and the calculation trace

Every step is pure. Pricing problems are reported in ``result.errors``
and a best-effort price is always returned.
"""
import logging
from decimal import ROUND_HALF_EVEN, ROUND_HALF_UP, Decimal, getcontext, localcontext
from typing import Any, Optional, Union

from .models import PriceCalculationResult, Product, to_decimal
from .modifiers import aggregate_modifiers
from .strategies import resolve_base_unit
from .validation import find_missing_required, find_out_of_range

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")
HUNDRED = Decimal("100")

ROUNDING_MODES = {
    "half_up": ROUND_HALF_UP,
    "half_even": ROUND_HALF_EVEN,
}


def round_money(value: Decimal, rounding: str = ROUND_HALF_UP) -> Decimal:
    """Round to 2 decimal places."""
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, value.adjusted() + 3)
        return value.quantize(CENT, rounding=rounding)


def _span(value: Decimal) -> int:
    """Digits from the leading digit (or units) down to the last digit (or units)."""
    exponent = value.as_tuple().exponent
    return max(value.adjusted(), 0) + 1 + max(-exponent, 0)


def _working_precision(*values: Decimal) -> int:
    """Precision that keeps sums, products and cent rounding of these values exact."""
    return max(getcontext().prec, sum(_span(v) for v in values) + 4)


def _money(value: Decimal) -> str:
    return f"${value:,.2f}"


def calculate(
    product: Product,
    configuration: Optional[dict[str, Any]] = None,
    quantity: Union[int, float, str, Decimal] = 1,
    *,
    rounding: str = ROUND_HALF_UP,
) -> PriceCalculationResult:
    """
    Calculate the price of a configured product.

    Args:
        product: Catalog product (read-only)
        configuration: Attribute selections keyed by lower-cased attribute name
        quantity: Number of units; may be fractional (e.g. square feet)
        rounding: decimal rounding mode applied to every rounded figure

    Returns:
        PriceCalculationResult carrying the figures, warnings and trace
    """
    if product is None:
        raise ValueError("calculate() requires a product")

    configuration = dict(configuration or {})
    qty = to_decimal(quantity, Decimal("1"))

    result = PriceCalculationResult(
        product_id=product.id,
        product_name=product.name,
        configuration=configuration,
        quantity=qty,
        tax_rate=product.default_tax_rate,
        unit=product.unit,
    )

    # 1. Strategy
    base = resolve_base_unit(product, configuration)
    result.add_trace("Pricing Strategy", product.pricing_type.value, base.source)
    if base.multiplier is not None:
        result.add_trace("Per-Unit Multiplier", "Units priced", str(base.multiplier))
    result.add_trace("Base Unit", f"Cost {_money(base.cost)}", _money(base.price))
    for warning in base.errors:
        result.add_warning(warning)

    # 2. Validation
    missing = find_missing_required(product.attributes, configuration)
    if missing:
        result.add_warning(f"Missing required attributes: {', '.join(missing)}")
    for problem in find_out_of_range(product.attributes, configuration):
        result.add_warning(problem)

    price_delta, cost_delta = aggregate_modifiers(product.attributes, configuration)

    # Figures may exceed the default 28 digits; keep every step exact
    with localcontext() as ctx:
        ctx.prec = _working_precision(base.price, base.cost, price_delta, cost_delta, qty)

        # 3. Modifiers
        unit_price = base.price + price_delta
        unit_cost = base.cost + cost_delta
        if price_delta or cost_delta:
            result.add_trace(
                "Attribute Modifiers",
                f"Price {_money(price_delta)}, cost {_money(cost_delta)}",
                _money(unit_price)
            )

        # 4-5. Rounding and extension
        result.unit_price = round_money(unit_price, rounding)
        result.unit_cost = round_money(unit_cost, rounding)
        result.total_price = round_money(unit_price * qty, rounding)
        result.total_cost = round_money(unit_cost * qty, rounding)
        result.add_trace(
            "Extension",
            f"Quantity {qty} × {_money(result.unit_price)}",
            _money(result.total_price)
        )

        # 6. Margin
        result.margin = result.total_price - result.total_cost
        if result.total_price > 0:
            result.margin_percent = round_money(result.margin / result.total_price * HUNDRED, rounding)
        else:
            result.margin_percent = Decimal("0.00")
    result.add_trace("Margin", f"{result.margin_percent}% of total", _money(result.margin))

    if result.errors:
        logger.warning(
            "Price for product %s calculated with %d warning(s): %s",
            product.id, len(result.errors), "; ".join(result.errors)
        )
    else:
        logger.debug("Price for product %s: %s x %s = %s", product.id, result.unit_price, qty, result.total_price)

    return result
