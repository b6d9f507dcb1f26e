"""
Attribute Modifier Aggregator.

Sums the additive price and cost modifiers of the options selected in a
configuration. Attributes are independent: there is no cap and no
interaction between their modifiers.
"""
import logging
from decimal import Decimal
from typing import Any, Iterable, Optional

from .models import AttributeOption, AttributeType, ProductAttribute
from .variant_matcher import values_equal

logger = logging.getLogger(__name__)


def find_option(attribute: ProductAttribute, value: Any) -> Optional[AttributeOption]:
    """Find the active option whose value strictly equals the selection."""
    for option in attribute.active_options():
        if values_equal(option.value, value):
            return option
    return None


def selected_options(attribute: ProductAttribute, configuration: dict[str, Any]) -> list[AttributeOption]:
    """Options of one attribute selected by the configuration."""
    if not attribute.options:
        return []
    selected = configuration.get(attribute.key)
    if selected is None:
        return []

    if attribute.type == AttributeType.MULTI_SELECT and isinstance(selected, (list, tuple)):
        values = selected
    else:
        values = [selected]

    options = []
    for value in values:
        option = find_option(attribute, value)
        # A value listed twice is still one selection
        if option is not None and option not in options:
            options.append(option)
    return options


def aggregate_modifiers(
    attributes: Iterable[ProductAttribute],
    configuration: dict[str, Any]
) -> tuple[Decimal, Decimal]:
    """
    Total the price and cost modifiers for a configuration.

    Returns (price_delta, cost_delta).
    """
    configuration = configuration or {}
    price_delta = Decimal("0")
    cost_delta = Decimal("0")

    for attribute in attributes:
        for option in selected_options(attribute, configuration):
            price_delta += option.price_modifier
            cost_delta += option.cost_modifier
            logger.debug(
                "Attribute %s: option %s adds price %s, cost %s",
                attribute.name, option.value, option.price_modifier, option.cost_modifier
            )

    return price_delta, cost_delta
