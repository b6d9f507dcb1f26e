"""
Attribute Validator - completeness and bounds checks for a configuration.

Problems found here never block pricing; the orchestrator turns them into
warnings on the result.
"""
from decimal import Decimal
from typing import Any, Iterable

from .models import AttributeType, ProductAttribute, parse_number


def is_blank(value: Any) -> bool:
    """A selection counts as missing when absent, None, empty string or empty list."""
    if value is None:
        return True
    if isinstance(value, str) and value == "":
        return True
    if isinstance(value, (list, tuple, dict)) and len(value) == 0:
        return True
    return False


def find_missing_required(
    attributes: Iterable[ProductAttribute],
    configuration: dict[str, Any]
) -> list[str]:
    """Names of required attributes without a selection, configurable or not."""
    configuration = configuration or {}
    return [
        attribute.name
        for attribute in attributes
        if attribute.is_required
        and is_blank(configuration.get(attribute.key))
    ]


def _fmt(value: Decimal) -> str:
    return format(value.normalize(), 'f')


def _range_message(attribute: ProductAttribute) -> str:
    suffix = f" {attribute.unit}" if attribute.unit else ""
    if attribute.min_value is not None and attribute.max_value is not None:
        return f"{attribute.name} must be between {_fmt(attribute.min_value)} and {_fmt(attribute.max_value)}{suffix}"
    if attribute.min_value is not None:
        return f"{attribute.name} must be at least {_fmt(attribute.min_value)}{suffix}"
    return f"{attribute.name} must be at most {_fmt(attribute.max_value)}{suffix}"


def find_out_of_range(
    attributes: Iterable[ProductAttribute],
    configuration: dict[str, Any]
) -> list[str]:
    """
    Check NUMBER and DIMENSION selections against their min/max bounds.

    A Dimension selection is a {width, height} mapping; each side is checked.
    Values that are not numeric are left to the pricing strategies to report.
    """
    configuration = configuration or {}
    problems = []

    for attribute in attributes:
        if attribute.type not in (AttributeType.NUMBER, AttributeType.DIMENSION):
            continue
        if attribute.min_value is None and attribute.max_value is None:
            continue
        selected = configuration.get(attribute.key)
        if is_blank(selected):
            continue

        if isinstance(selected, dict):
            values = [parse_number(selected.get('width')), parse_number(selected.get('height'))]
        else:
            values = [parse_number(selected)]

        for value in values:
            if value is None:
                continue
            too_low = attribute.min_value is not None and value < attribute.min_value
            too_high = attribute.max_value is not None and value > attribute.max_value
            if too_low or too_high:
                problems.append(_range_message(attribute))
                break

    return problems
