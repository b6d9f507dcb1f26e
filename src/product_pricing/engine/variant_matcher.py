"""
Variant Matcher - Finds the catalog variant described by a configuration.

A variant's configuration is its fingerprint: the variant matches when
every fingerprint key is present in the caller's configuration with a
strictly equal value. Extra configuration keys are ignored.
"""
import logging
from decimal import Decimal
from typing import Any, Iterable, Optional

from .models import ProductVariant

logger = logging.getLogger(__name__)

_NUMBER_TYPES = (int, float, Decimal)


def values_equal(left: Any, right: Any) -> bool:
    """
    Strict equality with no coercion across types.

    Numbers compare numerically (2 == 2.0), but booleans only equal
    booleans and strings only equal strings ("5" != 5).
    """
    if isinstance(left, bool) or isinstance(right, bool):
        return isinstance(left, bool) and isinstance(right, bool) and left == right
    if isinstance(left, _NUMBER_TYPES) and isinstance(right, _NUMBER_TYPES):
        if isinstance(left, float) or isinstance(right, float):
            return float(left) == float(right)
        return left == right
    if type(left) is not type(right):
        return False
    return left == right


def variant_matches(variant: ProductVariant, configuration: dict[str, Any]) -> bool:
    """Check whether a variant's fingerprint is contained in the configuration."""
    if not variant.is_active:
        return False
    for key, expected in variant.configuration.items():
        if key not in configuration:
            return False
        if not values_equal(expected, configuration[key]):
            return False
    return True


def find_matching_variants(
    variants: Iterable[ProductVariant],
    configuration: dict[str, Any]
) -> list[ProductVariant]:
    """Return every matching active variant, in catalog order."""
    configuration = configuration or {}
    return [v for v in variants if variant_matches(v, configuration)]


def find_variant(
    variants: Iterable[ProductVariant],
    configuration: dict[str, Any]
) -> Optional[ProductVariant]:
    """
    Find the variant for a configuration.

    When several variants match, the first one in catalog order wins.
    Returns None when nothing matches.
    """
    matches = find_matching_variants(variants, configuration)
    if not matches:
        return None
    if len(matches) > 1:
        logger.debug(
            "%d variants match configuration, using first (%s)",
            len(matches), matches[0].id
        )
    return matches[0]
