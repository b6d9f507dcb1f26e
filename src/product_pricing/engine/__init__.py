"""Engine subpackage - catalog model and price calculation."""
from .formula import FormulaError, evaluate
from .models import (
    AttributeOption,
    AttributeType,
    PriceCalculationResult,
    PricingType,
    Product,
    ProductAttribute,
    ProductType,
    ProductVariant,
)
from .pricing_engine import ROUNDING_MODES, calculate

__all__ = [
    'calculate', 'evaluate', 'FormulaError', 'ROUNDING_MODES',
    'Product', 'ProductAttribute', 'AttributeOption', 'ProductVariant',
    'ProductType', 'PricingType', 'AttributeType', 'PriceCalculationResult',
]
