"""
Data models for the pricing engine.

Catalog records (Product, ProductAttribute, AttributeOption, ProductVariant)
are frozen dataclasses: the engine reads them and never mutates them.
The calculation result is a regular dataclass that accumulates warnings
and trace steps while a single calculation runs.
"""
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Optional


class ProductType(str, Enum):
    SIMPLE = "SIMPLE"
    CONFIGURABLE = "CONFIGURABLE"
    CALCULATED = "CALCULATED"


class PricingType(str, Enum):
    FIXED = "FIXED"
    PER_UNIT = "PER_UNIT"
    CALCULATED = "CALCULATED"
    VARIANT_BASED = "VARIANT_BASED"


class AttributeType(str, Enum):
    TEXT = "TEXT"
    NUMBER = "NUMBER"
    SELECT = "SELECT"
    MULTI_SELECT = "MULTI_SELECT"
    DIMENSION = "DIMENSION"
    BOOLEAN = "BOOLEAN"


def to_decimal(value: Any, default: Optional[Decimal] = None) -> Optional[Decimal]:
    """Convert a catalog number (int, float, str or Decimal) to Decimal."""
    if value is None or value == "":
        return default
    if isinstance(value, bool):
        raise ValueError(f"Expected a number, got {value!r}")
    try:
        number = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except InvalidOperation:
        raise ValueError(f"Expected a number, got {value!r}") from None
    if not number.is_finite():
        raise ValueError(f"Expected a finite number, got {value!r}")
    return number


def parse_number(value: Any) -> Optional[Decimal]:
    """Lenient numeric read of a configuration value; None when not a number."""
    if isinstance(value, (bool, dict, list, tuple)):
        return None
    try:
        return to_decimal(value)
    except ValueError:
        return None


def _parse_enum(enum_cls, value, default):
    if value is None or value == "":
        return default
    try:
        return enum_cls(str(value).strip().upper())
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise ValueError(f"Invalid {enum_cls.__name__} '{value}' (expected one of: {allowed})") from None


def _parse_bool(value, default: bool) -> bool:
    if value is None or value == "":
        return default
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1", "yes", "y")
    return bool(value)


def _parse_int(value, default: int) -> int:
    if value is None or value == "":
        return default
    return int(float(value))


@dataclass(frozen=True)
class AttributeOption:
    """One selectable value of a Select/MultiSelect attribute."""
    value: str
    display_name: str
    price_modifier: Decimal = Decimal("0")
    cost_modifier: Decimal = Decimal("0")
    is_active: bool = True
    sort_order: int = 0

    @classmethod
    def from_dict(cls, data: dict, index: int = 0) -> 'AttributeOption':
        value = data.get('value')
        if value is None or value == "":
            raise ValueError("Attribute option requires a value")
        value = str(value)
        return cls(
            value=value,
            display_name=data.get('displayName') or value,
            price_modifier=to_decimal(data.get('priceModifier'), Decimal("0")),
            cost_modifier=to_decimal(data.get('costModifier'), Decimal("0")),
            is_active=_parse_bool(data.get('isActive'), True),
            sort_order=_parse_int(data.get('sortOrder'), index),
        )

    def to_dict(self) -> dict:
        return {
            "value": self.value,
            "displayName": self.display_name,
            "priceModifier": float(self.price_modifier),
            "costModifier": float(self.cost_modifier),
            "isActive": self.is_active,
            "sortOrder": self.sort_order,
        }


@dataclass(frozen=True)
class ProductAttribute:
    """A named, typed, optionally required configurable property of a product."""
    id: str
    name: str
    type: AttributeType
    is_required: bool = False
    is_configurable: bool = True
    min_value: Optional[Decimal] = None
    max_value: Optional[Decimal] = None
    default_value: Optional[str] = None
    unit: Optional[str] = None
    sort_order: int = 0
    options: tuple[AttributeOption, ...] = ()

    @property
    def key(self) -> str:
        """Configuration key for this attribute (lower-cased name, as the legacy catalog expects)."""
        return self.name.lower()

    def active_options(self) -> list[AttributeOption]:
        """Options that may be offered and matched, in display order."""
        return sorted((o for o in self.options if o.is_active), key=lambda o: o.sort_order)

    @classmethod
    def from_dict(cls, data: dict, index: int = 0) -> 'ProductAttribute':
        name = str(data.get('name') or "").strip()
        if not name:
            raise ValueError("Attribute requires a name")
        options = tuple(
            AttributeOption.from_dict(opt, i) for i, opt in enumerate(data.get('options') or [])
        )
        default_value = data.get('defaultValue')
        return cls(
            id=str(data.get('id') or name.lower()),
            name=name,
            type=_parse_enum(AttributeType, data.get('type'), AttributeType.TEXT),
            is_required=_parse_bool(data.get('isRequired'), False),
            is_configurable=_parse_bool(data.get('isConfigurable'), True),
            min_value=to_decimal(data.get('minValue')),
            max_value=to_decimal(data.get('maxValue')),
            default_value=str(default_value) if default_value is not None else None,
            unit=data.get('unit') or None,
            sort_order=_parse_int(data.get('sortOrder'), index),
            options=options,
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "type": self.type.value,
            "isRequired": self.is_required,
            "isConfigurable": self.is_configurable,
            "minValue": float(self.min_value) if self.min_value is not None else None,
            "maxValue": float(self.max_value) if self.max_value is not None else None,
            "defaultValue": self.default_value,
            "unit": self.unit,
            "sortOrder": self.sort_order,
            "options": [o.to_dict() for o in self.options],
        }


@dataclass(frozen=True)
class ProductVariant:
    """A pre-priced combination of attribute selections."""
    id: str
    configuration: dict[str, Any] = field(default_factory=dict)
    sku: Optional[str] = None
    name: Optional[str] = None
    price: Optional[Decimal] = None
    cost_price: Optional[Decimal] = None
    is_active: bool = True

    @classmethod
    def from_dict(cls, data: dict, index: int = 0) -> 'ProductVariant':
        configuration = data.get('configuration') or {}
        if not isinstance(configuration, dict):
            raise ValueError(f"Variant configuration must be a mapping, got {type(configuration).__name__}")
        return cls(
            id=str(data.get('id') or data.get('sku') or f"variant-{index + 1}"),
            configuration=dict(configuration),
            sku=data.get('sku') or None,
            name=data.get('name') or None,
            price=to_decimal(data.get('price')),
            cost_price=to_decimal(data.get('costPrice')),
            is_active=_parse_bool(data.get('isActive'), True),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "sku": self.sku,
            "name": self.name,
            "configuration": dict(self.configuration),
            "price": float(self.price) if self.price is not None else None,
            "costPrice": float(self.cost_price) if self.cost_price is not None else None,
            "isActive": self.is_active,
        }


@dataclass(frozen=True)
class Product:
    """A catalog product definition as consumed by the pricing engine."""
    id: str
    name: str
    base_price: Decimal
    pricing_type: PricingType = PricingType.FIXED
    product_type: ProductType = ProductType.SIMPLE
    sku: Optional[str] = None
    category: Optional[str] = None
    description: Optional[str] = None
    cost_price: Optional[Decimal] = None
    calculation_formula: Optional[str] = None
    unit: str = "piece"
    default_tax_rate: Decimal = Decimal("18")
    is_active: bool = True
    attributes: tuple[ProductAttribute, ...] = ()
    variants: tuple[ProductVariant, ...] = ()

    @classmethod
    def from_dict(cls, data: dict) -> 'Product':
        """
        Build a Product from a catalog JSON record (camelCase keys).

        Raises ValueError for records the engine cannot price.
        """
        name = str(data.get('name') or "").strip()
        if not name:
            raise ValueError("Product name is required")
        if len(name) > 255:
            raise ValueError(f"Product name too long ({len(name)} > 255)")

        base_price = to_decimal(data.get('basePrice'), Decimal("0"))
        if base_price < 0:
            raise ValueError(f"Product '{name}': basePrice must be non-negative")

        tax_rate = to_decimal(data.get('defaultTaxRate'), Decimal("18"))
        if not Decimal("0") <= tax_rate <= Decimal("100"):
            raise ValueError(f"Product '{name}': defaultTaxRate must be between 0 and 100")

        attributes = tuple(
            ProductAttribute.from_dict(attr, i) for i, attr in enumerate(data.get('attributes') or [])
        )
        variants = tuple(
            ProductVariant.from_dict(var, i) for i, var in enumerate(data.get('variants') or [])
        )

        return cls(
            id=str(data.get('id') or data.get('sku') or name),
            name=name,
            base_price=base_price,
            pricing_type=_parse_enum(PricingType, data.get('pricingType'), PricingType.FIXED),
            product_type=_parse_enum(ProductType, data.get('productType'), ProductType.SIMPLE),
            sku=data.get('sku') or None,
            category=data.get('category') or None,
            description=data.get('description') or None,
            cost_price=to_decimal(data.get('costPrice')),
            calculation_formula=data.get('calculationFormula') or None,
            unit=data.get('unit') or "piece",
            default_tax_rate=tax_rate,
            is_active=_parse_bool(data.get('isActive'), True),
            attributes=attributes,
            variants=variants,
        )

    def get_attribute(self, key: str) -> Optional[ProductAttribute]:
        """Find an attribute by configuration key (case-insensitive name)."""
        key = key.lower()
        for attribute in self.attributes:
            if attribute.key == key:
                return attribute
        return None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "sku": self.sku,
            "category": self.category,
            "description": self.description,
            "productType": self.product_type.value,
            "pricingType": self.pricing_type.value,
            "basePrice": float(self.base_price),
            "costPrice": float(self.cost_price) if self.cost_price is not None else None,
            "calculationFormula": self.calculation_formula,
            "unit": self.unit,
            "defaultTaxRate": float(self.default_tax_rate),
            "isActive": self.is_active,
            "attributes": [a.to_dict() for a in self.attributes],
            "variants": [v.to_dict() for v in self.variants],
        }


@dataclass
class TraceStep:
    """A single step in the price calculation trace."""
    step: str
    description: str
    value: Optional[str] = None


@dataclass
class PriceCalculationResult:
    """Complete result of a price calculation for one product line."""
    product_id: str
    product_name: str
    configuration: dict[str, Any]
    quantity: Decimal
    unit_price: Decimal = Decimal("0.00")
    unit_cost: Decimal = Decimal("0.00")
    total_price: Decimal = Decimal("0.00")
    total_cost: Decimal = Decimal("0.00")
    margin: Decimal = Decimal("0.00")
    margin_percent: Decimal = Decimal("0.00")
    tax_rate: Decimal = Decimal("0")
    unit: str = "piece"
    errors: list[str] = field(default_factory=list)
    trace: list[TraceStep] = field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)

    def add_trace(self, step: str, description: str, value: str = None):
        """Add a step to the calculation trace."""
        self.trace.append(TraceStep(step=step, description=description, value=value))

    def add_warning(self, warning: str):
        """Add a non-fatal calculation warning."""
        self.errors.append(warning)

    def get_trace_text(self) -> str:
        """Get human-readable trace as formatted text."""
        lines = []
        for t in self.trace:
            if t.value:
                lines.append(f"→ {t.step}: {t.description} = {t.value}")
            else:
                lines.append(f"→ {t.step}: {t.description}")
        return "\n".join(lines)

    def to_dict(self, include_trace: bool = False) -> dict:
        """Render the result in the wire format used by the products API."""
        data = {
            "productId": self.product_id,
            "productName": self.product_name,
            "configuration": self.configuration,
            "quantity": float(self.quantity),
            "unitPrice": float(self.unit_price),
            "unitCost": float(self.unit_cost),
            "totalPrice": float(self.total_price),
            "totalCost": float(self.total_cost),
            "margin": float(self.margin),
            "marginPercent": float(self.margin_percent),
            "taxRate": float(self.tax_rate),
            "unit": self.unit,
            "errors": list(self.errors),
        }
        if include_trace:
            data["trace"] = [
                {"step": t.step, "description": t.description, "value": t.value}
                for t in self.trace
            ]
        return data
