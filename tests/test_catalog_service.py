"""
Catalog service tests against the bundled sample catalog.
"""
import json
from decimal import ROUND_HALF_EVEN, Decimal

import pytest

from product_pricing.engine.models import Product
from product_pricing.services.catalog_service import (
    CatalogService,
    ProductNotFoundError,
    load_products,
)


def test_sample_catalog_loads(catalog):
    assert len(catalog.products) == 9
    assert catalog.get_product("laptop-bus-001").name == "Business Laptop"


def test_sample_catalog_has_no_problems(catalog):
    assert catalog.validate_catalog() == []


def test_categories(catalog):
    assert catalog.categories() == [
        "Apparel", "Electronics", "Flooring", "Gifting", "Services", "Software", "Windows",
    ]


class TestListProducts:

    def test_sorted_by_category_then_name(self, catalog):
        names = [p.name for p in catalog.list_products(category="Windows")]
        assert names == ["Tempered Glass Panel", "UPVC Window"]

    def test_search_covers_name_description_and_sku(self, catalog):
        assert [p.id for p in catalog.list_products(search="LAPTOP")] == ["laptop-bus-001"]
        assert [p.id for p in catalog.list_products(search="installation")] == [
            "floor-vinyl-001", "service-install-001",
        ]
        assert [p.id for p in catalog.list_products(search="crm-001")] == ["software-crm-001"]

    def test_filter_by_product_type(self, catalog):
        ids = {p.id for p in catalog.list_products(product_type="calculated")}
        assert ids == {"floor-vinyl-001", "glass-panel-001"}

    def test_filter_by_active_flag(self, catalog):
        assert [p.id for p in catalog.list_products(is_active=False)] == ["legacy-printer-001"]
        assert len(catalog.list_products(is_active=True)) == 8


class TestCalculate:

    def test_prices_by_id(self, catalog):
        result = catalog.calculate("tshirt-custom-001", {"size": "L", "color": "Black"}, 2)
        assert result.unit_price == Decimal("339.00")
        assert result.total_price == Decimal("678.00")
        assert result.tax_rate == Decimal("12")

    def test_unknown_product(self, catalog):
        with pytest.raises(ProductNotFoundError) as exc:
            catalog.calculate("nope", {})
        assert exc.value.product_id == "nope"

    def test_inactive_product_is_not_sellable(self, catalog):
        assert catalog.get_product("legacy-printer-001").is_active is False
        with pytest.raises(ProductNotFoundError):
            catalog.calculate("legacy-printer-001", {})

    def test_rounding_mode_is_applied(self):
        service = CatalogService(products=[Product.from_dict({"id": "p", "name": "P", "basePrice": "0.125"})])
        assert service.calculate("p").unit_price == Decimal("0.13")
        service.rounding = ROUND_HALF_EVEN
        assert service.calculate("p").unit_price == Decimal("0.12")


def test_not_found_error_is_lookup_error():
    assert issubclass(ProductNotFoundError, LookupError)


def test_missing_catalog_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        CatalogService(tmp_path / "missing.json")


def test_bare_list_catalog_and_reload(tmp_path):
    path = tmp_path / "catalog.json"
    path.write_text(json.dumps([{"id": "a", "name": "Alpha", "basePrice": 10}]))
    service = CatalogService(path)
    assert [p.id for p in service.products] == ["a"]

    path.write_text(json.dumps({"products": [
        {"id": "a", "name": "Alpha", "basePrice": 12},
        {"id": "b", "name": "Beta", "basePrice": 5},
    ]}))
    service.reload()
    assert service.get_product("a").base_price == Decimal("12")
    assert len(service.products) == 2


def test_invalid_record_names_its_position(tmp_path):
    path = tmp_path / "catalog.json"
    path.write_text(json.dumps({"products": [
        {"id": "a", "name": "Alpha", "basePrice": 10},
        {"id": "b", "name": "Beta", "basePrice": -1},
    ]}))
    with pytest.raises(ValueError, match="product #2"):
        load_products(path)


def test_duplicate_ids_are_rejected():
    products = [
        Product.from_dict({"id": "a", "name": "Alpha", "basePrice": 1}),
        Product.from_dict({"id": "a", "name": "Again", "basePrice": 2}),
    ]
    with pytest.raises(ValueError, match="Duplicate product id"):
        CatalogService(products=products)


def test_validate_catalog_reports_problems():
    records = [
        {"id": "f1", "name": "No Formula", "sku": "DUP", "basePrice": 1, "pricingType": "CALCULATED"},
        {"id": "f2", "name": "Bad Formula", "sku": "DUP", "basePrice": 1,
         "pricingType": "CALCULATED", "calculationFormula": "depth * basePrice"},
        {"id": "f3", "name": "Broken Formula", "basePrice": 1,
         "pricingType": "CALCULATED", "calculationFormula": "(width * 2"},
        {"id": "v1", "name": "Shirt", "basePrice": 1, "pricingType": "VARIANT_BASED",
         "attributes": [{"name": "Size", "type": "SELECT"}],
         "variants": [{"id": "v", "configuration": {"size": "M", "colour": "red"}}]},
    ]
    service = CatalogService(products=[Product.from_dict(r) for r in records])
    assert service.validate_catalog() == [
        "No Formula: calculated pricing without a formula",
        "Duplicate SKU 'DUP' on products f1 and f2",
        "Bad Formula: formula uses unknown identifiers: depth",
        "Broken Formula: invalid formula: Missing closing parenthesis",
        "Shirt: variant v uses unknown attributes: colour",
    ]


def test_to_frame(catalog):
    df = catalog.to_frame()
    assert len(df) == 9
    assert list(df.columns[:3]) == ["ID", "SKU", "Name"]
    laptop = df[df["ID"] == "laptop-bus-001"].iloc[0]
    assert laptop["Base Price"] == 45000.0
    assert bool(laptop["Active"]) is True
