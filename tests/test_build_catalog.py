"""
Catalog build tests: CSV sheets -> catalog.json + build report.
"""
import json
from decimal import Decimal

import pytest

from product_pricing.config.settings import Settings
from product_pricing.data.build_catalog import build_catalog
from product_pricing.services.catalog_service import CatalogService

PRODUCTS = """id,name,basePrice,costPrice,pricingType,category,unit,calculationFormula
tee,Tee,299,150,VARIANT_BASED,Apparel,piece,
floor,Floor,850,600,CALCULATED,Flooring,sqft,length * width * basePrice
"""

ATTRIBUTES = """productId,name,type,isRequired,minValue,maxValue,unit
tee,Size,SELECT,true,,,
floor,Length,NUMBER,true,5,50,ft
floor,Width,NUMBER,true,5,30,ft
"""

OPTIONS = """productId,attribute,value,priceModifier,costModifier,isActive
tee,Size,M,0,,
tee,Size,L,20,5,
tee,Size,XL,50,,false
tee,Colour,Red,10,,
"""

VARIANTS = """productId,sku,name,configuration,price,costPrice
tee,TEE-L,Large Tee,"{""size"": ""L""}",319,165
"""


@pytest.fixture
def workspace(tmp_path):
    sources = tmp_path / "catalog_sources"
    sources.mkdir()
    settings = Settings(
        project_root=tmp_path,
        catalog_path=tmp_path / "catalog.json",
        catalog_sources=sources,
        build_report=tmp_path / "build" / "build_report.json",
    )
    return sources, settings


def write_sheets(sources, **sheets):
    for name, text in sheets.items():
        (sources / f"{name}.csv").write_text(text, encoding="utf-8")


def test_full_build(workspace):
    sources, settings = workspace
    write_sheets(sources, products=PRODUCTS, attributes=ATTRIBUTES, options=OPTIONS, variants=VARIANTS)

    report = build_catalog(settings=settings, verbose=False)

    assert report["status"] == "success"
    assert report["metrics"]["product_count"] == 2
    assert report["metrics"]["attribute_count"] == 3
    assert report["metrics"]["option_count"] == 3
    assert report["metrics"]["variant_count"] == 1
    assert report["metrics"]["pricing_types"] == {"VARIANT_BASED": 1, "CALCULATED": 1}
    assert set(report["input_files"]) == {"products", "attributes", "options", "variants"}
    assert len(report["input_files"]["products"]["hash"]) == 12
    assert any("Colour" in w for w in report["warnings"])

    saved = json.loads(settings.build_report.read_text())
    assert saved["status"] == "success"


def test_built_catalog_prices(workspace):
    sources, settings = workspace
    write_sheets(sources, products=PRODUCTS, attributes=ATTRIBUTES, options=OPTIONS, variants=VARIANTS)
    build_catalog(settings=settings, verbose=False)

    service = CatalogService(settings.project_root / "catalog.json")

    tee = service.calculate("tee", {"size": "L"}, 1)
    assert tee.unit_price == Decimal("339.00")
    assert tee.unit_cost == Decimal("170.00")
    # Inactive option contributes nothing
    assert service.calculate("tee", {"size": "XL"}).unit_price == Decimal("299.00")

    floor = service.calculate("floor", {"length": 10, "width": 12}, 1)
    assert floor.unit_price == Decimal("102000.00")
    assert floor.unit == "sqft"


def test_missing_products_sheet_fails(workspace):
    sources, settings = workspace
    report = build_catalog(settings=settings, verbose=False)
    assert report["status"] == "failed"
    assert "products.csv" in report["errors"][0]


def test_missing_optional_sheets_are_warnings(workspace):
    sources, settings = workspace
    write_sheets(sources, products=PRODUCTS)

    report = build_catalog(settings=settings, verbose=False)

    assert report["status"] == "success"
    assert "WARNING: variants.csv not found" in report["warnings"]
    assert report["metrics"]["attribute_count"] == 0


def test_bad_variant_json_fails_without_writing(workspace):
    sources, settings = workspace
    bad_variants = 'productId,sku,name,configuration,price\ntee,TEE-L,Large Tee,{size: L},319\n'
    write_sheets(sources, products=PRODUCTS, variants=bad_variants)

    report = build_catalog(settings=settings, verbose=False)

    assert report["status"] == "failed"
    assert any("bad configuration JSON" in e for e in report["errors"])
    assert not (settings.project_root / "catalog.json").exists()


def test_invalid_product_is_rejected(workspace):
    sources, settings = workspace
    write_sheets(sources, products="id,name,basePrice\nok,Fine,10\nneg,Negative,-5\n")

    report = build_catalog(settings=settings, verbose=False)

    assert report["status"] == "failed"
    assert report["metrics"]["rejected_products"] == 1
    assert any(e.startswith("Product neg:") for e in report["errors"])


def test_explicit_output_path(workspace, tmp_path):
    sources, settings = workspace
    write_sheets(sources, products="id,name,basePrice\nok,Fine,10\n")
    output = tmp_path / "out" / "custom.json"

    report = build_catalog(source_dir=sources, output_path=output, settings=settings, verbose=False)

    assert report["output_file"] == str(output)
    assert json.loads(output.read_text())["products"][0]["id"] == "ok"
