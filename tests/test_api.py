"""
HTTP API tests using FastAPI's TestClient over the sample catalog.
"""
import os

import pytest
from fastapi.testclient import TestClient

from product_pricing.config.settings import ENV_PREFIX, SAMPLE_CATALOG, reset_settings


@pytest.fixture(scope="module")
def client():
    os.environ[f"{ENV_PREFIX}CATALOG"] = str(SAMPLE_CATALOG)
    reset_settings()
    from product_pricing.api.main import app
    try:
        with TestClient(app) as c:
            yield c
    finally:
        os.environ.pop(f"{ENV_PREFIX}CATALOG", None)
        reset_settings()


def test_root(client):
    resp = client.get("/")
    assert resp.status_code == 200
    assert resp.json()["status"] == "online"


def test_system_status(client):
    body = client.get("/system/status").json()
    assert body["products_count"] == 9
    assert body["catalog_problems"] == []
    assert body["rounding"] == "half_up"


def test_list_products(client):
    data = client.get("/products").json()["data"]
    assert len(data) == 9
    assert data[0]["category"] == "Apparel"


def test_list_products_filters(client):
    data = client.get("/products", params={"search": "window", "is_active": "true"}).json()["data"]
    assert [p["id"] for p in data] == ["win-upvc-002"]


def test_get_product(client):
    resp = client.get("/products/tshirt-custom-001")
    assert resp.status_code == 200
    product = resp.json()["data"]
    assert product["pricingType"] == "VARIANT_BASED"
    assert [a["name"] for a in product["attributes"]] == ["Size", "Color", "Print Type"]


def test_get_unknown_product(client):
    resp = client.get("/products/nope")
    assert resp.status_code == 404
    assert resp.json()["detail"] == "Product not found"


def test_calculate(client):
    resp = client.post(
        "/products/win-upvc-002/calculate",
        json={"configuration": {"width": 4, "height": 5, "material": "Wood", "glass": "Triple"}, "quantity": 2},
    )
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["unitPrice"] == 10050.0
    assert data["totalPrice"] == 20100.0
    assert data["errors"] == []
    assert "trace" not in data


def test_calculate_with_trace(client):
    resp = client.post("/products/laptop-bus-001/calculate?trace=true", json={})
    data = resp.json()["data"]
    assert data["quantity"] == 1.0
    assert data["trace"][0]["step"] == "Pricing Strategy"


def test_pricing_warnings_are_not_http_errors(client):
    resp = client.post("/products/tshirt-custom-001/calculate", json={"configuration": {"color": "Red"}})
    assert resp.status_code == 200
    assert resp.json()["data"]["errors"] == ["Missing required attributes: Size"]


@pytest.mark.parametrize("product_id", ["nope", "legacy-printer-001"])
def test_calculate_unknown_or_inactive_product(client, product_id):
    resp = client.post(f"/products/{product_id}/calculate", json={"quantity": 1})
    assert resp.status_code == 404
    assert resp.json()["detail"] == "Product not found"


@pytest.mark.parametrize("quantity", [0, -1, "many"])
def test_calculate_rejects_bad_quantity(client, quantity):
    resp = client.post("/products/laptop-bus-001/calculate", json={"quantity": quantity})
    assert resp.status_code == 422


def test_calculate_unexpected_failure(client, monkeypatch):
    from product_pricing.api import products_api

    def boom(*args, **kwargs):
        raise RuntimeError("disk on fire")

    monkeypatch.setattr(products_api.catalog, "calculate", boom)
    resp = client.post("/products/laptop-bus-001/calculate", json={})
    assert resp.status_code == 500
    assert resp.json()["detail"] == "Failed to calculate price"


def test_price_sheet(client):
    resp = client.post("/products/price-sheet", json={"lines": [
        {"product_id": "gift-box-001", "configuration": {"extras": ["Ribbon", "Card"]}, "quantity": 10},
        {"product_id": "unknown"},
    ]})
    assert resp.status_code == 200
    rows = resp.json()["data"]
    assert rows[0]["Total Price"] == 7850.0
    assert rows[1]["Errors"] == "Product not found"
    assert rows[1]["Unit Price"] is None


def test_reload(client):
    resp = client.post("/system/reload")
    assert resp.status_code == 200
    assert resp.json() == {"success": True, "products_count": 9}
