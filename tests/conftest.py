import os
import sys

import pytest

# Add src to path for internal imports
src_path = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), 'src')
if src_path not in sys.path:
    sys.path.insert(0, src_path)

from product_pricing.config.settings import SAMPLE_CATALOG
from product_pricing.engine.models import Product
from product_pricing.services.catalog_service import CatalogService


@pytest.fixture(scope="module")
def catalog():
    """Catalog service over the bundled sample catalog."""
    return CatalogService(SAMPLE_CATALOG)


@pytest.fixture
def make_product():
    """Build a Product from a camelCase catalog record with sensible defaults."""
    def _make(**overrides):
        record = {
            "id": "p-1",
            "name": "Test Product",
            "basePrice": 100,
            "pricingType": "FIXED",
            "unit": "piece",
            "defaultTaxRate": 18,
        }
        record.update(overrides)
        return Product.from_dict(record)
    return _make
