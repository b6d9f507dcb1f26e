"""
Products API - FastAPI router for catalog lookup and price calculation.

Pricing problems (missing attributes, bad formulas) are not HTTP errors:
they come back as 200 with ``errors`` populated in the result.
"""
import logging
from typing import Any, Optional

from fastapi import APIRouter, HTTPException
from fastapi.encoders import jsonable_encoder
from pydantic import BaseModel, Field

from ..services.catalog_service import ProductNotFoundError
from ..services.price_sheet import build_price_sheet
from .state import catalog

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/products", tags=["products"])


# Pydantic models for API
class CalculateRequest(BaseModel):
    """Request body for a price calculation."""
    configuration: dict[str, Any] = Field(default_factory=dict)
    quantity: float = Field(default=1, gt=0)


class PriceSheetLine(BaseModel):
    """One line of a bulk price sheet request."""
    product_id: str
    configuration: dict[str, Any] = Field(default_factory=dict)
    quantity: float = Field(default=1, gt=0)


class PriceSheetRequest(BaseModel):
    lines: list[PriceSheetLine]


# Endpoints

@router.get("")
async def list_products(
    search: Optional[str] = None,
    category: Optional[str] = None,
    product_type: Optional[str] = None,
    is_active: Optional[bool] = None,
):
    """List catalog products."""
    products = catalog.list_products(
        search=search,
        category=category,
        product_type=product_type,
        is_active=is_active,
    )
    return {"data": [p.to_dict() for p in products]}


@router.post("/price-sheet")
async def price_sheet(request: PriceSheetRequest):
    """Price several product configurations in one call."""
    df = build_price_sheet(catalog, [line.model_dump() for line in request.lines])
    df = df.astype(object).where(df.notna(), None)
    return {"data": jsonable_encoder(df.to_dict(orient="records"))}


@router.get("/{product_id}")
async def get_product(product_id: str):
    """Get a single product with its attributes and variants."""
    try:
        product = catalog.get_product(product_id)
    except ProductNotFoundError:
        raise HTTPException(status_code=404, detail="Product not found")
    return {"data": product.to_dict()}


@router.post("/{product_id}/calculate")
async def calculate_product_price(product_id: str, request: CalculateRequest, trace: bool = False):
    """Calculate the price of a configured product."""
    try:
        result = catalog.calculate(product_id, request.configuration, request.quantity)
    except ProductNotFoundError:
        raise HTTPException(status_code=404, detail="Product not found")
    except Exception:
        logger.exception("Product calculation error for %s", product_id)
        raise HTTPException(status_code=500, detail="Failed to calculate price")
    return {"data": jsonable_encoder(result.to_dict(include_trace=trace))}
