from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from ..config.settings import get_settings
from .products_api import router as products_router
from .state import catalog

app = FastAPI(
    title="Product Pricing API",
    description="Configuration and price calculation for catalog products",
    version="1.0.0"
)

# Enable CORS for frontend development
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(products_router)


@app.get("/")
async def root():
    return {"status": "online", "message": "Product Pricing API Active"}


@app.get("/system/status")
async def get_status():
    settings = get_settings()
    return {
        "engine_active": True,
        "catalog_path": str(catalog.catalog_path),
        "products_count": len(catalog.products),
        "rounding": settings.rounding,
        "catalog_problems": catalog.validate_catalog(),
    }


@app.post("/system/reload")
async def reload_catalog():
    try:
        catalog.reload()
    except (OSError, ValueError) as e:
        raise HTTPException(status_code=500, detail=str(e))
    return {"success": True, "products_count": len(catalog.products)}
