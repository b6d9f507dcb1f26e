"""
Shared API state - the catalog snapshot used by every router.
"""
from ..config.settings import configure_logging, get_settings
from ..services.catalog_service import CatalogService

settings = get_settings()
configure_logging(settings)

catalog = CatalogService(settings.catalog_path)
catalog.rounding = settings.rounding_mode
