"""
Centralized settings and path configuration for the product pricing engine.

Values come from the project layout, overridable with PRODUCT_PRICING_*
environment variables.
"""
import logging
import os
from pathlib import Path
from dataclasses import dataclass
from typing import Optional

from ..engine.pricing_engine import ROUNDING_MODES

ENV_PREFIX = "PRODUCT_PRICING_"

PACKAGE_DIR = Path(__file__).resolve().parent.parent
SAMPLE_CATALOG = PACKAGE_DIR / 'data' / 'sample_catalog.json'


def get_project_root() -> Path:
    """Get the project root directory (where pyproject.toml lives)."""
    # Walk up from this file to find the project root
    current = Path(__file__).resolve()
    for parent in current.parents:
        if (parent / 'pyproject.toml').exists():
            return parent
    # Fallback to 4 levels up from this file
    return Path(__file__).resolve().parent.parent.parent.parent


def _env(name: str, default: Optional[str] = None) -> Optional[str]:
    return os.environ.get(f"{ENV_PREFIX}{name}", default)


@dataclass
class Settings:
    """Application settings with sensible defaults."""

    # Project paths
    project_root: Path

    # Catalog snapshot consumed by the API and UI
    catalog_path: Path

    # CSV sheets the catalog is built from, and the build report
    catalog_sources: Path
    build_report: Path

    # Rounding applied to every money figure ("half_up" or "half_even")
    rounding: str = "half_up"

    log_level: str = "INFO"

    api_host: str = "0.0.0.0"
    api_port: int = 8000

    @property
    def rounding_mode(self) -> str:
        """decimal module rounding constant for the configured mode."""
        return ROUNDING_MODES[self.rounding]

    @classmethod
    def load(cls, project_root: Optional[Path] = None) -> 'Settings':
        """Load settings from the project structure and environment."""
        root = project_root or get_project_root()

        catalog_path = _env("CATALOG")
        if catalog_path:
            catalog = Path(catalog_path)
        elif (root / 'catalog.json').exists():
            catalog = root / 'catalog.json'
        else:
            catalog = SAMPLE_CATALOG

        rounding = _env("ROUNDING", "half_up").lower()
        if rounding not in ROUNDING_MODES:
            raise ValueError(
                f"{ENV_PREFIX}ROUNDING must be one of {', '.join(ROUNDING_MODES)}, got '{rounding}'"
            )

        return cls(
            project_root=root,
            catalog_path=catalog,
            catalog_sources=Path(_env("CATALOG_SOURCES", str(root / 'catalog_sources'))),
            build_report=root / 'build' / 'build_report.json',
            rounding=rounding,
            log_level=_env("LOG_LEVEL", "INFO").upper(),
            api_host=_env("API_HOST", "0.0.0.0"),
            api_port=int(_env("API_PORT", "8000")),
        )


def configure_logging(settings: Optional['Settings'] = None):
    """Configure root logging for an entry point (API, UI, scripts)."""
    settings = settings or get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


# Default settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings.load()
    return _settings


def reset_settings():
    """Drop the cached settings so the next get_settings() re-reads the environment."""
    global _settings
    _settings = None
