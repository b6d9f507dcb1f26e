#!/usr/bin/env python
"""
Run the product pricing API with uvicorn.

Usage:
    python scripts/run_api.py [--reload] [--catalog path/to/catalog.json]
"""
import argparse
import os
import subprocess
import sys
from pathlib import Path

project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root / 'src'))

from product_pricing.config.settings import get_settings


def main():
    parser = argparse.ArgumentParser(description="Run the Product Pricing API")
    parser.add_argument('--reload', action='store_true', help="Restart on code changes")
    parser.add_argument('--catalog', help="Catalog JSON to serve (overrides PRODUCT_PRICING_CATALOG)")
    args = parser.parse_args()

    env = os.environ.copy()
    src_path = str(project_root / "src")
    env["PYTHONPATH"] = os.pathsep.join(filter(None, [src_path, env.get("PYTHONPATH")]))
    if args.catalog:
        env["PRODUCT_PRICING_CATALOG"] = str(Path(args.catalog).resolve())

    settings = get_settings()
    cmd = [
        sys.executable, "-m", "uvicorn",
        "product_pricing.api.main:app",
        "--host", settings.api_host,
        "--port", str(settings.api_port),
    ]
    if args.reload:
        cmd.append("--reload")

    print(f"Starting Product Pricing API on {settings.api_host}:{settings.api_port}...")
    try:
        subprocess.run(cmd, env=env, cwd=project_root)
    except KeyboardInterrupt:
        print("\nAPI stopped.")


if __name__ == "__main__":
    main()
