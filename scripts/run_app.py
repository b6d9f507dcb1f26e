#!/usr/bin/env python
"""
Run the Streamlit product configurator.

Usage:
    python scripts/run_app.py [--catalog path/to/catalog.json]
"""
import argparse
import os
import subprocess
import sys
from pathlib import Path


def main():
    parser = argparse.ArgumentParser(description="Run the product configurator UI")
    parser.add_argument('--catalog', help="Catalog JSON to load (overrides PRODUCT_PRICING_CATALOG)")
    args = parser.parse_args()

    project_root = Path(__file__).parent.parent
    ui_path = project_root / 'src' / 'product_pricing' / 'ui' / 'app_streamlit.py'

    if not ui_path.exists():
        print(f"ERROR: UI module not found at {ui_path}")
        sys.exit(1)

    env = os.environ.copy()
    if args.catalog:
        env["PRODUCT_PRICING_CATALOG"] = str(Path(args.catalog).resolve())

    cmd = [sys.executable, '-m', 'streamlit', 'run', str(ui_path)]
    print(f"Starting Streamlit: {' '.join(cmd)}")

    try:
        subprocess.run(cmd, cwd=str(project_root), env=env)
    except KeyboardInterrupt:
        print("\nApplication stopped.")


if __name__ == "__main__":
    main()
