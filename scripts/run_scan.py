#!/usr/bin/env python3
"""
Scanner launcher script.

Runs the scanner against the default configuration in configs/default.yaml.
Any arguments are passed through, e.g. ``run_scan.py <mint> --json``.
"""

import asyncio
import sys
from pathlib import Path

# Add the project root to the Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from rugscan.runner.scan import main


if __name__ == "__main__":
    argv = ["--config", str(project_root / "configs" / "default.yaml"), *sys.argv[1:]]

    try:
        sys.exit(asyncio.run(main(argv)))
    except KeyboardInterrupt:
        print("\nScan interrupted by user.")
        sys.exit(130)
