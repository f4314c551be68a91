#!/usr/bin/env python3
"""rehome.py - run the converter CLI from a source checkout.

Usage:
    python rehome.py convert <models...> --source-root <dir> --target-root <dir> [--target-path <path>]
    python rehome.py probe <models...> [--options A]

Installed copies provide the same thing as the `rehome` command.
"""

import sys
from pathlib import Path

# Add src to path
_src_dir = Path(__file__).parent / "src"
if str(_src_dir) not in sys.path:
    sys.path.insert(0, str(_src_dir))

from rehomer.cli import main


if __name__ == "__main__":
    sys.exit(main())
