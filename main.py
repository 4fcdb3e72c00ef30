#!/usr/bin/env python3
"""
GasGuard Engine - Main Entry Point

Static analysis of smart-contract sources for gas inefficiencies.
"""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent))

from gasguard.cli import main

if __name__ == "__main__":
    main()
