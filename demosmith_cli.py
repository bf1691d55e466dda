#!/usr/bin/env python3
"""
demosmith CLI - run without installing.

Usage:
    python demosmith_cli.py generate out/steps.json
    python demosmith_cli.py replay out/steps.json -o take2/
    python demosmith_cli.py tools
"""

import sys
import os

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from demosmith.cli.runner import main

if __name__ == "__main__":
    main()
