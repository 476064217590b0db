#!/usr/bin/env python
"""
Launcher script for the Rack Tracker command line from a source checkout.

This script puts src/ on the Python path before running the CLI, so it
works without `pip install -e .`.
"""

import sys
from pathlib import Path

# Add the src directory to the Python path
src_dir = Path(__file__).parent / "src"
sys.path.insert(0, str(src_dir))

# Now import and run the command line
from rack_tracker.main import main

if __name__ == "__main__":
    sys.exit(main())
