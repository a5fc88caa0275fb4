#!/usr/bin/env python3
"""
Self-Updater - Application Entry Point
======================================

Checks for a newer updater release, otherwise applies a local package to the
main application's directory and starts the main application again.

    updater <archivePath> <mainAppDirectory>
"""

import sys
from pathlib import Path

# Add the project root to Python path
project_root = Path(__file__).parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

try:
    from self_updater.cli import main
except ImportError as e:
    print(f"Error importing self_updater modules: {e}")
    print("Please ensure you're running from the project root directory")
    print("and that all dependencies are installed: pip install -r requirements.txt")
    sys.exit(1)


if __name__ == "__main__":
    sys.exit(main())
