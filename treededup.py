#!/usr/bin/env python3
"""
TreeDedup Entry Point

This script provides a convenient entry point for running TreeDedup
without requiring package installation.

Usage:
    python3 treededup.py [options] PATH [PATH ...]

This is equivalent to:
    python3 -m treededup.cli.main [options] PATH [PATH ...]
"""

import sys
import os

# Add the current directory to Python path so we can import treededup
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

if __name__ == "__main__":
    from treededup.cli.main import main
    sys.exit(main())
