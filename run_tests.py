#!/usr/bin/env python3
"""
RELGRAPH Test Runner

Runs the test suite from the project root.

Usage:
    python run_tests.py [pytest options]
"""

import sys
from pathlib import Path

import pytest

# Add the project root to the Python path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

if __name__ == "__main__":
    sys.exit(pytest.main([str(project_root / "tests"), *sys.argv[1:]]))
