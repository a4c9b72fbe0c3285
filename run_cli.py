#!/usr/bin/env python3
"""
SSVEP Classifier CLI Runner

Run this from the repository root:
    python run_cli.py
    python run_cli.py --target 16.0
    python run_cli.py --board 0 --port COM3
"""

import sys

from ssvep_classifier.main import main

if __name__ == "__main__":
    sys.exit(main())
