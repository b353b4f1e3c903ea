#!/usr/bin/env python3
"""
PDF Workbench - Entry point for python -m pdfworkbench

This module allows the package to be run as a module:
    python -m pdfworkbench
"""

import sys

from pdfworkbench import main

if __name__ == "__main__":
    sys.exit(main())
