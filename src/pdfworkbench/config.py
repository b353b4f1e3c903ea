#!/usr/bin/env python3
"""
PDF Workbench - Configuration Module

This module contains the application-level constants and paths.
Numeric tuning values live in constants.py.
"""

import logging
import os
from typing import Final

# ============================================================================
# Application Constants
# ============================================================================

APP_NAME: Final[str] = "PDF Workbench"
APP_ID: Final[str] = "pdfworkbench"
APP_VERSION: Final[str] = "1.0.0"
APP_DESCRIPTION: Final[str] = "Local page-level editing for PDF documents"

# ============================================================================
# Configuration Directory
# ============================================================================

CONFIG_DIR: Final[str] = os.path.expanduser(
    os.environ.get("PDFWORKBENCH_CONFIG_DIR", "~/.config/pdfworkbench")
)
CONFIG_FILE_PATH: Final[str] = os.path.join(CONFIG_DIR, "settings.json")

# ============================================================================
# Logging Configuration
# ============================================================================

LOG_LEVEL: int = logging.INFO
LOG_FORMAT: Final[str] = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOGGER_NAME: Final[str] = "PdfWorkbench"

# ============================================================================
# Output Naming
# ============================================================================

PDF_MEDIA_TYPE: Final[str] = "application/pdf"
ZIP_MEDIA_TYPE: Final[str] = "application/zip"
TEXT_MEDIA_TYPE: Final[str] = "text/plain"

IMAGE_EXTENSIONS: Final[tuple[str, ...]] = (
    ".jpg",
    ".jpeg",
    ".png",
    ".webp",
    ".tif",
    ".tiff",
    ".bmp",
    ".gif",
)
