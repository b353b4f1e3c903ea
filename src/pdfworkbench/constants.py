"""
PDF Workbench - Numeric Constants

Simple numeric constants with ZERO internal imports to avoid circular dependencies.
For application-level constants (strings, paths), use config.py.
"""

from typing import Final

# ============================================================================
# Size Constants
# ============================================================================

BYTES_PER_MB: Final[int] = 1024 * 1024

# A4 in PDF points (1/72 inch)
A4_WIDTH_PT: Final[float] = 595.2755905511812
A4_HEIGHT_PT: Final[float] = 841.8897637795277

# ============================================================================
# Rendering Defaults
# ============================================================================

THUMBNAIL_SCALE: Final[float] = 0.4
THUMBNAIL_JPEG_QUALITY: Final[int] = 70
EXPORT_SCALE: Final[float] = 2.0
EXPORT_JPEG_QUALITY: Final[int] = 90
POINTS_PER_INCH: Final[float] = 72.0

# ============================================================================
# Stamping Defaults
# ============================================================================

PAGE_NUMBER_MARGIN_PT: Final[float] = 30.0
WATERMARK_FONT: Final[str] = "Helvetica-Bold"
PAGE_NUMBER_FONT: Final[str] = "Helvetica"

# ============================================================================
# Concurrency
# ============================================================================

DEFAULT_WORKSPACE_WORKERS: Final[int] = 4

# ============================================================================
# Subprocess Timeouts (seconds)
# ============================================================================

PDFTOPPM_TIMEOUT_SECS: Final[int] = 30
