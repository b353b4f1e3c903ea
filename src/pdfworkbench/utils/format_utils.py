"""
PDF Workbench - Format Utilities Module

This module provides shared utility functions for formatting values and
deriving output file names.
"""

import os
import time


def format_file_size(size_bytes: int) -> str:
    """Format file size in human-readable format.

    Args:
        size_bytes: Size in bytes

    Returns:
        Formatted size string (e.g., "1.5 MB")
    """
    if size_bytes <= 0:
        return "0 B"

    units = ["B", "KB", "MB", "GB", "TB"]

    size = float(size_bytes)
    unit_index = 0

    while size >= 1024 and unit_index < len(units) - 1:
        size /= 1024
        unit_index += 1

    if unit_index == 0:
        return f"{int(size)} {units[unit_index]}"
    elif size >= 100:
        return f"{int(size)} {units[unit_index]}"
    elif size >= 10:
        return f"{size:.1f} {units[unit_index]}"
    else:
        return f"{size:.2f} {units[unit_index]}"


def name_stem(name: str) -> str:
    """Return a document name without its directory and extension.

    Args:
        name: Display name or path (e.g. "reports/q1.pdf")

    Returns:
        The bare stem (e.g. "q1"), or "document" for an empty name
    """
    stem = os.path.splitext(os.path.basename(name))[0]
    return stem or "document"


def prefixed_name(prefix: str, name: str, extension: str = ".pdf") -> str:
    """Build an output name such as ``rotated_report.pdf``.

    The extension is appended only when *name* lacks it.
    """
    base = os.path.basename(name) or "document"
    if not base.lower().endswith(extension):
        base = f"{name_stem(base)}{extension}"
    return f"{prefix}_{base}"


def timestamp_suffix() -> str:
    """Return a millisecond timestamp for names of multi-input results."""
    return str(int(time.time() * 1000))
