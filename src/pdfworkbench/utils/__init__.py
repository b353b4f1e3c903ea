"""
PDF Workbench - Utils Package

Utility modules for the application.
"""

from pdfworkbench.utils.config_manager import ConfigManager, get_config_manager
from pdfworkbench.utils.i18n import _, setup_i18n
from pdfworkbench.utils.logger import logger
from pdfworkbench.utils.progress_state import ProgressEvent, ProgressState

__all__ = [
    "logger",
    "_",
    "setup_i18n",
    "ConfigManager",
    "get_config_manager",
    "ProgressEvent",
    "ProgressState",
]
