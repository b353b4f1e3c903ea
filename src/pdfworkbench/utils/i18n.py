"""
PDF Workbench - Internationalization Module

Message catalogs for the ``pdfworkbench`` gettext domain. Compiled
catalogs ship inside the package (``pdfworkbench/locale/<lang>/LC_MESSAGES``);
when that directory is absent gettext searches its default location under
``sys.base_prefix``. Without any catalog ``_`` returns text unchanged.
"""

import gettext
import locale
import os
from collections.abc import Callable

TEXT_DOMAIN = "pdfworkbench"

# src/pdfworkbench/locale
PACKAGE_LOCALE_DIR = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "locale")


def _load_translation() -> Callable[[str], str]:
    try:
        locale.setlocale(locale.LC_ALL, "")
    except locale.Error:
        # Unknown LANG in the environment; messages stay untranslated
        return gettext.NullTranslations().gettext

    localedir = PACKAGE_LOCALE_DIR if os.path.isdir(PACKAGE_LOCALE_DIR) else None
    return gettext.translation(TEXT_DOMAIN, localedir=localedir, fallback=True).gettext


_: Callable[[str], str] = _load_translation()


def setup_i18n() -> Callable[[str], str]:
    """Return the active translation function.

    Returns:
        The translation function.
    """
    return _
