"""
PDF Workbench - Page Renderer

Rendering surfaces that turn PDF pages into PIL images and plain text.
Both renderers are generators that keep at most one page live at a time:
a page is rendered, captured into an independent image, released, and
only then yielded.

  - PdfiumRenderer: pypdfium2 (in-process, default)
  - PdftoppmRenderer: poppler-utils pdftoppm/pdftotext, one subprocess per page
"""

import io
import logging
import os
import subprocess
import tempfile
import threading
from collections.abc import Iterator
from typing import Protocol

import pikepdf
import pypdfium2 as pdfium
from PIL import Image

from pdfworkbench.constants import PDFTOPPM_TIMEOUT_SECS, POINTS_PER_INCH
from pdfworkbench.utils.exceptions import ConfigurationError, RenderFailure
from pdfworkbench.utils.i18n import _

logger = logging.getLogger(__name__)

# Serializes every call into PDFium across threads
_PDFIUM_LOCK = threading.Lock()


class PageRenderer(Protocol):
    """Rendering surface used by the streaming render operations."""

    name: str

    def page_count(self, data: bytes, doc_name: str = "document") -> int: ...

    def render_pages(
        self, data: bytes, scale: float, doc_name: str = "document"
    ) -> Iterator[Image.Image]: ...

    def extract_texts(self, data: bytes, doc_name: str = "document") -> Iterator[str]: ...


def _normalize_text(text: str) -> str:
    return text.replace("\r\n", "\n").replace("\r", "\n")


# ---------------------------------------------------------------------------
# pypdfium2
# ---------------------------------------------------------------------------


class PdfiumRenderer:
    """Renders pages in-process with pypdfium2.

    PDFium is not thread-safe, even across separate documents, so every
    call into it runs under a process-wide lock. The lock is never held
    across a ``yield``.
    """

    name = "pdfium"

    def _open(self, data: bytes, doc_name: str) -> pdfium.PdfDocument:
        # Caller holds _PDFIUM_LOCK
        try:
            return pdfium.PdfDocument(data)
        except pdfium.PdfiumError as e:
            raise RenderFailure(doc_name, _("cannot open document: {error}").format(error=e)) from e

    def _close(self, doc: pdfium.PdfDocument) -> None:
        with _PDFIUM_LOCK:
            doc.close()

    def page_count(self, data: bytes, doc_name: str = "document") -> int:
        with _PDFIUM_LOCK:
            doc = self._open(data, doc_name)
            try:
                return len(doc)
            finally:
                doc.close()

    def render_pages(
        self, data: bytes, scale: float, doc_name: str = "document"
    ) -> Iterator[Image.Image]:
        """Yield one RGB image per page at *scale* (1.0 = 72 DPI)."""
        with _PDFIUM_LOCK:
            doc = self._open(data, doc_name)
            total = len(doc)
        try:
            for index in range(total):
                with _PDFIUM_LOCK:
                    page = doc[index]
                    try:
                        bitmap = page.render(scale=scale)
                        # convert() copies the pixels out of the pdfium buffer
                        image = bitmap.to_pil().convert("RGB")
                        bitmap.close()
                    except pdfium.PdfiumError as e:
                        raise RenderFailure(doc_name, str(e), page_ordinal=index + 1) from e
                    finally:
                        page.close()
                yield image
        finally:
            self._close(doc)

    def extract_texts(self, data: bytes, doc_name: str = "document") -> Iterator[str]:
        """Yield the plain text of each page."""
        with _PDFIUM_LOCK:
            doc = self._open(data, doc_name)
            total = len(doc)
        try:
            for index in range(total):
                with _PDFIUM_LOCK:
                    page = doc[index]
                    try:
                        textpage = page.get_textpage()
                        text = textpage.get_text_range()
                        textpage.close()
                    except pdfium.PdfiumError as e:
                        raise RenderFailure(doc_name, str(e), page_ordinal=index + 1) from e
                    finally:
                        page.close()
                yield _normalize_text(text)
        finally:
            self._close(doc)


# ---------------------------------------------------------------------------
# poppler-utils
# ---------------------------------------------------------------------------


class PdftoppmRenderer:
    """Renders pages with the pdftoppm / pdftotext command-line tools.

    The document is written once to a private temporary directory; each
    page is then rendered by its own subprocess invocation.
    """

    name = "pdftoppm"

    def __init__(self, timeout: float = PDFTOPPM_TIMEOUT_SECS) -> None:
        self._timeout = timeout

    def page_count(self, data: bytes, doc_name: str = "document") -> int:
        try:
            with pikepdf.open(io.BytesIO(data)) as pdf:
                return len(pdf.pages)
        except pikepdf.PdfError as e:
            raise RenderFailure(doc_name, _("cannot open document: {error}").format(error=e)) from e

    def _run(self, cmd: list[str], doc_name: str, ordinal: int) -> bytes:
        try:
            result = subprocess.run(cmd, capture_output=True, timeout=self._timeout)
        except FileNotFoundError as e:
            raise RenderFailure(
                doc_name, _("{tool} is not installed").format(tool=cmd[0]), page_ordinal=ordinal
            ) from e
        except subprocess.TimeoutExpired as e:
            raise RenderFailure(
                doc_name,
                _("{tool} timed out after {secs}s").format(tool=cmd[0], secs=self._timeout),
                page_ordinal=ordinal,
            ) from e

        if result.returncode != 0:
            stderr = result.stderr.decode(errors="replace").strip()
            logger.debug("%s failed on page %d: %s", cmd[0], ordinal, stderr)
            raise RenderFailure(
                doc_name,
                f"{cmd[0]} exited with code {result.returncode}",
                page_ordinal=ordinal,
            )
        return result.stdout

    def render_pages(
        self, data: bytes, scale: float, doc_name: str = "document"
    ) -> Iterator[Image.Image]:
        """Yield one RGB image per page at *scale* (1.0 = 72 DPI)."""
        total = self.page_count(data, doc_name)
        dpi = max(1, round(scale * POINTS_PER_INCH))

        with tempfile.TemporaryDirectory(prefix="pdfworkbench_") as tmpdir:
            input_path = os.path.join(tmpdir, "input.pdf")
            with open(input_path, "wb") as f:
                f.write(data)

            for ordinal in range(1, total + 1):
                # Without an output root, -singlefile writes the image to stdout
                out = self._run(
                    [
                        "pdftoppm",
                        "-png",
                        "-r",
                        str(dpi),
                        "-f",
                        str(ordinal),
                        "-l",
                        str(ordinal),
                        "-singlefile",
                        input_path,
                    ],
                    doc_name,
                    ordinal,
                )
                try:
                    with Image.open(io.BytesIO(out)) as img:
                        image = img.convert("RGB")
                except OSError as e:
                    raise RenderFailure(doc_name, str(e), page_ordinal=ordinal) from e
                yield image

    def extract_texts(self, data: bytes, doc_name: str = "document") -> Iterator[str]:
        """Yield the plain text of each page."""
        total = self.page_count(data, doc_name)

        with tempfile.TemporaryDirectory(prefix="pdfworkbench_") as tmpdir:
            input_path = os.path.join(tmpdir, "input.pdf")
            with open(input_path, "wb") as f:
                f.write(data)

            for ordinal in range(1, total + 1):
                out = self._run(
                    ["pdftotext", "-f", str(ordinal), "-l", str(ordinal), input_path, "-"],
                    doc_name,
                    ordinal,
                )
                text = out.decode("utf-8", errors="replace")
                yield _normalize_text(text).rstrip("\f")


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

_RENDERERS: dict[str, type] = {
    PdfiumRenderer.name: PdfiumRenderer,
    PdftoppmRenderer.name: PdftoppmRenderer,
}


def available_renderers() -> list[str]:
    return sorted(_RENDERERS)


def get_renderer(name: str = PdfiumRenderer.name) -> PageRenderer:
    """Create a renderer by name.

    Raises:
        ConfigurationError: If no renderer is registered under *name*.
    """
    try:
        renderer_cls = _RENDERERS[name]
    except KeyError:
        raise ConfigurationError(
            "rendering.renderer",
            _("unknown renderer '{name}' (available: {names})").format(
                name=name, names=", ".join(available_renderers())
            ),
        ) from None
    return renderer_cls()
