"""
PDF Workbench - Page Stamps

Watermarks and page numbers. Each stamp is drawn with reportlab into an
overlay document holding one page per source page (same size), and the
overlay pages are then placed on top of the source pages with pikepdf.
"""

import io
import logging
import re
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

import pikepdf
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfgen import canvas

from pdfworkbench.constants import PAGE_NUMBER_FONT, PAGE_NUMBER_MARGIN_PT, WATERMARK_FONT
from pdfworkbench.services.document import SourceDocument, open_pdf, page_size, save_pdf
from pdfworkbench.services.pdf_operations import TransformationResult
from pdfworkbench.utils.exceptions import InvalidInput
from pdfworkbench.utils.format_utils import prefixed_name
from pdfworkbench.utils.i18n import _

logger = logging.getLogger(__name__)

_HEX_COLOR = re.compile(r"^#?([0-9a-fA-F]{6})$")

# Draws on the overlay canvas: (canvas, page_index, width, height)
DrawFn = Callable[[canvas.Canvas, int, float, float], None]


def parse_color(value: str) -> tuple[float, float, float]:
    """Convert a ``#RRGGBB`` hex string to reportlab RGB floats.

    Args:
        value: Hex color; the leading ``#`` is optional.

    Returns:
        (red, green, blue) in the range 0.0-1.0

    Raises:
        InvalidInput: If the string is not a 6-digit hex color.
    """
    match = _HEX_COLOR.match(value.strip()) if isinstance(value, str) else None
    if match is None:
        raise InvalidInput(_("expected a #RRGGBB color"), field="color", value=value)
    digits = match.group(1)
    return tuple(int(digits[i : i + 2], 16) / 255 for i in (0, 2, 4))


class PagePosition(Enum):
    TOP = "top"
    BOTTOM = "bottom"


class PageAlignment(Enum):
    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"


@dataclass(frozen=True)
class WatermarkStyle:
    """Appearance of a watermark.

    Attributes:
        font_size: Font size in points
        opacity: Fill opacity, 0.0 (invisible) to 1.0 (opaque)
        rotation: Counter-clockwise rotation in degrees about the page center
        color: ``#RRGGBB`` fill color
    """

    font_size: float = 50
    opacity: float = 0.3
    rotation: float = -45
    color: str = "#000000"

    def __post_init__(self) -> None:
        if not 0.0 <= self.opacity <= 1.0:
            raise InvalidInput(_("opacity must be between 0 and 1"), field="opacity", value=self.opacity)
        if self.font_size <= 0:
            raise InvalidInput(_("font size must be positive"), field="font_size", value=self.font_size)
        parse_color(self.color)


@dataclass(frozen=True)
class PaginationStyle:
    """Placement and appearance of page numbers."""

    position: PagePosition = PagePosition.BOTTOM
    alignment: PageAlignment = PageAlignment.CENTER
    font_size: float = 12
    color: str = "#000000"

    def __post_init__(self) -> None:
        # Accept plain strings ("top", "right") from the CLI and settings
        try:
            object.__setattr__(self, "position", PagePosition(self.position))
            object.__setattr__(self, "alignment", PageAlignment(self.alignment))
        except ValueError as e:
            raise InvalidInput(str(e), field="position/alignment") from e
        if self.font_size <= 0:
            raise InvalidInput(_("font size must be positive"), field="font_size", value=self.font_size)
        parse_color(self.color)


# ---------------------------------------------------------------------------
# Overlay plumbing
# ---------------------------------------------------------------------------


def _render_overlay(sizes: list[tuple[float, float]], draw: DrawFn) -> bytes:
    """Draw one overlay page per entry of *sizes* and return the PDF bytes."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=sizes[0])
    for index, (width, height) in enumerate(sizes):
        c.setPageSize((width, height))
        c.saveState()
        draw(c, index, width, height)
        c.restoreState()
        c.showPage()
    c.save()
    return buf.getvalue()


def _stamp_pages(doc: SourceDocument, draw: DrawFn, out_name: str) -> bytes:
    """Place an overlay drawn by *draw* on top of every page of *doc*."""
    with open_pdf(doc) as pdf:
        sizes = [page_size(page) for page in pdf.pages]
        if not sizes:
            return save_pdf(pdf, out_name)
        overlay_data = _render_overlay(sizes, draw)

        with pikepdf.open(io.BytesIO(overlay_data)) as overlay:
            for page, stamp in zip(pdf.pages, overlay.pages, strict=True):
                formx = pdf.copy_foreign(stamp.as_form_xobject())
                page.add_overlay(formx, pikepdf.Rectangle(page.mediabox))
            return save_pdf(pdf, out_name)


# ---------------------------------------------------------------------------
# Watermark
# ---------------------------------------------------------------------------


def apply_watermark(
    doc: SourceDocument,
    text: str,
    style: WatermarkStyle | None = None,
) -> TransformationResult:
    """Draw the same text watermark, centered, on every page.

    Args:
        doc: Source document.
        text: Watermark text.
        style: Appearance; defaults to ``WatermarkStyle()``.

    Raises:
        InvalidInput: If *text* is empty or whitespace.
    """
    if not text or not text.strip():
        raise InvalidInput(_("watermark text must not be empty"), field="text")
    style = style or WatermarkStyle()

    red, green, blue = parse_color(style.color)
    text_width = pdfmetrics.stringWidth(text, WATERMARK_FONT, style.font_size)
    ascent, descent = pdfmetrics.getAscentDescent(WATERMARK_FONT, style.font_size)

    def draw(c: canvas.Canvas, _index: int, width: float, height: float) -> None:
        c.setFillColorRGB(red, green, blue)
        c.setFillAlpha(style.opacity)
        c.setFont(WATERMARK_FONT, style.font_size)
        c.translate(width / 2, height / 2)
        c.rotate(style.rotation)
        c.drawString(-text_width / 2, -(ascent + descent) / 2, text)

    out_name = prefixed_name("watermarked", doc.name)
    data = _stamp_pages(doc, draw, out_name)

    logger.info("Watermarked %d pages of %s with %r → %s", doc.page_count, doc.name, text, out_name)
    return TransformationResult(data=data, suggested_name=out_name, pages_affected=doc.page_count)


# ---------------------------------------------------------------------------
# Page numbers
# ---------------------------------------------------------------------------


def page_number_origin(
    label: str,
    width: float,
    height: float,
    style: PaginationStyle,
) -> tuple[float, float]:
    """Compute the baseline origin of a page number label.

    Args:
        label: Text to draw, e.g. ``"2 / 10"``.
        width: Page width in points.
        height: Page height in points.
        style: Placement settings.

    Returns:
        (x, y) in page coordinates.
    """
    margin = PAGE_NUMBER_MARGIN_PT
    text_width = pdfmetrics.stringWidth(label, PAGE_NUMBER_FONT, style.font_size)

    if style.alignment is PageAlignment.LEFT:
        x = margin
    elif style.alignment is PageAlignment.RIGHT:
        x = width - text_width - margin
    else:
        x = width / 2 - text_width / 2

    if style.position is PagePosition.TOP:
        y = height - margin - style.font_size
    else:
        y = margin

    return x, y


def add_page_numbers(
    doc: SourceDocument,
    style: PaginationStyle | None = None,
) -> TransformationResult:
    """Draw ``"{n} / {total}"`` on every page.

    Args:
        doc: Source document.
        style: Placement and appearance; defaults to bottom center, 12 pt.
    """
    style = style or PaginationStyle()
    red, green, blue = parse_color(style.color)
    total = doc.page_count

    def draw(c: canvas.Canvas, index: int, width: float, height: float) -> None:
        label = f"{index + 1} / {total}"
        x, y = page_number_origin(label, width, height, style)
        c.setFillColorRGB(red, green, blue)
        c.setFont(PAGE_NUMBER_FONT, style.font_size)
        c.drawString(x, y, label)

    out_name = prefixed_name("numbered", doc.name)
    data = _stamp_pages(doc, draw, out_name)

    logger.info(
        "Numbered %d pages of %s (%s/%s) → %s",
        total,
        doc.name,
        style.position.value,
        style.alignment.value,
        out_name,
    )
    return TransformationResult(data=data, suggested_name=out_name, pages_affected=total)
