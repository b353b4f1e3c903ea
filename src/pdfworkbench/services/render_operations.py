"""
PDF Workbench - Streaming Render Operations

Page-by-page operations built on a rendering surface: thumbnails,
rasterize-to-archive and text extraction. Each is a lazy, finite
generator that renders one page, captures the artifact, releases the
page and only then advances. A ``ProgressEvent`` is emitted after every
completed page, in page order. Closing a generator early releases the
document handle and discards partial output.
"""

import io
import logging
import zipfile
from collections.abc import Iterator
from enum import Enum

from PIL import Image, ImageOps, UnidentifiedImageError

from pdfworkbench.config import TEXT_MEDIA_TYPE, ZIP_MEDIA_TYPE
from pdfworkbench.constants import (
    EXPORT_JPEG_QUALITY,
    EXPORT_SCALE,
    THUMBNAIL_JPEG_QUALITY,
    THUMBNAIL_SCALE,
)
from pdfworkbench.services.document import SourceDocument
from pdfworkbench.services.page_renderer import PageRenderer, get_renderer
from pdfworkbench.services.pdf_operations import TransformationResult
from pdfworkbench.utils.exceptions import InvalidInput, RenderFailure
from pdfworkbench.utils.format_utils import name_stem
from pdfworkbench.utils.i18n import _
from pdfworkbench.utils.progress_state import ProgressCallback, ProgressEvent

logger = logging.getLogger(__name__)


class RasterFormat(Enum):
    """Image encoding used for rasterized pages."""

    PNG = "png"
    JPEG = "jpeg"


def encode_image(image: Image.Image, fmt: RasterFormat, quality: int = EXPORT_JPEG_QUALITY) -> bytes:
    """Encode a PIL image as PNG or JPEG bytes."""
    buf = io.BytesIO()
    if fmt is RasterFormat.JPEG:
        if image.mode not in ("RGB", "L"):
            image = image.convert("RGB")
        image.save(buf, format="JPEG", quality=quality)
    else:
        image.save(buf, format="PNG")
    return buf.getvalue()


def _image_page(doc: SourceDocument, scale: float) -> Image.Image:
    """Render a single-image document through Pillow (1 px = 1 pt)."""
    try:
        with Image.open(io.BytesIO(doc.data)) as img:
            image = ImageOps.exif_transpose(img).convert("RGB")
    except (UnidentifiedImageError, OSError) as e:
        raise RenderFailure(doc.name, str(e), page_ordinal=1) from e

    if scale != 1.0:
        size = (max(1, round(image.width * scale)), max(1, round(image.height * scale)))
        image = image.resize(size, Image.Resampling.LANCZOS)
    return image


def _emit(on_progress: ProgressCallback | None, current: int, total: int) -> None:
    if on_progress is not None:
        on_progress(ProgressEvent(current, total))


# ---------------------------------------------------------------------------
# Page streams
# ---------------------------------------------------------------------------


def iter_page_images(
    doc: SourceDocument,
    scale: float,
    renderer: PageRenderer | None = None,
    on_progress: ProgressCallback | None = None,
) -> Iterator[Image.Image]:
    """Yield one rendered image per page, in page order.

    Args:
        doc: Document to render.
        scale: Render scale (1.0 = 72 DPI).
        renderer: Rendering surface; the default renderer when None.
        on_progress: Called with ``ProgressEvent(n, total)`` after page n.

    Raises:
        RenderFailure: If the surface fails; the sequence stops there.
    """
    total = doc.page_count

    if not doc.is_paged:
        image = _image_page(doc, scale)
        _emit(on_progress, 1, total)
        yield image
        return

    renderer = renderer or get_renderer()
    pages = renderer.render_pages(doc.data, scale, doc.name)
    try:
        for ordinal, image in enumerate(pages, 1):
            _emit(on_progress, ordinal, total)
            yield image
    finally:
        pages.close()


def iter_page_texts(
    doc: SourceDocument,
    renderer: PageRenderer | None = None,
    on_progress: ProgressCallback | None = None,
) -> Iterator[str]:
    """Yield the plain text of each page, in page order.

    Single-image documents have one page with empty text.
    """
    total = doc.page_count

    if not doc.is_paged:
        _emit(on_progress, 1, total)
        yield ""
        return

    renderer = renderer or get_renderer()
    texts = renderer.extract_texts(doc.data, doc.name)
    try:
        for ordinal, text in enumerate(texts, 1):
            _emit(on_progress, ordinal, total)
            yield text
    finally:
        texts.close()


# ---------------------------------------------------------------------------
# Thumbnails
# ---------------------------------------------------------------------------


def iter_thumbnails(
    doc: SourceDocument,
    scale: float = THUMBNAIL_SCALE,
    renderer: PageRenderer | None = None,
    on_progress: ProgressCallback | None = None,
) -> Iterator[bytes]:
    """Yield a JPEG preview per page."""
    images = iter_page_images(doc, scale, renderer, on_progress)
    try:
        for image in images:
            yield encode_image(image, RasterFormat.JPEG, THUMBNAIL_JPEG_QUALITY)
    finally:
        images.close()


def generate_thumbnails(
    doc: SourceDocument,
    scale: float = THUMBNAIL_SCALE,
    renderer: PageRenderer | None = None,
    on_progress: ProgressCallback | None = None,
) -> list[bytes]:
    """Render JPEG previews for every page.

    Returns:
        One JPEG byte string per page, indexed by page index.
    """
    thumbnails = list(iter_thumbnails(doc, scale, renderer, on_progress))
    logger.debug("Rendered %d thumbnails for %s", len(thumbnails), doc.name)
    return thumbnails


# ---------------------------------------------------------------------------
# Rasterize
# ---------------------------------------------------------------------------


def rasterize(
    doc: SourceDocument,
    fmt: RasterFormat | str = RasterFormat.PNG,
    scale: float = EXPORT_SCALE,
    renderer: PageRenderer | None = None,
    on_progress: ProgressCallback | None = None,
) -> TransformationResult:
    """Render every page to an image and pack them into a ZIP archive.

    Args:
        doc: Document to rasterize.
        fmt: ``png`` or ``jpeg`` (quality 90).
        scale: Render scale (2.0 = 144 DPI).
        renderer: Rendering surface; the default renderer when None.
        on_progress: Called after every page.

    Returns:
        TransformationResult holding archive bytes with entries ``page_{n}.{fmt}``.

    Raises:
        InvalidInput: If *fmt* is not a supported format.
        RenderFailure: If a page cannot be rendered; no archive is produced.
    """
    try:
        fmt = RasterFormat(fmt)
    except ValueError as e:
        raise InvalidInput(_("unsupported image format"), field="format", value=fmt) from e

    buf = io.BytesIO()
    count = 0
    images = iter_page_images(doc, scale, renderer, on_progress)
    try:
        with zipfile.ZipFile(buf, "w", compression=zipfile.ZIP_DEFLATED) as archive:
            for ordinal, image in enumerate(images, 1):
                archive.writestr(f"page_{ordinal}.{fmt.value}", encode_image(image, fmt))
                count = ordinal
    finally:
        images.close()

    out_name = f"{name_stem(doc.name)}_images.zip"
    logger.info("Rasterized %d pages of %s as %s → %s", count, doc.name, fmt.value, out_name)
    return TransformationResult(
        data=buf.getvalue(),
        suggested_name=out_name,
        media_type=ZIP_MEDIA_TYPE,
        pages_affected=count,
    )


# ---------------------------------------------------------------------------
# Text extraction
# ---------------------------------------------------------------------------


def format_page_text(ordinal: int, text: str) -> str:
    return f"--- PAGE {ordinal} ---\n{text}\n\n"


def extract_text(
    doc: SourceDocument,
    renderer: PageRenderer | None = None,
    on_progress: ProgressCallback | None = None,
) -> TransformationResult:
    """Extract the text of every page into one string.

    Each page contributes ``"--- PAGE {n} ---\\n{text}\\n\\n"``.
    """
    parts: list[str] = []
    texts = iter_page_texts(doc, renderer, on_progress)
    try:
        for ordinal, text in enumerate(texts, 1):
            parts.append(format_page_text(ordinal, text))
    finally:
        texts.close()

    out_name = f"{name_stem(doc.name)}.txt"
    logger.info("Extracted text of %d pages from %s → %s", len(parts), doc.name, out_name)
    return TransformationResult(
        data="".join(parts),
        suggested_name=out_name,
        media_type=TEXT_MEDIA_TYPE,
        pages_affected=len(parts),
    )
