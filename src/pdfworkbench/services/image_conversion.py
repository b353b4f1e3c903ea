"""
PDF Workbench - Image Conversion

Builds a paged document with one page per raster image. Images that cannot
be decoded are skipped and reported on the result instead of aborting the
whole batch.
"""

import io
import logging
from collections.abc import Sequence
from enum import Enum

from PIL import Image, ImageOps, UnidentifiedImageError
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from pdfworkbench.constants import A4_HEIGHT_PT, A4_WIDTH_PT
from pdfworkbench.services.document import SourceDocument
from pdfworkbench.services.pdf_operations import TransformationResult
from pdfworkbench.utils.exceptions import InvalidInput, PartialItemFailure
from pdfworkbench.utils.format_utils import timestamp_suffix
from pdfworkbench.utils.i18n import _

logger = logging.getLogger(__name__)

# A named image payload: (display name, raw bytes)
ImageItem = tuple[str, bytes]


class ImageLayout(Enum):
    """Page sizing policy for image pages."""

    FIT_TO_IMAGE = "fit-to-image"
    STANDARD_PORTRAIT = "standard-portrait"
    STANDARD_LANDSCAPE = "standard-landscape"


def _decode_image(data: bytes) -> Image.Image:
    """Decode an image, honor its EXIF orientation and normalize the mode."""
    img = Image.open(io.BytesIO(data))
    img = ImageOps.exif_transpose(img)
    # RGBA, LA and palette images are flattened; reportlab embeds RGB or L
    if img.mode not in ("RGB", "L"):
        img = img.convert("RGB")
    img.load()
    return img


def image_placement(
    image_size: tuple[int, int],
    layout: ImageLayout,
) -> tuple[tuple[float, float], tuple[float, float, float, float]]:
    """Compute the page size and the image rectangle for one image page.

    Args:
        image_size: Pixel width and height of the image.
        layout: Page sizing policy.

    Returns:
        ((page_width, page_height), (x, y, draw_width, draw_height)) in points.
        Fit-to-image pages map one pixel to one point. Standard pages are A4
        with the image scaled uniformly to fit and centered.
    """
    img_w, img_h = image_size
    if layout is ImageLayout.FIT_TO_IMAGE:
        return (float(img_w), float(img_h)), (0.0, 0.0, float(img_w), float(img_h))

    if layout is ImageLayout.STANDARD_LANDSCAPE:
        page_w, page_h = A4_HEIGHT_PT, A4_WIDTH_PT
    else:
        page_w, page_h = A4_WIDTH_PT, A4_HEIGHT_PT

    scale = min(page_w / img_w, page_h / img_h)
    draw_w, draw_h = img_w * scale, img_h * scale
    x = (page_w - draw_w) / 2
    y = (page_h - draw_h) / 2
    return (page_w, page_h), (x, y, draw_w, draw_h)


def images_to_document(
    images: Sequence[ImageItem | SourceDocument],
    layout: ImageLayout | str = ImageLayout.FIT_TO_IMAGE,
) -> TransformationResult:
    """Convert images into a PDF with one page per image, in order.

    Args:
        images: ``(name, bytes)`` pairs or single-image documents.
        layout: Page sizing policy.

    Returns:
        TransformationResult; skipped images are listed in ``failures``.

    Raises:
        InvalidInput: If no images are given or none could be converted.
    """
    try:
        layout = ImageLayout(layout)
    except ValueError as e:
        raise InvalidInput(str(e), field="layout", value=layout) from e
    if not images:
        raise InvalidInput(_("no images provided"), field="images")

    items = [(item.name, item.data) if isinstance(item, SourceDocument) else item for item in images]
    out_name = f"compiled_images_{timestamp_suffix()}.pdf"
    failures: list[PartialItemFailure] = []

    buf = io.BytesIO()
    c = canvas.Canvas(buf)
    pages = 0

    for index, (name, data) in enumerate(items):
        try:
            img = _decode_image(data)
        except (
            Image.DecompressionBombError,
            UnidentifiedImageError,
            OSError,
            ValueError,
            SyntaxError,
        ) as e:
            logger.warning("Skipping image %s: %s", name, e)
            failures.append(PartialItemFailure(index, name, str(e)))
            continue

        (page_w, page_h), (x, y, draw_w, draw_h) = image_placement(img.size, layout)
        try:
            reader = ImageReader(img)
            c.setPageSize((page_w, page_h))
            c.drawImage(reader, x, y, width=draw_w, height=draw_h)
        except Exception as e:
            # Nothing was drawn yet, so the page slot is reused by the next image
            logger.warning("Could not embed image %s: %s", name, e)
            failures.append(PartialItemFailure(index, name, str(e)))
            continue
        c.showPage()
        pages += 1
        logger.debug("Added image page %d from %s (%dx%d px)", pages, name, *img.size)

    if pages == 0:
        raise InvalidInput(
            _("none of the {count} images could be converted").format(count=len(items)),
            field="images",
        )

    c.save()
    logger.info(
        "Created %s from %d image(s), %d skipped (%s)",
        out_name,
        pages,
        len(failures),
        layout.value,
    )
    return TransformationResult(
        data=buf.getvalue(),
        suggested_name=out_name,
        pages_affected=pages,
        failures=failures,
    )
