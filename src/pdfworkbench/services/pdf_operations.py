"""
PDF Workbench - PDF Operations Service

Pure-Python structural transformations over ingested documents.
No UI dependencies - can be used from the CLI, the workspace, or scripts.

Supported operations:
  - Merge several documents
  - Split out a page range / split into single pages
  - Reorder pages by permutation
  - Delete pages
  - Rotate pages

Every operation reads a ``SourceDocument`` and returns a new
``TransformationResult``; inputs are never modified. Structural
preconditions are checked before pikepdf is touched.
"""

import logging
from collections.abc import Iterable, Sequence
from contextlib import ExitStack
from dataclasses import dataclass, field

import pikepdf

from pdfworkbench.config import PDF_MEDIA_TYPE
from pdfworkbench.services.document import (
    SourceDocument,
    open_pdf,
    page_rotation,
    save_pdf,
)
from pdfworkbench.services.page_ranges import parse_page_range, resolve_page_indices
from pdfworkbench.utils.exceptions import (
    InvalidInput,
    OperationPrecondition,
    PartialItemFailure,
)
from pdfworkbench.utils.format_utils import name_stem, prefixed_name, timestamp_suffix
from pdfworkbench.utils.i18n import _

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------


@dataclass
class TransformationResult:
    """Output of a transformation.

    Attributes:
        data: Output payload (document bytes, archive bytes or text)
        suggested_name: File name proposed to the delivery sink
        media_type: MIME type of ``data``
        pages_affected: Number of pages written, moved, rotated or removed
        failures: Per-item failures of batch operations
    """

    data: bytes | str
    suggested_name: str
    media_type: str = PDF_MEDIA_TYPE
    pages_affected: int = 0
    failures: list[PartialItemFailure] = field(default_factory=list)

    @property
    def size_bytes(self) -> int:
        if isinstance(self.data, str):
            return len(self.data.encode("utf-8"))
        return len(self.data)

    @property
    def has_failures(self) -> bool:
        return bool(self.failures)


def _copy_pages(src: pikepdf.Pdf, indices: Iterable[int], name: str) -> tuple[bytes, int]:
    """Copy pages of *src* at *indices*, in that order, into a new document."""
    with pikepdf.Pdf.new() as dst:
        count = 0
        for idx in indices:
            dst.pages.append(src.pages[idx])
            count += 1
        return save_pdf(dst, name), count


# ---------------------------------------------------------------------------
# Merge
# ---------------------------------------------------------------------------


def merge_documents(docs: Sequence[SourceDocument]) -> TransformationResult:
    """Concatenate documents in the order given.

    Args:
        docs: Two or more paged documents.

    Returns:
        TransformationResult whose page count is the sum of the inputs.

    Raises:
        OperationPrecondition: If fewer than two documents are supplied.
        CorruptDocument: If any input cannot be parsed.
    """
    if len(docs) < 2:
        raise OperationPrecondition(
            "merge", _("at least two documents are required, got {count}").format(count=len(docs))
        )

    out_name = f"merged_{timestamp_suffix()}.pdf"
    total_pages = 0

    with ExitStack() as stack:
        # Sources must stay open until the merged document is written.
        dst = stack.enter_context(pikepdf.Pdf.new())
        for doc in docs:
            src = stack.enter_context(open_pdf(doc))
            count = len(src.pages)
            dst.pages.extend(src.pages)
            total_pages += count
            logger.debug("Merged %d pages from %s", count, doc.name)
        data = save_pdf(dst, out_name)

    logger.info("Merged %d documents → %s (%d pages)", len(docs), out_name, total_pages)
    return TransformationResult(data=data, suggested_name=out_name, pages_affected=total_pages)


# ---------------------------------------------------------------------------
# Split
# ---------------------------------------------------------------------------


def split_document(doc: SourceDocument, page_range: str | list[int]) -> TransformationResult:
    """Extract the pages of a range into a new document.

    Args:
        doc: Source document.
        page_range: Range expression (``"1-3,7"``) or parsed 1-based ordinals.

    Returns:
        TransformationResult holding the pages in ascending order.

    Raises:
        InvalidInput: If no ordinal of the range falls inside the document.
    """
    ordinals = parse_page_range(page_range) if isinstance(page_range, str) else sorted(set(page_range))
    indices = resolve_page_indices(ordinals, doc.page_count)
    if not indices:
        raise InvalidInput(
            _("no pages of the range fall inside the document ({count} pages)").format(
                count=doc.page_count
            ),
            field="page_range",
            value=page_range,
        )

    out_name = prefixed_name("extracted", doc.name)
    with open_pdf(doc) as src:
        data, count = _copy_pages(src, indices, out_name)

    logger.info("Extracted pages %s from %s → %s", [i + 1 for i in indices], doc.name, out_name)
    return TransformationResult(data=data, suggested_name=out_name, pages_affected=count)


def split_to_singles(doc: SourceDocument) -> list[TransformationResult]:
    """Split a document into one single-page document per page.

    Args:
        doc: Source document.

    Returns:
        One result per page, in page order, named ``{stem}_page_{n}.pdf``.
    """
    stem = name_stem(doc.name)
    results: list[TransformationResult] = []

    with open_pdf(doc) as src:
        total = len(src.pages)
        for idx in range(total):
            out_name = f"{stem}_page_{idx + 1}.pdf"
            data, _count = _copy_pages(src, [idx], out_name)
            results.append(
                TransformationResult(data=data, suggested_name=out_name, pages_affected=1)
            )
            logger.debug("Split page %d/%d → %s", idx + 1, total, out_name)

    logger.info("Split %s into %d single-page documents", doc.name, len(results))
    return results


# ---------------------------------------------------------------------------
# Reorder
# ---------------------------------------------------------------------------


def reorder_pages(doc: SourceDocument, arrangement: Sequence[int]) -> TransformationResult:
    """Write the pages of *doc* in the order given by *arrangement*.

    Position ``i`` of the output holds the page at original index
    ``arrangement[i]``.

    Raises:
        InvalidInput: If *arrangement* is not a permutation of 0..N-1.
    """
    arrangement = list(arrangement)
    if sorted(arrangement) != list(range(doc.page_count)):
        raise InvalidInput(
            _("arrangement must be a permutation of 0..{last}").format(last=doc.page_count - 1),
            field="arrangement",
            value=arrangement,
        )

    out_name = prefixed_name("reordered", doc.name)
    with open_pdf(doc) as src:
        data, count = _copy_pages(src, arrangement, out_name)

    moved = sum(1 for pos, idx in enumerate(arrangement) if pos != idx)
    logger.info("Reordered %s (%d pages moved) → %s", doc.name, moved, out_name)
    return TransformationResult(data=data, suggested_name=out_name, pages_affected=count)


# ---------------------------------------------------------------------------
# Delete pages
# ---------------------------------------------------------------------------


def delete_pages(doc: SourceDocument, indices: Iterable[int]) -> TransformationResult:
    """Remove pages, keeping the rest in their original order.

    Args:
        doc: Source document.
        indices: 0-based indices of the pages to remove. Indices outside
            the document are ignored.

    Raises:
        OperationPrecondition: If nothing is selected or every page is selected.
    """
    to_delete = {i for i in indices if 0 <= i < doc.page_count}

    if not to_delete:
        raise OperationPrecondition("delete pages", _("no pages selected"))
    if len(to_delete) >= doc.page_count:
        raise OperationPrecondition("delete pages", _("a document must keep at least one page"))

    keep = [i for i in range(doc.page_count) if i not in to_delete]
    out_name = prefixed_name("trimmed", doc.name)
    with open_pdf(doc) as src:
        data, kept = _copy_pages(src, keep, out_name)

    logger.info(
        "Deleted pages %s from %s, kept %d pages → %s",
        sorted(i + 1 for i in to_delete),
        doc.name,
        kept,
        out_name,
    )
    return TransformationResult(data=data, suggested_name=out_name, pages_affected=len(to_delete))


# ---------------------------------------------------------------------------
# Rotate pages
# ---------------------------------------------------------------------------


def rotate_pages(
    doc: SourceDocument,
    angle: int,
    targets: Iterable[int] | None = None,
) -> TransformationResult:
    """Rotate pages by *angle* degrees on top of their existing rotation.

    Args:
        doc: Source document.
        angle: Clockwise quarter turns in degrees (90, 180, -90, 450...).
        targets: 0-based page indices to rotate; all pages when None.
            Indices outside the document are ignored.

    Returns:
        TransformationResult with ``/Rotate = (existing + angle) % 360``.

    Raises:
        InvalidInput: If *angle* is not a multiple of 90.
    """
    if angle % 90 != 0:
        raise InvalidInput(_("rotation must be a multiple of 90 degrees"), field="angle", value=angle)

    if targets is None:
        selected = list(range(doc.page_count))
    else:
        selected = sorted({i for i in targets if 0 <= i < doc.page_count})

    out_name = prefixed_name("rotated", doc.name)
    with open_pdf(doc) as pdf:
        for idx in selected:
            page = pdf.pages[idx]
            page.Rotate = (page_rotation(page) + angle) % 360
        data = save_pdf(pdf, out_name)

    logger.info("Rotated %d pages of %s by %d° → %s", len(selected), doc.name, angle, out_name)
    return TransformationResult(data=data, suggested_name=out_name, pages_affected=len(selected))
