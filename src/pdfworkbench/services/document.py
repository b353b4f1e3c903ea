"""
PDF Workbench - Document Model

Immutable handles to ingested documents and the helpers every operation
uses to open them with the codec (pikepdf) and to write results back to
bytes. A ``SourceDocument`` is never modified; operations always build a
new byte buffer from a private, in-memory copy.
"""

import io
import logging
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

import pikepdf
from PIL import Image, UnidentifiedImageError

from pdfworkbench.config import IMAGE_EXTENSIONS
from pdfworkbench.utils.exceptions import CorruptDocument, InvalidInput
from pdfworkbench.utils.i18n import _

logger = logging.getLogger(__name__)


class DocumentKind(Enum):
    """What kind of content a source document holds."""

    PAGED = "paged"
    SINGLE_IMAGE = "single-image"


@dataclass(frozen=True)
class SourceDocument:
    """An ingested document.

    Attributes:
        name: Display name (usually the original file name)
        data: Raw byte content, never mutated
        page_count: Number of pages, cached at ingestion
        kind: Paged document or a single raster image
        id: Workspace identifier
    """

    name: str
    data: bytes = field(repr=False)
    page_count: int
    kind: DocumentKind = DocumentKind.PAGED
    id: str = field(default_factory=lambda: uuid.uuid4().hex)

    @property
    def size_bytes(self) -> int:
        return len(self.data)

    @property
    def is_paged(self) -> bool:
        return self.kind is DocumentKind.PAGED

    def page_ordinals(self) -> list[int]:
        """1-based page numbers of this document."""
        return list(range(1, self.page_count + 1))


@dataclass
class DocumentInfo:
    """Basic information about a document."""

    name: str
    page_count: int
    size_bytes: int
    kind: DocumentKind = DocumentKind.PAGED
    title: str = ""
    author: str = ""
    creator: str = ""
    encrypted: bool = False
    pdf_version: str = ""


# ---------------------------------------------------------------------------
# Ingestion
# ---------------------------------------------------------------------------


def is_image_name(name: str) -> bool:
    """Whether a file name carries one of the supported raster extensions."""
    return name.lower().endswith(IMAGE_EXTENSIONS)


def load_pdf(data: bytes, name: str) -> SourceDocument:
    """Ingest PDF bytes.

    Documents with edit restrictions (owner password only) open normally.

    Args:
        data: PDF byte content.
        name: Display name.

    Returns:
        A new SourceDocument.

    Raises:
        CorruptDocument: If the codec cannot parse the content.
    """
    with _open_bytes(data, name) as pdf:
        page_count = len(pdf.pages)
    logger.debug("Loaded %s (%d pages)", name, page_count)
    return SourceDocument(name=name, data=bytes(data), page_count=page_count)


def load_image(data: bytes, name: str) -> SourceDocument:
    """Ingest a single raster image as a one-page document.

    Raises:
        CorruptDocument: If Pillow cannot identify the image.
    """
    try:
        with Image.open(io.BytesIO(data)) as img:
            img.verify()
    except (UnidentifiedImageError, OSError, SyntaxError) as e:
        raise CorruptDocument(name, _("not a readable image: {error}").format(error=e)) from e
    return SourceDocument(
        name=name,
        data=bytes(data),
        page_count=1,
        kind=DocumentKind.SINGLE_IMAGE,
    )


def ingest(data: bytes, name: str) -> SourceDocument:
    """Ingest bytes, choosing the document kind from the file name."""
    if is_image_name(name):
        return load_image(data, name)
    return load_pdf(data, name)


def ingest_path(path: str | Path) -> SourceDocument:
    """Read a file from disk and ingest it.

    Raises:
        FileNotFoundError: If the file does not exist.
    """
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"File not found: {path}")
    return ingest(path.read_bytes(), path.name)


# ---------------------------------------------------------------------------
# Codec access
# ---------------------------------------------------------------------------


@contextmanager
def _open_bytes(data: bytes, name: str) -> Iterator[pikepdf.Pdf]:
    try:
        pdf = pikepdf.open(io.BytesIO(data))
    except pikepdf.PasswordError as e:
        raise CorruptDocument(name, _("the document is password-protected")) from e
    except pikepdf.PdfError as e:
        raise CorruptDocument(name, str(e)) from e
    try:
        yield pdf
    finally:
        pdf.close()


@contextmanager
def open_pdf(doc: SourceDocument) -> Iterator[pikepdf.Pdf]:
    """Open a private, in-memory codec handle on a paged document.

    Changes made to the handle never reach ``doc``.

    Raises:
        InvalidInput: If the document is a single image.
        CorruptDocument: If the codec cannot parse the content.
    """
    if not doc.is_paged:
        raise InvalidInput(
            _("'{name}' is an image, not a paged document").format(name=doc.name),
            field="document",
        )
    with _open_bytes(doc.data, doc.name) as pdf:
        yield pdf


def save_pdf(pdf: pikepdf.Pdf, name: str) -> bytes:
    """Serialize a codec handle to bytes.

    Raises:
        CorruptDocument: If the codec fails while writing.
    """
    buf = io.BytesIO()
    try:
        pdf.save(buf)
    except pikepdf.PdfError as e:
        logger.error("Saving %s failed: %s", name, e)
        raise CorruptDocument(name, str(e)) from e
    return buf.getvalue()


def page_rotation(page: pikepdf.Page) -> int:
    """Resolve the effective /Rotate of a page, including inherited values."""
    node = page.obj
    while node is not None:
        if "/Rotate" in node:
            return int(node["/Rotate"]) % 360
        node = node.get("/Parent")
    return 0


def page_size(page: pikepdf.Page) -> tuple[float, float]:
    """Unrotated width and height of a page in points, from its MediaBox."""
    mbox = page.mediabox
    return float(mbox[2]) - float(mbox[0]), float(mbox[3]) - float(mbox[1])


# ---------------------------------------------------------------------------
# Inspection
# ---------------------------------------------------------------------------


def describe(doc: SourceDocument) -> DocumentInfo:
    """Get basic information about a document.

    Args:
        doc: The document to inspect.

    Returns:
        DocumentInfo with metadata (metadata fields stay empty for images).
    """
    info = DocumentInfo(
        name=doc.name,
        page_count=doc.page_count,
        size_bytes=doc.size_bytes,
        kind=doc.kind,
    )
    if not doc.is_paged:
        return info

    with open_pdf(doc) as pdf:
        info.pdf_version = str(pdf.pdf_version)
        info.encrypted = pdf.is_encrypted

        with pdf.open_metadata(set_pikepdf_as_editor=False) as meta:
            info.title = str(meta.get("dc:title", ""))
            info.author = str(meta.get("dc:creator", ""))

        if "/Creator" in pdf.docinfo:
            info.creator = str(pdf.docinfo["/Creator"])
        if not info.title and "/Title" in pdf.docinfo:
            info.title = str(pdf.docinfo["/Title"])

    return info
