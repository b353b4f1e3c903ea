"""Pytest configuration for pdfworkbench tests.

Builds small real PDFs with pikepdf (every page carries a visible
"Page N" label in Helvetica so text extraction and page identity can be
checked) and raster images with Pillow.
"""

import io
import re

import pikepdf
import pytest
from PIL import Image

from pdfworkbench.services.document import SourceDocument, load_image, load_pdf

_LABEL = re.compile(rb"\(Page (\d+)\)")


def build_pdf(
    num_pages: int = 3,
    size: tuple[float, float] = (612, 792),
    inherited_rotate: int | None = None,
) -> bytes:
    """Create a PDF whose page i shows the text "Page i"."""
    pdf = pikepdf.Pdf.new()
    font = pdf.make_indirect(
        pikepdf.Dictionary(
            Type=pikepdf.Name.Font,
            Subtype=pikepdf.Name.Type1,
            BaseFont=pikepdf.Name.Helvetica,
        )
    )
    for i in range(num_pages):
        page = pikepdf.Page(
            pikepdf.Dictionary(
                Type=pikepdf.Name.Page,
                MediaBox=[0, 0, size[0], size[1]],
                Resources=pikepdf.Dictionary(Font=pikepdf.Dictionary(F1=font)),
                Contents=pdf.make_stream(f"BT /F1 12 Tf 100 700 Td (Page {i + 1}) Tj ET".encode()),
            )
        )
        pdf.pages.append(page)
    if inherited_rotate is not None:
        pdf.Root.Pages.Rotate = inherited_rotate
    buf = io.BytesIO()
    pdf.save(buf)
    pdf.close()
    return buf.getvalue()


def build_image(
    width: int = 40,
    height: int = 20,
    fmt: str = "PNG",
    color: str = "red",
    exif_orientation: int | None = None,
) -> bytes:
    """Create an in-memory raster image."""
    img = Image.new("RGB", (width, height), color)
    buf = io.BytesIO()
    if exif_orientation is not None:
        exif = Image.Exif()
        exif[0x0112] = exif_orientation
        img.save(buf, format=fmt, exif=exif)
    else:
        img.save(buf, format=fmt)
    return buf.getvalue()


def labels_of(data: bytes) -> list[int]:
    """Return the "Page N" label numbers of each page, in order."""
    labels = []
    with pikepdf.open(io.BytesIO(data)) as pdf:
        for page in pdf.pages:
            contents = page.obj.Contents
            streams = list(contents) if isinstance(contents, pikepdf.Array) else [contents]
            raw = b"".join(s.read_bytes() for s in streams)
            match = _LABEL.search(raw)
            labels.append(int(match.group(1)) if match else -1)
    return labels


def rotations_of(data: bytes) -> list[int]:
    """Return the effective /Rotate of each page."""
    from pdfworkbench.services.document import page_rotation

    with pikepdf.open(io.BytesIO(data)) as pdf:
        return [page_rotation(page) for page in pdf.pages]


class FakeRenderer:
    """In-memory renderer producing tiny images, optionally failing on a page."""

    name = "fake"

    def __init__(self, fail_on: int | None = None) -> None:
        self.fail_on = fail_on
        self.rendered: list[int] = []
        self.closed = False

    def page_count(self, data, doc_name="document"):
        with pikepdf.open(io.BytesIO(data)) as pdf:
            return len(pdf.pages)

    def render_pages(self, data, scale, doc_name="document"):
        from pdfworkbench.utils.exceptions import RenderFailure

        try:
            for ordinal in range(1, self.page_count(data) + 1):
                if ordinal == self.fail_on:
                    raise RenderFailure(doc_name, "injected failure", page_ordinal=ordinal)
                self.rendered.append(ordinal)
                yield Image.new("RGB", (10, 14), "white")
        finally:
            self.closed = True

    def extract_texts(self, data, doc_name="document"):
        for ordinal in range(1, self.page_count(data) + 1):
            yield f"text {ordinal}"


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def make_doc():
    """Factory for paged SourceDocuments."""

    def _make(num_pages: int = 3, name: str = "sample.pdf", **kwargs) -> SourceDocument:
        return load_pdf(build_pdf(num_pages, **kwargs), name)

    return _make


@pytest.fixture
def three_page_doc(make_doc):
    return make_doc(3)


@pytest.fixture
def five_page_doc(make_doc):
    return make_doc(5, name="five.pdf")


@pytest.fixture
def image_doc():
    return load_image(build_image(30, 50), "photo.png")


@pytest.fixture
def fake_renderer():
    return FakeRenderer()
