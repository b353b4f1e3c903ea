"""Tests for watermarks and page numbers."""

import pypdfium2 as pdfium
import pytest
from conftest import build_pdf, labels_of
from reportlab.pdfbase import pdfmetrics

from pdfworkbench.services.page_stamps import (
    PageAlignment,
    PagePosition,
    PaginationStyle,
    WatermarkStyle,
    add_page_numbers,
    apply_watermark,
    page_number_origin,
    parse_color,
)
from pdfworkbench.utils.exceptions import InvalidInput


def _page_texts(data: bytes) -> list[str]:
    doc = pdfium.PdfDocument(data)
    try:
        texts = []
        for index in range(len(doc)):
            page = doc[index]
            textpage = page.get_textpage()
            texts.append(textpage.get_text_range())
            textpage.close()
            page.close()
        return texts
    finally:
        doc.close()


class TestParseColor:
    def test_black(self):
        assert parse_color("#000000") == (0.0, 0.0, 0.0)

    def test_without_hash(self):
        assert parse_color("ff0000") == (1.0, 0.0, 0.0)

    @pytest.mark.parametrize("value", ["#fff", "red", "#12345g", ""])
    def test_malformed(self, value):
        with pytest.raises(InvalidInput):
            parse_color(value)


class TestStyles:
    def test_watermark_defaults(self):
        style = WatermarkStyle()
        assert (style.font_size, style.opacity, style.rotation, style.color) == (
            50,
            0.3,
            -45,
            "#000000",
        )

    @pytest.mark.parametrize("opacity", [-0.1, 1.5])
    def test_opacity_out_of_range(self, opacity):
        with pytest.raises(InvalidInput):
            WatermarkStyle(opacity=opacity)

    def test_pagination_accepts_strings(self):
        style = PaginationStyle(position="top", alignment="right")
        assert style.position is PagePosition.TOP
        assert style.alignment is PageAlignment.RIGHT

    def test_pagination_rejects_unknown_position(self):
        with pytest.raises(InvalidInput):
            PaginationStyle(position="middle")

    def test_bad_color_rejected(self):
        with pytest.raises(InvalidInput):
            PaginationStyle(color="blue")


class TestWatermark:
    def test_text_on_every_page(self, three_page_doc):
        result = apply_watermark(three_page_doc, "CONFIDENTIAL")
        texts = _page_texts(result.data)
        assert len(texts) == 3
        assert all("CONFIDENTIAL" in t for t in texts)
        assert result.suggested_name == "watermarked_sample.pdf"

    def test_original_content_kept(self, three_page_doc):
        result = apply_watermark(three_page_doc, "DRAFT", WatermarkStyle(opacity=1.0, rotation=0))
        assert labels_of(result.data) == [1, 2, 3]

    @pytest.mark.parametrize("text", ["", "   "])
    def test_blank_text_refused(self, three_page_doc, text):
        with pytest.raises(InvalidInput):
            apply_watermark(three_page_doc, text)

    def test_source_unchanged(self, three_page_doc):
        before = three_page_doc.data
        apply_watermark(three_page_doc, "DRAFT")
        assert three_page_doc.data == before


class TestPageNumbers:
    def test_labels_on_each_page(self, three_page_doc):
        result = add_page_numbers(three_page_doc)
        texts = _page_texts(result.data)
        assert "1 / 3" in texts[0]
        assert "2 / 3" in texts[1]
        assert "3 / 3" in texts[2]
        assert result.suggested_name == "numbered_sample.pdf"

    def test_bottom_center_origin(self):
        style = PaginationStyle()
        width = pdfmetrics.stringWidth("1 / 3", "Helvetica", 12)
        x, y = page_number_origin("1 / 3", 612, 792, style)
        assert x == pytest.approx(306 - width / 2)
        assert y == 30

    def test_top_right_origin(self):
        style = PaginationStyle(position="top", alignment="right", font_size=10)
        width = pdfmetrics.stringWidth("2 / 9", "Helvetica", 10)
        x, y = page_number_origin("2 / 9", 600, 800, style)
        assert x == pytest.approx(600 - width - 30)
        assert y == 800 - 30 - 10

    def test_left_origin(self):
        x, _y = page_number_origin("1 / 1", 612, 792, PaginationStyle(alignment="left"))
        assert x == 30

    def test_mixed_page_sizes(self, make_doc):
        from pdfworkbench.services.document import load_pdf
        from pdfworkbench.services.pdf_operations import merge_documents

        small = make_doc(1)
        wide = load_pdf(build_pdf(1, size=(842, 595)), "wide.pdf")
        merged = load_pdf(merge_documents([small, wide]).data, "merged.pdf")
        texts = _page_texts(add_page_numbers(merged).data)
        assert "1 / 2" in texts[0]
        assert "2 / 2" in texts[1]
