"""Tests for format_utils module."""

from pdfworkbench.utils.format_utils import (
    format_file_size,
    name_stem,
    prefixed_name,
    timestamp_suffix,
)


class TestFormatFileSize:
    def test_zero_bytes(self):
        assert format_file_size(0) == "0 B"

    def test_bytes(self):
        assert format_file_size(500) == "500 B"

    def test_kilobytes(self):
        assert format_file_size(1024) == "1.00 KB"
        assert format_file_size(1536) == "1.50 KB"

    def test_megabytes(self):
        assert format_file_size(1024 * 1024) == "1.00 MB"
        assert format_file_size(15 * 1024 * 1024) == "15.0 MB"

    def test_large_values_no_decimals(self):
        assert format_file_size(200 * 1024 * 1024) == "200 MB"

    def test_negative_returns_zero(self):
        assert format_file_size(-1) == "0 B"


class TestNames:
    def test_name_stem(self):
        assert name_stem("reports/q1.pdf") == "q1"
        assert name_stem("archive.tar.gz") == "archive.tar"
        assert name_stem("") == "document"

    def test_prefixed_name_keeps_extension(self):
        assert prefixed_name("rotated", "report.pdf") == "rotated_report.pdf"

    def test_prefixed_name_replaces_other_extension(self):
        assert prefixed_name("extracted", "scan.png") == "extracted_scan.pdf"

    def test_prefixed_name_empty(self):
        assert prefixed_name("numbered", "") == "numbered_document.pdf"

    def test_timestamp_suffix_is_numeric(self):
        assert timestamp_suffix().isdigit()
