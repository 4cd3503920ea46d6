"""Tests for PDF text extraction."""

from unittest.mock import patch

import pymupdf
import pytest

from catalog_advisor.ingest.pdf_text import PdfTextExtractor, extract_document_text
from catalog_advisor.utils.errors import DocumentError


def _make_pdf(lines: list[str]) -> bytes:
    doc = pymupdf.open()
    page = doc.new_page()
    y = 72
    for line in lines:
        page.insert_text((72, y), line)
        y += 18
    data = doc.tobytes()
    doc.close()
    return data


@pytest.fixture
def catalog_pdf() -> bytes:
    return _make_pdf(["Running Shoe - footwear - $79.99", "Desk Lamp - home - $34.50"])


class TestValidation:
    def test_empty_file(self):
        with pytest.raises(DocumentError, match="empty"):
            PdfTextExtractor().extract(b"")

    def test_not_a_pdf(self):
        with pytest.raises(DocumentError, match="Invalid PDF"):
            PdfTextExtractor().extract(b"PK\x03\x04 zip archive")

    def test_too_large(self):
        extractor = PdfTextExtractor(max_bytes=1024 * 1024)

        with pytest.raises(DocumentError, match="1MB") as exc_info:
            extractor.extract(b"%PDF" + b"0" * (1024 * 1024))

        assert exc_info.value.remediation

    def test_corrupt_pdf(self):
        with pytest.raises(DocumentError) as exc_info:
            PdfTextExtractor().extract(b"%PDF-1.4 this is not really a pdf")

        assert exc_info.value.remediation is not None


class TestExtraction:
    def test_extracts_text(self, catalog_pdf):
        text = extract_document_text(catalog_pdf)

        assert "Running Shoe" in text
        assert "Desk Lamp" in text

    def test_falls_back_when_markdown_fails(self, catalog_pdf):
        with patch(
            "catalog_advisor.ingest.pdf_text.pymupdf4llm.to_markdown",
            side_effect=RuntimeError("layout analysis failed"),
        ):
            text = PdfTextExtractor().extract(catalog_pdf)

        assert "Running Shoe" in text

    def test_blank_pages_have_no_text(self):
        doc = pymupdf.open()
        doc.new_page()
        data = doc.tobytes()
        doc.close()

        with pytest.raises(DocumentError, match="No text content"):
            PdfTextExtractor().extract(data)
