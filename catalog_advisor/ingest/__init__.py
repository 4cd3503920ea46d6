"""Document ingestion: PDF binary to plain text."""

from catalog_advisor.ingest.pdf_text import PdfTextExtractor, extract_document_text

__all__ = ["PdfTextExtractor", "extract_document_text"]
