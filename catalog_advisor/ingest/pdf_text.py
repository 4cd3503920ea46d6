"""
PDF Text Extractor
==================

Converts an uploaded PDF binary into best-effort plain text.

Extraction Flow:
    1. Validate the upload (non-empty, size limit, ``%PDF`` header)
    2. Open the document with PyMuPDF (encrypted files are rejected)
    3. Try each text strategy in order, first non-empty result wins:
        - markdown: pymupdf4llm, keeps table structure as Markdown
        - plain_text: PyMuPDF ``page.get_text("text")``
        - blocks: PyMuPDF text blocks sorted in reading order

Image-only (scanned) documents yield no text and are reported as a
DocumentError rather than an empty string.
"""

from collections.abc import Callable

import pymupdf
import pymupdf4llm

from catalog_advisor.utils.errors import DocumentError
from catalog_advisor.utils.logger import get_logger

logger = get_logger(__name__)

PDF_MAGIC = b"%PDF"


class PdfTextExtractor:
    """
    Multi-strategy PDF text extraction.

    Attributes:
        max_bytes: Upload size limit, None for unlimited
    """

    def __init__(self, max_bytes: int | None = None) -> None:
        self.max_bytes = max_bytes
        self._strategies: list[tuple[str, Callable[[pymupdf.Document], str]]] = [
            ("markdown", self._markdown_text),
            ("plain_text", self._plain_text),
            ("blocks", self._block_text),
        ]

    def validate(self, data: bytes) -> None:
        """
        Reject uploads that cannot be a PDF we are willing to read.

        Raises:
            DocumentError: If the data is empty, too large or not a PDF
        """
        if not data:
            raise DocumentError("Uploaded file is empty")

        if self.max_bytes is not None and len(data) > self.max_bytes:
            limit_mb = self.max_bytes // (1024 * 1024)
            raise DocumentError(
                f"File size exceeds {limit_mb}MB limit",
                details={"size": len(data), "max_bytes": self.max_bytes},
                remediation="Split the catalog into smaller PDF files.",
            )

        if not data[:4].startswith(PDF_MAGIC):
            raise DocumentError(
                "Invalid PDF file. The file does not appear to be a valid PDF document.",
                remediation="Upload a file saved as PDF.",
            )

    def extract(self, data: bytes) -> str:
        """
        Extract text from PDF bytes.

        Args:
            data: Raw PDF file content

        Returns:
            Non-empty document text

        Raises:
            DocumentError: If the file is invalid, encrypted or has no text layer
        """
        self.validate(data)

        try:
            doc = pymupdf.open(stream=data, filetype="pdf")
        except Exception as e:
            logger.warning("pdf_text.open_failed", error=str(e))
            raise DocumentError(
                f"Failed to parse PDF: {e}",
                details={"error": str(e)},
                remediation=(
                    "The PDF file appears to be corrupted or has an invalid structure. "
                    "Please try with a different PDF file."
                ),
            ) from e

        with doc:
            if doc.needs_pass:
                raise DocumentError(
                    "The PDF file is password-protected or encrypted.",
                    remediation="Please upload an unprotected PDF.",
                )

            for name, strategy in self._strategies:
                try:
                    text = strategy(doc)
                except Exception as e:
                    logger.warning("pdf_text.strategy_failed", strategy=name, error=str(e))
                    continue

                # Page separators and layout markup alone do not count as text
                if text and any(ch.isalnum() for ch in text):
                    logger.info(
                        "pdf_text.extracted",
                        strategy=name,
                        pages=doc.page_count,
                        text_length=len(text),
                    )
                    return text

                logger.debug("pdf_text.strategy_empty", strategy=name)

        raise DocumentError(
            "No text content could be extracted from the PDF. "
            "The file might be image-based or corrupted.",
            remediation="Upload a PDF with a text layer (run OCR on scanned catalogs first).",
        )

    @staticmethod
    def _markdown_text(doc: pymupdf.Document) -> str:
        return pymupdf4llm.to_markdown(doc, show_progress=False)

    @staticmethod
    def _plain_text(doc: pymupdf.Document) -> str:
        return "\n".join(page.get_text("text") for page in doc)

    @staticmethod
    def _block_text(doc: pymupdf.Document) -> str:
        parts: list[str] = []
        for page in doc:
            # (x0, y0, x1, y1, text, block_no, block_type); type 0 is text
            for block in page.get_text("blocks", sort=True):
                if block[6] == 0 and block[4].strip():
                    parts.append(block[4].strip())
        return "\n".join(parts)


def extract_document_text(data: bytes, max_bytes: int | None = None) -> str:
    """Extract text from PDF bytes with the default strategies."""
    return PdfTextExtractor(max_bytes=max_bytes).extract(data)
