"""PDF text extraction: embedded text layer first, OCR fallback second.

The text layer is read with PyMuPDF. A layer that is missing, too short, or
unreadable (parser error) escalates the original file bytes to the OCR
engine exactly once. If OCR fails as well, the raised error carries both the
primary and the fallback cause.
"""

from __future__ import annotations

import logging

import pymupdf

from studydesk_ingest.config.settings import ExtractionSettings
from studydesk_ingest.extractor.ocr import OcrEngine
from studydesk_ingest.extractor.quality import has_usable_text_layer, meaningful_char_count
from studydesk_ingest.extractor.types import (
    ErrorKind,
    ExtractionError,
    ExtractionMethod,
    ExtractionResult,
    FormatCategory,
    OcrError,
    SourceFile,
)

logger = logging.getLogger(__name__)


def read_text_layer(data: bytes) -> tuple[str, int]:
    """Read the embedded text of a PDF.

    Args:
        data: Raw PDF bytes.

    Returns:
        Tuple of (text, page_count). Page texts are joined by blank lines.

    Raises:
        Whatever PyMuPDF raises for unreadable or encrypted documents.
    """
    with pymupdf.open(stream=data, filetype="pdf") as doc:
        if doc.needs_pass:
            raise ValueError("encrypted")
        pages = [page.get_text() for page in doc]
        return "\n\n".join(p.strip() for p in pages if p.strip()), len(pages)


def extract_pdf(
    source: SourceFile,
    data: bytes,
    settings: ExtractionSettings,
    ocr_engine: OcrEngine,
) -> ExtractionResult:
    """Extract text from a PDF, falling back to OCR for scanned documents.

    Args:
        source: The uploaded file.
        data: Its bytes, already read by the dispatcher.
        settings: Extraction configuration (``min_text_layer_chars``).
        ocr_engine: Engine used when the text layer is insufficient.

    Returns:
        ExtractionResult with method DIRECT_PARSE or OCR.

    Raises:
        ExtractionError: PDF_TEXT_LAYER_ABSENT when OCR also failed.
    """
    primary_error: Exception | None = None
    page_count = 0

    try:
        text, page_count = read_text_layer(data)
    except Exception as e:
        logger.warning("PDF text layer unreadable for %s: %s", source.filename, e)
        primary_error = e
    else:
        if has_usable_text_layer(text, settings):
            logger.info(
                "PDF text layer used for %s (%d chars, %d pages)",
                source.filename,
                len(text),
                page_count,
            )
            return ExtractionResult(
                text=text,
                category=FormatCategory.PDF,
                method=ExtractionMethod.DIRECT_PARSE,
                char_count=meaningful_char_count(text),
                page_count=page_count,
            )

    logger.info("Escalating %s to OCR (no usable text layer)", source.filename)
    try:
        text = ocr_engine.recognize_bytes(data, ".pdf", filename=source.filename)
    except OcrError as ocr_error:
        raise ExtractionError(
            ErrorKind.PDF_TEXT_LAYER_ABSENT,
            str(primary_error) if primary_error else "text layer below minimum content",
            filename=source.filename,
            primary_error=primary_error,
            fallback_error=ocr_error,
        ) from ocr_error

    return ExtractionResult(
        text=text,
        category=FormatCategory.PDF,
        method=ExtractionMethod.OCR,
        char_count=meaningful_char_count(text),
        page_count=page_count,
    )
