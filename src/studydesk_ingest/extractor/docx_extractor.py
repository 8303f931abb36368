"""DOCX text extraction with python-docx.

Paragraph text only, joined by newlines. DOCX uploads are never scanned
images, so there is no OCR fallback: an empty document is a terminal
DOCX_EMPTY_CONTENT failure.
"""

from __future__ import annotations

import io
import logging

import docx

from studydesk_ingest.extractor.quality import is_blank, meaningful_char_count
from studydesk_ingest.extractor.types import (
    ErrorKind,
    ExtractionError,
    ExtractionMethod,
    ExtractionResult,
    FormatCategory,
    SourceFile,
)

logger = logging.getLogger(__name__)


def extract_docx(source: SourceFile, data: bytes) -> ExtractionResult:
    try:
        document = docx.Document(io.BytesIO(data))
    except Exception as e:
        # Legacy binary .doc files land here too
        logger.warning("Cannot parse DOCX %s: %s", source.filename, e)
        raise ExtractionError(
            ErrorKind.DECODE_FAILED,
            f"cannot_open_docx: {e}",
            filename=source.filename,
            primary_error=e,
        ) from e

    text = "\n".join(paragraph.text for paragraph in document.paragraphs)

    if is_blank(text):
        logger.warning("DOCX %s has no paragraph text", source.filename)
        raise ExtractionError(ErrorKind.DOCX_EMPTY_CONTENT, filename=source.filename)

    return ExtractionResult(
        text=text,
        category=FormatCategory.DOCX,
        method=ExtractionMethod.DIRECT_PARSE,
        char_count=meaningful_char_count(text),
    )
