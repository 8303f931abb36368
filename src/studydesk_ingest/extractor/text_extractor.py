"""UTF-8 decoding for plain-text uploads and unclassified files."""

from __future__ import annotations

import logging

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


def extract_plain_text(source: SourceFile, data: bytes) -> ExtractionResult:
    """Decode a .txt upload verbatim.

    An empty file yields empty text; rejecting it is up to the caller.

    Raises:
        ExtractionError: DECODE_FAILED if the bytes are not valid UTF-8.
    """
    try:
        text = data.decode("utf-8")
    except UnicodeDecodeError as e:
        raise ExtractionError(
            ErrorKind.DECODE_FAILED,
            f"invalid utf-8 at byte {e.start}",
            filename=source.filename,
            primary_error=e,
        ) from e

    return ExtractionResult(
        text=text,
        category=FormatCategory.PLAIN_TEXT,
        method=ExtractionMethod.DIRECT_PARSE,
        char_count=meaningful_char_count(text),
    )


def extract_unknown(source: SourceFile, data: bytes) -> ExtractionResult:
    """Last-resort decode for files no classifier rule matched.

    Raises:
        ExtractionError: UNSUPPORTED_FORMAT if the bytes are not UTF-8 text
            or decode to nothing but whitespace.
    """
    try:
        text = data.decode("utf-8")
    except UnicodeDecodeError as e:
        logger.warning("Unsupported binary upload %s", source.filename)
        raise ExtractionError(
            ErrorKind.UNSUPPORTED_FORMAT,
            "not decodable as utf-8",
            filename=source.filename,
            primary_error=e,
        ) from e

    if is_blank(text):
        raise ExtractionError(
            ErrorKind.UNSUPPORTED_FORMAT,
            "no text content",
            filename=source.filename,
        )

    logger.info("Read unclassified upload %s as raw text", source.filename)
    return ExtractionResult(
        text=text,
        category=FormatCategory.UNKNOWN,
        method=ExtractionMethod.DIRECT_PARSE,
        char_count=meaningful_char_count(text),
    )
