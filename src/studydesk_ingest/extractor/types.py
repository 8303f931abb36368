"""Shared types for the extraction pipeline.

Defines the closed format classification, the extraction result, and the
structured error raised by every extractor, the OCR engine and the
dispatcher.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path


class FormatCategory(Enum):
    """Document category assigned by the classifier."""

    PDF = "pdf"
    DOCX = "docx"
    PLAIN_TEXT = "plain_text"
    IMAGE = "image"
    UNKNOWN = "unknown"


class ExtractionMethod(Enum):
    """Method that produced the returned text."""

    DIRECT_PARSE = "direct_parse"
    OCR = "ocr"


class ErrorKind(Enum):
    """Tagged failure reason carried by ExtractionError."""

    FILE_NOT_FOUND = "file_not_found"
    UNSUPPORTED_FORMAT = "unsupported_format"
    DOCX_EMPTY_CONTENT = "docx_empty_content"
    PDF_TEXT_LAYER_ABSENT = "pdf_text_layer_absent"
    OCR_INIT_FAILED = "ocr_init_failed"
    OCR_EMPTY_RESULT = "ocr_empty_result"
    OCR_RECOGNITION_FAILED = "ocr_recognition_failed"
    DECODE_FAILED = "decode_failed"


@dataclass(frozen=True)
class SourceFile:
    """An uploaded file as handed over by the upload handler.

    The bytes on disk are owned by the upload handler; the pipeline only
    reads them.
    """

    path: Path
    filename: str

    @property
    def extension(self) -> str:
        """Lower-cased extension of the declared filename, with the dot."""
        return Path(self.filename).suffix.lower()

    def read_bytes(self) -> bytes:
        return self.path.read_bytes()


@dataclass
class ExtractionResult:
    """Successful extraction outcome.

    Attributes:
        text: Extracted text.
        category: Category the file was classified as.
        method: Whether the text came from direct parsing or OCR.
        char_count: Non-whitespace character count of ``text``.
        page_count: Pages in the source document (PDF only, else 0).
    """

    text: str
    category: FormatCategory
    method: ExtractionMethod
    char_count: int = 0
    page_count: int = 0


class ExtractionError(Exception):
    """Structured extraction failure.

    When a primary method fails and its OCR fallback fails too, both causes
    are kept: ``primary_error`` holds the parser failure (``None`` when the
    primary method ran but produced too little text) and ``fallback_error``
    holds the OCR failure. ``__cause__`` is set to the fallback error by the
    raiser so tracebacks show the chain.
    """

    def __init__(
        self,
        kind: ErrorKind,
        detail: str = "",
        *,
        filename: str | None = None,
        primary_error: BaseException | None = None,
        fallback_error: ExtractionError | None = None,
    ) -> None:
        self.kind = kind
        self.detail = detail
        self.filename = filename
        self.primary_error = primary_error
        self.fallback_error = fallback_error
        super().__init__(self._compose_message())

    def _compose_message(self) -> str:
        parts = [self.kind.value]
        if self.filename:
            parts.append(f"[{self.filename}]")
        if self.detail:
            parts.append(self.detail)
        message = " ".join(parts)
        if self.fallback_error is not None:
            message += f" (fallback: {self.fallback_error.kind.value})"
        return message

    @property
    def fallback_attempted(self) -> bool:
        return self.fallback_error is not None


class OcrError(ExtractionError):
    """Failure inside the OCR fallback engine.

    Always one of OCR_INIT_FAILED, OCR_EMPTY_RESULT or OCR_RECOGNITION_FAILED.
    """
