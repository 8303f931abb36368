"""Per-upload text extraction service.

Routes a classified upload to its format strategy:

- **PDF** -- embedded text layer, OCR fallback when it is too short.
- **DOCX** -- paragraph text, no fallback.
- **Plain text** -- verbatim UTF-8.
- **Image** -- OCR only.
- **Unknown** -- last-resort UTF-8 decode.

Each call either returns an ExtractionResult or raises an ExtractionError;
unexpected exceptions from a strategy are wrapped so callers never see an
unstructured fault. The OCR engine is injected, not shared globally.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import assert_never

from studydesk_ingest.config.settings import ExtractionSettings
from studydesk_ingest.extractor.classifier import classify
from studydesk_ingest.extractor.diagnostics import report_file_diagnostics
from studydesk_ingest.extractor.docx_extractor import extract_docx
from studydesk_ingest.extractor.ocr import OcrEngine
from studydesk_ingest.extractor.pdf_extractor import extract_pdf
from studydesk_ingest.extractor.quality import meaningful_char_count
from studydesk_ingest.extractor.text_extractor import extract_plain_text, extract_unknown
from studydesk_ingest.extractor.types import (
    ErrorKind,
    ExtractionError,
    ExtractionMethod,
    ExtractionResult,
    FormatCategory,
    SourceFile,
)

logger = logging.getLogger(__name__)

__all__ = [
    "DocumentExtractor",
    "extract",
]


class DocumentExtractor:
    """Extracts text from uploaded files.

    Args:
        settings: Extraction configuration. Loaded from YAML/env if omitted.
        ocr_engine: OCR engine for scanned PDFs and images. A Tesseract-backed
            engine is built from ``settings`` if omitted.
    """

    def __init__(
        self,
        settings: ExtractionSettings | None = None,
        ocr_engine: OcrEngine | None = None,
    ) -> None:
        self.settings = settings if settings is not None else ExtractionSettings()
        self.ocr_engine = ocr_engine if ocr_engine is not None else OcrEngine(self.settings)

    def extract(self, path: Path | str, filename: str) -> ExtractionResult:
        """Extract text from the upload stored at *path*.

        Args:
            path: Where the upload handler stored the bytes.
            filename: Original filename declared by the client.

        Returns:
            ExtractionResult with the text, its category and method.

        Raises:
            ExtractionError: On any failure, tagged with an ErrorKind.
        """
        source = SourceFile(Path(path), filename)

        if self.settings.diagnostics_enabled:
            report_file_diagnostics(
                source.path, filename, self.settings.diagnostic_preview_bytes
            )

        if not source.path.is_file():
            logger.error("Upload %s not found at %s", filename, source.path)
            raise ExtractionError(
                ErrorKind.FILE_NOT_FOUND, str(source.path), filename=filename
            )

        category = FormatCategory.UNKNOWN
        try:
            category = classify(
                source.path, filename, self.settings.signature_probe_bytes
            )
            result = self.extract_category(category, source)
        except ExtractionError as e:
            logger.warning(
                "Extraction failed for %s (%s): %s",
                filename,
                category.value,
                e,
                extra={"category": category.value, "error_kind": e.kind.value},
            )
            raise
        except Exception as e:
            logger.exception("Unexpected error extracting %s", filename)
            raise ExtractionError(
                ErrorKind.DECODE_FAILED,
                f"unexpected: {e}",
                filename=filename,
                primary_error=e,
            ) from e

        logger.info(
            "Extracted %s: %s via %s (%d chars)",
            filename,
            category.value,
            result.method.value,
            result.char_count,
            extra={"category": category.value, "method": result.method.value},
        )
        return result

    def extract_category(
        self, category: FormatCategory, source: SourceFile
    ) -> ExtractionResult:
        """Run the strategy for an already classified upload."""
        try:
            data = source.read_bytes()
        except FileNotFoundError as e:
            raise ExtractionError(
                ErrorKind.FILE_NOT_FOUND, str(source.path), filename=source.filename
            ) from e
        except OSError as e:
            raise ExtractionError(
                ErrorKind.DECODE_FAILED,
                f"cannot read upload: {e}",
                filename=source.filename,
                primary_error=e,
            ) from e

        match category:
            case FormatCategory.PDF:
                return extract_pdf(source, data, self.settings, self.ocr_engine)
            case FormatCategory.DOCX:
                return extract_docx(source, data)
            case FormatCategory.PLAIN_TEXT:
                return extract_plain_text(source, data)
            case FormatCategory.IMAGE:
                return self._extract_image(source, data)
            case FormatCategory.UNKNOWN:
                return extract_unknown(source, data)
            case _:
                assert_never(category)

    def _extract_image(self, source: SourceFile, data: bytes) -> ExtractionResult:
        text = self.ocr_engine.recognize_bytes(
            data, source.extension, filename=source.filename
        )
        return ExtractionResult(
            text=text,
            category=FormatCategory.IMAGE,
            method=ExtractionMethod.OCR,
            char_count=meaningful_char_count(text),
        )


def extract(
    path: Path | str,
    filename: str,
    settings: ExtractionSettings | None = None,
    ocr_engine: OcrEngine | None = None,
) -> ExtractionResult:
    """Extract text from one upload with a freshly built extractor."""
    return DocumentExtractor(settings, ocr_engine).extract(path, filename)
