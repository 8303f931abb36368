"""Upload text extraction: single-file service and concurrent batch runner.

Each upload is extracted independently -- one file's failure does not block
the others, and every file gets its own OCR worker and temp artifact.  The
batch runner models concurrent uploads by running single-file extractions on
a thread pool.

Public API:
    extract(path, filename, settings=None, ocr_engine=None)
        -> ExtractionResult
    extract_files(files, settings=None, ocr_engine=None, max_workers=None)
        -> ExtractionBatchResult
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from pathlib import Path

from studydesk_ingest.config.settings import ExtractionSettings
from studydesk_ingest.extractor.classifier import classify
from studydesk_ingest.extractor.ocr import OcrEngine, TesseractWorker
from studydesk_ingest.extractor.service import DocumentExtractor, extract
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

__all__ = [
    "DocumentExtractor",
    "ErrorKind",
    "ExtractionBatchResult",
    "ExtractionError",
    "ExtractionMethod",
    "ExtractionResult",
    "FormatCategory",
    "OcrEngine",
    "OcrError",
    "SourceFile",
    "TesseractWorker",
    "classify",
    "extract",
    "extract_files",
]


@dataclass
class ExtractionBatchResult:
    """Aggregated outcome of extracting text for multiple uploads."""

    files_attempted: int = 0
    files_succeeded: int = 0
    files_failed: int = 0
    ocr_used: int = 0
    results: dict[str, ExtractionResult] = field(default_factory=dict)
    errors: dict[str, ExtractionError] = field(default_factory=dict)


def extract_files(
    files: Iterable[tuple[Path | str, str]],
    settings: ExtractionSettings | None = None,
    ocr_engine: OcrEngine | None = None,
    max_workers: int | None = None,
) -> ExtractionBatchResult:
    """Extract text from several uploads concurrently.

    Args:
        files: ``(path, filename)`` pairs. Filenames key the result maps and
            must be unique within a batch.
        settings: Extraction configuration shared by all calls.
        ocr_engine: Engine shared by all calls. It holds no per-call state;
            each recognition still builds its own worker and temp file.
        max_workers: Thread pool size (default ``settings.batch_max_workers``).

    Returns:
        ExtractionBatchResult with per-file results and errors.

    Raises:
        ValueError: Two entries share a filename.
    """
    settings = settings if settings is not None else ExtractionSettings()
    extractor = DocumentExtractor(settings, ocr_engine)
    batch = ExtractionBatchResult()
    pending = list(files)

    names = [filename for _, filename in pending]
    duplicates = sorted({name for name in names if names.count(name) > 1})
    if duplicates:
        raise ValueError(f"Duplicate filenames in batch: {', '.join(duplicates)}")

    if not pending:
        logger.info("No uploads to extract")
        return batch

    workers = max_workers or settings.batch_max_workers
    logger.info("Extracting %d uploads with %d workers", len(pending), workers)

    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="extract") as pool:
        futures = {
            pool.submit(extractor.extract, path, filename): filename
            for path, filename in pending
        }
        for future in as_completed(futures):
            filename = futures[future]
            batch.files_attempted += 1
            try:
                result = future.result()
            except ExtractionError as e:
                batch.files_failed += 1
                batch.errors[filename] = e
                continue
            except Exception as e:
                logger.exception("Unexpected error extracting %s", filename)
                batch.files_failed += 1
                batch.errors[filename] = ExtractionError(
                    ErrorKind.DECODE_FAILED,
                    f"unexpected: {e}",
                    filename=filename,
                    primary_error=e,
                )
                continue

            batch.files_succeeded += 1
            batch.results[filename] = result
            if result.method is ExtractionMethod.OCR:
                batch.ocr_used += 1

    logger.info(
        "Extraction batch complete: %d attempted, %d succeeded, %d failed, "
        "%d via OCR",
        batch.files_attempted,
        batch.files_succeeded,
        batch.files_failed,
        batch.ocr_used,
    )
    return batch
