"""OCR fallback engine: per-call Tesseract worker plus temp-file lifecycle.

Every call to ``OcrEngine.recognize_bytes`` runs the same sequence:

1. Ensure the shared temp directory exists (idempotent, safe under races).
2. Write the input bytes to a uniquely named temp artifact.
3. Build a fresh worker from the factory, set its language, initialize it.
4. Recognize the artifact.
5. Terminate the worker and delete the artifact.

Steps 2-5 run inside an ``ExitStack`` so the worker is terminated and the
artifact deleted on success, on recognition failure, and on initialization
failure alike. No worker is shared between calls; concurrent uploads only
share the temp directory, and artifact names are unique per call.

Rasterized PDF pages are rendered with PyMuPDF and recognized page by page,
the same way image uploads are recognized frame by frame.
"""

from __future__ import annotations

import io
import logging
import re
import time
import uuid
from collections.abc import Callable, Iterator
from contextlib import ExitStack, contextmanager
from pathlib import Path
from typing import Protocol

import pymupdf
import pytesseract
from PIL import Image, ImageSequence

from studydesk_ingest.config.settings import ExtractionSettings
from studydesk_ingest.extractor.quality import is_blank
from studydesk_ingest.extractor.types import ErrorKind, OcrError

logger = logging.getLogger(__name__)

_SAFE_SUFFIX = re.compile(r"\.[A-Za-z0-9]{1,10}")


class OcrWorker(Protocol):
    """Recognition worker with an explicit lifecycle."""

    def set_language(self, language: str) -> None: ...

    def initialize(self) -> None: ...

    def recognize(self, path: Path) -> str: ...

    def terminate(self) -> None: ...


WorkerFactory = Callable[[ExtractionSettings], OcrWorker]


class TesseractWorker:
    """OCR worker backed by the Tesseract binary through pytesseract."""

    def __init__(self, settings: ExtractionSettings) -> None:
        self._settings = settings
        self._language = settings.ocr_language
        self._ready = False

    def set_language(self, language: str) -> None:
        self._language = language

    def initialize(self) -> None:
        """Verify the Tesseract binary and the requested language packs.

        Raises:
            pytesseract.TesseractNotFoundError: Binary is not installed.
            RuntimeError: A requested language pack is missing.
        """
        # Configure tesseract executable path if non-default
        if self._settings.tesseract_cmd != "tesseract":
            pytesseract.pytesseract.tesseract_cmd = self._settings.tesseract_cmd

        version = pytesseract.get_tesseract_version()
        available = set(pytesseract.get_languages(config=""))
        missing = [lang for lang in self._language.split("+") if lang not in available]
        if missing:
            raise RuntimeError(
                f"Tesseract language data not installed: {', '.join(missing)}"
            )

        self._ready = True
        logger.debug("Tesseract %s ready (lang=%s)", version, self._language)

    def recognize(self, path: Path) -> str:
        if not self._ready:
            raise RuntimeError("Worker used before initialize()")

        page_texts: list[str] = []
        for image in self._iter_images(path):
            text = pytesseract.image_to_string(image, lang=self._language)
            if text and text.strip():
                page_texts.append(text.strip())
        return "\n\n".join(page_texts)

    def terminate(self) -> None:
        self._ready = False

    def _iter_images(self, path: Path) -> Iterator[Image.Image]:
        if path.suffix.lower() == ".pdf":
            yield from self._render_pdf_pages(path)
            return

        with Image.open(path) as img:
            for frame in ImageSequence.Iterator(img):
                yield frame.convert("RGB")

    def _render_pdf_pages(self, path: Path) -> Iterator[Image.Image]:
        with pymupdf.open(str(path)) as doc:
            if len(doc) > self._settings.max_pages_for_ocr:
                raise ValueError(
                    f"too_many_pages_for_ocr ({len(doc)} > "
                    f"{self._settings.max_pages_for_ocr})"
                )
            for page in doc:
                # Render at configured DPI (default 300) for OCR quality
                pix = page.get_pixmap(dpi=self._settings.ocr_dpi)
                yield Image.open(io.BytesIO(pix.tobytes("png")))


def _remove_artifact(path: Path) -> None:
    try:
        path.unlink(missing_ok=True)
    except OSError:
        logger.warning("Could not delete OCR temp file %s", path, exc_info=True)


class OcrEngine:
    """Converts raster or scanned content to text.

    Args:
        settings: Extraction settings (temp dir, language, DPI, page guard).
        worker_factory: Callable building one worker per call. Defaults to
            ``TesseractWorker``; tests inject fakes here.
    """

    def __init__(
        self,
        settings: ExtractionSettings,
        worker_factory: WorkerFactory = TesseractWorker,
    ) -> None:
        self._settings = settings
        self._worker_factory = worker_factory

    @property
    def temp_dir(self) -> Path:
        return self._settings.resolved_temp_dir()

    def recognize_bytes(
        self,
        data: bytes,
        suffix: str = "",
        *,
        filename: str | None = None,
    ) -> str:
        """Recognize text in *data* through a temp file and a fresh worker.

        Args:
            data: Raw file bytes (an image, or a PDF to rasterize).
            suffix: File suffix for the temp artifact; ``.pdf`` selects page
                rendering, anything else is opened as an image.
            filename: Original filename, for logs and errors only.

        Returns:
            Recognized text, stripped of surrounding whitespace.

        Raises:
            OcrError: OCR_INIT_FAILED, OCR_RECOGNITION_FAILED or
                OCR_EMPTY_RESULT. The temp artifact is gone in every case.
        """
        started = time.monotonic()

        with ExitStack() as stack:
            artifact = stack.enter_context(self._temp_artifact(data, suffix, filename))
            worker = stack.enter_context(self._acquire_worker(filename))
            try:
                text = worker.recognize(artifact)
            except Exception as e:
                logger.warning("OCR recognition failed for %s: %s", filename, e)
                raise OcrError(
                    ErrorKind.OCR_RECOGNITION_FAILED,
                    str(e),
                    filename=filename,
                ) from e

        if is_blank(text):
            logger.warning("OCR produced no text for %s", filename)
            raise OcrError(ErrorKind.OCR_EMPTY_RESULT, filename=filename)

        text = text.strip()
        logger.info(
            "OCR recognized %d chars from %s in %.2fs",
            len(text),
            filename,
            time.monotonic() - started,
        )
        return text

    @contextmanager
    def _temp_artifact(
        self, data: bytes, suffix: str, filename: str | None
    ) -> Iterator[Path]:
        if not _SAFE_SUFFIX.fullmatch(suffix):
            suffix = ""
        temp_dir = self.temp_dir
        path = temp_dir / f"{time.time_ns()}_{uuid.uuid4().hex}{suffix.lower()}"

        try:
            try:
                temp_dir.mkdir(parents=True, exist_ok=True)
                path.write_bytes(data)
            except OSError as e:
                raise OcrError(
                    ErrorKind.OCR_INIT_FAILED,
                    f"cannot write temp file: {e}",
                    filename=filename,
                ) from e
            logger.debug("Wrote OCR temp file %s (%d bytes)", path.name, len(data))
            yield path
        finally:
            _remove_artifact(path)

    @contextmanager
    def _acquire_worker(self, filename: str | None) -> Iterator[OcrWorker]:
        try:
            worker = self._worker_factory(self._settings)
        except Exception as e:
            raise OcrError(
                ErrorKind.OCR_INIT_FAILED, str(e), filename=filename
            ) from e

        try:
            try:
                worker.set_language(self._settings.ocr_language)
                worker.initialize()
            except Exception as e:
                logger.warning("OCR worker failed to initialize: %s", e)
                raise OcrError(
                    ErrorKind.OCR_INIT_FAILED, str(e), filename=filename
                ) from e
            yield worker
        finally:
            try:
                worker.terminate()
            except Exception:
                logger.warning("OCR worker did not terminate cleanly", exc_info=True)
