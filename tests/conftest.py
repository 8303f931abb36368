"""
Test configuration and fixtures
"""
import shutil
import threading
import zipfile
from pathlib import Path

import docx
import pymupdf
import pytest
from PIL import Image

from studydesk_ingest.config.settings import ExtractionSettings
from studydesk_ingest.extractor import DocumentExtractor, OcrEngine


requires_tesseract = pytest.mark.skipif(
    shutil.which("tesseract") is None, reason="tesseract binary not installed"
)


class FakeWorker:
    """OCR worker double that records its lifecycle."""

    def __init__(self, backend):
        self.backend = backend
        self.language = None
        self.initialized = False
        self.terminated = False
        self.recognized_path = None
        self.artifact_existed = None

    def set_language(self, language):
        self.language = language

    def initialize(self):
        if self.backend.fail_on == "initialize":
            raise RuntimeError("tesseract is not installed or it's not in your PATH")
        self.initialized = True

    def recognize(self, path):
        self.recognized_path = path
        self.artifact_existed = path.exists()
        if self.backend.barrier is not None:
            self.backend.barrier.wait(timeout=10)
        if self.backend.fail_on == "recognize":
            raise RuntimeError("image file is truncated")
        text = self.backend.text
        return text(path) if callable(text) else text

    def terminate(self):
        self.terminated = True


class FakeOcrBackend:
    """Worker factory handing out FakeWorkers.

    Args:
        text: Recognized text, or a callable taking the artifact path.
        fail_on: "factory", "initialize" or "recognize" to simulate failures.
        barrier: Optional threading.Barrier every recognize() waits on.
    """

    def __init__(self, text="Recognized lecture notes text", fail_on=None, barrier=None):
        self.text = text
        self.fail_on = fail_on
        self.barrier = barrier
        self.workers = []
        self._lock = threading.Lock()

    def __call__(self, settings):
        if self.fail_on == "factory":
            raise OSError("cannot spawn worker")
        worker = FakeWorker(self)
        with self._lock:
            self.workers.append(worker)
        return worker

    @property
    def calls(self):
        return len(self.workers)


@pytest.fixture
def settings(tmp_path):
    """Extraction settings isolated to a per-test temp directory"""
    return ExtractionSettings(
        temp_dir=str(tmp_path / "ocr"),
        min_text_layer_chars=20,
        ocr_language="eng",
        diagnostics_enabled=True,
    )


@pytest.fixture
def ocr_backend():
    return FakeOcrBackend()


@pytest.fixture
def extractor(settings, ocr_backend):
    """Extractor wired to the fake OCR backend"""
    return DocumentExtractor(settings, OcrEngine(settings, worker_factory=ocr_backend))


@pytest.fixture
def uploads(tmp_path):
    path = tmp_path / "uploads"
    path.mkdir()
    return path


def assert_no_artifacts(settings):
    temp_dir = settings.resolved_temp_dir()
    leftovers = list(temp_dir.iterdir()) if temp_dir.exists() else []
    assert leftovers == []


def make_pdf(path: Path, pages):
    """Write a PDF with one page per entry; empty strings give blank pages."""
    doc = pymupdf.open()
    for text in pages:
        page = doc.new_page()
        if text:
            page.insert_text((72, 72), text, fontsize=11)
    doc.save(str(path))
    doc.close()
    return path


def make_docx(path: Path, paragraphs):
    document = docx.Document()
    for paragraph in paragraphs:
        document.add_paragraph(paragraph)
    document.save(str(path))
    return path


def make_image(path: Path, color="white", fmt=None):
    Image.new("RGB", (200, 100), color).save(path, format=fmt)
    return path


def make_unreadable_zip(path: Path):
    """Write a PK-headed DOCX-like archive whose central directory declares
    an unsupported extraction version, so zipfile raises NotImplementedError.
    """
    with zipfile.ZipFile(path, "w", compression=zipfile.ZIP_STORED) as archive:
        archive.writestr("word/document.xml", bytes(range(256)))
    data = bytearray(path.read_bytes())
    entry = data.find(b"PK\x01\x02")
    data[entry + 6 : entry + 8] = (145).to_bytes(2, "little")  # version 14.5
    path.write_bytes(bytes(data))
    return path
