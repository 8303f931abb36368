"""
Format classifier tests
"""
import zipfile

import pytest

from studydesk_ingest.extractor.classifier import classify, signature_category
from studydesk_ingest.extractor.types import FormatCategory
from tests.conftest import make_docx, make_image, make_pdf, make_unreadable_zip


class TestExtensionRules:
    """Recognised extensions decide the category"""

    @pytest.mark.parametrize(
        "filename,expected",
        [
            ("lecture.pdf", FormatCategory.PDF),
            ("LECTURE.PDF", FormatCategory.PDF),
            ("essay.docx", FormatCategory.DOCX),
            ("old-essay.doc", FormatCategory.DOCX),
            ("notes.txt", FormatCategory.PLAIN_TEXT),
            ("photo.jpg", FormatCategory.IMAGE),
            ("photo.JPEG", FormatCategory.IMAGE),
            ("scan.png", FormatCategory.IMAGE),
            ("scan.tiff", FormatCategory.IMAGE),
        ],
    )
    def test_extension_category(self, uploads, filename, expected):
        path = uploads / "stored"
        path.write_bytes(b"irrelevant content")

        assert classify(path, filename) == expected

    def test_extension_wins_over_content(self, uploads):
        """A .txt name holding PDF bytes is still plain text"""
        path = make_pdf(uploads / "stored", ["Some text"])

        assert classify(path, "notes.txt") == FormatCategory.PLAIN_TEXT


class TestSignatureProbe:
    """Content decides when the extension is missing or unknown"""

    def test_pdf_signature(self, uploads):
        path = make_pdf(uploads / "upload", ["Chapter one"])
        assert classify(path, "upload") == FormatCategory.PDF

    def test_docx_container(self, uploads):
        path = make_docx(uploads / "blob.bin", ["Paragraph"])
        assert classify(path, "blob.bin") == FormatCategory.DOCX

    def test_plain_zip_is_unknown(self, uploads):
        path = uploads / "archive.zip"
        with zipfile.ZipFile(path, "w") as archive:
            archive.writestr("readme.txt", "hello")

        assert classify(path, "archive.zip") == FormatCategory.UNKNOWN

    def test_png_signature(self, uploads):
        path = make_image(uploads / "photo.dat", fmt="PNG")
        assert classify(path, "photo.dat") == FormatCategory.IMAGE

    def test_jpeg_signature(self, uploads):
        path = make_image(uploads / "photo", fmt="JPEG")
        assert classify(path, "photo") == FormatCategory.IMAGE

    def test_unmatched_content_is_unknown(self, uploads):
        path = uploads / "data.xyz"
        path.write_bytes(bytes(range(256)))

        assert classify(path, "data.xyz") == FormatCategory.UNKNOWN

    def test_unreadable_zip_is_unknown(self, uploads):
        """Archives zipfile refuses to open classify as UNKNOWN"""
        path = make_unreadable_zip(uploads / "upload")

        assert classify(path, "upload") == FormatCategory.UNKNOWN

    def test_zip_open_errors_never_raise(self, uploads, monkeypatch):
        def refuse(*args, **kwargs):
            raise ValueError("negative seek value")

        path = make_docx(uploads / "blob.bin", ["Paragraph"])
        monkeypatch.setattr(zipfile, "ZipFile", refuse)

        assert classify(path, "blob.bin") == FormatCategory.UNKNOWN

    def test_missing_file_never_raises(self, tmp_path):
        assert classify(tmp_path / "gone", "gone.bin") == FormatCategory.UNKNOWN

    def test_missing_file_with_extension(self, tmp_path):
        assert classify(tmp_path / "gone", "gone.pdf") == FormatCategory.PDF


class TestSignatureCategory:
    def test_webp_requires_riff_header(self):
        assert signature_category(b"RIFF\x00\x00\x00\x00WEBPVP8 ") == FormatCategory.IMAGE
        assert signature_category(b"XXXX\x00\x00\x00\x00WEBPVP8 ") == FormatCategory.UNKNOWN

    def test_ole2_is_docx(self):
        assert signature_category(b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1") == FormatCategory.DOCX

    def test_empty_buffer(self):
        assert signature_category(b"") == FormatCategory.UNKNOWN
