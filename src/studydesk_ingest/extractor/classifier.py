"""Format classification from declared extension and leading bytes.

The declared extension wins whenever it is one we recognise. Otherwise a
magic-number probe of the file's leading bytes decides, and anything that
matches neither is UNKNOWN. Classification never raises.
"""

from __future__ import annotations

import logging
import zipfile
from pathlib import Path

from studydesk_ingest.extractor.types import FormatCategory

logger = logging.getLogger(__name__)

EXTENSION_CATEGORIES: dict[str, FormatCategory] = {
    ".pdf": FormatCategory.PDF,
    ".docx": FormatCategory.DOCX,
    ".doc": FormatCategory.DOCX,
    ".txt": FormatCategory.PLAIN_TEXT,
    ".png": FormatCategory.IMAGE,
    ".jpg": FormatCategory.IMAGE,
    ".jpeg": FormatCategory.IMAGE,
    ".gif": FormatCategory.IMAGE,
    ".bmp": FormatCategory.IMAGE,
    ".tif": FormatCategory.IMAGE,
    ".tiff": FormatCategory.IMAGE,
    ".webp": FormatCategory.IMAGE,
}

# (offset, signature, category); first match wins
_SIGNATURES: list[tuple[int, bytes, FormatCategory]] = [
    (0, b"%PDF-", FormatCategory.PDF),
    (0, b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1", FormatCategory.DOCX),  # OLE2 .doc
    (0, b"\x89PNG\r\n\x1a\n", FormatCategory.IMAGE),
    (0, b"\xff\xd8\xff", FormatCategory.IMAGE),
    (0, b"GIF87a", FormatCategory.IMAGE),
    (0, b"GIF89a", FormatCategory.IMAGE),
    (0, b"BM", FormatCategory.IMAGE),
    (0, b"II*\x00", FormatCategory.IMAGE),
    (0, b"MM\x00*", FormatCategory.IMAGE),
    (8, b"WEBP", FormatCategory.IMAGE),
]

_ZIP_SIGNATURE = b"PK\x03\x04"


def signature_category(data: bytes) -> FormatCategory:
    """Match a leading byte buffer against known magic numbers.

    ZIP containers are not resolved here (a ZIP is only a DOCX if it holds
    ``word/document.xml``), so a bare ZIP header yields UNKNOWN.
    """
    for offset, signature, category in _SIGNATURES:
        if data[offset : offset + len(signature)] == signature:
            if signature == b"WEBP" and not data.startswith(b"RIFF"):
                continue
            return category
    return FormatCategory.UNKNOWN


def _is_docx_container(path: Path) -> bool:
    # Corrupt archives raise more than BadZipFile, e.g. NotImplementedError
    # for an unknown version; any failure means "not DOCX"
    try:
        with zipfile.ZipFile(path) as archive:
            return "word/document.xml" in archive.namelist()
    except Exception as e:
        logger.debug("Cannot open ZIP container %s: %s", path.name, e)
        return False


def classify(path: Path, filename: str, probe_bytes: int = 16) -> FormatCategory:
    """Assign a FormatCategory to an uploaded file.

    Args:
        path: Location of the stored upload.
        filename: Original filename declared by the client.
        probe_bytes: Number of leading bytes to read for the signature probe.

    Returns:
        The category; UNKNOWN when neither extension nor content matches.
    """
    extension = Path(filename).suffix.lower()
    category = EXTENSION_CATEGORIES.get(extension)
    if category is not None:
        logger.debug("Classified %s as %s by extension", filename, category.value)
        return category

    try:
        with open(path, "rb") as f:
            head = f.read(probe_bytes)
    except OSError as e:
        logger.debug("Signature probe failed for %s: %s", filename, e)
        return FormatCategory.UNKNOWN

    if head.startswith(_ZIP_SIGNATURE):
        category = (
            FormatCategory.DOCX if _is_docx_container(path) else FormatCategory.UNKNOWN
        )
    else:
        category = signature_category(head)

    logger.debug(
        "Classified %s as %s by content signature (extension=%r)",
        filename,
        category.value,
        extension,
    )
    return category
