"""Best-effort file diagnostics logged before extraction.

Purely observational: nothing here feeds back into extraction, and any
failure while gathering the data is logged at DEBUG and dropped.
"""

from __future__ import annotations

import logging
from pathlib import Path

logger = logging.getLogger(__name__)


def report_file_diagnostics(path: Path, filename: str, preview_bytes: int = 16) -> None:
    """Log size, extension and a hex preview of the leading bytes of an upload."""
    try:
        size = path.stat().st_size
        with open(path, "rb") as f:
            head = f.read(preview_bytes)
        extension = Path(filename).suffix.lower() or "<none>"
        preview = head.hex(" ")

        logger.info(
            "Upload diagnostics: %s size=%d ext=%s head=[%s]",
            path,
            size,
            extension,
            preview,
            extra={
                "upload_name": filename,
                "file_path": str(path),
                "size_bytes": size,
                "extension": extension,
                "head_hex": preview,
            },
        )
    except Exception as e:
        logger.debug("Diagnostics unavailable for %s: %s", filename, e)
