"""Command-line extraction of a single stored upload.

Startup sequence:
    1. Load pipeline configuration (needed for log_dir and rotation)
    2. Setup logging (must happen before any code that logs)
    3. Load extraction configuration
    4. Extract the file and print the text (or a JSON summary)

Exit status is 0 on success, 1 on an ExtractionError.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from studydesk_ingest.config import ExtractionSettings, PipelineSettings
from studydesk_ingest.extractor import DocumentExtractor, ExtractionError
from studydesk_ingest.logging import setup_logging

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="studydesk-extract",
        description="Extract text from an uploaded document (PDF, DOCX, text, image).",
    )
    parser.add_argument("path", type=Path, help="Location of the stored upload")
    parser.add_argument(
        "--name",
        help="Original filename as uploaded (defaults to the file's own name)",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print a JSON object with text, category and method",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """Run a single extraction from the command line."""
    args = _build_parser().parse_args(argv)

    # 1. Load pipeline config first -- needed for logging paths
    pipeline = PipelineSettings()

    # 2. Setup logging BEFORE anything else logs
    setup_logging(
        log_dir=pipeline.log_dir,
        log_level_console=logging.WARNING,
        max_bytes=pipeline.log_max_bytes,
        backup_count=pipeline.log_backup_count,
    )

    # 3. Load extraction config
    settings = ExtractionSettings()
    logger.info(
        "Config loaded -- extraction: min_text_layer_chars=%s, ocr_language=%s, "
        "temp_dir=%s",
        settings.min_text_layer_chars,
        settings.ocr_language,
        settings.resolved_temp_dir(),
    )

    # 4. Extract
    filename = args.name or args.path.name
    try:
        result = DocumentExtractor(settings).extract(args.path, filename)
    except ExtractionError as e:
        print(f"error: {e.kind.value}: {e}", file=sys.stderr)
        return 1

    if args.json:
        print(
            json.dumps(
                {
                    "filename": filename,
                    "category": result.category.value,
                    "method": result.method.value,
                    "char_count": result.char_count,
                    "page_count": result.page_count,
                    "text": result.text,
                },
                ensure_ascii=False,
            )
        )
    else:
        print(result.text)
    return 0
