"""Minimum-content checks for extraction output.

Two decisions in the pipeline depend on how much text came back:

- ``has_usable_text_layer``: whether a PDF's structural text is enough to
  skip OCR.
- ``is_blank``: whether OCR (or a last-resort decode) produced nothing.

The text-layer threshold applies to the text with leading and trailing
whitespace stripped, so a layer of only page breaks and spaces is absent;
whitespace between words still counts.
"""

from __future__ import annotations

import logging
import re

from studydesk_ingest.config.settings import ExtractionSettings

logger = logging.getLogger(__name__)

_WHITESPACE_PATTERN = re.compile(r"\s+")


def meaningful_char_count(text: str) -> int:
    """Count characters in *text* excluding all whitespace."""
    return len(_WHITESPACE_PATTERN.sub("", text))


def is_blank(text: str | None) -> bool:
    return not text or not text.strip()


def has_usable_text_layer(text: str, settings: ExtractionSettings) -> bool:
    """Check whether a PDF text layer is long enough to return as-is.

    Args:
        text: Text extracted from the PDF's embedded text layer.
        settings: Extraction settings with ``min_text_layer_chars``.

    Returns:
        True if the stripped text reaches the threshold, False if OCR
        should be attempted instead.
    """
    length = len(text.strip())
    if length < settings.min_text_layer_chars:
        logger.info(
            "Text layer below minimum content: %d chars < %d",
            length,
            settings.min_text_layer_chars,
        )
        return False
    return True
