"""Logging configuration for the ingestion pipeline."""

from .setup import setup_logging

__all__ = ["setup_logging"]
