"""Pydantic settings models for the StudyDesk ingestion pipeline.

Two settings classes load from separate YAML config files with environment
variable override support. Source priority (highest to lowest):

    1. Init arguments (e.g., ExtractionSettings(temp_dir=...) in tests)
    2. Environment variables (with prefix, e.g., EXTRACTION_OCR_LANGUAGE)
    3. .env file
    4. YAML config file (e.g., config/extraction.yaml)
    5. Default values defined here

Config paths are resolved relative to PROJECT_ROOT so the extractor works
regardless of the current working directory of the hosting web process.
"""

from pathlib import Path

from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

# Resolve project root: settings.py -> config/ -> studydesk_ingest/ -> src/ -> repo root
PROJECT_ROOT = Path(__file__).resolve().parents[3]

_CONFIG_DIR = PROJECT_ROOT / "config"
_ENV_FILE = PROJECT_ROOT / ".env"


class ExtractionSettings(BaseSettings):
    """Text extraction: content thresholds, OCR worker, temp files."""

    # Below this many characters (after strip()) a PDF has no usable text layer
    min_text_layer_chars: int = 20

    # Classifier magic-number probe
    signature_probe_bytes: int = 16

    # OCR worker
    ocr_language: str = "eng"  # Tesseract syntax, e.g. "eng+fra"
    ocr_dpi: int = 300
    max_pages_for_ocr: int = 50
    tesseract_cmd: str = "tesseract"

    # Shared across all concurrent OCR calls; created on demand
    temp_dir: str = "tmp/ocr"

    # Diagnostic reporter
    diagnostics_enabled: bool = True
    diagnostic_preview_bytes: int = 16

    # Batch orchestrator
    batch_max_workers: int = 4

    model_config = SettingsConfigDict(
        yaml_file=str(_CONFIG_DIR / "extraction.yaml"),
        env_file=str(_ENV_FILE),
        env_prefix="EXTRACTION_",
        extra="ignore",
    )

    def resolved_temp_dir(self) -> Path:
        """Return the OCR temp directory as an absolute path."""
        path = Path(self.temp_dir)
        if not path.is_absolute():
            path = PROJECT_ROOT / path
        return path.resolve()

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            YamlConfigSettingsSource(settings_cls),
            file_secret_settings,
        )


class PipelineSettings(BaseSettings):
    """Pipeline operations: logging paths and rotation."""

    log_dir: str = "logs"
    log_max_bytes: int = 10_485_760  # 10MB
    log_backup_count: int = 5

    model_config = SettingsConfigDict(
        yaml_file=str(_CONFIG_DIR / "pipeline.yaml"),
        env_prefix="PIPELINE_",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            YamlConfigSettingsSource(settings_cls),
            file_secret_settings,
        )
