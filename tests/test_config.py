"""
Settings tests
"""
from studydesk_ingest.config import ExtractionSettings, PipelineSettings, load_all_settings
from studydesk_ingest.config.settings import PROJECT_ROOT


class TestExtractionSettings:
    def test_defaults(self):
        settings = ExtractionSettings()

        assert settings.min_text_layer_chars == 20
        assert settings.ocr_language == "eng"

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("EXTRACTION_OCR_LANGUAGE", "eng+deu")
        monkeypatch.setenv("EXTRACTION_MIN_TEXT_LAYER_CHARS", "50")

        settings = ExtractionSettings()

        assert settings.ocr_language == "eng+deu"
        assert settings.min_text_layer_chars == 50

    def test_init_beats_env(self, monkeypatch):
        monkeypatch.setenv("EXTRACTION_OCR_DPI", "150")

        assert ExtractionSettings(ocr_dpi=200).ocr_dpi == 200

    def test_relative_temp_dir_resolves_under_project_root(self):
        settings = ExtractionSettings(temp_dir="tmp/ocr")

        assert settings.resolved_temp_dir() == (PROJECT_ROOT / "tmp" / "ocr").resolve()

    def test_absolute_temp_dir_kept(self, tmp_path):
        settings = ExtractionSettings(temp_dir=str(tmp_path / "ocr"))

        assert settings.resolved_temp_dir() == (tmp_path / "ocr").resolve()


def test_load_all_settings():
    extraction, pipeline = load_all_settings()

    assert isinstance(extraction, ExtractionSettings)
    assert isinstance(pipeline, PipelineSettings)
