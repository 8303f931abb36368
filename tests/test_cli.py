"""
Command-line entry point tests
"""
import json
import logging

import pytest

from studydesk_ingest.cli import main


@pytest.fixture
def isolated_logging(tmp_path, monkeypatch):
    """Point log output at tmp_path and restore root handlers afterwards"""
    monkeypatch.setenv("PIPELINE_LOG_DIR", str(tmp_path / "logs"))
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    yield tmp_path / "logs"
    for handler in root.handlers:
        if handler not in saved_handlers:
            handler.close()
    root.handlers[:] = saved_handlers
    root.setLevel(saved_level)


class TestMain:
    def test_prints_text(self, uploads, isolated_logging, capsys):
        path = uploads / "stored-upload"
        path.write_bytes(b"Hello world")

        assert main([str(path), "--name", "notes.txt"]) == 0

        assert capsys.readouterr().out == "Hello world\n"

    def test_json_output(self, uploads, isolated_logging, capsys):
        path = uploads / "notes.txt"
        path.write_bytes(b"Hello world")

        assert main([str(path), "--json"]) == 0

        payload = json.loads(capsys.readouterr().out)
        assert payload["filename"] == "notes.txt"
        assert payload["category"] == "plain_text"
        assert payload["method"] == "direct_parse"
        assert payload["text"] == "Hello world"

    def test_error_exit_status(self, tmp_path, isolated_logging, capsys):
        assert main([str(tmp_path / "gone.pdf")]) == 1

        assert "file_not_found" in capsys.readouterr().err

    def test_writes_json_log(self, uploads, isolated_logging):
        path = uploads / "notes.txt"
        path.write_bytes(b"Hello world")

        main([str(path)])
        for handler in logging.getLogger().handlers:
            handler.flush()

        lines = (isolated_logging / "ingest.log").read_text(encoding="utf-8").splitlines()
        records = [json.loads(line) for line in lines]
        assert any(r.get("method") == "direct_parse" for r in records)
        assert all("component" in r and "level" in r for r in records)
