from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from writings.cli.process_writings import main as process_writings_main
from writings.config import PipelineSettings

_DOCUMENT = (
    '<?xml version="1.0" encoding="utf-8"?>'
    '<html xmlns="http://www.w3.org/1999/xhtml"><body>'
    '<div class="ic"><h2>Custom</h2><p>Custom body</p></div>'
    '<div class="ic"><h2>Notes</h2><p>Notes body</p></div>'
    '<div class="ic"><h2>Preface</h2><p>Preface body</p></div>'
    "</body></html>"
)


@pytest.fixture(autouse=True)
def _clean_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("WRITINGS_SOURCE_DIR", "WRITINGS_OUTPUT_PATH", "WRITINGS_FILE_SUFFIX", "WRITINGS_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)


def test_cli_writes_manifest_and_skips_broken_files(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO)
    source_dir = tmp_path / "writings"
    source_dir.mkdir()
    (source_dir / "the-seven-valleys.xhtml").write_text(_DOCUMENT, encoding="utf-8")
    (source_dir / "broken.xhtml").write_bytes(b"")
    output = tmp_path / "generated" / "writings.json"

    exit_code = process_writings_main(["--source-dir", str(source_dir), "--output", str(output)])
    manifest = json.loads(output.read_text(encoding="utf-8"))

    assert exit_code == 0
    assert manifest["generatedAt"].endswith("Z")
    assert [item["id"] for item in manifest["items"]] == ["the-seven-valleys"]
    item = manifest["items"][0]
    assert item["title"] == "The Seven Valleys"
    assert [section["title"] for section in item["sections"]] == ["Preface", "Notes", "Custom"]
    assert "Failed to process broken.xhtml" in caplog.text
    assert "Wrote 1 item(s)" in caplog.text


def test_cli_writes_empty_manifest_when_no_inputs(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    source_dir = tmp_path / "empty"
    source_dir.mkdir()
    output = tmp_path / "writings.json"

    exit_code = process_writings_main(["--source-dir", str(source_dir), "--output", str(output)])

    assert exit_code == 0
    assert json.loads(output.read_text(encoding="utf-8"))["items"] == []
    assert "No .xhtml files found" in caplog.text


def test_cli_reads_locations_from_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    source_dir = tmp_path / "src"
    source_dir.mkdir()
    (source_dir / "gleanings.html").write_text(_DOCUMENT, encoding="utf-8")
    output = tmp_path / "out" / "manifest.json"
    monkeypatch.setenv("WRITINGS_SOURCE_DIR", str(source_dir))
    monkeypatch.setenv("WRITINGS_OUTPUT_PATH", str(output))
    monkeypatch.setenv("WRITINGS_FILE_SUFFIX", ".html")

    exit_code = process_writings_main([])

    assert exit_code == 0
    assert [item["id"] for item in json.loads(output.read_text(encoding="utf-8"))["items"]] == ["gleanings"]


def test_cli_returns_non_zero_when_output_cannot_be_written(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    source_dir = tmp_path / "writings"
    source_dir.mkdir()
    blocker = tmp_path / "blocker"
    blocker.write_text("file in the way", encoding="utf-8")

    exit_code = process_writings_main(["--source-dir", str(source_dir), "--output", str(blocker / "writings.json")])

    assert exit_code == 1
    assert "Failed to create output directory" in caplog.text


def test_cli_rejects_invalid_configuration(monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture) -> None:
    monkeypatch.setenv("WRITINGS_FILE_SUFFIX", "xhtml")

    assert process_writings_main([]) == 1
    assert "Configuration error" in caplog.text


def test_settings_from_env_applies_defaults_and_validation() -> None:
    settings = PipelineSettings.from_env({})

    assert settings.source_dir == Path("assets/writings")
    assert settings.output_path == Path("assets/generated/writings.json")
    assert settings.file_suffix == ".xhtml"
    assert settings.log_level == "INFO"

    assert PipelineSettings.from_env({"WRITINGS_LOG_LEVEL": "debug"}).log_level == "DEBUG"

    with pytest.raises(ValueError, match="WRITINGS_SOURCE_DIR cannot be empty"):
        PipelineSettings.from_env({"WRITINGS_SOURCE_DIR": "  "})
    with pytest.raises(ValueError, match="must start with"):
        PipelineSettings.from_env({"WRITINGS_FILE_SUFFIX": "xhtml"})
    with pytest.raises(ValueError, match="not a known logging level"):
        PipelineSettings.from_env({"WRITINGS_LOG_LEVEL": "LOUD"})
