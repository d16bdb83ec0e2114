"""Runtime configuration for the writings manifest pipeline."""

from __future__ import annotations

from dataclasses import dataclass
import logging
import os
from pathlib import Path
from typing import Mapping


DEFAULT_SOURCE_DIR = "assets/writings"
DEFAULT_OUTPUT_PATH = "assets/generated/writings.json"
DEFAULT_FILE_SUFFIX = ".xhtml"
DEFAULT_LOG_LEVEL = "INFO"


@dataclass(frozen=True, slots=True)
class PipelineSettings:
    """Validated locations and options for one pipeline run."""

    source_dir: Path
    output_path: Path
    file_suffix: str = DEFAULT_FILE_SUFFIX
    log_level: str = DEFAULT_LOG_LEVEL

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "PipelineSettings":
        source: Mapping[str, str] = os.environ if environ is None else environ

        source_dir_raw = source.get("WRITINGS_SOURCE_DIR", DEFAULT_SOURCE_DIR).strip()
        output_path_raw = source.get("WRITINGS_OUTPUT_PATH", DEFAULT_OUTPUT_PATH).strip()
        suffix_raw = source.get("WRITINGS_FILE_SUFFIX", DEFAULT_FILE_SUFFIX).strip()
        log_level_raw = source.get("WRITINGS_LOG_LEVEL", DEFAULT_LOG_LEVEL).strip().upper()

        if not source_dir_raw:
            raise ValueError("WRITINGS_SOURCE_DIR cannot be empty")
        if not output_path_raw:
            raise ValueError("WRITINGS_OUTPUT_PATH cannot be empty")
        if not suffix_raw:
            raise ValueError("WRITINGS_FILE_SUFFIX cannot be empty")
        if not suffix_raw.startswith("."):
            raise ValueError("WRITINGS_FILE_SUFFIX must start with '.'")
        if not isinstance(logging.getLevelName(log_level_raw), int):
            raise ValueError(f"WRITINGS_LOG_LEVEL is not a known logging level: {log_level_raw}")

        return cls(
            source_dir=Path(source_dir_raw),
            output_path=Path(output_path_raw),
            file_suffix=suffix_raw,
            log_level=log_level_raw,
        )
