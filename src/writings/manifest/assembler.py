"""Section ordering, manifest assembly and output for processed writings."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, replace
from datetime import datetime, timezone
import json
import logging
from pathlib import Path
from typing import Any, Iterable, Sequence

from writings.ingestion.ingestor import IngestionError, WritingIngestor
from writings.ingestion.models import Section, Writing
from writings.ingestion.normalization import normalize_whitespace

logger = logging.getLogger(__name__)

SECTION_ORDER: tuple[str, ...] = (
    "Preface",
    "Rashḥ-i-‘Amá (The Clouds of the Realms Above)",
    "The Seven Valleys",
    "From the Letter Bá’ to the Letter Há’",
    "Three Other Tablets",
    "The Four Valleys",
    "Notes",
)


@dataclass(slots=True)
class ManifestWriteError(Exception):
    """Fatal failure while creating or writing the manifest artifact."""

    path: Path
    message: str

    def __str__(self) -> str:
        return f"{self.message} (path={self.path})"


def order_sections(sections: Iterable[Section], canonical: Sequence[str] = SECTION_ORDER) -> list[Section]:
    """Canonical titles first, in canonical order, then the rest in document order."""

    remaining = list(sections)
    ordered: list[Section] = []

    for desired in canonical:
        wanted = normalize_whitespace(desired)
        for position, section in enumerate(remaining):
            if normalize_whitespace(section.title) == wanted:
                ordered.append(remaining.pop(position))
                break

    return ordered + remaining


def assemble_writing(writing: Writing, canonical: Sequence[str] = SECTION_ORDER) -> Writing:
    return replace(writing, sections=tuple(order_sections(writing.sections, canonical)))


def _timestamp(moment: datetime | None = None) -> str:
    current = (moment or datetime.now(timezone.utc)).astimezone(timezone.utc)
    return current.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def build_manifest(
    writings: Iterable[Writing],
    *,
    canonical: Sequence[str] = SECTION_ORDER,
    generated_at: datetime | None = None,
) -> dict[str, Any]:
    items = [assemble_writing(writing, canonical).to_dict() for writing in writings]
    return {"generatedAt": _timestamp(generated_at), "items": items}


def serialize_manifest(manifest: dict[str, Any]) -> str:
    return json.dumps(manifest, ensure_ascii=False, indent=2)


def collect_sources(source_dir: Path, suffix: str) -> list[Path]:
    """Matching files directly under ``source_dir``, sorted by name."""

    if not source_dir.is_dir():
        logger.warning("Source directory does not exist: %s", source_dir)
        return []
    return sorted(
        (path for path in source_dir.iterdir() if path.is_file() and path.name.lower().endswith(suffix.lower())),
        key=lambda path: path.name,
    )


async def collect_writings(paths: Iterable[Path], ingestor: WritingIngestor) -> list[Writing]:
    """Ingest files one at a time; failing files are logged and left out."""

    writings: list[Writing] = []
    for path in paths:
        try:
            raw = await asyncio.to_thread(path.read_bytes)
        except OSError as exc:
            logger.error("Failed to process %s: %s", path.name, exc)
            continue

        try:
            writing = ingestor.ingest_bytes(path.name, raw)
        except IngestionError as exc:
            logger.error("Failed to process %s: %s", path.name, exc.message)
            continue

        writings.append(writing)
        logger.info("Processed %s", path.name)
    return writings


async def write_manifest(manifest: dict[str, Any], output_path: Path) -> None:
    payload = serialize_manifest(manifest)
    try:
        await asyncio.to_thread(output_path.parent.mkdir, parents=True, exist_ok=True)
    except OSError as exc:
        raise ManifestWriteError(output_path.parent, f"Failed to create output directory: {exc}") from exc

    try:
        await asyncio.to_thread(output_path.write_text, payload, encoding="utf-8")
    except OSError as exc:
        raise ManifestWriteError(output_path, f"Failed to write manifest: {exc}") from exc
