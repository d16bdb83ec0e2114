"""CLI command that rebuilds the writings manifest from the source directory."""

from __future__ import annotations

import argparse
import asyncio
from dataclasses import replace
import logging
from pathlib import Path
from typing import Sequence

from dotenv import load_dotenv

from writings.config import PipelineSettings
from writings.ingestion.ingestor import WritingIngestor
from writings.manifest.assembler import (
    SECTION_ORDER,
    ManifestWriteError,
    build_manifest,
    collect_sources,
    collect_writings,
    write_manifest,
)

logger = logging.getLogger(__name__)


async def run_pipeline(settings: PipelineSettings, *, canonical: Sequence[str] = SECTION_ORDER) -> int:
    """Process every source file and write the manifest; return the exit code."""

    sources = collect_sources(settings.source_dir, settings.file_suffix)
    if not sources:
        logger.warning("No %s files found in %s", settings.file_suffix, settings.source_dir)

    writings = await collect_writings(sources, WritingIngestor(settings.file_suffix))
    manifest = build_manifest(writings, canonical=canonical)

    try:
        await write_manifest(manifest, settings.output_path)
    except ManifestWriteError as exc:
        logger.error("%s", exc)
        return 1

    logger.info("Wrote %d item(s) to %s", len(manifest["items"]), settings.output_path)
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Convert XHTML writings into the reading manifest")
    parser.add_argument("--source-dir", default=None, help="Directory holding the source writings")
    parser.add_argument("--output", default=None, help="Path of the manifest JSON file to write")
    args = parser.parse_args(argv)

    load_dotenv()
    try:
        settings = PipelineSettings.from_env()
    except ValueError as error:
        logging.basicConfig(format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        logger.error("Configuration error: %s", error)
        return 1

    if args.source_dir:
        settings = replace(settings, source_dir=Path(args.source_dir))
    if args.output:
        settings = replace(settings, output_path=Path(args.output))

    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=settings.log_level,
    )
    return asyncio.run(run_pipeline(settings))


if __name__ == "__main__":
    raise SystemExit(main())
