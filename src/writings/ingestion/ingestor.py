"""Per-file pipeline: markup tree to a fully normalized ``Writing``."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from writings.ingestion.blocks import extract_blocks
from writings.ingestion.footnotes import index_footnotes
from writings.ingestion.markup import MarkupTree, load_markup
from writings.ingestion.models import Section, Writing
from writings.ingestion.normalization import normalize_block_text, title_from_filename
from writings.ingestion.normalizer import normalize_blocks
from writings.ingestion.sections import locate_sections

DEFAULT_SUFFIX = ".xhtml"


@dataclass(slots=True)
class IngestionError(Exception):
    """Domain error for a single source file that could not be processed."""

    path: Path
    message: str

    def __str__(self) -> str:
        return f"{self.message} (path={self.path})"


def extract_sections(tree: MarkupTree) -> list[Section]:
    """Sections in document order with normalized blocks."""

    footnotes = index_footnotes(tree)
    sections: list[Section] = []
    for anchor in locate_sections(tree):
        blocks = normalize_blocks(extract_blocks(anchor, footnotes))
        sections.append(Section(id=anchor.id, title=anchor.title, blocks=tuple(blocks)))
    return sections


class WritingIngestor:
    """Convert one XHTML source into a ``Writing`` record."""

    def __init__(self, suffix: str = DEFAULT_SUFFIX) -> None:
        self._suffix = suffix

    @property
    def suffix(self) -> str:
        return self._suffix

    def supports(self, path: Path) -> bool:
        return path.name.lower().endswith(self._suffix.lower())

    def writing_id(self, file_name: str) -> str:
        if file_name.lower().endswith(self._suffix.lower()):
            return file_name[: -len(self._suffix)]
        return Path(file_name).stem

    def ingest_bytes(self, file_name: str, raw: bytes) -> Writing:
        """Build a writing from already-read source bytes."""

        path = Path(file_name)
        try:
            tree = load_markup(raw)
            body = tree.body
            if body is None:
                text = normalize_block_text(tree.root.text_content())
                sections: list[Section] = []
            else:
                text = normalize_block_text(body.text_content())
                sections = extract_sections(tree)
        except Exception as exc:
            raise IngestionError(path, f"Extraction failed: {exc}") from exc

        return Writing(
            id=self.writing_id(path.name),
            title=title_from_filename(path.name, self._suffix),
            file_name=path.name,
            text=text,
            sections=tuple(sections),
        )

    def ingest(self, path: str | Path) -> Writing:
        source = Path(path)
        try:
            raw = source.read_bytes()
        except OSError as exc:
            raise IngestionError(source, f"Failed to read source file: {exc}") from exc
        return self.ingest_bytes(source.name, raw)
