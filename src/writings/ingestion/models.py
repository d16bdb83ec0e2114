"""Canonical data structures shared by extraction, normalization and assembly."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

BlockType = Literal["paragraph", "heading", "quote", "poetry", "list"]


@dataclass(frozen=True, slots=True)
class FootnoteEntry:
    """A resolved footnote addressable by its content anchor id."""

    id: str
    text: str
    number: str | None = None
    target_id: str | None = None

    def render(self) -> str:
        if self.number:
            return f"{self.number}. {self.text}"
        return self.text


@dataclass(slots=True)
class RawBlock:
    """Working record emitted by the extractor before normalization."""

    id: str
    type: BlockType
    text: str
    source_id: str | None = None
    footnotes: list[FootnoteEntry] = field(default_factory=list)
    attribution: str | None = None
    share_parts: list[str] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class Block:
    """Smallest structured content unit within a section."""

    id: str
    type: BlockType
    text: str
    share_text: str
    source_id: str | None = None
    attribution: str | None = None
    footnotes: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "id": self.id,
            "type": self.type,
            "text": self.text,
            "sourceId": self.source_id,
        }
        if self.attribution:
            payload["attribution"] = self.attribution
        if self.footnotes:
            payload["footnotes"] = list(self.footnotes)
        payload["shareText"] = self.share_text
        return payload


@dataclass(frozen=True, slots=True)
class Section:
    """Titled subdivision of a writing."""

    id: str
    title: str
    blocks: tuple[Block, ...] = ()

    @property
    def paragraphs(self) -> list[str]:
        return [block.share_text or block.text for block in self.blocks]

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "blocks": [block.to_dict() for block in self.blocks],
            "paragraphs": self.paragraphs,
        }


@dataclass(frozen=True, slots=True)
class Writing:
    """One source document mapped to one manifest record."""

    id: str
    title: str
    file_name: str
    text: str
    sections: tuple[Section, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "fileName": self.file_name,
            "text": self.text,
            "sections": [section.to_dict() for section in self.sections],
        }
