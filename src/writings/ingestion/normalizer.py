"""Block filtering, attribution folding and share-text derivation."""

from __future__ import annotations

import re
from typing import Iterable

from writings.ingestion.models import Block, RawBlock
from writings.ingestion.normalization import normalize_block_text

SEPARATOR_TEXT = "* * *"

_NUMERAL_RE = re.compile(r"^[IVXLCDM\d]+$")
_ATTRIBUTION_RE = re.compile(r"^(?:--|[-–—])\s*")


def is_separator(text: str) -> bool:
    return text == SEPARATOR_TEXT


def is_numeral(text: str) -> bool:
    return bool(_NUMERAL_RE.match(text))


def is_attribution(text: str) -> bool:
    return bool(_ATTRIBUTION_RE.match(text))


def _fold_attribution(target: RawBlock, line: RawBlock) -> None:
    target.attribution = f"{target.attribution}\n{line.text}" if target.attribution else line.text
    target.share_parts.append(line.text)

    known = {entry.id for entry in target.footnotes}
    for entry in line.footnotes:
        if entry.id not in known:
            known.add(entry.id)
            target.footnotes.append(entry)


def _share_text(block: RawBlock) -> str:
    parts = [block.text, *block.share_parts]
    parts.extend(entry.render() for entry in block.footnotes)

    normalized = [normalize_block_text(part) for part in parts]
    joined = "\n\n".join(part for part in normalized if part)
    return joined or block.text


def _filtered(raw_blocks: Iterable[RawBlock]) -> Iterable[RawBlock]:
    for raw in raw_blocks:
        text = normalize_block_text(raw.text)
        if not text and not raw.footnotes:
            continue
        if is_separator(text) or is_numeral(text):
            continue
        raw.text = text
        yield raw


def normalize_blocks(raw_blocks: Iterable[RawBlock]) -> list[Block]:
    """Turn one section's raw blocks into retained, share-ready blocks."""

    retained: list[RawBlock] = []
    for raw in _filtered(raw_blocks):
        if raw.text and is_attribution(raw.text):
            if retained:
                _fold_attribution(retained[-1], raw)
            else:
                orphan = RawBlock(id=raw.id, type=raw.type, text="", source_id=raw.source_id)
                _fold_attribution(orphan, raw)
                retained.append(orphan)
            continue
        retained.append(raw)

    return [
        Block(
            id=raw.id,
            type=raw.type,
            text=raw.text,
            share_text=_share_text(raw),
            source_id=raw.source_id,
            attribution=raw.attribution,
            footnotes=tuple(entry.render() for entry in raw.footnotes),
        )
        for raw in retained
    ]
