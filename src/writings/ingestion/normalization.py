"""Text normalization helpers shared by extraction and assembly."""

from __future__ import annotations

import re

_WHITESPACE_RE = re.compile(r"\s+")
_HORIZONTAL_SPACE_RE = re.compile(r"[^\S\n]+")
_SLUG_INVALID_RE = re.compile(r"[^a-z0-9]+")
_FILENAME_SEPARATOR_RE = re.compile(r"[-_]+")
_WORD_INITIAL_RE = re.compile(r"\b\w")


def normalize_whitespace(text: str) -> str:
    """Collapse repeated whitespace and trim boundaries."""

    return _WHITESPACE_RE.sub(" ", text).strip()


def normalize_block_text(text: str) -> str:
    """Trim every line and keep at most one blank line between runs of text.

    Line structure is preserved so that verse lines and list bullets survive.
    """

    lines = [_HORIZONTAL_SPACE_RE.sub(" ", line).strip() for line in text.replace("\r\n", "\n").split("\n")]

    normalized: list[str] = []
    for line in lines:
        if line:
            normalized.append(line)
        elif normalized and normalized[-1]:
            normalized.append("")

    return "\n".join(normalized).strip()


def slugify(value: str) -> str:
    """Lowercase, hyphen-delimited identifier; empty when nothing survives."""

    return _SLUG_INVALID_RE.sub("-", value.lower()).strip("-")


def title_from_filename(file_name: str, suffix: str = ".xhtml") -> str:
    base = file_name[: -len(suffix)] if suffix and file_name.lower().endswith(suffix.lower()) else file_name
    spaced = _FILENAME_SEPARATOR_RE.sub(" ", base)
    return _WORD_INITIAL_RE.sub(lambda match: match.group(0).upper(), spaced).strip()
