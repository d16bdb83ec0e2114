"""Manifest ordering, assembly and output."""

from .assembler import (
    SECTION_ORDER,
    ManifestWriteError,
    build_manifest,
    collect_writings,
    order_sections,
    serialize_manifest,
    write_manifest,
)

__all__ = [
    "SECTION_ORDER",
    "ManifestWriteError",
    "build_manifest",
    "collect_writings",
    "order_sections",
    "serialize_manifest",
    "write_manifest",
]
