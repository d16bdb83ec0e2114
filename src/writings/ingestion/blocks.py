"""Block extraction from a located section's content nodes."""

from __future__ import annotations

from typing import Iterable, Iterator, Mapping

from writings.ingestion.markup import ElementNode, Node, TextNode
from writings.ingestion.models import BlockType, FootnoteEntry, RawBlock
from writings.ingestion.normalization import normalize_block_text, normalize_whitespace
from writings.ingestion.sections import SectionAnchor

POETRY_LINE_CLASS = "ce"
# A paragraph needs more verse-line spans than this to count as poetry.
POETRY_LINE_THRESHOLD = 1
LIST_BULLET = "•"

_HEADING_TAGS = {"h4", "h5", "h6"}
_LIST_TAGS = {"ul", "ol"}
_GROUPING_TAGS = {"div", "section", "article"}


def detect_block_type(node: Node | None) -> BlockType:
    if not isinstance(node, ElementNode):
        return "paragraph"
    if node.tag == "blockquote":
        return "quote"
    if node.tag in _HEADING_TAGS:
        return "heading"
    if node.tag in _LIST_TAGS:
        return "list"
    if node.tag == "p":
        verse_lines = sum(
            1 for span in node.find_all("span") if span.has_class(POETRY_LINE_CLASS)
        )
        if verse_lines > POETRY_LINE_THRESHOLD:
            return "poetry"
    return "paragraph"


def find_source_id(node: ElementNode) -> str | None:
    own_id = node.attribute("id")
    if own_id:
        return own_id
    for descendant in node.iter_elements():
        descendant_id = descendant.attribute("id")
        if descendant_id:
            return descendant_id
    return None


def _walk_reference_anchors(node: ElementNode, inside_sup: bool) -> Iterator[ElementNode]:
    for child in node.children:
        if not isinstance(child, ElementNode):
            continue
        child_inside_sup = inside_sup or child.tag == "sup"
        if child.tag == "a" and (child_inside_sup or child.find("sup") is not None):
            if (child.attribute("href") or "").startswith("#"):
                yield child
        yield from _walk_reference_anchors(child, child_inside_sup)


def collect_footnote_refs(
    node: ElementNode,
    footnotes: Mapping[str, FootnoteEntry],
    exclude: Iterable[str] = (),
) -> list[FootnoteEntry]:
    """Resolve superscript fragment links in document order, first occurrence per id."""

    seen = set(exclude)
    refs: list[FootnoteEntry] = []
    for anchor in _walk_reference_anchors(node, node.tag == "sup"):
        fragment = (anchor.attribute("href") or "")[1:]
        entry = footnotes.get(fragment)
        if entry is None or entry.id in seen:
            continue
        seen.add(entry.id)
        refs.append(entry)
    return refs


class SectionBlockCollector:
    """Accumulate raw blocks for one section while walking its nodes."""

    def __init__(self, section_id: str, footnotes: Mapping[str, FootnoteEntry]) -> None:
        self._section_id = section_id
        self._footnotes = footnotes
        self._counter = 0
        self._used_ids: set[str] = set()
        self._consumed_footnotes: set[str] = set()
        self.blocks: list[RawBlock] = []

    def _unique_id(self, candidate: str) -> str:
        block_id = candidate
        suffix = 2
        while block_id in self._used_ids:
            block_id = f"{candidate}-{suffix}"
            suffix += 1
        self._used_ids.add(block_id)
        return block_id

    def _refs_for(self, node: ElementNode) -> list[FootnoteEntry]:
        refs = collect_footnote_refs(node, self._footnotes, exclude=self._consumed_footnotes)
        self._consumed_footnotes.update(entry.id for entry in refs)
        return refs

    def push(
        self,
        raw_text: str,
        block_type: BlockType,
        source_id: str | None,
        footnotes: list[FootnoteEntry] | None = None,
    ) -> None:
        text = normalize_block_text(raw_text or "")
        refs = footnotes or []
        if not text and not refs:
            return

        self._counter += 1
        block_id = self._unique_id(source_id or f"{self._section_id}-block-{self._counter}")
        self.blocks.append(
            RawBlock(id=block_id, type=block_type, text=text, source_id=source_id, footnotes=list(refs))
        )

    def visit(self, node: Node) -> None:
        if isinstance(node, TextNode):
            self.push(node.text, "paragraph", None)
            return

        block_type = detect_block_type(node)

        if node.tag == "p" or node.tag in _HEADING_TAGS:
            self.push(node.text_content(), block_type, find_source_id(node), self._refs_for(node))
            return

        if node.tag == "blockquote":
            paragraphs = node.find_all("p")
            if not paragraphs:
                self.push(node.text_content(), "quote", find_source_id(node), self._refs_for(node))
            for paragraph in paragraphs:
                self.push(paragraph.text_content(), "quote", find_source_id(paragraph), self._refs_for(paragraph))
            return

        if node.tag in _LIST_TAGS:
            lines: list[str] = []
            for item in node.children:
                if not (isinstance(item, ElementNode) and item.tag == "li"):
                    continue
                item_text = normalize_whitespace(item.text_content())
                if item_text:
                    lines.append(f"{LIST_BULLET} {item_text}")
            if lines:
                self.push("\n".join(lines), "list", find_source_id(node), self._refs_for(node))
            return

        if node.tag in _GROUPING_TAGS:
            for child in node.children:
                self.visit(child)
            return

        if node.children:
            for child in node.children:
                self.visit(child)
        else:
            self.push(node.text_content(), block_type, find_source_id(node))


def extract_blocks(anchor: SectionAnchor, footnotes: Mapping[str, FootnoteEntry]) -> list[RawBlock]:
    collector = SectionBlockCollector(anchor.id, footnotes)
    for node in anchor.content:
        collector.visit(node)
    return collector.blocks
