"""Section anchor discovery, titling and content boundaries."""

from __future__ import annotations

from dataclasses import dataclass
import re

from writings.ingestion.markup import ElementNode, MarkupTree, Node
from writings.ingestion.normalization import normalize_whitespace, slugify

SECTION_CARD_CLASS = "ic"

_PARENTHESIZED_RE = re.compile(r"^\(.*\)$")
_ANCHOR_HEADING_TAGS = {"h1", "h2", "h3"}


@dataclass(frozen=True, slots=True)
class SectionAnchor:
    """A located section with the nodes that make up its content."""

    id: str
    title: str
    node: ElementNode
    content: tuple[Node, ...]


def _is_section_card(node: ElementNode) -> bool:
    return node.tag == "div" and node.has_class(SECTION_CARD_CLASS) and node.find("h2") is not None


def find_section_cards(tree: MarkupTree) -> list[ElementNode]:
    body = tree.body
    if body is None:
        return []
    return [node for node in body.iter_elements() if _is_section_card(node)]


def section_title(card: ElementNode) -> str:
    """First level-2 heading, plus the first parenthesized level-3 subtitle if any."""

    heading = card.find("h2")
    base_title = normalize_whitespace(heading.text_content()) if heading is not None else ""

    for subtitle in card.find_all("h3"):
        subtitle_text = normalize_whitespace(subtitle.text_content())
        if _PARENTHESIZED_RE.match(subtitle_text):
            return f"{base_title} {subtitle_text}".strip()
    return base_title


def section_content(tree: MarkupTree, card: ElementNode, next_card: ElementNode | None) -> tuple[Node, ...]:
    own_children = [
        child
        for child in card.children
        if not (isinstance(child, ElementNode) and child.tag in _ANCHOR_HEADING_TAGS)
    ]

    trailing: list[Node] = []
    for sibling in tree.following_siblings(card):
        if sibling is next_card:
            break
        trailing.append(sibling)

    return tuple(own_children + trailing)


def locate_sections(tree: MarkupTree) -> list[SectionAnchor]:
    cards = find_section_cards(tree)
    anchors: list[SectionAnchor] = []
    seen_ids: dict[str, int] = {}

    for position, card in enumerate(cards, start=1):
        title = section_title(card)
        base_id = slugify(title) or f"section-{position}"

        occurrences = seen_ids.get(base_id, 0) + 1
        seen_ids[base_id] = occurrences
        section_id = base_id if occurrences == 1 else f"{base_id}-{occurrences}"

        next_card = cards[position] if position < len(cards) else None
        anchors.append(
            SectionAnchor(
                id=section_id,
                title=title or f"Section {position}",
                node=card,
                content=section_content(tree, card, next_card),
            )
        )

    return anchors
