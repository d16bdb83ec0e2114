"""Footnote index built from the publisher's footnote list items."""

from __future__ import annotations

from writings.ingestion.markup import ElementNode, MarkupTree
from writings.ingestion.models import FootnoteEntry
from writings.ingestion.normalization import normalize_whitespace

FOOTNOTE_NUMBER_CLASS = "footnote-number"
FOOTNOTE_CONTENT_CLASS = "footnote-content"
FOOTNOTE_RETURN_CLASS = "footnote-return"


def _number_node(item: ElementNode) -> ElementNode | None:
    for node in item.iter_elements():
        if node.has_class(FOOTNOTE_NUMBER_CLASS):
            return node
    return None


def _content_anchor(item: ElementNode) -> ElementNode | None:
    for node in item.iter_elements():
        if node.tag == "a" and node.has_class(FOOTNOTE_CONTENT_CLASS) and node.attribute("id"):
            return node
    return None


def _return_anchor(item: ElementNode) -> ElementNode | None:
    for node in item.iter_elements():
        if node.tag != "a" or not node.has_class(FOOTNOTE_RETURN_CLASS):
            continue
        if (node.attribute("href") or "").startswith("#"):
            return node
    return None


def _display_text(tree: MarkupTree, item: ElementNode, anchor: ElementNode) -> str:
    for ancestor in tree.ancestors(anchor):
        if ancestor is item:
            break
        if ancestor.tag == "p":
            return normalize_whitespace(ancestor.text_content())
    return normalize_whitespace(item.text_content())


def _parse_item(tree: MarkupTree, item: ElementNode) -> FootnoteEntry | None:
    number_node = _number_node(item)
    content = _content_anchor(item)
    back_reference = _return_anchor(item)
    if number_node is None or content is None or back_reference is None:
        return None

    text = _display_text(tree, item, content)
    if not text:
        return None

    number = normalize_whitespace(number_node.text_content()).rstrip(".").strip() or None
    target_id = (back_reference.attribute("href") or "")[1:] or None
    return FootnoteEntry(id=content.attribute("id") or "", text=text, number=number, target_id=target_id)


def index_footnotes(tree: MarkupTree) -> dict[str, FootnoteEntry]:
    """Map content-anchor ids to footnote entries; malformed items are skipped."""

    entries: dict[str, FootnoteEntry] = {}
    for item in tree.root.find_all("li"):
        entry = _parse_item(tree, item)
        if entry is not None and entry.id not in entries:
            entries[entry.id] = entry
    return entries
