"""Immutable markup tree built from a BeautifulSoup parse.

The parser's live node objects are copied once into an arena of frozen
``TextNode``/``ElementNode`` records. Parent links live in the arena rather
than on the nodes, so the tree can be shared freely after loading.
"""

from __future__ import annotations

from dataclasses import dataclass
from html.entities import name2codepoint
import re
from types import MappingProxyType
from typing import Iterator, Mapping, Union

from bs4 import BeautifulSoup
from bs4.element import CData, NavigableString, PreformattedString, Tag
from charset_normalizer import from_bytes

_BREAK_TAGS = {"br"}
_XML_ENTITIES = {"amp", "lt", "gt", "quot", "apos"}
_NAMED_ENTITY_RE = re.compile(r"&([A-Za-z][A-Za-z0-9]*);")


class MarkupError(ValueError):
    """Raised when source bytes cannot be turned into a markup tree."""


@dataclass(frozen=True, slots=True, eq=False)
class TextNode:
    index: int
    text: str

    def text_content(self) -> str:
        return self.text


@dataclass(frozen=True, slots=True, eq=False)
class ElementNode:
    index: int
    tag: str
    attributes: Mapping[str, str]
    children: tuple[Node, ...]

    def attribute(self, name: str) -> str | None:
        return self.attributes.get(name)

    @property
    def classes(self) -> frozenset[str]:
        return frozenset((self.attributes.get("class") or "").split())

    def has_class(self, name: str) -> bool:
        return name in self.classes

    def is_tag(self, *tags: str) -> bool:
        return self.tag in tags

    def iter_descendants(self) -> Iterator[Node]:
        """Yield every descendant in document order, excluding ``self``."""

        stack: list[Node] = list(reversed(self.children))
        while stack:
            node = stack.pop()
            yield node
            if isinstance(node, ElementNode):
                stack.extend(reversed(node.children))

    def iter_elements(self) -> Iterator[ElementNode]:
        for node in self.iter_descendants():
            if isinstance(node, ElementNode):
                yield node

    def find_all(self, *tags: str) -> list[ElementNode]:
        return [node for node in self.iter_elements() if node.tag in tags]

    def find(self, *tags: str) -> ElementNode | None:
        return next((node for node in self.iter_elements() if node.tag in tags), None)

    def text_content(self) -> str:
        parts: list[str] = []
        for node in self.iter_descendants():
            if isinstance(node, TextNode):
                parts.append(node.text)
            elif node.tag in _BREAK_TAGS:
                parts.append("\n")
        return "".join(parts)


Node = Union[TextNode, ElementNode]


class MarkupTree:
    """Arena of parsed nodes with parent lookups by node index."""

    def __init__(self, root: ElementNode, nodes: list[Node], parents: list[int | None]) -> None:
        self._root = root
        self._nodes = tuple(nodes)
        self._parents = tuple(parents)

    @property
    def root(self) -> ElementNode:
        return self._root

    @property
    def body(self) -> ElementNode | None:
        if self._root.tag == "body":
            return self._root
        return self._root.find("body")

    def __len__(self) -> int:
        return len(self._nodes)

    def parent(self, node: Node) -> ElementNode | None:
        parent_index = self._parents[node.index]
        if parent_index is None:
            return None
        parent = self._nodes[parent_index]
        if not isinstance(parent, ElementNode):
            raise MarkupError(f"Node {parent_index} is not an element")
        return parent

    def ancestors(self, node: Node) -> Iterator[ElementNode]:
        """Yield ancestors nearest first."""

        current = self.parent(node)
        while current is not None:
            yield current
            current = self.parent(current)

    def following_siblings(self, node: Node) -> tuple[Node, ...]:
        parent = self.parent(node)
        if parent is None:
            return ()
        for position, child in enumerate(parent.children):
            if child is node:
                return parent.children[position + 1 :]
        return ()


class _ArenaBuilder:
    def __init__(self) -> None:
        self.nodes: list[Node | None] = []
        self.parents: list[int | None] = []

    def _reserve(self, parent_index: int | None) -> int:
        self.nodes.append(None)
        self.parents.append(parent_index)
        return len(self.nodes) - 1

    def build(self, tag: Tag, parent_index: int | None) -> ElementNode:
        index = self._reserve(parent_index)
        children: list[Node] = []

        for child in tag.children:
            if isinstance(child, Tag):
                children.append(self.build(child, index))
            elif _is_text(child):
                child_index = self._reserve(index)
                text_node = TextNode(index=child_index, text=str(child))
                self.nodes[child_index] = text_node
                children.append(text_node)

        element = ElementNode(
            index=index,
            tag=_local_name(tag.name),
            attributes=MappingProxyType(_flatten_attributes(tag.attrs)),
            children=tuple(children),
        )
        self.nodes[index] = element
        return element


def _is_text(value: object) -> bool:
    if not isinstance(value, NavigableString):
        return False
    # Comments, doctypes and processing instructions are preformatted strings too.
    return isinstance(value, CData) or not isinstance(value, PreformattedString)


def _local_name(name: str) -> str:
    if name == "[document]":
        return "#document"
    return name.rsplit(":", 1)[-1].lower()


def _flatten_attributes(attrs: Mapping[str, object]) -> dict[str, str]:
    flattened: dict[str, str] = {}
    for key, value in attrs.items():
        if isinstance(value, (list, tuple)):
            flattened[key] = " ".join(str(item) for item in value)
        else:
            flattened[key] = str(value)
    return flattened


def _decode(raw: bytes) -> str:
    try:
        return raw.decode("utf-8-sig")
    except UnicodeDecodeError:
        best = from_bytes(raw).best()
        if best is None or not best.encoding:
            raise MarkupError("Unable to detect source encoding") from None
        return raw.decode(best.encoding, errors="replace")


def _replace_entity(match: re.Match[str]) -> str:
    name = match.group(1)
    if name in _XML_ENTITIES:
        return match.group(0)
    codepoint = name2codepoint.get(name)
    if codepoint is None:
        return f"&amp;{name};"
    return f"&#{codepoint};"


def _resolve_html_entities(text: str) -> str:
    """Rewrite HTML named references the XML parser would drop as numeric ones."""

    return _NAMED_ENTITY_RE.sub(_replace_entity, text)


def load_markup(raw: bytes | str) -> MarkupTree:
    """Parse XHTML source into an immutable ``MarkupTree``."""

    text = raw if isinstance(raw, str) else _decode(raw)
    if not text.strip():
        raise MarkupError("Document is empty")

    try:
        soup = BeautifulSoup(_resolve_html_entities(text).encode("utf-8"), "xml", from_encoding="utf-8")
    except Exception as exc:
        raise MarkupError(f"Markup parsing failed: {exc}") from exc

    if soup.find(True) is None:
        raise MarkupError("Document has no root element")

    builder = _ArenaBuilder()
    root = builder.build(soup, None)
    return MarkupTree(root, builder.nodes, builder.parents)
