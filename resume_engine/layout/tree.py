from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, Literal, Union

from resume_engine.schemas.layout import Element, Section

ListStyle = Literal["bullets", "tags"]


@dataclass(frozen=True)
class HeaderNode:
    element: Element


@dataclass(frozen=True)
class TextNode:
    text: str
    element: Element | None = None


@dataclass(frozen=True)
class ListNode:
    items: tuple[str, ...]
    style: ListStyle = "bullets"
    elements: tuple[Element, ...] = ()


@dataclass(frozen=True)
class EntryNode:
    title: str
    subtitle: str | None = None
    children: tuple["Node", ...] = ()
    section: Section | None = None


@dataclass(frozen=True)
class SectionNode:
    section: Section
    children: tuple["Node", ...] = ()


Node = Union[HeaderNode, TextNode, ListNode, EntryNode, SectionNode]


def iter_node_text(node: Node) -> Iterator[str]:
    if isinstance(node, HeaderNode):
        yield node.element.content
    elif isinstance(node, TextNode):
        yield node.text
    elif isinstance(node, ListNode):
        yield from node.items
    elif isinstance(node, EntryNode):
        yield node.title
        if node.subtitle:
            yield node.subtitle
        for child in node.children:
            yield from iter_node_text(child)
    elif isinstance(node, SectionNode):
        yield node.section.title
        for child in node.children:
            yield from iter_node_text(child)
    else:
        raise TypeError(f"Unsupported document node: {node!r}")


@dataclass(frozen=True)
class DocumentTree:
    """Reading-ordered view of a canvas.

    ``header`` holds top-level elements, ``sections`` the top-level section
    nodes. ``elements`` and ``all_sections`` keep every validated input item
    (in reading order) for consumers that need style or layout attributes.
    """

    header: tuple[HeaderNode, ...] = ()
    sections: tuple[SectionNode, ...] = ()
    elements: tuple[Element, ...] = field(default=(), repr=False)
    all_sections: tuple[Section, ...] = field(default=(), repr=False)

    @property
    def is_empty(self) -> bool:
        return not self.elements and not self.all_sections

    def iter_text(self) -> Iterator[str]:
        for node in self.header:
            yield from iter_node_text(node)
        for node in self.sections:
            yield from iter_node_text(node)

    def full_text(self) -> str:
        return " ".join(text for text in self.iter_text() if text)
