from __future__ import annotations

import re
from collections import defaultdict
from typing import Any, Iterable, Mapping, TypeVar, Union

from pydantic import ValidationError

from resume_engine.schemas.layout import Element, EntryBlock, FilledBlock, ListBlock, Section, TextBlock

from .errors import ModelError
from .geometry import LINE_EPS, sort_by_reading_order
from .tree import DocumentTree, EntryNode, HeaderNode, ListNode, Node, SectionNode, TextNode

ModelT = TypeVar("ModelT", Element, Section)
ElementInput = Union[Element, Mapping[str, Any]]
SectionInput = Union[Section, Mapping[str, Any]]

MAX_SECTION_DEPTH = 32

_BULLET_ELEMENT_TYPES = {"list-item", "bullet"}
_BULLET_PREFIX_RE = re.compile(r"^\s*(?:•|-\s)")


def coerce_models(items: Iterable[Any] | None, model: type[ModelT], kind: str) -> list[ModelT]:
    coerced: list[ModelT] = []
    for index, item in enumerate(items or ()):
        if isinstance(item, model):
            coerced.append(item)
            continue
        try:
            coerced.append(model.model_validate(item))
        except ValidationError as exc:
            first = exc.errors()[0] if exc.errors() else {}
            location = ".".join(str(part) for part in first.get("loc", ()))
            detail = first.get("msg", "invalid value")
            raise ModelError(f"Invalid {kind} at index {index}: {location or kind} {detail}".strip()) from exc
    return coerced


def _ensure_unique_ids(items: Iterable[Element | Section], kind: str) -> None:
    seen: set[str] = set()
    duplicates: list[str] = []
    for item in items:
        if item.id in seen and item.id not in duplicates:
            duplicates.append(item.id)
        seen.add(item.id)
    if duplicates:
        raise ModelError(f"Duplicate {kind} ids: {', '.join(duplicates)}", ids=duplicates)


def find_parent_cycle(parents: Mapping[str, str | None]) -> list[str] | None:
    """Return the ids forming a parent cycle, or None when the graph is a forest."""
    settled: set[str] = set()
    for start in parents:
        path: list[str] = []
        on_path: set[str] = set()
        node: str | None = start
        while node is not None and node not in settled:
            if node in on_path:
                return path[path.index(node):]
            on_path.add(node)
            path.append(node)
            node = parents.get(node)
        settled.update(path)
    return None


def _is_bullet_like(element: Element) -> bool:
    return element.type in _BULLET_ELEMENT_TYPES or bool(_BULLET_PREFIX_RE.match(element.content))


def _block_node(block: FilledBlock) -> Node:
    if isinstance(block, EntryBlock):
        children: tuple[Node, ...] = ()
        if block.bullets:
            children = (ListNode(items=tuple(block.bullets)),)
        return EntryNode(title=block.title, subtitle=block.subtitle, children=children)
    if isinstance(block, ListBlock):
        return ListNode(items=tuple(block.items), style="tags")
    if isinstance(block, TextBlock):
        return TextNode(text=block.content)
    raise TypeError(f"Unsupported filled content block: {block!r}")


class _Linearizer:
    def __init__(self, elements: list[Element], sections: list[Section], line_eps: float):
        self._line_eps = line_eps
        section_ids = {section.id for section in sections}
        self._section_parent: dict[str, str | None] = {
            section.id: section.parent_section if section.parent_section in section_ids else None
            for section in sections
        }

        self._child_sections: dict[str | None, list[Section]] = defaultdict(list)
        for section in sections:
            self._child_sections[self._section_parent[section.id]].append(section)
        self._child_elements: dict[str | None, list[Element]] = defaultdict(list)
        for element in elements:
            parent = element.parent_section if element.parent_section in section_ids else None
            self._child_elements[parent].append(element)

        for bucket in (self._child_sections, self._child_elements):
            for parent_id, items in bucket.items():
                bucket[parent_id] = sort_by_reading_order(items, line_eps)

    def check_acyclic(self) -> None:
        for section_id, parent_id in self._section_parent.items():
            if parent_id == section_id:
                raise ModelError(f"Section '{section_id}' lists itself as its parent", ids=[section_id])
        cycle = find_parent_cycle(self._section_parent)
        if cycle:
            raise ModelError(f"Section parent cycle detected: {' -> '.join(cycle)}", ids=cycle)
        self._check_depth()

    def _check_depth(self) -> None:
        # Runs after the cycle check, so every parent chain ends at the top level.
        depths: dict[str, int] = {}
        for section_id in self._section_parent:
            chain: list[str] = []
            node: str | None = section_id
            while node is not None and node not in depths:
                chain.append(node)
                node = self._section_parent[node]
            depth = depths[node] if node is not None else 0
            for item in reversed(chain):
                depth += 1
                depths[item] = depth
                if depth > MAX_SECTION_DEPTH:
                    raise ModelError(
                        f"Section '{item}' is nested {depth} levels deep (limit {MAX_SECTION_DEPTH})",
                        ids=[item],
                    )

    def header(self) -> tuple[HeaderNode, ...]:
        return tuple(HeaderNode(element=element) for element in self._child_elements[None])

    def sections(self) -> tuple[SectionNode, ...]:
        return tuple(
            SectionNode(section=section, children=self._content(section, frozenset(), nested=False))
            for section in self._child_sections[None]
        )

    def _entry(self, section: Section, path: frozenset[str]) -> EntryNode:
        return EntryNode(
            title=section.title,
            children=self._content(section, path, nested=True),
            section=section,
        )

    def _content(self, section: Section, path: frozenset[str], *, nested: bool) -> tuple[Node, ...]:
        if section.id in path:
            raise ModelError(f"Section '{section.id}' is its own ancestor", ids=[section.id])
        path = path | {section.id}

        if section.filled_content:
            return tuple(_block_node(block) for block in section.filled_content)

        elements = self._child_elements.get(section.id, [])
        entries = [self._entry(child, path) for child in self._child_sections.get(section.id, [])]
        paragraphs = [TextNode(text=element.content, element=element) for element in elements]

        if section.content_type == "list-sections":
            return tuple(entries) if entries else tuple(paragraphs)

        as_bullets = section.content_type == "list-items" or (
            nested and any(_is_bullet_like(element) for element in elements)
        )
        nodes: list[Node] = []
        if elements and as_bullets:
            nodes.append(
                ListNode(
                    items=tuple(element.content for element in elements),
                    elements=tuple(elements),
                )
            )
        elif elements:
            nodes.extend(paragraphs)
        nodes.extend(entries)
        return tuple(nodes)


def linearize(
    elements: Iterable[ElementInput] | None,
    sections: Iterable[SectionInput] | None,
    *,
    line_eps: float = LINE_EPS,
) -> DocumentTree:
    """Order a free-form canvas into a reading-order document tree.

    Raises ``ModelError`` for invalid shapes, duplicate ids, a parent cycle
    among sections, or sections nested deeper than ``MAX_SECTION_DEPTH``.
    Dangling ``parent_section`` references are treated as top level.
    """
    element_models = coerce_models(elements, Element, "element")
    section_models = coerce_models(sections, Section, "section")
    _ensure_unique_ids(element_models, "element")
    _ensure_unique_ids(section_models, "section")

    linearizer = _Linearizer(element_models, section_models, line_eps)
    linearizer.check_acyclic()

    return DocumentTree(
        header=linearizer.header(),
        sections=linearizer.sections(),
        elements=tuple(sort_by_reading_order(element_models, line_eps)),
        all_sections=tuple(sort_by_reading_order(section_models, line_eps)),
    )
