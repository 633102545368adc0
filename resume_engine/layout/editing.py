"""Id-addressed edits over element/section lists.

Every function returns new lists and leaves its inputs untouched. Deleting a
section cascades: its descendant sections and every element parented to a
removed section are deleted with it.
"""

from __future__ import annotations

import uuid
from typing import Any, Callable, Iterable, Mapping, Sequence, TypeVar

from pydantic import ValidationError
from pydantic.alias_generators import to_camel

from resume_engine.schemas.layout import Element, Section

from .errors import ModelError
from .geometry import find_topmost_containing

ModelT = TypeVar("ModelT", Element, Section)

DUPLICATE_OFFSET = 20.0


def _default_id_factory() -> str:
    return f"el-{uuid.uuid4().hex[:12]}"


def _apply_changes(item: ModelT, changes: Mapping[str, Any]) -> ModelT:
    model = type(item)
    normalized: dict[str, Any] = {}
    for key, value in changes.items():
        alias = to_camel(key) if key in model.model_fields else key
        normalized[alias] = value
    if "id" in normalized and normalized["id"] != item.id:
        raise ModelError(f"Cannot change id of '{item.id}'", ids=[item.id])
    merged = {**item.model_dump(by_alias=True), **normalized}
    try:
        return model.model_validate(merged)
    except ValidationError as exc:
        raise ModelError(f"Invalid update for '{item.id}': {exc.errors()[0]['msg']}", ids=[item.id]) from exc


def _update(items: Sequence[ModelT], item_id: str, changes: Mapping[str, Any], kind: str) -> list[ModelT]:
    if not any(item.id == item_id for item in items):
        raise ModelError(f"Unknown {kind} id '{item_id}'", ids=[item_id])
    return [_apply_changes(item, changes) if item.id == item_id else item for item in items]


def update_element(elements: Sequence[Element], element_id: str, changes: Mapping[str, Any]) -> list[Element]:
    return _update(elements, element_id, changes, "element")


def update_section(sections: Sequence[Section], section_id: str, changes: Mapping[str, Any]) -> list[Section]:
    return _update(sections, section_id, changes, "section")


def delete_elements(elements: Sequence[Element], ids: Iterable[str]) -> list[Element]:
    doomed = set(ids)
    return [element for element in elements if element.id not in doomed]


def descendant_section_ids(sections: Sequence[Section], roots: Iterable[str]) -> set[str]:
    children: dict[str, list[str]] = {}
    for section in sections:
        if section.parent_section:
            children.setdefault(section.parent_section, []).append(section.id)

    found: set[str] = set()
    pending = [section_id for section_id in roots if any(s.id == section_id for s in sections)]
    while pending:
        current = pending.pop()
        if current in found:
            continue
        found.add(current)
        pending.extend(children.get(current, []))
    return found


def delete_sections(
    elements: Sequence[Element],
    sections: Sequence[Section],
    ids: Iterable[str],
) -> tuple[list[Element], list[Section]]:
    doomed = descendant_section_ids(sections, ids)
    kept_sections = [section for section in sections if section.id not in doomed]
    kept_elements = [element for element in elements if element.parent_section not in doomed]
    return kept_elements, kept_sections


def move_to_section(
    elements: Sequence[Element],
    element_ids: Iterable[str],
    section_id: str | None,
) -> list[Element]:
    moving = set(element_ids)
    return [
        element.model_copy(update={"parent_section": section_id}) if element.id in moving else element
        for element in elements
    ]


def duplicate_elements(
    elements: Sequence[Element],
    ids: Iterable[str],
    *,
    id_factory: Callable[[], str] | None = None,
) -> tuple[list[Element], list[str]]:
    make_id = id_factory or _default_id_factory
    wanted = set(ids)
    copies = [
        element.model_copy(
            update={
                "id": make_id(),
                "x": element.x + DUPLICATE_OFFSET,
                "y": element.y + DUPLICATE_OFFSET,
            },
            deep=True,
        )
        for element in elements
        if element.id in wanted
    ]
    existing = {element.id for element in elements}
    clashes = [copy.id for copy in copies if copy.id in existing]
    if clashes:
        raise ModelError(f"Duplicate ids generated: {', '.join(clashes)}", ids=clashes)
    return [*elements, *copies], [copy.id for copy in copies]


def find_section_at_point(sections: Sequence[Section], x: float, y: float) -> Section | None:
    return find_topmost_containing(sections, x, y)
