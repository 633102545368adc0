from .editing import (
    delete_elements,
    delete_sections,
    duplicate_elements,
    find_section_at_point,
    move_to_section,
    update_element,
    update_section,
)
from .errors import ModelError
from .geometry import (
    LINE_EPS,
    bounding_box,
    contains_point,
    overlaps,
    reading_order_compare,
    sort_by_reading_order,
)
from .linearizer import MAX_SECTION_DEPTH, linearize
from .tree import DocumentTree, EntryNode, HeaderNode, ListNode, Node, SectionNode, TextNode

__all__ = [
    "LINE_EPS",
    "contains_point",
    "overlaps",
    "bounding_box",
    "reading_order_compare",
    "sort_by_reading_order",
    "linearize",
    "MAX_SECTION_DEPTH",
    "ModelError",
    "DocumentTree",
    "Node",
    "HeaderNode",
    "SectionNode",
    "EntryNode",
    "ListNode",
    "TextNode",
    "update_element",
    "update_section",
    "delete_elements",
    "delete_sections",
    "move_to_section",
    "duplicate_elements",
    "find_section_at_point",
]
