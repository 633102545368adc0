from __future__ import annotations

from resume_engine.layout.tree import DocumentTree, EntryNode, HeaderNode, ListNode, Node, SectionNode, TextNode

from .common import BULLET_GLYPH, RULE_CHAR, RULE_WIDTH, strip_bullet_marker


def _lines(value: str) -> list[str]:
    return [line.strip() for line in value.split("\n") if line.strip()]


def _node_lines(node: Node) -> list[str]:
    if isinstance(node, (TextNode, HeaderNode)):
        text = node.text if isinstance(node, TextNode) else node.element.content
        return _lines(text)
    if isinstance(node, ListNode):
        items = [strip_bullet_marker(item) for item in node.items]
        items = [item for item in items if item]
        if node.style == "tags":
            return [", ".join(items)] if items else []
        return [f"{BULLET_GLYPH} {item}" for item in items]
    if isinstance(node, EntryNode):
        lines = _lines(node.title)
        if node.subtitle:
            lines.extend(_lines(node.subtitle))
        for child in node.children:
            lines.extend(_node_lines(child))
        return lines
    if isinstance(node, SectionNode):
        return _section_lines(node)
    raise TypeError(f"Unsupported document node: {node!r}")


def _section_lines(node: SectionNode) -> list[str]:
    lines: list[str] = []
    title = node.section.title.strip()
    if title:
        lines.append(title.upper())
        lines.append(RULE_CHAR * RULE_WIDTH)
    for child in node.children:
        lines.extend(_node_lines(child))
    return lines


def render_text(tree: DocumentTree) -> str:
    """Plain-text reading-order export, blocks separated by a blank line."""
    blocks: list[list[str]] = []
    header: list[str] = []
    for node in tree.header:
        header.extend(_node_lines(node))
    if header:
        blocks.append(header)
    for node in tree.sections:
        lines = _section_lines(node)
        if lines:
            blocks.append(lines)
    if not blocks:
        return ""
    return "\n\n".join("\n".join(block) for block in blocks) + "\n"
