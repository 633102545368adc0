"""Semantic HTML serialization of a ``DocumentTree``.

The markup is intentionally flat: one heading per section, paragraphs, and
plain ``ul``/``li`` lists, so ATS parsers that ignore CSS still read the
document in order. The page shell and print CSS live in
``templates/resume.html.j2``.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from resume_engine.layout.tree import DocumentTree, EntryNode, HeaderNode, ListNode, Node, SectionNode, TextNode
from resume_engine.schemas.layout import Element

from .common import build_element_style, escape_html, page_dimensions, strip_bullet_marker

TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"
PAGE_TEMPLATE = "resume.html.j2"


_HEADER_TAGS = {
    "name": ("h1", "name"),
    "title": ("p", "job-title"),
    "contact": ("address", "contact"),
    "email": ("address", "contact"),
    "phone": ("address", "contact"),
    "location": ("address", "contact"),
    "linkedin": ("address", "contact"),
    "website": ("address", "contact"),
    "summary": ("p", "summary-text"),
}


def _text(value: str) -> str:
    return "<br>".join(escape_html(line) for line in value.split("\n"))


def _style_attr(element: Element | None) -> str:
    if element is None:
        return ""
    style = build_element_style(element)
    return f' style="{escape_html(style)}"' if style else ""


def _element_tag(element: Element, default: tuple[str, str]) -> tuple[str, str]:
    tag, css_class = _HEADER_TAGS.get(element.ats_field or "", default)
    if element.semantic_tag:
        tag = element.semantic_tag
    return tag, css_class


def _render_element(element: Element, default: tuple[str, str]) -> str:
    tag, css_class = _element_tag(element, default)
    return f'<{tag} class="{css_class}"{_style_attr(element)}>{_text(element.content)}</{tag}>'


def _render_list(node: ListNode) -> str:
    if node.style == "tags":
        items = "".join(f'<li class="skill-item">{_text(item)}</li>' for item in node.items if item.strip())
        return f'<ul class="skills-list">{items}</ul>'
    items = "".join(
        f"<li>{_text(strip_bullet_marker(item))}</li>" for item in node.items if strip_bullet_marker(item)
    )
    return f'<ul class="bullets">{items}</ul>'


def _render_node(node: Node) -> str:
    if isinstance(node, TextNode):
        if node.element is not None:
            return _render_element(node.element, ("p", "text-element"))
        return f'<p class="summary-text">{_text(node.text)}</p>'
    if isinstance(node, ListNode):
        return _render_list(node)
    if isinstance(node, EntryNode):
        header = f'<h3 class="entry-title">{_text(node.title)}</h3>'
        if node.subtitle:
            header += f'<span class="entry-date">{_text(node.subtitle)}</span>'
        body = "".join(_render_node(child) for child in node.children)
        return f'<div class="entry"><div class="entry-header">{header}</div>{body}</div>'
    if isinstance(node, SectionNode):
        return _render_section(node)
    if isinstance(node, HeaderNode):
        return _render_element(node.element, ("p", "text-element"))
    raise TypeError(f"Unsupported document node: {node!r}")


def _render_section(node: SectionNode) -> str:
    section = node.section
    attrs = f' id="section-{escape_html(section.id)}"'
    if section.ats_header:
        attrs += f' data-ats-header="{escape_html(section.ats_header)}"'
    title = f'<h2 class="section-title">{_text(section.title)}</h2>' if section.title else ""
    body = "".join(_render_node(child) for child in node.children)
    return f'<section class="section"{attrs}>{title}{body}</section>'


def _document_title(tree: DocumentTree) -> str:
    for node in tree.header:
        if node.element.ats_field == "name" and node.element.content.strip():
            return node.element.content.strip()
    return "Resume"


@lru_cache(maxsize=1)
def _environment() -> Environment:
    # Element markup is escaped while it is built; only page fields go through the filter.
    env = Environment(
        loader=FileSystemLoader(str(TEMPLATES_DIR)),
        autoescape=False,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
        undefined=StrictUndefined,
    )
    env.filters["escape_html"] = escape_html
    return env


def render_header(tree: DocumentTree) -> str:
    return "".join(_render_node(node) for node in tree.header)


def render_html(tree: DocumentTree, *, page_size: str = "A4") -> str:
    width, height = page_dimensions(page_size)
    template = _environment().get_template(PAGE_TEMPLATE)
    return template.render(
        title=_document_title(tree),
        width=width,
        height=height,
        page_size=page_size,
        header=render_header(tree),
        sections=[_render_section(node) for node in tree.sections],
    )
