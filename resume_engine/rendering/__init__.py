from __future__ import annotations

from typing import Literal

from resume_engine.layout.tree import DocumentTree

from .common import BULLET_GLYPH, PAGE_SIZES, build_element_style, escape_html, strip_bullet_marker
from .html import render_html
from .text import render_text

RenderMode = Literal["html", "text"]


def render(tree: DocumentTree, mode: RenderMode = "html", *, page_size: str = "A4") -> str:
    if mode == "html":
        return render_html(tree, page_size=page_size)
    if mode == "text":
        return render_text(tree)
    raise ValueError(f"Unsupported render mode '{mode}'. Use 'html' or 'text'.")


__all__ = [
    "RenderMode",
    "render",
    "render_html",
    "render_text",
    "escape_html",
    "build_element_style",
    "strip_bullet_marker",
    "BULLET_GLYPH",
    "PAGE_SIZES",
]
