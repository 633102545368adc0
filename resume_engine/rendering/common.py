from __future__ import annotations

import re

from resume_engine.schemas.layout import Element

BULLET_GLYPH = "•"
RULE_CHAR = "-"
RULE_WIDTH = 40

# Canvas pixels at 96 dpi.
PAGE_SIZES: dict[str, tuple[int, int]] = {
    "A4": (794, 1123),
    "Letter": (816, 1056),
}

_HTML_ESCAPES = (
    ("&", "&amp;"),
    ("<", "&lt;"),
    (">", "&gt;"),
    ('"', "&quot;"),
    ("'", "&#039;"),
)

_BULLET_MARKER_RE = re.compile(r"^\s*(?:(?:•\s*|-\s+)+|\d+\.\s+)")


def escape_html(text: str | None) -> str:
    if not text:
        return ""
    escaped = str(text)
    for raw, entity in _HTML_ESCAPES:
        escaped = escaped.replace(raw, entity)
    return escaped


def strip_bullet_marker(text: str) -> str:
    """Drop leading •, "- " or "1." markers so the caller can add its own."""
    return _BULLET_MARKER_RE.sub("", text, count=1).strip()


def _format_number(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else f"{value:g}"


def build_element_style(element: Element) -> str:
    """Inline CSS for the style attributes actually set on ``element``."""
    parts: list[str] = []
    if element.font_size is not None:
        parts.append(f"font-size: {_format_number(element.font_size)}pt")
    if element.font_weight:
        parts.append(f"font-weight: {element.font_weight}")
    if element.font_family:
        parts.append(f"font-family: {element.font_family}, sans-serif")
    if element.color:
        parts.append(f"color: {element.color}")
    if element.text_align:
        parts.append(f"text-align: {element.text_align}")
    if element.line_height is not None and element.line_height != "":
        line_height = element.line_height
        if isinstance(line_height, (int, float)):
            line_height = _format_number(line_height)
        parts.append(f"line-height: {line_height}")
    return "; ".join(parts)


def page_dimensions(page_size: str) -> tuple[int, int]:
    try:
        return PAGE_SIZES[page_size]
    except KeyError as exc:
        raise ValueError(f"Unsupported page size '{page_size}'. Use one of: {', '.join(PAGE_SIZES)}") from exc
