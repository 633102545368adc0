from .fill import PLACEHOLDER_RE, FilledTemplate, fill_template, section_category
from .summary import SummaryGenerator, fallback_summary

__all__ = [
    "PLACEHOLDER_RE",
    "FilledTemplate",
    "SummaryGenerator",
    "fill_template",
    "fallback_summary",
    "section_category",
]
