"""Placeholder substitution over template elements.

``fill_template`` works on deep copies and never touches its inputs. Tokens
look like ``{name}`` (case-insensitive, inner whitespace allowed). Personal
info tokens resolve to the user's value or an empty string; ``{summary}``
resolves to the user's summary, then the optional generator, then a fixed
fallback; any other token is left exactly as written.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Iterable, Mapping

from resume_engine.layout.linearizer import coerce_models
from resume_engine.schemas.layout import Element, Section
from resume_engine.schemas.user_data import UserData
from resume_engine.scoring.config import SECTION_ALIASES

from .summary import SummaryGenerator, fallback_summary

PLACEHOLDER_RE = re.compile(r"\{\s*([A-Za-z][A-Za-z0-9_]*)\s*\}")
PERSONAL_FIELDS = ("name", "email", "phone", "location", "linkedin", "website")
FILLED_CATEGORIES = ("experience", "education", "skills")


@dataclass(frozen=True)
class FilledTemplate:
    elements: list[Element]
    sections: list[Section]


def _coerce_user_data(user_data: UserData | Mapping[str, Any] | None) -> UserData:
    if user_data is None:
        return UserData()
    if isinstance(user_data, UserData):
        return user_data
    return UserData.model_validate(user_data)


def _summary_resolver(user_data: UserData, job_description: str | None, generator: SummaryGenerator | None):
    cache: list[str] = []

    def resolve() -> str:
        if not cache:
            text = user_data.summary.strip()
            if not text and generator is not None:
                text = (generator(user_data, job_description) or "").strip()
            cache.append(text or fallback_summary(user_data))
        return cache[0]

    return resolve


def _substitute(content: str, values: Mapping[str, str], resolve_summary) -> str:
    def replace(match: re.Match[str]) -> str:
        key = match.group(1).lower()
        if key in values:
            return values[key]
        if key == "summary":
            return resolve_summary()
        return match.group(0)

    return PLACEHOLDER_RE.sub(replace, content)


def section_category(
    section: Section,
    aliases: Mapping[str, Iterable[str]] = SECTION_ALIASES,
) -> str | None:
    """Which of experience, education or skills a section holds, if any."""
    candidates = [section.ats_header or "", section.title]
    for category in FILLED_CATEGORIES:
        names = (category, *aliases.get(category, ()))
        for candidate in candidates:
            lowered = candidate.lower()
            if lowered and any(name.lower() in lowered for name in names):
                return category
    return None


def _item_count(user_data: UserData, category: str) -> int:
    if category == "experience":
        return len(user_data.experience)
    if category == "education":
        return len(user_data.education)
    return len([skill for skill in user_data.skills if skill.strip()])


def fill_template(
    elements: Iterable[Element | Mapping[str, Any]],
    sections: Iterable[Section | Mapping[str, Any]],
    user_data: UserData | Mapping[str, Any] | None,
    job_description: str | None = None,
    *,
    summary_generator: SummaryGenerator | None = None,
    section_aliases: Mapping[str, Iterable[str]] | None = None,
) -> FilledTemplate:
    data = _coerce_user_data(user_data)
    info = data.personal_info
    values = {field: (getattr(info, field) or "") for field in PERSONAL_FIELDS}
    resolve_summary = _summary_resolver(data, job_description, summary_generator)
    aliases = SECTION_ALIASES if section_aliases is None else section_aliases

    filled_elements: list[Element] = []
    for element in coerce_models(elements, Element, "element"):
        clone = element.model_copy(deep=True)
        if PLACEHOLDER_RE.search(clone.content):
            clone = clone.model_copy(update={"content": _substitute(clone.content, values, resolve_summary)})
        filled_elements.append(clone)

    filled_sections: list[Section] = []
    for section in coerce_models(sections, Section, "section"):
        clone = section.model_copy(deep=True)
        category = section_category(clone, aliases)
        if category is not None:
            clone = clone.model_copy(update={"filled": True, "item_count": _item_count(data, category)})
        filled_sections.append(clone)

    return FilledTemplate(elements=filled_elements, sections=filled_sections)
