"""ATS compatibility scoring over a linearized document.

Five independent checks each produce a 0-100 sub-score plus evidence; the
total is their weighted sum, rounded half up. Scoring never raises on empty or
partial input: every check falls back to its "nothing found" baseline, and a
document with no elements and no sections totals 0.
"""

from __future__ import annotations

import math
import re
from typing import Iterable

from resume_engine.layout.tree import DocumentTree
from resume_engine.schemas.scoring import (
    AtsScoreResult,
    ContactCheck,
    FontCheck,
    FormattingCheck,
    FormattingIssue,
    KeywordCheck,
    ScoreBreakdown,
    SectionsCheck,
    Suggestion,
)
from resume_engine.schemas.user_data import UserData

from .config import AtsScoringConfig
from .keywords import extract_job_keywords, find_keywords, flatten_keywords, missing_job_keywords

EMAIL_RE = re.compile(r"[\w.-]+@[\w.-]+\.\w+")
PHONE_RE = re.compile(r"(?:\(?\d{3}\)?[-.\s]?){1}\d{3}[-.\s]?\d{4}")
SPECIAL_CHAR_RE = re.compile(r"[^\w\s.,!?@#$%&*()-]", re.ASCII)

CONTACT_FIELDS = ("email", "phone", "linkedin", "location")
IMAGE_TYPES = frozenset({"image"})

_PRIORITY_RANK = {"high": 0, "medium": 1, "low": 2}


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _clamp(value: float) -> float:
    return max(0.0, min(100.0, value))


def _section_matches(title: str, name: str, aliases: Iterable[str]) -> bool:
    lowered = title.lower()
    if name.lower() in lowered:
        return True
    return any(alias.lower() in lowered for alias in aliases)


def check_sections(tree: DocumentTree, config: AtsScoringConfig) -> SectionsCheck:
    titles = [section.title for section in tree.all_sections if section.title]
    present: list[str] = []
    missing: list[str] = []
    for name in config.required_sections:
        aliases = config.section_aliases.get(name, ())
        if any(_section_matches(title, name, aliases) for title in titles):
            present.append(name)
        else:
            missing.append(name)
    total = len(config.required_sections)
    score = len(present) / total * 100 if total else 100.0
    return SectionsCheck(score=score, present=present, missing=missing)


def _contact_text(tree: DocumentTree, user_data: UserData | None) -> str:
    parts = [tree.full_text()]
    if user_data is not None:
        info = user_data.personal_info
        parts.extend(value for value in (info.email, info.phone, info.linkedin) if value)
    return " ".join(parts).lower()


def _has_location(tree: DocumentTree, user_data: UserData | None) -> bool:
    if any(el.ats_field == "location" and el.content.strip() for el in tree.elements):
        return True
    return bool(user_data is not None and (user_data.personal_info.location or "").strip())


def check_contact(tree: DocumentTree, user_data: UserData | None = None) -> ContactCheck:
    text = _contact_text(tree, user_data)
    checks = {
        "email": bool(EMAIL_RE.search(text)),
        "phone": bool(PHONE_RE.search(text)),
        "linkedin": "linkedin" in text,
        "location": _has_location(tree, user_data),
    }
    matched = sum(1 for name in CONTACT_FIELDS if checks[name])
    missing = [name for name in CONTACT_FIELDS if not checks[name]]
    return ContactCheck(score=matched / len(CONTACT_FIELDS) * 100, checks=checks, missing=missing)


def _primary_family(font_family: str | None, default: str) -> str:
    family = (font_family or default).split(",")[0].strip().strip("'\"")
    return family or default


def check_fonts(tree: DocumentTree, config: AtsScoringConfig) -> FontCheck:
    friendly = {font.lower() for font in config.friendly_fonts}
    # Distinct families compared case-insensitively, first spelling kept.
    families: dict[str, str] = {}
    for element in tree.elements:
        family = _primary_family(element.font_family, config.default_font)
        families.setdefault(family.lower(), family)
    if not families:
        return FontCheck(score=100.0)
    compatible = [font for key, font in families.items() if key in friendly]
    incompatible = [font for key, font in families.items() if key not in friendly]
    return FontCheck(score=len(compatible) / len(families) * 100, compatible=compatible, incompatible=incompatible)


def check_keywords(
    content: str,
    config: AtsScoringConfig,
    job_description: str | None = None,
) -> KeywordCheck:
    found, missing = find_keywords(content, flatten_keywords(config.keywords))
    score = _clamp(len(found) * config.keyword_increment)
    job_keywords: list[str] = []
    job_missing: list[str] = []
    if job_description and job_description.strip():
        job_keywords = extract_job_keywords(
            job_description,
            limit=config.job_keyword_limit,
            min_length=config.job_keyword_min_length,
            stopwords=config.stopwords,
        )
        job_missing = missing_job_keywords(content, job_keywords)
    return KeywordCheck(
        score=score,
        found=found,
        missing=job_missing if job_keywords else missing,
        job_keywords=job_keywords,
    )


def check_formatting(tree: DocumentTree, content: str, config: AtsScoringConfig) -> FormattingCheck:
    penalties = config.penalties
    score = 100.0
    issues: list[FormattingIssue] = []

    if any(s.direction == "horizontal" and s.content_type == "list-sections" for s in tree.all_sections):
        score -= penalties.get("complex_layout", 0)
        issues.append(FormattingIssue(type="warning", message="Complex multi-column layout may confuse ATS parsers"))

    if any(el.type in IMAGE_TYPES for el in tree.elements):
        score -= penalties.get("images", 0)
        issues.append(FormattingIssue(type="error", message="Images cannot be read by ATS systems"))

    special_count = len(SPECIAL_CHAR_RE.findall(content))
    if special_count > config.special_char_limit:
        score -= penalties.get("special_chars", 0)
        issues.append(FormattingIssue(type="warning", message="Excessive special characters detected"))

    word_count = len(content.split())
    if word_count < config.min_word_count:
        score -= penalties.get("thin_content", 0)
        issues.append(
            FormattingIssue(
                type="info",
                message=f"Resume has only {word_count} words; aim for at least {config.min_word_count}",
            )
        )

    return FormattingCheck(
        score=_clamp(score),
        issues=issues,
        word_count=word_count,
        special_char_count=special_count,
    )


def _suggestions(breakdown: ScoreBreakdown, config: AtsScoringConfig) -> list[Suggestion]:
    out: list[Suggestion] = []
    for name in breakdown.sections.missing:
        label = name.capitalize()
        out.append(
            Suggestion(
                type="section",
                priority="high",
                message=f"Add a {label} section",
                action=f"add_section:{name}",
                data=[name],
            )
        )

    contact = breakdown.contact
    if contact.missing:
        out.append(
            Suggestion(
                type="contact",
                priority="high",
                message=f"Add missing contact information: {', '.join(contact.missing)}",
                action="add_contact",
                data=list(contact.missing),
            )
        )

    fonts = breakdown.fonts
    if fonts.incompatible:
        out.append(
            Suggestion(
                type="font",
                priority="medium",
                message=(
                    f"Replace non-standard fonts ({', '.join(fonts.incompatible)}) "
                    f"with ATS-friendly fonts like {', '.join(config.friendly_fonts[:3])}"
                ),
                action="change_font",
                data=list(fonts.incompatible),
            )
        )

    keywords = breakdown.keywords
    top = keywords.missing[: config.suggested_keyword_count]
    if keywords.job_keywords and top:
        out.append(
            Suggestion(
                type="keyword",
                priority="medium",
                message=f"Consider adding keywords from the job description: {', '.join(top)}",
                action="add_keywords",
                data=top,
            )
        )
    elif not keywords.job_keywords and keywords.score < 50 and top:
        out.append(
            Suggestion(
                type="keyword",
                priority="medium",
                message=f"Use more action verbs such as {', '.join(top)}",
                action="add_keywords",
                data=top,
            )
        )

    for issue in breakdown.formatting.issues:
        out.append(
            Suggestion(
                type="format",
                priority="high" if issue.type == "error" else "low",
                message=issue.message,
            )
        )

    return sorted(out, key=lambda suggestion: _PRIORITY_RANK[suggestion.priority])


def score(
    tree: DocumentTree,
    user_data: UserData | None = None,
    job_description: str | None = None,
    *,
    config: AtsScoringConfig | None = None,
) -> AtsScoreResult:
    cfg = config or AtsScoringConfig()
    content = tree.full_text()
    breakdown = ScoreBreakdown(
        sections=check_sections(tree, cfg),
        contact=check_contact(tree, user_data),
        fonts=check_fonts(tree, cfg),
        keywords=check_keywords(content, cfg, job_description),
        formatting=check_formatting(tree, content, cfg),
    )

    weights = dict(cfg.weights)
    if tree.is_empty:
        total = 0
    else:
        weighted = sum(
            weights.get(name, 0.0) * getattr(breakdown, name).score
            for name in ("sections", "contact", "fonts", "keywords", "formatting")
        )
        total = _round_half_up(_clamp(weighted))

    return AtsScoreResult(
        score=total,
        suggestions=_suggestions(breakdown, cfg),
        breakdown=breakdown,
        weights=weights,
    )
