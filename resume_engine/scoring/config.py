from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

DEFAULT_WEIGHTS: dict[str, float] = {
    "sections": 0.25,
    "contact": 0.15,
    "fonts": 0.10,
    "keywords": 0.30,
    "formatting": 0.20,
}

DEFAULT_PENALTIES: dict[str, int] = {
    "complex_layout": 10,
    "images": 20,
    "special_chars": 5,
    "thin_content": 10,
}

ATS_FRIENDLY_FONTS: tuple[str, ...] = (
    "Arial",
    "Calibri",
    "Cambria",
    "Georgia",
    "Garamond",
    "Helvetica",
    "Times New Roman",
    "Trebuchet MS",
    "Verdana",
    "Tahoma",
)

REQUIRED_SECTIONS: tuple[str, ...] = ("experience", "education", "skills")

SECTION_ALIASES: dict[str, tuple[str, ...]] = {
    "experience": ("Work Experience", "Professional Experience", "Employment History", "Work History"),
    "education": ("Academic Background", "Educational Background", "Academic History"),
    "skills": ("Technical Skills", "Core Competencies", "Areas of Expertise", "Proficiencies"),
    "summary": ("Summary", "Profile", "Objective", "Career Summary", "Executive Summary"),
    "certifications": ("Licenses & Certifications", "Professional Certifications", "Credentials"),
    "projects": ("Key Projects", "Notable Projects", "Project Experience"),
}

ATS_KEYWORDS: dict[str, tuple[str, ...]] = {
    "leadership": (
        "led", "managed", "directed", "supervised", "coordinated",
        "mentored", "trained", "delegated", "oversaw", "headed",
    ),
    "achievement": (
        "achieved", "accomplished", "delivered", "exceeded", "improved",
        "increased", "reduced", "optimized", "streamlined", "saved",
    ),
    "technical": (
        "developed", "implemented", "designed", "built", "engineered",
        "programmed", "automated", "integrated", "deployed", "maintained",
    ),
    "communication": (
        "presented", "negotiated", "collaborated", "communicated", "liaised",
        "facilitated", "articulated", "persuaded", "influenced", "advocated",
    ),
    "analytical": (
        "analyzed", "evaluated", "assessed", "researched", "investigated",
        "identified", "diagnosed", "solved", "resolved", "troubleshot",
    ),
    "organizational": (
        "organized", "planned", "scheduled", "prioritized", "managed",
        "administered", "executed", "launched", "initiated", "established",
    ),
}

STOPWORDS: frozenset[str] = frozenset(
    {
        "the", "a", "an", "and", "or", "but", "in", "on", "at", "to", "for",
        "of", "with", "by", "from", "as", "is", "was", "are", "were", "been",
        "be", "have", "has", "had", "do", "does", "did", "will", "would", "could",
        "should", "may", "might", "must", "shall", "can", "need", "our", "your",
        "we", "you", "they", "this", "that", "these", "those", "about", "their",
        "which", "while", "where", "other", "there", "within",
    }
)


@dataclass(frozen=True)
class AtsScoringConfig:
    """Heuristic constants for the ATS checks.

    The values mirror ``core/config/scoring.yaml``; ``from_mapping`` builds an
    instance from that file's ``ats`` block, falling back to these defaults
    for any missing key.
    """

    weights: Mapping[str, float] = field(default_factory=lambda: dict(DEFAULT_WEIGHTS))
    penalties: Mapping[str, int] = field(default_factory=lambda: dict(DEFAULT_PENALTIES))
    keyword_increment: int = 5
    job_keyword_limit: int = 20
    job_keyword_min_length: int = 5
    suggested_keyword_count: int = 5
    min_word_count: int = 100
    special_char_limit: int = 10
    default_font: str = "Arial"
    friendly_fonts: tuple[str, ...] = ATS_FRIENDLY_FONTS
    required_sections: tuple[str, ...] = REQUIRED_SECTIONS
    section_aliases: Mapping[str, tuple[str, ...]] = field(default_factory=lambda: dict(SECTION_ALIASES))
    keywords: Mapping[str, tuple[str, ...]] = field(default_factory=lambda: dict(ATS_KEYWORDS))
    stopwords: frozenset[str] = STOPWORDS

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any] | None) -> "AtsScoringConfig":
        if not raw:
            return cls()
        defaults = cls()
        weights = {**defaults.weights, **{k: float(v) for k, v in (raw.get("weights") or {}).items()}}
        penalties = {**defaults.penalties, **{k: int(v) for k, v in (raw.get("penalties") or {}).items()}}
        aliases = raw.get("section_aliases")
        keywords = raw.get("keywords")
        stopwords = raw.get("stopwords")
        return cls(
            weights=weights,
            penalties=penalties,
            keyword_increment=int(raw.get("keyword_increment", defaults.keyword_increment)),
            job_keyword_limit=int(raw.get("job_keyword_limit", defaults.job_keyword_limit)),
            job_keyword_min_length=int(raw.get("job_keyword_min_length", defaults.job_keyword_min_length)),
            suggested_keyword_count=int(raw.get("suggested_keyword_count", defaults.suggested_keyword_count)),
            min_word_count=int(raw.get("min_word_count", defaults.min_word_count)),
            special_char_limit=int(raw.get("special_char_limit", defaults.special_char_limit)),
            default_font=str(raw.get("default_font", defaults.default_font)),
            friendly_fonts=tuple(raw.get("friendly_fonts") or defaults.friendly_fonts),
            required_sections=tuple(raw.get("required_sections") or defaults.required_sections),
            section_aliases=(
                {str(k): tuple(v or ()) for k, v in aliases.items()} if aliases else defaults.section_aliases
            ),
            keywords={str(k): tuple(v or ()) for k, v in keywords.items()} if keywords else defaults.keywords,
            stopwords=frozenset(str(word).lower() for word in stopwords) if stopwords else defaults.stopwords,
        )
