from __future__ import annotations

from typing import Literal

from pydantic import Field

from .layout import CamelModel

Priority = Literal["high", "medium", "low"]
IssueType = Literal["error", "warning", "info"]
SuggestionType = Literal["section", "contact", "font", "keyword", "format"]


class Suggestion(CamelModel):
    type: SuggestionType
    priority: Priority
    message: str
    action: str | None = None
    data: list[str] = Field(default_factory=list)


class SectionsCheck(CamelModel):
    score: float = Field(ge=0, le=100)
    present: list[str] = Field(default_factory=list)
    missing: list[str] = Field(default_factory=list)


class ContactCheck(CamelModel):
    score: float = Field(ge=0, le=100)
    checks: dict[str, bool] = Field(default_factory=dict)
    missing: list[str] = Field(default_factory=list)


class FontCheck(CamelModel):
    score: float = Field(ge=0, le=100)
    compatible: list[str] = Field(default_factory=list)
    incompatible: list[str] = Field(default_factory=list)


class KeywordCheck(CamelModel):
    score: float = Field(ge=0, le=100)
    found: list[str] = Field(default_factory=list)
    missing: list[str] = Field(default_factory=list)
    job_keywords: list[str] = Field(default_factory=list)


class FormattingIssue(CamelModel):
    type: IssueType
    message: str


class FormattingCheck(CamelModel):
    score: float = Field(ge=0, le=100)
    issues: list[FormattingIssue] = Field(default_factory=list)
    word_count: int = Field(default=0, ge=0)
    special_char_count: int = Field(default=0, ge=0)


class ScoreBreakdown(CamelModel):
    sections: SectionsCheck
    contact: ContactCheck
    fonts: FontCheck
    keywords: KeywordCheck
    formatting: FormattingCheck


class AtsScoreResult(CamelModel):
    score: int = Field(ge=0, le=100)
    suggestions: list[Suggestion] = Field(default_factory=list)
    breakdown: ScoreBreakdown
    weights: dict[str, float] = Field(default_factory=dict)
