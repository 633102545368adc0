from .layout import (
    AtsField,
    ContentType,
    Direction,
    Element,
    EntryBlock,
    FilledBlock,
    ListBlock,
    Rect,
    Section,
    TextBlock,
)
from .scoring import (
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
from .user_data import EducationItem, ExperienceItem, PersonalInfo, UserData

__all__ = [
    "AtsField",
    "ContentType",
    "Direction",
    "Rect",
    "Element",
    "Section",
    "EntryBlock",
    "ListBlock",
    "TextBlock",
    "FilledBlock",
    "PersonalInfo",
    "ExperienceItem",
    "EducationItem",
    "UserData",
    "Suggestion",
    "SectionsCheck",
    "ContactCheck",
    "FontCheck",
    "KeywordCheck",
    "FormattingIssue",
    "FormattingCheck",
    "ScoreBreakdown",
    "AtsScoreResult",
]
