from .ats import check_contact, check_fonts, check_formatting, check_keywords, check_sections, score
from .config import AtsScoringConfig
from .keywords import extract_job_keywords

__all__ = [
    "AtsScoringConfig",
    "score",
    "check_sections",
    "check_contact",
    "check_fonts",
    "check_keywords",
    "check_formatting",
    "extract_job_keywords",
]
