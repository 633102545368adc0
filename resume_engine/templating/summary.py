from __future__ import annotations

from typing import Callable, Optional

from resume_engine.schemas.user_data import UserData

SummaryGenerator = Callable[[UserData, Optional[str]], Optional[str]]

DEFAULT_SUMMARY = "Motivated professional with a record of delivering results and a commitment to continuous growth."


def _join(items: list[str]) -> str:
    if len(items) <= 1:
        return "".join(items)
    return f"{', '.join(items[:-1])} and {items[-1]}"


def fallback_summary(user_data: UserData) -> str:
    """Deterministic summary built from titles, employers and skills."""
    experience = [item for item in user_data.experience if item.title or item.company]
    skills = [skill.strip() for skill in user_data.skills if skill.strip()]

    sentences: list[str] = []
    if experience:
        title = next((item.title for item in experience if item.title), "") or "Professional"
        companies: list[str] = []
        for item in experience:
            if item.company and item.company not in companies:
                companies.append(item.company)
        if companies:
            sentences.append(f"{title} with experience at {_join(companies[:3])}.")
        else:
            sentences.append(f"{title} with {len(experience)} role(s) of hands-on experience.")
    if skills:
        sentences.append(f"Skilled in {_join(skills[:5])}.")
    degrees = [item.degree for item in user_data.education if item.degree]
    if degrees:
        sentences.append(f"Holds a {degrees[0]}.")

    return " ".join(sentences) if sentences else DEFAULT_SUMMARY
