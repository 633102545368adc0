from __future__ import annotations

import logging
from functools import lru_cache

from openai import OpenAI

from resume_engine.core.config import settings
from resume_engine.schemas.user_data import UserData

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You write resume summaries. Reply with two or three plain sentences without first-person "
    "pronouns, no markdown, no quotes, under 70 words. Use only facts from the input."
)


def _looks_like_placeholder(value: str) -> bool:
    lower = value.strip().lower()
    return lower.startswith("your_") or lower.startswith("replace_") or lower in {"changeme", "todo"}


def summary_llm_enabled() -> bool:
    if not settings.summary_llm_enabled:
        return False
    api_key = (settings.openai_api_key or "").strip()
    return bool(api_key) and not _looks_like_placeholder(api_key)


@lru_cache(maxsize=1)
def _client() -> OpenAI:
    return OpenAI(
        api_key=(settings.openai_api_key or "").strip(),
        base_url=settings.openai_base_url or None,
        timeout=20.0,
        max_retries=2,
    )


def _user_prompt(user_data: UserData, job_description: str | None) -> str:
    lines: list[str] = []
    for item in user_data.experience[:4]:
        period = " - ".join(part for part in (item.start_date, "Present" if item.current else item.end_date) if part)
        lines.append(f"Role: {item.title} at {item.company} ({period})".strip())
        if item.description:
            lines.append(f"  {item.description[:400]}")
    for item in user_data.education[:2]:
        lines.append(f"Education: {item.degree} {item.field} at {item.school}".strip())
    if user_data.skills:
        lines.append(f"Skills: {', '.join(user_data.skills[:15])}")
    if job_description:
        lines.append(f"Target job description:\n{job_description[:2000]}")
    return "\n".join(lines) or "No details provided."


def generate_summary(user_data: UserData, job_description: str | None = None) -> str | None:
    """OpenAI summary, or None so the caller falls back to the fixed template."""
    if not summary_llm_enabled():
        return None
    try:
        response = _client().chat.completions.create(
            model=settings.summary_llm_model,
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": _user_prompt(user_data, job_description)},
            ],
            temperature=0.3,
            max_tokens=200,
        )
        content = response.choices[0].message.content if response.choices else ""
        return (content or "").strip() or None
    except Exception as exc:  # noqa: BLE001 - fixed summary is the fallback
        logger.warning("summary_llm_failed model=%s: %s", settings.summary_llm_model, exc)
        return None
