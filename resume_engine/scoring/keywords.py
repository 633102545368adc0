from __future__ import annotations

import re
from collections import Counter
from typing import Iterable, Mapping

_NON_WORD_RE = re.compile(r"[^\w\s]")


def flatten_keywords(categories: Mapping[str, Iterable[str]]) -> list[str]:
    """Unique keywords across categories, first occurrence wins."""
    seen: dict[str, None] = {}
    for keywords in categories.values():
        for keyword in keywords:
            seen.setdefault(keyword.lower(), None)
    return list(seen)


def find_keywords(content: str, keywords: Iterable[str]) -> tuple[list[str], list[str]]:
    lowered = content.lower()
    found: list[str] = []
    missing: list[str] = []
    for keyword in keywords:
        (found if keyword.lower() in lowered else missing).append(keyword)
    return found, missing


def extract_job_keywords(
    text: str,
    *,
    limit: int = 20,
    min_length: int = 5,
    stopwords: Iterable[str] = (),
) -> list[str]:
    """Most frequent words of a job description, ties in first-seen order."""
    if not text or limit <= 0:
        return []
    blocked = set(stopwords)
    words = [
        word
        for word in _NON_WORD_RE.sub("", text.lower()).split()
        if len(word) >= min_length and word not in blocked and not word.isdigit()
    ]
    return [word for word, _ in Counter(words).most_common(limit)]


def missing_job_keywords(content: str, job_keywords: Iterable[str]) -> list[str]:
    lowered = content.lower()
    return [keyword for keyword in job_keywords if keyword not in lowered]
