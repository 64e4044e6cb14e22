"""Utilities for template name matching and paging."""

import re
from difflib import SequenceMatcher


def normalize_template_name(name: str) -> str:
    """Normalize a template name for comparison.

    Converts to lowercase, removes extra whitespace, and expands common gym
    abbreviations.
    """
    normalized = name.lower().strip()
    normalized = re.sub(r"\s+", " ", normalized)

    abbreviations = {
        "bb": "barbell",
        "db": "dumbbell",
        "kb": "kettlebell",
        "ohp": "overhead press",
        "rdl": "romanian deadlift",
        "amrap": "as many rounds as possible",
        "hiit": "high intensity interval training",
    }

    if normalized in abbreviations:
        return abbreviations[normalized]

    for abbrev, full in abbreviations.items():
        normalized = re.sub(rf"\b{abbrev}\b", full, normalized)

    return normalized


def matches_search(name: str, query: str | None) -> bool:
    """Whether ``name`` contains the search text (after normalization)."""
    if not query:
        return True
    return normalize_template_name(query) in normalize_template_name(name)


def find_matching_template(
    name: str,
    records: list[dict],
    threshold: float = 0.8,
) -> dict | None:
    """Find the template record whose name best matches ``name``.

    Args:
        name: Name typed by the user
        records: Template records to search
        threshold: Minimum similarity ratio (0-1) to consider a match

    Returns:
        The best matching record or None if nothing is close enough
    """
    normalized_name = normalize_template_name(name)

    best_match: dict | None = None
    best_score = 0.0

    for record in records:
        candidate = normalize_template_name(record.get("name", ""))
        if candidate == normalized_name:
            return record

        score = SequenceMatcher(None, normalized_name, candidate).ratio()
        if score > best_score:
            best_score = score
            best_match = record

    if best_score >= threshold:
        return best_match
    return None


def paginate(records: list, page: int, page_size: int) -> list:
    """Slice out a 1-based page."""
    if page < 1 or page_size < 1:
        raise ValueError("page and page_size must be >= 1")
    start = (page - 1) * page_size
    return records[start : start + page_size]
