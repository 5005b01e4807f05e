"""
narrative.py - Template-based remark text for report cards.

Uses f-string templates only; the engine decides when each applies.
"""

from typing import Iterable

DEFAULT_RECOMMENDATION = "Recommended to attend extra classes for weak areas."


def narrate_weak_subjects(subjects: Iterable[str]) -> str:
    names = list(subjects)
    if not names:
        return ""
    return f"Needs urgent improvement in: {', '.join(names)}."


def narrate_overall_performance(category: str) -> str:
    return f"Overall performance is {category}."


def combine_remarks(*parts: str) -> str:
    """
    Join remark paragraphs with a blank line.

    Empty parts are skipped, so a remark without a weakness sentence
    carries no leading blank line.
    """
    return "\n\n".join(p for p in parts if p)
