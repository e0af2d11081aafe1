from __future__ import annotations

import math
from typing import List, Optional

MATCH_THRESHOLD = 0.7


def _normalize(value: Optional[str]) -> str:
    return (value or "").strip().lower()


def min_match_length(primary_name: str, secondary_name: str, threshold: float = MATCH_THRESHOLD) -> int:
    names = [name for name in (_normalize(primary_name), _normalize(secondary_name)) if name]
    if not names:
        return 0
    return math.floor(min(len(name) for name in names) * threshold)


def matches(
    user_answer: str,
    primary_name: str,
    secondary_name: str,
    *,
    threshold: float = MATCH_THRESHOLD,
) -> bool:
    """Forgiving free-text check of a guess against a title and its alias.

    An exact (case-insensitive, trimmed) match on either name wins. Otherwise
    a guess at least ``threshold`` times as long as the shorter name is
    accepted when it is contained in a name or contains one. Empty names are
    ignored, and an empty guess never matches.
    """
    answer = _normalize(user_answer)
    if not answer:
        return False

    names: List[str] = [name for name in (_normalize(primary_name), _normalize(secondary_name)) if name]
    if answer in names:
        return True

    if len(answer) < min_match_length(primary_name, secondary_name, threshold):
        return False
    return any(answer in name or name in answer for name in names)


def verify_selection(correct_id: int, selected_id: Optional[int]) -> Optional[bool]:
    """Id comparison for a guess picked from the suggestion list; ``None`` for free text."""
    if selected_id is None:
        return None
    return selected_id == correct_id
