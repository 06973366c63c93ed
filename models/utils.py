"""Utility functions for HueTrek.

This module contains helper functions used across the application:
- similarity_score: Fuzzy string matching used for typo suggestions
- find_similar_strings: Rank candidate names by similarity
- find_by_name: Resolve a user-supplied light/group/bridge reference
"""

from typing import Iterable, TypeVar

T = TypeVar('T')


def similarity_score(s1: str, s2: str) -> int:
    """Calculate similarity score between two strings.

    Returns:
        100 for a case-insensitive exact match, 80 for a prefix match,
        60 for a substring match, 21-50 proportional to the characters of
        s1 found in order in s2, otherwise 0
    """
    s1_lower = s1.lower()
    s2_lower = s2.lower()

    if s1_lower == s2_lower:
        return 100
    if s2_lower.startswith(s1_lower) or s1_lower.startswith(s2_lower):
        return 80
    if s1_lower in s2_lower or s2_lower in s1_lower:
        return 60

    # Characters of s1 appearing in order in s2
    matches = 0
    position = 0
    for char in s1_lower:
        found = s2_lower.find(char, position)
        if found == -1:
            continue
        matches += 1
        position = found + 1

    if matches == 0:
        return 0
    score = int((matches / max(len(s1_lower), len(s2_lower))) * 50)
    return score if score > 20 else 0


def find_similar_strings(target: str, candidates: Iterable[str], limit: int = 5) -> list[str]:
    """Return up to limit candidates similar to target, most similar first."""
    scored = [(candidate, similarity_score(target, candidate)) for candidate in candidates]
    matches = sorted((pair for pair in scored if pair[1] > 0), key=lambda pair: pair[1], reverse=True)
    return [candidate for candidate, _ in matches[:limit]]


def find_by_name(items: Iterable[T], reference: str) -> T | None:
    """Find an item by id, then by case-insensitive name, then by unique prefix.

    Items need ``id`` and ``name`` attributes.
    """
    items = list(items)

    for item in items:
        if item.id == reference:
            return item

    lowered = reference.lower()
    for item in items:
        if item.name.lower() == lowered:
            return item

    prefixed = [item for item in items if item.name.lower().startswith(lowered)]
    if len(prefixed) == 1:
        return prefixed[0]
    return None
