"""Shared utility functions for the Fantasy Football Draft Assistant."""

import re
import unicodedata
from typing import Any, Optional


def normalize_name(name: str) -> str:
    """
    Normalize a player name for matching across different data sources.

    - Removes accents (é → e, ñ → n)
    - Converts to lowercase
    - Strips whitespace and periods
    - Removes suffixes like Jr., Sr., II, III

    Args:
        name: The player name to normalize

    Returns:
        Normalized name string for comparison
    """
    if not name:
        return ""
    # Remove accents
    normalized = unicodedata.normalize('NFD', name)
    without_accents = ''.join(c for c in normalized if unicodedata.category(c) != 'Mn')
    # Lowercase and strip
    result = without_accents.lower().strip()
    # Treat hyphens as spaces so "Smith-Njigba" == "Smith Njigba"
    result = result.replace('-', ' ')
    # Remove common suffixes for better matching
    result = re.sub(r'\s+(jr\.?|sr\.?|ii|iii|iv)$', '', result, flags=re.IGNORECASE)
    # "A.J. Brown" == "AJ Brown"
    result = result.replace('.', '').replace("'", '')
    return re.sub(r'\s+', ' ', result)


def sanitize_error_message(error: Any) -> str:
    """
    Sanitize an error message for safe display to clients and logs.

    Removes API keys, file paths and line numbers, and truncates long messages.

    Args:
        error: The exception (or message) to sanitize

    Returns:
        A safe error message string
    """
    error_str = str(error) or error.__class__.__name__
    # Hide API keys
    error_str = re.sub(r'sk-[a-zA-Z0-9_\-]+', '[API_KEY_HIDDEN]', error_str)
    # Remove file paths
    error_str = re.sub(r'/[^\s]+\.py', '[file]', error_str)
    # Remove line numbers
    error_str = re.sub(r'line \d+', 'line [num]', error_str)
    # Truncate long messages
    if len(error_str) > 200:
        error_str = error_str[:200] + '...'
    return error_str


def parse_team_slot(team: Optional[str], team_count: int) -> Optional[int]:
    """
    Parse a draft slot out of a team identifier such as "3" or "Team 3".

    Returns None when the identifier carries no number or the number is
    outside 1..team_count.
    """
    if not team:
        return None
    match = re.fullmatch(r'(?:team\s*)?#?\s*(\d+)', team.strip(), flags=re.IGNORECASE)
    if not match:
        return None
    slot = int(match.group(1))
    if 1 <= slot <= team_count:
        return slot
    return None

