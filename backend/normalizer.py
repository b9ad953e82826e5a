import re

from plan_models import (
    DEFAULT_WEIGHT,
    DIFFICULTY_LEVELS,
    MAX_WEIGHT,
    MIN_WEIGHT,
    WEEKDAY_NAMES,
)

# Splits "Trees, Graphs; Sorting" and newline-separated lists.
_LIST_SPLIT = re.compile(r'[,\n;]+')
# Matches: mon, Tue, TUES, thurs, Wednesday, etc.
_WEEKDAY_TOKEN = re.compile(r'^[A-Za-z]{3,9}$')


def split_list(raw) -> list[str]:
    """
    Accepts a list of strings or a comma/newline/semicolon-separated string.
    Returns stripped, non-empty items in input order, deduplicated.
    """
    if raw is None:
        return []
    if isinstance(raw, (list, tuple)):
        tokens = [str(item) for item in raw if item is not None]
    else:
        tokens = _LIST_SPLIT.split(str(raw))

    items = []
    seen: set[str] = set()
    for token in tokens:
        token = token.strip()
        if not token or token in seen:
            continue
        items.append(token)
        seen.add(token)
    return items


def normalize_weekday(raw: str) -> str | None:
    """
    Normalizes a weekday to its canonical English name ('Monday').
    Handles: 'monday', 'MON', 'Tues', 'thurs'.
    Returns None if the token is not an unambiguous weekday prefix.
    """
    if not raw or not str(raw).strip():
        return None
    token = str(raw).strip()
    if not _WEEKDAY_TOKEN.match(token):
        return None
    token = token.lower()
    matches = [name for name in WEEKDAY_NAMES if name.lower().startswith(token)]
    if len(matches) == 1:
        return matches[0]
    return None


def normalize_days(raw) -> dict:
    """
    Splits and normalizes a preferred-days value.

    Returns:
      {
        "valid":   ["Monday", "Wednesday"],   # canonical, deduplicated, input order
        "invalid": ["Funday"]                 # could not be recognized
      }
    """
    valid = []
    invalid = []
    for token in split_list(raw):
        day = normalize_weekday(token)
        if day is None:
            invalid.append(token)
        elif day not in valid:
            valid.append(day)
    return {"valid": valid, "invalid": invalid}


def normalize_difficulty(raw, default: str | None = None) -> str | None:
    """Lower-cases a difficulty label. Blank → default, unknown → None."""
    if raw is None or not str(raw).strip():
        return default
    level = str(raw).strip().lower()
    return level if level in DIFFICULTY_LEVELS else None


def normalize_weight(raw) -> int:
    """Integer weight in 1-100; anything absent or invalid falls back to 50."""
    if raw is None or isinstance(raw, bool):
        return DEFAULT_WEIGHT
    try:
        value = float(raw)
    except (TypeError, ValueError, OverflowError):
        return DEFAULT_WEIGHT
    if not value.is_integer():
        return DEFAULT_WEIGHT
    weight = int(value)
    if not (MIN_WEIGHT <= weight <= MAX_WEIGHT):
        return DEFAULT_WEIGHT
    return weight
