"""Keyword classification of prompts and list names.

All checks are case-insensitive substring matches against explicit keyword
lists, except the sanitizer expiration check which is case-sensitive.
"""

from typing import Iterable, Optional


EXEMPT_LIST_KEYWORDS = ("equipment temperature", "fsa - critical", "critical daily focus")

EQUIPMENT_KEYWORDS = (
    "equipment",
    "cooler",
    "freezer",
    "walk-in",
    "reach-in",
    "refrigerator",
    "fryer",
    "warmer",
)

TEMPERATURE_UNIT_KEYWORDS = ("temp", "°", "℉", "℃", " f ", " c ")

COUNT_KEYWORDS = ("count", "number", "amount", "quantity")

CRITICAL_SUBLIST_KEYWORDS = ("beef", "frosty", "chili", "chicken")

FROSTY_KEYWORD = "frosty"


def contains_any(text: Optional[str], keywords: Iterable[str]) -> bool:
    lower = (text or "").lower()
    return any(k in lower for k in keywords)


def is_exempt_list(list_name: Optional[str]) -> bool:
    return contains_any(list_name, EXEMPT_LIST_KEYWORDS)


def is_daypart1(list_name: Optional[str]) -> bool:
    return contains_any(list_name, ("daypart 1",))


def is_relaxed_list(list_name: Optional[str]) -> bool:
    """Breakfast/daypart-1 temperature checks legitimately cluster."""
    return is_daypart1(list_name) or contains_any(list_name, ("breakfast",))


def is_equipment_prompt(prompt: Optional[str]) -> bool:
    return contains_any(prompt, EQUIPMENT_KEYWORDS)


def has_temperature_unit(prompt: Optional[str]) -> bool:
    return contains_any(prompt, TEMPERATURE_UNIT_KEYWORDS)


def is_count_prompt(prompt: Optional[str]) -> bool:
    return contains_any(prompt, COUNT_KEYWORDS)


def is_critical_sublist(sub_name: Optional[str], parent_prompt: Optional[str]) -> bool:
    return (contains_any(sub_name, CRITICAL_SUBLIST_KEYWORDS)
            or contains_any(parent_prompt, CRITICAL_SUBLIST_KEYWORDS))


def is_frosty_sublist(sub_name: Optional[str], parent_prompt: Optional[str]) -> bool:
    return (contains_any(sub_name, (FROSTY_KEYWORD,))
            or contains_any(parent_prompt, (FROSTY_KEYWORD,)))


def is_sanitizer_expiration_prompt(prompt: Optional[str]) -> bool:
    prompt = prompt or ""
    return "Sanitizer" in prompt and "Exp. Date" in prompt
