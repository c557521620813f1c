"""
Per-list statistics over checklist result trees.

All functions are total: missing or malformed ``item_results`` produce the
zero-valued default for the metric instead of raising.
"""

import math
from datetime import date, datetime, timedelta, tzinfo
from typing import Any, Optional

from .classifiers import is_sanitizer_expiration_prompt
from .models import AuditScore, DurationResult, ExpirationStatus, ReportStats
from .traversal import collect_completion_timestamps, walk


# Report temperature buckets (degrees F)
COLD_UPPER_BOUND = 50
HOT_LOWER_BOUND = 130

EXPIRATION_WARNING_DAYS = 7


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def compute_duration(items: Any) -> DurationResult:
    """
    End-to-end completion span across every completion event at any depth.

    Returns:
        DurationResult("{h}h {m}m", seconds) for >= 2 timestamps,
        ("< 1m", 0) for exactly one, (None, None) for none
    """
    timestamps = collect_completion_timestamps(items)

    if len(timestamps) >= 2:
        timestamps.sort()
        seconds = timestamps[-1] - timestamps[0]
        hours = int(seconds // 3600)
        minutes = int((seconds % 3600) // 60)
        return DurationResult(text=f"{hours}h {minutes}m", seconds=seconds)
    if len(timestamps) == 1:
        return DurationResult(text="< 1m", seconds=0)
    return DurationResult()


def count_corrective_actions(items: Any) -> int:
    """Nodes anywhere in the tree with a non-empty corrective action list."""
    return sum(1 for node in walk(items) if node.corrective_actions)


def timestamp_to_date(ts: float, tz: Optional[tzinfo] = None) -> date:
    """Unix seconds -> calendar date in ``tz`` (local zone when None)."""
    return datetime.fromtimestamp(ts, tz).date()


def classify_expiry_date(ts: float, today: date, tz: Optional[tzinfo] = None) -> Optional[str]:
    """
    Classify an expiration timestamp against ``today``.

    Args:
        ts: Expiration date as Unix seconds
        today: Reference date
        tz: Zone used to truncate ``ts`` to a calendar date

    Returns:
        "expired", "expiring" (today), "warning" (within 7 days) or None.
        None as well when ``ts`` is outside the representable date range.
    """
    try:
        exp_date = timestamp_to_date(ts, tz)
    except (OverflowError, OSError, ValueError):
        return None
    if exp_date < today:
        return "expired"
    if exp_date == today:
        return "expiring"
    if exp_date <= today + timedelta(days=EXPIRATION_WARNING_DAYS):
        return "warning"
    return None


def check_expiration_status(items: Any, today: date, tz: Optional[tzinfo] = None) -> ExpirationStatus:
    """
    OR together the expiry classification of every sanitizer expiration item.

    Only prompts containing both "Sanitizer" and "Exp. Date" with a
    positive ``result_double`` are considered. Flags never reset.
    """
    status = ExpirationStatus()

    for node in walk(items):
        if not is_sanitizer_expiration_prompt(node.template_text):
            continue
        if node.result_double is None or node.result_double <= 0:
            continue

        level = classify_expiry_date(node.result_double, today, tz)
        if level == "expired":
            status.expired = True
        elif level == "expiring":
            status.expiring = True
        elif level == "warning":
            status.warning = True

    return status


def extract_report_stats(items: Any) -> ReportStats:
    """Cold (< 50) / hot (> 130) min-max-count plus N/A count at any depth."""
    stats = ReportStats()

    for node in walk(items):
        if node.is_marked_na:
            stats.na_count += 1

        val = node.result_double
        if not val:
            continue

        if val < COLD_UPPER_BOUND:
            if stats.cold_min is None or val < stats.cold_min:
                stats.cold_min = val
            if stats.cold_max is None or val > stats.cold_max:
                stats.cold_max = val
            stats.cold_count += 1
        elif val > HOT_LOWER_BOUND:
            if stats.hot_min is None or val < stats.hot_min:
                stats.hot_min = val
            if stats.hot_max is None or val > stats.hot_max:
                stats.hot_max = val
            stats.hot_count += 1

    return stats


def compute_audit_score(items: Any) -> AuditScore:
    """Completion rate over scorable (non-TEXT, non-N/A) items."""
    earned = 0
    possible = 0

    for node in walk(items):
        if node.is_text or node.is_marked_na:
            continue
        possible += 1
        if node.is_completed:
            earned += 1

    pct = round_half_up(earned / possible * 100) if possible > 0 else 0
    return AuditScore(earned=earned, possible=possible, pct=pct)
