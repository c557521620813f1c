"""
Integrity scoring for completed checklists.

A hand-tuned heuristic that starts every list at 100 and subtracts fixed
penalties for signs of rushed or fabricated entry: lists finished too
quickly, answers entered seconds apart, integer-only or duplicated
temperatures, and heavy N/A usage. Critical sub-procedures (beef, chili,
chicken, Frosty) have their own minimum durations and are scored
recursively with the same rules.

Thresholds, penalty sizes and branch order are load-bearing: scores are
compared across stores, so any drift changes which stores get flagged.
"""

from dataclasses import dataclass, field
from typing import Any, List, Optional, Tuple

from . import classifiers
from .metrics import round_half_up
from .models import IntegrityResult, ItemResult
from .traversal import as_items, collect_completion_timestamps, walk


START_SCORE = 100

# Sub-list minimum durations (seconds)
FROSTY_MIN_SECONDS = 15
CRITICAL_MIN_SECONDS = 25
SUBLIST_TOO_FAST_PENALTY = 40
SUBLIST_FAILED_SCORE = 60
SUBLIST_FAILED_PENALTY = 40

# Whole-list duration floor, applied only to lists with > 10 timed items
DAYPART1_MIN_SECONDS = 180
DEFAULT_MIN_SECONDS = 300
FULL_LIST_MIN_ITEMS = 10
FULL_LIST_PENALTY = 20

# Rapid entry
RAPID_GAP_SECONDS = 2
RAPID_SEVERE_PERCENT = 75
RAPID_SEVERE_PENALTY = 30
RAPID_MILD_PERCENT = 45
RAPID_MILD_PENALTY = 10

# Temperature patterns
INTEGER_TEMP_RATIO = 0.6
INTEGER_TEMP_PENALTY = 30
DUPLICATE_RATE_RELAXED = 0.65
DUPLICATE_RATE_DEFAULT = 0.3
DUPLICATE_PENALTY = 40
IDENTICAL_PENALTY = 60
SIMILAR_GAP_SECONDS = 45
SIMILAR_VALUE_RELAXED = 0.1
SIMILAR_VALUE_DEFAULT = 0.5
SIMILAR_RATE = 0.5
SIMILAR_SEVERE_PENALTY = 50
SIMILAR_FEW_VALUES = 5
SIMILAR_FEW_PENALTY = 30

# N/A usage
NA_EXCESSIVE_PERCENT = 50
NA_EXCESSIVE_PENALTY = 50
NA_HIGH_PERCENT = 30
NA_HIGH_PENALTY = 25


@dataclass
class _Scan:
    """Single-pass accumulation over non-TEXT items at any depth."""
    total_count: int = 0
    na_count: int = 0
    integer_temp_count: int = 0
    completed_times: List[float] = field(default_factory=list)
    temp_values: List[Tuple[float, float]] = field(default_factory=list)  # (time, value)


def _scan_items(items: List[ItemResult]) -> _Scan:
    scan = _Scan()

    for node in walk(items):
        if node.is_text:
            continue

        scan.total_count += 1
        if node.is_marked_na:
            scan.na_count += 1

        if not node.is_completed:
            continue

        # Equipment checks are expected to be slow and stable
        prompt = node.template_text
        if classifiers.is_equipment_prompt(prompt):
            continue

        scan.completed_times.append(node.completion_timestamp)

        value = node.result_double
        if value is None:
            continue
        if classifiers.has_temperature_unit(prompt) or value > 0:
            scan.temp_values.append((node.completion_timestamp, value))
            if not classifiers.is_count_prompt(prompt) and value % 1 == 0:
                scan.integer_temp_count += 1

    return scan


def _format_seconds(seconds: float) -> str:
    return str(int(seconds)) if seconds == int(seconds) else str(seconds)


def _sublist_name(node: ItemResult) -> str:
    return (node.sub_list.instance_title if node.sub_list else "") or node.template_text or ""


def _check_sublists(items: List[ItemResult]) -> Tuple[int, List[str]]:
    """
    Minimum-duration and recursive integrity checks for every sub-list.

    Returns:
        Tuple of (total penalty, issues) in traversal order
    """
    penalty = 0
    issues: List[str] = []

    for node in walk(items):
        if node.sub_list is None:
            continue

        sub_name = _sublist_name(node)
        parent_prompt = node.template_text
        sub_items = node.sub_list.item_results

        timestamps = collect_completion_timestamps(sub_items)
        if len(timestamps) >= 2:
            sub_dur = max(timestamps) - min(timestamps)
            if classifiers.is_frosty_sublist(sub_name, parent_prompt):
                too_fast = sub_dur < FROSTY_MIN_SECONDS
            else:
                too_fast = (classifiers.is_critical_sublist(sub_name, parent_prompt)
                            and sub_dur < CRITICAL_MIN_SECONDS)
            if too_fast:
                penalty += SUBLIST_TOO_FAST_PENALTY
                issues.append(f"Sublist '{sub_name}' too fast ({_format_seconds(sub_dur)}s)")

        sub_result = compute_integrity(sub_items, sub_name)
        if sub_result.score is not None and sub_result.score < SUBLIST_FAILED_SCORE:
            penalty += SUBLIST_FAILED_PENALTY
            issues.append(f"Sublist '{sub_name}' Failed Integrity")

    return penalty, issues


def compute_integrity(
    items: Any,
    list_name: Optional[str] = "",
    duration_seconds: Optional[float] = None,
) -> IntegrityResult:
    """
    Score a checklist result tree for signs of rushed or fabricated entry.

    Args:
        items: Item list (or list instance) to score
        list_name: Display name; drives exemption and relaxed thresholds
        duration_seconds: Precomputed whole-list duration, if known

    Returns:
        IntegrityResult with score 0-100 and issues, or score None when the
        list type is exempt or there is no item list at all
    """
    if not isinstance(items, list) and not hasattr(items, "item_results"):
        return IntegrityResult(score=None, issues=[])

    if classifiers.is_exempt_list(list_name):
        return IntegrityResult(score=None, issues=[])

    daypart1 = classifiers.is_daypart1(list_name)
    relaxed = classifiers.is_relaxed_list(list_name)

    nodes = as_items(items)
    score = START_SCORE
    issues: List[str] = []

    scan = _scan_items(nodes)

    sub_penalty, sub_issues = _check_sublists(nodes)
    score -= sub_penalty
    issues.extend(sub_issues)

    completed = sorted(scan.completed_times)

    min_seconds = DAYPART1_MIN_SECONDS if daypart1 else DEFAULT_MIN_SECONDS
    if (duration_seconds is not None and duration_seconds < min_seconds
            and len(completed) > FULL_LIST_MIN_ITEMS):
        score -= FULL_LIST_PENALTY
        issues.append(f"Full List < {min_seconds // 60} mins")

    # Not enough timed entries to judge patterns
    if len(completed) < 2 and score == START_SCORE:
        return IntegrityResult(score=max(0, score), issues=issues)

    if len(completed) > 1:
        intervals = max(1, len(completed) - 1)
        rapid_count = sum(
            1 for prev, cur in zip(completed, completed[1:])
            if cur - prev < RAPID_GAP_SECONDS
        )
        rapid_percent = rapid_count / intervals * 100
        if rapid_percent > RAPID_SEVERE_PERCENT:
            score -= RAPID_SEVERE_PENALTY
            issues.append("Speed Detection (Too Fast)")
        elif rapid_percent > RAPID_MILD_PERCENT:
            score -= RAPID_MILD_PENALTY
            issues.append("Potential Rapid Entry")

    temps = scan.temp_values
    if len(temps) >= 2:
        if scan.integer_temp_count / len(temps) > INTEGER_TEMP_RATIO:
            score -= INTEGER_TEMP_PENALTY
            issues.append("Manual Entry Suspected (No Decimals)")

        values = [val for _, val in temps]
        unique_count = len(set(values))
        duplicate_rate = 1 - unique_count / len(values)
        dup_threshold = DUPLICATE_RATE_RELAXED if relaxed else DUPLICATE_RATE_DEFAULT
        if duplicate_rate > dup_threshold:
            score -= DUPLICATE_PENALTY
            issues.append(f"High Duplicate Temps ({round_half_up(duplicate_rate * 100)}%)")
        if len(values) > 1 and unique_count == 1:
            score -= IDENTICAL_PENALTY
            issues.append("Identical Temperatures")

        # Stable sort keeps insertion order for equal times
        ordered = sorted(temps, key=lambda t: t[0])
        value_threshold = SIMILAR_VALUE_RELAXED if relaxed else SIMILAR_VALUE_DEFAULT
        suspicious = sum(
            1 for (t0, v0), (t1, v1) in zip(ordered, ordered[1:])
            if t1 - t0 < SIMILAR_GAP_SECONDS and abs(v1 - v0) < value_threshold
        )
        suspicious_rate = suspicious / max(1, len(ordered) - 1)
        if suspicious_rate > SIMILAR_RATE:
            score -= SIMILAR_SEVERE_PENALTY
            issues.append("Rapid Similar/Same Temps")
        elif suspicious > 0 and len(temps) < SIMILAR_FEW_VALUES:
            score -= SIMILAR_FEW_PENALTY
            issues.append("Rapid Similar/Same Temps")

    if scan.total_count > 0:
        na_percent = scan.na_count / scan.total_count * 100
        if na_percent > NA_EXCESSIVE_PERCENT:
            score -= NA_EXCESSIVE_PENALTY
            issues.append("Excessive N/A")
        elif na_percent > NA_HIGH_PERCENT:
            score -= NA_HIGH_PENALTY
            issues.append("High N/A Usage")

    return IntegrityResult(score=max(0, score), issues=issues)
