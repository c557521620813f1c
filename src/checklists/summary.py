"""
List-level summaries and per-store daypart grid rows.

Builds the values the dashboard shows for each checklist (status, duration,
integrity band, corrective actions, sanitizer expiry) from a fetched list
instance, plus the monthly audit scores. ``now``/``today`` are always passed in.
"""

import re
from dataclasses import dataclass, field, asdict
from datetime import date, tzinfo
from typing import Any, Dict, List, Optional

from .integrity import compute_integrity
from .metrics import (
    check_expiration_status,
    compute_audit_score,
    compute_duration,
    count_corrective_actions,
    extract_report_stats,
    round_half_up,
)
from .models import ExpirationStatus, ListInstance
from .report import format_date_mmddyyyy


TARGET_LIST_TAGS = ("🟧", "DFSL", "FSL", "Food Safety")
SAFETY_LIST_PATTERN = re.compile(r"FSL|DFSL|🟧|Food Safety", re.IGNORECASE)

DAYPART_BUCKETS = (
    ("daypart 1", "dp1"),
    ("daypart 3", "dp3"),
    ("daypart 5", "dp5"),
)

# Integrity bands
LOW_INTEGRITY_BELOW = 60
MEDIUM_INTEGRITY_BELOW = 85

SANITIZER_LABELS = {
    "expired": "EXPIRED",
    "expiring": "Expiring",
    "warning": "Warning",
}

AUDIT_LIST_TAGS = ("monthly safety audit", "safety committee agenda")


@dataclass
class ListSummary:
    id: Optional[str]
    title: str
    status: str
    duration: Optional[str]
    duration_seconds: Optional[float]
    integrity_score: Optional[int] = None
    integrity_band: Optional[str] = None
    integrity_issues: List[str] = field(default_factory=list)
    corrective_actions: int = 0
    expiry: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class DaypartCell:
    status: str = "Missing"
    score: Optional[int] = None
    duration: Optional[str] = None
    ca_count: int = 0
    stats: Optional[Dict[str, Any]] = None


@dataclass
class StoreRow:
    id: Optional[str]
    name: str
    dp1: DaypartCell = field(default_factory=DaypartCell)
    dp3: DaypartCell = field(default_factory=DaypartCell)
    dp5: DaypartCell = field(default_factory=DaypartCell)
    sanitizer: str = "OK"

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def list_status(instance: ListInstance, now: float) -> str:
    """Complete / Late / Upcoming / In Progress."""
    if instance.incomplete_count == 0:
        return "Complete"
    if 0 < instance.deadline_timestamp < now:
        return "Late"
    if instance.display_timestamp > now:
        return "Upcoming"
    return "In Progress"


def is_target_list(title: str) -> bool:
    """Lists that get an integrity score (food safety lists)."""
    return any(tag in (title or "") for tag in TARGET_LIST_TAGS)


def is_safety_list(title: str) -> bool:
    return bool(SAFETY_LIST_PATTERN.search(title or ""))


def sort_lists(instances: List[ListInstance]) -> List[ListInstance]:
    """Safety lists first, then newest first."""
    return sorted(
        instances,
        key=lambda li: (not is_safety_list(li.title), -(li.display_timestamp or 0)),
    )


def integrity_band(score: Optional[int]) -> str:
    if score is None:
        return "na"
    if score < LOW_INTEGRITY_BELOW:
        return "low"
    if score < MEDIUM_INTEGRITY_BELOW:
        return "med"
    return "high"


def expiry_level(status: ExpirationStatus) -> Optional[str]:
    """Display precedence: expired > expiring > warning."""
    if status.expired:
        return "expired"
    if status.expiring:
        return "expiring"
    if status.warning:
        return "warning"
    return None


def summarize_list(
    instance: ListInstance,
    now: float,
    today: date,
    tz: Optional[tzinfo] = None,
) -> ListSummary:
    """
    Compute the sidebar summary for one checklist.

    Integrity is only scored for food-safety lists that are fully complete.

    Args:
        instance: Parsed list instance
        now: Current Unix time (seconds)
        today: Reference date for expiration checks
        tz: Zone used to turn expiration timestamps into dates

    Returns:
        ListSummary
    """
    items = instance.item_results
    duration = compute_duration(items)

    summary = ListSummary(
        id=instance.id,
        title=instance.title,
        status=list_status(instance, now),
        duration=duration.text,
        duration_seconds=duration.seconds,
        corrective_actions=count_corrective_actions(items),
        expiry=expiry_level(check_expiration_status(items, today, tz)),
    )

    if is_target_list(instance.title) and instance.incomplete_count == 0:
        result = compute_integrity(items, instance.title, duration.seconds)
        summary.integrity_score = result.score
        summary.integrity_band = integrity_band(result.score)
        summary.integrity_issues = list(result.issues)

    return summary


def daypart_bucket(title: str) -> Optional[str]:
    """dp1/dp3/dp5 for daily food safety lists, None otherwise."""
    lower = (title or "").lower()
    if "dfsl" not in lower and "fsl" not in lower:
        return None
    for keyword, bucket in DAYPART_BUCKETS:
        if keyword in lower:
            return bucket
    return None


def build_store_row(
    location: Dict[str, Any],
    instances: List[ListInstance],
    now: float,
    today: date,
    tz: Optional[tzinfo] = None,
) -> StoreRow:
    """
    Build one store's grid row from all of its lists for the day.

    Sanitizer status aggregates across every list; daypart cells are filled
    from DFSL/FSL lists only. A later list in the same bucket overwrites an
    earlier one.

    Args:
        location: {"id", "name"} of the store
        instances: The store's list instances
        now: Current Unix time (seconds)
        today: Reference date for expiration checks
        tz: Zone used to turn expiration timestamps into dates

    Returns:
        StoreRow
    """
    row = StoreRow(id=location.get("id"), name=location.get("name") or "")
    combined = ExpirationStatus()

    for instance in instances:
        items = instance.item_results
        exp = check_expiration_status(items, today, tz)
        combined.expired = combined.expired or exp.expired
        combined.expiring = combined.expiring or exp.expiring
        combined.warning = combined.warning or exp.warning

        bucket = daypart_bucket(instance.title)
        if bucket is None:
            continue

        duration = compute_duration(items)
        cell = DaypartCell(
            status="In Progress",
            duration=duration.text,
            ca_count=count_corrective_actions(items),
            stats=extract_report_stats(items).to_dict(),
        )
        if instance.incomplete_count == 0:
            cell.status = "Complete"
            cell.score = compute_integrity(items, instance.title, duration.seconds).score
        elif 0 < instance.deadline_timestamp < now:
            cell.status = "Late"
        setattr(row, bucket, cell)

    level = expiry_level(combined)
    if level is not None:
        row.sanitizer = SANITIZER_LABELS[level]
    return row


@dataclass
class AuditSummary:
    id: Optional[str]
    title: str
    date: str
    status: str
    score: Optional[float] = None
    max_score: Optional[float] = None
    pct: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def is_audit_list(title: str) -> bool:
    """Monthly safety audits and safety committee agendas."""
    lower = (title or "").lower()
    return any(tag in lower for tag in AUDIT_LIST_TAGS)


def summarize_audit(instance: ListInstance, tz: Optional[tzinfo] = None) -> AuditSummary:
    """
    Summarize one audit list.

    Agendas and lists the API did not score carry no percentage. When the
    API gives no usable ``max_possible_score`` the maximum is the number of
    scorable items in the tree.
    """
    summary = AuditSummary(
        id=instance.id,
        title=instance.title,
        date=format_date_mmddyyyy(instance.display_timestamp, tz),
        status="Complete" if instance.incomplete_count == 0 else "In Progress",
    )

    if "agenda" in instance.title.lower() or instance.score is None:
        return summary

    max_score = instance.max_possible_score
    if not max_score:
        max_score = compute_audit_score(instance.item_results).possible

    summary.score = instance.score
    summary.max_score = max_score
    summary.pct = round_half_up(instance.score / max_score * 100) if max_score > 0 else 0
    return summary


def summarize_audits(instances: List[ListInstance], tz: Optional[tzinfo] = None) -> List[AuditSummary]:
    """Audit summaries for the audit lists among ``instances``, newest first."""
    audits = [li for li in instances if is_audit_list(li.title)]
    audits.sort(key=lambda li: li.display_timestamp or 0, reverse=True)
    return [summarize_audit(li, tz) for li in audits]
