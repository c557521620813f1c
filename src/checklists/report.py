"""
Daily food safety report over the three daypart lists of one store.

Each row resolves one question (sanitizer strength, a product or a piece of
equipment) to a cell per daypart by keyword matching against the flattened
answers of that daypart's list. Cells carry a value, a display style and the
value's provenance.
"""

from dataclasses import dataclass, field, asdict
from datetime import date, datetime, tzinfo
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

from .metrics import classify_expiry_date, timestamp_to_date
from .models import FlatItem, ItemResult, ListInstance
from .traversal import flatten_with_clean_titles


# Timestamps above this are milliseconds (2000-01-01 in ms)
MILLISECOND_CUTOFF = 946684800000

JUNK_ANSWERS = {"yes", "no", "true", "false", "1", "0", "pass", "fail", "completed"}

EXPIRY_STYLES = {
    "expired": "cell-expired",
    "expiring": "cell-today",
    "warning": "cell-warning",
}

DAYPARTS = ("dp1", "dp3", "dp5")

REPORT_LIST_TAGS = ("dfsl", "fsl", "food safety")

BLOCKED_CELL = {"value": None, "style": "blocked", "provenance": None}
EMPTY_CELL = {"value": "-", "style": "", "provenance": None}

# Section that opens with the per-daypart completion row
CRITICAL_SECTION = "CRITICAL DAILY FOCUS"


@dataclass(frozen=True)
class RowSpec:
    label: str
    keywords: Tuple[str, ...]
    is_date_check: bool = False


# (section title, dayparts the section does not apply to, rows, only rows with answers)
REPORT_SECTIONS = (
    (CRITICAL_SECTION, ("dp5",), (
        RowSpec("Sanitizer Strength", ("Sanitizer Strength", "Quat", "PPM", "Solution")),
        RowSpec("Sanitizer Exp. Date", ("Exp. Date", "Expiration"), is_date_check=True),
        RowSpec("Probe Calibration", ("Calibration", "Thermometer")),
    ), False),
    ("BREAKFAST PRODUCTS (DP1 Only)", ("dp3", "dp5"), (
        RowSpec("Jr. Chicken Filet (Hold)", ("Jr. Chicken", "Junior Chicken")),
        RowSpec("Sausage Gravy / Carryover", ("Gravy", "Carryover")),
        RowSpec("Cooked Sausage", ("Cooked Sausage",)),
        RowSpec("Swiss Cheese Sauce", ("Swiss",)),
        RowSpec("Eggs", ("Egg",)),
    ), True),
    ("PRODUCT TEMPERATURES", ("dp1",), (
        RowSpec("Frosty Mix (Hopper)", ("Frosty Mix", "Vanilla", "Chocolate")),
        RowSpec("Chili", ("Chili", "Chili:")),
        RowSpec("Sliced Tomatoes", ("Tomato",)),
        RowSpec("Lettuce", ("Lettuce",)),
        RowSpec("Shredded Cheddar", ("Cheddar", "Shredded")),
        RowSpec("Bleu Cheese Crumbles", ("Bleu Cheese",)),
        RowSpec("Cheese Sauce", ("Cheese Sauce",)),
        RowSpec("Chicken Nuggets", ("Nugget",)),
        RowSpec("Crispy Chicken", ("Crispy",)),
        RowSpec("Spicy Chicken", ("Spicy",)),
        RowSpec("Classic Chicken", ("Classic", "Homestyle")),
        RowSpec("Diced Chicken", ("Diced",)),
        RowSpec("Chili Meat", ("Chili Meat",)),
        RowSpec("Cooked Meat (Flat Grill)", ("Flat Grill", "Cooked Meat Patty-Flat")),
        RowSpec("Cooked Meat (DSG)", ("DSG", "Cooked Meat Patty-DSG")),
        RowSpec("Panned Small Meat", ("Panned Small", "Raw", "Panned")),
    ), True),
    ("EQUIPMENT TEMPERATURES", (), (
        RowSpec("Walk-in Freezer", ("Walk-in Freezer",)),
        RowSpec("Walk-in Cooler", ("Walk-in Cooler",)),
        RowSpec("Meat Well", ("Meat Well",)),
        RowSpec("Reach-in Freezer", ("Reach-in Freezer", "Upright Freezer")),
        RowSpec("Salad Reach-in/Upright", ("Salad Reach-in", "Salad Upright")),
        RowSpec("Sandwich Station (Side 1/DT)", ("Sandwich Station (PUW", "Side 1", "DT")),
        RowSpec("Sandwich Station (Side 2/Lobby)", ("Sandwich Station (Side 2", "Lobby", "Dine")),
        RowSpec("Misc. Cooler", ("Misc. Cooler", "Misc Cooler")),
        RowSpec("Misc. Freezer", ("Misc. Freezer", "Misc Freezer")),
        RowSpec("Fry Station", ("Fry Station",)),
        RowSpec("CA / Controlled Atmosphere", ("CA ", "Controlled Atmosphere")),
    ), True),
)


@dataclass
class ReportRow:
    label: str
    cells: Dict[str, Dict[str, Any]]


@dataclass
class ReportSection:
    title: str
    rows: List[ReportRow] = field(default_factory=list)


@dataclass
class DaypartReport:
    location: str
    date: str
    sections: List[ReportSection] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _to_seconds(ts: float) -> float:
    return ts / 1000 if ts > MILLISECOND_CUTOFF else ts


def format_date_mmddyyyy(value: Union[float, date, None], tz: Optional[tzinfo] = None) -> str:
    """MM-DD-YYYY from a date or a seconds/milliseconds timestamp; "" when empty."""
    if not value:
        return ""
    if isinstance(value, date):
        d = value
    else:
        try:
            d = timestamp_to_date(_to_seconds(value), tz)
        except (OverflowError, OSError, ValueError, TypeError):
            return ""
    return d.strftime("%m-%d-%Y")


def format_time(ts: Optional[float], tz: Optional[tzinfo] = None) -> str:
    if not ts:
        return ""
    try:
        return datetime.fromtimestamp(_to_seconds(ts), tz).strftime("%I:%M %p")
    except (OverflowError, OSError, ValueError, TypeError):
        return ""


def _is_junk(text: Optional[str]) -> bool:
    return (text or "").lower() in JUNK_ANSWERS


def find_best_match(flat_items: List[FlatItem], keywords: Iterable[str]) -> Optional[ItemResult]:
    """
    Pick the most informative answer whose clean title matches a keyword.

    Numeric answers win over text; meaningful text wins over yes/no style
    answers. Ties keep document order.
    """
    lowered = [k.lower() for k in keywords]
    candidates = [
        f for f in flat_items or []
        if any(k in f.clean_title.lower() for k in lowered)
    ]
    if not candidates:
        return None

    candidates.sort(key=lambda f: (f.node.result_double is None, _is_junk(f.node.result_value)))
    return candidates[0].node


def provenance(node: ItemResult) -> str:
    """manual / probe / sensor origin of a value."""
    if node.peripheral_type == "TEMPERATURE_PROBE":
        return "probe"
    if node.source == "sensor" or node.peripheral_type == "SENSOR":
        return "sensor"
    return "manual"


def build_report_cell(
    flat_items: List[FlatItem],
    keywords: Iterable[str],
    label: str,
    today: date,
    is_date_check: bool = False,
    tz: Optional[tzinfo] = None,
) -> Dict[str, Any]:
    """
    Resolve one report cell.

    Args:
        flat_items: Output of flatten_with_clean_titles for one list
        keywords: Title keywords identifying the row
        label: Row label
        today: Reference date for expiration styling
        is_date_check: Treat the value as an expiration date
        tz: Zone for date conversion

    Returns:
        Dict with value, style and provenance
    """
    node = find_best_match(flat_items, keywords)
    if node is None:
        return {"value": "-", "style": "", "provenance": None}
    if node.is_marked_na:
        return {"value": "N/A", "style": "cell-na", "provenance": None}

    source = provenance(node)
    style = ""

    if node.result_double is not None:
        value: Any = node.result_double
    else:
        value = node.result_value or "-"

    if isinstance(value, (int, float)) and value % 1 != 0:
        value = f"{value:.1f}"

    if "Sanitizer Strength" in label and value == 1:
        value = "Within Range"

    if is_date_check and node.result_double and node.result_double > 0:
        value = format_date_mmddyyyy(node.result_double, tz)
        level = classify_expiry_date(node.result_double, today, tz)
        style = EXPIRY_STYLES.get(level, "")
        source = None

    if source == "manual" and not style:
        style = "cell-manual"

    return {"value": value, "style": style, "provenance": source}


def report_bucket(title: str) -> Optional[str]:
    """dp1/dp3/dp5 for daily food safety lists (DFSL, FSL or Food Safety)."""
    lower = (title or "").lower()
    if not any(tag in lower for tag in REPORT_LIST_TAGS):
        return None
    for n, bucket in zip(("1", "3", "5"), DAYPARTS):
        if f"daypart {n}" in lower:
            return bucket
    return None


def select_daypart_lists(instances: List[ListInstance]) -> Dict[str, Optional[ListInstance]]:
    """Map each daypart to its list; a later list replaces an earlier one."""
    buckets: Dict[str, Optional[ListInstance]] = {dp: None for dp in DAYPARTS}
    for instance in instances:
        bucket = report_bucket(instance.title)
        if bucket is not None:
            buckets[bucket] = instance
    return buckets


def has_data(flats: Dict[str, List[FlatItem]], keywords: Iterable[str]) -> bool:
    """True if any daypart has an answer whose clean title matches a keyword."""
    lowered = [k.lower() for k in keywords]
    return any(
        any(k in f.clean_title.lower() for k in lowered)
        for flat in flats.values()
        for f in flat
    )


def _completion_cell(instance: Optional[ListInstance]) -> Dict[str, Any]:
    if instance is None:
        return dict(EMPTY_CELL)
    value = "Completed" if instance.incomplete_count == 0 else "In Progress"
    return {"value": value, "style": "", "provenance": None}


def build_daypart_report(
    instances: List[ListInstance],
    day: date,
    location: str = "",
    tz: Optional[tzinfo] = None,
) -> DaypartReport:
    """
    Build the daily food safety report for one store.

    The critical focus rows are always present; product and equipment rows
    appear only when some daypart answered them. Cells for dayparts a
    section does not apply to are blocked.

    Args:
        instances: The store's list instances for ``day``
        day: Report date, also the reference date for expiration styling
        location: Store name shown in the header
        tz: Zone for date conversion

    Returns:
        DaypartReport
    """
    lists = select_daypart_lists(instances)
    flats = {dp: flatten_with_clean_titles(lists[dp]) for dp in DAYPARTS}
    report = DaypartReport(location=location, date=format_date_mmddyyyy(day))

    for title, blocked, specs, only_answered in REPORT_SECTIONS:
        section = ReportSection(title=title)

        if title == CRITICAL_SECTION:
            cells = {dp: _completion_cell(lists[dp]) for dp in DAYPARTS}
            for dp in blocked:
                cells[dp] = dict(BLOCKED_CELL)
            section.rows.append(ReportRow(label="Critical Focus Completed", cells=cells))

        for spec in specs:
            if only_answered and not has_data(flats, spec.keywords):
                continue
            cells = {}
            for dp in DAYPARTS:
                if dp in blocked:
                    cells[dp] = dict(BLOCKED_CELL)
                else:
                    cells[dp] = build_report_cell(
                        flats[dp], spec.keywords, spec.label, day, spec.is_date_check, tz
                    )
            section.rows.append(ReportRow(label=spec.label, cells=cells))

        report.sections.append(section)

    return report
