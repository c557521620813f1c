"""
Checklist data models.

Item results form a recursive tree: any item may carry a sub-list whose
``item_results`` have the same shape. Parsing from the API payload is total:
malformed or missing fields become empty/absent values, never exceptions.
"""

from __future__ import annotations

from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List, Optional


TEXT_ITEM_TYPE = "TEXT"


@dataclass
class SubList:
    id: Optional[str] = None
    instance_title: str = ""
    item_results: List["ItemResult"] = field(default_factory=list)


@dataclass
class ItemResult:
    """A single answered (or pending) question within a checklist."""
    id: Optional[str] = None
    item_type: str = ""
    template_text: str = ""
    result_value: Optional[str] = None
    result_double: Optional[float] = None
    is_marked_na: bool = False
    completion_timestamp: float = 0
    corrective_actions: List[Any] = field(default_factory=list)
    peripheral_type: Optional[str] = None
    source: Optional[str] = None
    sub_list: Optional[SubList] = None

    @property
    def is_text(self) -> bool:
        return self.item_type.upper() == TEXT_ITEM_TYPE

    @property
    def is_completed(self) -> bool:
        return self.completion_timestamp > 0

    @property
    def children(self) -> List["ItemResult"]:
        if self.sub_list is None:
            return []
        return self.sub_list.item_results


@dataclass
class ListInstance:
    """One occurrence of a recurring checklist."""
    id: Optional[str] = None
    title: str = "Untitled List"
    display_timestamp: float = 0
    deadline_timestamp: float = 0
    incomplete_count: int = 0
    item_results: List[ItemResult] = field(default_factory=list)
    score: Optional[float] = None
    max_possible_score: Optional[float] = None


@dataclass
class FlatItem:
    node: ItemResult
    clean_title: str
    raw_title: str


@dataclass
class DurationResult:
    text: Optional[str] = None
    seconds: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class ExpirationStatus:
    expired: bool = False
    expiring: bool = False
    warning: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class ReportStats:
    cold_min: Optional[float] = None
    cold_max: Optional[float] = None
    cold_count: int = 0
    hot_min: Optional[float] = None
    hot_max: Optional[float] = None
    hot_count: int = 0
    na_count: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "coldMin": self.cold_min,
            "coldMax": self.cold_max,
            "coldCount": self.cold_count,
            "hotMin": self.hot_min,
            "hotMax": self.hot_max,
            "hotCount": self.hot_count,
            "naCount": self.na_count,
        }


@dataclass
class AuditScore:
    earned: int = 0
    possible: int = 0
    pct: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class IntegrityResult:
    """Integrity score (0-100) plus the issues that lowered it.

    ``score`` is None when scoring is intentionally skipped for the list type.
    """
    score: Optional[int] = None
    issues: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"score": self.score, "issues": list(self.issues)}


# ---------------------------------------------------------------------------
# API payload parsing
# ---------------------------------------------------------------------------

def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_float(value: Any) -> Optional[float]:
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        return value
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _as_timestamp(value: Any) -> float:
    ts = _as_float(value)
    return ts if ts is not None else 0


def parse_item_results(raw: Any) -> List[ItemResult]:
    """Parse a list of item-result dicts; anything that is not a list is empty."""
    if not isinstance(raw, list):
        return []
    return [parse_item_result(node) for node in raw if isinstance(node, dict)]


def parse_sub_list(raw: Any) -> Optional[SubList]:
    if not isinstance(raw, dict):
        return None
    return SubList(
        id=raw.get("id"),
        instance_title=raw.get("instanceTitle") or "",
        item_results=parse_item_results(raw.get("itemResults")),
    )


def parse_item_result(raw: Dict[str, Any]) -> ItemResult:
    """
    Parse one item-result node from the API payload.

    Accepts both the raw GraphQL shape (``itemTemplate.text``/``.type``,
    ``peripheral.type``) and the flattened aliases (``templateText``,
    ``itemType``, ``peripheralType``).

    Args:
        raw: Item result dict

    Returns:
        ItemResult with its sub-list parsed recursively
    """
    template = _as_dict(raw.get("itemTemplate"))
    peripheral = _as_dict(raw.get("peripheral"))

    # A node is TEXT if either its own type or its template type says so
    node_type = raw.get("itemType") or raw.get("type") or ""
    template_type = template.get("type") or ""
    if str(template_type).upper() == TEXT_ITEM_TYPE:
        node_type = template_type

    result_value = raw.get("resultValue")
    if result_value is None:
        result_value = raw.get("resultText")

    corrective = raw.get("correctiveActions")

    return ItemResult(
        id=raw.get("id"),
        item_type=str(node_type),
        template_text=raw.get("templateText") or template.get("text") or "",
        result_value=result_value,
        result_double=_as_float(raw.get("resultDouble")),
        is_marked_na=bool(raw.get("isMarkedNA")),
        completion_timestamp=_as_timestamp(raw.get("completionTimestamp")),
        corrective_actions=list(corrective) if isinstance(corrective, list) else [],
        peripheral_type=raw.get("peripheralType") or peripheral.get("type"),
        source=raw.get("source"),
        sub_list=parse_sub_list(raw.get("subList")),
    )


def parse_list_instance(raw: Dict[str, Any]) -> ListInstance:
    """Parse a listInstances entry. Title falls back template -> instance -> placeholder."""
    template = _as_dict(raw.get("listTemplate"))
    title = template.get("title") or raw.get("instanceTitle") or "Untitled List"
    incomplete = _as_float(raw.get("incompleteCount"))

    return ListInstance(
        id=raw.get("id"),
        title=title,
        display_timestamp=_as_timestamp(raw.get("displayTimestamp")),
        deadline_timestamp=_as_timestamp(raw.get("deadlineTimestamp")),
        incomplete_count=int(incomplete) if incomplete is not None else 0,
        item_results=parse_item_results(raw.get("itemResults")),
        score=_as_float(raw.get("score")),
        max_possible_score=_as_float(raw.get("maxPossibleScore")),
    )


def parse_list_instances(raw: Any) -> List[ListInstance]:
    """
    Parse list instances from a GraphQL response or a bare list.

    Accepts ``{"data": {"listInstances": [...]}}``, ``{"listInstances": [...]}``
    or ``[...]``.
    """
    if isinstance(raw, dict):
        data = raw.get("data", raw)
        raw = _as_dict(data).get("listInstances")
    if not isinstance(raw, list):
        return []
    return [parse_list_instance(entry) for entry in raw if isinstance(entry, dict)]
