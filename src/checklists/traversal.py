"""Tree traversal primitives shared by every checklist calculator."""

import re
from typing import Any, Iterator, List

from .models import FlatItem, ItemResult


_MARKUP_CHARS = re.compile(r"[#*]")
_CONSTRAINT_MARKERS = ("Min:", "Max:", "Range:")


def as_items(items: Any) -> List[ItemResult]:
    """Normalize calculator input: a list instance, an item list, or junk (-> [])."""
    if hasattr(items, "item_results"):
        items = items.item_results
    if not isinstance(items, list):
        return []
    return [i for i in items if isinstance(i, ItemResult)]


def walk(items: Any) -> Iterator[ItemResult]:
    """
    Yield every node depth-first, parent before its sub-list.

    Sub-lists are entered regardless of item type. Uses an explicit stack so
    depth is unbounded.
    """
    stack = list(reversed(as_items(items)))
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(node.children))


def collect_completion_timestamps(items: Any) -> List[float]:
    """All completion timestamps > 0 at any depth."""
    return [n.completion_timestamp for n in walk(items) if n.completion_timestamp > 0]


def clean_title(raw: str) -> str:
    """
    Normalize a prompt for keyword matching.

    Example: "### Eggs *** ###### Min: 160" -> "Eggs"
    """
    clean = _MARKUP_CHARS.sub("", raw or "")
    for marker in _CONSTRAINT_MARKERS:
        clean = clean.split(marker)[0]
    return clean.strip()


def has_answer(node: ItemResult) -> bool:
    return bool(node.result_value) or node.result_double is not None or node.is_marked_na


def flatten_with_clean_titles(items: Any) -> List[FlatItem]:
    """
    Collect every answered node with a cleaned title.

    Sub-list answers are captured before their parent's own answer.

    Args:
        items: Item list or list instance

    Returns:
        List of FlatItem(node, clean_title, raw_title)
    """
    flat: List[FlatItem] = []

    def _visit(nodes: List[ItemResult]) -> None:
        for node in nodes:
            if node.children:
                _visit(node.children)
            if has_answer(node):
                raw = node.template_text or ""
                flat.append(FlatItem(node=node, clean_title=clean_title(raw), raw_title=raw))

    _visit(as_items(items))
    return flat
