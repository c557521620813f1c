"""Helpers for building checklist item trees in tests."""

from src.checklists.models import ItemResult, SubList


def item(text="", ts=0, val=None, na=False, item_type="", ca=None, value=None,
         peripheral=None, source=None, sub=None, sub_title=""):
    """Build an ItemResult; ``sub`` is a list of child items."""
    return ItemResult(
        id=None,
        item_type=item_type,
        template_text=text,
        result_value=value,
        result_double=val,
        is_marked_na=na,
        completion_timestamp=ts,
        corrective_actions=ca or [],
        peripheral_type=peripheral,
        source=source,
        sub_list=SubList(instance_title=sub_title, item_results=sub) if sub is not None else None,
    )


def temps(values, start=1000, gap=100, text="Product Temp"):
    """Completed temperature items at a fixed time gap."""
    return [item(text, ts=start + i * gap, val=v) for i, v in enumerate(values)]


def timed(count, gaps, start=1000, text="Check station"):
    """``count`` completed items without values; ``gaps`` cycles for the spacing."""
    items, ts = [], start
    for i in range(count):
        items.append(item(text, ts=ts))
        ts += gaps[i % len(gaps)]
    return items
