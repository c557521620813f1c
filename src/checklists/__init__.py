"""
Checklist Analytics Engine.

Pure, synchronous metrics over checklist result trees fetched from the
checklist API.

Modules:
    models - Item/list dataclasses, result types and API payload parsing
    traversal - Shared tree walk and flatten-with-clean-titles primitives
    classifiers - Keyword lists for list names and item prompts
    metrics - Duration, corrective actions, expiration, report stats, audit score
    integrity - Anti-fraud integrity score engine
    summary - Per-list summaries, per-store daypart grid rows and audit scores
    report - Daily food safety report: rows, cells and formatting
    cli - Command-line interface entrypoints
"""

from .integrity import compute_integrity
from .metrics import (
    check_expiration_status,
    compute_audit_score,
    compute_duration,
    count_corrective_actions,
    extract_report_stats,
)
from .models import parse_item_results, parse_list_instances
from .traversal import flatten_with_clean_titles

__version__ = "1.0.0"

__all__ = [
    "check_expiration_status",
    "compute_audit_score",
    "compute_duration",
    "compute_integrity",
    "count_corrective_actions",
    "extract_report_stats",
    "flatten_with_clean_titles",
    "parse_item_results",
    "parse_list_instances",
]
