"""Termination reconciliation."""

from .date_window import DateRange, filter_by_date_window
from .classifier import Classification, ClassificationResult, classify
from .matching import AttributeMatcher, DisplayNameMatcher, Matcher, build_matcher
from .pipeline import (
    RESULT_FIELDS,
    ReconciliationSummary,
    disable_accounts,
    format_summary,
    reconcile_hr_file,
    run_reconciliation,
)

__all__ = [
    "DateRange",
    "filter_by_date_window",
    "Classification",
    "ClassificationResult",
    "classify",
    "AttributeMatcher",
    "DisplayNameMatcher",
    "Matcher",
    "build_matcher",
    "RESULT_FIELDS",
    "ReconciliationSummary",
    "disable_accounts",
    "format_summary",
    "reconcile_hr_file",
    "run_reconciliation",
]
