"""The termination reconciliation pass."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from ..config.models import HRSourceConfig
from ..core.directory import Directory
from ..core.errors import DirectoryUnavailableError
from ..core.logging import get_logger
from ..hr.source import DataQualityIssue, EmployeeRecord, load_hr_records
from .classifier import Classification, ClassificationResult, classify
from .date_window import DateRange, filter_by_date_window
from .matching import DisplayNameMatcher, Matcher

logger = get_logger("reconcile")

RESULT_FIELDS = ['FullName', 'StatusEffDate', 'Classification', 'SamAccountName',
                 'Enabled', 'DistinguishedName']


@dataclass
class ReconciliationSummary:
    """Counters and per-employee results of one pass."""
    date_range: DateRange = DateRange.ALL
    reference_time: Optional[datetime] = None
    already_disabled_count: int = 0
    needs_disabling_count: int = 0
    not_found_count: int = 0
    results: List[ClassificationResult] = field(default_factory=list)
    issues: List[DataQualityIssue] = field(default_factory=list)
    disabled_dns: List[str] = field(default_factory=list)
    failed_dns: List[str] = field(default_factory=list)
    remediation_ran: bool = False

    @property
    def total_processed(self) -> int:
        return len(self.results)

    def record(self, result: ClassificationResult) -> None:
        """Add one classification to the counters."""
        self.results.append(result)
        if result.classification is Classification.NEEDS_DISABLING:
            self.needs_disabling_count += len(result.counted_accounts)
        elif result.classification is Classification.ALREADY_DISABLED:
            self.already_disabled_count += len(result.counted_accounts)
        else:
            self.not_found_count += 1

    def to_dict(self, include_results: bool = True) -> Dict[str, Any]:
        data = {
            "date_range": self.date_range.value,
            "reference_time": self.reference_time.isoformat() if self.reference_time else None,
            "total_processed": self.total_processed,
            "already_disabled": self.already_disabled_count,
            "needs_disabling": self.needs_disabling_count,
            "not_found": self.not_found_count,
            "data_quality_issues": [
                {"row": issue.row_number, "column": issue.column, "value": issue.value, "message": issue.message}
                for issue in self.issues
            ],
        }
        if self.remediation_ran:
            data["disabled"] = list(self.disabled_dns)
            data["disable_failed"] = list(self.failed_dns)
        if include_results:
            data["results"] = result_rows(self)
        return data


def result_rows(summary: ReconciliationSummary) -> List[Dict[str, Any]]:
    """Flatten per-employee results into report rows, one per matched account."""
    rows = []
    for result in summary.results:
        employee = result.employee
        base = {
            "FullName": employee.full_name,
            "StatusEffDate": employee.status_effective_date.isoformat(),
            "Classification": result.classification.value,
        }
        if not result.accounts:
            rows.append(dict(base, SamAccountName="", Enabled="", DistinguishedName=""))
            continue
        for account in result.accounts:
            rows.append(dict(
                base,
                SamAccountName=account.sam_account_name,
                Enabled=account.enabled,
                DistinguishedName=account.distinguished_name,
            ))
    return rows


def select_terminated(records: Iterable[EmployeeRecord], terminated_status: str = "Terminated") -> List[EmployeeRecord]:
    """Keep records whose status matches ``terminated_status``, ignoring case."""
    wanted = terminated_status.casefold()
    return [record for record in records if record.status_type.casefold() == wanted]


def run_reconciliation(records: Iterable[EmployeeRecord],
                       directory: Directory,
                       date_range: DateRange = DateRange.ALL,
                       now: Optional[datetime] = None,
                       matcher: Optional[Matcher] = None,
                       terminated_status: str = "Terminated",
                       issues: Optional[List[DataQualityIssue]] = None) -> ReconciliationSummary:
    """
    Classify every terminated employee inside the date window.
    
    Args:
        records: Parsed HR records
        directory: Directory used for account lookups
        date_range: Effective-date window
        now: Reference time of the window (defaults to the current local time)
        matcher: Join-key strategy (display name by default)
        terminated_status: Status value marking a terminated employee
        issues: Data-quality issues found while reading the HR export
        
    Returns:
        ReconciliationSummary with one result per selected employee
        
    Raises:
        DirectoryUnavailableError: If any lookup fails; no summary is produced
    """
    now = now or datetime.now()
    matcher = matcher or DisplayNameMatcher()
    
    terminated = select_terminated(records, terminated_status)
    selected = filter_by_date_window(terminated, date_range, now)
    logger.info(f"{len(selected)} of {len(terminated)} terminated employees inside window {date_range.value}")
    
    summary = ReconciliationSummary(date_range=date_range, reference_time=now, issues=list(issues or []))
    
    for employee in selected:
        accounts = matcher.find_accounts(directory, employee)
        result = classify(employee, accounts)
        summary.record(result)
        
        if result.classification is Classification.NEEDS_DISABLING:
            for account in result.counted_accounts:
                logger.warning(f"{employee.full_name} is still enabled: {account.distinguished_name}")
        elif result.classification is Classification.ALREADY_DISABLED:
            logger.info(f"{employee.full_name} already disabled ({len(result.counted_accounts)} account(s))")
        else:
            logger.info(f"{employee.full_name} not found in directory")
    
    return summary


def disable_accounts(summary: ReconciliationSummary, directory: Directory) -> ReconciliationSummary:
    """
    Disable every enabled account of the NEEDS_DISABLING results.
    
    A failed modify is logged and recorded in ``failed_dns``; the remaining
    accounts are still processed.
    """
    summary.remediation_ran = True
    for result in summary.results:
        if result.classification is not Classification.NEEDS_DISABLING:
            continue
        for account in result.counted_accounts:
            try:
                directory.disable_account(account)
            except DirectoryUnavailableError as e:
                logger.error(f"Failed to disable {account.distinguished_name}: {e}")
                summary.failed_dns.append(account.distinguished_name)
                continue
            logger.info(f"Disabled {account.distinguished_name}")
            summary.disabled_dns.append(account.distinguished_name)
    return summary


def reconcile_hr_file(path: str,
                      directory: Directory,
                      hr_config: Optional[HRSourceConfig] = None,
                      date_range: Optional[str] = None,
                      now: Optional[datetime] = None,
                      matcher: Optional[Matcher] = None,
                      disable: bool = False) -> ReconciliationSummary:
    """
    Read the HR export at ``path`` and run the pass against ``directory``.
    
    Raises:
        InputUnavailableError: If the HR export cannot be read
        DirectoryUnavailableError: If the directory cannot be queried
    """
    hr_config = hr_config or HRSourceConfig()
    loaded = load_hr_records(path, hr_config)
    summary = run_reconciliation(
        loaded.records,
        directory,
        date_range=DateRange.parse(date_range),
        now=now,
        matcher=matcher,
        terminated_status=hr_config.terminated_status,
        issues=loaded.issues,
    )
    if disable:
        disable_accounts(summary, directory)
    return summary


def format_summary(summary: ReconciliationSummary) -> str:
    """Render the human-readable run summary."""
    lines = [
        f"Date range: {summary.date_range.value}",
        f"Total terminated employees processed: {summary.total_processed}",
        f"Accounts already disabled: {summary.already_disabled_count}",
        f"Accounts that need disabling: {summary.needs_disabling_count}",
        f"Employees not found in directory: {summary.not_found_count}",
    ]
    if summary.issues:
        lines.append(f"Rows skipped for data-quality issues: {len(summary.issues)}")
        for issue in summary.issues:
            lines.append(f"  row {issue.row_number}: {issue.column} '{issue.value}' ({issue.message})")
    if summary.remediation_ran:
        lines.append(f"Accounts disabled this run: {len(summary.disabled_dns)}")
        if summary.failed_dns:
            lines.append(f"Accounts that failed to disable: {len(summary.failed_dns)}")
    return "\n".join(lines)
