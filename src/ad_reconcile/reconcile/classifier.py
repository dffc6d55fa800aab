"""Classification of a terminated employee against their directory accounts."""

from dataclasses import dataclass, field
from enum import Enum
from typing import List

from ..core.directory import DirectoryAccount
from ..hr.source import EmployeeRecord


class Classification(Enum):
    """Outcome for one terminated employee."""
    ALREADY_DISABLED = "AlreadyDisabled"
    NEEDS_DISABLING = "NeedsDisabling"
    NOT_FOUND = "NotFound"


@dataclass
class ClassificationResult:
    """Classification of one employee with the accounts that matched."""
    employee: EmployeeRecord
    classification: Classification
    accounts: List[DirectoryAccount] = field(default_factory=list)
    counted_accounts: List[DirectoryAccount] = field(default_factory=list)


def classify(employee: EmployeeRecord, accounts: List[DirectoryAccount]) -> ClassificationResult:
    """
    Classify ``employee`` from the accounts found for them.
    
    Any enabled account makes the employee NEEDS_DISABLING, even when
    disabled accounts share the name; only the enabled ones are counted.
    Otherwise any account means ALREADY_DISABLED, counting each one.
    No account at all is NOT_FOUND.
    """
    enabled = [account for account in accounts if account.enabled]
    if enabled:
        return ClassificationResult(employee, Classification.NEEDS_DISABLING, list(accounts), enabled)
    
    disabled = [account for account in accounts if not account.enabled]
    if disabled:
        return ClassificationResult(employee, Classification.ALREADY_DISABLED, list(accounts), disabled)
    
    return ClassificationResult(employee, Classification.NOT_FOUND, [], [])
