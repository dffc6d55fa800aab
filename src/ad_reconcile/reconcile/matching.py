"""Join-key strategies matching HR records to directory accounts."""

from abc import ABC, abstractmethod
from typing import List, Optional

from ..core.directory import Directory, DirectoryAccount
from ..core.logging import get_logger
from ..hr.source import EmployeeRecord

logger = get_logger("matching")


class Matcher(ABC):
    """Finds the directory accounts belonging to an employee."""

    name = "matcher"

    @abstractmethod
    def find_accounts(self, directory: Directory, employee: EmployeeRecord) -> List[DirectoryAccount]:
        """Return every account matching ``employee``."""


class DisplayNameMatcher(Matcher):
    """Exact displayName == "<first> <last>" lookup."""

    name = "displayName"

    def find_accounts(self, directory: Directory, employee: EmployeeRecord) -> List[DirectoryAccount]:
        return directory.find_users_by_display_name(employee.full_name)


class AttributeMatcher(Matcher):
    """
    Match the HR identifier against a directory attribute such as ``employeeID``.
    
    Records without an identifier, or whose identifier finds nothing, fall
    back to the display name lookup.
    """

    def __init__(self, attribute: str, fallback: Optional[Matcher] = None):
        self.attribute = attribute
        self.name = attribute
        self.fallback = fallback or DisplayNameMatcher()

    def find_accounts(self, directory: Directory, employee: EmployeeRecord) -> List[DirectoryAccount]:
        if employee.employee_id:
            accounts = directory.find_users_by_attribute(self.attribute, employee.employee_id)
            if accounts:
                return accounts
            logger.debug(f"No account with {self.attribute}={employee.employee_id}, falling back to {self.fallback.name}")
        return self.fallback.find_accounts(directory, employee)


def build_matcher(match_attribute: Optional[str] = None) -> Matcher:
    """Return the matcher for ``match_attribute``; display name when unset."""
    if match_attribute and match_attribute != DisplayNameMatcher.name:
        return AttributeMatcher(match_attribute)
    return DisplayNameMatcher()
