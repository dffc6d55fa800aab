"""HR export handling."""

from .source import EmployeeRecord, DataQualityIssue, HRLoadResult, load_hr_records

__all__ = ["EmployeeRecord", "DataQualityIssue", "HRLoadResult", "load_hr_records"]
