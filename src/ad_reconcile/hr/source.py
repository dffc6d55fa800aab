"""Reader for the HR status export."""

import csv
from dataclasses import dataclass, field
from datetime import date, datetime
from pathlib import Path
from typing import List, Optional, Union

from ..config.models import HRSourceConfig
from ..core.errors import InputUnavailableError
from ..core.logging import get_logger

logger = get_logger("hr")


@dataclass
class EmployeeRecord:
    """One employee row from the HR export."""
    first_name: str
    last_name: str
    status_type: str
    status_effective_date: date
    employee_id: Optional[str] = None
    row_number: int = 0

    @property
    def full_name(self) -> str:
        # Joined as-is; display names in the directory are matched exactly
        return f"{self.first_name} {self.last_name}"


@dataclass
class DataQualityIssue:
    """A row that could not be turned into an EmployeeRecord."""
    row_number: int
    column: str
    value: str
    message: str


@dataclass
class HRLoadResult:
    """Records and data-quality issues read from one HR export."""
    records: List[EmployeeRecord] = field(default_factory=list)
    issues: List[DataQualityIssue] = field(default_factory=list)
    source: str = ""


def parse_effective_date(value: str, date_format: str) -> date:
    """
    Parse a status effective date.
    
    Raises:
        ValueError: If the value is blank or does not match ``date_format``
    """
    text = (value or "").strip()
    if not text:
        raise ValueError("empty date")
    return datetime.strptime(text, date_format).date()


def load_hr_records(path: Union[str, Path], config: Optional[HRSourceConfig] = None) -> HRLoadResult:
    """
    Read the HR export at ``path``.
    
    Rows whose effective date is blank or malformed are reported as
    DataQualityIssue entries instead of records; they never abort the read.
    Row numbers count the header as row 1.
    
    Raises:
        InputUnavailableError: If the file is missing, unreadable or lacks a required column
    """
    config = config or HRSourceConfig()
    source = Path(path)
    
    required = [
        config.first_name_column,
        config.last_name_column,
        config.status_column,
        config.effective_date_column,
    ]
    if config.id_column:
        required.append(config.id_column)
    
    result = HRLoadResult(source=str(source))
    
    try:
        with open(source, 'r', newline='', encoding=config.encoding) as file:
            reader = csv.DictReader(file)
            headers = [name.strip() for name in (reader.fieldnames or [])]
            reader.fieldnames = headers
            
            missing = [column for column in required if column not in headers]
            if missing:
                raise InputUnavailableError(f"HR export {source} is missing columns: {', '.join(missing)}")
            
            for row_number, row in enumerate(reader, start=2):
                raw_date = row.get(config.effective_date_column) or ""
                try:
                    effective = parse_effective_date(raw_date, config.date_format)
                except ValueError as e:
                    issue = DataQualityIssue(
                        row_number=row_number,
                        column=config.effective_date_column,
                        value=raw_date,
                        message=str(e),
                    )
                    logger.warning(f"Row {row_number}: unparseable {config.effective_date_column} '{raw_date}'")
                    result.issues.append(issue)
                    continue
                
                employee_id = None
                if config.id_column:
                    employee_id = (row.get(config.id_column) or "").strip() or None
                
                result.records.append(EmployeeRecord(
                    first_name=row.get(config.first_name_column) or "",
                    last_name=row.get(config.last_name_column) or "",
                    status_type=row.get(config.status_column) or "",
                    status_effective_date=effective,
                    employee_id=employee_id,
                    row_number=row_number,
                ))
    except FileNotFoundError as e:
        logger.error(f"HR export {source} not found")
        raise InputUnavailableError(f"HR export not found: {source}") from e
    except (OSError, UnicodeDecodeError, csv.Error) as e:
        logger.error(f"Error reading HR export {source}: {e}")
        raise InputUnavailableError(f"HR export unreadable: {source}: {e}") from e
    
    logger.info(f"Read {len(result.records)} records from {source} ({len(result.issues)} data-quality issues)")
    return result
