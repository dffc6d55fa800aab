"""CSV export of report rows."""

import csv
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..core.logging import get_logger

logger = get_logger("reports")


def write_csv(rows: List[Dict[str, Any]], output_path: Path,
              fieldnames: Optional[List[str]] = None) -> Path:
    """Write ``rows`` to ``output_path`` with a header row."""
    if fieldnames is None:
        fieldnames = list(rows[0].keys()) if rows else []
    
    with open(output_path, 'w', newline='', encoding='utf-8') as file:
        writer = csv.DictWriter(file, fieldnames=fieldnames, extrasaction='ignore')
        writer.writeheader()
        writer.writerows(rows)
    
    logger.info(f"Wrote {len(rows)} records to {output_path}")
    return output_path


def write_report(rows: List[Dict[str, Any]], report_dir: str, prefix: str,
                 fieldnames: Optional[List[str]] = None,
                 now: Optional[datetime] = None) -> Path:
    """
    Write ``rows`` to ``<report_dir>/<prefix>_<YYYYMMDD_HHMMSS>.csv``.
    
    The directory is created if missing. An empty row list still produces
    a file holding only the header when ``fieldnames`` is given.
    """
    directory = Path(report_dir)
    directory.mkdir(parents=True, exist_ok=True)
    
    stamp = (now or datetime.now()).strftime("%Y%m%d_%H%M%S")
    return write_csv(rows, directory / f"{prefix}_{stamp}.csv", fieldnames)
