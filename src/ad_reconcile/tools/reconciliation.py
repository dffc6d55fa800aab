"""Termination reconciliation tool."""

from typing import Any, Dict, List, Optional

from mcp.types import TextContent as Content

from .base import BaseTool
from ..reconcile.date_window import DateRange
from ..reconcile.matching import build_matcher
from ..reconcile.pipeline import RESULT_FIELDS, reconcile_hr_file, result_rows
from ..reports.csv_writer import write_report


class ReconciliationTools(BaseTool):
    """Compare the HR export with directory accounts."""
    
    def reconcile_terminations(self, hr_file: Optional[str] = None, date_range: Optional[str] = None,
                               disable: Optional[bool] = None, dry_run: bool = False,
                               write_results: bool = False) -> List[Content]:
        """
        Classify terminated employees and optionally disable their accounts.
        
        Args:
            hr_file: HR export path (defaults to hr_source.path)
            date_range: LastYear, LastQuarter, LastMonth, LastWeek, LastDay or unset
            disable: Disable enabled accounts (defaults to reconciliation.disable_accounts)
            dry_run: Never disable, whatever the other settings say
            write_results: Also write the per-employee results CSV
            
        Returns:
            List of MCP content objects with the run summary
        """
        try:
            path = hr_file or self.config.hr_source.path
            if not path:
                raise ValueError("No HR export given and hr_source.path is not configured")
            
            if date_range is None:
                date_range = self.config.reconciliation.date_range
            if disable is None:
                disable = self.config.reconciliation.disable_accounts
            
            self.logger.info(f"Reconciling terminations from {path} ({DateRange.parse(date_range).value})")
            
            summary = reconcile_hr_file(
                path,
                self.directory,
                hr_config=self.config.hr_source,
                date_range=date_range,
                matcher=build_matcher(self.config.reconciliation.match_attribute),
                disable=disable and not dry_run,
            )
            
            data = summary.to_dict()
            if write_results:
                report = write_report(result_rows(summary), self.config.reports.output_dir,
                                      "TerminationReconciliation", RESULT_FIELDS)
                data["results_csv"] = str(report)
            
            return self._format_response(data, "reconcile_terminations")
            
        except Exception as e:
            return self._handle_error(e, "reconcile_terminations")
    
    def get_schema_info(self) -> Dict[str, Any]:
        """Get schema information for reconciliation operations."""
        return {
            "operations": ["reconcile_terminations"],
            "date_ranges": [member.value for member in DateRange],
            "hr_columns": [
                self.config.hr_source.first_name_column,
                self.config.hr_source.last_name_column,
                self.config.hr_source.status_column,
                self.config.hr_source.effective_date_column,
            ],
            "required_permissions": ["Read User Objects", "Enable/Disable User Account"]
        }
