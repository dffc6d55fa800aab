"""Inventory and stale-account report tools."""

from typing import Any, Callable, Dict, List, Optional

from mcp.types import TextContent as Content

from .base import BaseTool
from ..reports.csv_writer import write_report
from ..reports.inventory import (
    GROUP_FIELDS,
    OU_FIELDS,
    STALE_FIELDS,
    USER_FIELDS,
    group_inventory,
    ou_inventory,
    stale_accounts,
    user_inventory,
)


class ReportTools(BaseTool):
    """Export directory objects to CSV."""
    
    def _export(self, operation: str, prefix: str, fields: List[str],
                build: Callable[[], List[Dict[str, Any]]], **extra: Any) -> List[Content]:
        try:
            rows = build()
            path = write_report(rows, self.config.reports.output_dir, prefix, fields)
            return self._success_response(
                f"Exported {len(rows)} rows",
                dict(extra, count=len(rows), path=str(path))
            )
        except Exception as e:
            return self._handle_error(e, operation)
    
    def export_user_inventory(self, search_base: Optional[str] = None) -> List[Content]:
        """Export every user account to CSV."""
        return self._export("export_user_inventory", "UserInventory", USER_FIELDS,
                            lambda: user_inventory(self.directory, search_base))
    
    def export_group_inventory(self, search_base: Optional[str] = None) -> List[Content]:
        """Export every group to CSV."""
        return self._export("export_group_inventory", "GroupInventory", GROUP_FIELDS,
                            lambda: group_inventory(self.directory, search_base))
    
    def export_ou_inventory(self, search_base: Optional[str] = None) -> List[Content]:
        """Export every organizational unit to CSV."""
        return self._export("export_ou_inventory", "OUInventory", OU_FIELDS,
                            lambda: ou_inventory(self.directory, search_base))
    
    def stale_accounts_report(self, days: Optional[int] = None,
                              search_base: Optional[str] = None) -> List[Content]:
        """Export enabled accounts without a recent logon to CSV."""
        if days is None:
            days = self.config.reports.stale_days
        return self._export("stale_accounts_report", "StaleAccounts", STALE_FIELDS,
                            lambda: stale_accounts(self.directory, days, search_base=search_base),
                            criteria_days=days)
    
    def get_schema_info(self) -> Dict[str, Any]:
        """Get schema information for report operations."""
        return {
            "operations": [
                "export_user_inventory", "export_group_inventory",
                "export_ou_inventory", "stale_accounts_report"
            ],
            "columns": {
                "users": USER_FIELDS,
                "groups": GROUP_FIELDS,
                "organizational_units": OU_FIELDS,
                "stale_accounts": STALE_FIELDS,
            },
            "output_dir": self.config.reports.output_dir
        }
