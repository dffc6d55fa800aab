"""CSV reports."""

from .csv_writer import write_csv, write_report
from .inventory import group_inventory, ou_inventory, stale_accounts, user_inventory

__all__ = [
    "write_csv",
    "write_report",
    "group_inventory",
    "ou_inventory",
    "stale_accounts",
    "user_inventory",
]
