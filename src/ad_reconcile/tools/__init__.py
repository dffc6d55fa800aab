"""MCP tools for AD reconcile."""

from .base import BaseTool
from .reconciliation import ReconciliationTools
from .reports import ReportTools

__all__ = [
    "BaseTool",
    "ReconciliationTools",
    "ReportTools",
]
