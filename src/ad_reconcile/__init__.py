"""
AD reconcile - Active Directory reporting and termination reconciliation.

This package compares an HR status export with Active Directory accounts,
flags terminated employees whose accounts are still enabled (optionally
disabling them), and exports user, group, OU and stale-account reports
as CSV. Operations are available from the ``ad-reconcile`` command line
and as MCP tools.
"""

__version__ = "0.1.0"

from .reconcile.pipeline import ReconciliationSummary, run_reconciliation

__all__ = ["ReconciliationSummary", "run_reconciliation"]
