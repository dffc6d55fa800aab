"""Command line entry point for AD reconcile."""

import argparse
import sys
from typing import List, Optional

from ldap3.core.exceptions import LDAPException
from pydantic import ValidationError

from . import __version__
from .config.loader import load_config, validate_config
from .config.models import Config
from .core.directory import Directory
from .core.errors import ReconcileError
from .core.ldap_manager import LDAPManager
from .core.logging import get_logger, setup_logging
from .reconcile.date_window import DateRange
from .reconcile.matching import build_matcher
from .reconcile.pipeline import RESULT_FIELDS, format_summary, reconcile_hr_file, result_rows
from .reports.csv_writer import write_report
from .reports.inventory import (
    GROUP_FIELDS,
    OU_FIELDS,
    STALE_FIELDS,
    USER_FIELDS,
    group_inventory,
    ou_inventory,
    stale_accounts,
    user_inventory,
)

logger = get_logger("cli")

RUN_NAMES = {
    "reconcile": "DisableTerminatedEmployees",
    "users": "UserInventory",
    "groups": "GroupInventory",
    "ous": "OUInventory",
    "stale": "StaleAccounts",
    "test-connection": "TestConnection",
}


def positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid int value: '{value}'")
    if number <= 0:
        raise argparse.ArgumentTypeError("must be a positive number of days")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ad-reconcile",
        description="Active Directory reports and termination reconciliation"
    )
    parser.add_argument("--config", help="Configuration file (defaults to $AD_RECONCILE_CONFIG)")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    
    subparsers = parser.add_subparsers(dest="command", required=True)
    
    reconcile = subparsers.add_parser("reconcile", help="Check terminated employees against the directory")
    reconcile.add_argument("--hr-file", help="HR export CSV (defaults to hr_source.path)")
    reconcile.add_argument(
        "--date-range",
        help="One of " + ", ".join(member.value for member in DateRange) + " (default: all)"
    )
    reconcile.add_argument("--disable", action="store_true", help="Disable accounts that are still enabled")
    reconcile.add_argument("--dry-run", action="store_true", help="Never disable accounts")
    reconcile.add_argument("--results-csv", action="store_true", help="Also write the per-employee results CSV")
    
    for name, help_text in (("users", "Export user inventory"),
                            ("groups", "Export group inventory"),
                            ("ous", "Export organizational unit inventory")):
        command = subparsers.add_parser(name, help=help_text)
        command.add_argument("--search-base", help="DN to search under (defaults to the base DN)")
    
    stale = subparsers.add_parser("stale", help="Export enabled users without a recent logon")
    stale.add_argument("--days", type=positive_int, help="Days without logon (defaults to reports.stale_days)")
    stale.add_argument("--search-base", help="DN to search under (defaults to the base DN)")
    
    subparsers.add_parser("test-connection", help="Test the LDAP connection")
    subparsers.add_parser("serve", help="Run the MCP server on stdio")
    
    return parser


def run_reconcile(args: argparse.Namespace, config: Config, directory: Directory) -> int:
    path = args.hr_file or config.hr_source.path
    if not path:
        logger.error("No HR export given: pass --hr-file or set hr_source.path")
        return 1
    
    date_range = args.date_range if args.date_range is not None else config.reconciliation.date_range
    disable = (args.disable or config.reconciliation.disable_accounts) and not args.dry_run
    
    summary = reconcile_hr_file(
        path,
        directory,
        hr_config=config.hr_source,
        date_range=date_range,
        matcher=build_matcher(config.reconciliation.match_attribute),
        disable=disable,
    )
    
    logger.info(f"Reconciliation finished: {summary.total_processed} processed, "
                f"{summary.needs_disabling_count} need disabling, "
                f"{summary.already_disabled_count} already disabled, "
                f"{summary.not_found_count} not found")
    print(format_summary(summary))
    
    if args.results_csv:
        report = write_report(result_rows(summary), config.reports.output_dir,
                              "TerminationReconciliation", RESULT_FIELDS)
        print(f"Results written to {report}")
    return 0


def run_report(args: argparse.Namespace, config: Config, directory: Directory) -> int:
    search_base = getattr(args, "search_base", None)
    if args.command == "users":
        rows, fields = user_inventory(directory, search_base), USER_FIELDS
    elif args.command == "groups":
        rows, fields = group_inventory(directory, search_base), GROUP_FIELDS
    elif args.command == "ous":
        rows, fields = ou_inventory(directory, search_base), OU_FIELDS
    else:
        days = config.reports.stale_days if args.days is None else args.days
        rows, fields = stale_accounts(directory, days, search_base=search_base), STALE_FIELDS
    
    path = write_report(rows, config.reports.output_dir, RUN_NAMES[args.command], fields)
    print(f"{len(rows)} rows written to {path}")
    return 0


def run_test_connection(ldap_manager: LDAPManager) -> int:
    info = ldap_manager.test_connection()
    if not info.get('connected'):
        print(f"Connection failed: {info.get('error')}")
        return 1
    print(f"Connected to {info.get('server')}:{info.get('port')} as {info.get('user')}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Parse arguments, run one command and return its exit code."""
    args = build_parser().parse_args(argv)
    
    try:
        config = load_config(args.config)
    except (FileNotFoundError, ValidationError, ValueError) as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1
    
    if args.command == "serve":
        from .server import ADReconcileMCPServer
        ADReconcileMCPServer(args.config).start()
        return 0
    
    validate_config(config)
    setup_logging(config.logging, run_name=RUN_NAMES[args.command])
    
    ldap_manager = LDAPManager(config.active_directory, config.security, config.performance)
    try:
        with ldap_manager:
            if args.command == "test-connection":
                return run_test_connection(ldap_manager)
            directory = Directory(ldap_manager)
            if args.command == "reconcile":
                return run_reconcile(args, config, directory)
            return run_report(args, config, directory)
    except ReconcileError as e:
        logger.error(f"Run aborted: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except LDAPException as e:
        logger.error(f"Directory unavailable: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
