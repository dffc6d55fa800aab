"""
MCP server for AD reconcile.

This module exposes the batch operations as MCP tools over stdio:
- Termination reconciliation (classify, optionally disable)
- User, group and organizational unit inventory exports
- Stale-account report
- Connection test and health check
"""

import json
import os
import sys
import signal
from typing import Optional, Annotated

from mcp.server.fastmcp import FastMCP
from mcp.types import TextContent as Content
from pydantic import Field

from . import __version__
from .config.loader import CONFIG_ENV_VAR, load_config, validate_config
from .core.directory import Directory
from .core.logging import setup_logging
from .core.ldap_manager import LDAPManager
from .tools.reconciliation import ReconciliationTools
from .tools.reports import ReportTools


class ADReconcileMCPServer:
    """Main server class for AD reconcile."""

    def __init__(self, config_path: Optional[str] = None):
        """
        Initialize the server.

        Args:
            config_path: Path to configuration file
        """
        self.config = load_config(config_path)
        validate_config(self.config)
        
        self.logger = setup_logging(self.config.logging, run_name="MCPServer")
        
        self.ldap_manager = LDAPManager(
            self.config.active_directory,
            self.config.security,
            self.config.performance
        )
        self.directory = Directory(self.ldap_manager)
        
        self._test_initial_connection()
        
        self.reconciliation_tools = ReconciliationTools(self.directory, self.config)
        self.report_tools = ReportTools(self.directory, self.config)
        
        self.mcp = FastMCP("ADReconcile")
        self._setup_tools()

    def _test_initial_connection(self) -> None:
        """Test initial LDAP connection; failures only degrade health."""
        self.logger.info("Testing initial LDAP connection...")
        connection_info = self.ldap_manager.test_connection()
        
        if connection_info.get('connected'):
            self.logger.info(f"Successfully connected to {connection_info.get('server')}:{connection_info.get('port')}")
            if connection_info.get('search_test'):
                self.logger.info("LDAP search test passed")
            else:
                self.logger.warning("LDAP search test failed")
        else:
            self.logger.error(f"Initial connection failed: {connection_info.get('error')}")

    def _setup_tools(self) -> None:
        """Register MCP tools with the server."""
        
        @self.mcp.tool(description="Compare terminated employees in the HR export with directory accounts")
        def reconcile_terminations(
            hr_file: Annotated[Optional[str], Field(description="HR export CSV path (defaults to configured path)", default=None)] = None,
            date_range: Annotated[Optional[str], Field(description="LastYear, LastQuarter, LastMonth, LastWeek, LastDay; unset for all", default=None)] = None,
            disable: Annotated[Optional[bool], Field(description="Disable accounts that are still enabled", default=None)] = None,
            dry_run: Annotated[bool, Field(description="Never disable accounts", default=False)] = False,
            write_results: Annotated[bool, Field(description="Also write a per-employee results CSV", default=False)] = False
        ):
            return self.reconciliation_tools.reconcile_terminations(hr_file, date_range, disable, dry_run, write_results)

        @self.mcp.tool(description="Export all user accounts to CSV")
        def export_user_inventory(
            search_base: Annotated[Optional[str], Field(description="DN to search under", default=None)] = None
        ):
            return self.report_tools.export_user_inventory(search_base)

        @self.mcp.tool(description="Export all groups to CSV")
        def export_group_inventory(
            search_base: Annotated[Optional[str], Field(description="DN to search under", default=None)] = None
        ):
            return self.report_tools.export_group_inventory(search_base)

        @self.mcp.tool(description="Export all organizational units to CSV")
        def export_ou_inventory(
            search_base: Annotated[Optional[str], Field(description="DN to search under", default=None)] = None
        ):
            return self.report_tools.export_ou_inventory(search_base)

        @self.mcp.tool(description="Export enabled users without a logon in the given number of days")
        def stale_accounts_report(
            days: Annotated[Optional[int], Field(description="Days without logon", default=None)] = None,
            search_base: Annotated[Optional[str], Field(description="DN to search under", default=None)] = None
        ):
            return self.report_tools.stale_accounts_report(days, search_base)

        @self.mcp.tool(description="Test LDAP connection and get server information")
        def test_connection():
            connection_info = self.ldap_manager.test_connection()
            return [Content(type="text", text=json.dumps(connection_info, indent=2, default=str))]

        @self.mcp.tool(description="Health check for the AD reconcile server")
        def health():
            connection_info = self.ldap_manager.test_connection()
            health_info = {
                "status": "ok" if connection_info.get('connected') else "degraded",
                "server": "ADReconcile",
                "version": __version__,
                "ldap_connection": "connected" if connection_info.get('connected') else "disconnected",
                "ldap_server": connection_info.get('server', 'unknown')
            }
            return [Content(type="text", text=json.dumps(health_info, indent=2))]

        @self.mcp.tool(description="Get schema information for all available tools")
        def get_schema_info():
            schema_info = {
                "server": "ADReconcile",
                "version": __version__,
                "tools": {
                    "reconciliation_tools": self.reconciliation_tools.get_schema_info(),
                    "report_tools": self.report_tools.get_schema_info()
                }
            }
            return [Content(type="text", text=json.dumps(schema_info, indent=2))]

    def start(self) -> None:
        """
        Start the MCP server on stdio.
        
        Runs until terminated by a signal or fatal error.
        """
        import anyio

        def signal_handler(signum, frame):
            self.logger.info("Received signal to shutdown...")
            self.ldap_manager.disconnect()
            sys.exit(0)

        signal.signal(signal.SIGINT, signal_handler)
        signal.signal(signal.SIGTERM, signal_handler)

        try:
            self.logger.info("Starting AD reconcile MCP server...")
            self.logger.info(f"Connected to: {self.config.active_directory.server}")
            self.logger.info(f"Base DN: {self.config.active_directory.base_dn}")
            
            anyio.run(self.mcp.run_stdio_async)
            
        except Exception as e:
            self.logger.error(f"Server error: {e}")
            self.ldap_manager.disconnect()
            sys.exit(1)


def main():
    """Main entry point for the server."""
    config_path = os.getenv(CONFIG_ENV_VAR)
    if not config_path:
        print(f"{CONFIG_ENV_VAR} environment variable must be set", file=sys.stderr)
        sys.exit(1)
    
    try:
        server = ADReconcileMCPServer(config_path)
        server.start()
    except KeyboardInterrupt:
        print("\nShutting down gracefully...", file=sys.stderr)
        sys.exit(0)
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
