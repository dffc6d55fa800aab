"""Core functionality for AD reconcile."""

from .errors import (
    ReconcileError,
    InputUnavailableError,
    DirectoryUnavailableError,
    ConfigurationError,
)
from .ldap_manager import LDAPManager
from .logging import setup_logging
from .directory import Directory, DirectoryAccount

__all__ = [
    "ReconcileError",
    "InputUnavailableError",
    "DirectoryUnavailableError",
    "ConfigurationError",
    "LDAPManager",
    "setup_logging",
    "Directory",
    "DirectoryAccount",
]
