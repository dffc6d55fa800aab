"""Exceptions raised by AD reconcile."""


class ReconcileError(Exception):
    """Base class for fatal, run-terminating errors."""


class InputUnavailableError(ReconcileError):
    """The HR export is missing, unreadable or lacks required columns."""


class DirectoryUnavailableError(ReconcileError):
    """The directory could not be reached or a query failed."""


class ConfigurationError(ReconcileError, ValueError):
    """Configuration is absent or invalid."""
