"""Configuration module for AD reconcile."""

from .loader import load_config, validate_config
from .models import (
    ActiveDirectoryConfig,
    SecurityConfig,
    LoggingConfig,
    PerformanceConfig,
    HRSourceConfig,
    ReconciliationConfig,
    ReportsConfig,
    Config,
)

__all__ = [
    "load_config",
    "validate_config",
    "ActiveDirectoryConfig",
    "SecurityConfig",
    "LoggingConfig",
    "PerformanceConfig",
    "HRSourceConfig",
    "ReconciliationConfig",
    "ReportsConfig",
    "Config",
]
