"""Configuration loader for AD reconcile."""

import json
import os
import logging
from pathlib import Path
from typing import Optional

from .models import Config
from ..core.errors import ConfigurationError

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "AD_RECONCILE_CONFIG"


def load_config(config_path: Optional[str] = None) -> Config:
    """
    Load configuration from JSON file.
    
    Args:
        config_path: Path to configuration file. If None, uses AD_RECONCILE_CONFIG
                    environment variable.
    
    Returns:
        Config: Loaded and validated configuration
        
    Raises:
        FileNotFoundError: If config file doesn't exist
        ConfigurationError: If no path is given or the config is invalid
        json.JSONDecodeError: If config file is not valid JSON
    """
    if config_path is None:
        config_path = os.getenv(CONFIG_ENV_VAR)
        if not config_path:
            raise ConfigurationError(
                f"No configuration file specified. Either provide config_path or set {CONFIG_ENV_VAR} environment variable."
            )
    
    config_file = Path(config_path)
    if not config_file.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")
    
    logger.info(f"Loading configuration from: {config_path}")
    
    try:
        with open(config_file, 'r', encoding='utf-8') as f:
            config_data = json.load(f)
        
        config = Config(**config_data)
        logger.info("Configuration loaded successfully")
        
        # Never log the bind password
        logger.debug(f"AD Server: {config.active_directory.server}")
        logger.debug(f"Domain: {config.active_directory.domain}")
        logger.debug(f"Base DN: {config.active_directory.base_dn}")
        logger.debug(f"SSL Enabled: {config.active_directory.use_ssl}")
        
        return config
        
    except json.JSONDecodeError as e:
        logger.error(f"Invalid JSON in configuration file: {e}")
        raise
    except Exception as e:
        logger.error(f"Error loading configuration: {e}")
        raise


def validate_config(config: Config) -> None:
    """
    Perform additional validation on configuration.
    
    Only inconsistencies that still allow a run are checked here; they are
    logged as warnings.
    
    Args:
        config: Configuration to validate
    """
    base_dn = config.active_directory.base_dn.lower()
    
    if not config.active_directory.bind_dn.lower().endswith(base_dn):
        logger.warning(f"Bind DN {config.active_directory.bind_dn} is not under base DN")
    
    if config.active_directory.use_ssl and config.security.enable_tls:
        if not config.active_directory.server.startswith('ldaps://'):
            logger.warning("SSL enabled but server URL doesn't use ldaps://")
    
    if config.reconciliation.match_attribute and not config.hr_source.id_column:
        logger.warning("match_attribute is set without hr_source.id_column; matching falls back to display name")
    
    # Imported here: reconcile pulls in core, which imports this package
    from ..reconcile.date_window import DateRange
    date_range = config.reconciliation.date_range
    if date_range and date_range.strip() and not DateRange.is_known(date_range):
        logger.warning(f"Unknown reconciliation.date_range '{date_range}'; all records will be processed")
    
    logger.info("Configuration validation completed")
