"""Logging configuration for AD reconcile."""

import logging
import logging.handlers
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

from ..config.models import LoggingConfig

ROOT_LOGGER_NAME = "ad-reconcile"


def setup_logging(config: LoggingConfig, run_name: Optional[str] = None) -> logging.Logger:
    """
    Setup logging configuration.
    
    Args:
        config: Logging configuration
        run_name: Optional name used in the transcript file name
        
    Returns:
        Logger instance
    """
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(getattr(logging, config.level))
    
    for handler in list(logger.handlers):
        handler.close()
    logger.handlers.clear()
    
    formatter = logging.Formatter(config.format)
    
    # Console goes to stderr so stdout stays free for the MCP stdio transport
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(getattr(logging, config.level))
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)
    
    if config.file:
        try:
            log_file = Path(config.file)
            log_file.parent.mkdir(parents=True, exist_ok=True)
            
            # 10MB max, keep 5 files
            file_handler = logging.handlers.RotatingFileHandler(
                log_file,
                maxBytes=10 * 1024 * 1024,
                backupCount=5,
                encoding='utf-8'
            )
            file_handler.setLevel(getattr(logging, config.level))
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)
            
            logger.info(f"Logging to file: {config.file}")
            
        except OSError as e:
            logger.warning(f"Could not setup file logging: {e}")
    
    if config.transcript_dir:
        try:
            transcript = start_transcript(config.transcript_dir, formatter, run_name)
            logger.addHandler(transcript)
            logger.info(f"Transcript started: {transcript.baseFilename}")
        except OSError as e:
            logger.warning(f"Could not start transcript: {e}")
    
    # Suppress some noisy loggers
    logging.getLogger("ldap3").setLevel(logging.WARNING)
    
    logger.info(f"Logging initialized at level: {config.level}")
    return logger


def start_transcript(transcript_dir: str, formatter: logging.Formatter,
                     run_name: Optional[str] = None) -> logging.FileHandler:
    """
    Create a file handler capturing every log line of the current run.
    
    The file is named ``<run_name>_<YYYYMMDD_HHMMSS>.log`` (``Transcript`` when
    no run name is given) inside ``transcript_dir``, which is created if missing.
    """
    directory = Path(transcript_dir)
    directory.mkdir(parents=True, exist_ok=True)
    
    stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    path = directory / f"{run_name or 'Transcript'}_{stamp}.log"
    
    handler = logging.FileHandler(path, encoding='utf-8')
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(formatter)
    return handler


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance.
    
    Args:
        name: Logger name
        
    Returns:
        Logger instance
    """
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


def log_ldap_operation(operation: str, dn: str, success: bool, details: Optional[str] = None) -> None:
    """
    Log LDAP operation for audit purposes.
    
    Args:
        operation: Operation type (search, modify, disable, etc.)
        dn: Distinguished name involved
        success: Whether operation was successful
        details: Additional details
    """
    logger = get_logger("audit")
    
    status = "SUCCESS" if success else "FAILED"
    message = f"LDAP {operation.upper()} {status}: {dn}"
    
    if details:
        message += f" - {details}"
    
    if success:
        logger.info(message)
    else:
        logger.warning(message)
