import logging
import os
from logging.handlers import RotatingFileHandler
from typing import Optional

from mpris_ticker.utils.constants import LOG_BACKUP_COUNT, LOG_FORMAT, LOG_MAX_BYTES

def setup_logging(level: str = 'WARNING', log_file: Optional[str] = None):
    """
    Configure logging for the ticker with console and optional file output.
    The console handler writes to stderr since stdout carries the status line.
    Log files rotate at 10MB, keeping 5 backup files.
    """
    # Configure root logger
    logger = logging.getLogger()
    logger.setLevel(getattr(logging, str(level).upper(), logging.WARNING))

    # Format for logs
    formatter = logging.Formatter(LOG_FORMAT)

    # File handler with rotation
    if log_file:
        log_dir = os.path.dirname(os.path.abspath(log_file))
        if not os.path.exists(log_dir):
            os.makedirs(log_dir)

        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=LOG_MAX_BYTES,
            backupCount=LOG_BACKUP_COUNT,
            encoding='utf-8'
        )
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    # Console handler (stderr)
    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)
