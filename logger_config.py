"""
Logging Configuration
====================

Centralized logging configuration for the exploratory reports.
All logs are saved to both console and log files.

- File logs keep a record of every report run and the data it saw
- Console output stays short so report narratives remain readable
"""

import logging
import os
from datetime import datetime

from config.settings import LOGS_DIR

# Create log filename with timestamp
LOG_FILENAME = f"exploratory_reports_{datetime.now().strftime('%Y%m%d_%H%M%S')}.log"
LOG_FILEPATH = os.path.join(LOGS_DIR, LOG_FILENAME)


def setup_logger(name: str = "exploratory_reports", level: int = logging.INFO) -> logging.Logger:
    """
    Set up a logger with both file and console handlers.

    Parameters:
    -----------
    name : str
        Logger name
    level : int
        Logging level (default: INFO)

    Returns:
    --------
    logging.Logger
        Configured logger instance
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)

    # Avoid duplicate handlers if logger already exists
    if logger.handlers:
        return logger

    os.makedirs(LOGS_DIR, exist_ok=True)

    detailed_formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )
    console_formatter = logging.Formatter(
        '%(levelname)s: %(message)s'
    )

    # File handler (detailed logs)
    file_handler = logging.FileHandler(LOG_FILEPATH, encoding='utf-8')
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(detailed_formatter)

    # Console handler (simpler output)
    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(console_formatter)

    logger.addHandler(file_handler)
    logger.addHandler(console_handler)

    logger.debug(f"Logging initialized. Log file: {LOG_FILEPATH}")

    return logger
