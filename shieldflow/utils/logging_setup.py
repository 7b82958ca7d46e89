"""
Logging Setup module
"""

import logging
import sys
from pathlib import Path
from typing import Optional, Union

DEFAULT_LOG_DIR = Path.home() / '.config' / 'shieldflow' / 'logs'


def get_logger(name: str, level: int = logging.INFO) -> logging.Logger:
    """Get a logger that also writes to stderr"""
    logger = logging.getLogger(name)

    if not logger.handlers:
        # stdout belongs to rich output and the TUI
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(level)

        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )
        console_handler.setFormatter(formatter)

        logger.addHandler(console_handler)
        logger.setLevel(level)

    return logger


def setup_file_logging(
    name: Optional[str] = None,
    log_file: Optional[Path] = None,
    level: Union[int, str] = logging.INFO
) -> logging.Logger:
    """Attach a file handler to the named logger (root by default)"""
    logger = logging.getLogger(name)

    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)

    if log_file is None:
        DEFAULT_LOG_DIR.mkdir(parents=True, exist_ok=True)
        log_file = DEFAULT_LOG_DIR / 'shieldflow.log'
    else:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)

    file_handler = logging.FileHandler(log_file, encoding='utf-8')
    file_handler.setLevel(level)

    formatter = logging.Formatter(
        (
            '%(asctime)s - %(name)s - %(levelname)s - '
            '%(funcName)s:%(lineno)d - %(message)s'
        )
    )
    file_handler.setFormatter(formatter)

    logger.addHandler(file_handler)
    logger.setLevel(level)

    return logger


def set_logging_level(level: str = "INFO"):
    """Set logging level for all loggers"""
    log_level = getattr(logging, level.upper(), logging.INFO)
    logging.getLogger().setLevel(log_level)
