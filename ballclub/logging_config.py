"""Centralized logging configuration for ballclub.

Defaults come from the club config (`log_level`, `log_to_file`, `log_dir`);
keyword arguments override them for one run.
"""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

from .config import get_config, project_path
from .schemas import ClubConfig

DETAILED_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(threadName)s - [%(filename)s:%(lineno)d] - %(message)s'
SIMPLE_FORMAT = '%(levelname)s: %(message)s'


def setup_logging(
    config: Optional[ClubConfig] = None,
    *,
    level: int | str | None = None,
    log_to_file: Optional[bool] = None,
    log_to_console: bool = True,
    log_dir: Optional[Path] = None,
) -> logging.Logger:
    """
    Configure the 'ballclub' logger from the club config.

    Args:
        config: Settings to read defaults from (default: get_config())
        level: Overrides config.log_level; an int or a name like 'DEBUG'
        log_to_file: Overrides config.log_to_file
        log_to_console: Whether to log to stdout
        log_dir: Overrides config.log_dir

    Returns:
        Configured logger instance

    Example:
        from ballclub.logging_config import setup_logging
        logger = setup_logging(level='DEBUG')
        logger.info("Voting opened")
    """
    if config is None:
        config = get_config()
    if level is None:
        level = config.log_level
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
    if log_to_file is None:
        log_to_file = config.log_to_file

    logger = logging.getLogger('ballclub')
    logger.setLevel(level)
    for handler in logger.handlers:
        handler.close()
    logger.handlers = []

    if log_to_file:
        log_dir = project_path(log_dir if log_dir is not None else config.log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)

        log_file = log_dir / f'ballclub_{datetime.now().strftime("%Y%m%d_%H%M%S")}.log'
        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter(DETAILED_FORMAT, datefmt='%Y-%m-%d %H:%M:%S'))
        logger.addHandler(file_handler)

    if log_to_console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(level)
        console_handler.setFormatter(logging.Formatter(SIMPLE_FORMAT))
        logger.addHandler(console_handler)

    if log_to_file:
        logger.debug(f'Logging to {log_file}')
    return logger


def get_logger(name: str = 'ballclub') -> logging.Logger:
    """Get a logger under the 'ballclub' namespace."""
    if name != 'ballclub' and not name.startswith('ballclub.'):
        name = f'ballclub.{name}'
    return logging.getLogger(name)
