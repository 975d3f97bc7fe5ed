"""Logging setup for the league manager and its admin CLI."""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

FILE_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s'
CONSOLE_FORMAT = '%(levelname)s: %(message)s'

# requests logs every connection through urllib3 at DEBUG
NOISY_LOGGERS = ('urllib3',)


def setup_logging(
    log_dir: Optional[Path] = None,
    level: int = logging.INFO,
    log_to_file: bool = True,
    log_to_console: bool = True,
    league_id: Optional[str] = None,
) -> logging.Logger:
    """
    Configure the 'fantasy_cricket' logger.

    Every module logs through a child logger ('fantasy_cricket.draft',
    'fantasy_cricket.sync', ...), so handlers are attached once here.
    Calling this again replaces the handlers instead of duplicating them.

    Args:
        log_dir: Directory for log files (default: ./logs)
        level: Logging level (default: INFO)
        log_to_file: Write a timestamped log file per run
        log_to_console: Echo to stdout
        league_id: Included in the log file name when given, so each
            league's draft night ends up in its own file

    Returns:
        The package logger

    Example:
        from fantasy_cricket.logging_config import setup_logging
        logger = setup_logging(league_id='ipl-main')
        logger.info("Draft night")
    """
    logger = logging.getLogger('fantasy_cricket')
    logger.setLevel(level)
    logger.handlers = []

    if log_to_file:
        log_dir = Path(log_dir) if log_dir is not None else Path('logs')
        log_dir.mkdir(parents=True, exist_ok=True)

        prefix = f'league_{league_id}' if league_id else 'league'
        log_file = log_dir / f'{prefix}_{datetime.now().strftime("%Y%m%d_%H%M%S")}.log'
        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt='%Y-%m-%d %H:%M:%S'))
        logger.addHandler(file_handler)

    if log_to_console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(level)
        console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
        logger.addHandler(console_handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    return logger
