"""
Shared logging setup for flatcsv.

Coloured console logging, plus a DEBUG file log when a directory is given.
"""
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional


class ColourFormatter(logging.Formatter):
    """Formatter that colours the level name for terminals."""

    COLOURS = {
        'DEBUG': '\033[36m',    # Cyan
        'INFO': '\033[32m',     # Green
        'WARNING': '\033[33m',  # Yellow
        'ERROR': '\033[31m',    # Red
        'CRITICAL': '\033[35m', # Magenta
        'RESET': '\033[0m',
    }

    def format(self, record):
        record = logging.makeLogRecord(record.__dict__)
        levelname = record.levelname
        if levelname in self.COLOURS:
            record.levelname = f"{self.COLOURS[levelname]}{levelname:<8}{self.COLOURS['RESET']}"
        return super().format(record)


def setup_logging(log_level: str = 'INFO', log_dir: Optional[str] = None, component: str = 'flatcsv'):
    """
    Configure the ``flatcsv`` logger.

    Args:
        log_level: Console level (DEBUG, INFO, WARNING, ERROR)
        log_dir: Directory for a DEBUG log file; None logs to the console only
        component: Component name used in the log filename

    Returns:
        The configured logger
    """
    level = getattr(logging, log_level.upper(), logging.INFO)

    logger = logging.getLogger('flatcsv')
    logger.setLevel(logging.DEBUG if log_dir else level)
    logger.handlers = []

    # stderr so CSV written to stdout stays clean
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(ColourFormatter(
        '[%(asctime)s] %(levelname)s | %(name)-16s | %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    ))
    logger.addHandler(console_handler)

    if log_dir is not None:
        log_path = Path(log_dir)
        log_path.mkdir(parents=True, exist_ok=True)

        timestamp = datetime.now().strftime('%Y%m%d_%H%M%S')
        log_file = log_path / f'{component}_{timestamp}.log'

        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(
            '[%(asctime)s] %(levelname)-8s | %(name)-16s | %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        ))
        logger.addHandler(file_handler)
        logger.info(f"Logging initialised (level: {log_level}, file: {log_file})")
    else:
        logger.debug(f"Logging initialised (level: {log_level})")

    return logger
