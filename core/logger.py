"""
==========================================
Logging setup for warehouse table operations.
==========================================

Every module logs through ``logging.getLogger(__name__)``; this module only
decides where those records go. The CLI calls setup_logging() once, and a
plain console handler is installed on import for library use.

Console records are prefixed with a level emoji and a colored level name.
File records stay plain text. SQLAlchemy's own engine logger is kept at
WARNING unless ``sql_echo`` is set, since the executor already logs the SQL
it sends at DEBUG.

Example:
    >>> from core.logger import setup_logging
    >>>
    >>> setup_logging(log_level='DEBUG', log_file='table_operations.log')
"""

import logging
import sys
from pathlib import Path
from typing import Optional

DEFAULT_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DEFAULT_DATEFMT = '%Y-%m-%d %H:%M:%S'
SQLALCHEMY_LOGGER = 'sqlalchemy.engine'


class ColoredFormatter(logging.Formatter):
    """Console formatter with ANSI-colored level names and an ``%(emoji)s`` field."""

    COLORS = {
        'DEBUG': '\033[36m',      # Cyan
        'INFO': '\033[32m',       # Green
        'WARNING': '\033[33m',    # Yellow
        'ERROR': '\033[31m',      # Red
        'CRITICAL': '\033[35m',   # Magenta
        'RESET': '\033[0m'
    }

    EMOJI = {
        'DEBUG': '🔍',
        'INFO': 'ℹ️ ',
        'WARNING': '⚠️ ',
        'ERROR': '❌',
        'CRITICAL': '🔥'
    }

    def format(self, record):
        levelname = record.levelname
        record.emoji = self.EMOJI.get(levelname, '')
        if levelname in self.COLORS:
            record.levelname = f"{self.COLORS[levelname]}{levelname}{self.COLORS['RESET']}"
        try:
            return super().format(record)
        finally:
            # Other handlers share the record
            record.levelname = levelname


def _resolve_level(level: str) -> int:
    return getattr(logging, level.upper())


def get_logger(name: str, level: Optional[str] = None) -> logging.Logger:
    """Module logger, optionally pinned to its own level."""
    logger = logging.getLogger(name)

    if level:
        logger.setLevel(_resolve_level(level))

    return logger


def setup_logging(
    log_level: str = 'INFO',
    log_file: Optional[str] = None,
    log_dir: Optional[str] = None,
    console_output: bool = True,
    use_colors: bool = True,
    sql_echo: bool = False
) -> None:
    """
    Route every engine logger through fresh root handlers.

    Calling it again replaces the handlers installed by the previous call.

    Args:
        log_level: Root level name (DEBUG/INFO/WARNING/ERROR/CRITICAL)
        log_file: File name for a UTF-8 file handler, none when omitted
        log_dir: Directory for log_file (``logs/`` when omitted)
        console_output: Attach a stdout handler
        use_colors: Colored level names and emoji on the stdout handler
        sql_echo: Let SQLAlchemy's engine logger emit its statement log
    """
    level = _resolve_level(log_level)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    if console_output:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(level)

        if use_colors:
            console_formatter = ColoredFormatter(
                '%(emoji)s ' + DEFAULT_FORMAT,
                datefmt=DEFAULT_DATEFMT
            )
        else:
            console_formatter = logging.Formatter(DEFAULT_FORMAT, datefmt=DEFAULT_DATEFMT)

        console_handler.setFormatter(console_formatter)
        root_logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_dir) if log_dir else Path('logs')
        log_path.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_path / log_file, encoding='utf-8')
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter(DEFAULT_FORMAT, datefmt=DEFAULT_DATEFMT))
        root_logger.addHandler(file_handler)

    logging.getLogger(SQLALCHEMY_LOGGER).setLevel(logging.INFO if sql_echo else logging.WARNING)


def _init_default_logging():
    if not logging.getLogger().handlers:
        setup_logging()


_init_default_logging()
