"""
Centralized logging configuration.

Import triggers suppression of chatty third-party loggers (aiosqlite logs
every statement at DEBUG). Call configure_logging() once from entry points
(manage.py) to set format and level.
"""
import logging

from config import LoggingConfig

_SUPPRESSED_LOGGERS = [
    'aiosqlite',
]

for _logger_name in _SUPPRESSED_LOGGERS:
    logging.getLogger(_logger_name).setLevel(logging.WARNING)


def configure_logging(config: LoggingConfig = None):
    """Configure root logging from LoggingConfig"""
    config = config or LoggingConfig()
    level = getattr(logging, config.level.upper(), logging.INFO)
    logging.basicConfig(level=level, format=config.format)
    logging.getLogger().setLevel(level)
