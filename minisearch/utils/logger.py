"""
Logging setup for the crawler and index tools.
"""

import json
import logging
import logging.handlers
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from .config import LoggingConfig


class JSONFormatter(logging.Formatter):
    """JSON log formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_entry = {
            'timestamp': datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'module': record.module,
            'function': record.funcName,
            'line': record.lineno
        }

        if record.exc_info:
            log_entry['exception'] = self.formatException(record.exc_info)

        for key in ('url', 'event_type'):
            if hasattr(record, key):
                log_entry[key] = getattr(record, key)

        return json.dumps(log_entry, ensure_ascii=False)


class CrawlerLogAdapter(logging.LoggerAdapter):
    """Logger adapter that adds crawler-specific context."""

    def __init__(self, logger: logging.Logger, extra: Optional[Dict[str, Any]] = None):
        super().__init__(logger, extra or {})

    def process(self, msg: str, kwargs: Dict[str, Any]) -> Tuple[str, Dict[str, Any]]:
        extra = kwargs.setdefault('extra', {})
        for key, value in self.extra.items():
            extra.setdefault(key, value)
        return msg, kwargs

    def log_url_event(self, level: int, url: str, message: str, **kwargs):
        """Log URL-specific events."""
        extra = kwargs.get('extra', {})
        extra['url'] = url
        extra['event_type'] = 'url_event'
        kwargs['extra'] = extra
        self.log(level, message, **kwargs)


class NoiseFilter(logging.Filter):
    """Filter to suppress noisy third-party records."""

    def __init__(self, suppress_modules: Optional[List[str]] = None):
        super().__init__()
        self.suppress_modules = suppress_modules or [
            'aiohttp.access',
            'aiohttp.internal',
        ]

    def filter(self, record: logging.LogRecord) -> bool:
        return not any(record.name.startswith(module) for module in self.suppress_modules)


def setup_logging(config: LoggingConfig) -> logging.Logger:
    """
    Setup logging for the crawler.

    Args:
        config: Logging configuration section

    Returns:
        Configured root logger
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, config.level.upper()))
    root_logger.handlers.clear()

    if config.json:
        formatter = JSONFormatter()
    else:
        formatter = logging.Formatter(config.format)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    console_handler.addFilter(NoiseFilter())
    root_logger.addHandler(console_handler)

    if config.file:
        log_file = Path(config.file)
        log_file.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=50 * 1024 * 1024,  # 50MB
            backupCount=5,
            encoding='utf-8'
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(formatter)
        file_handler.addFilter(NoiseFilter())
        root_logger.addHandler(file_handler)

    for logger_name in ('aiohttp', 'asyncio', 'urllib3'):
        logging.getLogger(logger_name).setLevel(logging.WARNING)

    root_logger.debug("Logging system initialized")
    return root_logger


def get_crawler_logger(name: str, **extra_context) -> CrawlerLogAdapter:
    """
    Get a crawler-specific logger with additional context.

    Args:
        name: Logger name
        **extra_context: Additional context fields to include in all log messages

    Returns:
        CrawlerLogAdapter instance
    """
    return CrawlerLogAdapter(logging.getLogger(name), extra_context)
