import logging
import os
import re
import sys
from typing import Optional

from common.constants import LOG_PAYLOAD_PREVIEW_CHARS


class ChunkPayloadFilter(logging.Filter):
    """Filter to keep base64 chunk bodies out of log records."""

    PATTERN = re.compile(
        r'((?:chunkBytesBase64|chunkBase64)["\']?\s*[:=]\s*["\']?)([A-Za-z0-9+/=]{%d,})' % (LOG_PAYLOAD_PREVIEW_CHARS + 1)
    )

    def filter(self, record: logging.LogRecord) -> bool:
        """Truncate chunk payloads in the log message and its arguments."""
        if isinstance(record.msg, str):
            record.msg = self._truncate(record.msg)

        if record.args:
            if isinstance(record.args, dict):
                record.args = {k: self._truncate_value(v) for k, v in record.args.items()}
            elif isinstance(record.args, tuple):
                record.args = tuple(self._truncate_value(arg) for arg in record.args)

        return True

    def _truncate(self, text: str) -> str:
        return self.PATTERN.sub(
            lambda m: f"{m.group(1)}{m.group(2)[:LOG_PAYLOAD_PREVIEW_CHARS]}...<{len(m.group(2))} chars>",
            text
        )

    def _truncate_value(self, value):
        if isinstance(value, str):
            return self._truncate(value)
        return value


def setup_logging(
    component_name: str,
    log_level: Optional[str] = None
) -> logging.Logger:
    """
    Set up logging configuration for a component.

    Args:
        component_name: Name of the component (e.g., 'server', 'store', 'cli')
        log_level: Log level (DEBUG, INFO, WARNING, ERROR). Defaults to LOG_LEVEL env var or INFO

    Returns:
        Configured logger instance
    """
    if log_level is None:
        log_level = os.getenv('LOG_LEVEL', 'INFO')

    level = getattr(logging, log_level.upper(), logging.INFO)

    logger = logging.getLogger(component_name)
    logger.setLevel(level)

    if logger.handlers:
        return logger

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    ))
    handler.addFilter(ChunkPayloadFilter())

    logger.addHandler(handler)
    logger.propagate = False

    return logger


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger with the given name.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Logger instance
    """
    return logging.getLogger(name)
