"""
Secure Logging Module
=====================

Security-aware logging for the capture protection pipeline.

Features:
- Automatic redaction of key material and other secrets in log records
- Rotating log files with size limits
- One configuration point for the whole package logger tree
"""

from __future__ import annotations

import logging
import re
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import TYPE_CHECKING, Final, Optional, Pattern

if TYPE_CHECKING:
    from capturevault.core.config import LoggingConfig


PACKAGE_LOGGER_NAME: Final[str] = "capturevault"

_SENSITIVE_PATTERNS: Final[list[tuple[str, Pattern[str]]]] = [
    ("password", re.compile(r'(?i)(password|passwd|pwd)\s*[=:]\s*["\']?[^\s"\']+["\']?')),
    ("token", re.compile(r'(?i)(token|bearer)\s*[=:]\s*["\']?[^\s"\']+["\']?')),
    ("secret", re.compile(r'(?i)(secret|private[_-]?key|key[_-]?material)\s*[=:]\s*["\']?[^\s"\']+["\']?')),
    # Base64 runs long enough to be key material
    ("base64_secret", re.compile(r'[A-Za-z0-9+/]{40,}={0,2}')),
    # Hex runs as long as a 128-bit key or more
    ("hex_secret", re.compile(r'(?i)(?:0x)?[a-f0-9]{32,}')),
]

_REDACTED_TEXT: Final[str] = "[REDACTED]"

_CONSOLE_FORMAT: Final[str] = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_FILE_FORMAT: Final[str] = "%(asctime)s | %(levelname)-8s | %(name)s | %(funcName)s:%(lineno)d | %(message)s"


class SecureLogFilter(logging.Filter):
    """
    Log filter that redacts secret-looking material from log records.

    The record is always kept; only its message and string arguments
    are sanitized.
    """

    def __init__(self, name: str = "", additional_patterns: Optional[list[Pattern[str]]] = None) -> None:
        super().__init__(name)
        self._additional_patterns = additional_patterns or []

    def filter(self, record: logging.LogRecord) -> bool:
        if record.msg and isinstance(record.msg, str):
            record.msg = self._sanitize(record.msg)

        if record.args:
            if isinstance(record.args, dict):
                record.args = {k: self._sanitize(v) if isinstance(v, str) else v
                               for k, v in record.args.items()}
            elif isinstance(record.args, tuple):
                record.args = tuple(
                    self._sanitize(arg) if isinstance(arg, str) else arg
                    for arg in record.args
                )

        return True

    def _sanitize(self, text: str) -> str:
        result = text

        for name, pattern in _SENSITIVE_PATTERNS:
            result = pattern.sub(f"{name}={_REDACTED_TEXT}", result)

        for pattern in self._additional_patterns:
            result = pattern.sub(_REDACTED_TEXT, result)

        return result


class SecureRotatingFileHandler(RotatingFileHandler):
    """Rotating file handler that refuses traversal paths and creates its directory."""

    def __init__(
        self,
        filename: str | Path,
        mode: str = "a",
        maxBytes: int = 10 * 1024 * 1024,
        backupCount: int = 5,
        encoding: str = "utf-8",
    ) -> None:
        if ".." in Path(filename).parts:
            raise ValueError("Log path cannot contain path traversal sequences")

        log_path = Path(filename).resolve()
        log_path.parent.mkdir(parents=True, exist_ok=True)

        super().__init__(
            str(log_path),
            mode=mode,
            maxBytes=maxBytes,
            backupCount=backupCount,
            encoding=encoding,
        )


def get_secure_logger(name: str) -> logging.Logger:
    """
    Get a logger with secret redaction attached.

    Module loggers propagate to the package logger, which receives its
    handlers from configure_logging().

    Args:
        name: Logger name (typically __name__)

    Returns:
        Logger with a SecureLogFilter installed
    """
    logger = logging.getLogger(name)

    if not any(isinstance(f, SecureLogFilter) for f in logger.filters):
        logger.addFilter(SecureLogFilter())

    return logger


def configure_logging(
    config: LoggingConfig,
    log_dir: Optional[Path] = None,
) -> logging.Logger:
    """
    Apply a LoggingConfig to the package logger.

    Replaces any handlers installed by an earlier call, so it is safe
    to call again after the configuration changes.

    Args:
        config: Logging configuration
        log_dir: Directory for the rotating log file (file logging is
            skipped when not given)

    Returns:
        The configured package logger
    """
    logger = get_secure_logger(PACKAGE_LOGGER_NAME)
    logger.setLevel(getattr(logging, config.level.upper()))

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    secure_filter = SecureLogFilter()

    if config.enable_console:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(logging.DEBUG)
        console_handler.setFormatter(logging.Formatter(_CONSOLE_FORMAT, datefmt="%H:%M:%S"))
        console_handler.addFilter(secure_filter)
        logger.addHandler(console_handler)

    if config.enable_file and log_dir is not None:
        file_handler = SecureRotatingFileHandler(
            filename=log_dir / f"{PACKAGE_LOGGER_NAME}.log",
            maxBytes=config.max_file_size_bytes,
            backupCount=config.backup_count,
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(_FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        file_handler.addFilter(secure_filter)
        logger.addHandler(file_handler)

    return logger
