"""Logging setup for downrelease.

All module loggers are children of ``downrelease``. Console output goes
to stderr so that stdout carries only command results, and every
handler masks access tokens before a record is written.
"""

import logging
import re
import sys
from pathlib import Path
from typing import Optional


LOGGER_NAME = "downrelease"

CONSOLE_FORMAT = "%(levelname)s: %(message)s"
FILE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

REDACTED = "[REDACTED]"

# (pattern, replacement) pairs applied in order
TOKEN_PATTERNS = [
    # Authorization: Bearer <token> / token <token>
    (re.compile(r'((?:Bearer|token)\s+)[A-Za-z0-9_.\-]+', re.IGNORECASE), r'\1' + REDACTED),
    # token=... in query strings or key/value dumps
    (re.compile(r'(token["\s:=]+)[^\s,}\]&]+', re.IGNORECASE), r'\1' + REDACTED),
    (re.compile(r'\b(?:gh[pousr]_[A-Za-z0-9]{20,}|github_pat_[A-Za-z0-9_]{20,})'), REDACTED),
]


def redact(text: str) -> str:
    """Mask access tokens in text."""
    for pattern, replacement in TOKEN_PATTERNS:
        text = pattern.sub(replacement, text)
    return text


class TokenRedactingFormatter(logging.Formatter):
    """Formatter that masks access tokens, tracebacks included."""

    def format(self, record: logging.LogRecord) -> str:
        return redact(super().format(record))


def level_for_verbosity(verbosity: int) -> int:
    """Map a -v count to a level: 0 warnings, 1 info, 2+ debug."""
    if verbosity <= 0:
        return logging.WARNING
    if verbosity == 1:
        return logging.INFO
    return logging.DEBUG


def setup_logging(
    level: int = logging.WARNING,
    log_file: Optional[Path] = None,
    console: bool = True
) -> logging.Logger:
    """
    Configure the application logger.

    The log file, when given, always records DEBUG and above. Calling
    this again replaces earlier handlers.

    Args:
        level: Console level
        log_file: Optional log file (appended to)
        console: Whether to log to stderr

    Returns:
        The ``downrelease`` logger
    """
    logger = logging.getLogger(LOGGER_NAME)
    for handler in logger.handlers:
        handler.close()
    logger.handlers.clear()
    logger.setLevel(level)

    if console:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(level)
        console_handler.setFormatter(TokenRedactingFormatter(CONSOLE_FORMAT))
        logger.addHandler(console_handler)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(TokenRedactingFormatter(FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        logger.addHandler(file_handler)
        logger.setLevel(logging.DEBUG)

    # urllib3 connection chatter only when debugging
    logging.getLogger("urllib3").setLevel(logging.DEBUG if level <= logging.DEBUG else logging.WARNING)

    return logger


def get_logger(name: str = LOGGER_NAME) -> logging.Logger:
    """Get a logger instance (default is the app logger)."""
    return logging.getLogger(name)
