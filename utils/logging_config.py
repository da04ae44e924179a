"""
Logging setup for the storefront.

Everything goes to the console and to a file rotated at midnight. Customer
contact details and credentials are masked before a record reaches either.
"""

import logging
import logging.handlers
import re
from pathlib import Path
from typing import Pattern

import config

LOG_FORMAT = '%(asctime)s | %(name)-25s | %(levelname)-8s | %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'
LOG_FILE_NAME = "storefront.log"


def _key_value(key: str, value: str = r'[^\s"\']+') -> Pattern:
    """key=value / key: value / "key": "value", key matched case-insensitively."""
    return re.compile(rf'({key}["\']?\s*[:=]\s*["\']?)({value})(["\']?)', re.IGNORECASE)


class SecretMaskingFilter(logging.Filter):
    """
    Replaces tokens, passwords, emails, phone numbers and delivery addresses
    with [REDACTED_*] markers. Never drops a record.
    """

    PATTERNS: list[tuple[Pattern, str]] = [
        (_key_value('token', r'[A-Za-z0-9_\-:]{20,}'), r'\1[REDACTED_TOKEN]\3'),
        (re.compile(r'(Bearer\s+)([A-Za-z0-9_\-\.]+)', re.IGNORECASE), r'\1[REDACTED_BEARER_TOKEN]'),
        (_key_value('password'), r'\1[REDACTED_PASSWORD]\3'),
        # user:password@host in connection URLs
        (re.compile(r'(://[^:/\s]+:)([^@\s]+)(@)'), r'\1[REDACTED_PASSWORD]\3'),
        (re.compile(r'\b([a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,})\b'), '[REDACTED_EMAIL]'),
        (_key_value('phone', r'[^"\',;]+'), r'\1[REDACTED_PHONE]\3'),
        # Free-standing numbers; digits glued to a word or a dash (order numbers, ids) are kept
        (re.compile(r'(?<![\w-])(\+?\d{1,3}[-.\s]?)?\(?\d{3}\)?[-.\s]?\d{3}[-.\s]?\d{4}\b'), '[REDACTED_PHONE]'),
        (_key_value('address', r'[^"\']{10,}'), r'\1[REDACTED_ADDRESS]\3'),
    ]

    @classmethod
    def mask(cls, text: str) -> str:
        for pattern, replacement in cls.PATTERNS:
            text = pattern.sub(replacement, text)
        return text

    def filter(self, record: logging.LogRecord) -> bool:
        if record.msg:
            record.msg = self.mask(str(record.msg))
        if record.args:
            record.args = tuple(self.mask(arg) if isinstance(arg, str) else arg for arg in record.args)
        return True


def _attach(handler: logging.Handler, level: int, mask_secrets: bool) -> logging.Handler:
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT))
    handler.setLevel(level)
    if mask_secrets:
        handler.addFilter(SecretMaskingFilter())
    return handler


def setup_logging(log_dir: str | Path | None = None):
    """
    Configure the root logger. Call once at startup (bootstrap.init_storefront does).

    Reads config.LOG_LEVEL, config.LOG_RETENTION_DAYS (rotated files kept),
    config.LOG_MASK_SECRETS and config.LOG_DIR (overridden by log_dir).
    Replaces any handlers already installed on the root logger.
    """
    log_path = Path(log_dir or config.LOG_DIR)
    log_path.mkdir(parents=True, exist_ok=True)

    level_name = getattr(config, "LOG_LEVEL", "INFO")
    level = getattr(logging, level_name.upper(), logging.INFO)
    retention_days = getattr(config, "LOG_RETENTION_DAYS", 7)
    mask_secrets = getattr(config, "LOG_MASK_SECRETS", True)

    handlers = [
        _attach(logging.handlers.TimedRotatingFileHandler(
            filename=log_path / LOG_FILE_NAME,
            when="midnight",
            interval=1,
            backupCount=retention_days,
            encoding="utf-8"
        ), level, mask_secrets),
        _attach(logging.StreamHandler(), level, mask_secrets),
    ]

    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    for handler in handlers:
        root_logger.addHandler(handler)
    root_logger.setLevel(level)

    # SQL statements are only wanted with DB_ECHO
    if not getattr(config, "DB_ECHO", False):
        for name in ("sqlalchemy.engine", "sqlalchemy.pool", "aiosqlite"):
            logging.getLogger(name).setLevel(logging.WARNING)

    logging.info(f"Logging initialized: level={level_name}, file={log_path / LOG_FILE_NAME}, "
                 f"retention={retention_days} days, masking={'on' if mask_secrets else 'off'}")
