"""Security utilities: value masking, token redaction, logging suppression.

The panel edits a file full of secrets (ADMIN_TOKEN, SMTP_PASSWORD, ...), so
anything printed to a terminal or log goes through here first.
"""

from __future__ import annotations

import logging
import os
import stat
from pathlib import Path

SECRET_MARKERS: tuple[str, ...] = ("SECRET", "TOKEN", "PASSWORD", "KEY", "AUTH")


def suppress_credential_logging() -> None:
    """Keep httpx/httpcore from logging request details at DEBUG level."""
    for name in ("httpx", "httpcore"):
        logging.getLogger(name).setLevel(logging.WARNING)


def is_secret_name(key: str) -> bool:
    upper = key.upper()
    return any(marker in upper for marker in SECRET_MARKERS)


def mask_value(key: str, value: str, reveal: bool = False) -> str:
    """Mask values of secret-looking variables unless `reveal` is set."""
    if reveal or not value or not is_secret_name(key):
        return value
    if len(value) <= 8:
        return "*" * len(value)
    return f"{value[:2]}...{value[-2:]}"


def redact_token(token: str) -> str:
    if not token:
        return "(unset)"
    if len(token) <= 8:
        return "*" * len(token)
    return f"{token[:4]}...{token[-4:]}"


def restrict_permissions(path: Path) -> None:
    """Make a file readable by its owner only."""
    os.chmod(path, stat.S_IRUSR | stat.S_IWUSR)
