"""Error types and the diagnostic message composer."""

from __future__ import annotations

from typing import Optional

MISSING_API_SUFFIX = ". Missing VW_PANEL_API"
MISSING_TOKEN_SUFFIX = ". Missing VW_PANEL_TOKEN"


class PanelError(Exception):
    """Base class for errors recovered at an operation boundary."""


class ApiError(PanelError):
    """Transport failure or non-2xx response from the plugin API."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class UploadValidationError(PanelError, ValueError):
    """File rejected before any request was made."""


class EntryFormatError(PanelError, ValueError):
    """A configuration entry from the API has an impossible shape."""


def describe_failure(reason: str, fallback: str, has_api_url: bool, has_auth: bool) -> str:
    """Compose "Error: <reason>" plus configuration hints.

    The hints are checked in order (base URL, then credentials) and both may
    be appended.
    """
    message = f"Error: {reason or fallback}"
    if not has_api_url:
        message += MISSING_API_SUFFIX
    if not has_auth:
        message += MISSING_TOKEN_SUFFIX
    return message
