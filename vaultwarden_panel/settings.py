"""Panel settings: API base URL, bearer token, route prefix, timeout.

Values come from an optional dotenv file, overlaid by the process environment.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from dotenv import dotenv_values

DEFAULT_PREFIX = "/plugins/vw"
DEFAULT_TIMEOUT = 30.0

ENV_API = "VW_PANEL_API"
ENV_TOKEN = "VW_PANEL_TOKEN"
ENV_PREFIX = "VW_PANEL_PREFIX"
ENV_TIMEOUT = "VW_PANEL_TIMEOUT"


@dataclass(frozen=True)
class Settings:
    api_url: str = ""
    token: str = ""
    prefix: str = DEFAULT_PREFIX
    timeout: float = DEFAULT_TIMEOUT

    @property
    def has_api_url(self) -> bool:
        return bool(self.api_url)

    @property
    def has_auth(self) -> bool:
        return bool(self.auth_headers())

    def auth_headers(self) -> dict[str, str]:
        if not self.token:
            return {}
        return {"Authorization": f"Bearer {self.token}"}


def _timeout(raw: Optional[str]) -> float:
    if not raw:
        return DEFAULT_TIMEOUT
    try:
        value = float(raw)
    except ValueError:
        raise ValueError(f"{ENV_TIMEOUT} must be a number, got {raw!r}") from None
    if value <= 0:
        raise ValueError(f"{ENV_TIMEOUT} must be positive, got {raw!r}")
    return value


def load_settings(env_file: Optional[Path] = None, environ: Optional[Mapping[str, str]] = None) -> Settings:
    """Read settings from `env_file` (if given) and the environment.

    The environment wins over the file so a one-off override does not need
    an edit.
    """
    values: dict[str, Optional[str]] = {}
    if env_file is not None:
        if not env_file.is_file():
            raise FileNotFoundError(f"Settings file not found: {env_file}")
        values.update(dotenv_values(env_file))
    env = os.environ if environ is None else environ
    for name in (ENV_API, ENV_TOKEN, ENV_PREFIX, ENV_TIMEOUT):
        if env.get(name):
            values[name] = env[name]

    prefix = (values.get(ENV_PREFIX) or DEFAULT_PREFIX).strip()
    return Settings(
        api_url=(values.get(ENV_API) or "").strip().rstrip("/"),
        token=(values.get(ENV_TOKEN) or "").strip(),
        prefix="/" + prefix.strip("/") if prefix.strip("/") else "",
        timeout=_timeout(values.get(ENV_TIMEOUT)),
    )
