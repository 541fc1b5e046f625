"""Panel: wires the client, banner, activity log and both managers together."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import httpx

from vaultwarden_panel.activity_log import ActivityLog
from vaultwarden_panel.certificates import CertificateManager, Confirm, deny_all
from vaultwarden_panel.client import PanelClient
from vaultwarden_panel.config_sync import ConfigSynchronizer
from vaultwarden_panel.security import suppress_credential_logging
from vaultwarden_panel.settings import Settings
from vaultwarden_panel.status import Notifier, StatusBanner, silent_notifier


class Panel:
    """The settings panel's state, independent of how it is rendered."""

    def __init__(
        self,
        settings: Settings,
        notify: Notifier = silent_notifier,
        confirm: Confirm = deny_all,
        activity_log: Optional[Path] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        banner: Optional[StatusBanner] = None,
    ):
        suppress_credential_logging()
        self.settings = settings
        self.client = PanelClient(settings, transport=transport)
        self.banner = banner or StatusBanner()
        self.activity = ActivityLog(activity_log)
        self.config = ConfigSynchronizer(self.client, self.banner, notify, self.activity)
        self.certs = CertificateManager(
            self.client, self.config, self.banner, notify, confirm, self.activity
        )

    async def mount(self) -> bool:
        """Initial load: config sequence and slot status."""
        return await self.refresh()

    async def refresh(self) -> bool:
        loaded = await self.config.load()
        await self.certs.refresh_status()
        return loaded

    async def aclose(self) -> None:
        await self.client.aclose()

    async def __aenter__(self) -> "Panel":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()
