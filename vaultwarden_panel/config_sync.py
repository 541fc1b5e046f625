"""Config Synchronizer: the in-memory entry sequence and its full-replace save.

The server is authoritative: a load replaces everything, and a save response
that carries `variables` / `filePath` replaces the local copies wholesale.
There is no version token, so the last saved snapshot wins.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Optional

from vaultwarden_panel.activity_log import ActivityLog
from vaultwarden_panel.client import PanelClient
from vaultwarden_panel.errors import PanelError, describe_failure
from vaultwarden_panel.flight import InFlight
from vaultwarden_panel.models import (
    ConfigEntry,
    EntryGroup,
    Variable,
    entry_to_wire,
    group_entries,
    parse_entries,
)
from vaultwarden_panel.status import Notifier, StatusBanner, silent_notifier

logger = logging.getLogger(__name__)

LOAD_FALLBACK = "Failed to load environment variables"
SAVE_FALLBACK = "Failed to save environment variables"
SAVE_SUCCESS = "Environment variables saved successfully"


class ConfigSynchronizer:
    def __init__(
        self,
        client: PanelClient,
        banner: Optional[StatusBanner] = None,
        notify: Notifier = silent_notifier,
        activity: Optional[ActivityLog] = None,
    ):
        self.client = client
        self.banner = banner or StatusBanner()
        self.notify = notify
        self.activity = activity or ActivityLog()
        self.entries: list[ConfigEntry] = []
        self.file_path = ""
        self.loading = False
        self.error: Optional[str] = None
        self.saving = InFlight("save")

    def _failure(self, exc: Exception, fallback: str) -> str:
        return describe_failure(str(exc), fallback, self.client.has_api_url, self.client.has_auth)

    async def load(self) -> bool:
        """Fetch the entry sequence and file path. Returns True on success.

        On failure `error` is set and the previously loaded entries stay.
        """
        self.loading = True
        try:
            data = await self.client.fetch_env()
            entries = parse_entries(data.get("variables"))
        except PanelError as exc:
            logger.error("Error fetching environment variables: %s", exc)
            self.error = self._failure(exc, LOAD_FALLBACK)
            self.activity.log("load", ok=False, detail=str(exc))
            return False
        finally:
            self.loading = False
            self.activity.flush()

        self.entries = entries
        self.file_path = str(data.get("filePath") or "")
        self.error = None
        logger.info("Loaded %d entries from %s", len(entries), self.file_path or "(unknown file)")
        self.activity.log("load", count=len(entries))
        self.activity.flush()
        return True

    def _variable_at(self, index: int) -> Variable:
        if not 0 <= index < len(self.entries):
            raise IndexError(f"entry index {index} out of range")
        entry = self.entries[index]
        if not isinstance(entry, Variable):
            raise TypeError(f"entry {index} is a {type(entry).__name__.lower()}, not a variable")
        return entry

    def toggle_enabled(self, index: int) -> None:
        entry = self._variable_at(index)
        self.entries[index] = replace(entry, enabled=not entry.enabled)

    def set_value(self, index: int, text: str) -> None:
        entry = self._variable_at(index)
        self.entries[index] = replace(entry, value=text)

    def index_of(self, key: str) -> int:
        for i, entry in enumerate(self.entries):
            if isinstance(entry, Variable) and entry.key == key:
                return i
        raise KeyError(key)

    def groups(self) -> list[EntryGroup]:
        return group_entries(self.entries)

    def payload(self) -> list[dict]:
        return [entry_to_wire(e) for e in self.entries]

    async def save(self) -> bool:
        """Send the whole sequence as a replacement.

        Returns False without a request while another save is in flight.
        """
        if not self.saving.begin():
            logger.debug("save ignored: a save is already in flight")
            return False
        self.banner.clear()
        ok = False
        try:
            response = await self.client.save_env(self.payload())
            updated = response.get("variables")
            if updated is not None:
                self.entries = parse_entries(updated)
            if response.get("filePath"):
                self.file_path = str(response["filePath"])
            ok = True
        except PanelError as exc:
            logger.error("Error saving environment variables: %s", exc)
            self.banner.show(self._failure(exc, SAVE_FALLBACK), "error")
            self.notify("Save Failed", "error")
            self.activity.log("save", ok=False, detail=str(exc))
        finally:
            self.saving.finish(ok)

        if ok:
            logger.info("Saved %d entries", len(self.entries))
            self.banner.show(response.get("message") or SAVE_SUCCESS, "success", auto_dismiss=True)
            self.notify("Save Successful", "success")
            self.activity.log("save", count=len(self.entries))
        self.activity.flush()
        return ok
