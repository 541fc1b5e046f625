"""Certificate Manager: upload/delete lifecycle of the `cert` and `key` slots.

A successful upload or delete re-fetches slot status and then the config
sequence, because the backend rewrites ROCKET_TLS once both files exist.
"""

from __future__ import annotations

import asyncio
import base64
import inspect
import logging
from pathlib import Path
from typing import Awaitable, Callable, Optional, Union

from vaultwarden_panel.activity_log import ActivityLog
from vaultwarden_panel.client import PanelClient
from vaultwarden_panel.config_sync import ConfigSynchronizer
from vaultwarden_panel.errors import PanelError, UploadValidationError
from vaultwarden_panel.flight import InFlight
from vaultwarden_panel.models import SLOTS, SSLStatus, Slot
from vaultwarden_panel.status import Notifier, StatusBanner, silent_notifier

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS: tuple[str, ...] = (".pem", ".crt", ".cer", ".der", ".key", ".p12", ".pfx")

Confirm = Callable[[str], Union[bool, Awaitable[bool]]]


def validate_upload_name(filename: str) -> None:
    """Raise UploadValidationError unless the name has an allowed extension."""
    if not filename.lower().endswith(ALLOWED_EXTENSIONS):
        raise UploadValidationError(f"Invalid file extension. Allowed: {', '.join(ALLOWED_EXTENSIONS)}")


def build_upload_payload(filename: str, data: bytes) -> dict:
    return {
        "filename": filename,
        "fileData": base64.b64encode(data).decode("ascii"),
        "size": len(data),
    }


def _check_slot(slot: str) -> None:
    if slot not in SLOTS:
        raise ValueError(f"Unknown slot: {slot!r}. Expected one of {SLOTS}")


async def deny_all(question: str) -> bool:
    return False


class CertificateManager:
    def __init__(
        self,
        client: PanelClient,
        config: ConfigSynchronizer,
        banner: Optional[StatusBanner] = None,
        notify: Notifier = silent_notifier,
        confirm: Confirm = deny_all,
        activity: Optional[ActivityLog] = None,
    ):
        self.client = client
        self.config = config
        self.banner = banner or config.banner
        self.notify = notify
        self.confirm = confirm
        self.activity = activity or ActivityLog()
        self.status = SSLStatus()
        self.uploading: dict[Slot, InFlight] = {s: InFlight(f"upload:{s}") for s in SLOTS}
        self.deleting: dict[Slot, InFlight] = {s: InFlight(f"delete:{s}") for s in SLOTS}

    async def refresh_status(self) -> bool:
        """Replace slot status wholesale. Failures keep the previous status."""
        try:
            data = await self.client.fetch_ssl_status()
        except PanelError as exc:
            logger.error("Error fetching SSL status: %s", exc)
            self.activity.log("refresh_status", ok=False, detail=str(exc))
            self.activity.flush()
            return False
        self.status = SSLStatus.from_wire(data)
        return True

    async def _after_change(self) -> None:
        await self.refresh_status()
        await self.config.load()

    async def upload_slot(self, slot: Slot, path: Optional[Path]) -> bool:
        _check_slot(slot)
        if path is None:
            self.banner.show("Please select a file to upload", "error")
            return False
        try:
            validate_upload_name(path.name)
        except UploadValidationError as exc:
            self.banner.show(str(exc), "error")
            return False

        flight = self.uploading[slot]
        if not flight.begin():
            logger.debug("upload ignored: %s upload already in flight", slot)
            return False
        try:
            data = await asyncio.to_thread(path.read_bytes)
            response = await self.client.upload_ssl(slot, build_upload_payload(path.name, data))
        except (PanelError, OSError) as exc:
            flight.finish(False)
            logger.error("Error uploading %s file: %s", slot, exc)
            self.banner.show(f"Error uploading {slot} file: {exc}", "error")
            self.notify("Upload Failed", "error")
            self.activity.log("upload", ok=False, slot=slot, detail=str(exc))
            self.activity.flush()
            return False
        flight.finish(True)
        logger.info("Uploaded %s file %s (%d bytes)", slot, path.name, len(data))

        await self._after_change()
        self.banner.show(response.get("message") or f"{slot} file uploaded successfully", "success", auto_dismiss=True)
        self.notify("Upload Successful", "success")
        self.activity.log("upload", slot=slot, detail=path.suffix.lower())
        self.activity.flush()
        return True

    async def _confirmed(self, slot: Slot) -> bool:
        answer = self.confirm(f"Are you sure you want to delete the {slot} file?")
        if inspect.isawaitable(answer):
            answer = await answer
        return bool(answer)

    async def delete_slot(self, slot: Slot) -> bool:
        _check_slot(slot)
        if not await self._confirmed(slot):
            return False

        flight = self.deleting[slot]
        if not flight.begin():
            logger.debug("delete ignored: %s delete already in flight", slot)
            return False
        try:
            response = await self.client.delete_ssl(slot)
        except PanelError as exc:
            flight.finish(False)
            logger.error("Error deleting %s file: %s", slot, exc)
            self.banner.show(f"Error deleting {slot} file: {exc}", "error")
            self.notify("Delete Failed", "error")
            self.activity.log("delete", ok=False, slot=slot, detail=str(exc))
            self.activity.flush()
            return False
        flight.finish(True)
        logger.info("Deleted %s file", slot)

        await self._after_change()
        self.banner.show(response.get("message") or f"{slot} file deleted successfully", "success", auto_dismiss=True)
        self.notify("Delete Successful", "success")
        self.activity.log("delete", slot=slot)
        self.activity.flush()
        return True
