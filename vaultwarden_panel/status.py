"""Status banner with timed auto-dismiss, and the toast notifier type."""

from __future__ import annotations

import asyncio
from typing import Callable, Literal

StatusKind = Literal["success", "error", "info"]

STATUS_DISMISS_SECONDS = 3.0

Notifier = Callable[[str, StatusKind], None]


def silent_notifier(title: str, kind: StatusKind) -> None:
    return None


class StatusBanner:
    """The panel's single status line.

    A pending auto-dismiss is never cancelled or restarted: if a newer
    message arrives mid-countdown, the older timer still hides it.
    """

    def __init__(self, dismiss_after: float = STATUS_DISMISS_SECONDS):
        self.dismiss_after = dismiss_after
        self.message = ""
        self.kind: StatusKind = "success"
        self.visible = False
        self._listeners: list[Callable[["StatusBanner"], None]] = []

    def subscribe(self, listener: Callable[["StatusBanner"], None]) -> None:
        self._listeners.append(listener)

    def _changed(self) -> None:
        for listener in list(self._listeners):
            listener(self)

    def show(self, message: str, kind: StatusKind = "success", auto_dismiss: bool = False) -> None:
        self.message = message
        self.kind = kind
        self.visible = True
        self._changed()
        if auto_dismiss:
            asyncio.get_running_loop().call_later(self.dismiss_after, self.hide)

    def hide(self) -> None:
        self.visible = False
        self._changed()

    def clear(self) -> None:
        self.message = ""
        self.kind = "success"
        self.visible = False
        self._changed()
