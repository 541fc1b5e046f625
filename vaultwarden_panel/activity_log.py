"""Structured file-based activity log.

One JSON line per panel operation (load, save, upload, delete, status
refresh). Configuration values are never written, only counts and slot
names.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from vaultwarden_panel.security import restrict_permissions


class ActivityLog:
    """Append-only JSON-lines log with size rotation. A None path disables it."""

    MAX_SIZE = 10 * 1024 * 1024  # 10 MB

    def __init__(self, path: Optional[Path] = None):
        self.path = path
        self._entries: list[dict] = []

    @property
    def enabled(self) -> bool:
        return self.path is not None

    def log(
        self,
        event: str,
        ok: bool = True,
        slot: str = "",
        count: Optional[int] = None,
        detail: str = "",
    ) -> None:
        if not self.enabled:
            return
        entry: dict = {
            "ts": datetime.now(timezone.utc).isoformat(timespec="seconds"),
            "event": event,
            "ok": ok,
        }
        if slot:
            entry["slot"] = slot
        if count is not None:
            entry["count"] = count
        if detail:
            entry["detail"] = detail
        self._entries.append(entry)

    def flush(self) -> None:
        """Append buffered entries to the file, rotating if oversized."""
        if not self._entries or self.path is None:
            return
        # Refuse to write through symlinks
        if self.path.is_symlink():
            self._entries.clear()
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        if self.path.exists() and self.path.stat().st_size > self.MAX_SIZE:
            rotated = self.path.with_suffix(".log.1")
            if rotated.exists():
                rotated.unlink()
            self.path.rename(rotated)
        created = not self.path.exists()
        with self.path.open("a") as f:
            for entry in self._entries:
                f.write(json.dumps(entry, ensure_ascii=False) + "\n")
        if created:
            restrict_permissions(self.path)
        self._entries.clear()

    @property
    def entry_count(self) -> int:
        return len(self._entries)
