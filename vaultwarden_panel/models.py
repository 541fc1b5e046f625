"""Data models for the configuration sequence and TLS slot status.

- ConfigEntry is a closed tagged variant: Variable | Comment | Section
- frozen dataclasses; edits go through dataclasses.replace
- entry_to_wire() is the only serialization boundary, so presentation state
  never reaches the API payload
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal, Optional, Union

from vaultwarden_panel.errors import EntryFormatError

Slot = Literal["cert", "key"]

SLOTS: tuple[Slot, ...] = ("cert", "key")

WIRE_FIELDS: tuple[str, ...] = (
    "key",
    "value",
    "enabled",
    "isComment",
    "isSection",
    "originalLine",
    "description",
)


@dataclass(frozen=True)
class Variable:
    key: str
    value: str = ""
    enabled: bool = False
    description: str = ""
    original_line: str = ""


@dataclass(frozen=True)
class Comment:
    original_line: str


@dataclass(frozen=True)
class Section:
    original_line: str = ""
    description: str = ""

    @property
    def title(self) -> str:
        return section_title(self.description) or section_title(self.original_line) or "Section"


ConfigEntry = Union[Variable, Comment, Section]


def _text(raw: dict, name: str) -> str:
    value = raw.get(name)
    return "" if value is None else str(value)


def entry_from_wire(raw: object) -> ConfigEntry:
    """Build a tagged entry from the flat API shape.

    Raises EntryFormatError when the item is not an object or claims to be
    both a comment and a section.
    """
    if not isinstance(raw, dict):
        raise EntryFormatError(f"Expected an object, got {type(raw).__name__}")
    is_comment = bool(raw.get("isComment"))
    is_section = bool(raw.get("isSection"))
    if is_comment and is_section:
        raise EntryFormatError("Entry cannot be both a comment and a section")
    if is_section:
        return Section(original_line=_text(raw, "originalLine"), description=_text(raw, "description"))
    if is_comment:
        return Comment(original_line=_text(raw, "originalLine"))
    return Variable(
        key=_text(raw, "key"),
        value=_text(raw, "value"),
        enabled=bool(raw.get("enabled")),
        description=_text(raw, "description"),
        original_line=_text(raw, "originalLine"),
    )


def entry_to_wire(entry: ConfigEntry) -> dict:
    """Canonical seven-field wire object, in WIRE_FIELDS order."""
    if isinstance(entry, Variable):
        return {
            "key": entry.key,
            "value": entry.value,
            "enabled": entry.enabled,
            "isComment": False,
            "isSection": False,
            "originalLine": entry.original_line,
            "description": entry.description,
        }
    if isinstance(entry, Section):
        return {
            "key": "",
            "value": "",
            "enabled": False,
            "isComment": False,
            "isSection": True,
            "originalLine": entry.original_line,
            "description": entry.description,
        }
    return {
        "key": "",
        "value": "",
        "enabled": False,
        "isComment": True,
        "isSection": False,
        "originalLine": entry.original_line,
        "description": "",
    }


def is_renderable(entry: ConfigEntry) -> bool:
    """False for entries that carry nothing to show: blank comments, untitled
    sections and variables without a key."""
    if isinstance(entry, Comment):
        return bool(entry.original_line.strip())
    if isinstance(entry, Section):
        return bool(entry.description.strip() or entry.original_line.strip())
    return bool(entry.key.strip())


def parse_entries(raw: Optional[list]) -> list[ConfigEntry]:
    """Map the API's variable list into tagged entries, dropping empty ones."""
    entries = [entry_from_wire(item) for item in raw or []]
    return [e for e in entries if is_renderable(e)]


def section_title(text: str) -> str:
    """Strip the '##' header marker used by the env file."""
    if not text:
        return ""
    if text.startswith("##"):
        text = text[2:]
    return text.strip()


@dataclass(frozen=True)
class EntryGroup:
    """A display group: an optional section header and the entries below it.

    `start` is the flat index of the group's first item (the section when
    present), so entry i of the group sits at `start + offset + i`.
    """

    section: Optional[Section]
    entries: list[ConfigEntry] = field(default_factory=list, hash=False)
    start: int = 0

    @property
    def offset(self) -> int:
        return 1 if self.section is not None else 0

    def indexed(self) -> list[tuple[int, ConfigEntry]]:
        base = self.start + self.offset
        return [(base + i, e) for i, e in enumerate(self.entries)]


def group_entries(entries: list[ConfigEntry]) -> list[EntryGroup]:
    groups: list[EntryGroup] = []
    section: Optional[Section] = None
    body: list[ConfigEntry] = []
    start = 0

    for i, entry in enumerate(entries):
        if isinstance(entry, Section):
            if section is not None or body:
                groups.append(EntryGroup(section=section, entries=body, start=start))
            section, body, start = entry, [], i
        else:
            body.append(entry)

    if section is not None or body:
        groups.append(EntryGroup(section=section, entries=body, start=start))
    return groups


@dataclass(frozen=True)
class SlotStatus:
    exists: bool = False
    name: str = ""
    size: int = 0
    mod_time: str = ""

    @classmethod
    def from_wire(cls, raw: object) -> "SlotStatus":
        if not isinstance(raw, dict) or not raw.get("exists"):
            return cls()
        try:
            size = int(raw.get("size") or 0)
        except (TypeError, ValueError):
            size = 0
        return cls(
            exists=True,
            name=str(raw.get("name") or ""),
            size=size,
            mod_time=str(raw.get("modTime") or ""),
        )

    @property
    def size_kb(self) -> str:
        return f"{self.size / 1024:.1f} KB"

    def to_dict(self) -> dict:
        return {"exists": self.exists, "name": self.name, "size": self.size, "modTime": self.mod_time}


@dataclass(frozen=True)
class SSLStatus:
    cert: SlotStatus = field(default_factory=SlotStatus)
    key: SlotStatus = field(default_factory=SlotStatus)

    @classmethod
    def from_wire(cls, raw: object) -> "SSLStatus":
        data = raw if isinstance(raw, dict) else {}
        return cls(cert=SlotStatus.from_wire(data.get("cert")), key=SlotStatus.from_wire(data.get("key")))

    def slot(self, name: Slot) -> SlotStatus:
        return self.cert if name == "cert" else self.key

    @property
    def ready(self) -> bool:
        return self.cert.exists and self.key.exists

    @property
    def any_present(self) -> bool:
        return self.cert.exists or self.key.exists

    def to_dict(self) -> dict:
        return {"cert": self.cert.to_dict(), "key": self.key.to_dict()}
