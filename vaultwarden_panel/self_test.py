"""Self-test suite: replays the panel's core guarantees against a mock transport.

All checks are deterministic: no network, no real backend.
"""

from __future__ import annotations

import asyncio
import json
import tempfile
from pathlib import Path
from typing import Callable, Optional, Union

import httpx
from rich.console import Console

from vaultwarden_panel.errors import MISSING_API_SUFFIX, MISSING_TOKEN_SUFFIX
from vaultwarden_panel.models import WIRE_FIELDS, Section, Variable
from vaultwarden_panel.panel import Panel
from vaultwarden_panel.settings import Settings

Route = Union[tuple[int, object], Callable[[httpx.Request], httpx.Response]]

TEST_SETTINGS = Settings(api_url="http://panel.test", token="test-token")

SAMPLE_ENV = {
    "filePath": "/configs/.env",
    "variables": [
        {"key": "FOO", "value": "1", "enabled": True},
        {"isSection": True, "description": "Net"},
        {"key": "BAR", "value": "", "enabled": False},
    ],
}

SAMPLE_STATUS = {
    "cert": {"exists": True, "name": "cert.p12", "size": 2048, "modTime": "2024-01-01 10:00:00"},
    "key": {"exists": False},
}


class MockTransport(httpx.AsyncBaseTransport):
    """Deterministic mock transport keyed by "METHOD /path-suffix".

    Every handled request is recorded. When `gate` is set, responses wait on
    it, which lets a test hold a request in flight.
    """

    def __init__(self, routes: dict[str, Route], gate: Optional[asyncio.Event] = None):
        self._routes = routes
        self.gate = gate
        self.requests: list[httpx.Request] = []

    def count(self, method: str, path: str) -> int:
        return sum(1 for r in self.requests if r.method == method and r.url.path.endswith(path))

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.gate is not None:
            await self.gate.wait()
        for pattern, route in self._routes.items():
            method, _, path = pattern.partition(" ")
            if request.method == method and request.url.path.endswith(path):
                if callable(route):
                    return route(request)
                code, body = route
                if isinstance(body, str):
                    return httpx.Response(status_code=code, text=body, request=request)
                return httpx.Response(status_code=code, json=body, request=request)
        return httpx.Response(status_code=404, text="404 page not found", request=request)


def default_routes() -> dict[str, Route]:
    return {
        "GET /api/env": (200, SAMPLE_ENV),
        "PUT /api/env": (200, {"message": "Environment variables saved successfully"}),
        "GET /api/ssl/status": (200, SAMPLE_STATUS),
        "PUT /api/ssl/upload": (200, {"message": "Cert file uploaded successfully"}),
        "DELETE /api/ssl/delete": (200, {"message": "Cert file deleted successfully"}),
    }


def _report(console: Console, label: str, ok: bool) -> bool:
    console.print(f"  {label}: {'[green]PASS[/green]' if ok else '[red]FAIL[/red]'}")
    return ok


async def _check_filtering(console: Console) -> bool:
    routes = default_routes()
    routes["GET /api/env"] = (200, {"variables": [
        {"key": "A", "value": None, "enabled": True},
        {"isComment": True, "originalLine": "   "},
        {"isSection": True, "description": "", "originalLine": ""},
        {"key": "  "},
        {"isComment": True, "originalLine": "# keep"},
        {"key": "B"},
    ]})
    transport = MockTransport(routes)
    async with Panel(TEST_SETTINGS, transport=transport) as panel:
        await panel.config.load()
        keys = [getattr(e, "key", None) for e in panel.config.entries]
        first = panel.config.entries[0]
    ok = keys == ["A", None, "B"] and isinstance(first, Variable) and first.value == ""
    return _report(console, "empty entries filtered, order kept", ok)


async def _check_grouping(console: Console) -> bool:
    transport = MockTransport(default_routes())
    async with Panel(TEST_SETTINGS, transport=transport) as panel:
        await panel.config.load()
        groups = panel.config.groups()
    ok = (
        len(groups) == 2
        and groups[0].section is None
        and [e.key for e in groups[0].entries] == ["FOO"]
        and isinstance(groups[1].section, Section)
        and groups[1].section.title == "Net"
        and [e.key for e in groups[1].entries] == ["BAR"]
    )
    return _report(console, "grouping by section", ok)


async def _check_save_payload(console: Console) -> bool:
    captured: list[dict] = []

    def _save(request: httpx.Request) -> httpx.Response:
        captured.append(json.loads(request.content))
        return httpx.Response(200, json={}, request=request)

    routes = default_routes()
    routes["PUT /api/env"] = _save
    async with Panel(TEST_SETTINGS, transport=MockTransport(routes)) as panel:
        await panel.config.load()
        await panel.config.save()
    ok = bool(captured) and all(tuple(item) == WIRE_FIELDS for item in captured[0]["variables"])
    return _report(console, "save payload carries only wire fields", ok)


async def _check_upload_rejection(console: Console) -> bool:
    transport = MockTransport(default_routes())
    async with Panel(TEST_SETTINGS, transport=transport) as panel:
        rejected = await panel.certs.upload_slot("cert", Path("notes.txt"))
    ok = rejected is False and not transport.requests
    return _report(console, "disallowed extension rejected offline", ok)


async def _check_single_save(console: Console) -> bool:
    gate = asyncio.Event()
    transport = MockTransport(default_routes(), gate=gate)
    async with Panel(TEST_SETTINGS, transport=transport) as panel:
        first = asyncio.ensure_future(panel.config.save())
        await asyncio.sleep(0)
        second = await panel.config.save()
        gate.set()
        await first
    ok = second is False and transport.count("PUT", "/api/env") == 1
    return _report(console, "no second save while one is in flight", ok)


async def _check_upload_refresh(console: Console) -> bool:
    transport = MockTransport(default_routes())
    with tempfile.TemporaryDirectory() as tmp:
        bundle = Path(tmp) / "bundle.p12"
        bundle.write_bytes(b"\x30\x82\x01\x00")
        async with Panel(TEST_SETTINGS, transport=transport) as panel:
            uploaded = await panel.certs.upload_slot("cert", bundle)
    ok = (
        uploaded
        and transport.count("GET", "/api/ssl/status") == 1
        and transport.count("GET", "/api/env") == 1
    )
    return _report(console, "upload triggers one status and one config refresh", ok)


async def _check_error_suffixes(console: Console) -> bool:
    async with Panel(Settings(), transport=MockTransport(default_routes())) as panel:
        await panel.config.load()
        error = panel.config.error or ""
    ok = MISSING_API_SUFFIX in error and MISSING_TOKEN_SUFFIX in error
    return _report(console, "missing URL and token both reported", ok)


async def run_self_test(console: Optional[Console] = None) -> bool:
    """Run all checks. Returns True if all pass."""
    console = console or Console()
    console.print("\n[bold]Running self-test suite...[/bold]\n")

    checks = [
        _check_filtering, _check_grouping, _check_save_payload, _check_upload_rejection,
        _check_single_save, _check_upload_refresh, _check_error_suffixes,
    ]
    results = []
    for check in checks:
        results.append(await check(console))

    passed = sum(results)
    console.print(f"\n[bold]Results: {passed}/{len(results)} passed[/bold]")
    return all(results)
