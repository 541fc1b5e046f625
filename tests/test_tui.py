"""Headless tests for the Textual panel."""

import asyncio

from textual.widgets import Collapsible, Input, Switch

from vaultwarden_panel.self_test import TEST_SETTINGS, MockTransport, default_routes
from vaultwarden_panel.tui import PanelApp


def run_app(scenario, transport=None):
    transport = transport or MockTransport(default_routes())

    async def _main():
        app = PanelApp(TEST_SETTINGS, transport=transport)
        async with app.run_test() as pilot:
            await app.workers.wait_for_complete()
            await pilot.pause()
            return await scenario(app, pilot)

    return asyncio.run(_main()), transport


class TestPanelApp:
    def test_renders_groups(self):
        async def scenario(app, pilot):
            section = app.query_one("#group-1", Collapsible)
            return (
                app.query_one("#switch-0", Switch).value,
                app.query_one("#value-2", Input).disabled,
                section.collapsed,
            )

        (foo_on, bar_disabled, collapsed), _ = run_app(scenario)
        assert foo_on is True
        assert bar_disabled is True
        assert collapsed is True

    def test_switch_updates_entry(self):
        async def scenario(app, pilot):
            app.query_one("#switch-0", Switch).value = False
            await pilot.pause()
            return app.panel.config.entries[0].enabled, app.query_one("#value-0", Input).disabled

        (enabled, disabled), _ = run_app(scenario)
        assert enabled is False
        assert disabled is True

    def test_save_binding(self):
        async def scenario(app, pilot):
            await pilot.press("s")
            await app.workers.wait_for_complete()
            await pilot.pause()
            return app.panel.banner.message

        message, transport = run_app(scenario)
        assert message == "Environment variables saved successfully"
        assert transport.count("PUT", "/api/env") == 1

    def test_section_line_shown_when_it_differs(self):
        routes = default_routes()
        routes["GET /api/env"] = (200, {"variables": [
            {"isSection": True, "originalLine": "## Network settings", "description": "Net"},
            {"key": "A", "value": "1"},
            {"isSection": True, "originalLine": "Mail", "description": "Mail"},
            {"key": "B", "value": "2"},
        ]})

        async def scenario(app, pilot):
            return (
                len(app.query("#group-0 .section-line")),
                len(app.query("#group-1 .section-line")),
            )

        (first, second), _ = run_app(scenario, MockTransport(routes))
        assert first == 1
        assert second == 0
