"""Shared fixtures: a mock plugin API and a panel factory."""

import asyncio

import pytest

from vaultwarden_panel.panel import Panel
from vaultwarden_panel.self_test import TEST_SETTINGS, MockTransport, default_routes


@pytest.fixture()
def routes():
    return default_routes()


@pytest.fixture()
def transport(routes):
    return MockTransport(routes)


@pytest.fixture()
def run_panel(transport):
    """Run `scenario(panel)` inside a fresh event loop and return its result."""

    def _run(scenario, settings=TEST_SETTINGS, **kwargs):
        async def _main():
            async with Panel(settings, transport=transport, **kwargs) as panel:
                return await scenario(panel)

        return asyncio.run(_main())

    return _run
