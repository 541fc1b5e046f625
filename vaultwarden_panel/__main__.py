"""CLI entry point: python -m vaultwarden_panel.

Usage:
    python -m vaultwarden_panel --show
    python -m vaultwarden_panel --set SIGNUPS_ALLOWED=false --disable SMTP_HOST
    python -m vaultwarden_panel --upload-cert fullchain.pem --upload-key privkey.pem
    python -m vaultwarden_panel --delete-key --yes
    python -m vaultwarden_panel --tui
    python -m vaultwarden_panel --self-test
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Optional

import httpx
from rich.console import Console
from rich.logging import RichHandler
from rich.prompt import Confirm

from vaultwarden_panel.models import Slot
from vaultwarden_panel.output import render_banner, render_groups, render_ssl_status, to_json
from vaultwarden_panel.panel import Panel
from vaultwarden_panel.security import redact_token
from vaultwarden_panel.settings import Settings, load_settings

logger = logging.getLogger("vaultwarden_panel")


def _assignment(raw: str) -> tuple[str, str]:
    key, sep, value = raw.partition("=")
    if not sep or not key.strip():
        raise argparse.ArgumentTypeError(f"expected KEY=VALUE, got {raw!r}")
    return key.strip(), value


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="vaultwarden_panel",
        description="Edit a Vaultwarden plugin's .env configuration and manage its TLS files.",
    )
    p.add_argument("--env-file", type=Path, help="dotenv file with VW_PANEL_API / VW_PANEL_TOKEN")
    p.add_argument("--show", action="store_true", help="Print configuration entries grouped by section")
    p.add_argument("--json", action="store_true", help="Print configuration and SSL status as JSON")
    p.add_argument("--reveal", action="store_true", help="Show secret-looking values unmasked")
    p.add_argument("--set", action="append", dest="assignments", type=_assignment, default=[],
                   metavar="KEY=VALUE", help="Set a variable's value (repeatable)")
    p.add_argument("--enable", action="append", default=[], metavar="KEY", help="Enable a variable (repeatable)")
    p.add_argument("--disable", action="append", default=[], metavar="KEY", help="Disable a variable (repeatable)")
    p.add_argument("--ssl-status", action="store_true", help="Print certificate/key slot status")
    p.add_argument("--upload-cert", type=Path, metavar="PATH", help="Upload a certificate file")
    p.add_argument("--upload-key", type=Path, metavar="PATH", help="Upload a private key file")
    p.add_argument("--delete-cert", action="store_true", help="Delete the certificate file")
    p.add_argument("--delete-key", action="store_true", help="Delete the private key file")
    p.add_argument("--yes", "-y", action="store_true", help="Do not ask before deleting")
    p.add_argument("--activity-log", type=Path, metavar="PATH", help="Append a JSON-lines activity log here")
    p.add_argument("--tui", action="store_true", help="Open the interactive terminal panel")
    p.add_argument("--self-test", action="store_true", help="Run the offline self-test suite")
    p.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    p.add_argument("--version", action="store_true", help="Show version and exit")
    return p


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


def _apply_edits(panel: Panel, args: argparse.Namespace, console: Console) -> Optional[bool]:
    """Apply --set/--enable/--disable locally. None means nothing to save,
    False means an unknown key was named."""
    config = panel.config
    edited = False
    try:
        for key, value in args.assignments:
            config.set_value(config.index_of(key), value)
            edited = True
        for keys, wanted in ((args.enable, True), (args.disable, False)):
            for key in keys:
                index = config.index_of(key)
                if config.entries[index].enabled != wanted:
                    config.toggle_enabled(index)
                edited = True
    except KeyError as exc:
        console.print(f"[red]No variable named {exc.args[0]} in {config.file_path or 'the configuration'}[/red]")
        return False
    return True if edited else None


def _print_banner(panel: Panel, console: Console) -> None:
    if panel.banner.visible and panel.banner.message:
        render_banner(panel.banner.message, panel.banner.kind, console)


async def _run(
    args: argparse.Namespace,
    settings: Settings,
    console: Console,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> int:
    def confirm(question: str) -> bool:
        return args.yes or Confirm.ask(question, console=console, default=False)

    logger.debug("API %s%s, token %s", settings.api_url or "(unset)", settings.prefix, redact_token(settings.token))
    async with Panel(settings, confirm=confirm, activity_log=args.activity_log, transport=transport) as panel:
        if not await panel.mount():
            console.print(f"[red]{panel.config.error}[/red]")
            return 1

        edits = _apply_edits(panel, args, console)
        if edits is False:
            return 2
        failed = False
        if edits:
            failed |= not await panel.config.save()
            _print_banner(panel, console)

        uploads: tuple[tuple[Slot, Optional[Path]], ...] = (("cert", args.upload_cert), ("key", args.upload_key))
        for slot, path in uploads:
            if path is not None:
                failed |= not await panel.certs.upload_slot(slot, path)
                _print_banner(panel, console)

        deletes: tuple[tuple[Slot, bool], ...] = (("cert", args.delete_cert), ("key", args.delete_key))
        for slot, wanted in deletes:
            if wanted:
                if not panel.certs.status.slot(slot).exists:
                    console.print(f"[yellow]No {slot} file to delete.[/yellow]")
                    continue
                failed |= not await panel.certs.delete_slot(slot)
                _print_banner(panel, console)

        if args.json:
            print(to_json(panel.config.groups(), panel.config.file_path, panel.certs.status, args.reveal))
            return 1 if failed else 0

        acted = edits or any(p for _, p in uploads) or args.delete_cert or args.delete_key
        if args.show or not (acted or args.ssl_status):
            render_groups(panel.config.groups(), panel.config.file_path, console, reveal=args.reveal)
        if args.ssl_status or not (acted or args.show):
            render_ssl_status(panel.certs.status, console)

    return 1 if failed else 0


def main() -> int:
    args = _build_parser().parse_args()
    console = Console()

    if args.version:
        from vaultwarden_panel import __version__
        console.print(f"vaultwarden_panel {__version__}")
        return 0

    _configure_logging(args.verbose)

    if args.self_test:
        from vaultwarden_panel.self_test import run_self_test
        ok = asyncio.run(run_self_test(console))
        return 0 if ok else 1

    try:
        settings = load_settings(args.env_file)
    except (FileNotFoundError, ValueError) as exc:
        console.print(f"[red]{exc}[/red]")
        return 2

    if args.tui:
        from vaultwarden_panel.tui import PanelApp
        PanelApp(settings, activity_log=args.activity_log).run()
        return 0

    return asyncio.run(_run(args, settings, console))


if __name__ == "__main__":
    sys.exit(main())
