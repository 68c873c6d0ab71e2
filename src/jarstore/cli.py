#!/usr/bin/env python3
"""
jarstore CLI

Command-line interface for browsing the marketplace and installing,
updating and launching apps.
"""

import argparse
import logging
import sys
from pathlib import Path

from .app_catalog import normalize_name
from .common.exceptions import StoreError
from .common.logging_config import setup_logging
from .config import StoreConfig
from .installer import OutcomeKind
from .reconciler import UpdateAvailable, reconcile
from .store_view import StoreService
from .updater.bootstrap import Bootstrapper

logger = logging.getLogger(__name__)


def get_service(args) -> StoreService:
    """Build the store service for the parsed arguments."""
    config = StoreConfig()
    if args.root:
        config = config.with_root(Path(args.root))
    return StoreService(config, strict_catalog=not args.lenient)


def _print_progress(percent, message):
    if message:
        print(f"  [{percent}%] {message}")


def cmd_status(args):
    """Show installed apps and marketplace entries."""
    service = get_service(args)
    view = service.refresh()

    print("Installed Apps:\n")
    if view.installed_error:
        print(f"  {view.installed_error}", file=sys.stderr)
    if not view.installed:
        print("  (none)")
    for row in view.installed:
        line = f"  {row.name} {row.record.version}"
        if row.update_available:
            line += f"  -> update available: {row.remote_version}"
        print(line)

    print("\nMarketplace:\n")
    if view.error:
        print(f"  {view.error}", file=sys.stderr)
        return 1
    for row in view.marketplace:
        print(f"  {row.app.name} {row.app.version} [{row.action}]")
    return 0


def cmd_catalog(args):
    """List the marketplace with full details."""
    service = get_service(args)
    catalog = service.fetch_catalog()

    if not catalog:
        print("Marketplace is empty.")
        return 0

    print(f"Found {len(catalog)} app(s):\n")
    for app in catalog:
        print(f"  {app.name}")
        print(f"    Version: {app.version}")
        print(f"    By: {app.author}")
        if app.description:
            print(f"    {app.description[:80]}")
        print()
    return 0


def cmd_list(args):
    """List installed apps."""
    service = get_service(args)
    installed = service.store.list_installed()

    if not installed:
        print("No apps installed.")
        return 0

    print(f"Installed apps ({len(installed)}):\n")
    for record in installed:
        print(f"  {record.sanitized_name}: {record.version} ({record.artifact_path})")
    return 0


def cmd_install(args):
    """Install or update an app from the marketplace."""
    service = get_service(args)
    app = service.find(args.name)

    if app is None:
        print(f"App not found: {args.name}", file=sys.stderr)
        return 1

    if args.command == "install" and not service.installer.is_self(app):
        record = service.store.get(app.sanitized_name)
        if record is not None and record.version == app.version:
            print(f"{app.name} {app.version} is already installed.")
            return 0

    print(f"Installing {app.name} {app.version}...")
    service.installer.set_progress_callback(_print_progress)
    outcome = service.install(app)

    verb = {
        OutcomeKind.INSTALLED: "installed",
        OutcomeKind.UPDATED: "updated",
        OutcomeKind.SELF_UPDATED: "updated the store to",
    }[outcome.kind]
    print(f"Successfully {verb} {app.name} {outcome.version}")
    return 0


def cmd_update(args):
    """Update every installed app whose catalog version differs."""
    if args.name:
        return cmd_install(args)

    service = get_service(args)
    catalog = service.fetch_catalog()
    pending = [
        record for record, status in reconcile(catalog, service.store.list_installed())
        if isinstance(status, UpdateAvailable)
    ]
    if not pending:
        print("All apps are up to date.")
        return 0

    failures = 0
    for record in pending:
        app = service.find(record.sanitized_name, catalog)
        try:
            outcome = service.install(app)
            print(f"Updated {app.name} to {outcome.version}")
        except StoreError as e:
            failures += 1
            print(f"Failed to update {app.name}: {e.message}", file=sys.stderr)
    return 1 if failures else 0


def cmd_launch(args):
    """Launch an installed app."""
    service = get_service(args)
    path = service.launch(args.name)
    print(f"Launched {normalize_name(args.name)} ({path})")
    return 0


def cmd_self_update(args):
    """Replace the store source with the marketplace version and restart."""
    service = get_service(args)
    app = service.find(service.config.self_app_name)
    if app is None:
        print(f"{service.config.self_app_name} is not in the marketplace.", file=sys.stderr)
        return 1
    print(f"Updating store to {app.version}...")
    service.install(app)
    return 0


def cmd_bootstrap(args):
    """Set up a fresh store installation."""
    root = Path(args.root or ".").resolve()
    service = get_service(args)
    url = args.source_url
    if not url:
        app = service.find(service.config.self_app_name)
        if app is None:
            print(f"{service.config.self_app_name} is not in the marketplace.", file=sys.stderr)
            return 1
        url = app.download_url

    bootstrapper = Bootstrapper(service.config, root, transport=service.transport)
    bootstrapper.set_progress_callback(_print_progress)
    launcher = bootstrapper.run(url)
    print(f"Launcher created: {launcher}")
    print("You can move it to your desktop or create a shortcut to it.")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="jarstore",
        description="DRAGE Java Apps store",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable verbose output"
    )
    parser.add_argument(
        "--root", help="Directory holding installed_apps/, lib/ and src/"
    )
    parser.add_argument(
        "--lenient", action="store_true",
        help="Skip malformed marketplace entries instead of failing",
    )
    parser.add_argument(
        "--log-dir", help="Also write a debug log (jarstore.log) to this directory"
    )
    parser.add_argument(
        "--json-logs", action="store_true", help="Write the log file as JSON lines"
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    status_p = subparsers.add_parser("status", help="Show installed apps and updates")
    status_p.set_defaults(func=cmd_status)

    catalog_p = subparsers.add_parser("catalog", help="List marketplace apps")
    catalog_p.set_defaults(func=cmd_catalog)

    list_p = subparsers.add_parser("list", help="List installed apps")
    list_p.set_defaults(func=cmd_list)

    install_p = subparsers.add_parser("install", help="Install an app")
    install_p.add_argument("name", help="App name")
    install_p.set_defaults(func=cmd_install)

    update_p = subparsers.add_parser("update", help="Update one app, or all with updates")
    update_p.add_argument("name", nargs="?", help="App name")
    update_p.set_defaults(func=cmd_update)

    launch_p = subparsers.add_parser("launch", help="Launch an installed app")
    launch_p.add_argument("name", help="App name")
    launch_p.set_defaults(func=cmd_launch)

    self_p = subparsers.add_parser("self-update", help="Update the store itself")
    self_p.set_defaults(func=cmd_self_update)

    boot_p = subparsers.add_parser("bootstrap", help="Set up a new installation")
    boot_p.add_argument("--source-url", help="Store source URL (default: from marketplace)")
    boot_p.set_defaults(func=cmd_bootstrap)

    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        json_logs=args.json_logs,
        log_dir=Path(args.log_dir) if args.log_dir else None,
    )

    if args.command is None:
        parser.print_help()
        return 1

    try:
        return args.func(args)
    except StoreError as e:
        logger.debug(f"{args.command} failed: {e.to_dict()}", exc_info=True)
        print(f"Error: {e.message}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
