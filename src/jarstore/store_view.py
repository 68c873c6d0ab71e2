"""
Store view - what the presentation layer renders.

:func:`build_view` turns a catalog and the installed records into rows;
:class:`StoreService` gathers fresh inputs for it on every refresh and
routes user actions. Neither keeps state between calls: the installation
directory and the remote catalog are the only sources of truth.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence

from .app_catalog import AppDescriptor, fetch_catalog, is_safe_name, normalize_name
from .common.exceptions import CatalogUnavailable, LaunchError, StoreReadError
from .config import StoreConfig
from .installed import InstallationStore, InstalledRecord
from .installer import AppInstaller, InstallOutcome
from .launcher import Launcher
from .reconciler import (
    NotInstalled, Status, UpdateAvailable, classify_catalog, reconcile,
)
from .transport import Transport

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InstalledRow:
    record: InstalledRecord
    status: Status

    @property
    def name(self) -> str:
        return self.record.sanitized_name

    @property
    def update_available(self) -> bool:
        return isinstance(self.status, UpdateAvailable)

    @property
    def remote_version(self) -> Optional[str]:
        if isinstance(self.status, UpdateAvailable):
            return self.status.remote_version
        return None


@dataclass(frozen=True)
class MarketplaceRow:
    app: AppDescriptor
    status: Status
    is_self: bool = False

    @property
    def action(self) -> str:
        """Label of the button offered for this entry."""
        if self.is_self:
            return "Update"
        if isinstance(self.status, NotInstalled):
            return "Install"
        if isinstance(self.status, UpdateAvailable):
            return "Update"
        return "Installed"


@dataclass
class StoreView:
    installed: List[InstalledRow] = field(default_factory=list)
    marketplace: List[MarketplaceRow] = field(default_factory=list)
    error: Optional[str] = None
    installed_error: Optional[str] = None


def build_view(
    catalog: Sequence[AppDescriptor],
    installed: Sequence[InstalledRecord],
    self_app_name: str,
    error: Optional[str] = None,
    installed_error: Optional[str] = None,
) -> StoreView:
    """Combine catalog and installed records into rows. Pure."""
    self_key = normalize_name(self_app_name)
    return StoreView(
        installed=[InstalledRow(record, status) for record, status in reconcile(catalog, installed)],
        marketplace=[
            MarketplaceRow(app, status, is_self=app.sanitized_name == self_key)
            for app, status in classify_catalog(catalog, installed)
        ],
        error=error,
        installed_error=installed_error,
    )


class StoreService:
    """Entry point used by the CLI and the GUI."""

    def __init__(
        self,
        config: Optional[StoreConfig] = None,
        transport: Optional[Transport] = None,
        store: Optional[InstallationStore] = None,
        installer: Optional[AppInstaller] = None,
        launcher: Optional[Launcher] = None,
        strict_catalog: bool = True,
    ):
        self.config = config or StoreConfig()
        self.transport = transport or Transport(timeout=self.config.http_timeout)
        self.store = store or InstallationStore.from_config(self.config)
        self.installer = installer or AppInstaller(
            self.config, store=self.store, transport=self.transport
        )
        self.launcher = launcher or Launcher(self.config)
        self.strict_catalog = strict_catalog

    def fetch_catalog(self) -> List[AppDescriptor]:
        return fetch_catalog(self.config.catalog_url, self.transport, strict=self.strict_catalog)

    def _scan_installed(self):
        try:
            return self.store.scan_installed()
        except OSError as e:
            logger.error(f"Cannot list {self.store.install_dir}: {e}")
            return [], [StoreReadError(str(self.store.install_dir), str(e))]

    def refresh(self) -> StoreView:
        """
        Build a view from a fresh catalog fetch and directory listing.

        Never raises for unreadable local state or an unavailable catalog.
        An app whose version marker cannot be read is left out and named in
        ``StoreView.installed_error``; a catalog failure still lists
        installed apps (all Launchable) and reports the message in
        ``StoreView.error``.
        """
        installed, failures = self._scan_installed()
        installed_error = "\n".join(e.message for e in failures) or None
        try:
            catalog = self.fetch_catalog()
        except CatalogUnavailable as e:
            logger.error(f"Catalog unavailable: {e}")
            return build_view([], installed, self.config.self_app_name,
                              error=e.message, installed_error=installed_error)
        return build_view(catalog, installed, self.config.self_app_name,
                          installed_error=installed_error)

    def find(self, name: str, catalog: Optional[Sequence[AppDescriptor]] = None) -> Optional[AppDescriptor]:
        """Look up a catalog entry by (sanitized) name; last duplicate wins."""
        if catalog is None:
            catalog = self.fetch_catalog()
        key = normalize_name(name)
        found = None
        for app in catalog:
            if app.sanitized_name == key:
                found = app
        return found

    def install(self, descriptor: AppDescriptor, progress_callback=None) -> InstallOutcome:
        return self.installer.install_or_update(descriptor, progress_callback)

    def fetch_icon(self, app: AppDescriptor) -> bytes:
        """Download the image behind ``app.icon``."""
        return self.transport.fetch_bytes(app.icon)

    def installed_path(self, name: str) -> Path:
        key = normalize_name(name)
        record = self.store.get(key) if is_safe_name(key) else None
        if record is None:
            raise LaunchError(key, "not installed")
        return record.artifact_path

    def launch(self, name: str) -> Path:
        """Launch an installed app by name. Returns the artifact path."""
        path = self.installed_path(name)
        self.launcher.launch(path)
        return path
