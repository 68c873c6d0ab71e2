"""
App Installer - install, update and self-update from catalog entries.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, Optional

from .app_catalog import AppDescriptor, is_safe_name, normalize_name
from .common.exceptions import DownloadFailed, TransportError, WriteFailed
from .common.logging_config import LogContext
from .config import StoreConfig
from .installed import InstallationStore
from .transport import Transport
from .updater.self_update import SelfUpdater

logger = logging.getLogger(__name__)


class InstallProgress:
    """Progress tracking for installations."""

    def __init__(self, callback: Optional[Callable[[int, str], None]] = None):
        self.callback = callback
        self.percent = 0
        self.message = ""

    def update(self, percent: int, message: str = "") -> None:
        self.percent = percent
        self.message = message
        if self.callback:
            self.callback(percent, message)


class OutcomeKind(Enum):
    INSTALLED = "installed"
    UPDATED = "updated"
    SELF_UPDATED = "self_updated"


@dataclass(frozen=True)
class InstallOutcome:
    """What a successful install_or_update did."""
    descriptor: AppDescriptor
    sanitized_name: str
    version: str
    artifact_path: Path
    kind: OutcomeKind


class AppInstaller:
    """
    Main application installer.

    Regular apps are downloaded into memory and then recorded in the
    installation store; the store's own catalog entry goes through
    :class:`SelfUpdater` instead.
    """

    def __init__(
        self,
        config: Optional[StoreConfig] = None,
        store: Optional[InstallationStore] = None,
        transport: Optional[Transport] = None,
        self_updater: Optional[SelfUpdater] = None,
    ):
        self.config = config or StoreConfig()
        self.transport = transport or Transport(timeout=self.config.http_timeout)
        self.store = store or InstallationStore.from_config(self.config)
        self.self_updater = self_updater or SelfUpdater(self.config, transport=self.transport)
        self._progress_callback: Optional[Callable[[int, str], None]] = None

    def set_progress_callback(self, callback: Callable[[int, str], None]) -> None:
        """Set callback for progress updates."""
        self._progress_callback = callback

    def is_self(self, descriptor: AppDescriptor) -> bool:
        """Whether ``descriptor`` is the store's own catalog entry."""
        return descriptor.sanitized_name == normalize_name(self.config.self_app_name)

    def install_or_update(
        self,
        descriptor: AppDescriptor,
        progress_callback: Optional[Callable[[int, str], None]] = None,
    ) -> InstallOutcome:
        """
        Install ``descriptor`` or bring an existing install to its version.

        Args:
            descriptor: Catalog entry to install
            progress_callback: Overrides the installer-wide callback for
                this call only

        Raises:
            DownloadFailed: nothing was written.
            WriteFailed: the artifact or its marker could not be written.
            SelfUpdateCompileFailed: (self entry only) the running source
                is unchanged.
        """
        progress = InstallProgress(progress_callback or self._progress_callback)
        name = descriptor.sanitized_name

        with LogContext(app=name, operation="install"):
            if self.is_self(descriptor):
                return self._self_update(descriptor, progress)
            return self._install(descriptor, progress)

    def _install(self, descriptor: AppDescriptor, progress: InstallProgress) -> InstallOutcome:
        name = descriptor.sanitized_name
        url = descriptor.download_url

        if not is_safe_name(name):
            raise WriteFailed(descriptor.name, str(self.store.install_dir), "unusable app name")

        progress.update(10, f"Downloading {descriptor.name}...")
        try:
            data = self.transport.fetch_bytes(url)
        except TransportError as e:
            logger.error(f"Download of {name} failed: {e}")
            raise DownloadFailed(descriptor.name, url, e.details.get("reason", e.message), cause=e) from e

        existing = self.store.artifact_path(name).is_file()

        progress.update(60, f"Installing {descriptor.name}...")
        try:
            record = self.store.write_record(name, data, descriptor.version)
        except OSError as e:
            logger.error(f"Writing {name} failed: {e}")
            raise WriteFailed(descriptor.name, str(self.store.install_dir), str(e), cause=e) from e

        progress.update(100, "Installation complete")
        kind = OutcomeKind.UPDATED if existing else OutcomeKind.INSTALLED
        logger.info(f"{kind.value.capitalize()} {name} {descriptor.version}")
        return InstallOutcome(
            descriptor=descriptor,
            sanitized_name=name,
            version=descriptor.version,
            artifact_path=record.artifact_path,
            kind=kind,
        )

    def _self_update(self, descriptor: AppDescriptor, progress: InstallProgress) -> InstallOutcome:
        progress.update(10, "Downloading update...")
        source = self.self_updater.apply(descriptor.download_url)
        progress.update(90, "Restarting...")
        outcome = InstallOutcome(
            descriptor=descriptor,
            sanitized_name=descriptor.sanitized_name,
            version=descriptor.version,
            artifact_path=source,
            kind=OutcomeKind.SELF_UPDATED,
        )
        self.self_updater.restart()
        return outcome
