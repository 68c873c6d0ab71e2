"""
jarstore

Marketplace client for DRAGE Java Apps: fetches the remote app catalog,
installs and updates jar artifacts, launches them, and updates the store
itself.
"""

__version__ = "1.0.0"

from .app_catalog import AppDescriptor, fetch_catalog, normalize_name, parse_catalog
from .config import StoreConfig
from .installed import InstallationStore, InstalledRecord, MarkerState, VersionRead
from .installer import AppInstaller, InstallOutcome, InstallProgress, OutcomeKind
from .launcher import Launcher
from .reconciler import (
    Launchable, NotInstalled, Status, UpdateAvailable, classify_catalog, reconcile,
)
from .store_view import StoreService, StoreView, build_view
from .transport import Transport

__all__ = [
    "AppDescriptor",
    "fetch_catalog",
    "normalize_name",
    "parse_catalog",
    "StoreConfig",
    "InstallationStore",
    "InstalledRecord",
    "MarkerState",
    "VersionRead",
    "AppInstaller",
    "InstallOutcome",
    "InstallProgress",
    "OutcomeKind",
    "Launcher",
    "Launchable",
    "NotInstalled",
    "Status",
    "UpdateAvailable",
    "classify_catalog",
    "reconcile",
    "StoreService",
    "StoreView",
    "build_view",
    "Transport",
]
