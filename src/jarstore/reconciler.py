"""
Reconciler - compare the catalog with what is installed.

Pure functions, no I/O. Versions are compared as exact strings: "1.9" and
"1.9.0" are different versions, and so are "1.9" and "1.10" regardless of
which one is newer.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Tuple, Union

from .app_catalog import AppDescriptor, normalize_name
from .installed import InstalledRecord


@dataclass(frozen=True)
class Launchable:
    """Installed and matching the catalog, or not in the catalog at all."""


@dataclass(frozen=True)
class UpdateAvailable:
    """The catalog lists a different version than the installed one."""
    remote_version: str


@dataclass(frozen=True)
class NotInstalled:
    """Listed in the catalog, nothing on disk."""


Status = Union[Launchable, UpdateAvailable, NotInstalled]

LAUNCHABLE = Launchable()
NOT_INSTALLED = NotInstalled()


def remote_versions(catalog: Iterable[AppDescriptor]) -> Dict[str, str]:
    """Map sanitized name -> catalog version. Later duplicates win."""
    return {normalize_name(app.name): app.version for app in catalog}


def _status(local_version: str, remote_version: str) -> Status:
    if remote_version == local_version:
        return LAUNCHABLE
    return UpdateAvailable(remote_version)


def reconcile(
    catalog: Iterable[AppDescriptor],
    installed: Iterable[InstalledRecord],
) -> List[Tuple[InstalledRecord, Status]]:
    """
    Classify every installed record against the catalog.

    Returns:
        ``(record, status)`` pairs in the order of ``installed``. Records
        with no catalog entry are always Launchable.
    """
    remote = remote_versions(catalog)
    result = []
    for record in installed:
        remote_version = remote.get(record.sanitized_name)
        if remote_version is None:
            result.append((record, LAUNCHABLE))
        else:
            result.append((record, _status(record.version, remote_version)))
    return result


def classify_catalog(
    catalog: Iterable[AppDescriptor],
    installed: Iterable[InstalledRecord],
) -> List[Tuple[AppDescriptor, Status]]:
    """
    Classify every catalog entry against the installed records.

    Returns:
        ``(descriptor, status)`` pairs in catalog order.
    """
    local = {record.sanitized_name: record.version for record in installed}
    result = []
    for app in catalog:
        local_version = local.get(normalize_name(app.name))
        if local_version is None:
            result.append((app, NOT_INSTALLED))
        else:
            result.append((app, _status(local_version, app.version)))
    return result
