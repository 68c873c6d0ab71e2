"""
Installation Store - installed apps on the local filesystem.

Each app is a pair of files in the installation directory::

    installed_apps/Weather.jar       the artifact
    installed_apps/Weather.version   raw UTF-8 version string (optional)

The file stem is the sanitized app name. An artifact without a marker is a
legacy install and reports the default version.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import List, Optional, Tuple

from .common.exceptions import StoreReadError
from .config import ARTIFACT_EXTENSION, DEFAULT_VERSION, VERSION_EXTENSION
from .utils.atomic_write import atomic_write_bytes, atomic_write_text

logger = logging.getLogger(__name__)


class MarkerState(Enum):
    """Outcome of reading a version marker."""
    PRESENT = "present"         # Marker read
    MISSING = "missing"         # No marker, default version applies
    UNREADABLE = "unreadable"   # Marker exists but could not be read


@dataclass(frozen=True)
class VersionRead:
    """Result of a version marker lookup."""
    state: MarkerState
    version: Optional[str] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.state is not MarkerState.UNREADABLE

    @classmethod
    def present(cls, version: str) -> "VersionRead":
        return cls(MarkerState.PRESENT, version)

    @classmethod
    def default(cls, version: str) -> "VersionRead":
        return cls(MarkerState.MISSING, version)

    @classmethod
    def failed(cls, error: str) -> "VersionRead":
        return cls(MarkerState.UNREADABLE, error=error)


@dataclass(frozen=True)
class InstalledRecord:
    """An installed artifact and its recorded version."""
    sanitized_name: str
    artifact_path: Path
    version: str


class InstallationStore:
    """
    Filesystem-backed record of installed apps.

    No locking: two writers for the same name race and the last write wins.
    Each individual file write is atomic.
    """

    def __init__(
        self,
        install_dir: Path,
        artifact_extension: str = ARTIFACT_EXTENSION,
        version_extension: str = VERSION_EXTENSION,
        default_version: str = DEFAULT_VERSION,
    ):
        self.install_dir = Path(install_dir)
        self.artifact_extension = artifact_extension
        self.version_extension = version_extension
        self.default_version = default_version

    @classmethod
    def from_config(cls, config) -> "InstallationStore":
        return cls(
            config.install_dir,
            artifact_extension=config.artifact_extension,
            version_extension=config.version_extension,
            default_version=config.default_version,
        )

    def artifact_path(self, sanitized_name: str) -> Path:
        return self.install_dir / f"{sanitized_name}{self.artifact_extension}"

    def marker_path(self, sanitized_name: str) -> Path:
        return self.install_dir / f"{sanitized_name}{self.version_extension}"

    def read_version(self, sanitized_name: str) -> VersionRead:
        """Read the version marker for ``sanitized_name``. Never raises."""
        marker = self.marker_path(sanitized_name)
        try:
            return VersionRead.present(marker.read_bytes().decode("utf-8"))
        except FileNotFoundError:
            return VersionRead.default(self.default_version)
        except (OSError, UnicodeDecodeError) as e:
            return VersionRead.failed(str(e))

    def _record(self, artifact: Path) -> InstalledRecord:
        name = artifact.name[: -len(self.artifact_extension)]
        result = self.read_version(name)
        if not result.ok:
            raise StoreReadError(str(self.marker_path(name)), result.error or "unknown error")
        if result.state is MarkerState.MISSING:
            logger.debug(f"No version marker for {name}, assuming {result.version}")
        return InstalledRecord(sanitized_name=name, artifact_path=artifact, version=result.version)

    def _artifacts(self) -> List[Path]:
        if not self.install_dir.is_dir():
            return []
        artifacts = []
        for entry in sorted(self.install_dir.iterdir()):
            if not entry.is_file() or entry.name.startswith("."):
                continue
            if not entry.name.endswith(self.artifact_extension):
                continue
            if len(entry.name) == len(self.artifact_extension):
                continue
            artifacts.append(entry)
        return artifacts

    def list_installed(self) -> List[InstalledRecord]:
        """
        Enumerate installed apps, sorted by sanitized name.

        A missing installation directory means nothing is installed.

        Raises:
            StoreReadError: a version marker exists but cannot be read.
        """
        return [self._record(artifact) for artifact in self._artifacts()]

    def scan_installed(self) -> Tuple[List[InstalledRecord], List[StoreReadError]]:
        """
        Like :meth:`list_installed`, but an unreadable marker only drops
        its own app: the failure is returned next to the readable records.
        """
        records: List[InstalledRecord] = []
        failures: List[StoreReadError] = []
        for artifact in self._artifacts():
            try:
                records.append(self._record(artifact))
            except StoreReadError as e:
                logger.error(f"Skipping installed app: {e}")
                failures.append(e)
        return records, failures

    def get(self, sanitized_name: str) -> Optional[InstalledRecord]:
        """Return the record for ``sanitized_name`` or None if not installed."""
        artifact = self.artifact_path(sanitized_name)
        if not artifact.is_file():
            return None
        return self._record(artifact)

    def write_record(self, sanitized_name: str, artifact_bytes: bytes,
                     version: str) -> InstalledRecord:
        """
        Store an artifact and its version marker, replacing any previous
        install of the same name. The directory is created if needed.

        Raises:
            OSError: if either file cannot be written.
        """
        artifact = self.artifact_path(sanitized_name)
        atomic_write_bytes(artifact, artifact_bytes)
        atomic_write_text(self.marker_path(sanitized_name), version)
        logger.info(f"Recorded {sanitized_name} {version} at {artifact}")
        return InstalledRecord(sanitized_name=sanitized_name, artifact_path=artifact, version=version)
