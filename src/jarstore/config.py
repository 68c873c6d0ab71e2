"""
Store configuration.

Every location the store touches is fixed; the module constants below are
the defaults and :class:`StoreConfig` lets callers (tests, ``--root``)
override them per instance.
"""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Dict, List, Optional

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

#: Remote manifest listing every app in the marketplace.
CATALOG_URL = (
    "https://raw.githubusercontent.com/DRAGEno01/DRAGE-Java-Apps/"
    "refs/heads/main/code/apps.json"
)

#: Directory holding ``<name>.jar`` / ``<name>.version`` pairs.
INSTALL_DIR = Path("installed_apps")

ARTIFACT_EXTENSION = ".jar"
VERSION_EXTENSION = ".version"

#: Version assumed when an artifact has no marker file.
DEFAULT_VERSION = "1.0"

#: Catalog entry that refers to the store itself.
SELF_APP_NAME = "DRAGE Java Apps"

#: The store's own source file, replaced in place by a self-update.
SELF_SOURCE_PATH = Path("src") / "jarstore_app.py"

#: Extra import path handed to the compiler and to the restarted store.
LIBRARY_PATH = Path("lib")

#: Runtime used to start installed artifacts.
RUNTIME = "java"


@dataclass
class StoreConfig:
    """Fixed locations and commands used by the store."""
    catalog_url: str = CATALOG_URL
    install_dir: Path = INSTALL_DIR
    artifact_extension: str = ARTIFACT_EXTENSION
    version_extension: str = VERSION_EXTENSION
    default_version: str = DEFAULT_VERSION
    self_app_name: str = SELF_APP_NAME
    self_source_path: Path = SELF_SOURCE_PATH
    library_path: Path = LIBRARY_PATH
    runtime: str = RUNTIME
    python: str = field(default_factory=lambda: sys.executable)
    # None leaves the transport on its platform default
    http_timeout: Optional[float] = None

    def with_root(self, root: Path) -> "StoreConfig":
        """Return a copy with every relative path resolved under ``root``."""
        root = Path(root)

        def rebase(path: Path) -> Path:
            return path if path.is_absolute() else root / path

        return replace(
            self,
            install_dir=rebase(self.install_dir),
            self_source_path=rebase(self.self_source_path),
            library_path=rebase(self.library_path),
        )

    def compile_command(self, source: Path) -> List[str]:
        """Command that checks ``source`` compiles; exit status 0 means it does."""
        return [self.python, "-m", "py_compile", str(source)]

    def restart_command(self) -> List[str]:
        """Command that starts the store from its own source."""
        return [self.python, str(self.self_source_path)]

    def launch_command(self, artifact: Path) -> List[str]:
        return [self.runtime, "-jar", str(artifact)]

    def library_env(self) -> Dict[str, str]:
        """Process environment with the library path prepended to PYTHONPATH."""
        env = dict(os.environ)
        existing = env.get("PYTHONPATH")
        paths = [str(self.library_path)]
        if existing:
            paths.append(existing)
        env["PYTHONPATH"] = os.pathsep.join(paths)
        return env
