"""
First-run setup.

Creates the store's directories, fetches and compile-checks the store
source, and writes a launcher script the user can double-click.
"""

from __future__ import annotations

import logging
import os
import stat
import sys
from pathlib import Path
from typing import Callable, Optional

from ..config import StoreConfig
from ..transport import Transport
from .self_update import SelfUpdater

logger = logging.getLogger(__name__)


def launcher_script(config: StoreConfig, root: Path, windows: bool) -> str:
    """Text of the launcher script for the current platform."""
    python = config.python
    source = config.self_source_path
    library = config.library_path
    if windows:
        return (
            "@echo off\r\n"
            f'cd /d "{root}"\r\n'
            f'set "PYTHONPATH={library}"\r\n'
            f'"{python}" "{source}"\r\n'
        )
    return (
        "#!/bin/sh\n"
        f'cd "{root}"\n'
        f'PYTHONPATH="{library}" exec "{python}" "{source}"\n'
    )


class Bootstrapper:
    """Prepares a fresh store installation under ``root``."""

    def __init__(
        self,
        config: StoreConfig,
        root: Path,
        transport: Optional[Transport] = None,
        self_updater: Optional[SelfUpdater] = None,
        platform: str = sys.platform,
    ):
        self.config = config
        self.root = Path(root)
        self.transport = transport or Transport(timeout=config.http_timeout)
        self.self_updater = self_updater or SelfUpdater(config, transport=self.transport)
        self.windows = platform.startswith("win")
        self._progress_callback: Optional[Callable[[int, str], None]] = None

    def set_progress_callback(self, callback: Callable[[int, str], None]) -> None:
        self._progress_callback = callback

    def _progress(self, percent: int, message: str) -> None:
        logger.info(f"[{percent}%] {message}")
        if self._progress_callback:
            self._progress_callback(percent, message)

    def create_directories(self) -> None:
        for directory in (
            self.config.install_dir,
            self.config.library_path,
            Path(self.config.self_source_path).parent,
        ):
            Path(directory).mkdir(parents=True, exist_ok=True)

    def write_launcher(self) -> Path:
        name = self.config.self_app_name + (".bat" if self.windows else "")
        path = self.root / name
        path.write_text(launcher_script(self.config, self.root, self.windows), encoding="utf-8")
        if not self.windows:
            mode = path.stat().st_mode
            os.chmod(path, mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return path

    def run(self, source_url: str) -> Path:
        """
        Perform the whole setup.

        Returns:
            Path of the launcher script.

        Raises:
            DownloadFailed, SelfUpdateCompileFailed, WriteFailed: from the
                source installation step.
            OSError: directories or the launcher could not be created.
        """
        self._progress(10, "Creating directories...")
        self.create_directories()

        self._progress(60, "Downloading store...")
        self.self_updater.apply(source_url)

        self._progress(90, "Creating launcher...")
        launcher = self.write_launcher()

        self._progress(100, "Installation complete!")
        logger.info(f"Launcher created: {launcher}")
        return launcher
