#!/usr/bin/env python3
"""
Store self-update.

Replaces the store's own source file with the version published in the
catalog and restarts the store.

Workflow:
1. Download the new source next to the current one under a temporary name
2. Compile-check the temporary file with an external compiler process
3. If the check fails, delete the temporary file; the current source stays
4. Rename the temporary file over the current source (the only durable step)
5. Start the store again from the new source and exit this process
"""

from __future__ import annotations

import logging
import os
import stat
import subprocess
import sys
import tempfile
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, Optional

from ..common.exceptions import (
    DownloadFailed, SelfUpdateCompileFailed, TransportError, WriteFailed,
)
from ..config import StoreConfig
from ..transport import Transport
from ..utils.atomic_write import atomic_replace

logger = logging.getLogger(__name__)

NEW_SOURCE_MODE = 0o644


class SelfUpdateState(Enum):
    """Where a self-update currently is."""
    IDLE = "idle"
    DOWNLOADING = "downloading"
    COMPILE_CHECK = "compile_check"
    REPLACING = "replacing"
    RESTARTING = "restarting"
    TERMINATED = "terminated"


@dataclass
class CompileResult:
    """Exit status and combined output of a compiler run."""
    success: bool
    output: str = ""


class SelfUpdater:
    """
    Drives one self-update through :class:`SelfUpdateState`.

    ``runner``, ``spawner`` and ``exit_func`` default to
    ``subprocess.run``, ``subprocess.Popen`` and ``sys.exit``.
    """

    def __init__(
        self,
        config: StoreConfig,
        transport: Optional[Transport] = None,
        runner: Callable[..., subprocess.CompletedProcess] = subprocess.run,
        spawner: Callable[..., subprocess.Popen] = subprocess.Popen,
        exit_func: Callable[[int], None] = sys.exit,
    ):
        self.config = config
        self.transport = transport or Transport(timeout=config.http_timeout)
        self._runner = runner
        self._spawner = spawner
        self._exit = exit_func
        self._state_callback: Optional[Callable[[SelfUpdateState, str], None]] = None
        self._restarted = False
        self.state = SelfUpdateState.IDLE

    @property
    def source_path(self) -> Path:
        return Path(self.config.self_source_path)

    def set_state_callback(self, callback: Callable[[SelfUpdateState, str], None]) -> None:
        """
        Set callback for state changes.

        Args:
            callback: Function(state, message)
        """
        self._state_callback = callback

    def _notify(self, state: SelfUpdateState, message: str) -> None:
        self.state = state
        logger.info(f"Self-update {state.value}: {message}")
        if self._state_callback:
            self._state_callback(state, message)

    def _temp_path(self) -> Path:
        source = self.source_path
        source.parent.mkdir(parents=True, exist_ok=True)
        fd, temp_path = tempfile.mkstemp(
            dir=source.parent,
            prefix=f".{source.stem}.update-",
            suffix=source.suffix,
        )
        os.close(fd)
        return Path(temp_path)

    def _source_mode(self) -> int:
        # mkstemp creates 0600; the replacement keeps the current mode
        try:
            return stat.S_IMODE(self.source_path.stat().st_mode)
        except FileNotFoundError:
            return NEW_SOURCE_MODE

    @staticmethod
    def _discard(path: Path) -> None:
        try:
            path.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning(f"Could not remove {path}: {e}")

    def compile_check(self, source: Path) -> CompileResult:
        """Run the compiler on ``source``; a missing compiler counts as failure."""
        cmd = self.config.compile_command(source)
        logger.debug(f"Compiling: {' '.join(cmd)}")
        try:
            result = self._runner(
                cmd,
                capture_output=True,
                text=True,
                env=self.config.library_env(),
            )
        except OSError as e:
            return CompileResult(False, f"{cmd[0]}: {e}")

        output = "\n".join(part for part in (result.stdout, result.stderr) if part)
        return CompileResult(result.returncode == 0, output.strip())

    def apply(self, download_url: str) -> Path:
        """
        Download, check and install a new store source.

        Returns:
            Path of the replaced source file.

        Raises:
            DownloadFailed: the source could not be downloaded.
            SelfUpdateCompileFailed: the new source does not compile.
            WriteFailed: the temporary file or the replacement failed.
        """
        app = self.config.self_app_name
        source = self.source_path

        self._notify(SelfUpdateState.DOWNLOADING, f"Downloading {download_url}")
        try:
            temp = self._temp_path()
        except OSError as e:
            self._notify(SelfUpdateState.IDLE, "Could not create temporary file")
            raise WriteFailed(app, str(source.parent), str(e), cause=e) from e

        try:
            try:
                self.transport.download_file(download_url, temp)
            except TransportError as e:
                raise DownloadFailed(app, download_url, e.details.get("reason", e.message), cause=e) from e
            except OSError as e:
                raise WriteFailed(app, str(temp), str(e), cause=e) from e

            self._notify(SelfUpdateState.COMPILE_CHECK, f"Compiling {temp.name}")
            result = self.compile_check(temp)
            if not result.success:
                logger.error(f"Self-update does not compile:\n{result.output}")
                raise SelfUpdateCompileFailed(str(source), result.output)

            self._notify(SelfUpdateState.REPLACING, f"Replacing {source}")
            try:
                os.chmod(temp, self._source_mode())
                atomic_replace(temp, source)
            except OSError as e:
                raise WriteFailed(app, str(source), str(e), cause=e) from e
        except Exception:
            self._discard(temp)
            self._notify(SelfUpdateState.IDLE, "Self-update abandoned")
            raise

        return source

    def restart(self) -> None:
        """
        Start the store from its (new) source and terminate this process.

        Only the first call spawns a process.
        """
        if not self._restarted:
            self._restarted = True
            cmd = self.config.restart_command()
            self._notify(SelfUpdateState.RESTARTING, " ".join(cmd))
            self._spawner(
                cmd,
                env=self.config.library_env(),
                start_new_session=True,
            )
        self._notify(SelfUpdateState.TERMINATED, "Exiting for restart")
        self._exit(0)

    def run(self, download_url: str) -> Path:
        """Apply the update and restart. Returns only if ``exit_func`` does."""
        source = self.apply(download_url)
        self.restart()
        return source
