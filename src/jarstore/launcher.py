"""
Launcher - start installed artifacts as independent processes.
"""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import Callable, Optional

from .common.exceptions import LaunchError
from .config import StoreConfig

logger = logging.getLogger(__name__)


class Launcher:
    """Spawns artifacts detached; their lifetime is not tracked."""

    def __init__(self, config: Optional[StoreConfig] = None,
                 spawner: Callable[..., subprocess.Popen] = subprocess.Popen):
        self.config = config or StoreConfig()
        self._spawner = spawner

    def launch(self, artifact_path: Path) -> None:
        """
        Start ``artifact_path`` with the configured runtime and return.

        Raises:
            LaunchError: the artifact is missing, or the runtime could not
                be started.
        """
        artifact_path = Path(artifact_path)
        if not artifact_path.is_file():
            raise LaunchError(str(artifact_path), "file not found")

        cmd = self.config.launch_command(artifact_path)
        logger.info(f"Launching: {' '.join(cmd)}")
        try:
            self._spawner(
                cmd,
                start_new_session=True,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
            )
        except FileNotFoundError as e:
            raise LaunchError(str(artifact_path), f"runtime not found: {cmd[0]}", cause=e) from e
        except PermissionError as e:
            raise LaunchError(str(artifact_path), "permission denied", cause=e) from e
        except OSError as e:
            raise LaunchError(str(artifact_path), str(e), cause=e) from e
