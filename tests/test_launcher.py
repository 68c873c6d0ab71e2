"""
Tests for jarstore launcher.
"""

import subprocess
import pytest
from unittest.mock import MagicMock

from jarstore.common.exceptions import LaunchError
from jarstore.launcher import Launcher


@pytest.fixture
def artifact(store):
    store.write_record("Weather", b"PK", "2.0")
    return store.artifact_path("Weather")


class TestLauncher:

    @pytest.mark.unit
    def test_spawns_detached(self, store_config, artifact, mock_spawner):
        Launcher(store_config, spawner=mock_spawner).launch(artifact)

        args, kwargs = mock_spawner.call_args
        assert args[0] == ["java", "-jar", str(artifact)]
        assert kwargs["start_new_session"] is True
        assert kwargs["stdout"] is subprocess.DEVNULL

    @pytest.mark.unit
    def test_does_not_wait(self, store_config, artifact, mock_spawner):
        Launcher(store_config, spawner=mock_spawner).launch(artifact)
        mock_spawner.return_value.wait.assert_not_called()

    @pytest.mark.unit
    def test_missing_artifact(self, store_config, store, mock_spawner):
        with pytest.raises(LaunchError, match="file not found"):
            Launcher(store_config, spawner=mock_spawner).launch(store.artifact_path("Nope"))
        mock_spawner.assert_not_called()

    @pytest.mark.unit
    def test_missing_runtime(self, store_config, artifact):
        spawner = MagicMock(side_effect=FileNotFoundError("java"))
        with pytest.raises(LaunchError) as exc_info:
            Launcher(store_config, spawner=spawner).launch(artifact)
        assert "runtime not found" in exc_info.value.message
        assert exc_info.value.code == "LAUNCH_FAILED"

    @pytest.mark.unit
    def test_permission_denied(self, store_config, artifact):
        spawner = MagicMock(side_effect=PermissionError("denied"))
        with pytest.raises(LaunchError, match="permission denied"):
            Launcher(store_config, spawner=spawner).launch(artifact)

    @pytest.mark.unit
    def test_launch_leaves_install_state(self, store_config, store, artifact):
        spawner = MagicMock(side_effect=OSError("exec format error"))
        with pytest.raises(LaunchError):
            Launcher(store_config, spawner=spawner).launch(artifact)
        assert store.get("Weather").version == "2.0"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
