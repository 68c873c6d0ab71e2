"""
Store self-update and first-run setup.

- Compile-checked replacement of the store's own source
- Restart into the new source
- Initial directory layout and launcher script
"""

from .self_update import (
    SelfUpdater,
    SelfUpdateState,
    CompileResult,
)
from .bootstrap import Bootstrapper, launcher_script

__all__ = [
    "SelfUpdater",
    "SelfUpdateState",
    "CompileResult",
    "Bootstrapper",
    "launcher_script",
]
