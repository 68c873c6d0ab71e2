"""
jarstore common utilities

Exception hierarchy and logging configuration shared by the store, the
command line and the GUI.
"""

from .exceptions import (
    StoreError, TransportError, CatalogUnavailable, StoreReadError,
    InstallError, DownloadFailed, WriteFailed, SelfUpdateCompileFailed,
    LaunchError,
)
from .logging_config import setup_logging, LogContext

__all__ = [
    # Exceptions
    "StoreError", "TransportError", "CatalogUnavailable", "StoreReadError",
    "InstallError", "DownloadFailed", "WriteFailed", "SelfUpdateCompileFailed",
    "LaunchError",
    # Logging
    "setup_logging", "LogContext",
]
