"""
jarstore Exception Hierarchy

Provides clear, actionable error messages with structured information
for logging, user feedback, and programmatic error handling.
"""

from typing import Optional, Dict, Any


class StoreError(Exception):
    """
    Base exception for all jarstore errors.

    Attributes:
        message: Human-readable error message
        code: Machine-readable error code
        details: Additional context as key-value pairs
        cause: Original exception that caused this error
        recoverable: Whether the error is recoverable
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
        recoverable: bool = True,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}
        self.cause = cause
        self.recoverable = recoverable

    def __str__(self):
        s = f"[{self.code}] {self.message}"
        if self.details:
            s += f" (details: {self.details})"
        if self.cause:
            s += f" caused by: {self.cause}"
        return s

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
            "recoverable": self.recoverable,
        }


# =============================================================================
# Network / catalog errors
# =============================================================================

class TransportError(StoreError):
    """Fetching a URL failed."""
    def __init__(self, url: str, reason: str, cause: Optional[Exception] = None):
        super().__init__(
            f"Failed to fetch {url}: {reason}",
            code="TRANSPORT_FAILED",
            details={"url": url, "reason": reason},
            cause=cause,
        )


class CatalogUnavailable(StoreError):
    """The remote catalog could not be fetched or parsed."""
    def __init__(self, url: str, reason: str, cause: Optional[Exception] = None):
        super().__init__(
            f"Error loading marketplace: {reason}",
            code="CATALOG_UNAVAILABLE",
            details={"url": url, "reason": reason},
            cause=cause,
        )


# =============================================================================
# Installation store errors
# =============================================================================

class StoreReadError(StoreError):
    """A version marker exists but cannot be read."""
    def __init__(self, path: str, reason: str):
        super().__init__(
            f"Cannot read {path}: {reason}",
            code="STORE_READ_FAILED",
            details={"path": path, "reason": reason},
        )


# =============================================================================
# Installation errors
# =============================================================================

class InstallError(StoreError):
    """Base for installation errors."""
    pass


class DownloadFailed(InstallError):
    """Artifact download failed; nothing was written."""
    def __init__(self, app_name: str, url: str, reason: str,
                 cause: Optional[Exception] = None):
        super().__init__(
            f"Failed to download {app_name}: {reason}",
            code="DOWNLOAD_FAILED",
            details={"app": app_name, "url": url, "reason": reason},
            cause=cause,
        )


class WriteFailed(InstallError):
    """Writing an artifact, marker or replacement source failed."""
    def __init__(self, app_name: str, path: str, reason: str,
                 cause: Optional[Exception] = None):
        super().__init__(
            f"Failed to write {app_name} to {path}: {reason}",
            code="WRITE_FAILED",
            details={"app": app_name, "path": path, "reason": reason},
            cause=cause,
        )


class SelfUpdateCompileFailed(InstallError):
    """Downloaded store source did not compile; running source untouched."""
    def __init__(self, source: str, output: str):
        super().__init__(
            f"Update failed to compile, keeping current version of {source}",
            code="SELF_UPDATE_COMPILE_FAILED",
            details={"source": source, "output": output},
        )
        self.output = output


# =============================================================================
# Launch errors
# =============================================================================

class LaunchError(StoreError):
    """Spawning an installed artifact failed."""
    def __init__(self, path: str, reason: str, cause: Optional[Exception] = None):
        super().__init__(
            f"Failed to launch {path}: {reason}",
            code="LAUNCH_FAILED",
            details={"path": path, "reason": reason},
            cause=cause,
        )
