"""
Transport - byte-stream fetches over HTTP.

No retries; the timeout is whatever the caller configured (``None`` means
the platform default).
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Optional

import requests

from .common.exceptions import TransportError

logger = logging.getLogger(__name__)

CHUNK_SIZE = 8192


class Transport:
    """Fetches URLs into memory or onto disk."""

    def __init__(self, timeout: Optional[float] = None,
                 session: Optional[requests.Session] = None):
        self.timeout = timeout
        self._session = session or requests.Session()

    def _get(self, url: str, stream: bool = False) -> requests.Response:
        try:
            response = self._session.get(url, timeout=self.timeout, stream=stream)
            response.raise_for_status()
        except requests.exceptions.HTTPError as e:
            status = e.response.status_code if e.response is not None else "?"
            raise TransportError(url, f"HTTP {status}", cause=e) from e
        except requests.RequestException as e:
            raise TransportError(url, str(e), cause=e) from e
        return response

    def fetch_bytes(self, url: str) -> bytes:
        """Download ``url`` fully into memory."""
        logger.debug(f"GET {url}")
        response = self._get(url)
        try:
            return response.content
        except requests.RequestException as e:
            raise TransportError(url, str(e), cause=e) from e

    def fetch_json(self, url: str) -> Any:
        """Download ``url`` and decode it as JSON."""
        data = self.fetch_bytes(url)
        try:
            return json.loads(data.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise TransportError(url, f"invalid JSON: {e}", cause=e) from e

    def download_file(self, url: str, dest: Path) -> Path:
        """
        Stream ``url`` into ``dest``.

        ``dest`` is truncated first; on failure it may hold partial content
        and callers are expected to discard it.
        """
        dest = Path(dest)
        logger.info(f"Downloading {url} to {dest}")
        response = self._get(url, stream=True)
        try:
            with open(dest, "wb") as f:
                for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                    if chunk:
                        f.write(chunk)
        except requests.RequestException as e:
            raise TransportError(url, str(e), cause=e) from e
        finally:
            response.close()
        return dest
