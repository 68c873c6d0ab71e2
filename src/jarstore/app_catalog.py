"""
App Catalog - the remote marketplace manifest.

The manifest is a JSON document shaped ``{"apps": [{...}, ...]}``. Every
record carries six string fields; the order of ``apps`` is kept as is.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from .common.exceptions import CatalogUnavailable, TransportError
from .transport import Transport

logger = logging.getLogger(__name__)

#: Manifest key -> AppDescriptor attribute.
FIELD_MAP = {
    "name": "name",
    "description": "description",
    "version": "version",
    "author": "author",
    "icon": "icon",
    "url": "download_url",
}


def normalize_name(name: str) -> str:
    """Strip every whitespace character; the result keys files on disk."""
    return "".join(name.split())


def is_safe_name(sanitized_name: str) -> bool:
    """
    Whether a sanitized name can be used as a file stem in the
    installation directory.

    Separators would place the artifact in another directory, and a
    leading dot hides it from :meth:`InstallationStore.list_installed`.
    """
    if not sanitized_name or sanitized_name.startswith("."):
        return False
    return "/" not in sanitized_name and "\\" not in sanitized_name


class CatalogRecordError(ValueError):
    """A single manifest record is malformed."""


@dataclass(frozen=True)
class AppDescriptor:
    """One marketplace entry as published in the manifest."""
    name: str
    description: str
    version: str
    author: str
    icon: str
    download_url: str

    @property
    def sanitized_name(self) -> str:
        return normalize_name(self.name)

    def to_dict(self) -> Dict[str, str]:
        """Convert back to manifest form."""
        return {key: getattr(self, attr) for key, attr in FIELD_MAP.items()}

    @classmethod
    def from_dict(cls, data: Any) -> "AppDescriptor":
        """
        Build a descriptor from a manifest record.

        Raises:
            CatalogRecordError: if the record is not an object, a field
                is missing or not a string, or the name cannot key a file.
        """
        if not isinstance(data, dict):
            raise CatalogRecordError(f"app entry is not an object: {data!r}")

        values = {}
        for key, attr in FIELD_MAP.items():
            if key not in data:
                raise CatalogRecordError(f"missing field '{key}'")
            value = data[key]
            if not isinstance(value, str):
                raise CatalogRecordError(f"field '{key}' is not a string")
            values[attr] = value
        if not is_safe_name(normalize_name(values["name"])):
            raise CatalogRecordError(f"unusable app name: {values['name']!r}")
        return cls(**values)


def parse_catalog(document: Any, strict: bool = True,
                  url: str = "<catalog>") -> List[AppDescriptor]:
    """
    Turn a decoded manifest into descriptors.

    Args:
        document: Decoded JSON document
        strict: When True, one bad record rejects the whole catalog.
            When False, bad records are logged and skipped.
        url: Source URL, for error messages

    Raises:
        CatalogUnavailable: if the ``apps`` list is absent, or a record is
            malformed and ``strict`` is set.
    """
    if not isinstance(document, dict) or not isinstance(document.get("apps"), list):
        raise CatalogUnavailable(url, "manifest has no 'apps' list")

    apps: List[AppDescriptor] = []
    for index, record in enumerate(document["apps"]):
        try:
            apps.append(AppDescriptor.from_dict(record))
        except CatalogRecordError as e:
            if strict:
                raise CatalogUnavailable(url, f"app #{index}: {e}", cause=e) from e
            logger.warning(f"Skipping app #{index}: {e}")

    return apps


def fetch_catalog(url: str, transport: Optional[Transport] = None,
                  strict: bool = True) -> List[AppDescriptor]:
    """
    Fetch and parse the marketplace manifest.

    Returns:
        Descriptors in manifest order. Nothing is cached between calls.

    Raises:
        CatalogUnavailable: transport failure, malformed JSON, missing
            ``apps`` list, or (``strict``) a malformed record.
    """
    transport = transport or Transport()
    try:
        document = transport.fetch_json(url)
    except TransportError as e:
        raise CatalogUnavailable(url, e.details.get("reason", e.message), cause=e) from e

    apps = parse_catalog(document, strict=strict, url=url)
    logger.info(f"Loaded {len(apps)} apps from catalog")
    return apps
