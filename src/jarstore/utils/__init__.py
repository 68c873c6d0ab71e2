"""
jarstore utility modules

File helpers shared by the installation store and the self-updater.
"""

from .atomic_write import (
    atomic_write_bytes,
    atomic_write_text,
    atomic_replace,
)

__all__ = [
    "atomic_write_bytes",
    "atomic_write_text",
    "atomic_replace",
]
