"""
jarstore GUI

PyQt6 window listing installed apps and the marketplace.
"""

try:
    from .app import main, StoreWindow
except ImportError:
    # PyQt6 not installed
    main = None
    StoreWindow = None

__all__ = ["main", "StoreWindow"]
