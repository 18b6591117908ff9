"""Core configuration package.

Exposes the cached `settings` instance so imports are cheap and deterministic.
"""

from .environment import get_settings
from .settings import Settings

settings = get_settings()

__all__ = ["Settings", "settings", "get_settings"]
