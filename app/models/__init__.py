"""Models package.

``Base`` is importable without side effects; the domain models (``User``,
``Project``, ``Contribution``, ``Course``, ``Enrollment``, ``Notification``)
resolve on first attribute access through ``app.models.registry`` so that
``app.core.database`` can import ``Base`` before any mapper exists.
"""

import importlib

from app.models.base import Base

__all__ = ["Base"]


def _registry():
    return importlib.import_module("app.models.registry")


def __getattr__(name: str):
    registry = _registry()
    if name in registry.__all__:
        return getattr(registry, name)
    raise AttributeError(f"module 'app.models' has no attribute {name!r}")


def __dir__():
    return sorted(set(globals()) | set(_registry().__all__))
