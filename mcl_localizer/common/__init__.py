"""
Common package for the localizer.

Shared utilities used by the filter, the maps and the sensor models.

Modules:
- se3: pose algebra on [x, y, z, rx, ry, rz] vectors
- pointcloud: finite-point extraction and voxel downsampling
- param_models: pydantic parameter models
"""

from __future__ import annotations

from importlib import import_module
from typing import Any

__all__ = [
    "LocalizerParams",
    "constants",
    "se3",
]

_LAZY_ATTRS: dict[str, tuple[str, str | None]] = {
    "LocalizerParams": ("mcl_localizer.common.param_models", "LocalizerParams"),
    # Expose these as submodules, but do not eagerly import them at package import time.
    "constants": ("mcl_localizer.common.constants", None),
    "se3": ("mcl_localizer.common.se3", None),
}


def __getattr__(name: str) -> Any:
    target = _LAZY_ATTRS.get(name)
    if target is None:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
    module_name, attr_name = target
    module = import_module(module_name)
    return module if attr_name is None else getattr(module, attr_name)


def __dir__() -> list[str]:
    return sorted(set(globals().keys()) | set(_LAZY_ATTRS.keys()))
