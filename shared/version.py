"""Release metadata. ``VERSION`` must match ``project.version`` in ``pyproject.toml``."""

from __future__ import annotations

PRODUCT_NAME = "currencyapi-service"
VERSION = "1.0.0"

__version__ = VERSION


__all__ = ["PRODUCT_NAME", "VERSION", "__version__"]
