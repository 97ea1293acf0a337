"""Square commerce API adapter."""

from __future__ import annotations

from .client import SquareCommercePlatform

__all__ = ["SquareCommercePlatform"]
