"""Domain layer primitives (ceremony adapters, exceptions)."""

from . import exceptions

__all__ = ["exceptions"]
