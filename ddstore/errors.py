"""Exceptions raised by the ddstore adapter."""

from __future__ import annotations

__all__ = ["StoreError", "StoreNotInitializedError"]


class StoreError(Exception):
    """Base class for store adapter errors."""


class StoreNotInitializedError(StoreError):
    """A write was attempted before ``init_store()`` or after teardown."""
