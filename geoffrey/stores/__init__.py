"""Caches used while syncing documents."""

from .forest_cache import ForestCache, fingerprint

__all__ = ["ForestCache", "fingerprint"]
