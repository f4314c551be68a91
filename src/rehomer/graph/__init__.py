"""Dependency graph - discovery and deduplication of scene resources."""

from .core import (
    IdentityMap,
    Dependency,
    DependencyMap,
    ModelInfo,
    discover,
    MATERIAL_EXTENSION,
)

__all__ = [
    'IdentityMap',
    'Dependency',
    'DependencyMap',
    'ModelInfo',
    'discover',
    'MATERIAL_EXTENSION',
]
