"""
Asset Rehomer - dependency graph extraction and rehoming for 3D scenes.

Loads a model, finds every file-backed asset it uses, and writes model and
assets into a new asset tree with every key rewritten to its new location.
"""

from .errors import (
    ConversionError,
    InvalidArgumentError,
    ResourceNotFoundError,
    IOFailureError,
    UnsupportedDependencyKindError,
    ScriptError,
)
from .keys import ResourceKey, ModelKey, MaterialKey, TextureKey

__all__ = [
    'ConversionError',
    'InvalidArgumentError',
    'ResourceNotFoundError',
    'IOFailureError',
    'UnsupportedDependencyKindError',
    'ScriptError',
    'ResourceKey',
    'ModelKey',
    'MaterialKey',
    'TextureKey',
]
