"""
Conversion errors.

Every error is fatal to the conversion call that raised it. None are retried
internally; the caller decides whether to rerun the whole conversion.
"""

from typing import Any, Optional


class ConversionError(Exception):
    """Base class for conversion failures."""

    def __init__(self, message: str, key: Any = None, cause: Optional[BaseException] = None):
        self.key = key
        self.cause = cause
        detail = message
        if key is not None:
            detail = f"{detail} [key: {key}]"
        if cause is not None:
            detail = f"{detail}: {cause}"
        super().__init__(detail)


class InvalidArgumentError(ConversionError, ValueError):
    """Bad caller input: extracting a root node, malformed asset path, etc."""
    pass


class ResourceNotFoundError(ConversionError):
    """A source file a dependency needs is missing."""
    pass


class IOFailureError(ConversionError):
    """A copy or serialization write failed."""
    pass


class UnsupportedDependencyKindError(ConversionError):
    """A generated dependency has no registered writer."""
    pass


class ScriptError(ConversionError):
    """A model script failed to load, compile or run."""
    pass
