"""
Viewer - watch a model, reconvert on change, show the result.

The dearpygui panel is imported on demand so the watcher can be used
without a display.
"""

from .watcher import ModelWatcher, VersionedFile, VersionedScript
from .outline import OutlineRow, outline_rows, dependency_rows

__all__ = [
    'ModelWatcher',
    'VersionedFile',
    'VersionedScript',
    'OutlineRow',
    'outline_rows',
    'dependency_rows',
]
