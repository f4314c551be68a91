"""
Path helpers shared by the reader and writer.

Asset paths are always forward-slash strings relative to an asset root.
Filesystem paths are pathlib.Path objects.
"""

import posixpath
from pathlib import Path
from typing import Optional, Union

PathLike = Union[str, Path]


def normalize_asset_path(path: str) -> str:
    """
    Collapse an asset path into canonical forward-slash form.

    Backslashes become '/', '.' and '..' segments and duplicate separators are
    resolved, and leading '/' or './' is dropped. Returns '' for a path that
    normalizes to nothing. A result starting with '..' escapes its root.
    """
    if path is None:
        return ""
    cleaned = path.replace("\\", "/").strip()
    if not cleaned:
        return ""
    cleaned = posixpath.normpath(cleaned)
    cleaned = cleaned.lstrip("/")
    if cleaned in (".", ""):
        return ""
    return cleaned


def join_asset_path(*parts: Optional[str]) -> str:
    """Join asset path fragments, skipping empty ones, and normalize."""
    pieces = [p.strip("/") for p in parts if p]
    return normalize_asset_path("/".join(pieces))


def canonical(path: PathLike) -> Path:
    """Resolve '.', '..' and symlinks into an absolute path."""
    return Path(path).expanduser().resolve()


def relativize(root: PathLike, path: PathLike) -> Optional[str]:
    """
    Express path as a forward-slash asset path relative to root.

    Both sides are canonicalized first. Returns None when path does not live
    under root.
    """
    root_path = canonical(root)
    file_path = canonical(path)
    try:
        relative = file_path.relative_to(root_path)
    except ValueError:
        return None
    return relative.as_posix()


def asset_file(root: PathLike, asset_path: str) -> Path:
    """Map an asset path onto a file under root."""
    return Path(root) / Path(*asset_path.split("/"))
