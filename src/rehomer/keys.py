"""
Resource keys - the identity of an externally-backed asset.

A key is folder + name + extension. Keys are immutable: rehoming produces a
new key rather than editing one in place.
"""

from dataclasses import dataclass, fields, replace
from typing import Any, Dict, Tuple, Type

from utils.paths import normalize_asset_path
from .errors import InvalidArgumentError


def split_asset_path(path: str) -> Tuple[str, str, str]:
    """
    Split a path into (folder, name, extension).

    The path is normalized first. The folder is everything before the last '/'
    and the extension is everything after the last '.' of the file name. A dot
    that starts or ends the file name is not treated as a separator.
    """
    normalized = normalize_asset_path(path)
    if not normalized:
        raise InvalidArgumentError(f"Empty asset path: {path!r}")
    if normalized == ".." or normalized.startswith("../"):
        raise InvalidArgumentError(f"Asset path escapes its root: {path!r}")

    folder, _, filename = normalized.rpartition("/")
    idx = filename.rfind(".")
    if idx <= 0 or idx == len(filename) - 1:
        return folder, filename, ""
    return folder, filename[:idx], filename[idx + 1:]


@dataclass(frozen=True)
class ResourceKey:
    """Location of an asset relative to an asset root."""
    folder: str
    name: str
    extension: str = ""

    KIND = "asset"

    @classmethod
    def parse(cls, path: str, **metadata) -> "ResourceKey":
        """Build a key of this kind from a path string."""
        folder, name, extension = split_asset_path(path)
        return cls(folder, name, extension, **metadata)

    @property
    def filename(self) -> str:
        if self.extension:
            return f"{self.name}.{self.extension}"
        return self.name

    def render(self) -> str:
        """Return folder/name.extension, without a separator when folder is empty."""
        if self.folder:
            return f"{self.folder}/{self.filename}"
        return self.filename

    def rehome(self, new_path: str) -> "ResourceKey":
        """
        Return a plain key for new_path.

        Only location is carried over. Kind-specific metadata is the caller's
        to keep, see with_location().
        """
        return ResourceKey.parse(new_path)

    def with_location(self, folder: str, name: str, extension: str) -> "ResourceKey":
        """Return a key of the same kind and metadata at a new location."""
        return replace(self, folder=folder, name=name, extension=extension)

    def relocated(self, new_path: str) -> "ResourceKey":
        """rehome() plus with_location(): move this key to new_path, keeping its kind."""
        location = self.rehome(new_path)
        return self.with_location(location.folder, location.name, location.extension)

    def metadata(self) -> Dict[str, Any]:
        """Kind-specific fields beyond folder/name/extension."""
        base = {"folder", "name", "extension"}
        return {f.name: getattr(self, f.name) for f in fields(self) if f.name not in base}

    def to_dict(self) -> Dict[str, Any]:
        data = {"kind": self.KIND, "path": self.render()}
        data.update(self.metadata())
        return data

    def __str__(self) -> str:
        return self.render()


@dataclass(frozen=True)
class ModelKey(ResourceKey):
    """Key for a scene/model asset."""
    KIND = "model"


@dataclass(frozen=True)
class MaterialKey(ResourceKey):
    """Key for a material asset."""
    KIND = "material"


@dataclass(frozen=True)
class TextureKey(ResourceKey):
    """Key for a texture image plus the sampling flags it is loaded with."""
    flip_y: bool = False
    generate_mips: bool = True
    anisotropy: int = 0

    KIND = "texture"


KEY_KINDS: Dict[str, Type[ResourceKey]] = {
    cls.KIND: cls for cls in (ResourceKey, ModelKey, MaterialKey, TextureKey)
}


def key_from_dict(data: Dict[str, Any]) -> ResourceKey:
    """Inverse of ResourceKey.to_dict()."""
    kind = data.get("kind", ResourceKey.KIND)
    cls = KEY_KINDS.get(kind)
    if cls is None:
        raise InvalidArgumentError(f"Unknown key kind: {kind!r}")
    metadata = {k: v for k, v in data.items() if k not in ("kind", "path")}
    return cls.parse(data["path"], **metadata)
