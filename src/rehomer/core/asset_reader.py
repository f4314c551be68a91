"""
AssetReader - loads models and their assets from one source root.

Model loading dispatches on file extension through a loader table. The table
is configuration, not code: add or override entries with register_loader()
or through the converter config.
"""

import logging
from pathlib import Path
from typing import Callable, Dict, Optional, Union

from formats.gltf import GltfLoader
from formats.scene import SceneImporter, SCENE_EXTENSION, load_material_file
from ..errors import ConversionError, IOFailureError, InvalidArgumentError, ResourceNotFoundError
from ..keys import MaterialKey, ModelKey, ResourceKey, TextureKey
from ..scene import Material, Spatial, Texture
from utils.paths import asset_file, canonical, relativize

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]
ModelLoader = Callable[["AssetReader", Path, str], Spatial]


def load_gltf(reader: "AssetReader", path: Path, asset_path: str) -> Spatial:
    return GltfLoader().load(path, asset_path)


def load_scene(reader: "AssetReader", path: Path, asset_path: str) -> Spatial:
    importer = SceneImporter(reader.load_material, reader.load_texture)
    return importer.load(path, ModelKey.parse(asset_path))


# Loader names usable from configuration files
MODEL_LOADERS: Dict[str, ModelLoader] = {
    "gltf": load_gltf,
    "scene": load_scene,
}

DEFAULT_EXTENSIONS: Dict[str, str] = {
    "gltf": "gltf",
    "glb": "gltf",
    SCENE_EXTENSION: "scene",
}


class AssetReader:
    """Reads assets relative to a canonicalized asset root, with a per-key cache."""

    def __init__(self, asset_root: Optional[PathLike] = None,
                 extensions: Optional[Dict[str, str]] = None):
        self._root: Optional[Path] = None
        self._loaders: Dict[str, ModelLoader] = {}
        self._cache: Dict[ResourceKey, object] = {}
        for extension, loader_name in DEFAULT_EXTENSIONS.items():
            self.register_loader(extension, loader_name)
        for extension, loader_name in (extensions or {}).items():
            self.register_loader(extension, loader_name)
        self.set_asset_root(asset_root)

    # ─────────────────────────────────────────────────────────────
    # CONFIGURATION
    # ─────────────────────────────────────────────────────────────

    def set_asset_root(self, asset_root: Optional[PathLike]) -> None:
        if asset_root is None:
            self._root = None
            return
        self._root = canonical(asset_root)
        logger.info("Using source asset root: %s", self._root)

    @property
    def asset_root(self) -> Optional[Path]:
        return self._root

    def register_loader(self, extension: str, loader: Union[str, ModelLoader]) -> None:
        """Map a file extension to a loader callable or a named built-in loader."""
        if isinstance(loader, str):
            if loader not in MODEL_LOADERS:
                raise InvalidArgumentError(f"Unknown model loader {loader!r} for extension {extension!r}")
            loader = MODEL_LOADERS[loader]
        self._loaders[extension.lower().lstrip(".")] = loader

    def loader_for(self, extension: str) -> Optional[ModelLoader]:
        return self._loaders.get(extension.lower())

    # ─────────────────────────────────────────────────────────────
    # CACHE
    # ─────────────────────────────────────────────────────────────

    def clear_cache(self) -> None:
        self._cache.clear()

    def delete_from_cache(self, key: ResourceKey) -> bool:
        return self._cache.pop(key, None) is not None

    # ─────────────────────────────────────────────────────────────
    # LOADING
    # ─────────────────────────────────────────────────────────────

    def _require_root(self) -> Path:
        if self._root is None:
            raise InvalidArgumentError("Asset root is not set.")
        return self._root

    def load_model(self, file: PathLike) -> Spatial:
        """Load a model file that lives under the asset root."""
        root = self._require_root()
        logger.debug("load_model(%s)", file)
        path = Path(file)
        if not path.exists():
            raise ResourceNotFoundError(f"Model file does not exist: {path}")

        asset_path = relativize(root, path)
        if asset_path is None:
            raise InvalidArgumentError(f"Model file is not under the asset root {root}: {path}")
        logger.info("Loading asset: %s", asset_path)

        self.clear_cache()
        return self._load(canonical(path), ModelKey.parse(asset_path))

    def load_model_key(self, key: ResourceKey) -> Spatial:
        """Load a model by key, e.g. to resolve a link node."""
        cached = self._cache.get(key)
        if cached is not None:
            return cached
        model = self._load(self._file_for(key), key)
        self._cache[key] = model
        return model

    def _load(self, path: Path, key: ResourceKey) -> Spatial:
        loader = self.loader_for(key.extension)
        if loader is None:
            raise InvalidArgumentError(f"No model loader registered for extension {key.extension!r}", key=key)
        try:
            return loader(self, path, key.render())
        except ConversionError:
            raise
        except (ValueError, KeyError, OSError) as e:
            raise IOFailureError(f"Error loading model: {path}", key=key, cause=e) from e

    def _file_for(self, key: ResourceKey) -> Path:
        path = asset_file(self._require_root(), key.render())
        if not path.is_file():
            raise ResourceNotFoundError("Asset not found", key=key)
        return path

    def load_material(self, key: MaterialKey) -> Material:
        cached = self._cache.get(key)
        if cached is not None:
            return cached
        try:
            material = load_material_file(self._file_for(key), key, self.load_texture)
        except ConversionError:
            raise
        except (ValueError, KeyError, OSError) as e:
            raise IOFailureError("Error loading material", key=key, cause=e) from e
        self._cache[key] = material
        return material

    def load_texture(self, key: TextureKey) -> Texture:
        """
        Return the texture for key.

        Image bytes stay on disk; only the key is needed for conversion.
        """
        cached = self._cache.get(key)
        if cached is not None:
            return cached
        texture = Texture(key)
        self._cache[key] = texture
        return texture

    def source_file(self, key: ResourceKey) -> Optional[Path]:
        if self._root is None:
            return None
        return asset_file(self._root, key.render())
