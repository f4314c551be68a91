"""
AssetWriter - writes a model and its dependencies to a target tree.

Writing happens in two passes so that generated assets see final keys:

  1. File-backed dependencies are copied under the target asset path and
     their keys rehomed to match.
  2. Generated dependencies (materials created by scripts, extracted
     submodels) get their rehomed key and are then serialized. A generated
     material that uses a texture from pass 1 is written with the texture's
     new key.

The model itself is written last. Any failure aborts before that, so a
failed run never leaves a scene file pointing at half-rehomed assets.
"""

import logging
import shutil
from pathlib import Path
from typing import Callable, Dict, Optional, Type, Union

from formats.scene import SceneExporter, SCENE_EXTENSION
from ..errors import (
    ConversionError, IOFailureError, InvalidArgumentError,
    ResourceNotFoundError, UnsupportedDependencyKindError,
)
from ..graph import Dependency, ModelInfo
from ..keys import ResourceKey
from ..scene import LinkNode, Material
from utils.paths import asset_file, join_asset_path
from .processor import ModelProcessor

logger = logging.getLogger(__name__)

Generator = Callable[[Path, Dependency, object], None]


class AssetWriter(ModelProcessor):
    """Copies or generates every dependency, then writes the model."""

    def __init__(self, target: Optional[Union[str, Path]] = None, asset_path: Optional[str] = None,
                 exporter: Optional[SceneExporter] = None):
        self.target = Path(target) if target is not None else None
        self.asset_path = asset_path
        self.exporter = exporter if exporter is not None else SceneExporter()
        self._generators: Dict[Type, Generator] = {
            Material: self.write_material,
            LinkNode: self.write_linked_asset,
        }

    def set_target(self, target: Union[str, Path]) -> None:
        self.target = Path(target)

    def set_asset_path(self, path: Optional[str]) -> None:
        self.asset_path = path

    def register_generator(self, asset_type: Type, generator: Generator) -> None:
        """Add a writer for another kind of generated asset."""
        self._generators[asset_type] = generator

    def to_target_path(self, path: Union[str, ResourceKey]) -> str:
        if isinstance(path, ResourceKey):
            path = path.render()
        if self.asset_path:
            return join_asset_path(self.asset_path, path)
        return join_asset_path(path)

    def target_file(self, path: str, key: Optional[ResourceKey] = None) -> Path:
        """File under the target root for a target asset path. Paths leaving the root are rejected."""
        if path == ".." or path.startswith("../"):
            raise InvalidArgumentError(f"Asset path escapes the target root: {path!r}", key=key)
        return asset_file(self.target, path)

    @staticmethod
    def rehome(new_path: str, key: ResourceKey) -> ResourceKey:
        """Key of the same kind and metadata as key, located at new_path."""
        try:
            return key.relocated(new_path)
        except InvalidArgumentError:
            raise
        except Exception as e:
            raise InvalidArgumentError("Error rehoming key", key=key, cause=e) from e

    def apply(self, info: ModelInfo) -> None:
        self.write(info)

    def write(self, info: ModelInfo) -> Path:
        """Write all dependencies and then the model. Returns the model file written."""
        if self.target is None:
            raise InvalidArgumentError("No target root set for writing: " + info.model_name)
        out_file = self.target_file(self.to_target_path(f"{info.model_name}.{SCENE_EXTENSION}"))

        for dep in info.get_dependencies():
            if dep.is_generated:
                continue
            self.write_file_dependency(dep)

        # Generated assets may reference each other (an extracted submodel
        # using a generated material), so all their keys are final before
        # any of them is serialized.
        generated = [dep for dep in info.get_dependencies() if dep.is_generated]
        for dep in generated:
            dep.set_key(self.rehome(self.to_target_path(dep.original_key), dep.original_key))
        for dep in generated:
            self.write_generated_dependency(dep)

        logger.info("Writing: %s", out_file)
        try:
            self.exporter.save(info.model_root, out_file)
        except (OSError, TypeError, ValueError) as e:
            raise IOFailureError("Error writing model " + info.model_name,
                                 key=info.model_root.key, cause=e) from e
        return out_file

    def write_file_dependency(self, dep: Dependency) -> None:
        path = self.to_target_path(dep.original_key)
        out_file = self.target_file(path, dep.original_key)
        new_key = self.rehome(path, dep.original_key)

        if not dep.source_file.is_file():
            raise ResourceNotFoundError(f"Source file missing: {dep.source_file}", key=dep.original_key)

        logger.info("Copying: %s to: %s", dep.source_file, out_file)
        try:
            out_file.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(dep.source_file, out_file)
        except OSError as e:
            raise IOFailureError("Error copying dependency", key=dep.original_key, cause=e) from e

        # Every instance now points at the copy
        dep.set_key(new_key)

    def write_generated_dependency(self, dep: Dependency) -> None:
        path = self.to_target_path(dep.original_key)
        out_file = self.target_file(path, dep.original_key)

        dep.set_key(self.rehome(path, dep.original_key))

        asset = dep.asset
        generator = self._generator_for(asset)
        if generator is None:
            raise UnsupportedDependencyKindError(
                f"Type not supported for generation: {type(asset).__name__}", key=dep.original_key)
        try:
            out_file.parent.mkdir(parents=True, exist_ok=True)
            generator(out_file, dep, asset)
        except ConversionError:
            raise
        except (OSError, TypeError, ValueError) as e:
            raise IOFailureError("Error generating dependency", key=dep.original_key, cause=e) from e

    def _generator_for(self, asset) -> Optional[Generator]:
        for asset_type in type(asset).__mro__:
            if asset_type in self._generators:
                return self._generators[asset_type]
        return None

    def write_material(self, file: Path, dep: Dependency, material: Material) -> None:
        logger.info("Writing material: %s", file)
        self.exporter.save_material(material, file)

    def write_linked_asset(self, file: Path, dep: Dependency, link: LinkNode) -> None:
        """
        Write an extracted submodel and turn its placeholder into a pure link.

        The placeholder carries the submodel as its only child until now.
        Afterwards it holds just the final key, so the converted scene
        behaves the same as one freshly loaded from disk.
        """
        logger.info("Writing linked asset: %s for key: %s", file, dep.key)
        children = link.children
        if len(children) != 1:
            raise UnsupportedDependencyKindError(
                f"Link node must hold exactly one child to be written, has {len(children)}",
                key=dep.original_key)

        self.exporter.save(children[0], file)

        link.detach_linked_children()
        link.linked_keys.clear()
        link.add_linked_key(dep.key)
