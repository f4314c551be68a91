"""
ModelWatcher - reconvert a model whenever it or its scripts change.

Each reconversion writes the model to the target tree. Link nodes in the
converted model only hold keys at that point, so they are resolved again
from the target root with a reader whose cache has been cleared of every
dependency just written.
"""

import logging
from pathlib import Path
from typing import List, Optional, Union

from ..core.asset_reader import AssetReader
from ..core.convert import Convert
from ..core.model_script import ModelScript
from ..errors import ConversionError, ScriptError
from ..graph import ModelInfo
from ..scene import LinkNode, Spatial, find_all

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class VersionedFile:
    """A file plus the modification time last seen."""

    def __init__(self, file: PathLike):
        self.file = Path(file)
        self.last_version: Optional[int] = None

    def update(self) -> bool:
        """True when the file changed since the previous call (or on the first call)."""
        try:
            version = self.file.stat().st_mtime_ns
        except FileNotFoundError:
            version = None
        if version == self.last_version:
            return False
        self.last_version = version
        return True


class VersionedScript(VersionedFile):
    """A script file, recompiled after each change."""

    def __init__(self, file: PathLike, convert: Convert):
        super().__init__(file)
        self.convert = convert
        self._script: Optional[ModelScript] = None

    @property
    def script(self) -> ModelScript:
        if self._script is None:
            self._script = ModelScript(self.convert, str(self.file))
        return self._script

    def update(self) -> bool:
        changed = super().update()
        if changed:
            self._script = None
        return changed


class ModelWatcher:
    """Polls a model file and its scripts, reconverting on any change."""

    def __init__(self, model_file: PathLike, convert: Optional[Convert] = None,
                 link_reader: Optional[AssetReader] = None):
        self.model_file = VersionedFile(model_file)
        self.convert = convert if convert is not None else Convert()
        self.link_reader = link_reader
        self.scripts: List[VersionedScript] = []
        self.model: Optional[ModelInfo] = None
        self.last_error: Optional[str] = None

        if self.convert.target_root is None:
            self.convert.set_target_root("assets")
        if self.convert.target_asset_path is None:
            self.convert.set_target_asset_path("Models/" + self.model_file.file.stem)

    @property
    def name(self) -> str:
        return self.model_file.file.name

    def add_model_script(self, file: PathLike) -> None:
        self.scripts.append(VersionedScript(file, self.convert))

    def update_dependencies(self) -> bool:
        changed = self.model_file.update()
        for script in self.scripts:
            if script.update():
                changed = True
        return changed

    def poll(self) -> bool:
        """Reconvert if anything changed. Returns True when a new model was loaded."""
        if not self.update_dependencies():
            return False
        return self.load_model() is not None

    # ─────────────────────────────────────────────────────────────
    # CONVERSION
    # ─────────────────────────────────────────────────────────────

    def _refresh_scripts(self) -> None:
        self.convert.clear_model_scripts()
        for versioned in self.scripts:
            try:
                self.convert.add_model_script(versioned.script)
            except ScriptError as e:
                logger.error("Error compiling script: %s: %s", versioned.file, e)

    def _link_reader(self) -> AssetReader:
        if self.link_reader is None:
            self.link_reader = AssetReader(self.convert.target_root)
        return self.link_reader

    def load_model(self) -> Optional[Spatial]:
        """Convert the model file and resolve its links. Returns the new model root."""
        f = self.model_file.file
        if self.convert.source_root is None:
            self.convert.set_source_root(f.parent)
        self._refresh_scripts()

        try:
            info = self.convert.convert(f)
        except ScriptError as e:
            logger.error("Script error: %s", e)
            self.last_error = str(e)
            return None
        except ConversionError as e:
            logger.error("Cannot load: %s: %s", f, e)
            self.last_error = str(e)
            return None

        self.last_error = None
        self.model = info
        self.resolve_links(info)
        return info.model_root

    def resolve_links(self, info: ModelInfo) -> int:
        """
        Clear cached copies of everything just converted and reattach link children.

        Returns the number of link nodes resolved.
        """
        reader = self._link_reader()
        for dep in info.get_dependencies():
            if reader.delete_from_cache(dep.key):
                logger.debug("Cleared cached dependency: %s", dep.key)

        links = find_all(info.model_root, spatial_type=LinkNode)
        for link in links:
            logger.info("Loading linked assets for: %r", link)
            link.attach_linked_children(reader.load_model_key)
        return len(links)
