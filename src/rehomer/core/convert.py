"""
Convert - the conversion pipeline.

A conversion loads one model file, builds its ModelInfo and runs the model
processors against it in order:

  probe (if configured) -> scripts -> writer (if a target root is set)

With nothing configured the model is probed with default options.
"""

import logging
from pathlib import Path
from typing import List, Optional, Union

from ..errors import InvalidArgumentError, ResourceNotFoundError
from ..graph import ModelInfo
from .asset_reader import AssetReader
from .asset_writer import AssetWriter
from .config import ConvertConfig
from .model_script import ModelScript
from .probe import Probe
from .processor import ModelProcessor

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class Convert:
    """Holds the conversion settings and the ordered processor list."""

    def __init__(self, reader: Optional[AssetReader] = None):
        self.reader = reader if reader is not None else AssetReader()
        self.source_root: Optional[Path] = None
        self.target_root: Optional[Path] = None
        self.target_asset_path: Optional[str] = None
        self.probe_options: Optional[str] = None
        self._writer: Optional[AssetWriter] = None
        self._probe: Optional[Probe] = None
        self._scripts: List[ModelScript] = []
        self._processors: List[ModelProcessor] = []

    @classmethod
    def from_config(cls, config: ConvertConfig) -> "Convert":
        convert = cls(AssetReader(extensions=config.extensions))
        if config.source_root is not None:
            convert.set_source_root(config.source_root)
        if config.target_root is not None:
            convert.set_target_root(config.target_root)
        if config.target_path is not None:
            convert.set_target_asset_path(config.target_path)
        if config.probe:
            convert.set_probe_options(config.probe)
        for script in config.scripts:
            convert.add_model_script(script)
        return convert

    # ─────────────────────────────────────────────────────────────
    # COLLABORATORS
    # ─────────────────────────────────────────────────────────────

    @property
    def asset_reader(self) -> AssetReader:
        if self.source_root is None:
            logger.warning("No source root specified, using local directory.")
            self.set_source_root(".")
        return self.reader

    @property
    def asset_writer(self) -> AssetWriter:
        if self._writer is None:
            self._writer = AssetWriter()
            self._processors.append(self._writer)
        return self._writer

    @property
    def probe(self) -> Probe:
        if self._probe is None:
            self._probe = Probe()
            self._processors.insert(0, self._probe)
        return self._probe

    @property
    def processors(self) -> List[ModelProcessor]:
        return list(self._processors)

    @property
    def model_scripts(self) -> List[ModelScript]:
        return list(self._scripts)

    # ─────────────────────────────────────────────────────────────
    # SETTINGS
    # ─────────────────────────────────────────────────────────────

    def set_source_root(self, path: PathLike) -> None:
        path = Path(path)
        if not path.exists():
            raise InvalidArgumentError(f"Source root doesn't exist: {path}")
        if not path.is_dir():
            raise InvalidArgumentError(f"Source root is not a directory: {path}")
        self.reader.set_asset_root(path)
        self.source_root = self.reader.asset_root

    def set_target_root(self, path: PathLike) -> None:
        self.target_root = Path(path)
        self.asset_writer.set_target(self.target_root)

    def set_target_asset_path(self, path: Optional[str]) -> None:
        self.target_asset_path = path
        self.asset_writer.set_asset_path(path)

    def set_probe_options(self, options: str) -> None:
        self.probe_options = options
        self.probe.set_options(options)

    def add_model_script(self, script: Union[PathLike, ModelScript]) -> ModelScript:
        if not isinstance(script, ModelScript):
            script = ModelScript(self, str(script))
        self._scripts.append(script)
        self.add_model_processor(script)
        return script

    def add_model_processor(self, processor: ModelProcessor) -> None:
        """Add a processor. Processors always run before the writer."""
        if self._writer is None:
            self._processors.append(processor)
        else:
            self._processors.insert(self._processors.index(self._writer), processor)

    def clear_model_scripts(self) -> None:
        self._processors = [p for p in self._processors if p not in self._scripts]
        self._scripts.clear()

    # ─────────────────────────────────────────────────────────────
    # CONVERSION
    # ─────────────────────────────────────────────────────────────

    def convert(self, file: PathLike) -> ModelInfo:
        path = Path(file)
        if not path.exists():
            raise ResourceNotFoundError(f"File doesn't exist: {path}")
        logger.info("Convert: %s", path)
        model = self.asset_reader.load_model(path)

        info = ModelInfo(self.source_root, path.name, model)
        self.run_processors(info)
        return info

    def run_processors(self, info: ModelInfo) -> None:
        if not self._processors:
            logger.warning("No output configured, probing instead.")
            self._probe = Probe()
            self._processors.append(self._probe)
        logger.info("Processing: %s", info.model_name)
        for processor in self._processors:
            processor.apply(info)
