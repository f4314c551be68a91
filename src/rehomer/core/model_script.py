"""
ModelScript - runs a user Python script against each converted model.

The script is compiled once and executed per model with these globals:

  convert : the Convert instance running the conversion
  model   : the ModelInfo being converted
  assets  : a ModelAssets bound to the model
  reader  : the AssetReader
  logger  : a logger named after the script
"""

import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

from ..errors import ScriptError
from ..graph import ModelInfo
from .model_assets import ModelAssets
from .processor import ModelProcessor

logger = logging.getLogger(__name__)


def load_script(script: Union[str, Path]) -> str:
    """Read a script file as UTF-8 text."""
    path = Path(script)
    if not path.is_file():
        raise ScriptError(f"Unable to load script file: {script}")
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ScriptError(f"Error loading script: {script}", cause=e) from e


class ModelScript(ModelProcessor):
    """A model processor backed by a Python script."""

    def __init__(self, convert, script_name: str, script: Optional[str] = None):
        self.convert = convert
        self.script_name = str(script_name)
        self.script = script if script is not None else load_script(script_name)
        try:
            self.code = compile(self.script, self.script_name, "exec")
        except SyntaxError as e:
            raise ScriptError(f"Error compiling: {self.script_name}", cause=e) from e

    def bindings(self, info: ModelInfo) -> Dict[str, Any]:
        reader = self.convert.asset_reader
        return {
            '__name__': Path(self.script_name).stem,
            'convert': self.convert,
            'model': info,
            'assets': ModelAssets(info, reader),
            'reader': reader,
            'logger': logging.getLogger(f"script.{Path(self.script_name).stem}"),
        }

    def apply(self, info: ModelInfo) -> None:
        logger.info("Running script: %s against: %s", self.script_name, info.model_name)
        try:
            exec(self.code, self.bindings(info))
        except Exception as e:
            raise ScriptError(
                f"Error running script: {self.script_name} against: {info.model_name}", cause=e) from e

    def __repr__(self) -> str:
        return f"ModelScript({self.script_name})"
