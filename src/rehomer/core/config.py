"""
Converter configuration.

A ConvertConfig can be saved to and loaded from JSON. Command line flags
override the values read from a file.
"""

import json
import logging
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Union

from ..errors import InvalidArgumentError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "rehome.json"


@dataclass
class ConvertConfig:
    """Everything needed to set up a Convert."""

    source_root: Optional[str] = None
    target_root: Optional[str] = None
    target_path: Optional[str] = None

    # Script files, run in order after the probe and before the writer
    scripts: List[str] = field(default_factory=list)

    probe: Optional[str] = None

    # Model file extension -> loader name ("gltf", "scene")
    extensions: Dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> Dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict) -> "ConvertConfig":
        config = cls()
        for key, value in data.items():
            if hasattr(config, key):
                setattr(config, key, value)
            else:
                logger.warning("Unknown config entry: %s", key)
        return config

    def merged(self, **overrides) -> "ConvertConfig":
        """Copy of this config with every non-None override applied."""
        data = self.to_dict()
        for key, value in overrides.items():
            if value is None:
                continue
            if key == "scripts":
                data[key] = list(data[key]) + list(value)
            else:
                data[key] = value
        return ConvertConfig.from_dict(data)

    def save(self, filepath: Union[str, Path]) -> None:
        """Save the configuration to JSON."""
        with open(filepath, 'w', encoding='utf-8') as f:
            json.dump(self.to_dict(), f, indent=2)

    @classmethod
    def load(cls, filepath: Union[str, Path]) -> "ConvertConfig":
        """Load a configuration from JSON."""
        path = Path(filepath)
        if not path.is_file():
            raise InvalidArgumentError(f"Config file does not exist: {path}")
        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise InvalidArgumentError(f"Unreadable config file: {path}", cause=e) from e
        if not isinstance(data, dict):
            raise InvalidArgumentError(f"Config file must hold a JSON object: {path}")
        return cls.from_dict(data)
