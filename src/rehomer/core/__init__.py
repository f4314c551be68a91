"""
Conversion core: reading, writing, extraction and the pipeline around them.

Usage:
    from rehomer.core import Convert

    convert = Convert()
    convert.set_source_root("downloads/CoolModel")
    convert.set_target_root("assets")
    convert.set_target_asset_path("Models/CoolModel")
    info = convert.convert("downloads/CoolModel/thing.gltf")
"""

from .processor import ModelProcessor
from .asset_reader import AssetReader, MODEL_LOADERS, DEFAULT_EXTENSIONS
from .asset_writer import AssetWriter
from .extractor import SubtreeExtractor
from .report import ConversionReport, DependencyRecord
from .probe import Probe, ALL_PROBE_OPTIONS
from .model_assets import ModelAssets
from .model_script import ModelScript, load_script
from .config import ConvertConfig
from .convert import Convert
from .build_info import get_version

__all__ = [
    'ModelProcessor',
    'AssetReader', 'MODEL_LOADERS', 'DEFAULT_EXTENSIONS',
    'AssetWriter',
    'SubtreeExtractor',
    'ConversionReport', 'DependencyRecord',
    'Probe', 'ALL_PROBE_OPTIONS',
    'ModelAssets',
    'ModelScript', 'load_script',
    'ConvertConfig',
    'Convert',
    'get_version',
]
