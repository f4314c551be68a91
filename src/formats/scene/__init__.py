"""Native scene (.scene) and material (.mat) file formats."""

from .scene_file import SceneExporter, SceneImporter, SCENE_EXTENSION, SCENE_FORMAT
from .material_file import MaterialExporter, load_material_file, MATERIAL_FORMAT

__all__ = [
    'SceneExporter',
    'SceneImporter',
    'SCENE_EXTENSION',
    'SCENE_FORMAT',
    'MaterialExporter',
    'load_material_file',
    'MATERIAL_FORMAT',
]
