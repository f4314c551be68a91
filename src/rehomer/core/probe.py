"""
Probe - logs the structure of a loaded model.

Options (one letter each):
  b : show world bounds
  t : show translations
  r : show rotations
  s : show scales
  p : show all material parameters
  u : show user data
  d : list asset dependencies
  i : show texture image info (size, mode, format)
  A : all of the above
"""

import logging
from io import BytesIO
from typing import Optional

from PIL import Image, UnidentifiedImageError

from ..graph import Dependency, ModelInfo
from ..scene import Geometry, Material, Node, Spatial, Texture
from .processor import ModelProcessor

logger = logging.getLogger(__name__)

ALL_PROBE_OPTIONS = "btrspdui"


class Probe(ModelProcessor):
    """A model processor that logs information about the loaded model."""

    def __init__(self):
        self.show_bounds = False
        self.show_translation = False
        self.show_rotation = False
        self.show_scale = False
        self.show_all_material_parameters = False
        self.show_user_data = False
        self.show_dependencies = False
        self.show_image_info = False

    def set_options(self, options: str) -> None:
        for c in options:
            if c == 'A':
                self.set_options(ALL_PROBE_OPTIONS)
            elif c == 'b':
                self.show_bounds = True
            elif c == 't':
                self.show_translation = True
            elif c == 'r':
                self.show_rotation = True
            elif c == 's':
                self.show_scale = True
            elif c == 'p':
                self.show_all_material_parameters = True
            elif c == 'u':
                self.show_user_data = True
            elif c == 'd':
                self.show_dependencies = True
            elif c == 'i':
                self.show_image_info = True
            else:
                logger.warning("Unknown probe option: %s", c)

    def apply(self, info: ModelInfo) -> None:
        self.probe_spatial("", info.model_root, info)
        if self.show_dependencies:
            self.list_dependencies("", info)

    def list_dependencies(self, indent: str, info: ModelInfo) -> None:
        deps = info.get_dependencies()
        if not deps:
            return
        logger.info("%sAsset dependencies:", indent)
        for dep in sorted(deps):
            self.probe_dependency(indent + "  ", dep)

    def probe_dependency(self, indent: str, dep: Dependency) -> None:
        line = str(dep.key) if dep.source_file is None else str(dep.source_file)
        if dep.key.render() != dep.original_key.render():
            line += f" -> {dep.key}"
        if dep.instance_count > 1:
            line += f" (x{dep.instance_count})"
        logger.info("%s%s", indent, line)
        if self.show_image_info and isinstance(dep.asset, Texture):
            image = describe_image(dep.asset, dep.source_file)
            if image:
                logger.info("%s    image: %s", indent, image)

    def probe_spatial(self, indent: str, s: Spatial, info: ModelInfo) -> None:
        line = f"{type(s).__name__}({s.name or ''})"
        if s.key is not None:
            line += f" key:{s.key}"
        logger.info("%s%s", indent, line)
        self.write_attributes(indent + "   -> ", s)

        if isinstance(s, Node):
            for child in s.children:
                self.probe_spatial(indent + "  ", child, info)
        elif isinstance(s, Geometry) and s.material is not None:
            self.probe_material(indent + "      ", s.material, info)

    def write_attributes(self, indent: str, s: Spatial) -> None:
        if self.show_bounds and isinstance(s, Geometry):
            bounds = s.world_bounds()
            if bounds is not None:
                logger.info("%sworldBounds: min=%s max=%s", indent, bounds[0].tolist(), bounds[1].tolist())
        if self.show_translation:
            logger.info("%slocalTranslation: %s", indent, s.local_transform.translation.tolist())
        if self.show_rotation:
            logger.info("%slocalRotation: %s", indent, s.local_transform.rotation.tolist())
        if self.show_scale:
            logger.info("%slocalScale: %s", indent, s.local_transform.scale.tolist())
        if self.show_user_data and s.user_data:
            logger.info("%suserData:", indent)
            for name, value in s.user_data.items():
                logger.info("%s  %s: %r", indent, name, value)

    def probe_material(self, indent: str, m: Material, info: ModelInfo) -> None:
        line = repr(m)
        if m.key is not None:
            line += f"  key:{m.key}"
        logger.info("%s%s", indent, line)
        dep = info.get_dependency(m)
        if dep is not None and dep.source_file is not None:
            logger.info("%s  -> source:%s", indent, dep.source_file)

        if self.show_all_material_parameters:
            for param in m.params:
                logger.info("%s  %r", indent, param)
                if not param.is_texture:
                    continue
                tex_dep = info.get_dependency(param.value)
                if tex_dep is not None and tex_dep.source_file is not None:
                    logger.info("%s    -> source:%s", indent, tex_dep.source_file)
                if self.show_image_info:
                    image = describe_image(param.value, tex_dep.source_file if tex_dep else None)
                    if image:
                        logger.info("%s    image: %s", indent, image)


def describe_image(texture: Texture, source_file=None) -> Optional[str]:
    """Size/mode/format of a texture's image, or None when it can't be read."""
    try:
        if texture.image_data is not None:
            stream = BytesIO(texture.image_data)
        elif source_file is not None and source_file.is_file():
            stream = source_file
        else:
            return None
        with Image.open(stream) as img:
            return f"{img.width}x{img.height} {img.mode} {img.format}"
    except (UnidentifiedImageError, OSError) as e:
        logger.warning("Unreadable image for %r: %s", texture, e)
        return None
