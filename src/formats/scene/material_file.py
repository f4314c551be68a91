"""
Material file (.mat) writer/reader.

A material file is JSON: the definition name, an optional display name and
an ordered parameter list. Texture parameters are written by key, so a
material file written after rehoming points at the rehomed textures.
"""

import base64
import json
import logging
from pathlib import Path
from typing import Any, Callable, Dict, Optional

import numpy as np

from rehomer.keys import MaterialKey, ResourceKey, key_from_dict
from rehomer.scene import Material, Texture, PARAM_TEXTURE2D

logger = logging.getLogger(__name__)

MATERIAL_FORMAT = "rehomer-material"
MATERIAL_VERSION = 1

TextureLoader = Callable[[ResourceKey], Texture]


def texture_to_dict(texture: Texture) -> Dict[str, Any]:
    if texture.key is not None:
        return {"key": texture.key.to_dict()}
    return {
        "embedded": base64.b64encode(texture.image_data or b"").decode("ascii"),
        "mime_type": texture.mime_type,
        "name": texture.name,
    }


def texture_from_dict(data: Dict[str, Any], load_texture: Optional[TextureLoader] = None) -> Texture:
    if "key" in data:
        key = key_from_dict(data["key"])
        if load_texture is not None:
            return load_texture(key)
        return Texture(key)
    return Texture(
        image_data=base64.b64decode(data.get("embedded", "")),
        mime_type=data.get("mime_type"),
        name=data.get("name"),
    )


def _plain_value(value: Any) -> Any:
    if isinstance(value, np.ndarray):
        return value.tolist()
    if isinstance(value, tuple):
        return list(value)
    if isinstance(value, np.generic):
        return value.item()
    return value


def material_to_dict(material: Material) -> Dict[str, Any]:
    params = []
    for param in material.params:
        if param.is_texture:
            value = texture_to_dict(param.value)
        else:
            value = _plain_value(param.value)
        params.append({"name": param.name, "type": param.type, "value": value})
    return {
        "definition": material.definition,
        "name": material.name,
        "params": params,
    }


def material_from_dict(data: Dict[str, Any], load_texture: Optional[TextureLoader] = None) -> Material:
    material = Material(data["definition"], data.get("name"))
    for entry in data.get("params", []):
        if entry["type"] == PARAM_TEXTURE2D:
            material.set_texture(entry["name"], texture_from_dict(entry["value"], load_texture))
        else:
            material.set_param(entry["name"], entry["type"], entry["value"])
    return material


class MaterialExporter:
    """Writes Material objects to .mat files."""

    def save(self, material: Material, path: Path) -> None:
        document = {
            "format": MATERIAL_FORMAT,
            "version": MATERIAL_VERSION,
            "material": material_to_dict(material),
        }
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(document, indent=2), encoding="utf-8")
        logger.debug("Saved material %r to %s", material, path)


def load_material_file(path: Path, key: Optional[MaterialKey] = None,
                       load_texture: Optional[TextureLoader] = None) -> Material:
    """Read a .mat file. The returned material carries key when given."""
    document = json.loads(Path(path).read_text(encoding="utf-8"))
    if document.get("format") != MATERIAL_FORMAT:
        raise ValueError(f"Not a material file: {path}")
    material = material_from_dict(document["material"], load_texture)
    material.key = key
    return material
