"""
Scene file (.scene) writer/reader.

JSON document holding one spatial tree. Materials with a key are written as
references; materials without one are written inline. Link nodes are written
as their linked keys only: their resolved children never go into the file,
so loading a scene always goes back to the linked files.
"""

import json
import logging
from pathlib import Path
from typing import Any, Callable, Dict, Optional

from rehomer.keys import MaterialKey, ModelKey, key_from_dict
from rehomer.scene import Geometry, LinkNode, Material, Mesh, Node, Spatial, Transform
from .material_file import MaterialExporter, TextureLoader, material_from_dict, material_to_dict

logger = logging.getLogger(__name__)

SCENE_FORMAT = "rehomer-scene"
SCENE_VERSION = 1
SCENE_EXTENSION = "scene"

MaterialLoader = Callable[[MaterialKey], Material]


class SceneExporter:
    """
    Writes spatial trees to .scene files and materials to .mat files.

    This is the persistence side used by the asset writer.
    """

    def __init__(self):
        self._materials = MaterialExporter()

    def save(self, spatial: Spatial, path: Path) -> None:
        document = {
            "format": SCENE_FORMAT,
            "version": SCENE_VERSION,
            "root": spatial_to_dict(spatial),
        }
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(document, indent=1), encoding="utf-8")
        logger.debug("Saved scene %r to %s", spatial, path)

    def save_material(self, material: Material, path: Path) -> None:
        self._materials.save(material, path)


def spatial_to_dict(spatial: Spatial) -> Dict[str, Any]:
    data: Dict[str, Any] = {
        "type": "spatial",
        "name": spatial.name,
        "transform": spatial.local_transform.to_dict(),
    }
    if spatial.user_data:
        data["user_data"] = spatial.user_data

    if isinstance(spatial, LinkNode):
        data["type"] = "link"
        data["linked"] = [key.to_dict() for key in spatial.linked_keys]
    elif isinstance(spatial, Node):
        data["type"] = "node"
        data["children"] = [spatial_to_dict(child) for child in spatial.children]
    elif isinstance(spatial, Geometry):
        data["type"] = "geometry"
        data["mesh"] = spatial.mesh.to_dict()
        if spatial.material is not None:
            data["material"] = _material_ref(spatial.material)
    return data


def _material_ref(material: Material) -> Dict[str, Any]:
    if material.key is not None:
        return {"ref": material.key.to_dict()}
    return {"inline": material_to_dict(material)}


class SceneImporter:
    """
    Reads .scene files back into spatial trees.

    Material references resolve through load_material; texture keys through
    load_texture. Materials shared by reference come back as one object when
    load_material caches.
    """

    def __init__(self, load_material: Optional[MaterialLoader] = None,
                 load_texture: Optional[TextureLoader] = None):
        self.load_material = load_material
        self.load_texture = load_texture

    def load(self, path: Path, key: Optional[ModelKey] = None) -> Spatial:
        document = json.loads(Path(path).read_text(encoding="utf-8"))
        if document.get("format") != SCENE_FORMAT:
            raise ValueError(f"Not a scene file: {path}")
        root = self.spatial_from_dict(document["root"])
        root.key = key
        return root

    def spatial_from_dict(self, data: Dict[str, Any]) -> Spatial:
        kind = data.get("type", "spatial")
        name = data.get("name")
        if kind == "link":
            spatial = LinkNode(name)
            for entry in data.get("linked", []):
                spatial.add_linked_key(key_from_dict(entry))
        elif kind == "node":
            spatial = Node(name)
            for child in data.get("children", []):
                spatial.attach_child(self.spatial_from_dict(child))
        elif kind == "geometry":
            spatial = Geometry(name, Mesh.from_dict(data.get("mesh", {})))
            if "material" in data:
                spatial.material = self._material(data["material"])
        else:
            spatial = Spatial(name)
        spatial.local_transform = Transform.from_dict(data.get("transform", {}))
        spatial.user_data = dict(data.get("user_data", {}))
        return spatial

    def _material(self, ref: Dict[str, Any]) -> Material:
        if "ref" in ref:
            key = key_from_dict(ref["ref"])
            if self.load_material is None:
                raise ValueError(f"No material loader for referenced material: {key}")
            return self.load_material(key)
        return material_from_dict(ref["inline"], self.load_texture)
