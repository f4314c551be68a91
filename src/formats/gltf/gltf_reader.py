"""
glTF 2.0 reader - builds a scene graph from .gltf / .glb files.

Supported:
  - Node hierarchy with TRS or matrix transforms
  - Meshes (one Geometry per primitive: positions, normals, uvs, indices)
  - PBR metallic-roughness materials with texture parameters
  - Textures by relative uri (become TextureKeys), or embedded
    (data uri / bufferView images, which carry no key)
  - extras on nodes and meshes (become user data)

Materials and textures are created once per glTF index, so primitives sharing
a material share one Material object.
"""

import base64
import json
import logging
from pathlib import Path
from typing import Dict, List, Optional, Tuple
from urllib.parse import unquote

import numpy as np

from rehomer.keys import ModelKey, TextureKey
from rehomer.scene import (
    Geometry, Material, Mesh, Node, Texture, Transform,
    POSITION, NORMAL, TEXCOORD, INDEX,
    PARAM_BOOLEAN, PARAM_COLOR, PARAM_FLOAT, PARAM_VECTOR3,
)
from utils.binary import IoBuffer
from utils.paths import join_asset_path
from .extras import apply_extras

logger = logging.getLogger(__name__)

GLB_MAGIC = "glTF"
GLB_CHUNK_JSON = "JSON"
GLB_CHUNK_BIN = "BIN"

PBR_DEFINITION = "PBRLighting"

COMPONENT_TYPES = {
    5120: np.int8,
    5121: np.uint8,
    5122: np.int16,
    5123: np.uint16,
    5125: np.uint32,
    5126: np.float32,
}

TYPE_SIZES = {
    "SCALAR": 1,
    "VEC2": 2,
    "VEC3": 3,
    "VEC4": 4,
    "MAT2": 4,
    "MAT3": 9,
    "MAT4": 16,
}

ATTRIBUTES = {
    "POSITION": POSITION,
    "NORMAL": NORMAL,
    "TEXCOORD_0": TEXCOORD,
}

PRIMITIVE_MODES = {0: "points", 1: "lines", 4: "triangles", 5: "triangle_strip", 6: "triangle_fan"}


class GltfError(ValueError):
    """Malformed glTF content."""
    pass


def read_glb(data: bytes) -> Tuple[dict, Optional[bytes]]:
    """Split a GLB container into its JSON document and BIN chunk."""
    buf = IoBuffer.from_bytes(data)
    magic = buf.read_tag(4)
    if magic != GLB_MAGIC:
        raise GltfError(f"Bad GLB magic: {magic!r}")
    version = buf.read_uint32()
    if version != 2:
        raise GltfError(f"Unsupported GLB version: {version}")
    buf.read_uint32()  # total length

    document = None
    binary = None
    while buf.has_bytes(8):
        length = buf.read_uint32()
        chunk_type = buf.read_tag(4)
        payload = buf.read_bytes(length)
        if chunk_type == GLB_CHUNK_JSON:
            document = json.loads(payload.decode("utf-8"))
        elif chunk_type == GLB_CHUNK_BIN and binary is None:
            binary = payload
        else:
            logger.debug("Skipping GLB chunk %r", chunk_type)
    if document is None:
        raise GltfError("GLB has no JSON chunk")
    return document, binary


def decode_data_uri(uri: str) -> Tuple[bytes, Optional[str]]:
    header, _, payload = uri.partition(",")
    mime = header[5:].split(";")[0] or None
    if ";base64" in header:
        return base64.b64decode(payload), mime
    return unquote(payload).encode("latin-1"), mime


class GltfLoader:
    """
    Loads one glTF model.

    asset_path is the model's path relative to the asset root. Texture keys
    are resolved relative to its folder.
    """

    def load(self, path: Path, asset_path: Optional[str] = None) -> Node:
        path = Path(path)
        raw = path.read_bytes()
        if raw[:4] == GLB_MAGIC.encode("ascii"):
            document, binary = read_glb(raw)
        else:
            document, binary = json.loads(raw.decode("utf-8")), None

        asset_path = asset_path or path.name
        folder = asset_path.rpartition("/")[0]
        context = _LoadContext(document, path.parent, folder, binary)
        root = context.build_scene(path.name)
        root.key = ModelKey.parse(asset_path)
        return root


class _LoadContext:
    """Per-load state: decoded buffers and shared material/texture objects."""

    def __init__(self, document: dict, base_dir: Path, asset_folder: str, binary: Optional[bytes]):
        self.doc = document
        self.base_dir = base_dir
        self.asset_folder = asset_folder
        self.binary = binary
        self._buffers: Dict[int, bytes] = {}
        self._materials: Dict[int, Material] = {}
        self._textures: Dict[int, Texture] = {}

    # ─────────────────────────────────────────────────────────────
    # SCENE / NODES
    # ─────────────────────────────────────────────────────────────

    def build_scene(self, default_name: str) -> Node:
        scenes = self.doc.get("scenes", [])
        scene_index = self.doc.get("scene", 0)
        if scenes:
            scene = scenes[scene_index]
            root_nodes = scene.get("nodes", [])
            name = scene.get("name") or default_name
        else:
            # No scene list: every node that is nobody's child is a root
            children = {c for n in self.doc.get("nodes", []) for c in n.get("children", [])}
            root_nodes = [i for i in range(len(self.doc.get("nodes", []))) if i not in children]
            name = default_name
            scene = {}

        root = Node(name)
        for index in root_nodes:
            root.attach_child(self.build_node(index))
        apply_extras(root, scene.get("extras"))
        return root

    def build_node(self, index: int) -> Node:
        data = self.doc["nodes"][index]
        node = Node(data.get("name") or f"node{index}")
        if "matrix" in data:
            node.local_transform = Transform.from_matrix(data["matrix"])
        else:
            node.local_transform = Transform(
                data.get("translation"), data.get("rotation"), data.get("scale"))

        if "mesh" in data:
            for geometry in self.build_mesh(data["mesh"], node.name):
                node.attach_child(geometry)

        for child in data.get("children", []):
            node.attach_child(self.build_node(child))

        apply_extras(node, data.get("extras"))
        return node

    def build_mesh(self, index: int, node_name: str) -> List[Geometry]:
        data = self.doc["meshes"][index]
        base_name = data.get("name") or node_name
        geometries = []
        for i, primitive in enumerate(data.get("primitives", [])):
            mesh = Mesh(mode=PRIMITIVE_MODES.get(primitive.get("mode", 4), "triangles"))
            for attribute, buffer_name in ATTRIBUTES.items():
                if attribute in primitive.get("attributes", {}):
                    mesh.set_buffer(buffer_name, self.read_accessor(primitive["attributes"][attribute]))
            if "indices" in primitive:
                mesh.set_buffer(INDEX, self.read_accessor(primitive["indices"]))

            material = None
            if "material" in primitive:
                material = self.material(primitive["material"])
            name = base_name if len(data.get("primitives", [])) == 1 else f"{base_name}_{i}"
            geometries.append(Geometry(name, mesh, material))

        apply_extras(geometries, data.get("extras"))
        return geometries

    # ─────────────────────────────────────────────────────────────
    # BUFFERS / ACCESSORS
    # ─────────────────────────────────────────────────────────────

    def buffer(self, index: int) -> bytes:
        if index in self._buffers:
            return self._buffers[index]
        data = self.doc["buffers"][index]
        uri = data.get("uri")
        if uri is None:
            if self.binary is None:
                raise GltfError(f"Buffer {index} has no uri and there is no GLB binary chunk")
            content = self.binary
        elif uri.startswith("data:"):
            content, _ = decode_data_uri(uri)
        else:
            content = (self.base_dir / unquote(uri)).read_bytes()
        self._buffers[index] = content
        return content

    def buffer_view(self, index: int) -> bytes:
        view = self.doc["bufferViews"][index]
        start = view.get("byteOffset", 0)
        return self.buffer(view["buffer"])[start:start + view["byteLength"]]

    def read_accessor(self, index: int) -> np.ndarray:
        accessor = self.doc["accessors"][index]
        dtype = np.dtype(COMPONENT_TYPES[accessor["componentType"]])
        components = TYPE_SIZES[accessor["type"]]
        count = accessor["count"]

        if "bufferView" not in accessor:
            return np.zeros((count, components), dtype=dtype).squeeze()

        view = self.doc["bufferViews"][accessor["bufferView"]]
        data = self.buffer_view(accessor["bufferView"])
        offset = accessor.get("byteOffset", 0)
        item_size = dtype.itemsize * components
        stride = view.get("byteStride") or item_size

        if stride == item_size:
            arr = np.frombuffer(data, dtype=dtype, count=count * components, offset=offset)
        else:
            raw = np.frombuffer(data, dtype=np.uint8, count=stride * (count - 1) + item_size, offset=offset)
            rows = np.lib.stride_tricks.as_strided(raw, shape=(count, item_size), strides=(stride, 1))
            arr = rows.copy().view(dtype)
        arr = arr.reshape(count, components)
        return arr[:, 0].copy() if components == 1 else arr.copy()

    # ─────────────────────────────────────────────────────────────
    # MATERIALS / TEXTURES
    # ─────────────────────────────────────────────────────────────

    def material(self, index: int) -> Material:
        if index in self._materials:
            return self._materials[index]
        data = self.doc["materials"][index]
        material = Material(PBR_DEFINITION, data.get("name") or f"material{index}")
        pbr = data.get("pbrMetallicRoughness", {})

        material.set_param("BaseColor", PARAM_COLOR, pbr.get("baseColorFactor", [1.0, 1.0, 1.0, 1.0]))
        material.set_param("Metallic", PARAM_FLOAT, pbr.get("metallicFactor", 1.0))
        material.set_param("Roughness", PARAM_FLOAT, pbr.get("roughnessFactor", 1.0))
        self._texture_param(material, "BaseColorMap", pbr.get("baseColorTexture"))
        self._texture_param(material, "MetallicRoughnessMap", pbr.get("metallicRoughnessTexture"))
        self._texture_param(material, "NormalMap", data.get("normalTexture"))
        self._texture_param(material, "LightMap", data.get("occlusionTexture"))
        self._texture_param(material, "EmissiveMap", data.get("emissiveTexture"))
        if "emissiveFactor" in data:
            material.set_param("Emissive", PARAM_VECTOR3, data["emissiveFactor"])
        if data.get("doubleSided"):
            material.set_param("DoubleSided", PARAM_BOOLEAN, True)
        if data.get("alphaMode") == "MASK":
            material.set_param("AlphaDiscardThreshold", PARAM_FLOAT, data.get("alphaCutoff", 0.5))

        self._materials[index] = material
        return material

    def _texture_param(self, material: Material, name: str, info: Optional[dict]) -> None:
        if not info or "index" not in info:
            return
        material.set_texture(name, self.texture(info["index"]))

    def texture(self, index: int) -> Texture:
        if index in self._textures:
            return self._textures[index]
        data = self.doc["textures"][index]
        source = data.get("source")
        if source is None:
            raise GltfError(f"Texture {index} has no image source")
        image = self.doc["images"][source]
        uri = image.get("uri")

        if uri is not None and not uri.startswith("data:"):
            key = TextureKey.parse(join_asset_path(self.asset_folder, unquote(uri)), flip_y=False)
            texture = Texture(key, name=image.get("name"))
        elif uri is not None:
            content, mime = decode_data_uri(uri)
            texture = Texture(image_data=content, mime_type=image.get("mimeType") or mime,
                              name=image.get("name"))
        else:
            texture = Texture(image_data=self.buffer_view(image["bufferView"]),
                              mime_type=image.get("mimeType"), name=image.get("name"))

        self._textures[index] = texture
        return texture
