"""glTF 2.0 (.gltf / .glb) reader."""

from .gltf_reader import GltfLoader, GltfError, read_glb
from .extras import apply_extras

__all__ = ['GltfLoader', 'GltfError', 'read_glb', 'apply_extras']
