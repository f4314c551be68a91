"""Minimal scene graph: nodes, geometry, materials, textures."""

from .transform import Transform
from .mesh import Mesh, POSITION, NORMAL, TEXCOORD, INDEX
from .material import (
    SmartAsset, Texture, Material, MatParam,
    PARAM_FLOAT, PARAM_INT, PARAM_BOOLEAN, PARAM_VECTOR2, PARAM_VECTOR3,
    PARAM_VECTOR4, PARAM_COLOR, PARAM_TEXTURE2D,
)
from .spatial import Spatial, Node, Geometry, LinkNode, find_all, find_first

__all__ = [
    'Transform', 'Mesh', 'POSITION', 'NORMAL', 'TEXCOORD', 'INDEX',
    'SmartAsset', 'Texture', 'Material', 'MatParam',
    'PARAM_FLOAT', 'PARAM_INT', 'PARAM_BOOLEAN', 'PARAM_VECTOR2', 'PARAM_VECTOR3',
    'PARAM_VECTOR4', 'PARAM_COLOR', 'PARAM_TEXTURE2D',
    'Spatial', 'Node', 'Geometry', 'LinkNode', 'find_all', 'find_first',
]
