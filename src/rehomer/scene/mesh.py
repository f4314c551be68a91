"""Geometry buffers."""

from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple

import numpy as np

POSITION = "Position"
NORMAL = "Normal"
TEXCOORD = "TexCoord"
INDEX = "Index"


@dataclass
class Mesh:
    """Named vertex buffers. Position is (N, 3) float32, Index is flat uint32."""
    buffers: Dict[str, np.ndarray] = field(default_factory=dict)
    mode: str = "triangles"

    def set_buffer(self, name: str, data) -> None:
        arr = np.asarray(data)
        if name == INDEX:
            arr = arr.astype(np.uint32).reshape(-1)
        else:
            arr = arr.astype(np.float32)
        self.buffers[name] = arr

    def get_buffer(self, name: str) -> Optional[np.ndarray]:
        return self.buffers.get(name)

    @property
    def vertex_count(self) -> int:
        positions = self.buffers.get(POSITION)
        return 0 if positions is None else int(positions.shape[0])

    @property
    def triangle_count(self) -> int:
        indices = self.buffers.get(INDEX)
        if indices is None:
            return self.vertex_count // 3
        return int(indices.shape[0]) // 3

    def bounds(self) -> Optional[Tuple[np.ndarray, np.ndarray]]:
        """(min, max) corners of the positions, or None for an empty mesh."""
        positions = self.buffers.get(POSITION)
        if positions is None or positions.size == 0:
            return None
        pts = positions.reshape(-1, 3)
        return pts.min(axis=0), pts.max(axis=0)

    def to_dict(self) -> dict:
        return {
            "mode": self.mode,
            "buffers": {
                name: {"dtype": str(arr.dtype), "shape": list(arr.shape), "data": arr.reshape(-1).tolist()}
                for name, arr in self.buffers.items()
            },
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Mesh":
        mesh = cls(mode=data.get("mode", "triangles"))
        for name, entry in data.get("buffers", {}).items():
            arr = np.asarray(entry["data"], dtype=entry.get("dtype", "float32"))
            shape = entry.get("shape")
            if shape:
                arr = arr.reshape(shape)
            mesh.buffers[name] = arr
        return mesh

    def __repr__(self) -> str:
        return f"Mesh(vertices={self.vertex_count}, triangles={self.triangle_count})"
