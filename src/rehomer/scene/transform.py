"""Local transforms: translation, rotation (quaternion x, y, z, w) and scale."""

from dataclasses import dataclass, field
from typing import Iterable

import numpy as np


def _vec(values, size: int, default: float) -> np.ndarray:
    if values is None:
        return np.full(size, default, dtype=np.float64)
    arr = np.asarray(values, dtype=np.float64).reshape(size)
    return arr.copy()


def quat_multiply(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    """Hamilton product of two (x, y, z, w) quaternions."""
    ax, ay, az, aw = a
    bx, by, bz, bw = b
    return np.array([
        aw * bx + ax * bw + ay * bz - az * by,
        aw * by - ax * bz + ay * bw + az * bx,
        aw * bz + ax * by - ay * bx + az * bw,
        aw * bw - ax * bx - ay * by - az * bz,
    ])


def quat_to_matrix(q: np.ndarray) -> np.ndarray:
    """3x3 rotation matrix for a unit (x, y, z, w) quaternion."""
    x, y, z, w = q
    return np.array([
        [1 - 2 * (y * y + z * z), 2 * (x * y - z * w), 2 * (x * z + y * w)],
        [2 * (x * y + z * w), 1 - 2 * (x * x + z * z), 2 * (y * z - x * w)],
        [2 * (x * z - y * w), 2 * (y * z + x * w), 1 - 2 * (x * x + y * y)],
    ])


def matrix_to_quat(m: np.ndarray) -> np.ndarray:
    """(x, y, z, w) quaternion for a 3x3 rotation matrix."""
    trace = m[0, 0] + m[1, 1] + m[2, 2]
    if trace > 0:
        s = 0.5 / np.sqrt(trace + 1.0)
        w = 0.25 / s
        x = (m[2, 1] - m[1, 2]) * s
        y = (m[0, 2] - m[2, 0]) * s
        z = (m[1, 0] - m[0, 1]) * s
    elif m[0, 0] > m[1, 1] and m[0, 0] > m[2, 2]:
        s = 2.0 * np.sqrt(1.0 + m[0, 0] - m[1, 1] - m[2, 2])
        w = (m[2, 1] - m[1, 2]) / s
        x = 0.25 * s
        y = (m[0, 1] + m[1, 0]) / s
        z = (m[0, 2] + m[2, 0]) / s
    elif m[1, 1] > m[2, 2]:
        s = 2.0 * np.sqrt(1.0 + m[1, 1] - m[0, 0] - m[2, 2])
        w = (m[0, 2] - m[2, 0]) / s
        x = (m[0, 1] + m[1, 0]) / s
        y = 0.25 * s
        z = (m[1, 2] + m[2, 1]) / s
    else:
        s = 2.0 * np.sqrt(1.0 + m[2, 2] - m[0, 0] - m[1, 1])
        w = (m[1, 0] - m[0, 1]) / s
        x = (m[0, 2] + m[2, 0]) / s
        y = (m[1, 2] + m[2, 1]) / s
        z = 0.25 * s
    q = np.array([x, y, z, w])
    return q / np.linalg.norm(q)


@dataclass
class Transform:
    """
    A TRS transform.

    Applying it to a point scales, then rotates, then translates.
    """
    translation: np.ndarray = field(default_factory=lambda: np.zeros(3))
    rotation: np.ndarray = field(default_factory=lambda: np.array([0.0, 0.0, 0.0, 1.0]))
    scale: np.ndarray = field(default_factory=lambda: np.ones(3))

    def __post_init__(self):
        self.translation = _vec(self.translation, 3, 0.0)
        self.rotation = _vec(self.rotation, 4, 0.0) if self.rotation is not None else np.array([0.0, 0.0, 0.0, 1.0])
        self.scale = _vec(self.scale, 3, 1.0)

    @classmethod
    def identity(cls) -> "Transform":
        return cls()

    @classmethod
    def from_matrix(cls, matrix: Iterable[float]) -> "Transform":
        """
        Decompose a 4x4 matrix given as 16 column-major floats (glTF order).

        Shear is not representable and is dropped.
        """
        m = np.asarray(list(matrix), dtype=np.float64).reshape(4, 4).T
        translation = m[:3, 3].copy()
        basis = m[:3, :3]
        scale = np.linalg.norm(basis, axis=0)
        if np.linalg.det(basis) < 0:
            scale[0] = -scale[0]
        safe = np.where(scale == 0, 1.0, scale)
        rotation = matrix_to_quat(basis / safe)
        return cls(translation, rotation, scale)

    def copy(self) -> "Transform":
        return Transform(self.translation.copy(), self.rotation.copy(), self.scale.copy())

    def is_identity(self, tolerance: float = 1e-9) -> bool:
        return (np.allclose(self.translation, 0.0, atol=tolerance)
                and np.allclose(self.scale, 1.0, atol=tolerance)
                and (np.allclose(self.rotation, [0, 0, 0, 1], atol=tolerance)
                     or np.allclose(self.rotation, [0, 0, 0, -1], atol=tolerance)))

    def to_matrix(self) -> np.ndarray:
        """4x4 row-major matrix."""
        m = np.identity(4)
        m[:3, :3] = quat_to_matrix(self.rotation) * self.scale
        m[:3, 3] = self.translation
        return m

    def combine_with_parent(self, parent: "Transform") -> "Transform":
        """World transform of a child with this local transform under parent."""
        scale = parent.scale * self.scale
        rotation = quat_multiply(parent.rotation, self.rotation)
        translation = parent.transform_point(self.translation)
        return Transform(translation, rotation, scale)

    def transform_point(self, point) -> np.ndarray:
        p = np.asarray(point, dtype=np.float64) * self.scale
        return quat_to_matrix(self.rotation) @ p + self.translation

    def transform_points(self, points: np.ndarray) -> np.ndarray:
        """Transform an (N, 3) array of points."""
        pts = np.asarray(points, dtype=np.float64).reshape(-1, 3) * self.scale
        return pts @ quat_to_matrix(self.rotation).T + self.translation

    def to_dict(self) -> dict:
        return {
            "translation": self.translation.tolist(),
            "rotation": self.rotation.tolist(),
            "scale": self.scale.tolist(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Transform":
        return cls(data.get("translation"), data.get("rotation"), data.get("scale"))

    def __eq__(self, other) -> bool:
        if not isinstance(other, Transform):
            return NotImplemented
        return (np.allclose(self.translation, other.translation)
                and np.allclose(self.rotation, other.rotation)
                and np.allclose(self.scale, other.scale))

    def __repr__(self) -> str:
        return (f"Transform(t={self.translation.tolist()}, "
                f"r={self.rotation.tolist()}, s={self.scale.tolist()})")
