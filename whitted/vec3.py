"""
Vector3 class for 3D math operations.

This is the fundamental building block of the ray tracer, used for:
- Points in 3D space
- Direction vectors
- RGB radiance values (non-negative, unclamped until tone mapping)
"""

from __future__ import annotations
import math
from typing import Optional, Union
import numpy as np


class Vec3:
    """A 3D vector class supporting common vector operations.

    Uses numpy internally for efficient computation while providing
    a clean, Pythonic API.
    """

    __slots__ = ('_data',)

    def __init__(self, x: float = 0.0, y: float = 0.0, z: float = 0.0):
        self._data = np.array([x, y, z], dtype=np.float64)

    @classmethod
    def from_array(cls, arr: np.ndarray) -> Vec3:
        """Create Vec3 from numpy array."""
        v = cls.__new__(cls)
        v._data = np.asarray(arr, dtype=np.float64)
        return v

    @property
    def x(self) -> float:
        return float(self._data[0])

    @property
    def y(self) -> float:
        return float(self._data[1])

    @property
    def z(self) -> float:
        return float(self._data[2])

    # Aliases for color operations
    @property
    def r(self) -> float:
        return self.x

    @property
    def g(self) -> float:
        return self.y

    @property
    def b(self) -> float:
        return self.z

    def __repr__(self) -> str:
        return f"Vec3({self.x:.4f}, {self.y:.4f}, {self.z:.4f})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Vec3):
            return NotImplemented
        return np.allclose(self._data, other._data)

    def __neg__(self) -> Vec3:
        return Vec3.from_array(-self._data)

    def __add__(self, other: Union[Vec3, float]) -> Vec3:
        if isinstance(other, Vec3):
            return Vec3.from_array(self._data + other._data)
        return Vec3.from_array(self._data + other)

    def __radd__(self, other: float) -> Vec3:
        return Vec3.from_array(other + self._data)

    def __sub__(self, other: Union[Vec3, float]) -> Vec3:
        if isinstance(other, Vec3):
            return Vec3.from_array(self._data - other._data)
        return Vec3.from_array(self._data - other)

    def __mul__(self, other: Union[Vec3, float]) -> Vec3:
        if isinstance(other, Vec3):
            return Vec3.from_array(self._data * other._data)
        return Vec3.from_array(self._data * other)

    def __rmul__(self, other: float) -> Vec3:
        return Vec3.from_array(other * self._data)

    def __truediv__(self, other: Union[Vec3, float]) -> Vec3:
        if isinstance(other, Vec3):
            return Vec3.from_array(self._data / other._data)
        return Vec3.from_array(self._data / other)

    def __getitem__(self, index: int) -> float:
        return float(self._data[index])

    def __iter__(self):
        return iter(self._data.tolist())

    def length(self) -> float:
        """Return the magnitude (length) of the vector."""
        return float(np.linalg.norm(self._data))

    def length_squared(self) -> float:
        """Return the squared magnitude (avoids sqrt for comparisons)."""
        return float(np.dot(self._data, self._data))

    def normalize(self) -> Vec3:
        """Return a unit vector in the same direction.

        A zero-length vector normalizes to the zero vector; callers that
        care must avoid it.
        """
        length = self.length()
        if length == 0:
            return Vec3(0, 0, 0)
        return Vec3.from_array(self._data / length)

    def dot(self, other: Vec3) -> float:
        """Compute dot product with another vector."""
        return float(np.dot(self._data, other._data))

    def cross(self, other: Vec3) -> Vec3:
        """Compute cross product with another vector."""
        return Vec3.from_array(np.cross(self._data, other._data))

    def is_black(self) -> bool:
        """True when every channel is exactly zero."""
        return not np.any(self._data)

    def to_array(self) -> np.ndarray:
        """Return the underlying numpy array (copy)."""
        return self._data.copy()


def reflect(direction: Vec3, normal: Vec3) -> Vec3:
    """Reflect a direction about a normal.

    The direction points AWAY from the surface (e.g. toward a light or the
    viewer), so the result is ``2(D·N)N - D``. Flip an incoming ray
    direction before calling this.
    """
    return normal * (2.0 * direction.dot(normal)) - direction


def refract(direction: Vec3, normal: Vec3, ior: float) -> Optional[Vec3]:
    """Refract a direction through a surface using Snell's law.

    Args:
        direction: Unit direction pointing INTO the surface
        normal: Outward unit surface normal
        ior: Index of refraction of the material behind the surface

    Returns:
        Normalized refracted direction, or None on total internal reflection
    """
    cos_i = direction.dot(normal)
    # Entering when the ray opposes the outward normal
    mu = 1.0 / ior if cos_i < 0 else ior

    sin_i2 = 1.0 - cos_i * cos_i
    if mu * mu * sin_i2 > 1.0:
        return None

    sin_r = mu * math.sqrt(max(sin_i2, 0.0))
    cos_r = math.sqrt(max(1.0 - sin_r * sin_r, 0.0))

    if cos_i > 0:
        out = direction * mu + normal * (-mu * cos_i + cos_r)
    else:
        out = direction * mu + normal * (-mu * cos_i - cos_r)
    return out.normalize()


# Convenience type aliases
Point3 = Vec3
Color = Vec3
