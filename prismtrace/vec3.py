"""
Three-component vectors backed by numpy.

The same type stands in for points, directions and linear RGB colors
(see the `Point3` and `Color` aliases). Instances are immutable; every
operation returns a new vector.
"""

from __future__ import annotations
from typing import Iterator, Union
import math
import numpy as np


class DegenerateVectorError(ArithmeticError):
    """Raised when a zero-length vector is normalized."""
    pass


class Vec3:
    """An immutable 3D vector.

    Components live in a private float64 array and are exposed read-only
    as `x`, `y`, `z` (or `r`, `g`, `b` when the vector is a color).
    """

    __slots__ = ('_data',)

    def __init__(self, x: float = 0.0, y: float = 0.0, z: float = 0.0):
        self._data = np.array((x, y, z), dtype=np.float64)

    @classmethod
    def from_array(cls, arr: np.ndarray) -> Vec3:
        """Create a Vec3 from a length-3 array. The array is copied."""
        vec = cls.__new__(cls)
        vec._data = np.array(arr, dtype=np.float64)
        return vec

    x = property(lambda self: float(self._data[0]))
    y = property(lambda self: float(self._data[1]))
    z = property(lambda self: float(self._data[2]))

    # Color channel names
    r = x
    g = y
    b = z

    def __repr__(self) -> str:
        x, y, z = self._data
        return f"Vec3({x:.4f}, {y:.4f}, {z:.4f})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Vec3):
            return NotImplemented
        return bool(np.allclose(self._data, other._data))

    def __hash__(self) -> int:
        return hash(self._data.tobytes())

    # Arithmetic accepts another Vec3 (componentwise) or a scalar.
    # Vec3 * Vec3 is how colors are attenuated.

    def __neg__(self) -> Vec3:
        return _wrap(-self._data)

    def __add__(self, other: Union[Vec3, float]) -> Vec3:
        return _wrap(self._data + _operand(other))

    __radd__ = __add__

    def __sub__(self, other: Union[Vec3, float]) -> Vec3:
        return _wrap(self._data - _operand(other))

    def __rsub__(self, other: float) -> Vec3:
        return _wrap(_operand(other) - self._data)

    def __mul__(self, other: Union[Vec3, float]) -> Vec3:
        return _wrap(self._data * _operand(other))

    __rmul__ = __mul__

    def __truediv__(self, other: Union[Vec3, float]) -> Vec3:
        return _wrap(self._data / _operand(other))

    def __getitem__(self, index: int) -> float:
        return float(self._data[index])

    def __iter__(self) -> Iterator[float]:
        return iter(self._data.tolist())

    def length(self) -> float:
        return math.sqrt(self.length_squared())

    def length_squared(self) -> float:
        return float(self._data @ self._data)

    def normalize(self) -> Vec3:
        """Unit vector with this direction.

        Raises:
            DegenerateVectorError: If the vector has zero length
        """
        magnitude = self.length()
        if magnitude == 0.0:
            raise DegenerateVectorError(f"Cannot normalize zero-length vector {self!r}")
        return _wrap(self._data / magnitude)

    def dot(self, other: Vec3) -> float:
        return float(self._data @ other._data)

    def cross(self, other: Vec3) -> Vec3:
        return _wrap(np.cross(self._data, other._data))

    def near_zero(self, epsilon: float = 1e-8) -> bool:
        """True when every component is within epsilon of zero."""
        return bool((np.abs(self._data) < epsilon).all())

    def to_array(self) -> np.ndarray:
        """Copy of the components as a float64 array."""
        return self._data.copy()

    @staticmethod
    def random(rng: np.random.Generator, min_val: float = 0.0, max_val: float = 1.0) -> Vec3:
        """Vector with components drawn uniformly from [min_val, max_val)."""
        return _wrap(rng.uniform(min_val, max_val, 3))

    @staticmethod
    def random_in_unit_sphere(rng: np.random.Generator) -> Vec3:
        """Rejection-sample a point strictly inside the unit ball."""
        while True:
            candidate = rng.uniform(-1.0, 1.0, 3)
            if candidate @ candidate < 1.0:
                return _wrap(candidate)

    @staticmethod
    def random_in_unit_disk(rng: np.random.Generator) -> Vec3:
        """Rejection-sample a point strictly inside the unit disk in the z=0 plane."""
        while True:
            x, y = rng.uniform(-1.0, 1.0, 2)
            if x * x + y * y < 1.0:
                return Vec3(x, y, 0.0)


def _operand(other: Union[Vec3, float]):
    return other._data if isinstance(other, Vec3) else other


def _wrap(data: np.ndarray) -> Vec3:
    # Takes ownership of a freshly computed array, no copy
    vec = Vec3.__new__(Vec3)
    vec._data = data
    return vec


# Convenience type aliases
Point3 = Vec3
Color = Vec3
