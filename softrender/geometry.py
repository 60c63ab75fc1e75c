import math
from dataclasses import dataclass
from typing import Sequence

from .errors import DimensionMismatch


# ============================================================
#  Math primitives
# ============================================================

class _VectorOps:
    """
    Arithmetic shared by Vec2 / Vec3 / Vec4.

    Note:
      - Vectors are immutable (frozen dataclasses), every operation returns
        a new object.
      - Vector-vector operations need the same dimension, otherwise
        DimensionMismatch is raised.
      - Components keep whatever numeric type they were built with, so the
        same classes serve as integer screen points and float positions.
    """
    __slots__ = ()

    def __iter__(self):
        return iter(tuple(getattr(self, name) for name in self.__match_args__))

    def __len__(self):
        return len(self.__match_args__)

    def __getitem__(self, i):
        return tuple(self)[i]

    def _check(self, o):
        if not isinstance(o, _VectorOps):
            return False
        if len(o) != len(self):
            raise DimensionMismatch(
                f"vector dimensions differ: {len(self)} vs {len(o)}")
        return True

    def __add__(self, o):
        if not self._check(o):
            return NotImplemented
        return type(self)(*(a + b for a, b in zip(self, o)))

    def __sub__(self, o):
        if not self._check(o):
            return NotImplemented
        return type(self)(*(a - b for a, b in zip(self, o)))

    def __mul__(self, o):
        """Scalar multiplication, or component-wise product with a vector."""
        if self._check(o):
            return type(self)(*(a * b for a, b in zip(self, o)))
        return type(self)(*(a * o for a in self))

    __rmul__ = __mul__

    def __truediv__(self, o):
        if self._check(o):
            return type(self)(*(a / b for a, b in zip(self, o)))
        return type(self)(*(a / o for a in self))

    def __neg__(self):
        return type(self)(*(-a for a in self))

    def dot(self, o) -> float:
        """Dot product (scalar product)."""
        self._check(o)
        return sum(a * b for a, b in zip(self, o))

    def norm(self) -> float:
        """Euclidean length."""
        return math.sqrt(self.dot(self))

    def normalize(self):
        """Return normalized vector (length=1), or the zero vector if length is ~0."""
        n = self.norm()
        if n <= 1e-12:
            return type(self)(*([0.0] * len(self)))
        return self * (1.0 / n)

    def to_int(self):
        """Round every component the way screen coordinates are snapped: int(x + 0.5)."""
        return type(self)(*(int(a + 0.5) for a in self))

    def to_float(self):
        return type(self)(*(float(a) for a in self))


@dataclass(frozen=True)
class Vec2(_VectorOps):
    """
    2D vector for texture coordinates (u, v) or screen points.
    """
    x: float
    y: float


@dataclass(frozen=True)
class Vec3(_VectorOps):
    """
    3D vector for positions and normals.

    Used in:
      - OBJ vertices (positions)
      - OBJ normals (vn)
      - light direction (normalized)
      - perspective-divided screen points (x, y, depth)
    """
    x: float
    y: float
    z: float

    def cross(self, o: "Vec3") -> "Vec3":
        """Cross product (vector product)."""
        self._check(o)
        return Vec3(
            self.y * o.z - self.z * o.y,
            self.z * o.x - self.x * o.z,
            self.x * o.y - self.y * o.x
        )

    __xor__ = cross


@dataclass(frozen=True)
class Vec4(_VectorOps):
    """
    4D homogeneous vector.
    Used for matrix multiplication in 3D transforms and projections.
    """
    x: float
    y: float
    z: float
    w: float


_BY_SIZE = {2: Vec2, 3: Vec3, 4: Vec4}


def vector(values: Sequence[float]):
    """Build the Vec2/Vec3/Vec4 matching len(values)."""
    cls = _BY_SIZE.get(len(values))
    if cls is None:
        raise DimensionMismatch(f"no vector type with {len(values)} components")
    return cls(*values)


def cross(a: Vec3, b: Vec3) -> Vec3:
    return a.cross(b)


def embed(v, n: int, fill: float = 1.0):
    """
    Lift v into an n-component vector, filling the extra slots with `fill`.

    embed(Vec3(x, y, z), 4) -> Vec4(x, y, z, 1.0)
    """
    if n < len(v):
        raise DimensionMismatch(f"cannot embed a {len(v)}-vector into {n} components")
    return vector(tuple(v) + (fill,) * (n - len(v)))


def proj(v, n: int):
    """
    Truncate v to its first n components.

    proj(Vec4(x, y, z, w), 2) -> Vec2(x, y)
    """
    if n > len(v):
        raise DimensionMismatch(f"cannot project a {len(v)}-vector onto {n} components")
    return vector(tuple(v)[:n])
