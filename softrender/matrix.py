from typing import List, Optional, Sequence

import numpy as np

from .errors import DimensionMismatch, SingularMatrix
from .geometry import Vec4, _VectorOps, vector


class Matrix:
    """
    M x N dense matrix (row-major, list of row lists).

    Used for:
      - general linear algebra (determinant, adjugate, inverse)
      - the barycentric solve (3x3)
      - base class of Mat4, the fixed-shape transform matrix

    Element access mirrors the usual notation: m[i][j] reads and writes
    row i, column j.

    Multiplication:
      - Matrix @ Matrix   => Matrix (left.n must equal right.m)
      - Matrix @ Vec2/3/4 => vector of size m
      - Matrix @ list     => list of size m
      - Matrix * scalar   => Matrix
    """
    def __init__(self, m: int, n: int, rows: Optional[List[List[float]]] = None):
        self.m = m
        self.n = n
        if rows is None:
            rows = [[0.0] * n for _ in range(m)]
        elif len(rows) != m or any(len(r) != n for r in rows):
            raise DimensionMismatch(f"rows do not form a {m}x{n} matrix")
        self.rows = rows

    @classmethod
    def from_rows(cls, rows: Sequence[Sequence[float]]) -> "Matrix":
        if not rows:
            raise DimensionMismatch("cannot create a matrix from empty data")
        data = [list(r) for r in rows]
        return Matrix(len(data), len(data[0]), data)

    @classmethod
    def from_flat(cls, m: int, n: int, values: Sequence[float]) -> "Matrix":
        if m * n != len(values):
            raise DimensionMismatch(f"{len(values)} values cannot fill a {m}x{n} matrix")
        return Matrix(m, n, [list(values[i * n:(i + 1) * n]) for i in range(m)])

    @classmethod
    def identity(cls, size: int) -> "Matrix":
        """Create identity matrix."""
        r = cls(size, size)
        for i in range(size):
            r.rows[i][i] = 1.0
        return r

    @property
    def shape(self):
        return self.m, self.n

    def __getitem__(self, i: int) -> List[float]:
        return self.rows[i]

    def __setitem__(self, i: int, row: Sequence[float]):
        if len(row) != self.n:
            raise DimensionMismatch(f"row of length {len(row)} in a {self.m}x{self.n} matrix")
        self.rows[i] = list(row)

    def col(self, j: int) -> List[float]:
        return [self.rows[i][j] for i in range(self.m)]

    def set_col(self, j: int, values: Sequence[float]):
        """Overwrite column j with the first m entries of values."""
        values = list(values)
        if len(values) < self.m:
            raise DimensionMismatch(f"column of length {len(values)} in a {self.m}x{self.n} matrix")
        for i in range(self.m):
            self.rows[i][j] = values[i]

    def transpose(self) -> "Matrix":
        return Matrix(self.n, self.m, [self.col(j) for j in range(self.n)])

    def submatrix(self, row: int, col: int) -> "Matrix":
        """Copy of the matrix with one row and one column removed."""
        return Matrix(self.m - 1, self.n - 1, [
            [v for j, v in enumerate(r) if j != col]
            for i, r in enumerate(self.rows) if i != row
        ])

    def cofactor(self, row: int, col: int) -> float:
        minor = self.submatrix(row, col).det()
        return minor if (row + col) % 2 == 0 else -minor

    def det(self) -> float:
        """
        Determinant by cofactor expansion along row 0.

        Note:
          Recursive and exponential in the size; fine for the 2x2..4x4
          matrices this renderer builds.
        """
        if self.m != self.n:
            raise DimensionMismatch(f"determinant of a non-square {self.m}x{self.n} matrix")
        if self.m == 1:
            return self.rows[0][0]
        if self.m == 2:
            return self.rows[0][0] * self.rows[1][1] - self.rows[0][1] * self.rows[1][0]
        return sum(self.rows[0][j] * self.cofactor(0, j) for j in range(self.n))

    def adjugate(self) -> "Matrix":
        """Matrix of cofactors (not transposed)."""
        return Matrix(self.m, self.n, [
            [self.cofactor(i, j) for j in range(self.n)] for i in range(self.m)
        ])

    def invert_transpose(self) -> "Matrix":
        """
        (M^-1)^T, computed as cofactors / det.

        This is what transforms surface normals correctly when M scales
        the axes non-uniformly.
        """
        d = self.det()
        if abs(d) < 1e-12:
            raise SingularMatrix(f"cannot invert {self.m}x{self.n} matrix with zero determinant")
        adj = self.adjugate()
        return self._like(self.m, self.n, [[v / d for v in r] for r in adj.rows])

    def invert(self) -> "Matrix":
        return self.invert_transpose().transpose()

    @classmethod
    def _like(cls, m: int, n: int, rows):
        return Matrix(m, n, rows)

    def __matmul__(self, o):
        if isinstance(o, Matrix):
            if self.n != o.m:
                raise DimensionMismatch(
                    f"cannot multiply {self.m}x{self.n} by {o.m}x{o.n}")
            cols = [o.col(j) for j in range(o.n)]
            rows = [[sum(a * b for a, b in zip(r, c)) for c in cols] for r in self.rows]
            if isinstance(self, Mat4) and isinstance(o, Mat4):
                return Mat4(rows)
            return Matrix(self.m, o.n, rows)
        if isinstance(o, _VectorOps):
            return vector(self._mul_seq(tuple(o)))
        if isinstance(o, (list, tuple)):
            return self._mul_seq(o)
        return NotImplemented

    def _mul_seq(self, v: Sequence[float]) -> List[float]:
        if self.n != len(v):
            raise DimensionMismatch(
                f"cannot multiply {self.m}x{self.n} matrix by vector of length {len(v)}")
        return [sum(a * b for a, b in zip(r, v)) for r in self.rows]

    def __mul__(self, k: float) -> "Matrix":
        return self._like(self.m, self.n, [[v * k for v in r] for r in self.rows])

    def __eq__(self, o):
        if not isinstance(o, Matrix):
            return NotImplemented
        return self.shape == o.shape and self.rows == o.rows

    def allclose(self, o: "Matrix", tol: float = 1e-9) -> bool:
        return self.shape == o.shape and bool(np.allclose(self.to_numpy(), o.to_numpy(), atol=tol))

    def to_numpy(self) -> np.ndarray:
        return np.array(self.rows, dtype=np.float64)

    def __repr__(self):
        return f"{type(self).__name__}({self.rows!r})"

    def __str__(self):
        return "\n".join("\t".join(f"{v: .6f}" for v in r) for r in self.rows)


class Mat4(Matrix):
    """
    4x4 matrix (row-major).

    We use Mat4 for:
      - ModelView matrix (lookat)
      - Projection matrix (single perspective coefficient)
      - Viewport matrix (NDC -> pixels + depth)
      - shader uniforms built from them

    Mat4 @ Mat4 stays a Mat4; inverse and inverse-transpose go through
    the general Matrix cofactor code.
    """
    def __init__(self, rows: Optional[List[List[float]]] = None):
        super().__init__(4, 4, rows)

    @classmethod
    def identity(cls, size: int = 4) -> "Mat4":
        if size != 4:
            raise DimensionMismatch("Mat4 is always 4x4")
        m = cls()
        for i in range(4):
            m.rows[i][i] = 1.0
        return m

    @classmethod
    def _like(cls, m: int, n: int, rows):
        return Mat4(rows)

    def transpose(self) -> "Mat4":
        return Mat4([self.col(j) for j in range(4)])

    def mul_vec4(self, v: Vec4) -> Vec4:
        """Multiply matrix by a Vec4 (Mat4 * Vec4)."""
        m = self.rows
        return Vec4(
            m[0][0]*v.x + m[0][1]*v.y + m[0][2]*v.z + m[0][3]*v.w,
            m[1][0]*v.x + m[1][1]*v.y + m[1][2]*v.z + m[1][3]*v.w,
            m[2][0]*v.x + m[2][1]*v.y + m[2][2]*v.z + m[2][3]*v.w,
            m[3][0]*v.x + m[3][1]*v.y + m[3][2]*v.z + m[3][3]*v.w,
        )
