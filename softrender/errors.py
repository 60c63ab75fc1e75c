"""
Error taxonomy for the rendering pipeline.

Every failure a render can hit derives from RenderError, so callers
(the route table, the CLI) can turn any of them into an error result
instead of a half-written image.
"""


class RenderError(Exception):
    """Base class for every failure raised by a render call."""


class DimensionMismatch(RenderError, ValueError):
    """Operand shapes are incompatible (vector sizes, matrix M/N)."""


class SingularMatrix(RenderError, ArithmeticError):
    """Determinant is (numerically) zero during inversion."""


class MeshLoadError(RenderError):
    """OBJ file is missing, unreadable or has a malformed / out-of-range line."""


class TextureLoadError(RenderError):
    """Texture file is missing or cannot be decoded."""


class SampleOutOfRange(RenderError, IndexError):
    """UV or buffer index outside the sampled grid (strict sampling only)."""
