from abc import ABC, abstractmethod
from typing import Optional, Sequence

from ..buffers import Color
from ..geometry import Vec3, Vec4, embed
from ..mesh import Mesh


def interpolate(values: Sequence, bc: Vec3):
    """
    Weighted sum of three per-vertex values (floats or vectors) with the
    barycentric weights bc.
    """
    return values[0] * bc.x + values[1] * bc.y + values[2] * bc.z


def clamp_channel(v: float) -> int:
    return min(int(v), 255)


class Shader(ABC):
    """
    Vertex/fragment contract between a shading variant and Pipeline.

    vertex(iface, nthvert):
      - called for nthvert = 0, 1, 2 of a face, in that order, before the
        face is rasterized
      - stores whatever the fragment stage needs in the varyings
      - returns the clip-space position (after the viewport transform)

    fragment(bc, frag_coord):
      - called once per covered pixel that passed the depth test
      - bc are the barycentric weights, frag_coord is (x, y, depth)
      - returns an RGBA color, or None to discard the pixel

    Uniforms (matrices, light) are set before the face loop and never
    change during it. The mesh and pipeline are shared read-only.
    """
    def __init__(self, pipeline, mesh: Mesh):
        self.pipeline = pipeline
        self.mesh = mesh
        self.uniform_mvp = pipeline.composite()

    def transform(self, iface: int, nthvert: int) -> Vec4:
        """Object-space corner of a face -> clip space."""
        return self.uniform_mvp.mul_vec4(embed(self.mesh.vert(iface, nthvert), 4, 1.0))

    @abstractmethod
    def vertex(self, iface: int, nthvert: int) -> Vec4:
        ...

    @abstractmethod
    def fragment(self, bc: Vec3, frag_coord: Vec3) -> Optional[Color]:
        ...
