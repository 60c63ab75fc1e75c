from ..geometry import Vec3, Vec4
from .base import Shader


class GouraudShader(Shader):
    """Per-vertex diffuse intensity, interpolated across the face, white base color."""

    def __init__(self, pipeline, mesh):
        super().__init__(pipeline, mesh)
        self.varying_intensity = [0.0, 0.0, 0.0]

    def vertex(self, iface: int, nthvert: int) -> Vec4:
        self.varying_intensity[nthvert] = max(
            0.0, self.mesh.normal(iface, nthvert).dot(self.pipeline.light_dir))
        return self.transform(iface, nthvert)

    def fragment(self, bc: Vec3, frag_coord: Vec3):
        intensity = Vec3(*self.varying_intensity).dot(bc)
        c = min(int(255.0 * intensity), 255)
        return c, c, c, 255


# (threshold, level): first threshold the intensity exceeds wins.
BANDS = (
    (0.85, 1.00),
    (0.60, 0.80),
    (0.45, 0.60),
    (0.30, 0.45),
    (0.15, 0.30),
)
BASE_COLOR = (255.0, 155.0, 0.0)


def quantize(intensity: float) -> float:
    """Snap an intensity to one of six cartoon bands."""
    for threshold, level in BANDS:
        if intensity > threshold:
            return level
    return 0.0


class Gouraud6LShader(GouraudShader):
    """Gouraud intensity quantized into 6 bands over a fixed orange."""

    def fragment(self, bc: Vec3, frag_coord: Vec3):
        level = quantize(Vec3(*self.varying_intensity).dot(bc))
        r, g, b = (int(c * level) for c in BASE_COLOR)
        return r, g, b, 255
