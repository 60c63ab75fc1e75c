from ..geometry import Vec2, Vec3, Vec4
from .base import Shader, interpolate


class TextureShader(Shader):
    """
    Textured Gouraud shading.

    Varyings:
      - varying_intensity: max(0, n . l) per corner
      - varying_uv: texture coordinate per corner

    Fragment: diffuse texel at the interpolated UV times the interpolated
    intensity. UVs are interpolated with the screen-space weights (not
    perspective-corrected).
    """
    def __init__(self, pipeline, mesh):
        super().__init__(pipeline, mesh)
        self.varying_intensity = [0.0, 0.0, 0.0]
        self.varying_uv = [Vec2(0.0, 0.0)] * 3

    def vertex(self, iface: int, nthvert: int) -> Vec4:
        self.varying_intensity[nthvert] = max(
            0.0, self.mesh.normal(iface, nthvert).dot(self.pipeline.light_dir))
        self.varying_uv[nthvert] = self.mesh.uv(iface, nthvert)
        return self.transform(iface, nthvert)

    def fragment(self, bc: Vec3, frag_coord: Vec3):
        intensity = interpolate(self.varying_intensity, bc)
        uv = interpolate(self.varying_uv, bc)
        r, g, b, _ = self.mesh.diffuse(uv)
        return int(r * intensity), int(g * intensity), int(b * intensity), 255
