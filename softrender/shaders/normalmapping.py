from typing import Tuple

from ..geometry import Vec2, Vec3, Vec4, embed, proj
from .base import Shader, interpolate


class NormalMappingShader(Shader):
    """
    Per-pixel lighting from a tangent-free normal map.

    Uniforms:
      - uniform_m:    projection @ model_view
      - uniform_m_it: uniform_m.invert_transpose()

    Fragment:
      n = normalize(uniform_m_it x normal-map texel)
      l = normalize(uniform_m x light direction)
      color = diffuse texel * max(0, n . l)
    """
    def __init__(self, pipeline, mesh):
        super().__init__(pipeline, mesh)
        self.varying_uv = [Vec2(0.0, 0.0)] * 3
        self.uniform_m = pipeline.projection @ pipeline.model_view
        self.uniform_m_it = self.uniform_m.invert_transpose()
        self.uniform_l = proj(self.uniform_m.mul_vec4(embed(pipeline.light_dir, 4, 1.0)), 3).normalize()

    def vertex(self, iface: int, nthvert: int) -> Vec4:
        self.varying_uv[nthvert] = self.mesh.uv(iface, nthvert)
        return self.transform(iface, nthvert)

    def surface(self, bc: Vec3) -> Tuple[Vec2, Vec3, Vec3]:
        """Interpolated UV, transformed normal and transformed light direction."""
        uv = interpolate(self.varying_uv, bc)
        n = proj(self.uniform_m_it.mul_vec4(embed(self.mesh.normal_map(uv), 4, 1.0)), 3).normalize()
        return uv, n, self.uniform_l

    def fragment(self, bc: Vec3, frag_coord: Vec3):
        uv, n, l = self.surface(bc)
        intensity = max(0.0, n.dot(l))
        r, g, b, _ = self.mesh.diffuse(uv)
        return int(r * intensity), int(g * intensity), int(b * intensity), 255
