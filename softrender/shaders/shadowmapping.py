"""
Two-pass shadow mapping.

Pass 1 (DepthShader) renders the mesh from the light's camera into a
depth buffer, the shadow map. Pass 2 (ShadowShader) renders from the main
camera; each fragment is carried back to world space and forward into the
light's screen space, where its depth is compared with the shadow map.
"""
from ..buffers import DepthBuffer
from ..geometry import Vec3, Vec4, embed, proj
from ..matrix import Mat4
from ..transform import DEPTH
from .base import Shader, clamp_channel, interpolate
from .normalmapping import NormalMappingShader
from .specularmapping import SPECULAR_WEIGHT, phong_terms

LIT = 1.0
SHADOWED = 0.3
AMBIENT = 20.0
DIFFUSE_WEIGHT = 1.2
# Depth units a fragment may sit behind the shadow map and still count as lit.
SHADOW_BIAS = 5.0


class DepthShader(Shader):
    """Depth-only pass; the color is the depth as a gray level."""

    def __init__(self, pipeline, mesh):
        super().__init__(pipeline, mesh)
        self.varying_tri = [Vec3(0.0, 0.0, 0.0)] * 3

    def vertex(self, iface: int, nthvert: int) -> Vec4:
        r = self.transform(iface, nthvert)
        self.varying_tri[nthvert] = proj(r / r.w, 3)
        return r

    def fragment(self, bc: Vec3, frag_coord: Vec3):
        p = interpolate(self.varying_tri, bc)
        c = max(0, min(int(255.0 * p.z / DEPTH), 255))
        return c, c, c, 255


def shadow_matrix(light_mvp: Mat4, main_mvp: Mat4) -> Mat4:
    """Main-camera screen space -> light screen space."""
    return light_mvp @ main_mvp.invert()


class ShadowShader(NormalMappingShader):
    """
    Specular-mapped shading attenuated by the shadow map.

    Uniforms:
      - uniform_m, uniform_m_it, uniform_l: as NormalMappingShader
      - uniform_m_shadow: shadow_matrix(light composite, main composite)

    Fragment:
      shadow = 1.0 if lit else 0.3
      channel = min(20 + texel * shadow * (1.2 diff + 0.6 spec), 255)
    """
    def __init__(self, pipeline, mesh, shadow_buffer: DepthBuffer, uniform_m_shadow: Mat4,
                 bias: float = SHADOW_BIAS, strict: bool = False):
        super().__init__(pipeline, mesh)
        self.varying_tri = [Vec3(0.0, 0.0, 0.0)] * 3
        self.shadow_buffer = shadow_buffer
        self.uniform_m_shadow = uniform_m_shadow
        self.bias = bias
        self.strict = strict

    def vertex(self, iface: int, nthvert: int) -> Vec4:
        r = super().vertex(iface, nthvert)
        self.varying_tri[nthvert] = proj(r / r.w, 3)
        return r

    def light_visibility(self, p: Vec3) -> float:
        """
        Lighting multiplier of a main-camera screen point (x, y, depth):
        LIT when nothing in the shadow map is nearer to the light than the
        point (within bias), SHADOWED otherwise.
        """
        sb = self.uniform_m_shadow.mul_vec4(embed(p, 4, 1.0))
        sb = sb / sb.w
        stored = self.shadow_buffer.lookup(int(sb.x), int(sb.y), strict=self.strict)
        return LIT if stored < sb.z + self.bias else SHADOWED

    def fragment(self, bc: Vec3, frag_coord: Vec3):
        shadow = self.light_visibility(interpolate(self.varying_tri, bc))
        uv, n, l = self.surface(bc)
        diff, spec = phong_terms(n, l, self.mesh.specular(uv))
        color = self.mesh.diffuse(uv)
        r, g, b = (clamp_channel(AMBIENT + color[i] * shadow * (DIFFUSE_WEIGHT * diff + SPECULAR_WEIGHT * spec))
                   for i in range(3))
        return r, g, b, 255
