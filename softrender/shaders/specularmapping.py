from ..geometry import Vec3
from .base import clamp_channel
from .normalmapping import NormalMappingShader

AMBIENT = 5.0
SPECULAR_WEIGHT = 0.6


def phong_terms(n: Vec3, l: Vec3, exponent: float):
    """
    Diffuse and specular factors of the Phong model.

    r = normalize(2 (n . l) n - l) is l reflected about n; the viewer looks
    down -z, so the specular factor is max(r.z, 0) ** exponent.
    """
    r = (n * (n.dot(l) * 2.0) - l).normalize()
    spec = max(r.z, 0.0) ** exponent
    diff = max(0.0, n.dot(l))
    return diff, spec


class SpecularMappingShader(NormalMappingShader):
    """
    Normal mapping plus a Phong highlight whose exponent comes from the
    specular map.

    channel = min(5 + texel * (diff + 0.6 * spec), 255)
    """
    def fragment(self, bc: Vec3, frag_coord: Vec3):
        uv, n, l = self.surface(bc)
        diff, spec = phong_terms(n, l, self.mesh.specular(uv))
        color = self.mesh.diffuse(uv)
        r, g, b = (clamp_channel(AMBIENT + int(color[i] * (diff + SPECULAR_WEIGHT * spec)))
                   for i in range(3))
        return r, g, b, 255
