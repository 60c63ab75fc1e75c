import pytest

from softrender.buffers import DepthBuffer, FrameBuffer
from softrender.geometry import Vec3
from softrender.mesh import Mesh
from softrender.pipeline import Pipeline
from softrender.shaders import (
    DepthShader, Gouraud6LShader, GouraudShader, NormalMappingShader, ShadowShader,
    SpecularMappingShader, TextureShader, ZShader, interpolate, shadow_matrix,
)
from softrender.shaders.gouraud import quantize
from softrender.shaders.shadowmapping import LIT, SHADOW_BIAS, SHADOWED
from softrender.shaders.specularmapping import phong_terms

from conftest import DIFFUSE

ORIGIN = Vec3(0.0, 0.0, 0.0)
UP = Vec3(0.0, 1.0, 0.0)
LIGHT = Vec3(1.0, 1.0, 1.0).normalize()
# A pixel inside the quad, off its diagonal, for a 64x64 head-on view
PROBE = (38, 28)

# Ground quad (z=0) with a smaller occluder quad floating above it at z=height.
OCCLUDER_OBJ = """\
v -1.0 -1.0 0.0
v 1.0 -1.0 0.0
v 1.0 1.0 0.0
v -1.0 1.0 0.0
v -0.4 -0.4 {height}
v 0.4 -0.4 {height}
v 0.4 0.4 {height}
v -0.4 0.4 {height}
f 1 2 3
f 1 3 4
f 5 6 7
f 5 7 8
"""


def head_on(light=LIGHT, size=64):
    pipeline = Pipeline(light, size, size)
    pipeline.setup_camera(Vec3(0.0, 0.0, 3.0), ORIGIN, UP)
    return pipeline


def render(shader_cls, quad_path, maps=()):
    mesh = Mesh.load(quad_path, maps=maps)
    pipeline = head_on()
    fb = FrameBuffer(64, 64)
    zbuf = DepthBuffer(64, 64)
    n = pipeline.draw(shader_cls(pipeline, mesh), fb, zbuf)
    return fb, n


def close(color, expected, tol=1):
    return all(abs(c - e) <= tol for c, e in zip(color, expected))


def test_interpolate_floats_and_vectors():
    bc = Vec3(0.2, 0.3, 0.5)
    assert interpolate([1.0, 2.0, 3.0], bc) == pytest.approx(2.3)
    v = interpolate([Vec3(1.0, 0.0, 0.0), Vec3(0.0, 1.0, 0.0), Vec3(0.0, 0.0, 1.0)], bc)
    assert list(v) == pytest.approx([0.2, 0.3, 0.5])


def test_gouraud_intensity(quad_path):
    fb, n = render(GouraudShader, quad_path)
    assert n > 0
    c = int(255 * LIGHT.z)
    assert fb.get(*PROBE) == (c, c, c, 255)
    assert fb.get(0, 0) == (0, 0, 0, 255)


@pytest.mark.parametrize("intensity, level", [
    (0.9, 1.0), (0.85, 0.8), (0.7, 0.8), (0.5, 0.6), (0.4, 0.45), (0.2, 0.3), (0.1, 0.0), (0.0, 0.0),
])
def test_quantize_bands(intensity, level):
    assert quantize(intensity) == level


def test_gouraud6l_bands(quad_path):
    fb, _ = render(Gouraud6LShader, quad_path)
    r, g, b, a = fb.get(*PROBE)
    assert r == int(255 * 0.6)
    assert b == 0


def test_texture_shader(quad_path):
    fb, _ = render(TextureShader, quad_path, ("diffuse",))
    expected = tuple(int(c * LIGHT.z) for c in DIFFUSE)
    assert fb.get(*PROBE)[:3] == expected


def test_normal_mapping_head_on(quad_path):
    fb, _ = render(NormalMappingShader, quad_path, ("diffuse", "normal"))
    # flat normal map, camera on the z axis: n ~ (0, 0, 1)
    assert close(fb.get(*PROBE)[:3], (116, 58, 29))


def test_normal_mapping_uniforms(quad_path):
    mesh = Mesh.load(quad_path)
    pipeline = head_on()
    shader = NormalMappingShader(pipeline, mesh)
    assert shader.uniform_m.allclose(pipeline.projection @ pipeline.model_view)
    assert shader.uniform_m_it.allclose(shader.uniform_m.invert().transpose())
    assert list(shader.uniform_l) == pytest.approx(list(LIGHT))


def test_phong_terms():
    n = Vec3(0.0, 0.0, 1.0)
    diff, spec = phong_terms(n, n, 10.0)
    assert diff == pytest.approx(1.0)
    assert spec == pytest.approx(1.0)
    diff, spec = phong_terms(n, Vec3(0.0, 0.0, -1.0), 10.0)
    assert diff == 0.0


def test_specular_mapping(quad_path):
    fb, _ = render(SpecularMappingShader, quad_path, ("diffuse", "normal", "specular"))
    assert close(fb.get(*PROBE)[:3], (121, 63, 34))


def test_missing_texture_map_fails(quad_path):
    from softrender.errors import TextureLoadError
    with pytest.raises(TextureLoadError):
        render(TextureShader, quad_path)


def test_z_shader_divides(quad_path):
    mesh = Mesh.load(quad_path)
    pipeline = head_on()
    shader = ZShader(pipeline, mesh)
    p = shader.vertex(0, 0)
    assert p.w == pytest.approx(1.0)
    assert shader.fragment(Vec3(1.0, 0.0, 0.0), Vec3(0.0, 0.0, 0.0)) == (0, 0, 0, 255)


def test_depth_shader_gray(quad_path):
    mesh = Mesh.load(quad_path)
    pipeline = head_on()
    shader = DepthShader(pipeline, mesh)
    for j in range(3):
        shader.vertex(0, j)
    r, g, b, a = shader.fragment(Vec3(1.0, 0.0, 0.0), Vec3(0.0, 0.0, 0.0))
    # z=0 lands in the middle of the depth range
    assert r == g == b == 127
    assert a == 255


@pytest.fixture
def occluder_scene(tmp_path):
    """Build the ground + occluder scene lit straight down -z; returns (main pipeline, shader)."""
    def build(height=0.5, **shader_kwargs):
        path = tmp_path / "occluder.obj"
        path.write_text(OCCLUDER_OBJ.format(height=height))
        mesh = Mesh.load(str(path))
        light_dir = Vec3(0.0, 0.0, 1.0)

        light = Pipeline(light_dir, 64, 64)
        light.setup_camera(light_dir, ORIGIN, UP, perspective=False)
        shadow_buffer = DepthBuffer(64, 64)
        light.draw(DepthShader(light, mesh), FrameBuffer(64, 64), shadow_buffer)

        main = head_on(light_dir)
        shader = ShadowShader(main, mesh, shadow_buffer,
                              shadow_matrix(light.composite(), main.composite()), **shader_kwargs)
        return main, shader
    return build


def screen_point(pipeline, x, y, z):
    from softrender.geometry import Vec4
    p = pipeline.composite().mul_vec4(Vec4(x, y, z, 1.0))
    return Vec3(p.x / p.w, p.y / p.w, p.z / p.w)


def test_shadow_factor_occluded_vs_lit(occluder_scene):
    main, shader = occluder_scene(bias=1.0)
    # same ground plane, same normal, same incident angle
    under = shader.light_visibility(screen_point(main, 0.0, 0.0, 0.0))
    open_ground = shader.light_visibility(screen_point(main, 0.8, 0.6, 0.0))
    assert under == SHADOWED == 0.3
    assert open_ground == LIT == 1.0


@pytest.mark.parametrize("height", [0.25, 0.1])
def test_default_bias_keeps_close_occluders(occluder_scene, height):
    main, shader = occluder_scene(height)
    assert shader.bias == SHADOW_BIAS
    assert shader.light_visibility(screen_point(main, 0.0, 0.0, 0.0)) == SHADOWED
    assert shader.light_visibility(screen_point(main, 0.8, 0.6, 0.0)) == LIT
    assert shader.light_visibility(screen_point(main, 0.1, 0.1, height)) == LIT


def test_shadow_occluder_lights_itself(occluder_scene):
    main, shader = occluder_scene(bias=1.0)
    assert shader.light_visibility(screen_point(main, 0.1, 0.1, 0.5)) == LIT


def test_shadow_strict_lookup(occluder_scene):
    from softrender.errors import SampleOutOfRange
    main, shader = occluder_scene(bias=1.0)
    shader.strict = True
    with pytest.raises(SampleOutOfRange):
        shader.light_visibility(screen_point(main, 5.0, 5.0, 0.0))
    shader.strict = False
    assert shader.light_visibility(screen_point(main, 5.0, 5.0, 0.0)) in (LIT, SHADOWED)
