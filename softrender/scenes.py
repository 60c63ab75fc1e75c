"""
Fixed-constant render functions, one per route.

Each function takes a RenderConfig and returns the finished FrameBuffer
(y = 0 at the bottom). Meshes and textures are loaded on every call; there
is no state shared between renders.
"""
import functools
import logging
import time
from typing import Optional, Tuple

import numpy as np

from . import raster
from .buffers import BLACK, TRANSPARENT, DepthBuffer, FrameBuffer
from .config import RenderConfig
from .geometry import Vec3, embed
from .mesh import Mesh
from .pipeline import Pipeline
from .shaders import (
    DepthShader, Gouraud6LShader, GouraudShader, NormalMappingShader, ShadowShader,
    SpecularMappingShader, TextureShader, ZShader, ambient_occlusion, shadow_matrix,
)

logger = logging.getLogger(__name__)

TRIANGLE_SIZE = 200
TRIANGLE_POINTS = ((10, 10), (100, 30), (190, 160))
RED = (255, 0, 0, 255)
LINE_END = 400
FRONT_LIGHT = Vec3(0.0, 0.0, -1.0)
CAMERA_LIGHT = Vec3(1.0, -1.0, 1.0)


def scene(func):
    """Log the start and the duration of a render."""
    @functools.wraps(func)
    def wrapper(config: RenderConfig, *args, **kwargs):
        logger.info("rendering %s (%dx%d)", func.__name__, config.width, config.height)
        start = time.perf_counter()
        result = func(config, *args, **kwargs)
        logger.info("%s done in %.3f s", func.__name__, time.perf_counter() - start)
        return result
    return wrapper


def _timed(label: str, start: float):
    logger.debug("%s: %.3f s", label, time.perf_counter() - start)


# ============================================================
#  Lesson scenes (no camera, model space mapped straight to pixels)
# ============================================================

def _to_pixels(v: Vec3, width: int, height: int) -> Tuple[float, float]:
    """[-1, 1] model coordinates -> pixel coordinates, keeping one pixel of margin."""
    return ((v.x + 1.0) * width - 1.0) / 2.0, ((v.y + 1.0) * height - 1.0) / 2.0


def _face_normal(mesh: Mesh, iface: int) -> Vec3:
    w0, w1, w2 = (mesh.vert(iface, j) for j in range(3))
    return ((w2 - w0) ^ (w1 - w0)).normalize()


@scene
def render_wireframe(config: RenderConfig) -> FrameBuffer:
    """Every face edge of the head as a black Bresenham line."""
    W, H = config.width, config.height
    fb = FrameBuffer(W, H, TRANSPARENT)
    mesh = Mesh.load(config.head_path, policy=config.sampling)
    for i in range(mesh.nfaces()):
        for j in range(3):
            x0, y0 = _to_pixels(mesh.vert(i, j), W, H)
            x1, y1 = _to_pixels(mesh.vert(i, (j + 1) % 3), W, H)
            raster.draw_line(fb.pixels, int(x0), int(y0), int(x1), int(y1), *BLACK)
    return fb


@scene
def render_line(config: RenderConfig) -> FrameBuffer:
    fb = FrameBuffer(config.width, config.height, TRANSPARENT)
    raster.draw_line(fb.pixels, 0, 0, LINE_END, LINE_END, *BLACK)
    return fb


@scene
def render_triangle(config: RenderConfig) -> FrameBuffer:
    """A single red triangle on a 200x200 transparent canvas."""
    fb = FrameBuffer(TRIANGLE_SIZE, TRIANGLE_SIZE, TRANSPARENT)
    (x0, y0), (x1, y1), (x2, y2) = TRIANGLE_POINTS
    zbuf = DepthBuffer(TRIANGLE_SIZE, TRIANGLE_SIZE)
    raster.fill_triangle_flat(fb.pixels, zbuf.values, False,
                              float(x0), float(y0), 0.0,
                              float(x1), float(y1), 0.0,
                              float(x2), float(y2), 0.0,
                              *RED)
    return fb


def _fill_face(fb: FrameBuffer, zbuf: DepthBuffer, pts, color, use_depth: bool = False) -> int:
    (x0, y0, z0), (x1, y1, z1), (x2, y2, z2) = pts
    return raster.fill_triangle_flat(fb.pixels, zbuf.values, use_depth,
                                     x0, y0, z0, x1, y1, z1, x2, y2, z2,
                                     *color)


@scene
def render_flat_shading(config: RenderConfig) -> FrameBuffer:
    """Every face of the head filled with a random color (seeded)."""
    W, H = config.width, config.height
    fb = FrameBuffer(W, H, TRANSPARENT)
    zbuf = DepthBuffer(W, H)
    mesh = Mesh.load(config.head_path, policy=config.sampling)
    rng = np.random.default_rng(config.seed)
    for i in range(mesh.nfaces()):
        pts = [tuple(float(int(c)) for c in _to_pixels(mesh.vert(i, j), W, H)) + (0.0,)
               for j in range(3)]
        r, g, b = (int(c) for c in rng.integers(0, 255, size=3))
        _fill_face(fb, zbuf, pts, (r, g, b, 255))
    return fb


@scene
def render_linear_light(config: RenderConfig) -> FrameBuffer:
    """
    Flat shading by face normal against a light looking down -z.

    No depth test: back faces are dropped by the intensity > 0 check, but
    overlapping front faces are drawn in file order.
    """
    W, H = config.width, config.height
    fb = FrameBuffer(W, H, TRANSPARENT)
    zbuf = DepthBuffer(W, H)
    mesh = Mesh.load(config.head_path, policy=config.sampling)
    for i in range(mesh.nfaces()):
        intensity = _face_normal(mesh, i).dot(FRONT_LIGHT)
        if intensity <= 0.0:
            continue
        pts = [tuple(float(int(c)) for c in _to_pixels(mesh.vert(i, j), W, H)) + (0.0,)
               for j in range(3)]
        c = int(intensity * 255.0)
        _fill_face(fb, zbuf, pts, (c, c, c, 255))
    return fb


@scene
def render_z_buffer(config: RenderConfig) -> FrameBuffer:
    """render_linear_light with a float depth buffer (strict > wins)."""
    W, H = config.width, config.height
    fb = FrameBuffer(W, H, TRANSPARENT)
    zbuf = DepthBuffer(W, H)
    mesh = Mesh.load(config.head_path, policy=config.sampling)
    for i in range(mesh.nfaces()):
        intensity = _face_normal(mesh, i).dot(FRONT_LIGHT)
        if intensity <= 0.0:
            continue
        pts = []
        for j in range(3):
            v = mesh.vert(i, j)
            pts.append(_to_pixels(v, W, H) + (v.z,))
        c = int(intensity * 255.0)
        _fill_face(fb, zbuf, pts, (c, c, c, 255), use_depth=True)
    return fb


# ============================================================
#  Camera scenes
# ============================================================

def _move_camera_buffers(config: RenderConfig) -> Tuple[FrameBuffer, DepthBuffer]:
    W, H = config.width, config.height
    fb = FrameBuffer(W, H, BLACK)
    zbuf = DepthBuffer(W, H)
    mesh = Mesh.load(config.head_path, policy=config.sampling)
    light = CAMERA_LIGHT.normalize()

    pipeline = Pipeline(light, W, H)
    pipeline.setup_camera(config.eye, config.center, config.up)
    mvp = pipeline.composite()

    start = time.perf_counter()
    for i in range(mesh.nfaces()):
        args = []
        for j in range(3):
            p = mvp.mul_vec4(embed(mesh.vert(i, j), 4, 1.0))
            s = Vec3(p.x / p.w, p.y / p.w, p.z / p.w).to_int()
            args.extend((s.x, s.y, s.z, mesh.normal(i, j).dot(light)))
        raster.fill_triangle_scanline(fb.pixels, zbuf.values, *args)
    _timed("scanline pass", start)
    return fb, zbuf


@scene
def render_move_camera(config: RenderConfig) -> FrameBuffer:
    """Head through lookat/projection/viewport, scanline Gouraud fill."""
    fb, _ = _move_camera_buffers(config)
    return fb


@scene
def render_move_camera_depth(config: RenderConfig) -> FrameBuffer:
    """Depth buffer of render_move_camera as a gray image."""
    _, zbuf = _move_camera_buffers(config)
    return zbuf.to_framebuffer()


# ============================================================
#  Shader scenes
# ============================================================

def _main_pipeline(config: RenderConfig, eye: Optional[Vec3] = None) -> Pipeline:
    pipeline = Pipeline(config.light_dir.normalize(), config.width, config.height)
    pipeline.setup_camera(config.eye if eye is None else eye, config.center, config.up)
    return pipeline


def _render_shaded(config: RenderConfig, shader_cls, maps: Tuple[str, ...] = ()) -> FrameBuffer:
    mesh = Mesh.load(config.head_path, maps=maps, policy=config.sampling)
    pipeline = _main_pipeline(config)
    fb = FrameBuffer(config.width, config.height, BLACK)
    zbuf = DepthBuffer(config.width, config.height)
    start = time.perf_counter()
    pipeline.draw(shader_cls(pipeline, mesh), fb, zbuf)
    _timed(shader_cls.__name__, start)
    return fb


@scene
def render_gouraud(config: RenderConfig) -> FrameBuffer:
    return _render_shaded(config, GouraudShader)


@scene
def render_gouraud6l(config: RenderConfig) -> FrameBuffer:
    return _render_shaded(config, Gouraud6LShader)


@scene
def render_texture(config: RenderConfig) -> FrameBuffer:
    return _render_shaded(config, TextureShader, ("diffuse",))


@scene
def render_normal_mapping(config: RenderConfig) -> FrameBuffer:
    return _render_shaded(config, NormalMappingShader, ("diffuse", "normal"))


@scene
def render_specular_mapping(config: RenderConfig) -> FrameBuffer:
    return _render_shaded(config, SpecularMappingShader, ("diffuse", "normal", "specular"))


@scene
def render_shadow_mapping(config: RenderConfig) -> FrameBuffer:
    """
    Two passes over the shadow mesh:
      1. DepthShader from the light (eye = light direction, orthographic)
         into the shadow buffer
      2. ShadowShader from the main camera, looking fragments up in it
    """
    W, H = config.width, config.height
    mesh = Mesh.load(config.shadow_path, maps=("diffuse", "normal", "specular"),
                     policy=config.sampling)
    light = config.light_dir.normalize()

    light_pipeline = Pipeline(light, W, H)
    light_pipeline.setup_camera(light, config.center, config.up, perspective=False)
    depth_fb = FrameBuffer(W, H, BLACK)
    shadow_buffer = DepthBuffer(W, H)
    start = time.perf_counter()
    light_pipeline.draw(DepthShader(light_pipeline, mesh), depth_fb, shadow_buffer)
    _timed("shadow pass 1", start)

    pipeline = _main_pipeline(config)
    fb = FrameBuffer(W, H, BLACK)
    zbuf = DepthBuffer(W, H)
    shader = ShadowShader(pipeline, mesh, shadow_buffer,
                          shadow_matrix(light_pipeline.composite(), pipeline.composite()),
                          bias=config.shadow_bias, strict=config.strict)
    start = time.perf_counter()
    pipeline.draw(shader, fb, zbuf)
    _timed("shadow pass 2", start)
    return fb


@scene
def render_ambient_occlusion(config: RenderConfig) -> FrameBuffer:
    """Depth-only pass from ao_eye, then the screen-space occlusion kernel."""
    mesh = Mesh.load(config.head_path, policy=config.sampling)
    pipeline = _main_pipeline(config, eye=config.ao_eye)
    fb = FrameBuffer(config.width, config.height, BLACK)
    zbuf = DepthBuffer(config.width, config.height)
    start = time.perf_counter()
    pipeline.draw(ZShader(pipeline, mesh), fb, zbuf)
    _timed("depth pass", start)
    start = time.perf_counter()
    ambient_occlusion(fb, zbuf)
    _timed("occlusion pass", start)
    return fb
