"""
Route table: path -> scene, and the PNG response built from it.

handle() never lets a RenderError escape; render_png() does.
"""
import logging
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from . import scenes
from .buffers import FrameBuffer
from .config import RenderConfig
from .errors import RenderError

logger = logging.getLogger(__name__)

CONTENT_TYPE = "image/png"
TEXT_TYPE = "text/plain"


@dataclass(frozen=True)
class Route:
    render: Callable[[RenderConfig], FrameBuffer]
    flip: bool = True
    description: str = ""


@dataclass(frozen=True)
class Response:
    status: int
    content_type: str
    body: bytes


ROUTES: Dict[str, Route] = {
    "/wire": Route(scenes.render_wireframe, description="wireframe of the head"),
    "/line": Route(scenes.render_line, flip=False, description="one Bresenham line"),
    "/triangle": Route(scenes.render_triangle, description="red triangle, 200x200"),
    "/flat-shading": Route(scenes.render_flat_shading, description="random face colors"),
    "/z-buf": Route(scenes.render_z_buffer, description="face normal shading, z-buffered"),
    "/move-camera": Route(scenes.render_move_camera, description="camera + scanline Gouraud"),
    "/move-camera/depth": Route(scenes.render_move_camera_depth, description="depth of /move-camera"),
    "/linear-light": Route(scenes.render_linear_light, description="face normal shading"),
    "/shaders/gouraud": Route(scenes.render_gouraud, description="Gouraud shader"),
    "/shaders/gouraud6l": Route(scenes.render_gouraud6l, description="6-band Gouraud"),
    "/shaders/texture": Route(scenes.render_texture, description="textured Gouraud"),
    "/shaders/normalmapping": Route(scenes.render_normal_mapping, description="normal mapping"),
    "/shaders/specularmapping": Route(scenes.render_specular_mapping, description="specular mapping"),
    "/shaders/shadowmapping": Route(scenes.render_shadow_mapping, description="two-pass shadows"),
    "/shaders/ambientocclusion": Route(scenes.render_ambient_occlusion, description="screen-space AO"),
}


def render_png(path: str, config: Optional[RenderConfig] = None) -> bytes:
    """
    Render the scene behind `path` and encode it as PNG.

    Raises KeyError for an unknown path and RenderError from the render.
    """
    route = ROUTES[path]
    fb = route.render(config or RenderConfig())
    return fb.to_png(flip=route.flip)


def handle(path: str, config: Optional[RenderConfig] = None) -> Response:
    """
    Request boundary:
      - 200 image/png with the encoded picture
      - 404 for an unknown path
      - 500 text/plain when the render fails (no partial image)
    """
    if path not in ROUTES:
        logger.warning("unknown route %s", path)
        return Response(404, TEXT_TYPE, f"no route {path}\n".encode())
    try:
        body = render_png(path, config)
    except RenderError as e:
        logger.error("%s failed: %s", path, e)
        return Response(500, TEXT_TYPE, f"{type(e).__name__}: {e}\n".encode())
    return Response(200, CONTENT_TYPE, body)
