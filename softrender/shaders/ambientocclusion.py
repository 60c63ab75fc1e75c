"""
Screen-space ambient occlusion.

Pass 1 fills a depth buffer from the main camera with ZShader. Pass 2
looks only at that buffer: every covered pixel is darkened by how much of
the sky above it is hidden by nearby depth, see raster.shade_ambient_occlusion.
"""
import logging

from ..buffers import BLACK, DepthBuffer, FrameBuffer
from ..geometry import Vec3, Vec4
from .. import raster
from .base import Shader

logger = logging.getLogger(__name__)


class ZShader(Shader):
    """Depth-only pass; the points handed to the rasterizer are already divided (w = 1)."""

    def vertex(self, iface: int, nthvert: int) -> Vec4:
        r = self.transform(iface, nthvert)
        return r / r.w

    def fragment(self, bc: Vec3, frag_coord: Vec3):
        return BLACK


def ambient_occlusion(fb: FrameBuffer, zbuf: DepthBuffer) -> int:
    """Shade every pixel covered in zbuf; returns the number of shaded pixels."""
    count = raster.shade_ambient_occlusion(fb.pixels, zbuf.values)
    logger.debug("ambient occlusion: %d pixels shaded", count)
    return count
