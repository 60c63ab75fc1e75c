import logging
from typing import Optional, Sequence

import numpy as np

from .buffers import DepthBuffer, FrameBuffer
from .geometry import Vec2, Vec3, Vec4, embed
from .matrix import Mat4, Matrix
from .transform import DEPTH, lookat, projection, viewport

logger = logging.getLogger(__name__)

# Signed determinant below this marks a triangle as degenerate (or wound
# the other way) for the barycentric solve.
DEGENERATE_DET = 1e-3
# Vertices with |w| below this lie on the camera plane and cannot be divided.
MIN_W = 1e-9


# ============================================================
#  Barycentric coordinates
# ============================================================

def barycentric_matrix(pts: Sequence[Vec2]) -> Optional[Matrix]:
    """
    Inverse-transpose of [[x0,y0,1],[x1,y1,1],[x2,y2,1]], or None when the
    triangle is degenerate (det < DEGENERATE_DET).

    Multiplying the result by (px, py, 1) gives the barycentric weights of
    (px, py). The matrix only depends on the triangle, so the rasterizer
    builds it once and applies it to every pixel of the bounding box.
    """
    abc = Matrix.from_rows([list(embed(p, 3, 1.0)) for p in pts])
    if abc.det() < DEGENERATE_DET:
        return None
    return abc.invert_transpose()


def barycentric(pts: Sequence[Vec2], p: Vec2) -> Vec3:
    """
    Barycentric weights (alpha, beta, gamma) of p in triangle pts.

    Weights sum to 1; a negative weight means p is outside. A degenerate
    triangle yields (-1, 1, 1), i.e. "outside" for every point.
    """
    m = barycentric_matrix(pts)
    if m is None:
        return Vec3(-1.0, 1.0, 1.0)
    return m @ embed(p, 3, 1.0)


# ============================================================
#  Pipeline state + shader-driven rasterizer
# ============================================================

class Pipeline:
    """
    The three transforms, the light and the canvas size of one render.

    Composite (object space -> pixels + depth):
      viewport @ projection @ model_view @ point

    Shaders hold a reference to the pipeline and read the matrices and the
    light from it; nothing here changes while faces are being drawn.
    """
    def __init__(self, light_dir: Vec3, width: int, height: int):
        self.model_view = Mat4.identity()
        self.projection = Mat4.identity()
        self.viewport = Mat4.identity()
        self.light_dir = light_dir
        self.width = width
        self.height = height

    def lookat(self, eye: Vec3, center: Vec3, up: Vec3):
        self.model_view = lookat(eye, center, up)

    def set_projection(self, coeff: float):
        self.projection = projection(coeff)

    def set_viewport(self, x: int, y: int, w: int, h: int):
        self.viewport = viewport(x, y, w, h)

    def setup_camera(self, eye: Vec3, center: Vec3, up: Vec3, perspective: bool = True):
        """
        Standard camera of every scene: lookat, viewport covering the middle
        3/4 of the canvas, projection coefficient -1/|eye - center| (or 0 for
        an orthographic view).
        """
        self.lookat(eye, center, up)
        self.set_viewport(self.width // 8, self.height // 8,
                          self.width * 3 // 4, self.height * 3 // 4)
        self.set_projection(-1.0 / (eye - center).norm() if perspective else 0.0)
        self.log_matrices()

    def composite(self) -> Mat4:
        return self.viewport @ self.projection @ self.model_view

    def log_matrices(self):
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("ModelView:\n%s", self.model_view)
            logger.debug("Projection:\n%s", self.projection)
            logger.debug("Viewport:\n%s", self.viewport)
            logger.debug("Composite:\n%s", self.composite())

    def triangle(self, pts: Sequence[Vec4], shader, fb: FrameBuffer, zbuf: DepthBuffer) -> int:
        """
        Rasterize one triangle given in clip space (homogeneous, after the
        viewport transform).

        Steps:
          1. perspective-divide x, y by w
          2. bounding box of the divided points, clamped to the framebuffer
          3. barycentric weights of every pixel in the box
          4. skip degenerate triangles and pixels with a negative weight
          5. z and w interpolated from the undivided clip coordinates,
             depth = clamp(z / w + 0.5, 0, DEPTH)
          6. depth test: written when depth >= stored
          7. shader.fragment(bc, frag_coord); None discards the pixel

        A vertex on the camera plane (w ~ 0) drops the whole triangle; there is
        no near-plane clipping.

        Returns the number of pixels written.
        """
        if any(abs(p.w) < MIN_W for p in pts):
            return 0
        pts2 = [Vec2(p.x / p.w, p.y / p.w) for p in pts]

        xmin = max(0, int(min(p.x for p in pts2)))
        xmax = min(fb.width - 1, int(max(p.x for p in pts2)))
        ymin = max(0, int(min(p.y for p in pts2)))
        ymax = min(fb.height - 1, int(max(p.y for p in pts2)))
        if xmin > xmax or ymin > ymax:
            return 0

        m = barycentric_matrix(pts2)
        if m is None:
            return 0

        # Every pixel of the box at once: bc has shape (3, n), x-major order.
        xs, ys = np.meshgrid(np.arange(xmin, xmax + 1), np.arange(ymin, ymax + 1), indexing="ij")
        xs = xs.ravel()
        ys = ys.ravel()
        bc = m.to_numpy() @ np.vstack((xs, ys, np.ones_like(xs))).astype(np.float64)

        clip = np.array([[p.z for p in pts], [p.w for p in pts]], dtype=np.float64)
        z, w = clip @ bc
        with np.errstate(divide="ignore", invalid="ignore"):
            depth = np.clip(z / w + 0.5, 0.0, DEPTH)

        inside = np.all(bc >= 0.0, axis=0)
        zvals = zbuf.values
        count = 0
        for k in np.flatnonzero(inside):
            x, y, d = int(xs[k]), int(ys[k]), float(depth[k])
            if zvals[y, x] > d:
                continue
            color = shader.fragment(Vec3(float(bc[0, k]), float(bc[1, k]), float(bc[2, k])),
                                    Vec3(float(x), float(y), d))
            if color is None:
                continue
            zvals[y, x] = d
            fb.pixels[y, x] = color
            count += 1
        return count

    def draw(self, shader, fb: FrameBuffer, zbuf: DepthBuffer) -> int:
        """
        Face loop: vertex() for corners 0, 1, 2 of every face, then
        triangle() with the returned clip-space points.
        """
        count = 0
        for i in range(shader.mesh.nfaces()):
            pts = [shader.vertex(i, j) for j in range(3)]
            count += self.triangle(pts, shader, fb, zbuf)
        logger.debug("%s: %d pixels written", type(shader).__name__, count)
        return count
