import logging

from .geometry import Vec3
from .matrix import Mat4

logger = logging.getLogger(__name__)

# Depth range of the viewport: z in [-1, 1] maps onto [0, DEPTH].
DEPTH = 255.0


# ============================================================
#  Camera
# ============================================================

def lookat(eye: Vec3, center: Vec3, up: Vec3) -> Mat4:
    """
    ModelView matrix for a camera at `eye` looking at `center`.

    Basis:
      z = normalize(eye - center)   (camera looks towards -z)
      x = normalize(up x z)
      y = normalize(z x x)

    Rows 0..2 hold x, y, z; column 3 holds -center.

    Note:
      The translation is -center, not -eye. With center at the origin this
      is the identity translation and every scene here relies on that.
    """
    z = (eye - center).normalize()
    x = up.cross(z).normalize()
    y = z.cross(x).normalize()
    logger.debug("lookat(): eye=%s center=%s basis x=%s y=%s z=%s", eye, center, x, y, z)

    m = Mat4.identity()
    for i in range(3):
        m[0][i] = x[i]
        m[1][i] = y[i]
        m[2][i] = z[i]
        m[i][3] = -center[i]
    return m


# ============================================================
#  Projections
# ============================================================

def projection(coeff: float) -> Mat4:
    """
    One-parameter perspective matrix.

    Identity with m[3][2] = coeff, so w' = 1 + coeff * z. Conventionally
    coeff = -1 / |eye - center|; coeff = 0 gives an orthographic view.
    """
    m = Mat4.identity()
    m[3][2] = coeff
    return m


def viewport(x: int, y: int, w: int, h: int) -> Mat4:
    """
    Map the [-1, 1] cube to pixels.

    NDC:
      x=-1 -> x, x=+1 -> x + w
      y=-1 -> y, y=+1 -> y + h
      z=-1 -> 0, z=+1 -> DEPTH
    """
    m = Mat4.identity()
    m[0][3] = x + w / 2.0
    m[1][3] = y + h / 2.0
    m[2][3] = DEPTH / 2.0
    m[0][0] = w / 2.0
    m[1][1] = h / 2.0
    m[2][2] = DEPTH / 2.0
    return m
