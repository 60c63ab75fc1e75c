"""
Numba rasterizer kernels.

All kernels write straight into numpy buffers:
  img  - FrameBuffer.pixels, shape (H, W, 4), uint8, indexed [y, x, c]
  zbuf - DepthBuffer.values, shape (H, W), float64, indexed [y, x]

The shader-driven rasterizer lives in pipeline.py (it has to call back
into Python per fragment); everything here is plain arithmetic and is
compiled.
"""
import math

import numpy as np
from numba import njit


# ============================================================
#  Bresenham line
# ============================================================

@njit(cache=True)
def draw_line(img, x0, y0, x1, y1, r, g, b, a):
    """
    Bresenham integer line drawing, both endpoints included.

    Pixels outside the image are skipped. Returns the number of pixels
    written.
    """
    H, W, _ = img.shape
    steep = abs(x0 - x1) < abs(y0 - y1)
    if steep:
        x0, y0 = y0, x0
        x1, y1 = y1, x1
    if x0 > x1:
        x0, x1 = x1, x0
        y0, y1 = y1, y0

    dx = x1 - x0
    dy = abs(y1 - y0)
    error2 = 0
    y = y0
    ystep = 1 if y1 > y0 else -1
    count = 0

    for x in range(x0, x1 + 1):
        px, py = (y, x) if steep else (x, y)
        if 0 <= px < W and 0 <= py < H:
            img[py, px, 0] = r
            img[py, px, 1] = g
            img[py, px, 2] = b
            img[py, px, 3] = a
            count += 1
        error2 += 2 * dy
        if error2 > dx:
            y += ystep
            error2 -= 2 * dx
    return count


# ============================================================
#  Flat-color bounding box fill
# ============================================================

@njit(cache=True)
def _barycentric_cross(x0, y0, x1, y1, x2, y2, px, py):
    """
    Barycentric coordinates of (px, py) from one cross product:

      u = (x2-x0, x1-x0, x0-px) x (y2-y0, y1-y0, y0-py)

    Returns (alpha, beta, gamma). If |u.z| < 1 the triangle is degenerate
    (in pixel units) and (-1, 1, 1) is returned, which every caller treats
    as "outside".
    """
    ax, ay, az = x2 - x0, x1 - x0, x0 - px
    bx, by, bz = y2 - y0, y1 - y0, y0 - py
    ux = ay * bz - az * by
    uy = az * bx - ax * bz
    uz = ax * by - ay * bx
    if abs(uz) < 1.0:
        return -1.0, 1.0, 1.0
    return 1.0 - (ux + uy) / uz, uy / uz, ux / uz


@njit(cache=True)
def fill_triangle_flat(img, zbuf, use_depth,
                       x0, y0, z0,
                       x1, y1, z1,
                       x2, y2, z2,
                       r, g, b, a):
    """
    Rasterize a filled triangle with a constant color.

    Bounding box:
      - clamped to the image, then truncated to integers

    Z-buffer (use_depth=True):
      - z is interpolated with the barycentric weights
      - pixel is drawn only if z > zbuf[y, x] (strictly greater wins)

    Returns the number of pixels written.
    """
    H, W, _ = img.shape

    minx = max(0.0, min(W - 1.0, min(x0, x1, x2)))
    maxx = min(W - 1.0, max(0.0, max(x0, x1, x2)))
    miny = max(0.0, min(H - 1.0, min(y0, y1, y2)))
    maxy = min(H - 1.0, max(0.0, max(y0, y1, y2)))

    count = 0
    for x in range(int(minx), int(maxx) + 1):
        for y in range(int(miny), int(maxy) + 1):
            al, be, ga = _barycentric_cross(x0, y0, x1, y1, x2, y2, float(x), float(y))
            if al < 0.0 or be < 0.0 or ga < 0.0:
                continue
            if use_depth:
                z = z0 * al + z1 * be + z2 * ga
                if not zbuf[y, x] < z:
                    continue
                zbuf[y, x] = z
            img[y, x, 0] = r
            img[y, x, 1] = g
            img[y, x, 2] = b
            img[y, x, 3] = a
            count += 1
    return count


# ============================================================
#  Scanline fill with per-vertex intensity
# ============================================================

@njit(cache=True)
def _round(v):
    return int(v + 0.5)


@njit(cache=True)
def fill_triangle_scanline(img, zbuf,
                           t0x, t0y, t0z, ity0,
                           t1x, t1y, t1z, ity1,
                           t2x, t2y, t2z, ity2):
    """
    Rasterize a triangle row by row, interpolating intensity (Gouraud).

    Algorithm:
      - sort the three integer vertices by ascending y
      - split into the part above t1 and the part below it
      - for each row interpolate the two boundary points (x, z, intensity)
        along the long edge t0->t2 and the short edge of that half
      - sweep the span between them, interpolating again

    Z-buffer:
      - pixel written only if its z > zbuf[y, x] (strictly greater wins)

    Color:
      - intensity clamped to [0, 1], written as opaque gray

    A triangle whose three vertices share one y produces no pixels.
    Returns the number of pixels written.
    """
    if t0y == t1y and t0y == t2y:
        return 0
    H, W, _ = img.shape

    if t0y > t1y:
        t0x, t0y, t0z, ity0, t1x, t1y, t1z, ity1 = t1x, t1y, t1z, ity1, t0x, t0y, t0z, ity0
    if t0y > t2y:
        t0x, t0y, t0z, ity0, t2x, t2y, t2z, ity2 = t2x, t2y, t2z, ity2, t0x, t0y, t0z, ity0
    if t1y > t2y:
        t1x, t1y, t1z, ity1, t2x, t2y, t2z, ity2 = t2x, t2y, t2z, ity2, t1x, t1y, t1z, ity1

    count = 0
    total_height = t2y - t0y
    for i in range(total_height):
        second_half = i > t1y - t0y or t1y == t0y
        segment_height = t2y - t1y if second_half else t1y - t0y
        alpha = i / total_height
        beta = (i - (t1y - t0y if second_half else 0)) / segment_height

        ax = _round(t0x + (t2x - t0x) * alpha)
        ay = _round(t0y + (t2y - t0y) * alpha)
        az = _round(t0z + (t2z - t0z) * alpha)
        itya = ity0 + (ity2 - ity0) * alpha
        if second_half:
            bx = _round(t1x + (t2x - t1x) * beta)
            by = _round(t1y + (t2y - t1y) * beta)
            bz = _round(t1z + (t2z - t1z) * beta)
            ityb = ity1 + (ity2 - ity1) * beta
        else:
            bx = _round(t0x + (t1x - t0x) * beta)
            by = _round(t0y + (t1y - t0y) * beta)
            bz = _round(t0z + (t1z - t0z) * beta)
            ityb = ity0 + (ity1 - ity0) * beta
        if ax > bx:
            ax, ay, az, itya, bx, by, bz, ityb = bx, by, bz, ityb, ax, ay, az, itya

        for j in range(ax, bx + 1):
            phi = 1.0 if bx == ax else (j - ax) / (bx - ax)
            px = _round(ax + (bx - ax) * phi)
            py = _round(ay + (by - ay) * phi)
            pz = _round(az + (bz - az) * phi)
            if px >= W or py >= H or px < 0 or py < 0:
                continue
            if zbuf[py, px] < pz:
                zbuf[py, px] = pz
                ityp = itya + (ityb - itya) * phi
                if ityp > 1.0:
                    ityp = 1.0
                elif ityp < 0.0:
                    ityp = 0.0
                c = int(ityp * 255.0)
                img[py, px, 0] = c
                img[py, px, 1] = c
                img[py, px, 2] = c
                img[py, px, 3] = 255
                count += 1
    return count


# ============================================================
#  Screen-space ambient occlusion
# ============================================================

AO_MAX_DISTANCE = 1000.0
AO_EXPONENT = 10.0
# Pixels whose depth is below this never received a fragment.
AO_EMPTY_DEPTH = -1e5


@njit(cache=True)
def max_elevation_angle(zbuf, px, py, dx, dy):
    """
    Walk from (px, py) along (dx, dy) one pixel at a time, up to
    AO_MAX_DISTANCE or the buffer edge, and return the steepest angle
    (radians, >= 0) from the start depth up to the depth surface.
    """
    H, W = zbuf.shape
    max_angle = 0.0
    t = 0.0
    while t < AO_MAX_DISTANCE:
        t += 1.0
        cx = px + dx * t
        cy = py + dy * t
        if cx >= W or cy >= H or cx < 0.0 or cy < 0.0:
            return max_angle

        distance = math.sqrt((px - cx) ** 2 + (py - cy) ** 2)
        if distance < 1.0:
            continue
        elevation = zbuf[int(cy), int(cx)] - zbuf[int(py), int(px)]
        max_angle = max(max_angle, math.atan(elevation / distance))
    return max_angle


@njit(cache=True)
def shade_ambient_occlusion(img, zbuf):
    """
    Replace every covered pixel of img by its ambient-occlusion gray level.

    For each pixel with a valid depth:
      - 8 evenly spaced directions (0, pi/4, ..., 7pi/4)
      - each contributes pi/2 - max_elevation_angle
      - the sum is normalized to [0, 1] and raised to AO_EXPONENT

    Returns the number of shaded pixels.
    """
    H, W = zbuf.shape
    count = 0
    for x in range(W):
        for y in range(H):
            if zbuf[y, x] < AO_EMPTY_DEPTH:
                continue
            total = 0.0
            a = 0.0
            while a < math.pi * 2.0 - 1e-4:
                total += math.pi / 2.0 - max_elevation_angle(
                    zbuf, float(x), float(y), math.cos(a), math.sin(a))
                a += math.pi / 4.0
            total /= (math.pi / 2.0) * 8.0
            total = total ** AO_EXPONENT
            c = int(total * 255.0)
            img[y, x, 0] = c
            img[y, x, 1] = c
            img[y, x, 2] = c
            img[y, x, 3] = 255
            count += 1
    return count


def warm_up():
    """
    Trigger compilation of every kernel on tiny buffers.

    The first call of an njit function compiles it; doing that up front
    keeps the first real render (or the first viewer frame) responsive.
    """
    img = np.zeros((4, 4, 4), dtype=np.uint8)
    zbuf = np.full((4, 4), -1e9, dtype=np.float64)
    draw_line(img, 0, 0, 3, 3, 255, 255, 255, 255)
    fill_triangle_flat(img, zbuf, True, 0.0, 0.0, 0.0, 3.0, 0.0, 0.0, 0.0, 3.0, 0.0, 255, 255, 255, 255)
    fill_triangle_scanline(img, zbuf, 0, 0, 0, 1.0, 3, 0, 0, 1.0, 0, 3, 0, 1.0)
    shade_ambient_occlusion(img, zbuf)
