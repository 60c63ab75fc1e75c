import io
from typing import Tuple

import numpy as np
from PIL import Image

from .errors import SampleOutOfRange

Color = Tuple[int, int, int, int]

BLACK: Color = (0, 0, 0, 255)
TRANSPARENT: Color = (0, 0, 0, 0)

# "Nothing drawn yet" depth. Depth tests keep the larger value, so the
# most negative finite float loses to every real fragment.
DEPTH_FAR = float(np.finfo(np.float64).min)


class FrameBuffer:
    """
    RGBA8 image owned by a single render.

    pixels:
      - numpy array, shape (H, W, 4), dtype=uint8
      - IMPORTANT: index order is [y, x, channel]; y=0 is the bottom row
        of the final picture (to_png flips before encoding)
    """
    def __init__(self, width: int, height: int, fill: Color = BLACK):
        self.width = width
        self.height = height
        self.pixels = np.empty((height, width, 4), dtype=np.uint8)
        self.pixels[:, :] = fill

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def set(self, x: int, y: int, color: Color):
        self.pixels[y, x] = color

    def get(self, x: int, y: int) -> Color:
        return tuple(int(c) for c in self.pixels[y, x])

    def flipped(self) -> np.ndarray:
        """Copy of the pixels with rows reversed (image coordinates, y down)."""
        return np.ascontiguousarray(self.pixels[::-1])

    def to_image(self, flip: bool = True) -> Image.Image:
        return Image.fromarray(self.flipped() if flip else self.pixels, "RGBA")

    def to_png(self, flip: bool = True) -> bytes:
        """Encode as PNG bytes (vertically flipped by default)."""
        out = io.BytesIO()
        self.to_image(flip).save(out, format="PNG")
        return out.getvalue()

    def save(self, path: str, flip: bool = True):
        self.to_image(flip).save(path)


class DepthBuffer:
    """
    One float per pixel, initialized to DEPTH_FAR.

    values:
      - numpy array, shape (H, W), dtype=float64, indexed [y, x]
    """
    def __init__(self, width: int, height: int):
        self.width = width
        self.height = height
        self.values = np.full((height, width), DEPTH_FAR, dtype=np.float64)

    def lookup(self, x: int, y: int, strict: bool = False) -> float:
        """
        Depth at (x, y).

        strict=False clamps the index to the buffer, strict=True raises
        SampleOutOfRange for an index outside it.
        """
        if not (0 <= x < self.width and 0 <= y < self.height):
            if strict:
                raise SampleOutOfRange(
                    f"depth lookup ({x}, {y}) outside {self.width}x{self.height} buffer")
            x = min(max(x, 0), self.width - 1)
            y = min(max(y, 0), self.height - 1)
        return float(self.values[y, x])

    def written(self) -> np.ndarray:
        """Boolean mask of pixels that received at least one fragment."""
        return self.values > DEPTH_FAR

    def to_framebuffer(self) -> FrameBuffer:
        """Grayscale picture of the buffer, depth clamped to [0, 255]."""
        fb = FrameBuffer(self.width, self.height)
        gray = np.clip(self.values, 0.0, 255.0).astype(np.uint8)
        fb.pixels[:, :, 0] = gray
        fb.pixels[:, :, 1] = gray
        fb.pixels[:, :, 2] = gray
        return fb
