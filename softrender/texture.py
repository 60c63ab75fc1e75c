import logging
from typing import Tuple

import numpy as np
from PIL import Image, UnidentifiedImageError

from .errors import SampleOutOfRange, TextureLoadError

logger = logging.getLogger(__name__)

CLAMP = "clamp"
STRICT = "strict"
SAMPLING_POLICIES = (CLAMP, STRICT)


class Texture:
    """
    RGBA8 texture sampled with nearest-neighbor addressing.

    texels:
      - numpy array, shape (H, W, 4), dtype=uint8, read-only
      - row 0 is v = 0: images are stored top-down, mesh UVs grow upwards,
        so the image is flipped vertically at load time

    Sampling:
      texel = texels[int(v * H), int(u * W)]
      - policy "clamp":  indices outside the grid are clamped to the edge
      - policy "strict": indices outside the grid raise SampleOutOfRange
    """
    def __init__(self, texels: np.ndarray, policy: str = CLAMP, name: str = "<array>"):
        if texels.ndim != 3 or texels.shape[2] != 4:
            raise TextureLoadError(f"{name}: expected an HxWx4 array, got shape {texels.shape}")
        if policy not in SAMPLING_POLICIES:
            raise ValueError(f"unknown sampling policy {policy!r}")
        self.texels = texels
        self.texels.flags.writeable = False
        self.height, self.width = texels.shape[:2]
        self.policy = policy
        self.name = name

    @classmethod
    def open(cls, path: str, flip: bool = True, policy: str = CLAMP) -> "Texture":
        """Decode an image file (TGA, PNG, ...) with Pillow."""
        try:
            with Image.open(path) as im:
                if flip:
                    im = im.transpose(Image.Transpose.FLIP_TOP_BOTTOM)
                texels = np.array(im.convert("RGBA"), dtype=np.uint8)
        except (OSError, UnidentifiedImageError) as e:
            raise TextureLoadError(f"cannot load texture {path}: {e}") from e
        logger.debug("Loaded texture %s (%dx%d)", path, texels.shape[1], texels.shape[0])
        return cls(texels, policy=policy, name=str(path))

    def sample(self, u: float, v: float) -> Tuple[int, int, int, int]:
        x = int(u * self.width)
        y = int(v * self.height)
        if not (0 <= x < self.width and 0 <= y < self.height):
            if self.policy == STRICT:
                raise SampleOutOfRange(
                    f"{self.name}: uv ({u:.4f}, {v:.4f}) -> texel ({x}, {y}) "
                    f"outside {self.width}x{self.height}")
            x = min(max(x, 0), self.width - 1)
            y = min(max(y, 0), self.height - 1)
        t = self.texels[y, x]
        return int(t[0]), int(t[1]), int(t[2]), int(t[3])
