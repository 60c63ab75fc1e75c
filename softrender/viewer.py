"""
Interactive preview window (pygame).

Controls:
  - 1..9, 0     : jump to route 1..10
  - Left/Right  : previous / next route
  - S           : save the current picture as PNG
  - Esc         : quit

Each route is rendered once and cached; the window only blits.
"""
import logging
import os
from typing import Dict, List, Optional

os.environ.setdefault("PYGAME_HIDE_SUPPORT_PROMPT", "1")

import numpy as np
import pygame

from . import raster
from .buffers import FrameBuffer
from .config import RenderConfig
from .errors import RenderError
from .routes import ROUTES

logger = logging.getLogger(__name__)

HUD_COLOR = (235, 235, 235)
ERROR_COLOR = (255, 90, 90)
NUMBER_KEYS = [pygame.K_1, pygame.K_2, pygame.K_3, pygame.K_4, pygame.K_5,
               pygame.K_6, pygame.K_7, pygame.K_8, pygame.K_9, pygame.K_0]


def surface_array(fb: FrameBuffer, flip: bool = True) -> np.ndarray:
    """
    RGB array in pygame's surfarray layout.

    Note:
      FrameBuffer is [y, x] with y up; pygame wants [x, y] with y down.
    """
    rgb = fb.flipped()[:, :, :3] if flip else fb.pixels[:, :, :3]
    return np.ascontiguousarray(rgb.transpose(1, 0, 2))


def save_name(path: str) -> str:
    """'/shaders/gouraud' -> 'shaders-gouraud.png'"""
    return path.strip("/").replace("/", "-") + ".png"


class Viewer:
    """Route list, render cache and the current selection."""

    def __init__(self, config: RenderConfig, start: Optional[str] = None):
        self.config = config
        self.paths: List[str] = list(ROUTES)
        self.index = self.paths.index(start) if start else 0
        self.cache: Dict[str, FrameBuffer] = {}
        self.errors: Dict[str, str] = {}

    @property
    def current(self) -> str:
        return self.paths[self.index]

    def select(self, index: int):
        self.index = index % len(self.paths)

    def frame(self) -> Optional[FrameBuffer]:
        """Rendered picture of the current route, or None if it failed."""
        path = self.current
        if path not in self.cache and path not in self.errors:
            try:
                self.cache[path] = ROUTES[path].render(self.config)
            except RenderError as e:
                logger.error("%s failed: %s", path, e)
                self.errors[path] = str(e)
        return self.cache.get(path)

    def save(self) -> Optional[str]:
        fb = self.frame()
        if fb is None:
            return None
        name = save_name(self.current)
        fb.save(name, flip=ROUTES[self.current].flip)
        logger.info("saved %s", name)
        return name


def run(config: RenderConfig, start: Optional[str] = None) -> int:
    """
    Main interactive loop:
      - handle input
      - render the selected route on first use
      - blit the cached picture and the HUD
    """
    viewer = Viewer(config, start)

    pygame.init()
    screen = pygame.display.set_mode((config.width, config.height))
    pygame.display.set_caption("softrender: 1..0 / arrows switch routes, S saves")
    clock = pygame.time.Clock()
    font = pygame.font.SysFont("consolas", 16)

    # First njit call compiles
    raster.warm_up()

    status = ""
    running = True
    while running:
        clock.tick(30)

        # ====================================================
        #  Input handling
        # ====================================================
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                running = False

            elif event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    running = False
                elif event.key == pygame.K_RIGHT:
                    viewer.select(viewer.index + 1)
                    status = ""
                elif event.key == pygame.K_LEFT:
                    viewer.select(viewer.index - 1)
                    status = ""
                elif event.key == pygame.K_s:
                    name = viewer.save()
                    status = f"saved {name}" if name else "nothing to save"
                elif event.key in NUMBER_KEYS:
                    n = NUMBER_KEYS.index(event.key)
                    if n < len(viewer.paths):
                        viewer.select(n)
                        status = ""

        # ====================================================
        #  Draw
        # ====================================================
        screen.fill((40, 40, 40))
        fb = viewer.frame()
        if fb is not None:
            surf = pygame.surfarray.make_surface(surface_array(fb, ROUTES[viewer.current].flip))
            screen.blit(surf, (0, 0))

        hud = [f"[{viewer.index + 1}/{len(viewer.paths)}] {viewer.current}"]
        if viewer.current in viewer.errors:
            hud.append(viewer.errors[viewer.current])
        if status:
            hud.append(status)
        y = 10
        for i, line in enumerate(hud):
            color = ERROR_COLOR if i == 1 and viewer.current in viewer.errors else HUD_COLOR
            screen.blit(font.render(line, True, color), (10, y))
            y += 18

        pygame.display.flip()

    pygame.quit()
    return 0
