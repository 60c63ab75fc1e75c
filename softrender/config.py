import os
from dataclasses import dataclass, field, replace

from .geometry import Vec3
from .shaders.shadowmapping import SHADOW_BIAS
from .texture import CLAMP, SAMPLING_POLICIES


@dataclass
class RenderConfig:
    """Settings shared by every scene."""
    width: int = 800
    height: int = 800
    eye: Vec3 = field(default_factory=lambda: Vec3(1.0, 1.0, 3.0))
    center: Vec3 = field(default_factory=lambda: Vec3(0.0, 0.0, 0.0))
    up: Vec3 = field(default_factory=lambda: Vec3(0.0, 1.0, 0.0))
    light_dir: Vec3 = field(default_factory=lambda: Vec3(1.0, 1.0, 1.0))
    ao_eye: Vec3 = field(default_factory=lambda: Vec3(1.2, -0.8, 3.0))
    assets_dir: str = "obj"
    head_mesh: str = os.path.join("african_head", "african_head.obj")
    shadow_mesh: str = os.path.join("diablo3_pose", "diablo3_pose.obj")
    sampling: str = CLAMP
    shadow_bias: float = SHADOW_BIAS
    seed: int = 0

    def __post_init__(self):
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"canvas size must be positive, got {self.width}x{self.height}")
        if self.sampling not in SAMPLING_POLICIES:
            raise ValueError(f"unknown sampling policy {self.sampling!r}, "
                             f"expected one of {', '.join(SAMPLING_POLICIES)}")

    @property
    def strict(self) -> bool:
        return self.sampling != CLAMP

    def asset(self, relative: str) -> str:
        return os.path.join(self.assets_dir, relative)

    @property
    def head_path(self) -> str:
        return self.asset(self.head_mesh)

    @property
    def shadow_path(self) -> str:
        return self.asset(self.shadow_mesh)

    def with_overrides(self, **changes) -> "RenderConfig":
        """Copy with the non-None keyword arguments applied."""
        return replace(self, **{k: v for k, v in changes.items() if v is not None})

    @classmethod
    def from_env(cls, environ=None) -> "RenderConfig":
        """
        Defaults overridden by the environment:
          SOFTRENDER_ASSETS, SOFTRENDER_WIDTH, SOFTRENDER_HEIGHT, SOFTRENDER_SAMPLING
        """
        env = os.environ if environ is None else environ
        changes = {}
        if env.get("SOFTRENDER_ASSETS"):
            changes["assets_dir"] = env["SOFTRENDER_ASSETS"]
        if env.get("SOFTRENDER_WIDTH"):
            changes["width"] = int(env["SOFTRENDER_WIDTH"])
        if env.get("SOFTRENDER_HEIGHT"):
            changes["height"] = int(env["SOFTRENDER_HEIGHT"])
        if env.get("SOFTRENDER_SAMPLING"):
            changes["sampling"] = env["SOFTRENDER_SAMPLING"].lower()
        return cls(**changes)
