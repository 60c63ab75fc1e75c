"""
softrender: a CPU software rendering pipeline.

OBJ mesh + camera -> RGBA image, through lookat / projection / viewport,
z-buffered rasterization and programmable vertex/fragment shaders.
"""
from .buffers import DepthBuffer, FrameBuffer
from .config import RenderConfig
from .errors import (
    DimensionMismatch, MeshLoadError, RenderError, SampleOutOfRange, SingularMatrix,
    TextureLoadError,
)
from .geometry import Vec2, Vec3, Vec4, cross, embed, proj, vector
from .matrix import Mat4, Matrix
from .mesh import Mesh
from .pipeline import Pipeline, barycentric
from .routes import ROUTES, Response, handle, render_png
from .texture import Texture
from .transform import DEPTH, lookat, projection, viewport

__version__ = "0.1.0"
