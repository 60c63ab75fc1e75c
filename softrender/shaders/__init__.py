from .base import Shader, interpolate
from .gouraud import Gouraud6LShader, GouraudShader
from .texture import TextureShader
from .normalmapping import NormalMappingShader
from .specularmapping import SpecularMappingShader
from .shadowmapping import DepthShader, ShadowShader, shadow_matrix
from .ambientocclusion import ZShader, ambient_occlusion

__all__ = [
    "Shader", "interpolate",
    "GouraudShader", "Gouraud6LShader", "TextureShader",
    "NormalMappingShader", "SpecularMappingShader",
    "DepthShader", "ShadowShader", "shadow_matrix",
    "ZShader", "ambient_occlusion",
]
