import os

import numpy as np
import pytest
from PIL import Image

from softrender.config import RenderConfig
from softrender.geometry import Vec3

DIFFUSE = (200, 100, 50)
FLAT_NORMAL = (128, 128, 255)
SPECULAR = (10, 10, 10)

# Unit quad in the z=0 plane, facing +z, split along its diagonal.
QUAD_OBJ = """\
# test quad
v -0.5 -0.5 0.0
v 0.5 -0.5 0.0
v 0.5 0.5 0.0
v -0.5 0.5 0.0
vt 0.0 0.0
vt 1.0 0.0
vt 1.0 1.0
vt 0.0 1.0
vn 0.0 0.0 1.0
f 1/1/1 2/2/1 3/3/1
f 1/1/1 3/3/1 4/4/1
"""


def write_maps(stem: str):
    Image.new("RGB", (4, 4), DIFFUSE).save(stem + "_diffuse.tga")
    Image.new("RGB", (4, 4), FLAT_NORMAL).save(stem + "_nm.tga")
    Image.new("RGB", (4, 4), SPECULAR).save(stem + "_spec.tga")


@pytest.fixture
def assets(tmp_path):
    """Asset directory holding quad/quad.obj and its three texture maps."""
    folder = tmp_path / "quad"
    folder.mkdir()
    (folder / "quad.obj").write_text(QUAD_OBJ)
    write_maps(os.path.join(str(folder), "quad"))
    return tmp_path


@pytest.fixture
def quad_path(assets):
    return str(assets / "quad" / "quad.obj")


@pytest.fixture
def config(assets):
    return RenderConfig(
        width=64, height=64,
        assets_dir=str(assets),
        head_mesh=os.path.join("quad", "quad.obj"),
        shadow_mesh=os.path.join("quad", "quad.obj"),
    )


@pytest.fixture
def head_on_config(config):
    """Camera on the z axis, looking straight at the quad."""
    return config.with_overrides(eye=Vec3(0.0, 0.0, 3.0))


@pytest.fixture
def rgba():
    def make(h, w, color):
        a = np.empty((h, w, 4), dtype=np.uint8)
        a[:, :] = color
        return a
    return make
