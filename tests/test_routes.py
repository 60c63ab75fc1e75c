import io

import pytest
from PIL import Image

from softrender.config import RenderConfig
from softrender.routes import CONTENT_TYPE, ROUTES, handle, render_png

from conftest import QUAD_OBJ

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"


def decode(body):
    return Image.open(io.BytesIO(body))


def test_route_table():
    assert set(ROUTES) == {
        "/wire", "/line", "/triangle", "/flat-shading", "/z-buf", "/move-camera",
        "/move-camera/depth", "/linear-light", "/shaders/gouraud", "/shaders/gouraud6l",
        "/shaders/texture", "/shaders/normalmapping", "/shaders/specularmapping",
        "/shaders/shadowmapping", "/shaders/ambientocclusion",
    }


def test_triangle_route(config):
    resp = handle("/triangle", config)
    assert resp.status == 200
    assert resp.content_type == CONTENT_TYPE == "image/png"
    assert resp.body.startswith(PNG_SIGNATURE)
    im = decode(resp.body)
    assert im.size == (200, 200)
    # flipped: the triangle's bottom edge is near the bottom of the picture
    assert im.getpixel((100, 199 - 60)) == (255, 0, 0, 255)


def test_line_route_is_not_flipped(config):
    im = decode(render_png("/line", config))
    assert im.getpixel((0, 0)) == (0, 0, 0, 255)
    assert im.getpixel((0, 63)) == (0, 0, 0, 0)


@pytest.mark.parametrize("path", ["/shaders/gouraud", "/move-camera/depth", "/z-buf"])
def test_render_routes(config, path):
    resp = handle(path, config)
    assert resp.status == 200
    assert decode(resp.body).size == (64, 64)


def test_unknown_route(config):
    resp = handle("/shaders/phong", config)
    assert resp.status == 404
    assert resp.content_type == "text/plain"
    with pytest.raises(KeyError):
        render_png("/shaders/phong", config)


def test_render_error_becomes_500(tmp_path):
    # mesh present, texture maps missing
    folder = tmp_path / "bare"
    folder.mkdir()
    (folder / "bare.obj").write_text(QUAD_OBJ)
    config = RenderConfig(width=32, height=32, assets_dir=str(tmp_path),
                          head_mesh="bare/bare.obj", shadow_mesh="bare/bare.obj")
    resp = handle("/shaders/texture", config)
    assert resp.status == 500
    assert resp.content_type == "text/plain"
    assert b"TextureLoadError" in resp.body
    assert not resp.body.startswith(PNG_SIGNATURE)


def test_missing_mesh_becomes_500(tmp_path):
    resp = handle("/wire", RenderConfig(width=16, height=16, assets_dir=str(tmp_path)))
    assert resp.status == 500
    assert b"MeshLoadError" in resp.body
