import logging

import pytest
from PIL import Image

from softrender.cli import build_parser, main

from conftest import QUAD_OBJ


@pytest.fixture(autouse=True)
def quiet_env(monkeypatch):
    for name in ("SOFTRENDER_ASSETS", "SOFTRENDER_WIDTH", "SOFTRENDER_HEIGHT", "SOFTRENDER_SAMPLING"):
        monkeypatch.delenv(name, raising=False)
    yield
    logging.getLogger("softrender").handlers.clear()


def test_list(capsys):
    assert main(["list"]) == 0
    out = capsys.readouterr().out
    assert "/shaders/shadowmapping" in out
    assert "/wire" in out


def test_render_to_file(tmp_path):
    out = tmp_path / "tri.png"
    assert main(["render", "/triangle", "-o", str(out)]) == 0
    assert Image.open(out).size == (200, 200)


def test_render_with_flags(tmp_path):
    head = tmp_path / "assets" / "african_head"
    head.mkdir(parents=True)
    (head / "african_head.obj").write_text(QUAD_OBJ)
    out = tmp_path / "g.png"
    rc = main(["render", "/shaders/gouraud", "-o", str(out),
               "--assets", str(tmp_path / "assets"), "--width", "48", "--height", "40"])
    assert rc == 0
    assert Image.open(out).size == (48, 40)


def test_render_error_exit_code(tmp_path, capsys):
    rc = main(["render", "/wire", "-o", str(tmp_path / "w.png"),
               "--assets", str(tmp_path / "missing"), "--width", "16", "--height", "16"])
    assert rc == 1
    assert "softrender: error:" in capsys.readouterr().err
    assert not (tmp_path / "w.png").exists()


def test_env_overrides(monkeypatch, tmp_path):
    monkeypatch.setenv("SOFTRENDER_WIDTH", "30")
    monkeypatch.setenv("SOFTRENDER_HEIGHT", "20")
    out = tmp_path / "line.png"
    assert main(["render", "/line", "-o", str(out)]) == 0
    assert Image.open(out).size == (30, 20)


def test_unknown_route_is_a_usage_error():
    with pytest.raises(SystemExit) as e:
        build_parser().parse_args(["render", "/nope", "-o", "x.png"])
    assert e.value.code == 2
