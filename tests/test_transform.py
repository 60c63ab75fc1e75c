import pytest

from softrender.geometry import Vec3, Vec4
from softrender.matrix import Mat4
from softrender.transform import DEPTH, lookat, projection, viewport


def test_lookat_basis_on_z_axis():
    m = lookat(Vec3(0.0, 0.0, 1.0), Vec3(0.0, 0.0, 0.0), Vec3(0.0, 1.0, 0.0))
    assert m.allclose(Mat4.identity())


def test_lookat_basis_is_orthonormal():
    m = lookat(Vec3(1.0, 1.0, 3.0), Vec3(0.0, 0.0, 0.0), Vec3(0.0, 1.0, 0.0))
    rows = [Vec3(*m[i][:3]) for i in range(3)]
    for i in range(3):
        assert rows[i].norm() == pytest.approx(1.0)
        for j in range(i + 1, 3):
            assert rows[i].dot(rows[j]) == pytest.approx(0.0, abs=1e-12)
    # z row points from center to eye
    assert list(rows[2]) == pytest.approx(list(Vec3(1.0, 1.0, 3.0).normalize()))


def test_lookat_translates_by_center():
    m = lookat(Vec3(0.0, 0.0, 5.0), Vec3(1.0, 2.0, 3.0), Vec3(0.0, 1.0, 0.0))
    assert [m[i][3] for i in range(3)] == [-1.0, -2.0, -3.0]


def test_projection_coefficient():
    m = projection(-0.25)
    assert m[3][2] == -0.25
    p = m.mul_vec4(Vec4(0.0, 0.0, 2.0, 1.0))
    assert p.w == pytest.approx(0.5)
    assert projection(0.0) == Mat4.identity()


def test_viewport_maps_unit_cube():
    m = viewport(100, 100, 600, 600)
    lo = m.mul_vec4(Vec4(-1.0, -1.0, -1.0, 1.0))
    hi = m.mul_vec4(Vec4(1.0, 1.0, 1.0, 1.0))
    assert (lo.x, lo.y, lo.z) == (100.0, 100.0, 0.0)
    assert (hi.x, hi.y, hi.z) == (700.0, 700.0, DEPTH)
