import math

import pytest

from softrender.errors import DimensionMismatch
from softrender.geometry import Vec2, Vec3, Vec4, cross, embed, proj, vector


def test_arithmetic():
    a = Vec3(1.0, 2.0, 3.0)
    b = Vec3(4.0, 5.0, 6.0)
    assert a + b == Vec3(5.0, 7.0, 9.0)
    assert b - a == Vec3(3.0, 3.0, 3.0)
    assert a * 2.0 == Vec3(2.0, 4.0, 6.0)
    assert 2.0 * a == Vec3(2.0, 4.0, 6.0)
    assert a * b == Vec3(4.0, 10.0, 18.0)
    assert b / 2.0 == Vec3(2.0, 2.5, 3.0)
    assert -a == Vec3(-1.0, -2.0, -3.0)


def test_dot_is_symmetric():
    a = Vec3(0.3, -1.2, 4.0)
    b = Vec3(2.5, 0.7, -0.1)
    assert a.dot(b) == pytest.approx(b.dot(a))
    assert a.dot(b) == pytest.approx(0.3 * 2.5 - 1.2 * 0.7 - 0.4)


@pytest.mark.parametrize("v", [Vec2(3.0, 4.0), Vec3(1.0, 1.0, 1.0), Vec4(0.1, -2.0, 7.0, 1.0)])
def test_normalize_gives_unit_length(v):
    assert v.normalize().norm() == pytest.approx(1.0)


def test_normalize_zero_vector():
    assert Vec3(0.0, 0.0, 0.0).normalize() == Vec3(0.0, 0.0, 0.0)


def test_cross_of_axes():
    x, y, z = Vec3(1, 0, 0), Vec3(0, 1, 0), Vec3(0, 0, 1)
    assert x ^ y == z
    assert y ^ z == x
    assert cross(z, x) == y


def test_cross_anticommutes():
    a = Vec3(1.5, -2.0, 0.5)
    b = Vec3(0.2, 3.0, -1.0)
    ab = a ^ b
    ba = b ^ a
    for p, q in zip(ab, ba):
        assert p == pytest.approx(-q)
    assert ab.dot(a) == pytest.approx(0.0)


def test_dimension_mismatch():
    with pytest.raises(DimensionMismatch):
        Vec2(1.0, 2.0) + Vec3(1.0, 2.0, 3.0)
    with pytest.raises(DimensionMismatch):
        Vec3(1.0, 2.0, 3.0).dot(Vec4(1.0, 2.0, 3.0, 4.0))


def test_to_int_rounds_half_up():
    assert Vec3(1.4, 1.5, -0.2).to_int() == Vec3(1, 2, 0)


def test_embed_and_proj():
    v = Vec3(1.0, 2.0, 3.0)
    assert embed(v, 4) == Vec4(1.0, 2.0, 3.0, 1.0)
    assert embed(v, 4, 0.0) == Vec4(1.0, 2.0, 3.0, 0.0)
    assert proj(Vec4(1.0, 2.0, 3.0, 4.0), 2) == Vec2(1.0, 2.0)
    with pytest.raises(DimensionMismatch):
        proj(Vec2(1.0, 2.0), 3)


def test_vector_factory():
    assert isinstance(vector([1.0, 2.0]), Vec2)
    assert isinstance(vector((1.0, 2.0, 3.0, 4.0)), Vec4)
    with pytest.raises(DimensionMismatch):
        vector([1.0])


def test_indexing_and_iteration():
    v = Vec4(1.0, 2.0, 3.0, 4.0)
    assert len(v) == 4
    assert v[2] == 3.0
    assert list(v) == [1.0, 2.0, 3.0, 4.0]
    assert math.isclose(Vec2(3.0, 4.0).norm(), 5.0)
