import math
import numpy as np
import pytest

from robosim.geometry import Pose, footprint, is_finite, ray_segment, wrap_rad


def test_wrap_rad_basic():
    assert abs(wrap_rad(math.pi - 1e-6) - (math.pi - 1e-6)) < 1e-9
    assert abs(wrap_rad(math.pi + 0.1) - (-math.pi + 0.1)) < 1e-9


def test_wrap_rad_array():
    out = wrap_rad(np.array([0.0, 2 * math.pi, -3 * math.pi / 2]))
    assert out.shape == (3,)
    assert out[1] == pytest.approx(0.0, abs=1e-12)
    assert out[2] == pytest.approx(math.pi / 2)


def test_compose_rotates_child_offset():
    parent = Pose(1.0, 2.0, 0.5, math.pi / 2)
    child = Pose(1.0, 0.0, 0.25, 0.0)
    g = parent.compose(child)
    assert g.x == pytest.approx(1.0, abs=1e-12)
    assert g.y == pytest.approx(3.0)
    assert g.z == pytest.approx(0.75)
    assert g.a == pytest.approx(math.pi / 2)


def test_footprint_rotated_square():
    poly = footprint(Pose(0.0, 0.0, 0.0, math.pi / 4), (1.0, 1.0, 1.0))
    assert poly.area == pytest.approx(1.0)
    minx, miny, maxx, maxy = poly.bounds
    assert maxx == pytest.approx(math.sqrt(2) / 2)


def test_ray_segment_length_and_direction():
    seg = ray_segment(Pose(1.0, 1.0, 0.0, math.pi), 2.0)
    assert seg.length == pytest.approx(2.0)
    end = seg.coords[-1]
    assert end[0] == pytest.approx(-1.0)
    assert end[1] == pytest.approx(1.0)


def test_is_finite():
    assert is_finite(0.0, 1.0, -2.0)
    assert not is_finite(0.0, float('nan'))
    assert not is_finite(float('inf'))
