"""Poses, angle wrapping and footprint helpers.

Angles are radians, counter-clockwise, 0 along +x. Poses are composed the
same way for every body in the world: a child pose is expressed in its
parent's frame.
"""
import math
from dataclasses import dataclass

import numpy as np
from shapely.geometry import LineString, Polygon


def wrap_rad(x):
    """Wrap radians to [-pi, pi).

    Accepts scalars or numpy arrays; returns same-shaped output.
    """
    x_arr = np.asarray(x)
    return (x_arr + math.pi) % (2 * math.pi) - math.pi


def is_finite(*values) -> bool:
    return bool(np.all(np.isfinite(np.asarray(values, dtype=float))))


@dataclass
class Pose:
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0
    a: float = 0.0

    def compose(self, other: "Pose") -> "Pose":
        """Return `other` (expressed in this pose's frame) in the outer frame."""
        c = math.cos(self.a)
        s = math.sin(self.a)
        return Pose(
            self.x + other.x * c - other.y * s,
            self.y + other.x * s + other.y * c,
            self.z + other.z,
            float(wrap_rad(self.a + other.a)),
        )

    def as_tuple(self):
        return (self.x, self.y, self.z, self.a)


def footprint(pose: Pose, size) -> Polygon:
    """Rectangle of `size` (sx, sy, ...) centered on `pose`, rotated by pose.a."""
    hx = float(size[0]) / 2.0
    hy = float(size[1]) / 2.0
    corners = np.array([[-hx, -hy], [hx, -hy], [hx, hy], [-hx, hy]])
    c = math.cos(pose.a)
    s = math.sin(pose.a)
    rot = np.array([[c, -s], [s, c]])
    pts = corners @ rot.T + np.array([pose.x, pose.y])
    return Polygon(pts)


def ray_segment(pose: Pose, length: float) -> LineString:
    """Segment from pose along its heading for `length` meters."""
    end_x = pose.x + length * math.cos(pose.a)
    end_y = pose.y + length * math.sin(pose.a)
    return LineString([(pose.x, pose.y), (end_x, end_y)])
