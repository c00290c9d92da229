"""
bumper.py

Bumper/whisker arrays: a set of binary touch transducers attached to a model.

Worldfile properties (defaults shown):

    {"type": "bumper",
     "bcount": 1,
     "bpose[0]": [0, 0, 0, 0],
     "blength": 0.1}

- `bcount` number of transducers (required when loading, must be > 0)
- `bpose[i]` [x, y, z, heading] of the centre of transducer i relative to
  the bumper model
- `blength` length of every transducer in the array
- `blength[i]` length of transducer i

The global `blength` is applied to every slot first and the indexed
properties afterwards, so the order they appear in the worldfile does not
matter.

Each tick a transducer is tested with a single ray swept across its segment:
the ray starts at one end of the segment, points along the segment's normal
(heading + pi/2) and is as long as the segment. This is an approximation of
full segment coverage and is kept as-is.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import numpy as np

from robosim import config
from robosim.errors import InvalidValue, MissingField
from robosim.geometry import Pose, is_finite
from robosim.model import Model
from robosim.options import Option

log = logging.getLogger(__name__)


@dataclass
class BumperConfig:
    pose: Pose = field(default_factory=Pose)
    length: float = config.DEFAULT_BUMPER_LENGTH


@dataclass
class BumperSample:
    hit: bool = False
    hit_point: Tuple[float, float] = (0.0, 0.0)


def bumper_match(candidate, finder) -> bool:
    """Ray filter: obstacles only, ignoring the finder, its ancestors and descendants."""
    return bool(candidate.obstacle_return) and not candidate.is_related(finder)


def sensing_ray_pose(cfg: BumperConfig) -> Pose:
    """Pose (in the bumper model's frame) of the ray that sweeps transducer `cfg`."""
    a = cfg.pose.a + math.pi / 2.0
    half = cfg.length / 2.0
    return Pose(cfg.pose.x - half * math.cos(a), cfg.pose.y - half * math.sin(a), 0.0, a)


class BumperArray:
    """Sensor variant for a `Model` holding an array of bumper transducers.

    `configs` is fixed by `load()`; `samples` is None until the first
    `update()` after startup and is released again on shutdown.
    """

    thread_safe = True
    show_data = Option("Show Bumper Data", "show_bumper", "", True)

    def __init__(self):
        self.configs: List[BumperConfig] = []
        self.samples: Optional[List[BumperSample]] = None

    @property
    def count(self) -> int:
        return len(self.configs)

    # ── lifecycle hooks ─────────────────────────────────────────────────────
    def construct(self, model):
        model.set_geom_size(config.BUMPER_DEFAULT_SIZE)
        model.register_option(self.show_data)

    def load(self, model, entity):
        if not entity.property_exists('bcount'):
            raise MissingField('bcount')
        count = entity.read_int('bcount', 0)
        if count <= 0:
            raise InvalidValue('bcount', count, "must be greater than zero")

        common_length = entity.read_length('blength', config.DEFAULT_BUMPER_LENGTH)
        if common_length < 0.0:
            log.warning("%s: negative blength %s clamped to 0", model.name, common_length)
            common_length = 0.0

        # pass 1: every slot gets the array-wide length
        configs = [BumperConfig(Pose(), common_length) for _ in range(count)]

        # pass 2: per-transducer pose and length override the baseline
        for i, cfg in enumerate(configs):
            key = f"bpose[{i}]"
            pose = Pose(
                entity.read_tuple_length(key, 0, 0.0),
                entity.read_tuple_length(key, 1, 0.0),
                entity.read_tuple_length(key, 2, 0.0),
                entity.read_tuple_angle(key, 3, 0.0),
            )
            if is_finite(*pose.as_tuple()):
                cfg.pose = pose

            length = entity.read_length(f"blength[{i}]", cfg.length)
            if length >= 0.0:
                cfg.length = length
            else:
                log.warning("%s: negative blength[%d] %s ignored", model.name, i, length)

        self.configs = configs
        self.samples = None
        log.debug("%s: loaded %d bumper configs", model.name, count)

    def startup(self, model):
        self.samples = None
        model.set_watts(config.BUMPER_WATTS)

    def update(self, model):
        if not self.configs:
            return

        if self.samples is None:
            self.samples = [BumperSample() for _ in self.configs]

        for cfg, sample in zip(self.configs, self.samples):
            ray = model.raytrace(sensing_ray_pose(cfg), cfg.length, bumper_match)
            sample.hit = ray.mod is not None
            if sample.hit:
                sample.hit_point = (ray.pose.x, ray.pose.y)

    def shutdown(self, model):
        model.set_watts(0.0)
        self.samples = None

    # ── read-only views ─────────────────────────────────────────────────────
    def hits(self) -> np.ndarray:
        """Boolean array of the latest hit flags (empty before the first update)."""
        if self.samples is None:
            return np.zeros(0, dtype=bool)
        return np.array([s.hit for s in self.samples], dtype=bool)

    def hit_points(self) -> np.ndarray:
        """(N, 2) hit points; rows for transducers without a hit are NaN."""
        if self.samples is None:
            return np.zeros((0, 2), dtype=float)
        pts = np.full((len(self.samples), 2), np.nan)
        for i, s in enumerate(self.samples):
            if s.hit:
                pts[i] = s.hit_point
        return pts

    def describe(self, model) -> str:
        flags = " ".join("1" if s.hit else "0" for s in (self.samples or []))
        return f"Bumpers[ {flags} ]" if flags else "Bumpers[ ]"

    def visualize(self, model):
        """Segments for a renderer, in the bumper model's frame.

        Returns a list of dicts (pose, length, thickness, color, hit); empty
        when display is switched off or no samples exist yet.
        """
        if not (self.show_data and self.samples and self.configs):
            return []
        segments = []
        for cfg, sample in zip(self.configs, self.samples):
            if sample.hit:
                thickness, color = config.BUMPER_HIT_THICKNESS, config.BUMPER_HIT_COLOR
            else:
                thickness, color = config.BUMPER_NOHIT_THICKNESS, config.BUMPER_NOHIT_COLOR
            segments.append({
                'pose': cfg.pose.as_tuple(),
                'length': cfg.length,
                'thickness': thickness,
                'color': color,
                'hit': sample.hit,
            })
        return segments


def make_bumper(world=None, parent=None, name=None):
    """Create a model carrying a fresh `BumperArray`."""
    return Model(world, parent, "bumper", sensor=BumperArray(), name=name)
