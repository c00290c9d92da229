"""
model.py

Generic simulated body: identity, pose, the parent/child tree, power draw,
update callbacks and the lifecycle state machine

    CONSTRUCTED -> LOADED -> RUNNING -> STOPPED

Specialised behaviour is not added by subclassing. A model carries an
optional *sensor* object implementing the `Sensorable` hooks; the model
calls them at the right point of each transition:

- startup: base bookkeeping first, then `sensor.startup(model)`
- update: `sensor.update(model)`, then the update callbacks
- shutdown: `sensor.shutdown(model)` first, then base teardown
"""

import enum
import itertools
import logging
from typing import Optional, Protocol

from robosim import config
from robosim.callbacks import UpdateCallbackRegistry
from robosim.errors import LifecycleError, QueryUnavailable
from robosim.geometry import Pose, footprint

log = logging.getLogger(__name__)

_ids = itertools.count()


class LifecycleState(enum.Enum):
    CONSTRUCTED = "constructed"
    LOADED = "loaded"
    RUNNING = "running"
    STOPPED = "stopped"


class Sensorable(Protocol):
    """Hooks a sensor variant provides to its owning model."""

    thread_safe: bool

    def construct(self, model: "Model") -> None: ...

    def load(self, model: "Model", entity) -> None: ...

    def startup(self, model: "Model") -> None: ...

    def update(self, model: "Model") -> None: ...

    def shutdown(self, model: "Model") -> None: ...

    def describe(self, model: "Model") -> str: ...


class Model:
    """A body in the world, optionally carrying a sensor."""

    def __init__(self, world=None, parent: Optional["Model"] = None, type_name: str = "model",
                 sensor: Optional[Sensorable] = None, name: Optional[str] = None):
        self.id = next(_ids)
        self.type = type_name
        self.name = name or f"{type_name}:{self.id}"
        self.world = world
        self.parent = parent
        if world is not None:
            world.add_model(self)
        self.children = []
        if parent is not None:
            parent.children.append(self)

        self.pose = Pose()
        self.geom_size = tuple(config.MODEL_DEFAULT_SIZE)
        self.obstacle_return = True
        self.watts = 0.0
        self.options = {}
        self.callbacks = UpdateCallbackRegistry()
        self.state = LifecycleState.CONSTRUCTED

        self.sensor = sensor
        if sensor is not None:
            sensor.construct(self)

    def __repr__(self):
        return f"Model({self.name!r})"

    @property
    def thread_safe(self) -> bool:
        """True when `update()` may run concurrently with other models."""
        return bool(self.sensor is not None and getattr(self.sensor, 'thread_safe', False))

    # ── geometry ────────────────────────────────────────────────────────────
    def set_pose(self, pose: Pose):
        self.pose = pose

    def set_geom_size(self, size):
        self.geom_size = tuple(float(v) for v in size)

    def get_global_pose(self) -> Pose:
        if self.parent is None:
            return Pose(*self.pose.as_tuple())
        return self.parent.get_global_pose().compose(self.pose)

    def footprint(self):
        return footprint(self.get_global_pose(), self.geom_size)

    # ── lineage ─────────────────────────────────────────────────────────────
    def is_ancestor(self, other: "Model") -> bool:
        """True if `other` is this model's parent, grandparent, ..."""
        p = self.parent
        while p is not None:
            if p is other:
                return True
            p = p.parent
        return False

    def is_descendant(self, other: "Model") -> bool:
        """True if `other` sits somewhere below this model."""
        return other.is_ancestor(self)

    def is_related(self, other: "Model") -> bool:
        return other is self or self.is_ancestor(other) or self.is_descendant(other)

    # ── power / options / callbacks ─────────────────────────────────────────
    def set_watts(self, watts: float):
        self.watts = float(watts)

    def register_option(self, option):
        self.options[option.optstr] = option
        if self.world is not None:
            self.world.register_option(option)

    def add_update_callback(self, fn, user_data=None):
        return self.callbacks.add(fn, user_data)

    def remove_update_callback(self, fn, user_data=None):
        return self.callbacks.remove(fn, user_data)

    def get_world(self):
        return self.world

    # ── lifecycle ───────────────────────────────────────────────────────────
    def load(self, entity):
        """Read pose/size/flags from `entity`, then let the sensor load.

        Nothing is changed on the model unless every read (the sensor's
        included) succeeds.
        """
        if self.state not in (LifecycleState.CONSTRUCTED, LifecycleState.LOADED):
            raise LifecycleError(f"{self.name}: load() not allowed in state {self.state.value}")

        name = entity.read_string('name', self.name)
        pose = Pose(
            entity.read_tuple_length('pose', 0, self.pose.x),
            entity.read_tuple_length('pose', 1, self.pose.y),
            entity.read_tuple_length('pose', 2, self.pose.z),
            entity.read_tuple_angle('pose', 3, self.pose.a),
        )
        size = (
            entity.read_tuple_length('size', 0, self.geom_size[0]),
            entity.read_tuple_length('size', 1, self.geom_size[1]),
            entity.read_tuple_length('size', 2, self.geom_size[2]),
        )
        obstacle_return = entity.read_bool('obstacle_return', self.obstacle_return)

        if self.sensor is not None:
            self.sensor.load(self, entity)
        self.name = name
        self.pose = pose
        self.geom_size = size
        self.obstacle_return = obstacle_return
        self.state = LifecycleState.LOADED
        log.debug("%s loaded", self.name)

    def startup(self):
        if self.state not in (LifecycleState.CONSTRUCTED, LifecycleState.LOADED):
            raise LifecycleError(f"{self.name}: startup() not allowed in state {self.state.value}")
        log.debug("%s startup", self.name)
        if self.world is not None:
            self.world.start_updating(self)
        self.state = LifecycleState.RUNNING
        if self.sensor is not None:
            self.sensor.startup(self)

    def update(self):
        if self.state is not LifecycleState.RUNNING:
            raise LifecycleError(f"{self.name}: update() not allowed in state {self.state.value}")
        if self.sensor is not None:
            self.sensor.update(self)
        self.callbacks.call_all(self)

    def shutdown(self):
        if self.state is not LifecycleState.RUNNING:
            raise LifecycleError(f"{self.name}: shutdown() not allowed in state {self.state.value}")
        log.debug("%s shutdown", self.name)
        if self.sensor is not None:
            self.sensor.shutdown(self)
        self.set_watts(0.0)
        if self.world is not None:
            self.world.stop_updating(self)
        self.state = LifecycleState.STOPPED

    # ── queries ─────────────────────────────────────────────────────────────
    def raytrace(self, pose: Pose, max_range: float, match):
        """Cast a ray from `pose` (in this model's frame) into the world."""
        if self.world is None:
            raise QueryUnavailable(f"{self.name}: model is not attached to a world")
        global_pose = self.get_global_pose().compose(pose)
        return self.world.raytrace(global_pose, max_range, match, self)

    def print_state(self, prefix=""):
        """Return (and log at INFO) a one-block text dump of this model."""
        p = self.get_global_pose()
        lines = [f"{prefix}Model \"{self.name}\" ({self.type}) state={self.state.value} "
                 f"pose=[{p.x:.2f} {p.y:.2f} {p.z:.2f} {p.a:.2f}] watts={self.watts:.2f}"]
        if self.sensor is not None:
            lines.append(f"\t{self.sensor.describe(self)}")
        text = "\n".join(lines)
        log.info(text)
        return text
