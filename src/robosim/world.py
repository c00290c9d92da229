"""
world.py

The World owns every model, the tick counter and the spatial index that
sensors query.

Core Responsibilities:
----------------------
1. Model registry:
   • Build the model tree from a worldfile; a model whose configuration is
     rejected is skipped (with its subtree) and logged, siblings still load.
   • Keep the list of running models that receive `update()` every tick.

2. Tick loop (`update()`):
   • Apply additions/removals queued during the previous tick.
   • Rebuild the spatial index from the current model footprints.
   • Run thread-safe models on a worker pool and wait for all of them,
     then run the remaining models on the calling thread.
   • Increment `update_count`.

3. Spatial queries (`raytrace()`):
   • Nearest intersection of a ray with the footprints of models accepted
     by a caller-supplied filter. Read-only during the update phase.

Usage Example:
--------------
    from robosim.world import World

    world = World.from_worldfile("worlds/simple.json")
    world.start()
    world.run(100)
    for m in world.models:
        m.print_state()
    world.shutdown()
"""

import concurrent.futures
import logging
import threading
from dataclasses import dataclass, field
from typing import Optional

import numpy as np
import shapely
from shapely.strtree import STRtree

from robosim import config
from robosim.bumper import BumperArray
from robosim.errors import ConfigError, InvalidValue, LifecycleError, QueryUnavailable
from robosim.geometry import Pose, ray_segment
from robosim.model import LifecycleState, Model
from robosim.utils import safe_log_exception
from robosim.worldfile import Worldfile

log = logging.getLogger(__name__)

# Worldfile `type` -> sensor variant. "model" is a plain body without a sensor.
SENSOR_TYPES = {
    'model': None,
    'bumper': BumperArray,
}


@dataclass
class RaytraceResult:
    pose: Pose = field(default_factory=Pose)
    mod: Optional[Model] = None
    range: float = 0.0


class World:
    """Container for models, the tick scheduler and the spatial index."""

    def __init__(self, worker_threads=None, interval_sim=None):
        if worker_threads is None:
            worker_threads = config.WORLD_DEFAULTS['worker_threads']
        if interval_sim is None:
            interval_sim = config.WORLD_DEFAULTS['interval_sim']
        self.worker_threads = max(1, int(worker_threads))
        self.interval_sim = int(interval_sim)
        self.update_count = 0

        self.models = []
        self.options = {}
        self.rejected = []
        self.halted = []

        self._update_list = []
        self._pending = []
        self._updating = False
        self._lock = threading.Lock()
        self._executor = None

        self._tree = None
        self._index_models = []
        self._index_geoms = []
        self._index_ready = False

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()
        return False

    # ── model registry ──────────────────────────────────────────────────────
    def create_model(self, type_name='model', parent=None, name=None):
        if type_name not in SENSOR_TYPES:
            raise InvalidValue('type', type_name, f"expected one of {sorted(SENSOR_TYPES)}")
        sensor_cls = SENSOR_TYPES[type_name]
        sensor = sensor_cls() if sensor_cls is not None else None
        return Model(self, parent, type_name, sensor=sensor, name=name)

    def add_model(self, model):
        if model not in self.models:
            self.models.append(model)
        return model

    def get_model(self, name):
        for m in self.models:
            if m.name == name:
                return m
        return None

    def register_option(self, option):
        return self.options.setdefault(option.optstr, option)

    def get_update_count(self):
        return self.update_count

    @property
    def sim_time_ms(self):
        return self.update_count * self.interval_sim

    @classmethod
    def from_worldfile(cls, path):
        wf = Worldfile.load(path)
        world = cls(worker_threads=wf.settings.get('worker_threads'),
                    interval_sim=wf.settings.get('interval_sim'))
        world.load_worldfile(wf)
        return world

    def load_worldfile(self, wf: Worldfile):
        for entity in wf.entities():
            self._load_entity(entity, None)
        log.info("World loaded: %d models, %d rejected", len(self.models), len(self.rejected))

    def _load_entity(self, entity, parent):
        type_name = entity.read_string('type', 'model')
        try:
            model = self.create_model(type_name, parent, name=entity.name)
        except ConfigError as e:
            safe_log_exception("Rejected model", e, name=entity.name, type=type_name)
            self.rejected.append((entity.name, e))
            return None
        try:
            model.load(entity)
        except ConfigError as e:
            safe_log_exception("Rejected model", e, name=model.name, type=type_name)
            self.rejected.append((model.name, e))
            self._detach(model)
            return None
        for child in entity.children():
            self._load_entity(child, model)
        return model

    def _detach(self, model):
        if model.parent is not None and model in model.parent.children:
            model.parent.children.remove(model)
        if model in self.models:
            self.models.remove(model)

    def remove_model(self, model):
        """Remove `model` (and its subtree) from the world.

        A running model is shut down on the way out. During a tick the
        shutdown waits until every update has finished.
        """
        for child in list(model.children):
            self.remove_model(child)
        with self._lock:
            deferred = self._updating
            if deferred:
                self._pending.append(('retire', model))
        if not deferred:
            self._retire(model)
        self._detach(model)

    def _retire(self, model):
        if model.state is LifecycleState.RUNNING:
            model.shutdown()
        else:
            self.stop_updating(model)

    # ── scheduling ──────────────────────────────────────────────────────────
    def start_updating(self, model):
        with self._lock:
            if self._updating:
                self._pending.append(('add', model))
            elif model not in self._update_list:
                self._update_list.append(model)

    def stop_updating(self, model):
        with self._lock:
            if self._updating:
                self._pending.append(('remove', model))
            elif model in self._update_list:
                self._update_list.remove(model)

    def is_updating(self, model):
        with self._lock:
            return model in self._update_list

    def _apply_pending(self):
        """Apply queued scheduling changes; returns the models to shut down."""
        retired = []
        for action, model in self._pending:
            if action == 'add':
                if model not in self._update_list:
                    self._update_list.append(model)
                continue
            if model in self._update_list:
                self._update_list.remove(model)
            if action == 'retire':
                retired.append(model)
        self._pending.clear()
        return retired

    def _flush_pending(self):
        # shutdown re-enters stop_updating, so it runs outside the lock
        with self._lock:
            self._updating = False
            retired = self._apply_pending()
        for model in retired:
            self._retire(model)

    def _halt(self, model, exc):
        safe_log_exception("Model halted", exc, model=model.name, tick=self.update_count)
        with self._lock:
            self.halted.append((model, exc))
            self._pending.append(('remove', model))

    def _get_executor(self):
        if self._executor is None:
            self._executor = concurrent.futures.ThreadPoolExecutor(
                max_workers=self.worker_threads, thread_name_prefix='robosim-update')
        return self._executor

    def start(self):
        """Start every model that is not running yet, parents before children."""
        for model in list(self.models):
            if model.state in (LifecycleState.CONSTRUCTED, LifecycleState.LOADED):
                model.startup()
        self.rebuild_index()
        log.info("World started: %d models updating", len(self._update_list))

    def shutdown(self):
        """Shut down running models, children before parents."""
        for model in reversed(list(self.models)):
            if model.state is LifecycleState.RUNNING:
                model.shutdown()

    def close(self):
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None

    def update(self):
        """Advance the world by one tick.

        Every scheduled model is updated even when one of them fails. The
        first unexpected exception is re-raised once the tick has unwound,
        and the tick is then not counted.
        """
        self._flush_pending()
        with self._lock:
            batch = list(self._update_list)
            self._updating = True

        error = None
        try:
            self.rebuild_index()
            parallel = [m for m in batch if m.thread_safe]
            serial = [m for m in batch if not m.thread_safe]
            if self.worker_threads > 1 and len(parallel) > 1:
                error = self._update_parallel(parallel)
            else:
                serial = parallel + serial
            for model in serial:
                try:
                    model.update()
                except (LifecycleError, QueryUnavailable) as e:
                    self._halt(model, e)
                except Exception as e:
                    if error is None:
                        error = e
        finally:
            self._flush_pending()

        if error is not None:
            raise error
        self.update_count += 1

    def _update_parallel(self, models):
        """Run `models` on the worker pool; returns the first unexpected exception."""
        executor = self._get_executor()
        futures = [executor.submit(m.update) for m in models]
        concurrent.futures.wait(futures)
        error = None
        for model, fut in zip(models, futures):
            try:
                fut.result()
            except (LifecycleError, QueryUnavailable) as e:
                self._halt(model, e)
            except Exception as e:
                if error is None:
                    error = e
        return error

    def run(self, ticks):
        for _ in range(int(ticks)):
            self.update()
        return self.update_count

    # ── spatial index ───────────────────────────────────────────────────────
    def rebuild_index(self):
        """Snapshot footprints of obstacle models into an STRtree."""
        models = [m for m in self.models if m.obstacle_return]
        geoms = [m.footprint() for m in models]
        self._index_models = models
        self._index_geoms = geoms
        self._tree = STRtree(geoms) if geoms else None
        self._index_ready = True

    def raytrace(self, pose: Pose, max_range: float, match, finder=None) -> RaytraceResult:
        """Nearest model hit by the ray from `pose` (world frame) up to `max_range`.

        `match(candidate, finder)` must return True for models the ray may hit.
        Returns a result with `mod=None` when nothing qualifies.
        """
        if not self._index_ready:
            raise QueryUnavailable("spatial index not built; call start() or update() first")
        if max_range <= 0.0 or self._tree is None:
            return RaytraceResult(pose=Pose(*pose.as_tuple()), mod=None, range=max_range)

        ray = ray_segment(pose, max_range)
        origin = np.array([pose.x, pose.y])
        best = None
        for i in sorted(int(j) for j in self._tree.query(ray)):
            candidate = self._index_models[i]
            if not match(candidate, finder):
                continue
            inter = self._index_geoms[i].intersection(ray)
            if inter.is_empty:
                continue
            pts = shapely.get_coordinates(inter)
            d = np.hypot(pts[:, 0] - origin[0], pts[:, 1] - origin[1])
            k = int(np.argmin(d))
            if best is None or d[k] < best[0]:
                best = (float(d[k]), pts[k], candidate)

        if best is None:
            return RaytraceResult(pose=Pose(*pose.as_tuple()), mod=None, range=max_range)
        dist, pt, mod = best
        return RaytraceResult(pose=Pose(float(pt[0]), float(pt[1]), pose.z, pose.a), mod=mod, range=dist)
