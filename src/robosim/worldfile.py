"""JSON worldfile reader.

A worldfile describes the world settings and a tree of models:

    {
      "world": {"worker_threads": 4, "unit_length": "m", "unit_angle": "degrees"},
      "models": [
        {"name": "robot", "type": "model", "pose": [0, 0, 0, 0],
         "size": [0.5, 0.5, 0.5],
         "children": [
            {"type": "bumper", "bcount": 2, "blength": 0.1,
             "bpose[0]": [0.25, 0.1, 0, 0], "blength[1]": 0.2}
         ]}
      ]
    }

Each model dict is wrapped in a `WorldfileEntity`, which offers the typed
reads models use during `load()`. Missing or malformed values return the
caller's default; only `read_int` and `read_bool` on a present value of the
wrong kind are errors, since counts and flags are structural.
"""

import json
import logging
import math
from pathlib import Path

from robosim.config import UNIT_ANGLE, UNIT_LENGTH, WORLD_DEFAULTS
from robosim.errors import ConfigError, InvalidValue

log = logging.getLogger(__name__)

_TRUE_WORDS = {'1', 'true', 'yes', 'on'}
_FALSE_WORDS = {'0', 'false', 'no', 'off'}


def _as_float(value):
    try:
        f = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(f):
        return None
    return f


class WorldfileEntity:
    """Typed read access to one model's properties."""

    def __init__(self, properties, unit_length=1.0, unit_angle=UNIT_ANGLE['degrees'], name=None):
        self.properties = dict(properties or {})
        self.unit_length = float(unit_length)
        self.unit_angle = float(unit_angle)
        self.name = name if name is not None else self.properties.get('name')

    def property_exists(self, key) -> bool:
        return key in self.properties

    def read_string(self, key, default=None):
        value = self.properties.get(key, default)
        return default if value is None else str(value)

    def read_int(self, key, default=0) -> int:
        if key not in self.properties:
            return default
        value = self.properties[key]
        if isinstance(value, bool):
            raise InvalidValue(key, value, "expected an integer")
        if isinstance(value, int):
            return value
        if isinstance(value, float) and value.is_integer():
            return int(value)
        if isinstance(value, str):
            try:
                return int(value.strip())
            except ValueError:
                pass
        raise InvalidValue(key, value, "expected an integer")

    def read_bool(self, key, default=False) -> bool:
        """Flag property: JSON booleans, 0/1 or "true"/"false" style strings."""
        if key not in self.properties:
            return default
        value = self.properties[key]
        if isinstance(value, bool):
            return value
        if isinstance(value, int):
            return value != 0
        if isinstance(value, float) and value.is_integer():
            return value != 0.0
        if isinstance(value, str):
            word = value.strip().lower()
            if word in _TRUE_WORDS:
                return True
            if word in _FALSE_WORDS:
                return False
        raise InvalidValue(key, value, "expected a boolean")

    def read_float(self, key, default=0.0) -> float:
        f = _as_float(self.properties.get(key))
        return default if f is None else f

    def read_length(self, key, default=0.0) -> float:
        """Length in meters; the worldfile value is scaled by `unit_length`.

        The default is already in meters and is returned unscaled.
        """
        f = _as_float(self.properties.get(key))
        if f is None:
            if key in self.properties:
                log.debug("%s: malformed length %r, using default", key, self.properties[key])
            return default
        return f * self.unit_length

    def _tuple_item(self, key, index):
        value = self.properties.get(key)
        if not isinstance(value, (list, tuple)) or index >= len(value):
            return None
        return _as_float(value[index])

    def read_tuple_length(self, key, index, default=0.0) -> float:
        f = self._tuple_item(key, index)
        return default if f is None else f * self.unit_length

    def read_tuple_angle(self, key, index, default=0.0) -> float:
        """Angle in radians; the worldfile value is scaled by `unit_angle`."""
        f = self._tuple_item(key, index)
        return default if f is None else f * self.unit_angle

    def children(self):
        for child in self.properties.get('children', []) or []:
            yield WorldfileEntity(child, self.unit_length, self.unit_angle)

    def __repr__(self):
        return f"WorldfileEntity({self.name!r}, type={self.properties.get('type')!r})"


class Worldfile:
    """Parsed worldfile: world settings plus top-level model entities."""

    def __init__(self, data, path=None):
        if not isinstance(data, dict):
            raise ConfigError('worldfile', 'top level must be an object')
        self.path = path
        settings = dict(WORLD_DEFAULTS)
        settings.update(data.get('world', {}) or {})
        self.settings = settings

        unit_length = settings.get('unit_length', 'm')
        unit_angle = settings.get('unit_angle', 'degrees')
        if unit_length not in UNIT_LENGTH:
            raise InvalidValue('unit_length', unit_length, f"expected one of {sorted(UNIT_LENGTH)}")
        if unit_angle not in UNIT_ANGLE:
            raise InvalidValue('unit_angle', unit_angle, f"expected one of {sorted(UNIT_ANGLE)}")
        self.unit_length = UNIT_LENGTH[unit_length]
        self.unit_angle = UNIT_ANGLE[unit_angle]
        self.raw_models = list(data.get('models', []) or [])

    @classmethod
    def load(cls, path):
        path = Path(path)
        with open(path, 'r', encoding='utf-8') as fh:
            data = json.load(fh)
        wf = cls(data, path=str(path))
        log.info("Loaded worldfile %s (%d top-level models)", path, len(wf.raw_models))
        return wf

    def entity(self, properties):
        return WorldfileEntity(properties, self.unit_length, self.unit_angle)

    def entities(self):
        for props in self.raw_models:
            yield self.entity(props)
