# -*- coding: utf-8 -*-

"""
config.py

Central constants for the robosim world and its sensor models. Keeping these
in one place keeps the models, the world loader and the renderer consistent.

Contents:
---------
1. BUMPER_*:
   - Power draw, default geometry and display constants for bumper arrays.
   - DEFAULT_BUMPER_LENGTH is the length given to every transducer when the
     worldfile sets no `blength`.

2. WORLD_DEFAULTS:
   - Scheduler and worldfile unit defaults used when a worldfile omits its
     `world` section.

3. UNIT_LENGTH / UNIT_ANGLE:
   - Scale factors for the worldfile `unit_length` / `unit_angle` settings.

Usage:
------
    from robosim.config import BUMPER_WATTS, WORLD_DEFAULTS
"""
import math

# ───────────────────────────────────────────────────────────────────────────────
# 1) BUMPER ARRAYS
# ───────────────────────────────────────────────────────────────────────────────
BUMPER_WATTS = 0.1                      # power draw while running (W)
BUMPER_HIT_COLOR = "red"
BUMPER_NOHIT_COLOR = "green"
BUMPER_HIT_THICKNESS = 0.02             # drawn segment thickness on contact (m)
BUMPER_NOHIT_THICKNESS = 0.01           # drawn segment thickness when clear (m)
BUMPER_DEFAULT_SIZE = (0.1, 0.1, 0.1)   # body size of a bumper model (m)
DEFAULT_BUMPER_LENGTH = 0.0             # length when no `blength` is given (m)

# ───────────────────────────────────────────────────────────────────────────────
# 2) WORLD / SCHEDULER
# ───────────────────────────────────────────────────────────────────────────────
WORLD_DEFAULTS = {
    'worker_threads': 1,        # pool size for thread-safe model updates
    'interval_sim': 100,        # simulated milliseconds per tick
    'unit_length': 'm',
    'unit_angle': 'degrees',
}

MODEL_DEFAULT_SIZE = (0.4, 0.4, 1.0)    # body size of a plain model (m)

# ───────────────────────────────────────────────────────────────────────────────
# 3) WORLDFILE UNITS
# ───────────────────────────────────────────────────────────────────────────────
UNIT_LENGTH = {
    'm': 1.0,
    'cm': 0.01,
    'mm': 0.001,
}

UNIT_ANGLE = {
    'degrees': math.pi / 180.0,
    'radians': 1.0,
}
