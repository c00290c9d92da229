"""Attach controller modules to models.

A controller is any importable module (dotted name or path to a .py file)
exposing `init(model)` or `init(model, args)`. `init` usually registers
update callbacks on the model and returns 0 on success; any other return
value is treated as a failed initialisation.
"""

import importlib
import importlib.util
import inspect
import logging
from pathlib import Path

log = logging.getLogger(__name__)


class ControllerError(RuntimeError):
    pass


def import_controller(spec):
    """Import a controller given a dotted module name or a filesystem path."""
    path = Path(str(spec))
    if path.suffix == '.py':
        if not path.exists():
            raise ControllerError(f"controller file not found: {path}")
        mod_spec = importlib.util.spec_from_file_location(f"robosim_ctrl_{path.stem}", path)
        module = importlib.util.module_from_spec(mod_spec)
        mod_spec.loader.exec_module(module)
        return module
    try:
        return importlib.import_module(str(spec))
    except ImportError as e:
        raise ControllerError(f"cannot import controller {spec!r}: {e}") from e


def attach_controller(model, spec, args=""):
    """Import controller `spec` and run its `init` against `model`."""
    module = import_controller(spec)
    init = getattr(module, 'init', None)
    if init is None or not callable(init):
        raise ControllerError(f"controller {spec!r} has no init(model) function")

    n_params = len(inspect.signature(init).parameters)
    status = init(model, args) if n_params >= 2 else init(model)
    if status:
        raise ControllerError(f"controller {spec!r} init returned {status!r}")
    log.info("%s: attached controller %s", model.name, spec)
    return module
