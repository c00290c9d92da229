"""Example controller: every INTERVAL ticks, log which bumpers are touching.

Attach with `robosim-run world.json --ctrl bumper=robosim.ctrl_examples.bump_report`.
"""
import logging

INTERVAL = 200

log = logging.getLogger(__name__)


def update(model, reports):
    if model.get_world().get_update_count() % INTERVAL == 0:
        hits = model.sensor.hits()
        reports.append(hits.copy())
        if hits.any():
            log.info("%s: contact on bumpers %s", model.name, hits.nonzero()[0].tolist())
    return 0  # run again


def init(model):
    if model.sensor is None or not hasattr(model.sensor, 'hits'):
        return 1
    model.add_update_callback(update, [])
    return 0
