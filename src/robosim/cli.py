"""
Run a worldfile headless and print every model's state.

usage:
    robosim-run worlds/simple.json --ticks 100
    robosim-run worlds/simple.json --ctrl front_bumper=robosim.ctrl_examples.bump_report
"""

import argparse
import logging
import sys

from robosim.controllers import attach_controller
from robosim.utils import configure_logging
from robosim.world import World

log = logging.getLogger(__name__)


def main(argv=None):
    parser = argparse.ArgumentParser(description='Run a robosim worldfile headless')
    parser.add_argument('worldfile', help='Path to a JSON worldfile')
    parser.add_argument('--ticks', type=int, default=100, help='Number of world ticks to run')
    parser.add_argument('--threads', type=int, default=None, help='Override worker thread count')
    parser.add_argument('--ctrl', action='append', default=[], metavar='MODEL=MODULE',
                        help='Attach a controller module to a named model (repeatable)')
    parser.add_argument('--verbose', dest='verbose', action='store_true', help='Enable debug logging')
    args = parser.parse_args(argv if argv is not None else sys.argv[1:])

    configure_logging(logging.DEBUG if args.verbose else logging.INFO)

    world = World.from_worldfile(args.worldfile)
    if args.threads is not None:
        world.worker_threads = max(1, args.threads)

    for item in args.ctrl:
        name, sep, module = item.partition('=')
        model = world.get_model(name)
        if not sep or model is None:
            parser.error(f"--ctrl expects MODEL=MODULE with an existing model name, got {item!r}")
        attach_controller(model, module)

    with world:
        world.start()
        world.run(args.ticks)
        for model in world.models:
            model.print_state()
        world.shutdown()

    if world.rejected:
        log.warning("%d model(s) rejected while loading", len(world.rejected))
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
