"""Test doubles shared by the robosim test-suite."""
from robosim.world import RaytraceResult
from robosim.worldfile import WorldfileEntity


class StubWorld:
    """Minimal world: records ray queries and answers with a canned result."""

    def __init__(self, result=None):
        self.models = []
        self.options = {}
        self.updating = []
        self.queries = []
        self.result = result
        self.update_count = 0

    def add_model(self, model):
        self.models.append(model)

    def register_option(self, option):
        self.options.setdefault(option.optstr, option)

    def start_updating(self, model):
        self.updating.append(model)

    def stop_updating(self, model):
        self.updating.remove(model)

    def is_updating(self, model):
        return model in self.updating

    def get_update_count(self):
        return self.update_count

    def raytrace(self, pose, max_range, match, finder=None):
        self.queries.append((pose, max_range, match, finder))
        if self.result is None:
            return RaytraceResult(pose=pose, mod=None, range=max_range)
        return self.result


def entity(**props):
    """WorldfileEntity in meters/radians unless a test says otherwise."""
    return WorldfileEntity(props, unit_length=1.0, unit_angle=1.0)
