import math
import pytest

from robosim import config
from robosim.bumper import BumperArray, make_bumper
from robosim.errors import InvalidValue, MissingField
from robosim.model import LifecycleState
from robosim.tests.fixtures import entity
from robosim.worldfile import WorldfileEntity


def loaded(stub_world, **props):
    m = make_bumper(stub_world)
    m.load(entity(**props))
    return m


def test_construct_defaults(stub_world):
    m = make_bumper(stub_world)
    assert m.geom_size == config.BUMPER_DEFAULT_SIZE
    assert m.sensor.count == 0
    assert m.sensor.samples is None
    assert 'show_bumper' in stub_world.options
    assert m.thread_safe


def test_global_length_then_index_override(stub_world):
    m = loaded(stub_world, bcount=3, blength=0.1, **{'blength[1]': 0.2})
    assert [c.length for c in m.sensor.configs] == [0.1, 0.2, 0.1]
    assert all(c.pose.as_tuple() == (0.0, 0.0, 0.0, 0.0) for c in m.sensor.configs)
    assert m.state is LifecycleState.LOADED


def test_merge_ignores_declaration_order(stub_world):
    before = loaded(stub_world, **{'blength[0]': 0.3, 'bpose[0]': [1, 2, 0, 0.5]}, bcount=2, blength=0.1)
    after = loaded(stub_world, bcount=2, blength=0.1, **{'bpose[0]': [1, 2, 0, 0.5], 'blength[0]': 0.3})
    assert before.sensor.configs == after.sensor.configs
    assert [c.length for c in before.sensor.configs] == [0.3, 0.1]


def test_index_pose_reads(stub_world):
    m = loaded(stub_world, bcount=2, **{'bpose[1]': [0.1, -0.2, 0.05, 1.0]})
    cfg = m.sensor.configs[1]
    assert cfg.pose.as_tuple() == (0.1, -0.2, 0.05, 1.0)
    assert cfg.length == config.DEFAULT_BUMPER_LENGTH


def test_pose_angle_uses_degrees_from_worldfile(stub_world):
    m = make_bumper(stub_world)
    m.load(WorldfileEntity({'bcount': 1, 'bpose[0]': [0, 0, 0, 180]}))
    assert m.sensor.configs[0].pose.a == pytest.approx(math.pi)


def test_missing_count_is_fatal(stub_world):
    m = make_bumper(stub_world)
    with pytest.raises(MissingField):
        m.load(entity(blength=0.1))
    assert m.state is LifecycleState.CONSTRUCTED


@pytest.mark.parametrize('count', [0, -2, 'three'])
def test_invalid_count_is_fatal(stub_world, count):
    m = make_bumper(stub_world)
    with pytest.raises(InvalidValue):
        m.load(entity(bcount=count))


def test_malformed_index_values_use_defaults(stub_world):
    m = loaded(stub_world, bcount=2, blength=0.1,
               **{'bpose[0]': 'not-a-pose', 'blength[0]': 'x', 'bpose[1]': [0.5]})
    c0, c1 = m.sensor.configs
    assert c0.pose.as_tuple() == (0.0, 0.0, 0.0, 0.0)
    assert c0.length == 0.1
    assert c1.pose.as_tuple() == (0.5, 0.0, 0.0, 0.0)


def test_negative_lengths_are_not_kept(stub_world):
    m = loaded(stub_world, bcount=2, blength=-1.0, **{'blength[1]': -0.5})
    assert [c.length for c in m.sensor.configs] == [0.0, 0.0]


def test_reload_before_startup_replaces_configs(stub_world):
    m = loaded(stub_world, bcount=3, blength=0.1)
    m.load(entity(bcount=1, blength=0.4))
    assert m.sensor.count == 1
    assert m.sensor.configs[0].length == 0.4


def test_sensor_load_directly():
    arr = BumperArray()

    class Named:
        name = 'bare'

    arr.load(Named(), entity(bcount=2, blength=0.05))
    assert arr.count == 2
    assert arr.samples is None
