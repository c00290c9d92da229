import pytest

from robosim.tests.fixtures import StubWorld
from robosim.world import World


@pytest.fixture
def stub_world():
    return StubWorld()


@pytest.fixture
def world():
    w = World(worker_threads=1)
    yield w
    w.close()
