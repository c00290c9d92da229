import pytest

from robosim.controllers import ControllerError, attach_controller
from robosim.ctrl_examples import bump_report
from robosim.tests.fixtures import entity


def test_bump_report_controller(world):
    m = world.create_model('bumper', name='b')
    m.load(entity(bcount=2, blength=0.1))
    module = attach_controller(m, 'robosim.ctrl_examples.bump_report')
    assert module is bump_report
    world.start()
    world.run(3)
    reports = [cb.user_data for cb in m.callbacks][0]
    # first tick is a multiple of INTERVAL
    assert len(reports) == 1
    assert reports[0].tolist() == [False, False]


def test_bump_report_refuses_plain_models(world):
    m = world.create_model('model')
    with pytest.raises(ControllerError):
        attach_controller(m, 'robosim.ctrl_examples.bump_report')


def test_controller_from_file_with_args(world, tmp_path):
    src = tmp_path / 'ctrl_counter.py'
    src.write_text(
        "def tick(model, box):\n"
        "    box.append(model.get_world().get_update_count())\n"
        "    return 0\n"
        "\n"
        "def init(model, args):\n"
        "    model.add_update_callback(tick, [args])\n"
        "    return 0\n"
    )
    m = world.create_model('model')
    attach_controller(m, str(src), args='hello')
    world.start()
    world.run(2)
    assert [cb.user_data for cb in m.callbacks][0] == ['hello', 0, 1]


def test_controller_errors(world, tmp_path):
    m = world.create_model('model')
    with pytest.raises(ControllerError):
        attach_controller(m, 'robosim.no_such_controller')
    with pytest.raises(ControllerError):
        attach_controller(m, str(tmp_path / 'missing.py'))
    noinit = tmp_path / 'noinit.py'
    noinit.write_text("x = 1\n")
    with pytest.raises(ControllerError):
        attach_controller(m, str(noinit))
