import json

import pytest

from robosim import cli
from robosim.tests.test_world import DEMO_WORLD


def test_cli_runs_demo_world():
    assert cli.main([str(DEMO_WORLD), '--ticks', '2', '--threads', '1']) == 0


def test_cli_with_controller():
    assert cli.main([str(DEMO_WORLD), '--ticks', '1',
                     '--ctrl', 'front_bumper=robosim.ctrl_examples.bump_report']) == 0


def test_cli_reports_rejected_models(tmp_path):
    path = tmp_path / 'w.json'
    path.write_text(json.dumps({'models': [{'name': 'b', 'type': 'bumper'}]}))
    assert cli.main([str(path), '--ticks', '1']) == 1


def test_cli_unknown_controller_target():
    with pytest.raises(SystemExit):
        cli.main([str(DEMO_WORLD), '--ctrl', 'nobody=robosim.ctrl_examples.bump_report'])
