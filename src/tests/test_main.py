"""
===============================================================================
HELIOTRANSFER - Command Line Test Suite
===============================================================================
End-to-end runs of the batch planner: plan found, no plan under an
impossible cutoff, output products, and input errors.
===============================================================================
"""

import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

import pandas as pd
import pytest
import yaml

import heliotransfer.main as cli

UNIVERSE_PATH = os.path.join(os.path.dirname(__file__), '..', '..', 'data', 'universe.json')


@pytest.fixture(autouse=True)
def quiet_logging(monkeypatch):
    """Leave pytest's log capture in place."""
    monkeypatch.setattr(cli, 'setup_logging', lambda *args, **kwargs: None)


@pytest.fixture
def config_path(tmp_path):
    config = {
        'universe': {'path': UNIVERSE_PATH},
        'mission': {'origin': 'Earth', 'destination': 'Mars', 'start_date': '2000-01-01'},
        'mission_table': {'departure_samples': 20, 'arrival_samples': 20, 'workers': 1},
        'output': {'directory': str(tmp_path / 'out')},
    }
    path = tmp_path / 'mission_config.yaml'
    path.write_text(yaml.safe_dump(config))
    return str(path)


class TestLoadConfig:

    def test_layered_over_defaults(self, config_path):
        config = cli.load_config(config_path)
        assert config['mission_table']['departure_samples'] == 20
        assert config['logging']['level'] == 'INFO'

    def test_repository_config(self):
        path = os.path.join(os.path.dirname(__file__), '..', '..', 'config', 'mission_config.yaml')
        config = cli.load_config(path)
        assert config['mission']['origin'] == 'Earth'
        assert config['mission_table']['departure_samples'] == 400


class TestMain:

    def test_plan_found(self, config_path, capsys):
        assert cli.main(['--config', config_path]) == 0
        out = capsys.readouterr().out
        assert 'Mission plan: Earth -> Mars' in out

    def test_no_plan(self, config_path, capsys):
        assert cli.main(['--config', config_path, '--max-delta-v', '0.001']) == 1
        assert 'No plan available' in capsys.readouterr().out

    def test_outputs(self, config_path, tmp_path):
        out_dir = tmp_path / 'products'
        code = cli.main(['--config', config_path, '--samples', '16', '--plot', '--csv',
                         '--output', str(out_dir)])
        assert code == 0
        assert (out_dir / 'porkchop_earth_mars.png').exists()
        assert (out_dir / 'transfer_earth_mars.png').exists()
        df = pd.read_csv(out_dir / 'mission_table_earth_mars.csv')
        assert len(df) > 0
        assert (df['delta_v_total'] < 0.03).all()

    def test_command_line_overrides(self, config_path, capsys):
        code = cli.main(['--config', config_path, '--universe', UNIVERSE_PATH,
                         '--origin', 'venus', '--destination', 'Earth', '--start', '2451700.5'])
        assert code == 0
        assert 'Venus -> Earth' in capsys.readouterr().out

    def test_unknown_world(self, config_path):
        assert cli.main(['--config', config_path, '--destination', 'Vulcan']) == 2

    def test_missing_universe(self, config_path, tmp_path):
        assert cli.main(['--config', config_path, '--universe', str(tmp_path / 'none.json')]) == 2

    def test_bad_samples(self, config_path):
        assert cli.main(['--config', config_path, '--samples', '0']) == 2
