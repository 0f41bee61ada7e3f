"""
===============================================================================
HELIOTRANSFER - Plot Output Test Suite
===============================================================================
Smoke tests for the porkchop and transfer figures written with the Agg
backend.
===============================================================================
"""

import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

import pytest

from heliotransfer.core.constants import J2000
from heliotransfer.guidance.mission_planner import find_best_mission_plan
from heliotransfer.guidance.mission_table import MissionTable, MissionTableConfig
from heliotransfer.universe.world import load_universe
from heliotransfer.visualization.porkchop_plots import plot_porkchop, plot_transfer

UNIVERSE_PATH = os.path.join(os.path.dirname(__file__), '..', '..', 'data', 'universe.json')

PNG_SIGNATURE = b'\x89PNG\r\n\x1a\n'


@pytest.fixture(scope="module")
def table():
    universe = load_universe(UNIVERSE_PATH)
    return MissionTable(universe.world("Earth"), universe.world("Mars"), J2000,
                        config=MissionTableConfig(departure_samples=20, arrival_samples=20))


@pytest.fixture(scope="module")
def plan(table):
    return find_best_mission_plan(table)


def assert_png(path):
    assert os.path.exists(path)
    with open(path, 'rb') as f:
        assert f.read(8) == PNG_SIGNATURE


class TestPlots:

    def test_porkchop(self, table, plan, tmp_path):
        path = str(tmp_path / 'porkchop.png')
        plot_porkchop(table, path, plan=plan)
        assert_png(path)

    def test_porkchop_without_plan(self, table, tmp_path):
        path = str(tmp_path / 'nested' / 'dir' / 'porkchop.png')
        plot_porkchop(table, path)
        assert_png(path)

    def test_transfer(self, plan, tmp_path):
        assert plan is not None
        path = str(tmp_path / 'transfer.png')
        plot_transfer(plan, path, samples=120)
        assert_png(path)
