#!/usr/bin/env python3
"""
===============================================================================
HELIOTRANSFER - MAIN ENTRY POINT
===============================================================================
Batch planner: builds the porkchop table between two worlds of a universe
file and prints the minimum delta-V mission plan.

USAGE:
    python -m heliotransfer.main                               # Config defaults
    python -m heliotransfer.main --origin Earth --destination Mars
    python -m heliotransfer.main --start 2026-01-01 --workers 4
    python -m heliotransfer.main --samples 100 --plot --csv    # Quick run + outputs

OUTPUTS (with --plot / --csv):
    <output>/porkchop_<origin>_<destination>.png
    <output>/transfer_<origin>_<destination>.png
    <output>/mission_table_<origin>_<destination>.csv

EXIT STATUS:
    0 when a plan was found, 1 when no transfer is under the cutoff,
    2 on configuration or input errors.
===============================================================================
"""

import argparse
import logging
import os
import sys
import time
from typing import Optional, Sequence

import yaml

from heliotransfer import __version__
from heliotransfer.core.constants import J2000
from heliotransfer.core.julian import format_date, parse_date
from heliotransfer.guidance.mission_planner import find_best_mission_plan
from heliotransfer.guidance.mission_table import MissionTable, MissionTableConfig
from heliotransfer.universe.world import load_universe

logger = logging.getLogger('HELIOTRANSFER_MAIN')

DEFAULT_CONFIG_PATH = os.path.join('config', 'mission_config.yaml')

DEFAULT_CONFIG = {
    'universe': {'path': os.path.join('data', 'universe.json')},
    'mission': {'origin': 'Earth', 'destination': 'Mars', 'start_date': J2000},
    'mission_table': {},
    'output': {'directory': 'output'},
    'logging': {'level': 'INFO'},
}


def setup_logging(level: str = 'INFO', log_file: Optional[str] = None) -> None:
    """Configure root logging for the command line run."""
    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        directory = os.path.dirname(log_file)
        if directory:
            os.makedirs(directory, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, mode='w'))
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
        handlers=handlers,
        force=True,
    )


def load_config(config_path: Optional[str] = None) -> dict:
    """
    Load the run configuration from YAML, layered over the defaults.

    Args:
        config_path: Path to YAML config. Defaults to config/mission_config.yaml
            when that file exists, else the built-in defaults are used.

    Returns:
        Dictionary with universe, mission, mission_table, output and logging
        sections.
    """
    config = {section: dict(values) for section, values in DEFAULT_CONFIG.items()}

    if config_path is None:
        if not os.path.exists(DEFAULT_CONFIG_PATH):
            logger.info("No configuration file, using built-in defaults")
            return config
        config_path = DEFAULT_CONFIG_PATH

    logger.info("Loading configuration from: %s", config_path)
    with open(config_path, 'r') as f:
        loaded = yaml.safe_load(f) or {}
    if not isinstance(loaded, dict):
        raise ValueError(f"Configuration root must be a mapping: {config_path}")

    for section, values in loaded.items():
        if isinstance(values, dict) and isinstance(config.get(section), dict):
            config[section].update(values)
        else:
            config[section] = values
    return config


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='heliotransfer',
        description='Heliocentric transfer planner: porkchop table and best mission plan',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  heliotransfer --origin Earth --destination Mars
  heliotransfer --start 2026-01-01 --max-delta-v 0.01
  heliotransfer --samples 100 --workers 4 --plot --csv
        """
    )
    parser.add_argument('--config', type=str, default=None,
                        help='Path to run config YAML')
    parser.add_argument('--universe', type=str, default=None,
                        help='Path to universe JSON file')
    parser.add_argument('--origin', type=str, default=None,
                        help='Departure world name')
    parser.add_argument('--destination', type=str, default=None,
                        help='Arrival world name')
    parser.add_argument('--start', type=str, default=None,
                        help='First departure date (Julian date or YYYY-MM-DD)')
    parser.add_argument('--max-delta-v', type=float, default=None,
                        help='Total delta-V cutoff in AU/day')
    parser.add_argument('--samples', type=int, default=None,
                        help='Samples per date axis')
    parser.add_argument('--workers', type=int, default=None,
                        help='Worker processes for the table build (0 = all cores)')
    parser.add_argument('--plot', action='store_true',
                        help='Write porkchop and transfer PNGs')
    parser.add_argument('--csv', action='store_true',
                        help='Write the feasible cells as CSV')
    parser.add_argument('--output', type=str, default=None,
                        help='Output directory for plots and CSV')
    parser.add_argument('--verbose', action='store_true',
                        help='Debug logging')
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    return parser


def _table_config(config: dict, args: argparse.Namespace) -> MissionTableConfig:
    settings = dict(config.get('mission_table') or {})
    if args.samples is not None:
        settings['departure_samples'] = args.samples
        settings['arrival_samples'] = args.samples
    if args.max_delta_v is not None:
        settings['max_delta_v'] = args.max_delta_v
    if args.workers is not None:
        settings['workers'] = args.workers if args.workers > 0 else os.cpu_count() or 1
    return MissionTableConfig.from_dict(settings)


def write_outputs(table, plan, output_dir: str, plot: bool, csv: bool) -> None:
    """Write the requested PNG and CSV products into *output_dir*."""
    os.makedirs(output_dir, exist_ok=True)
    tag = f"{table.origin().name}_{table.destination().name}".lower()

    if csv:
        path = os.path.join(output_dir, f'mission_table_{tag}.csv')
        table.to_dataframe().to_csv(path, index=False)
        logger.info("Saved mission table: %s", path)

    if plot:
        from heliotransfer.visualization.porkchop_plots import plot_porkchop, plot_transfer
        plot_porkchop(table, os.path.join(output_dir, f'porkchop_{tag}.png'), plan=plan)
        if plan is not None:
            plot_transfer(plan, os.path.join(output_dir, f'transfer_{tag}.png'))


def main(argv: Optional[Sequence[str]] = None) -> int:
    """
    Main entry point. Parses command line arguments, builds the mission
    table and reports the best plan.
    """
    args = build_parser().parse_args(argv)

    setup_logging('DEBUG' if args.verbose else 'INFO')
    try:
        config = load_config(args.config)
        output = config.get('output') or {}
        output_dir = args.output or output.get('directory', 'output')
        write_plot = args.plot or bool(output.get('plot', False))
        write_csv = args.csv or bool(output.get('csv', False))

        level = 'DEBUG' if args.verbose else str((config.get('logging') or {}).get('level', 'INFO'))
        log_file = None
        if (config.get('logging') or {}).get('file'):
            log_file = os.path.join(output_dir, 'heliotransfer.log')
        setup_logging(level, log_file)

        mission = config.get('mission') or {}
        universe_path = args.universe or config['universe']['path']
        origin_name = args.origin or mission.get('origin', 'Earth')
        destination_name = args.destination or mission.get('destination', 'Mars')
        start_date = parse_date(args.start if args.start is not None
                                else mission.get('start_date', J2000))
        table_config = _table_config(config, args)

        universe = load_universe(universe_path)
        origin = universe.world(origin_name)
        destination = universe.world(destination_name)
    except (OSError, ValueError, KeyError) as exc:
        logger.error("Invalid input: %s", exc)
        return 2

    print("=" * 70)
    print(f"  HELIOTRANSFER {__version__}")
    print(f"  {origin.name} -> {destination.name}, departures from {format_date(start_date)}")
    print("=" * 70)

    wall_start = time.time()
    table = MissionTable(origin, destination, start_date, config=table_config)
    plan = find_best_mission_plan(table)

    if plan is None:
        print("  No plan available")
    else:
        print(plan.summary())

    if write_plot or write_csv:
        write_outputs(table, plan, output_dir, plot=write_plot, csv=write_csv)

    print("=" * 70)
    print(f"  Feasible transfers: {table.feasible_count()} of "
          f"{table.shape[0] * table.shape[1]}")
    print(f"  Total wall time: {time.time() - wall_start:.1f} seconds")
    print("=" * 70)

    return 0 if plan is not None else 1


if __name__ == '__main__':
    sys.exit(main())
