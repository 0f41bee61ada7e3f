"""
===============================================================================
HELIOTRANSFER - Mission Table (Porkchop Grid)
===============================================================================
A mission table samples the origin world's state over a window of departure
dates and the destination world's state over a window of arrival dates, and
solves one prograde Lambert transfer for every (arrival, departure) pair.
Each feasible cell records the transfer velocities and the delta-V needed at
both ends; cells are empty when the arrival does not follow the departure,
the solver fails, or the total delta-V reaches the cutoff.

Sampling
--------
    W        = window_periods * min(T_origin, T_destination)
    t_dep[j] = t0 + j W / N_d                              j = 0 .. N_d-1
    T_H      = 0.5 ((a_o + a_d) / 2)^(3/2) years           Hohmann estimate
    t_arr[i] = t0 + 0.5 T_H + i (W + (1.5 - 0.5) T_H) / N_a

Layout
------
Cells live in a flat row-major list of N_a * N_d optionals, row i being the
arrival date and column j the departure date: index = i * N_d + j. Rows are
independent, which is how the build is partitioned across workers.
===============================================================================
"""

import logging
import time
from dataclasses import dataclass, fields
from typing import Any, Callable, Dict, Iterator, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from heliotransfer.core.constants import (
    DAYS_PER_YEAR,
    HOHMANN_END_FRACTION,
    HOHMANN_START_FRACTION,
    MISSION_MAX_DELTA_V,
    MISSION_TABLE_SAMPLES,
    MISSION_WINDOW_PERIODS,
    MU_SUN,
    au_per_day_to_km_s,
)
from heliotransfer.dynamics.lambert import OrbitType, lambert_battin
from heliotransfer.performance.parallel import RowPool, WorkCancelled

logger = logging.getLogger(__name__)


class MissionTableCancelled(RuntimeError):
    """Raised when a mission-table build is cancelled between rows."""


# =============================================================================
# TABLE ENTRIES
# =============================================================================

@dataclass(frozen=True, eq=False)
class DateState:
    """
    Sampled heliocentric state of a world.

    Attributes
    ----------
    date : float
        Julian date (days).
    position : np.ndarray
        Position (AU).
    velocity : np.ndarray
        Velocity (AU/day).
    """
    date: float
    position: np.ndarray
    velocity: np.ndarray


@dataclass(frozen=True, eq=False)
class TransferLeg:
    """
    One feasible transfer of the table.

    Attributes
    ----------
    v_depart : np.ndarray
        Transfer-conic velocity at departure (AU/day).
    v_arrive : np.ndarray
        Transfer-conic velocity at arrival (AU/day).
    delta_v_depart : float
        |v_depart - v_origin| (AU/day).
    delta_v_arrive : float
        |v_arrive - v_destination| (AU/day).
    """
    v_depart: np.ndarray
    v_arrive: np.ndarray
    delta_v_depart: float
    delta_v_arrive: float

    @property
    def delta_v_total(self) -> float:
        return self.delta_v_depart + self.delta_v_arrive


@dataclass
class MissionTableConfig:
    """
    Grid and cutoff settings of a mission-table build.

    The window and Hohmann fractions are the game's tuning constants; see
    the module docstring for how they shape the date grid.
    """
    departure_samples: int = MISSION_TABLE_SAMPLES
    arrival_samples: int = MISSION_TABLE_SAMPLES
    max_delta_v: float = MISSION_MAX_DELTA_V
    workers: int = 1
    window_periods: float = MISSION_WINDOW_PERIODS
    hohmann_start_fraction: float = HOHMANN_START_FRACTION
    hohmann_end_fraction: float = HOHMANN_END_FRACTION

    def __post_init__(self):
        if self.departure_samples < 1 or self.arrival_samples < 1:
            raise ValueError(
                f"Sample counts must be positive, got "
                f"{self.departure_samples} x {self.arrival_samples}"
            )
        if self.hohmann_end_fraction < self.hohmann_start_fraction:
            raise ValueError("hohmann_end_fraction must not be below hohmann_start_fraction")

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "MissionTableConfig":
        """Build from the ``mission_table`` section of the YAML config."""
        data = dict(data or {})
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            logger.warning("Ignoring unknown mission_table settings: %s", ", ".join(unknown))
        return cls(**{key: value for key, value in data.items() if key in known})


# =============================================================================
# ROW KERNEL
# =============================================================================

@dataclass(frozen=True, eq=False)
class _RowTask:
    arrival_date: float
    arrival_position: np.ndarray
    arrival_velocity: np.ndarray
    departure_dates: np.ndarray
    departure_positions: np.ndarray
    departure_velocities: np.ndarray
    max_delta_v: float
    mu: float


def compute_transfer_row(task: _RowTask) -> List[Optional[TransferLeg]]:
    """
    Solve every departure column of one arrival row.

    Module-level so that it can be pickled to worker processes.
    """
    row: List[Optional[TransferLeg]] = []
    for j, departure_date in enumerate(task.departure_dates):
        transit = task.arrival_date - float(departure_date)
        if not transit > 0.0:
            row.append(None)
            continue

        result = lambert_battin(
            task.mu,
            task.departure_positions[j],
            task.arrival_position,
            transit,
            OrbitType.PROGRADE,
        )
        if result is None:
            row.append(None)
            continue

        v_depart, v_arrive = result
        delta_v_depart = float(np.linalg.norm(v_depart - task.departure_velocities[j]))
        delta_v_arrive = float(np.linalg.norm(v_arrive - task.arrival_velocity))
        if delta_v_depart + delta_v_arrive < task.max_delta_v:
            row.append(TransferLeg(v_depart, v_arrive, delta_v_depart, delta_v_arrive))
        else:
            row.append(None)
    return row


# =============================================================================
# MISSION TABLE
# =============================================================================

def hohmann_transfer_time(a_origin: float, a_destination: float) -> float:
    """Half the period of the ellipse spanning both orbits, in days."""
    return 0.5 * ((a_origin + a_destination) / 2.0) ** 1.5 * DAYS_PER_YEAR


class MissionTable:
    """
    Porkchop grid of Lambert transfers between two worlds.

    Construction performs the whole build and returns only when every cell
    is settled.

    Parameters
    ----------
    origin, destination : World
        Any objects exposing ``name`` and ``orbit`` (an Orbit). The table
        keeps references to them and never inspects anything else.
    start_date : float
        Julian date of the first departure sample.
    max_delta_v : float or None
        Total delta-V cutoff (AU/day); overrides ``config.max_delta_v``.
    config : MissionTableConfig or None
        Grid settings; defaults to a 400 x 400 synchronous build.
    should_cancel : callable or None
        Polled between rows; returning True raises MissionTableCancelled.
    mu : float
        Gravitational parameter of the transfer conics (AU^3/day^2).
    """

    def __init__(
        self,
        origin: Any,
        destination: Any,
        start_date: float,
        max_delta_v: Optional[float] = None,
        *,
        config: Optional[MissionTableConfig] = None,
        should_cancel: Optional[Callable[[], bool]] = None,
        mu: float = MU_SUN,
    ) -> None:
        self._origin = origin
        self._destination = destination
        self._config = config if config is not None else MissionTableConfig()
        self._start_date = float(start_date)
        self._max_delta_v = float(max_delta_v if max_delta_v is not None else self._config.max_delta_v)
        self._mu = mu

        self._departures: Tuple[DateState, ...] = ()
        self._arrivals: Tuple[DateState, ...] = ()
        self._cells: List[Optional[TransferLeg]] = []
        self.build_time_s = 0.0

        self._build(should_cancel)

    # -------------------------------------------------------------------------
    # Build
    # -------------------------------------------------------------------------

    def _sample(self, orbit, first: float, step: float, count: int) -> Tuple[DateState, ...]:
        states = []
        for k in range(count):
            date = first + k * step
            position, velocity = orbit.state_vector(date)
            states.append(DateState(date, position, velocity))
        return tuple(states)

    def _build(self, should_cancel: Optional[Callable[[], bool]]) -> None:
        cfg = self._config
        origin_orbit = self._origin.orbit
        destination_orbit = self._destination.orbit

        window = cfg.window_periods * min(origin_orbit.period(), destination_orbit.period())
        self._departures = self._sample(
            origin_orbit, self._start_date, window / cfg.departure_samples, cfg.departure_samples,
        )

        hohmann = hohmann_transfer_time(
            origin_orbit.elements().semi_major_axis,
            destination_orbit.elements().semi_major_axis,
        )
        arrival_span = window + (cfg.hohmann_end_fraction - cfg.hohmann_start_fraction) * hohmann
        self._arrivals = self._sample(
            destination_orbit,
            self._start_date + cfg.hohmann_start_fraction * hohmann,
            arrival_span / cfg.arrival_samples,
            cfg.arrival_samples,
        )

        logger.info(
            "Building mission table %s -> %s: %d arrivals x %d departures, "
            "window %.1f d, Hohmann %.1f d, cutoff %.4f AU/d, %d worker(s)",
            self._origin.name, self._destination.name,
            cfg.arrival_samples, cfg.departure_samples,
            window, hohmann, self._max_delta_v, cfg.workers,
        )

        departure_dates = np.array([state.date for state in self._departures])
        departure_positions = np.array([state.position for state in self._departures])
        departure_velocities = np.array([state.velocity for state in self._departures])
        tasks = [
            _RowTask(
                arrival_date=arrival.date,
                arrival_position=arrival.position,
                arrival_velocity=arrival.velocity,
                departure_dates=departure_dates,
                departure_positions=departure_positions,
                departure_velocities=departure_velocities,
                max_delta_v=self._max_delta_v,
                mu=self._mu,
            )
            for arrival in self._arrivals
        ]

        start = time.perf_counter()
        try:
            rows = RowPool(cfg.workers).map_rows(compute_transfer_row, tasks, should_cancel)
        except WorkCancelled as exc:
            logger.info("Mission table build cancelled: %s", exc)
            raise MissionTableCancelled(str(exc)) from exc
        self.build_time_s = time.perf_counter() - start

        cells: List[Optional[TransferLeg]] = []
        for row in rows:
            cells.extend(row)
        self._cells = cells

        logger.info(
            "Mission table %s -> %s built in %.2f s: %d of %d cells feasible",
            self._origin.name, self._destination.name,
            self.build_time_s, self.feasible_count(), len(self._cells),
        )

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def origin(self) -> Any:
        return self._origin

    def destination(self) -> Any:
        return self._destination

    def start_date(self) -> float:
        return self._start_date

    def max_delta_v(self) -> float:
        return self._max_delta_v

    def departures(self) -> Tuple[DateState, ...]:
        return self._departures

    def arrivals(self) -> Tuple[DateState, ...]:
        return self._arrivals

    @property
    def shape(self) -> Tuple[int, int]:
        """(number of arrivals, number of departures)."""
        return len(self._arrivals), len(self._departures)

    def cell(self, i: int, j: int) -> Optional[TransferLeg]:
        """
        Transfer arriving at arrivals()[i] having left at departures()[j].

        Raises:
            IndexError: If (i, j) is outside the grid.
        """
        n_arr, n_dep = self.shape
        if not (0 <= i < n_arr and 0 <= j < n_dep):
            raise IndexError(f"Cell ({i}, {j}) outside {n_arr} x {n_dep} table")
        return self._cells[i * n_dep + j]

    def cells(self) -> Sequence[Optional[TransferLeg]]:
        """Row-major flat view of all cells."""
        return tuple(self._cells)

    def iter_feasible(self) -> Iterator[Tuple[int, int, TransferLeg]]:
        """Yield (i, j, leg) for non-empty cells in row-major order."""
        n_dep = len(self._departures)
        for index, leg in enumerate(self._cells):
            if leg is not None:
                yield index // n_dep, index % n_dep, leg

    def feasible_count(self) -> int:
        return sum(1 for leg in self._cells if leg is not None)

    def delta_v_grid(self) -> np.ndarray:
        """Total delta-V per cell (AU/day), NaN where empty. Shape (N_a, N_d)."""
        grid = np.full(self.shape, np.nan)
        for i, j, leg in self.iter_feasible():
            grid[i, j] = leg.delta_v_total
        return grid

    def to_dataframe(self) -> pd.DataFrame:
        """
        Feasible cells in long format, one row per transfer.

        Columns: arrival_index, departure_index, departure_date,
        arrival_date, transit_days, delta_v_depart, delta_v_arrive,
        delta_v_total (AU/day) and the three delta-V values in km/s.
        """
        records = []
        for i, j, leg in self.iter_feasible():
            departure = self._departures[j]
            arrival = self._arrivals[i]
            records.append({
                "arrival_index": i,
                "departure_index": j,
                "departure_date": departure.date,
                "arrival_date": arrival.date,
                "transit_days": arrival.date - departure.date,
                "delta_v_depart": leg.delta_v_depart,
                "delta_v_arrive": leg.delta_v_arrive,
                "delta_v_total": leg.delta_v_total,
                "delta_v_depart_km_s": au_per_day_to_km_s(leg.delta_v_depart),
                "delta_v_arrive_km_s": au_per_day_to_km_s(leg.delta_v_arrive),
                "delta_v_total_km_s": au_per_day_to_km_s(leg.delta_v_total),
            })
        columns = [
            "arrival_index", "departure_index", "departure_date", "arrival_date",
            "transit_days", "delta_v_depart", "delta_v_arrive", "delta_v_total",
            "delta_v_depart_km_s", "delta_v_arrive_km_s", "delta_v_total_km_s",
        ]
        return pd.DataFrame.from_records(records, columns=columns)

    def __repr__(self) -> str:
        n_arr, n_dep = self.shape
        return (
            f"MissionTable({self._origin.name} -> {self._destination.name}, "
            f"{n_arr}x{n_dep}, feasible={self.feasible_count()})"
        )
