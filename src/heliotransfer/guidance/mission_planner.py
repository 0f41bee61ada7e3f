"""
===============================================================================
HELIOTRANSFER - Mission Planner
===============================================================================
Turns a mission table into a MissionPlan: the departure and arrival dates,
the delta-V at each end, and the classical elements of the transfer conic.

The best plan is the feasible cell with the smallest total delta-V. Cells
within 1e-12 AU/day of that minimum tie, and ties go to the first cell in
row-major order (lowest arrival index, then lowest departure index), so the
choice does not depend on how the table was built.

The transfer elements are recovered from the arrival position and the
transfer-conic velocity there, with the arrival date as their epoch:

    elements = orbital_elements_from_state(r_arrive, v_xfer_arrive, t_arrive)
===============================================================================
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional

from heliotransfer.core.constants import DELTA_V_TIE_TOLERANCE, MU_SUN, au_per_day_to_km_s
from heliotransfer.core.julian import format_date, format_transit_time
from heliotransfer.dynamics.orbit import Orbit
from heliotransfer.dynamics.orbital_elements import OrbitalElements, orbital_elements_from_state

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class MissionPlan:
    """
    A chosen transfer between two worlds.

    Attributes:
        origin:            World the ship leaves.
        destination:       World the ship reaches.
        departure_date:    Julian date of the departure burn.
        arrival_date:      Julian date of the arrival burn.
        transfer_elements: Elements of the transfer conic, epoch = arrival.
        delta_v_depart:    Departure delta-V (AU/day).
        delta_v_arrive:    Arrival delta-V (AU/day).
    """
    origin: Any
    destination: Any
    departure_date: float
    arrival_date: float
    transfer_elements: OrbitalElements
    delta_v_depart: float
    delta_v_arrive: float

    @property
    def transit_time(self) -> float:
        """Days between departure and arrival."""
        return self.arrival_date - self.departure_date

    @property
    def delta_v_total(self) -> float:
        return self.delta_v_depart + self.delta_v_arrive

    @property
    def orbit(self) -> Orbit:
        """Propagator for the transfer conic."""
        return Orbit(self.transfer_elements)

    def summary(self) -> str:
        lines = [
            f"Mission plan: {self.origin.name} -> {self.destination.name}",
            f"  Departure:      {format_date(self.departure_date)} (JD {self.departure_date:.3f})",
            f"  Arrival:        {format_date(self.arrival_date)} (JD {self.arrival_date:.3f})",
            f"  Transit time:   {format_transit_time(self.transit_time)}",
            f"  Departure dV:   {au_per_day_to_km_s(self.delta_v_depart):.3f} km/s",
            f"  Arrival dV:     {au_per_day_to_km_s(self.delta_v_arrive):.3f} km/s",
            f"  Total dV:       {au_per_day_to_km_s(self.delta_v_total):.3f} km/s",
            f"  Transfer orbit: a = {self.transfer_elements.semi_major_axis:.4f} AU, "
            f"e = {self.transfer_elements.eccentricity:.4f}",
        ]
        return "\n".join(lines)


def mission_plan_from_cell(table, i: int, j: int, mu: float = MU_SUN) -> MissionPlan:
    """
    Build the plan for one cell of a mission table.

    Args:
        table: A built MissionTable.
        i: Arrival index.
        j: Departure index.
        mu: Gravitational parameter for the element reconstruction.

    Raises:
        IndexError: If (i, j) lies outside the table.
        ValueError: If the cell is empty.
    """
    leg = table.cell(i, j)
    if leg is None:
        raise ValueError(f"No feasible transfer in cell ({i}, {j})")

    departure = table.departures()[j]
    arrival = table.arrivals()[i]
    elements = orbital_elements_from_state(arrival.position, leg.v_arrive, arrival.date, mu)

    return MissionPlan(
        origin=table.origin(),
        destination=table.destination(),
        departure_date=departure.date,
        arrival_date=arrival.date,
        transfer_elements=elements,
        delta_v_depart=leg.delta_v_depart,
        delta_v_arrive=leg.delta_v_arrive,
    )


def find_best_mission_plan(table) -> Optional[MissionPlan]:
    """
    Minimum total delta-V plan of a mission table, or None if no cell is
    feasible.
    """
    feasible = list(table.iter_feasible())
    best_index = None
    if feasible:
        best_delta_v = min(leg.delta_v_total for _, _, leg in feasible)
        # first cell in row-major order within the tolerance of the minimum
        best_index = next(
            (i, j) for i, j, leg in feasible
            if leg.delta_v_total <= best_delta_v + DELTA_V_TIE_TOLERANCE
        )

    if best_index is None:
        logger.info(
            "No feasible transfer %s -> %s under %.4f AU/day",
            table.origin().name, table.destination().name, table.max_delta_v(),
        )
        return None

    plan = mission_plan_from_cell(table, *best_index)
    logger.info(
        "Best transfer %s -> %s at cell %s: dV %.5f AU/day, transit %.1f days",
        plan.origin.name, plan.destination.name, best_index,
        plan.delta_v_total, plan.transit_time,
    )
    return plan
