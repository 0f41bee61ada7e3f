"""
===============================================================================
HELIOTRANSFER - Ship Lifecycle (Finite State Machine)
===============================================================================
A ship is either docked at a world or in transit on a transfer conic.

    DOCKED --assign_plan(p)--> DOCKED (plan pending)
    DOCKED --update(t), p.departure < t < p.arrival--> IN_TRANSIT
    IN_TRANSIT --update(t), t > p.arrival--> DOCKED at p.destination

The game clock drives the machine through update(); no transition happens
on its own. While in transit the ship is propagated on the Orbit of the
plan's transfer elements. Every transition is appended to the timeline as
(date, state, reason).
===============================================================================
"""

import logging
from enum import IntEnum
from typing import Any, List, Optional, Tuple

import numpy as np

from heliotransfer.dynamics.orbit import Orbit
from heliotransfer.guidance.mission_planner import MissionPlan

logger = logging.getLogger(__name__)


class ShipState(IntEnum):
    DOCKED = 0
    IN_TRANSIT = 1


class Ship:
    """
    Ship following mission plans between worlds.

    Attributes:
        name:     Display name.
        state:    Current ShipState.
        world:    World the ship is docked at, None in transit.
        orbit:    Transfer Orbit while in transit, None when docked.
        plan:     Assigned MissionPlan, None when idle.
        timeline: Ordered list of (date, state, reason) tuples.
    """

    def __init__(self, name: str, world: Any, date: Optional[float] = None) -> None:
        self.name = name
        self.state: ShipState = ShipState.DOCKED
        self.world: Optional[Any] = world
        self.orbit: Optional[Orbit] = None
        self.plan: Optional[MissionPlan] = None
        self.timeline: List[Tuple[Optional[float], ShipState, str]] = [
            (date, ShipState.DOCKED, f"docked_at_{world.name}"),
        ]

        logger.info("Ship %s docked at %s", self.name, world.name)

    def assign_plan(self, plan: MissionPlan) -> None:
        """
        Schedule a transfer. The ship departs at the next update() that
        falls inside the plan's transit window.

        Raises:
            ValueError: If the ship is in transit or not docked at the
                plan's origin.
        """
        if self.state != ShipState.DOCKED:
            raise ValueError(f"Ship {self.name} is in transit and cannot take a new plan")
        if plan.origin is not self.world:
            raise ValueError(
                f"Ship {self.name} is docked at {self.world.name}, "
                f"plan departs from {plan.origin.name}"
            )
        self.plan = plan
        logger.info(
            "Ship %s assigned %s -> %s, departing JD %.3f",
            self.name, plan.origin.name, plan.destination.name, plan.departure_date,
        )

    def cancel_plan(self) -> None:
        """Drop a pending plan. Only allowed while docked."""
        if self.state != ShipState.DOCKED:
            raise ValueError(f"Ship {self.name} is in transit; its plan cannot be cancelled")
        self.plan = None

    def update(self, date: float) -> ShipState:
        """Advance the state machine to the given Julian date."""
        plan = self.plan
        if plan is None:
            return self.state

        if self.state == ShipState.DOCKED:
            if plan.departure_date < date < plan.arrival_date:
                self.world = None
                self.orbit = plan.orbit
                self._transition(date, ShipState.IN_TRANSIT, f"departed_{plan.origin.name}")
        elif date > plan.arrival_date:
            self.world = plan.destination
            self.orbit = None
            self.plan = None
            self._transition(date, ShipState.DOCKED, f"arrived_{plan.destination.name}")
        return self.state

    def position(self, date: float) -> np.ndarray:
        """Heliocentric position (AU) at the given Julian date."""
        if self.state == ShipState.IN_TRANSIT:
            return self.orbit.position(date)
        return self.world.position(date)

    def _transition(self, date: float, new_state: ShipState, reason: str) -> None:
        old_state = self.state
        self.state = new_state
        self.timeline.append((date, new_state, reason))
        logger.info(
            "Ship %s: %s -> %s at JD %.3f (%s)",
            self.name, old_state.name, new_state.name, date, reason,
        )

    def __repr__(self) -> str:
        where = self.world.name if self.world is not None else "transfer orbit"
        return f"Ship({self.name!r}, {self.state.name}, {where})"
