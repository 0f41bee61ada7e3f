"""
===============================================================================
HELIOTRANSFER - Worlds and the Universe File
===============================================================================
A World is a named body on a heliocentric Keplerian orbit. The Universe is
the ordered collection of worlds read from the game's universe file:

    {
      "worlds": [
        {
          "name": "Earth",
          "orbit": {
            "epoch": 2451545.0,
            "semimajor_axis": 1.00000011,
            "eccentricity": 0.01671022,
            "inclination": 0.00005,
            "longitude_perihelion": 102.94719,
            "longitude_ascending_node": -11.26064,
            "mean_anomaly": 357.51716
          }
        },
        ...
      ]
    }

Angles in the file are degrees; they are converted to radians on ingest.
Other top-level sections of the file (market data, ships) are ignored.
===============================================================================
"""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterator, List, Sequence, Tuple, Union

import numpy as np

from heliotransfer.dynamics.orbit import Orbit
from heliotransfer.dynamics.orbital_elements import OrbitalElements

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class World:
    """
    A named heliocentric body.

    Attributes
    ----------
    name : str
        Display name, unique within a universe.
    orbit : Orbit
        Heliocentric orbit of the body.
    """
    name: str
    orbit: Orbit

    def position(self, t: float) -> np.ndarray:
        """Heliocentric position (AU) at Julian date t."""
        return self.orbit.position(t)

    def state_vector(self, t: float) -> Tuple[np.ndarray, np.ndarray]:
        """Heliocentric position (AU) and velocity (AU/day) at t."""
        return self.orbit.state_vector(t)

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "World":
        """
        Build a world from one entry of the universe file's ``worlds`` array.

        Raises:
            ValueError: If the name or orbit is missing or malformed, or the
                orbit is not elliptic.
        """
        name = data.get("name")
        if not isinstance(name, str) or not name:
            raise ValueError(f"World entry without a valid name: {data!r}")
        orbit_data = data.get("orbit")
        if not isinstance(orbit_data, dict):
            raise ValueError(f"world '{name}': missing 'orbit' object")
        elements = OrbitalElements.from_json(orbit_data, name=name)
        try:
            orbit = Orbit(elements)
        except ValueError as exc:
            raise ValueError(f"world '{name}': {exc}") from exc
        return cls(name=name, orbit=orbit)

    def __repr__(self) -> str:
        return f"World({self.name!r}, {self.orbit!r})"


class Universe:
    """
    Ordered collection of worlds with lookup by name.

    Parameters
    ----------
    worlds : sequence of World
        Worlds in file order. Names must be unique.
    """

    def __init__(self, worlds: Sequence[World] = ()) -> None:
        self._worlds: List[World] = []
        self._by_name: Dict[str, World] = {}
        for world in worlds:
            self.add_world(world)

    def add_world(self, world: World) -> None:
        if world.name in self._by_name:
            raise ValueError(f"Duplicate world name: {world.name}")
        self._worlds.append(world)
        self._by_name[world.name] = world

    def world(self, name: str) -> World:
        """
        Look up a world by name (case-insensitive fallback).

        Raises:
            KeyError: If no world has that name.
        """
        if name in self._by_name:
            return self._by_name[name]
        for world in self._worlds:
            if world.name.lower() == name.lower():
                logger.warning("World %r matched %r ignoring case", name, world.name)
                return world
        raise KeyError(f"Unknown world: {name}. Valid: {list(self._by_name)}")

    def worlds(self) -> List[World]:
        return list(self._worlds)

    def names(self) -> List[str]:
        return [world.name for world in self._worlds]

    def __iter__(self) -> Iterator[World]:
        return iter(self._worlds)

    def __len__(self) -> int:
        return len(self._worlds)

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    def __repr__(self) -> str:
        return f"Universe({self.names()})"


def universe_from_json(data: Dict[str, Any]) -> Universe:
    """
    Build a Universe from the parsed universe file.

    Raises:
        ValueError: If the ``worlds`` array is missing or an entry is invalid.
    """
    worlds = data.get("worlds")
    if not isinstance(worlds, list):
        raise ValueError("Universe file has no 'worlds' array")
    return Universe([World.from_json(entry) for entry in worlds])


def load_universe(path: Union[str, Path]) -> Universe:
    """
    Read a universe JSON file.

    Args:
        path: Path to the universe file.

    Returns:
        Universe with one World per entry of the ``worlds`` array.
    """
    path = Path(path)
    logger.info("Loading universe from: %s", path)
    with open(path, "r") as f:
        data = json.load(f)
    universe = universe_from_json(data)
    logger.info("Loaded %d worlds: %s", len(universe), ", ".join(universe.names()))
    return universe
