"""Uniform sampling lattice over a region's bounding box."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List

from hydrator.core.regions import Bounds


@dataclass(frozen=True)
class GridPoint:
    lat: float
    lng: float


def generate_grid(bounds: Bounds, density: int) -> List[GridPoint]:
    """Return ``(density + 1) ** 2`` points at the cell centres of ``bounds``.

    Points are ordered south to north, then west to east. Because every point
    sits half a cell away from its neighbours' edges, none lands on the
    bounding box itself.
    """
    if density < 0:
        raise ValueError("Grid density must be >= 0")

    cells = density + 1
    lat_step = (bounds.north - bounds.south) / cells
    lng_step = (bounds.east - bounds.west) / cells

    points: List[GridPoint] = []
    for row in range(cells):
        for col in range(cells):
            points.append(
                GridPoint(
                    lat=bounds.south + (row + 0.5) * lat_step,
                    lng=bounds.west + (col + 0.5) * lng_step,
                )
            )
    return points
