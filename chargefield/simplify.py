"""Reduce the number of points of a traced polyline while keeping it visually equivalent.

A point is removed when all points between the previously kept point and the next candidate lie within
a distance `tolerance` of the straight chord connecting them. Three collinear points therefore always lose
their middle point. The first and last points are always kept. For closed lines the segment connecting the last
point back to the first one closes the loop, so keeping both end points preserves the wrap around adjacency.
"""
from __future__ import annotations

from math import hypot

import numpy as np

from .settings import DEFAULT_SETTINGS
from .typing import *


def distance_from_line(start: PointLike2D, point: PointLike2D | PointsLike2D, end: PointLike2D) -> float | ArrayFloat1D:
    """Distance between `point` and the infinite line through `start` and `end`. When `start` and `end`
    coincide the distance between `point` and `start` is returned. `point` can also be an (N, 2) array,
    in which case an (N,) array of distances is returned.

    See http://mathworld.wolfram.com/Point-LineDistance2-Dimensional.html
    """
    start = np.asarray(start, dtype=np.float64)
    chord = np.asarray(end, dtype=np.float64) - start
    relative = np.asarray(point, dtype=np.float64) - start
    length = hypot(chord[0], chord[1])

    if length == 0.:
        return np.linalg.norm(relative, axis=-1)

    return np.abs(relative[..., 0]*chord[1] - relative[..., 1]*chord[0]) / length

def simplify(positions: PointsLike2D, closed: bool = False, tolerance: float = DEFAULT_SETTINGS.simplification_tolerance) -> Points2D:
    """Simplify a polyline.

    Parameters
    ----------
    positions: (N, 2) array of float
        Ordered points of the polyline.
    closed: bool
        Whether the polyline forms a closed loop (the last point connects back to the first).
    tolerance: float
        Maximum distance between a removed point and the chord that replaces it.

    Returns
    -------
    (M, 2) np.ndarray of float64 with M <= N. A new array; the input is never modified.
    """
    positions = np.array(positions, dtype=np.float64).reshape(-1, 2)
    N = len(positions)

    if N <= 2:
        return positions

    kept = [0]

    for i in range(1, N - 1):
        # Can the chord from the last kept point reach positions[i+1] while all points
        # in between stay within tolerance? If not, positions[i] has to be kept.
        last = kept[-1]
        between = positions[last+1:i+1]

        if np.any(distance_from_line(positions[last], between, positions[i+1]) > tolerance):
            kept.append(i)

    kept.append(N - 1)

    if closed and len(kept) == 2:
        # A loop needs at least three vertices to enclose anything.
        farthest = 1 + int(np.argmax(distance_from_line(positions[0], positions[1:-1], positions[-1])))
        kept.insert(1, farthest)

    return positions[kept]
