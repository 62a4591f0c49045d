"""Sensors report the field or the potential at a position, and are updated whenever the charge
configuration changes (see `chargefield.model.ElectrostaticModel`). A `SensorGrid` samples the field and
potential on a regular lattice in one batched evaluation.
"""
from __future__ import annotations

from math import ceil, floor, isfinite

import numpy as np

from .field import FieldEvaluator
from .typing import *


def _as_point(position: PointLike2D) -> Point2D:
    p = np.array(position, dtype=np.float64)
    assert p.shape == (2,), "Sensor position should be a two dimensional point"
    return p


class FieldSensor:
    """Measures the electric field (V/m) at its position."""

    def __init__(self, evaluator: FieldEvaluator, position: PointLike2D = (0., 0.)) -> None:
        self.evaluator = evaluator
        self.position = _as_point(position)
        self.value = np.zeros(2)
        self.update()

    def update(self) -> Vector2D:
        field = self.evaluator.field_at_point(self.position)
        assert all(isfinite(v) for v in field), f"Electric field is not finite: {field}"
        self.value = field
        return field

    def move(self, position: PointLike2D) -> Vector2D:
        self.position = _as_point(position)
        return self.update()

    @property
    def magnitude(self) -> float:
        return float(np.linalg.norm(self.value))

    @property
    def angle(self) -> float:
        """Angle of the field with the x-axis in radians."""
        return float(np.arctan2(self.value[1], self.value[0]))

    def __str__(self) -> str:
        return f'<chargefield FieldSensor at ({self.position[0]:.3f}, {self.position[1]:.3f}), |E|={self.magnitude:.4g} V/m>'


class PotentialSensor:
    """Measures the electric potential (V) at its position. Reports plus or minus infinity when placed
    exactly on top of a charge."""

    def __init__(self, evaluator: FieldEvaluator, position: PointLike2D = (0., 0.)) -> None:
        self.evaluator = evaluator
        self.initial_position = _as_point(position)
        self.position = self.initial_position.copy()
        self.value = 0.
        self.update()

    def update(self) -> float:
        self.value = self.evaluator.potential_at_point(self.position)
        return self.value

    def move(self, position: PointLike2D) -> float:
        self.position = _as_point(position)
        return self.update()

    def reset(self) -> None:
        self.position = self.initial_position.copy()
        self.update()

    def __str__(self) -> str:
        return f'<chargefield PotentialSensor at ({self.position[0]:.3f}, {self.position[1]:.3f}), V={self.value:.4g} V>'


def grid_positions(bounds: BoundsLike2D, enlarged_bounds: BoundsLike2D, spacing: float = 0.5, on_origin: bool = True) -> Points2D:
    """Lattice points with the given spacing covering the enlarged bounds, except for its four corner regions.

    The points lie inside either the vertical beam (x within `bounds`, y within `enlarged_bounds`) or the horizontal
    beam (x within `enlarged_bounds`, y within `bounds`). Points on the outer border of the enlarged bounds are excluded.

    Parameters
    ----------
    bounds: (2, 2) array of float
        Nominal bounds `((xmin, xmax), (ymin, ymax))`.
    enlarged_bounds: (2, 2) array of float
        Enlarged bounds, should contain `bounds`.
    spacing: float
        Distance between adjacent lattice points.
    on_origin: bool
        Whether a lattice point lies on the origin. Otherwise the lattice is shifted by half the spacing in both directions.

    Returns
    -------
    (N, 2) np.ndarray of float64
    """
    if spacing <= 0.:
        raise ValueError('Sensor grid spacing should be positive')

    (xmin, xmax), (ymin, ymax) = np.array(bounds, dtype=np.float64)
    (exmin, exmax), (eymin, eymax) = np.array(enlarged_bounds, dtype=np.float64)

    offset = 0. if on_origin else 0.5

    # Integers or half-integers
    i_values = np.arange(ceil(exmin/spacing) - offset + 1, floor(exmax/spacing) + offset)
    j_values = np.arange(ceil(eymin/spacing) - offset + 1, floor(eymax/spacing) + offset)

    I, J = np.meshgrid(i_values, j_values, indexing='ij')
    x, y = (I*spacing).flatten(), (J*spacing).flatten()

    vertical = (xmin <= x) & (x <= xmax) & (eymin <= y) & (y <= eymax)
    horizontal = (exmin <= x) & (x <= exmax) & (ymin <= y) & (y <= ymax)
    mask = vertical | horizontal

    return np.column_stack((x[mask], y[mask]))


class SensorGrid:
    """Static lattice of sensors, see `grid_positions` for the layout. Call `SensorGrid.update`
    to (re)compute the field and potential at all lattice points."""

    def __init__(self, evaluator: FieldEvaluator, bounds: BoundsLike2D, enlarged_bounds: BoundsLike2D,
                 spacing: float = 0.5, on_origin: bool = True) -> None:
        self.evaluator = evaluator
        self.spacing = spacing
        self.positions = grid_positions(bounds, enlarged_bounds, spacing=spacing, on_origin=on_origin)
        self.fields = np.zeros((len(self.positions), 2))
        self.potentials = np.zeros(len(self.positions))

    def __len__(self) -> int:
        return len(self.positions)

    def update(self) -> None:
        self.fields = self.evaluator.field_at_points(self.positions)
        self.potentials = self.evaluator.potential_at_points(self.positions)

    def field_magnitudes(self) -> ArrayFloat1D:
        return np.linalg.norm(self.fields, axis=1)

    def __str__(self) -> str:
        return f'<chargefield SensorGrid, {len(self.positions)} sensors, spacing {self.spacing} m>'
