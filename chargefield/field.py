"""The field module computes the electric field and the electric potential produced by the active charges
of a `chargefield.charges.ChargeSet`.

For a set of point charges \\( q_i \\) at positions \\( \\vec{c}_i \\) the field and potential at \\( \\vec{p} \\) are

$$
\\vec{E}(\\vec{p}) = k \\sum_i q_i \\frac{\\vec{p} - \\vec{c}_i}{|\\vec{p} - \\vec{c}_i|^3}, \\quad
V(\\vec{p}) = k \\sum_i \\frac{q_i}{|\\vec{p} - \\vec{c}_i|}.
$$

Close to a charge the field diverges. Whenever the squared distance to a charge is smaller than
`Settings.min_distance_squared` the contribution of that charge is replaced by a large but finite vector
of magnitude `Settings.clamp_field_magnitude` along the positive x-axis. The potential exactly on top of a charge
is returned as plus or minus infinity.
"""
from __future__ import annotations

from math import sqrt, atan2

import numpy as np
from scipy.spatial.distance import cdist

from .charges import ChargeSet
from .settings import Settings, DEFAULT_SETTINGS
from .typing import *


class FieldEvaluator:
    """Evaluates field and potential of a `ChargeSet`. The evaluator holds a reference to the
    set, so its results always reflect the current charge configuration.

    Parameters
    ----------
    charge_set: `chargefield.charges.ChargeSet`
    settings: `chargefield.settings.Settings`
        Supplies the Coulomb constant and the clamp parameters.
    """

    def __init__(self, charge_set: ChargeSet, settings: Settings | None = None) -> None:
        self.charge_set = charge_set
        self.settings = settings if settings is not None else DEFAULT_SETTINGS

    def __str__(self) -> str:
        return f'<chargefield FieldEvaluator of {self.charge_set}, k={self.settings.coulomb_constant}>'

    def field_at_point(self, point: PointLike2D) -> Vector2D:
        """Compute the electric field at a point.

        Parameters
        ----------
        point: (2,) array of float

        Returns
        -------
        (2,) np.ndarray of float64, the electric field (V/m). Zero when the charge set is not charged.
        """
        terms = self.charge_set.terms()

        if not terms or not self.charge_set.is_charged():
            return np.zeros(2)

        s = self.settings
        x, y = float(point[0]), float(point[1])
        Ex, Ey = 0., 0.
        clamped = 0

        for cx, cy, q in terms:
            dx, dy = x - cx, y - cy
            r2 = dx*dx + dy*dy

            if r2 < s.min_distance_squared:
                clamped += 1
                continue

            factor = q / (r2 * sqrt(r2))
            Ex += dx * factor
            Ey += dy * factor

        return np.array([s.coulomb_constant*Ex + clamped*s.clamp_field_magnitude, s.coulomb_constant*Ey])

    def potential_at_point(self, point: PointLike2D) -> float:
        """Compute the electric potential at a point.

        Parameters
        ----------
        point: (2,) array of float

        Returns
        -------
        float, the potential (V). Plus or minus infinity if the net charge located exactly at `point` is positive
        or negative respectively. Zero when the charge set is not charged.
        """
        terms = self.charge_set.terms()

        if not terms or not self.charge_set.is_charged():
            return 0.

        x, y = float(point[0]), float(point[1])
        potential = 0.
        on_site = 0.

        for cx, cy, q in terms:
            if cx == x and cy == y:
                on_site += q
            else:
                potential += q / sqrt((x-cx)**2 + (y-cy)**2)

        if on_site > 0:
            return float('inf')
        elif on_site < 0:
            return float('-inf')

        return self.settings.coulomb_constant * potential

    def field_magnitude_and_angle(self, point: PointLike2D) -> Tuple[float, float]:
        """Magnitude (V/m) and angle with the x-axis (radians, in (-pi, pi]) of the field at `point`."""
        Ex, Ey = self.field_at_point(point)
        return sqrt(Ex*Ex + Ey*Ey), atan2(Ey, Ex)

    def _relative_positions(self, points: PointsLike2D) -> Tuple[Points2D, ArrayFloat2D, ArrayFloat1D, ArrayFloat2D]:
        points = np.array(points, dtype=np.float64)
        assert points.ndim == 2 and points.shape[1] == 2, "Points should have shape (N, 2)"
        positions, magnitudes = self.charge_set.snapshot()
        distances = cdist(points, positions) if len(positions) else np.zeros((len(points), 0))
        return points, positions, magnitudes, distances

    def field_at_points(self, points: PointsLike2D) -> Vectors2D:
        """Compute the electric field at many points at once. Agrees (up to rounding) with
        `FieldEvaluator.field_at_point` applied to every point.

        Parameters
        ----------
        points: (N, 2) array of float

        Returns
        -------
        (N, 2) np.ndarray of float64
        """
        points, positions, magnitudes, distances = self._relative_positions(points)

        if len(magnitudes) == 0 or not self.charge_set.is_charged():
            return np.zeros((len(points), 2))

        s = self.settings
        clamped = distances**2 < s.min_distance_squared

        with np.errstate(divide='ignore', invalid='ignore'):
            factor = np.where(clamped, 0., magnitudes[np.newaxis, :] / distances**3)

        delta = points[:, np.newaxis, :] - positions[np.newaxis, :, :]
        field = s.coulomb_constant * np.sum(delta * factor[:, :, np.newaxis], axis=1)
        field[:, 0] += s.clamp_field_magnitude * np.sum(clamped, axis=1)
        return field

    def potential_at_points(self, points: PointsLike2D) -> ArrayFloat1D:
        """Compute the electric potential at many points at once. Agrees (up to rounding) with
        `FieldEvaluator.potential_at_point` applied to every point.

        Parameters
        ----------
        points: (N, 2) array of float

        Returns
        -------
        (N,) np.ndarray of float64
        """
        points, positions, magnitudes, distances = self._relative_positions(points)

        if len(magnitudes) == 0 or not self.charge_set.is_charged():
            return np.zeros(len(points))

        on_site_mask = np.all(points[:, np.newaxis, :] == positions[np.newaxis, :, :], axis=2)
        on_site = np.sum(np.where(on_site_mask, magnitudes[np.newaxis, :], 0.), axis=1)

        with np.errstate(divide='ignore'):
            terms = np.where(on_site_mask, 0., magnitudes[np.newaxis, :] / np.where(on_site_mask, 1., distances))

        potential = self.settings.coulomb_constant * np.sum(terms, axis=1)
        potential[on_site > 0] = np.inf
        potential[on_site < 0] = -np.inf
        return potential
