"""The settings module collects every tunable constant used by the field evaluation and the
equipotential tracer. All lengths are in meters and charges are expressed in nano Coulomb, so the
default Coulomb constant \\( k \\approx 9 \\) gives fields in V/m and potentials in V.

The defaults can be overridden by passing keyword arguments to `Settings`, or by setting environment
variables of the form `CHARGEFIELD_<NAME>` and calling `Settings.from_environment`. For example

```bash
    CHARGEFIELD_MAX_STEP=0.1 CHARGEFIELD_CLOSE_APPROACH_RADIUS=0.05 python3 ./examples/dipole.py
```
"""
from __future__ import annotations

import os
import copy
from math import pi

import numpy as np
from scipy.constants import epsilon_0, nano

from .typing import *

# Width and height of the nominal play area, in meters.
WIDTH = 8.
HEIGHT = 5.

NOMINAL_BOUNDS = ((-WIDTH/2, WIDTH/2), (-HEIGHT/2, HEIGHT/2))
ENLARGED_BOUNDS = ((-1.5*WIDTH/2, 1.5*WIDTH/2), (-HEIGHT/2, 3*HEIGHT/2))

# The largest field the sensors are expected to display (V/m). Clamped contributions
# are an order of magnitude above it.
MAX_FIELD_MAGNITUDE = 1e6

_DEFAULTS = dict(
    coulomb_constant=9.,
    min_distance_squared=1e-9,
    clamp_field_magnitude=10*MAX_FIELD_MAGNITUDE,
    min_step=0.01,
    max_step=0.05,
    min_steps=1000,
    max_steps=5000,
    adaptive_start=3,
    close_approach_radius=0.03,
    simplification_tolerance=0.001,
    tracing_bounds=ENLARGED_BOUNDS,
    retry_offset=(0.00031415, 0.00027178))

_INTEGERS = ['min_steps', 'max_steps', 'adaptive_start']
_PAIRS = ['tracing_bounds', 'retry_offset']


def _parse_environment_value(name, value):
    if name in _INTEGERS:
        return int(value)
    if name in _PAIRS:
        # Comma separated list of floats, bounds are given as xmin,xmax,ymin,ymax
        floats = [float(v) for v in value.split(',')]
        return np.reshape(floats, (2, 2)) if name == 'tracing_bounds' else floats
    return float(value)


class Settings:
    """Tunable constants of the field evaluation and the contour tracer.

    Parameters
    ----------
    coulomb_constant: float
        Prefactor \\( k \\) in \\( E = kq/r^2 \\) and \\( V = kq/r \\).
    min_distance_squared: float
        When the squared distance between a point and a charge is below this value, the contribution
        of the charge to the field is replaced by a vector of magnitude `clamp_field_magnitude` pointing along +x.
    clamp_field_magnitude: float
        Magnitude of a clamped field contribution (V/m).
    min_step, max_step: float
        Bounds on the length of a single step along an equipotential line.
    min_steps, max_steps: int
        A trace always performs at least `min_steps` steps (unless the line closes) and never more than `max_steps`.
    adaptive_start: int
        Number of initial steps taken with length `min_step` before the step length adapts to the curvature.
    close_approach_radius: float
        Contour seeds closer than this distance to a charge are refused.
    simplification_tolerance: float
        Maximum perpendicular distance between a removed point and the simplified polyline.
    tracing_bounds: (2, 2) array of float
        `((xmin, xmax), (ymin, ymax))`, the tracer stops once both heads left these bounds.
    retry_offset: (2,) array of float
        Offset applied to the seed when a trace ends inside the bounds without closing.
    """

    def __init__(self, **kwargs) -> None:
        unknown = set(kwargs) - set(_DEFAULTS)
        if unknown:
            raise ValueError(f'Unknown settings: {", ".join(sorted(unknown))}')

        values = {**_DEFAULTS, **kwargs}

        self.coulomb_constant = float(values['coulomb_constant'])
        self.min_distance_squared = float(values['min_distance_squared'])
        self.clamp_field_magnitude = float(values['clamp_field_magnitude'])
        self.min_step = float(values['min_step'])
        self.max_step = float(values['max_step'])
        self.min_steps = int(values['min_steps'])
        self.max_steps = int(values['max_steps'])
        self.adaptive_start = int(values['adaptive_start'])
        self.close_approach_radius = float(values['close_approach_radius'])
        self.simplification_tolerance = float(values['simplification_tolerance'])
        self.tracing_bounds = np.array(values['tracing_bounds'], dtype=np.float64)
        self.retry_offset = np.array(values['retry_offset'], dtype=np.float64)

        self._validate()

    def _validate(self) -> None:
        if self.coulomb_constant <= 0.:
            raise ValueError('The Coulomb constant should be positive')
        if self.min_distance_squared <= 0. or self.clamp_field_magnitude <= 0.:
            raise ValueError('The minimum distance and clamped field magnitude should be positive')
        if not 0. < self.min_step <= self.max_step:
            raise ValueError(f'Step bounds should satisfy 0 < min_step <= max_step, got ({self.min_step}, {self.max_step})')
        if not 0 <= self.min_steps <= self.max_steps:
            raise ValueError(f'Step counts should satisfy 0 <= min_steps <= max_steps, got ({self.min_steps}, {self.max_steps})')
        if self.adaptive_start < 2:
            # The deflection angle needs three points on each head.
            raise ValueError('adaptive_start should be at least 2')
        if self.close_approach_radius < 0. or self.simplification_tolerance < 0.:
            raise ValueError('The close approach radius and simplification tolerance should be non-negative')
        if self.tracing_bounds.shape != (2, 2) or np.any(self.tracing_bounds[:, 0] >= self.tracing_bounds[:, 1]):
            raise ValueError('Tracing bounds should be of the form ((xmin, xmax), (ymin, ymax))')
        if self.retry_offset.shape != (2,):
            raise ValueError('The retry offset should be a two dimensional vector')

    @staticmethod
    def from_environment(environ=None, **kwargs) -> Settings:
        """Create settings whose values are overridden by environment variables named
        `CHARGEFIELD_<NAME>` (for example `CHARGEFIELD_MIN_STEP`). Keyword arguments take precedence
        over the environment."""
        environ = os.environ if environ is None else environ
        values = {}

        for name in _DEFAULTS:
            env_value = environ.get('CHARGEFIELD_' + name.upper())

            if env_value is not None:
                values[name] = _parse_environment_value(name, env_value)

        return Settings(**{**values, **kwargs})

    @staticmethod
    def si(**kwargs) -> Settings:
        """Settings using the exact SI prefactor \\( 1/(4 \\pi \\epsilon_0) \\) for a charge unit
        of one nano Coulomb (approximately 8.988), instead of the rounded value 9."""
        return Settings(coulomb_constant=nano/(4*pi*epsilon_0), **kwargs)

    def replace(self, **kwargs) -> Settings:
        values = {name: copy.copy(getattr(self, name)) for name in _DEFAULTS}
        return Settings(**{**values, **kwargs})

    def as_dict(self) -> dict:
        return {name: getattr(self, name) for name in _DEFAULTS}

    def within_tracing_bounds(self, point: PointLike2D) -> bool:
        b = self.tracing_bounds
        return bool(b[0, 0] <= point[0] <= b[0, 1] and b[1, 0] <= point[1] <= b[1, 1])

    def __eq__(self, other):
        if not isinstance(other, Settings):
            return NotImplemented
        return all(np.array_equal(getattr(self, n), getattr(other, n)) for n in _DEFAULTS)

    def __str__(self) -> str:
        return '<chargefield Settings\n\t' + '\n\t'.join(f'{n}={getattr(self, n)}' for n in _DEFAULTS) + '>'

DEFAULT_SETTINGS = Settings()
