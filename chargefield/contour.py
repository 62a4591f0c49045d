"""The contour module traces equipotential lines, curves along which the electric potential is constant.

Starting from a seed point, two _heads_ walk away from the seed in opposite directions along the equipotential: the
clockwise head moves along the field rotated by +90 degrees, the counter-clockwise head along the field rotated by
-90 degrees. A single step of a head is a predictor-corrector step: the head first moves a distance \\( \\Delta \\) perpendicular
to the field, giving an intermediate (midway) point. Since the midway point is in general not exactly on the
equipotential, it is moved along the field at the midway point by

$$
\\delta \\vec{r} = \\frac{V(\\vec{r}_{mid}) - V_0}{|\\vec{E}(\\vec{r}_{mid})|^2} \\vec{E}(\\vec{r}_{mid})
$$

where \\( V_0 \\) is the potential at the seed. Because every step is corrected towards \\( V_0 \\) the potential does not drift, even
for very long lines. When the correction is larger than the step itself the local curvature is too high for the linear
correction to be trusted, and a fourth order Runge-Kutta step along the equipotential direction is taken instead.

The step length adapts to the curvature of the line: it shrinks in tight turns and grows on straight stretches, always
staying within `Settings.min_step` and `Settings.max_step`. The line is closed when the two heads meet. The tracing stops
when the line is closed, when `Settings.max_steps` steps have been taken, or when both heads have left the tracing bounds
(after at least `Settings.min_steps` steps).
"""
from __future__ import annotations

import threading
from math import hypot, acos, pi, isfinite

import numpy as np

from . import logging
from . import util
from .field import FieldEvaluator
from .settings import Settings
from .simplify import simplify
from .typing import *

# Step length is left unchanged when consecutive segments turn by this angle, a perfect
# circle would then be traced using 360 points.
_REFERENCE_DEFLECTION = 2*pi/360


class ContourLine:
    """An equipotential line as returned by `ContourTracer.trace`. A contour line is immutable, once the charge
    configuration changes the line should be discarded and traced again.

    Attributes
    ----------
    seed: (2,) np.ndarray of float64
        The point the line was requested for.
    potential: float
        Potential of the line, i.e. the potential at the seed at the moment of tracing.
    positions: (N, 2) np.ndarray of float64
        Ordered (read-only) points of the line. The clockwise points come first (in reversed order), followed by the
        starting point and the counter-clockwise points.
    closed: bool
        Whether the line forms a closed loop.
    charge_set_version: int
        `ChargeSet.version` at the moment of tracing.
    """

    def __init__(self, seed: PointLike2D, potential: float, positions: PointsLike2D, closed: bool,
                 charge_set_version: int | None = None, tolerance: float | None = None) -> None:
        self.seed = np.array(seed, dtype=np.float64)
        self.positions = np.array(positions, dtype=np.float64).reshape(-1, 2)
        assert self.seed.shape == (2,), "Seed should be a two dimensional point"

        self.seed.flags.writeable = False
        self.positions.flags.writeable = False

        self.potential = float(potential)
        self.closed = bool(closed)
        self.charge_set_version = charge_set_version
        self.tolerance = tolerance
        self._simplified: Points2D | None = None

    @property
    def simplified_positions(self) -> Points2D:
        """The positions reduced by `chargefield.simplify.simplify`, computed once and cached."""
        if self._simplified is None:
            kwargs = {} if self.tolerance is None else dict(tolerance=self.tolerance)
            simplified = simplify(self.positions, closed=self.closed, **kwargs)
            simplified.flags.writeable = False
            self._simplified = simplified

        return self._simplified

    def vertices(self) -> Points2D:
        """Vertices of the drawable polyline: the simplified positions, with the first point repeated
        at the end if the line is closed."""
        s = self.simplified_positions

        if self.closed and len(s) > 1:
            return np.concatenate([s, s[:1]])

        return s.copy()

    def is_stale(self, charge_set) -> bool:
        """Whether the charge set has been mutated since this line was traced."""
        return self.charge_set_version != charge_set.version

    def __len__(self) -> int:
        return len(self.positions)

    def __str__(self) -> str:
        kind = 'closed' if self.closed else 'open'
        return f'<chargefield ContourLine, {kind}, V={self.potential:.4g} V,\n\t' \
            f'{len(self.positions)} points ({len(self.simplified_positions)} after simplification)>'


class TraceJob:
    """Handle to a trace running on a background thread, see `ContourTracer.trace_in_background`."""

    def __init__(self, tracer: ContourTracer, seed: PointLike2D) -> None:
        self._cancel = threading.Event()
        self._result: ContourLine | None = None
        self._thread = threading.Thread(target=self._run, args=(tracer, seed), daemon=True)
        self._thread.start()

    def _run(self, tracer: ContourTracer, seed: PointLike2D) -> None:
        self._result = tracer.trace(seed, cancel=self._cancel)

    def cancel(self) -> None:
        """Request cancellation. The trace stops before its next step and the result will be `None`."""
        self._cancel.set()

    def cancelled(self) -> bool:
        return self._cancel.is_set()

    def done(self) -> bool:
        return not self._thread.is_alive()

    def result(self, timeout: float | None = None) -> ContourLine | None:
        """Wait for the trace to finish and return the traced line (or `None`)."""
        self._thread.join(timeout)

        if self._thread.is_alive():
            raise TimeoutError('Trace did not finish in time')

        return self._result


class ContourTracer:
    """Traces equipotential lines through the field of a `chargefield.field.FieldEvaluator`.

    Parameters
    ----------
    field: `chargefield.field.FieldEvaluator`
        The field whose equipotentials are traced.
    settings: `chargefield.settings.Settings`
        Step lengths, step counts, bounds and tolerances. Defaults to the settings of the field evaluator.
    """

    def __init__(self, field: FieldEvaluator, settings: Settings | None = None) -> None:
        self.field = field
        self.settings = settings if settings is not None else field.settings

    def __str__(self) -> str:
        s = self.settings
        bounds_str = ' '.join([f'({bmin:.2f}, {bmax:.2f})' for bmin, bmax in s.tracing_bounds])
        return f'<chargefield ContourTracer,\n\t' \
            f'Step length: ({s.min_step}, {s.max_step}) m\n\t' \
            f'Bounds: {bounds_str} m>'

    def __call__(self, *args, **kwargs):
        return self.trace(*args, **kwargs)

    def _direction(self, x: float, y: float) -> Tuple[float, float]:
        # Unit vector along the equipotential, i.e. the field rotated by +90 degrees.
        Ex, Ey = self.field.field_at_point((x, y))
        norm = hypot(Ex, Ey)

        if norm == 0.:
            return 0., 0.

        return -Ey/norm, Ex/norm

    def step_runge_kutta(self, position: PointLike2D, delta: float) -> Tuple[float, float]:
        """Move a distance `delta` along the equipotential using a fourth order Runge-Kutta step.
        A positive `delta` moves clockwise, a negative `delta` counter-clockwise. The result
        is always within a distance `|delta|` of `position`, but may drift off the equipotential."""
        x, y = float(position[0]), float(position[1])

        k1x, k1y = self._direction(x, y)
        k2x, k2y = self._direction(x + k1x*delta/2, y + k1y*delta/2)
        k3x, k3y = self._direction(x + k2x*delta/2, y + k2y*delta/2)
        k4x, k4y = self._direction(x + k3x*delta, y + k3y*delta)

        return (x + delta*(k1x + 2*k2x + 2*k3x + k4x)/6,
                y + delta*(k1y + 2*k2y + 2*k3y + k4y)/6)

    def step_predictor_corrector(self, position: PointLike2D, potential: float, delta: float) -> Tuple[float, float]:
        """Move a distance (approximately) `delta` along the equipotential with the given `potential`.
        See the module documentation for the algorithm. Falls back to `ContourTracer.step_runge_kutta`
        when the correction is larger than `|delta|`."""
        x, y = float(position[0]), float(position[1])
        dx, dy = self._direction(x, y)

        if dx == 0. and dy == 0.:
            # No field, so no equipotential direction to follow.
            return x, y

        mx, my = x + dx*delta, y + dy*delta
        Ex, Ey = self.field.field_at_point((mx, my))
        E_squared = Ex*Ex + Ey*Ey
        deviation = self.field.potential_at_point((mx, my)) - potential

        if E_squared == 0. or not isfinite(deviation):
            return self.step_runge_kutta((x, y), delta)

        cx, cy = Ex*deviation/E_squared, Ey*deviation/E_squared

        if hypot(cx, cy) > abs(delta):
            return self.step_runge_kutta((x, y), delta)

        return mx + cx, my + cy

    @staticmethod
    def _deflection_angle(points: List[Tuple[float, float]]) -> float:
        # Angle (non-negative) between the last two segments
        (x0, y0), (x1, y1), (x2, y2) = points[-3:]
        ax, ay = x2 - x1, y2 - y1
        bx, by = x1 - x0, y1 - y0
        norm = hypot(ax, ay) * hypot(bx, by)

        if norm == 0.:
            return 0.

        return acos(min(1., max(-1., (ax*bx + ay*by)/norm)))

    def _adapt_step(self, step: float, points: List[Tuple[float, float]]) -> float:
        angle = self._deflection_angle(points)
        s = self.settings

        if angle == 0.:
            step = s.max_step
        else:
            step *= _REFERENCE_DEFLECTION / angle

        return min(max(step, s.min_step), s.max_step)

    def _march(self, start: Tuple[float, float], potential: float, version: int, cancel: CancelToken | None):
        s = self.settings
        within = s.within_tracing_bounds

        clockwise: List[Tuple[float, float]] = []
        counter_clockwise: List[Tuple[float, float]] = []
        cw, ccw = start, start
        cw_step, ccw_step = s.min_step, s.min_step

        steps = 0
        closed = False
        inside = True

        while steps < s.max_steps and not closed and (inside or steps < s.min_steps):
            if cancel is not None and cancel.is_set():
                logging.log_debug(f'Trace cancelled after {steps} steps')
                return None

            if self.field.charge_set.version != version:
                logging.log_debug(f'Charge configuration changed during trace, abandoning after {steps} steps')
                return None

            cw = self.step_predictor_corrector(cw, potential, cw_step)
            ccw = self.step_predictor_corrector(ccw, potential, -ccw_step)
            clockwise.append(cw)
            counter_clockwise.append(ccw)
            steps += 1

            if steps > s.adaptive_start:
                cw_step = self._adapt_step(cw_step, clockwise)
                ccw_step = self._adapt_step(ccw_step, counter_clockwise)

                approach = hypot(cw[0] - ccw[0], cw[1] - ccw[1])

                if approach < cw_step + ccw_step:
                    # The heads are about to meet, slow down so they do not pass each other.
                    cw_step = ccw_step = approach/3

                    if approach < 2*s.min_step:
                        closed = True

            inside = within(cw) or within(ccw)

        return clockwise, counter_clockwise, closed, inside, steps

    def can_trace(self, seed: PointLike2D) -> bool:
        """Whether an equipotential line can be traced through `seed`. This is not the case when the
        charge set produces no field, or when the seed is within `Settings.close_approach_radius` of a charge."""
        charge_set = self.field.charge_set
        positions, _ = charge_set.snapshot()

        if len(positions) == 0 or not charge_set.is_charged():
            return False

        distances = np.linalg.norm(positions - np.asarray(seed, dtype=np.float64), axis=1)
        return bool(np.all(distances >= self.settings.close_approach_radius))

    def trace(self, seed: PointLike2D, cancel: CancelToken | None = None) -> ContourLine | None:
        """Trace the equipotential line through `seed`.

        Parameters
        ----------
        seed: (2,) array of float
            Point on the requested equipotential line.
        cancel: object with an `is_set()` method, for example `threading.Event`
            Checked before every step, once set the trace is abandoned.

        Returns
        -------
        `ContourLine`, or `None` when no line can be traced through the seed (see `ContourTracer.can_trace`),
        when the trace was cancelled or when the charge configuration changed while tracing.
        """
        seed = np.array(seed, dtype=np.float64)
        assert seed.shape == (2,), "Please provide a two dimensional seed"

        if not self.can_trace(seed):
            logging.log_debug(f'Refusing to trace equipotential through ({seed[0]:.4f}, {seed[1]:.4f})')
            return None

        potential = self.field.potential_at_point(seed)
        Ex, Ey = self.field.field_at_point(seed)

        if not isfinite(potential) or (Ex == 0. and Ey == 0.):
            logging.log_debug(f'No equipotential direction defined at ({seed[0]:.4f}, {seed[1]:.4f})')
            return None

        version = self.field.charge_set.version
        start = (float(seed[0]), float(seed[1]))

        # At most one retry, from a slightly offset seed. The potential of the original seed is kept.
        for attempt in range(2):
            result = self._march(start, potential, version, cancel)

            if result is None:
                return None

            clockwise, counter_clockwise, closed, inside, steps = result

            if closed or not inside:
                break

            logging.log_debug(f'Equipotential through ({start[0]:.4f}, {start[1]:.4f}) ended inside bounds '
                              f'without closing after {steps} steps' + ('' if attempt else ', retrying'))

            if attempt == 0:
                start = (start[0] + self.settings.retry_offset[0], start[1] + self.settings.retry_offset[1])

        logging.log_debug(f'Traced {"closed" if closed else "open"} equipotential V={potential:.4g} in {steps} steps')

        positions = clockwise[::-1] + [start] + counter_clockwise
        return ContourLine(seed, potential, positions, closed,
                           charge_set_version=version, tolerance=self.settings.simplification_tolerance)

    def trace_multiple(self, seeds: PointsLike2D, cancel: CancelToken | None = None) -> List[ContourLine | None]:
        """Trace the equipotential lines through multiple seeds. The seeds are divided over
        multiple threads, see `chargefield.util.get_number_of_threads`.

        Returns
        -------
        list with for every seed the result of `ContourTracer.trace`
        """
        seeds = np.array(seeds, dtype=np.float64).reshape(-1, 2)

        if len(seeds) == 0:
            return []

        with logging.log_duration(f'Tracing {len(seeds)} equipotential lines', log=logging.log_info):
            results = util.split_collect(lambda chunk: [self.trace(s, cancel=cancel) for s in chunk], seeds)

        return [line for chunk in results for line in chunk]

    def trace_in_background(self, seed: PointLike2D) -> TraceJob:
        """Start tracing on a background thread. The returned `TraceJob` can be used to
        cancel the trace or wait for its result."""
        return TraceJob(self, seed)


def trace_contour(field: FieldEvaluator, seed: PointLike2D, settings: Settings | None = None) -> ContourLine | None:
    """Trace the equipotential line through `seed`, see `ContourTracer.trace`."""
    return ContourTracer(field, settings).trace(seed)
