"""The model module ties the charges, the field evaluation, the sensors and the equipotential lines together.

`ElectrostaticModel` owns a `chargefield.charges.ChargeSet` and listens to its changes. Whenever the charge
configuration changes all equipotential lines held by the model are discarded (they are never patched) and all
sensors are updated. Lines for the new configuration have to be requested again with
`ElectrostaticModel.add_equipotential_line`.

```python
import chargefield as cf

model = cf.ElectrostaticModel()
model.add_positive_charge([-0.5, 0.])
model.add_negative_charge([0.5, 0.])

line = model.add_equipotential_line([0., 0.3])
print(line.closed, len(line.vertices()))
```
"""
from __future__ import annotations

import numpy as np

from . import logging
from .charges import Charge, ChargeSet
from .contour import ContourLine, ContourTracer
from .field import FieldEvaluator
from .sensors import FieldSensor, PotentialSensor, SensorGrid
from .settings import Settings, NOMINAL_BOUNDS, DEFAULT_SETTINGS
from .typing import *


class ElectrostaticModel:
    """Charges, sensors and equipotential lines of a single scene.

    Parameters
    ----------
    settings: `chargefield.settings.Settings`
        Settings used for the field evaluation and the tracing of equipotential lines.
    bounds: (2, 2) array of float
        Nominal bounds of the scene, used to place random equipotential lines and the sensor grid.
    """

    def __init__(self, settings: Settings | None = None, bounds: BoundsLike2D = NOMINAL_BOUNDS) -> None:
        self.settings = settings if settings is not None else DEFAULT_SETTINGS
        self.bounds = np.array(bounds, dtype=np.float64)
        assert self.bounds.shape == (2, 2), "Bounds should be of the form ((xmin, xmax), (ymin, ymax))"

        self.charge_set = ChargeSet()
        self.field = FieldEvaluator(self.charge_set, self.settings)
        self.tracer = ContourTracer(self.field, self.settings)

        self.potential_sensor = PotentialSensor(self.field)
        self.field_sensors: List[FieldSensor] = []
        self.sensor_grid: SensorGrid | None = None

        self._lines: List[ContourLine] = []
        self.charge_set.add_listener(self._on_charges_changed)

    def __str__(self) -> str:
        return f'<chargefield ElectrostaticModel, {self.charge_set},\n\t' \
            f'{len(self._lines)} equipotential lines, {len(self.field_sensors)} field sensors>'

    def _on_charges_changed(self, charge_set: ChargeSet) -> None:
        if self._lines:
            logging.log_debug(f'Discarding {len(self._lines)} equipotential lines after charge configuration change')
        self._lines.clear()
        self.update_sensors()

    @property
    def is_charged(self) -> bool:
        """Whether the charges produce a field anywhere, see `ChargeSet.is_charged`."""
        return self.charge_set.is_charged()

    @property
    def equipotential_lines(self) -> Tuple[ContourLine, ...]:
        return tuple(self._lines)

    def add_positive_charge(self, position: PointLike2D) -> Charge:
        return self.charge_set.add_positive_charge(position)

    def add_negative_charge(self, position: PointLike2D) -> Charge:
        return self.charge_set.add_negative_charge(position)

    def remove_charge(self, charge: Charge | int) -> Charge:
        return self.charge_set.remove_charge(charge)

    def move_charge(self, charge: Charge | int, position: PointLike2D) -> None:
        self.charge_set.move_charge(charge, position)

    def set_charge_active(self, charge: Charge | int, active: bool) -> None:
        self.charge_set.set_active(charge, active)

    def add_field_sensor(self, position: PointLike2D) -> FieldSensor:
        sensor = FieldSensor(self.field, position)
        self.field_sensors.append(sensor)
        return sensor

    def remove_field_sensor(self, sensor: FieldSensor) -> None:
        self.field_sensors.remove(sensor)

    def enable_sensor_grid(self, spacing: float = 0.5, on_origin: bool = True) -> SensorGrid:
        """Create (or replace) the sensor grid covering the nominal bounds and the tracing bounds."""
        self.sensor_grid = SensorGrid(self.field, self.bounds, self.settings.tracing_bounds, spacing=spacing, on_origin=on_origin)
        self.sensor_grid.update()
        return self.sensor_grid

    def update_sensors(self) -> None:
        self.potential_sensor.update()

        for sensor in self.field_sensors:
            sensor.update()

        if self.sensor_grid is not None:
            self.sensor_grid.update()

    def add_equipotential_line(self, seed: PointLike2D | None = None) -> ContourLine | None:
        """Trace the equipotential line through `seed` and keep it until the next change of the charges.

        Parameters
        ----------
        seed: (2,) array of float
            Point on the line. Defaults to the position of the potential sensor.

        Returns
        -------
        The traced `ContourLine`, or `None` if no line could be traced through the seed.
        """
        seed = self.potential_sensor.position if seed is None else seed
        line = self.tracer.trace(seed)

        if line is not None:
            self._lines.append(line)

        return line

    def add_many_equipotential_lines(self, number: int, rng: np.random.Generator | None = None) -> List[ContourLine]:
        """Trace equipotential lines through `number` random points within the nominal bounds. Seeds through
        which no line can be traced are skipped.

        Returns
        -------
        list of the lines that were added
        """
        rng = rng if rng is not None else np.random.default_rng()
        (xmin, xmax), (ymin, ymax) = self.bounds
        seeds = np.column_stack((rng.uniform(xmin, xmax, number), rng.uniform(ymin, ymax, number)))

        seeds = [s for s in seeds if self.tracer.can_trace(s)]
        lines = [l for l in self.tracer.trace_multiple(seeds) if l is not None]

        self._lines.extend(lines)
        return lines

    def clear_equipotential_lines(self) -> None:
        self._lines.clear()

    def reset(self) -> None:
        """Remove all charges, sensors and lines and move the potential sensor back to its initial position."""
        self.charge_set.clear()
        self._lines.clear()
        self.field_sensors.clear()
        self.sensor_grid = None
        self.potential_sensor.reset()
