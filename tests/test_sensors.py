import unittest

import numpy as np

import chargefield.logging as logging
from chargefield.charges import ChargeSet
from chargefield.field import FieldEvaluator
from chargefield.sensors import FieldSensor, PotentialSensor, SensorGrid, grid_positions
from chargefield.settings import NOMINAL_BOUNDS, ENLARGED_BOUNDS

logging.set_log_level(logging.LogLevel.SILENT)


class TestSensors(unittest.TestCase):
    def setUp(self):
        self.charges = ChargeSet()
        self.charge = self.charges.add_positive_charge([0., 0.])
        self.field = FieldEvaluator(self.charges)

    def test_field_sensor(self):
        sensor = FieldSensor(self.field, [0., 3.])
        assert np.allclose(sensor.value, [0., 1.])
        assert np.isclose(sensor.magnitude, 1.) and np.isclose(sensor.angle, np.pi/2)

        sensor.move([-1., 0.])
        assert np.allclose(sensor.value, [-9., 0.])
        assert np.isclose(sensor.angle, np.pi)

    def test_field_sensor_update(self):
        sensor = FieldSensor(self.field, [1., 0.])
        self.charges.move_charge(self.charge, [2., 0.])
        assert np.allclose(sensor.value, [9., 0.]) # Not updated yet
        assert np.allclose(sensor.update(), [-9., 0.])

    def test_field_sensor_on_charge_is_finite(self):
        sensor = FieldSensor(self.field, [0., 0.])
        assert np.all(np.isfinite(sensor.value))

    def test_potential_sensor(self):
        sensor = PotentialSensor(self.field, [0., 0.])
        assert sensor.value == np.inf

        assert np.isclose(sensor.move([0., 2.]), 4.5)

        sensor.reset()
        assert np.array_equal(sensor.position, [0., 0.]) and sensor.value == np.inf

    def test_potential_sensor_no_charges(self):
        sensor = PotentialSensor(FieldEvaluator(ChargeSet()), [1., 1.])
        assert sensor.value == 0.


class TestSensorGrid(unittest.TestCase):
    def test_layout(self):
        positions = grid_positions(NOMINAL_BOUNDS, ENLARGED_BOUNDS, spacing=0.5)
        x, y = positions.T
        (xmin, xmax), (ymin, ymax) = NOMINAL_BOUNDS
        (exmin, exmax), (eymin, eymax) = ENLARGED_BOUNDS

        assert np.any(np.all(positions == [0., 0.], axis=1))
        assert np.any(np.all(positions == [0., 7.], axis=1))
        assert np.any(np.all(positions == [5.5, 0.], axis=1))

        # Strictly inside the enlarged bounds
        assert np.all((exmin < x) & (x < exmax) & (eymin < y) & (y < eymax))

        # Nothing in the corner regions
        vertical = (xmin <= x) & (x <= xmax)
        horizontal = (ymin <= y) & (y <= ymax)
        assert np.all(vertical | horizontal)
        assert not np.any(np.all(positions == [5., 5.], axis=1))

    def test_shifted_layout(self):
        positions = grid_positions(NOMINAL_BOUNDS, ENLARGED_BOUNDS, spacing=0.5, on_origin=False)
        assert not np.any(np.all(positions == [0., 0.], axis=1))
        assert np.any(np.all(positions == [0.25, 0.25], axis=1))

    def test_invalid_spacing(self):
        with self.assertRaises(ValueError):
            grid_positions(NOMINAL_BOUNDS, ENLARGED_BOUNDS, spacing=0.)

    def test_update(self):
        charges = ChargeSet()
        charges.add_positive_charge([0.1, 0.2])
        charges.add_negative_charge([-1., 0.5])
        field = FieldEvaluator(charges)

        grid = SensorGrid(field, NOMINAL_BOUNDS, ENLARGED_BOUNDS, spacing=1.)
        assert len(grid) > 0
        assert np.all(grid.field_magnitudes() == 0.)

        grid.update()
        assert np.allclose(grid.fields, [field.field_at_point(p) for p in grid.positions])
        assert np.allclose(grid.potentials, [field.potential_at_point(p) for p in grid.positions])
        assert np.all(grid.field_magnitudes() > 0.)
