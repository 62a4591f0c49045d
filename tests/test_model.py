import unittest

import numpy as np

import chargefield.logging as logging
from chargefield.model import ElectrostaticModel
from chargefield.settings import Settings

logging.set_log_level(logging.LogLevel.SILENT)


class TestModel(unittest.TestCase):
    def setUp(self):
        self.model = ElectrostaticModel()
        self.positive = self.model.add_positive_charge([-0.5, 0.])
        self.negative = self.model.add_negative_charge([0.5, 0.])

    def test_is_charged(self):
        assert self.model.is_charged
        self.model.move_charge(self.negative, [-0.5, 0.])
        assert not self.model.is_charged

    def test_line_at_potential_sensor(self):
        line = self.model.add_equipotential_line()
        assert line is not None and line.potential == 0.
        assert np.array_equal(line.seed, self.model.potential_sensor.position)
        assert self.model.equipotential_lines == (line,)

        self.model.clear_equipotential_lines()
        assert self.model.equipotential_lines == ()

    def test_lines_discarded_on_change(self):
        self.model.add_equipotential_line([-0.3, 0.])
        self.model.add_equipotential_line([0.3, 0.])
        assert len(self.model.equipotential_lines) == 2

        self.model.move_charge(self.positive, [-0.6, 0.])
        assert self.model.equipotential_lines == ()

        self.model.add_equipotential_line([-0.3, 0.])
        self.model.set_charge_active(self.negative, False)
        assert self.model.equipotential_lines == ()

        self.model.add_equipotential_line([-0.3, 0.])
        self.model.remove_charge(self.negative)
        assert self.model.equipotential_lines == ()

    def test_refused_line_not_added(self):
        assert self.model.add_equipotential_line([-0.5, 0.01]) is None
        assert self.model.equipotential_lines == ()

    def test_sensors_follow_charges(self):
        sensor = self.model.add_field_sensor([0., 1.])
        before = sensor.value.copy()

        self.model.move_charge(self.negative, [1.5, 0.])
        assert not np.allclose(before, sensor.value)
        assert np.allclose(sensor.value, self.model.field.field_at_point([0., 1.]))

        assert self.model.potential_sensor.value == self.model.field.potential_at_point([0., 0.])

        self.model.remove_field_sensor(sensor)
        assert self.model.field_sensors == []

    def test_sensor_grid(self):
        grid = self.model.enable_sensor_grid(spacing=1.)
        assert np.all(grid.field_magnitudes() > 0.)

        self.model.set_charge_active(self.positive, False)
        self.model.set_charge_active(self.negative, False)
        assert np.all(grid.field_magnitudes() == 0.)

    def test_add_many(self):
        lines = self.model.add_many_equipotential_lines(4, rng=np.random.default_rng(3))

        assert 0 < len(lines) <= 4
        assert self.model.equipotential_lines == tuple(lines)

        for l in lines:
            (xmin, xmax), (ymin, ymax) = self.model.bounds
            assert xmin <= l.seed[0] <= xmax and ymin <= l.seed[1] <= ymax

    def test_add_many_uncharged(self):
        self.model.move_charge(self.negative, [-0.5, 0.])
        assert self.model.add_many_equipotential_lines(3) == []

    def test_reset(self):
        self.model.add_field_sensor([1., 1.])
        self.model.enable_sensor_grid()
        self.model.add_equipotential_line([-0.3, 0.])
        self.model.potential_sensor.move([1., 1.])

        self.model.reset()

        assert len(self.model.charge_set) == 0
        assert self.model.equipotential_lines == ()
        assert self.model.field_sensors == [] and self.model.sensor_grid is None
        assert np.array_equal(self.model.potential_sensor.position, [0., 0.])
        assert self.model.potential_sensor.value == 0.

    def test_custom_settings(self):
        model = ElectrostaticModel(Settings(close_approach_radius=0.5))
        model.add_positive_charge([0., 0.])
        assert model.add_equipotential_line([0.3, 0.]) is None
        assert model.add_equipotential_line([0.6, 0.]).closed
