import unittest

import numpy as np

from chargefield.settings import Settings, DEFAULT_SETTINGS, ENLARGED_BOUNDS, NOMINAL_BOUNDS


class TestSettings(unittest.TestCase):
    def test_defaults(self):
        s = Settings()
        assert s.coulomb_constant == 9.
        assert s.min_distance_squared == 1e-9
        assert s.clamp_field_magnitude == 1e7
        assert (s.min_step, s.max_step) == (0.01, 0.05)
        assert (s.min_steps, s.max_steps) == (1000, 5000)
        assert s.close_approach_radius == 0.03
        assert s.simplification_tolerance == 0.001
        assert np.array_equal(s.tracing_bounds, ENLARGED_BOUNDS)
        assert s == DEFAULT_SETTINGS

    def test_bounds(self):
        assert np.allclose(NOMINAL_BOUNDS, [[-4., 4.], [-2.5, 2.5]])
        assert np.allclose(ENLARGED_BOUNDS, [[-6., 6.], [-2.5, 7.5]])

    def test_invalid(self):
        with self.assertRaises(ValueError):
            Settings(step=0.1)
        with self.assertRaises(ValueError):
            Settings(min_step=0.1, max_step=0.05)
        with self.assertRaises(ValueError):
            Settings(min_steps=10, max_steps=5)
        with self.assertRaises(ValueError):
            Settings(adaptive_start=1)
        with self.assertRaises(ValueError):
            Settings(tracing_bounds=((1., -1.), (0., 1.)))
        with self.assertRaises(ValueError):
            Settings(coulomb_constant=0.)

    def test_replace(self):
        s = Settings().replace(max_step=0.1)
        assert s.max_step == 0.1 and s.min_step == 0.01
        assert DEFAULT_SETTINGS.max_step == 0.05
        assert s != DEFAULT_SETTINGS

    def test_from_environment(self):
        environ = {
            'CHARGEFIELD_MAX_STEP': '0.1',
            'CHARGEFIELD_MAX_STEPS': '200',
            'CHARGEFIELD_MIN_STEPS': '100',
            'CHARGEFIELD_TRACING_BOUNDS': '-1,1,-2,2',
            'CHARGEFIELD_RETRY_OFFSET': '0.001,0.002',
            'UNRELATED': 'x'}

        s = Settings.from_environment(environ, min_steps=50)

        assert s.max_step == 0.1
        assert s.max_steps == 200 and s.min_steps == 50
        assert np.array_equal(s.tracing_bounds, [[-1., 1.], [-2., 2.]])
        assert np.array_equal(s.retry_offset, [0.001, 0.002])

    def test_within_tracing_bounds(self):
        s = Settings()
        assert s.within_tracing_bounds([0., 0.])
        assert s.within_tracing_bounds([-6., 7.5])
        assert s.within_tracing_bounds([5., 7.])
        assert not s.within_tracing_bounds([0., -3.])
        assert not s.within_tracing_bounds([6.1, 0.])

    def test_si(self):
        assert np.isclose(Settings.si().coulomb_constant, 8.9875517, rtol=1e-6)
        assert Settings.si(max_step=0.1).max_step == 0.1
