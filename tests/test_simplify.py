import unittest

import numpy as np

from chargefield.simplify import simplify, distance_from_line


class TestDistanceFromLine(unittest.TestCase):
    def test_perpendicular_distance(self):
        assert np.isclose(distance_from_line([0., 0.], [0.5, 2.], [1., 0.]), 2.)
        assert np.isclose(distance_from_line([0., 0.], [0., 1.], [1., 1.]), np.sqrt(2)/2)

    def test_beyond_endpoints(self):
        # Distance is to the infinite line, not the segment
        assert np.isclose(distance_from_line([0., 0.], [5., 0.], [1., 0.]), 0.)

    def test_degenerate_line(self):
        assert np.isclose(distance_from_line([1., 1.], [4., 5.], [1., 1.]), 5.)

    def test_many_points(self):
        points = [[0.5, 2.], [3., -1.], [0., 0.]]
        d = distance_from_line([0., 0.], points, [1., 0.])
        assert d.shape == (3,)
        assert np.allclose(d, [2., 1., 0.])
        assert np.allclose(distance_from_line([1., 1.], points, [1., 1.]), [np.hypot(0.5, 1.), np.hypot(2., 2.), np.sqrt(2)])


class TestSimplify(unittest.TestCase):
    def test_collinear(self):
        positions = np.column_stack((np.linspace(0, 1, 20), np.linspace(0, 2, 20)))
        s = simplify(positions)
        assert np.array_equal(s, positions[[0, -1]])

    def test_three_collinear(self):
        s = simplify([[0., 0.], [1., 1.], [2., 2.]])
        assert np.array_equal(s, [[0., 0.], [2., 2.]])

    def test_corner_kept(self):
        s = simplify([[0., 0.], [1., 0.], [2., 0.], [2., 1.], [2., 2.]])
        assert np.array_equal(s, [[0., 0.], [2., 0.], [2., 2.]])

    def test_short_lines_unchanged(self):
        assert len(simplify(np.zeros((0, 2)))) == 0
        assert np.array_equal(simplify([[1., 2.]]), [[1., 2.]])
        assert np.array_equal(simplify([[1., 2.], [3., 4.]]), [[1., 2.], [3., 4.]])

    def test_input_not_modified(self):
        positions = np.array([[0., 0.], [1., 1.], [2., 2.]])
        simplify(positions)
        assert np.array_equal(positions, [[0., 0.], [1., 1.], [2., 2.]])

    def test_zero_tolerance(self):
        angles = np.linspace(0, np.pi, 30)
        positions = np.column_stack((np.cos(angles), np.sin(angles)))
        assert len(simplify(positions, tolerance=0.)) == 30

    def test_within_tolerance(self):
        angles = np.linspace(0, 2*np.pi, 500, endpoint=False)
        positions = 0.5*np.column_stack((np.cos(angles), np.sin(angles)))
        tolerance = 1e-3

        s = simplify(positions, closed=True, tolerance=tolerance)
        assert 10 < len(s) < 100
        assert np.array_equal(s[0], positions[0]) and np.array_equal(s[-1], positions[-1])

        loop = np.concatenate([s, s[:1]])

        for p in positions:
            a, b = loop[:-1], loop[1:]
            ab = b - a
            t = np.clip(np.sum((p - a)*ab, axis=1) / np.sum(ab*ab, axis=1), 0., 1.)
            d = np.min(np.linalg.norm(a + t[:, np.newaxis]*ab - p, axis=1))
            assert d <= tolerance + 1e-12

    def test_closed_keeps_three_points(self):
        positions = [[0., 0.], [1., 0.], [2., 0.], [1., 0.0002]]

        assert len(simplify(positions, closed=False)) == 2

        s = simplify(positions, closed=True)
        assert np.array_equal(s, [[0., 0.], [2., 0.], [1., 0.0002]])
