#!/usr/bin/env python3

import unittest
import sys
import math

from testutils import DpkTestCase
from ..config import Settings
from ..errors import InvalidArgumentError, DomainViolation
from ..exprs.parser import parse
from .modes import analysis_mode, Evaluate, Simplify, Classify, CriticalPoints
from .modes import primary_variable
from .rootfind import find_critical_points, classify_critical_point


class TestDispatch(DpkTestCase):
    def test_modes(self):
        self.assertIsInstance(analysis_mode(0), Evaluate)
        self.assertIsInstance(analysis_mode(1), Simplify)
        self.assertIsInstance(analysis_mode(2), Classify)
        self.assertIsInstance(analysis_mode(3), CriticalPoints)

    def test_invalid(self):
        for mode in [4, -1, '1', True, 1.0, None]:
            with self.subTest(mode=mode):
                with self.assertRaises(InvalidArgumentError):
                    analysis_mode(mode)

    def test_primary_variable(self):
        self.assertEqual(primary_variable(parse("y + x")), 'x')
        self.assertEqual(primary_variable(parse("t*s")), 's')
        self.assertEqual(primary_variable(parse("2")), 'x')


class TestEvaluate(DpkTestCase):
    def test_default_point(self):
        result = Evaluate().run(parse("x^2 + y"), 3)
        self.assertEqual(result['value'], 2.0)
        self.assertEqual(result['evaluations'], 3)
        self.assertEqual(result['environment'], dict(x=1.0, y=1.0))
        result = Evaluate().run(parse("x^2"), 1, Settings(default_point=3.0))
        self.assertEqual(result['value'], 9.0)

    def test_errors(self):
        with self.assertRaises(InvalidArgumentError):
            Evaluate().run(parse("x"), 0)
        with self.assertRaises(DomainViolation):
            Evaluate().run(parse("ln(x-1)"), 1)


class TestSimplify(DpkTestCase):
    def test_simplify(self):
        result = Simplify().run(parse("1*x^2 + 0 + x*2 + 1"), 0)
        self.assertEqual(result['simplified'], "x^2+2*x+1")
        self.assertEqual(result['nodes_before'], 13)
        self.assertEqual(result['nodes_after'], 9)


class TestClassify(DpkTestCase):
    def test_sqrt(self):
        result = Classify().run(parse("sqrt(x)"), 21)
        self.assertFalse(result['defined_everywhere'])
        self.assertEqual(result['undefined_intervals'], [[-10.0, -1.0]])
        self.assertEqual(result['defined_intervals'], [[0.0, 10.0]])
        self.assertEqual(result['discontinuities'], [])

    def test_log(self):
        result = Classify().run(parse("ln(x)"), 21)
        self.assertEqual(result['undefined_intervals'], [[-10.0, 0.0]])
        self.assertEqual(result['defined_intervals'], [[1.0, 10.0]])

    def test_pole(self):
        result = Classify().run(parse("1/x"), 20)
        self.assertTrue(result['defined_everywhere'])
        self.assertEqual(len(result['discontinuities']), 1)
        a, b = result['discontinuities'][0]
        self.assertTrue(a < 0 < b)

    def test_range_setting(self):
        result = Classify().run(parse("ln(x)"), 3, Settings(default_range=(1, 3)))
        self.assertTrue(result['defined_everywhere'])
        self.assertEqual(result['defined_intervals'], [[1.0, 3.0]])

    def test_invalid_sample_count(self):
        with self.assertRaises(InvalidArgumentError):
            Classify().run(parse("x"), 1)


class TestCriticalPoints(DpkTestCase):
    def test_cubic(self):
        result = CriticalPoints().run(parse("x^3-3*x"), 50)
        self.assertEqual(result['derivative'], "3*x^2-3")
        points = result['critical_points']
        self.assertEqual(len(points), 2)
        self.assertAlmostEqual(points[0]['x'], -1.0, places=8)
        self.assertAlmostEqual(points[1]['x'], 1.0, places=8)
        self.assertEqual(points[0]['kind'], 'maximum')
        self.assertEqual(points[1]['kind'], 'minimum')
        self.assertAlmostEqual(points[0]['value'], 2.0)
        self.assertAlmostEqual(points[1]['value'], -2.0)

    def test_parabola(self):
        points = CriticalPoints().run(parse("(x-2)^2"), 50)['critical_points']
        self.assertEqual(len(points), 1)
        self.assertAlmostEqual(points[0]['x'], 2.0, places=8)
        self.assertEqual(points[0]['kind'], 'minimum')

    def test_periodic(self):
        points = CriticalPoints().run(parse("sin(x)"), 50)['critical_points']
        expected = [math.pi/2 + k*math.pi for k in range(-3, 3)]
        self.assertListAlmostEqual([p['x'] for p in points], expected, places=7)
        kinds = [p['kind'] for p in points]
        self.assertEqual(kinds, ['minimum', 'maximum'] * 3)

    def test_constant_derivative(self):
        for text in ["3", "2*x+1"]:
            with self.subTest(text=text):
                result = CriticalPoints().run(parse(text), 10)
                self.assertEqual(result['critical_points'], [])
                self.assertTrue(result['constant_derivative'])

    def test_no_critical_points(self):
        result = CriticalPoints().run(parse("abs(x)"), 50)
        self.assertEqual(result['critical_points'], [])
        self.assertEqual(result['not_found'], 24)

    def test_iteration_cap(self):
        with self.assertRaises(InvalidArgumentError):
            CriticalPoints().run(parse("x^2"), 0)
        # a single Newton step cannot converge from the seed midpoints
        result = CriticalPoints().run(parse("x^4-x^2"), 1)
        self.assertEqual(result['not_found'], 24)


class TestRootFind(DpkTestCase):
    def test_bisection_fallback(self):
        # f'' vanishes everywhere, so Newton cannot proceed
        df = lambda x: x - 0.3 if x > 0.3 else 0.5 * (x - 0.3)
        d2f = lambda x: 0.0
        search = find_critical_points(df, d2f, -1.0, 1.0, seeds=4, max_iter=100)
        self.assertEqual(len(search.points), 1)
        self.assertAlmostEqual(search.points[0].x, 0.3, places=9)
        self.assertEqual(search.points[0].kind, 'minimum')
        self.assertEqual(search.not_found, 3)

    def test_classification_without_curvature(self):
        df = lambda x: 4 * x**3
        d2f = lambda x: 12 * x**2
        self.assertEqual(classify_critical_point(df, d2f, 0.0), 'minimum')
        self.assertEqual(classify_critical_point(lambda x: -df(x), d2f, 0.0), 'maximum')
        self.assertEqual(classify_critical_point(lambda x: 3 * x**2, lambda x: 6 * x, 0.0),
                         'inflection')


def run_tests():
    suite = unittest.TestLoader().loadTestsFromModule(sys.modules[__name__])
    return len(unittest.TextTestRunner(verbosity=2).run(suite).failures)


if __name__ == '__main__':
    unittest.main()
