#!/usr/bin/env python3

import unittest
import sys

import numpy as np

from testutils import DpkTestCase
from ..config import Settings
from ..errors import InvalidArgumentError, DomainViolation
from ..exprs.parser import parse
from .bench import benchmark, compare, Comparison, BenchmarkResult
from .bench import stability_tests
from .modes import Evaluate


def _result(mean, strategy='compiled'):
    stats = dict(total=mean, mean=mean, min=mean, max=mean, std=0.0, median=mean)
    return BenchmarkResult(strategy, 1, 0, 1.0, stats)


class TestBenchmark(DpkTestCase):
    def test_statistics(self):
        result = benchmark(parse("x^2+1"), iterations=1000)
        self.assertEqual(result.iterations, 1000)
        self.assertEqual(result.value, 2.0)
        self.assertLessEqual(result.min, result.mean)
        self.assertLessEqual(result.mean, result.max)
        self.assertLessEqual(result.min, result.median)
        self.assertLessEqual(result.median, result.max)
        self.assertGreaterEqual(result.std, 0.0)
        self.assertGreaterEqual(result.total, result.max)

    def test_strategies(self):
        expr = parse("sin(x)*y")
        env = dict(x=0.0, y=2.0)
        for strategy in ['interpreted', 'compiled']:
            with self.subTest(strategy=strategy):
                result = benchmark(expr, env, 10, strategy=strategy)
                self.assertEqual(result.strategy, strategy)
                self.assertEqual(result.value, 0.0)
        with self.assertRaises(InvalidArgumentError):
            benchmark(expr, env, 10, strategy='jit')

    def test_invalid_iterations(self):
        for iterations in [0, -1, 2.5, True, None, "10"]:
            with self.subTest(iterations=iterations):
                with self.assertRaises(InvalidArgumentError):
                    benchmark(parse("x"), iterations=iterations)

    def test_iteration_types(self):
        result = benchmark(parse("x"), iterations=np.int64(5))
        self.assertIsType(result.iterations, int)
        self.assertEqual(result.iterations, 5)
        self.assertEqual(Evaluate().run(parse("x"), np.int64(2))['evaluations'], 2)
        for run in [lambda n: benchmark(parse("x"), iterations=n),
                    lambda n: Evaluate().run(parse("x"), n)]:
            for iterations in [np.int64(0), True, 1.0]:
                with self.subTest(iterations=iterations):
                    with self.assertRaises(InvalidArgumentError):
                        run(iterations)

    def test_compilation_time(self):
        compiled = benchmark(parse("sin(x)^2"), iterations=5)
        self.assertGreaterEqual(compiled.compilation_time, 0.0)
        self.assertIn('compilation_time', compiled.to_dict())
        interpreted = benchmark(parse("sin(x)^2"), iterations=5, strategy='interpreted')
        self.assertIsNone(interpreted.compilation_time)

    def test_evaluation_error(self):
        with self.assertRaises(DomainViolation):
            benchmark(parse("1/(x-1)"), iterations=10)
        with self.assertRaises(DomainViolation):
            benchmark(parse("1/(x-1)"), iterations=10, settings=Settings(warmup=0))

    def test_settings(self):
        result = benchmark(parse("x+1"), iterations=3,
                           settings=Settings(warmup=0, default_point=4.0))
        self.assertEqual(result.warmup, 0)
        self.assertEqual(result.value, 5.0)
        d = result.to_dict()
        self.assertEqual(d['timer'], 'timeit.default_timer')
        self.assertEqual(d['iterations'], 3)


class TestComparison(DpkTestCase):
    def test_compare(self):
        comparison = compare(parse("x^3 - 2*x"), iterations=50)
        self.assertEqual(comparison.interpreted.strategy, 'interpreted')
        self.assertEqual(comparison.compiled.strategy, 'compiled')
        self.assertTrue(comparison.recommendation.startswith("Recommend"))
        d = comparison.to_dict()
        for key in ['interpreted', 'compiled', 'speedup', 'recommendation',
                    'mean', 'min', 'max', 'std', 'median', 'iterations']:
            self.assertIn(key, d)
        self.assertEqual(d['value'], -1.0)

    def test_stability(self):
        results = stability_tests(parse("x^2+1"))
        self.assertEqual([t.test_name for t in results],
                         ['basic evaluation', 'division by zero', 'overflow',
                          'underflow', 'NaN handling', 'nested functions'])
        self.assertTrue(all(t.passed for t in results))
        by_name = dict((t.test_name, t) for t in results)
        self.assertIsNone(by_name['basic evaluation'].error_message)
        self.assertIsNone(by_name['underflow'].error_message)
        self.assertIn("div", by_name['division by zero'].error_message)
        self.assertIsNotNone(by_name['overflow'].error_message)
        self.assertIsNotNone(by_name['NaN handling'].error_message)
        for t in results:
            self.assertGreaterEqual(t.time, 0.0)

    def test_stability_of_undefined_expression(self):
        results = stability_tests(parse("ln(x-1)"))
        self.assertFalse(results[0].passed)
        self.assertIn("ln", results[0].error_message)
        self.assertTrue(all(t.passed for t in results[1:]))
        results = stability_tests(parse("ln(x-1)"), dict(x=3.0))
        self.assertTrue(results[0].passed)

    def test_comparison_payload(self):
        d = compare(parse("x"), iterations=5).to_dict()
        self.assertEqual(len(d['stability']), 6)
        self.assertEqual(set(d['stability'][0]),
                         {'test_name', 'passed', 'error_message', 'time'})
        self.assertGreaterEqual(d['compilation_time'], 0.0)
        self.assertIsNone(d['interpreted']['compilation_time'])

    def test_recommendation(self):
        c = Comparison(_result(3e-6, 'interpreted'), _result(1e-6))
        self.assertAlmostEqual(c.speedup, 3.0)
        self.assertEqual(c.recommendation,
                         "Recommend compiled evaluation: 3.0x speedup detected")
        c = Comparison(_result(1.5e-6, 'interpreted'), _result(1e-6))
        self.assertIn("moderate", c.recommendation)
        c = Comparison(_result(1e-6, 'interpreted'), _result(1e-6))
        self.assertEqual(c.recommendation,
                         "Recommend interpreted evaluation: similar performance")
        c = Comparison(_result(1e-6, 'interpreted'), _result(0.0))
        self.assertIsNone(c.speedup)
        self.assertEqual(c.recommendation, "Insufficient data for recommendation")


def run_tests():
    suite = unittest.TestLoader().loadTestsFromModule(sys.modules[__name__])
    return len(unittest.TextTestRunner(verbosity=2).run(suite).failures)


if __name__ == '__main__':
    unittest.main()
