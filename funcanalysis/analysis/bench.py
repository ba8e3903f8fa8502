r"""@package funcanalysis.analysis.bench

Measuring the cost of evaluating an expression.

benchmark() runs a number of untimed warm-up evaluations and then times each
of `iterations` evaluations individually with `timeit.default_timer`, which
is monotonic. The per-evaluation times are summarized into a
BenchmarkResult.

Two evaluation strategies can be measured:

    * ``'interpreted'``: evaluators.evaluate(), walking the tree every time
    * ``'compiled'``: an evaluators.Evaluator built once beforehand

compare() measures both and derives a speedup and a recommendation. It also
runs the stability_tests(): the expression itself followed by a fixed set of
edge case expressions, each of which must either fail with an engine error
or produce a finite value.
"""

from collections import namedtuple
import logging

from ..config import ensure_settings
from ..errors import EngineError, InvalidArgumentError
from ..exprs.evaluators import evaluate, evaluator, default_environment
from ..exprs.parser import parse
from ..numutils import require_int, summary_statistics
from ..utils import default_timer


__all__ = [
    "BenchmarkResult",
    "Comparison",
    "StabilityTest",
    "benchmark",
    "compare",
    "stability_tests",
    "STRATEGIES",
]


logger = logging.getLogger(__name__)


## Available evaluation strategies.
STRATEGIES = ('interpreted', 'compiled')

## Name of the timer reported in results.
TIMER_NAME = 'timeit.default_timer'


class BenchmarkResult(object):
    r"""Timing statistics of one benchmark run (all times in seconds)."""

    def __init__(self, strategy, iterations, warmup, value, stats,
                 compilation_time=None):
        ## Evaluation strategy that was measured.
        self.strategy = strategy
        ## Number of timed evaluations.
        self.iterations = iterations
        ## Number of untimed warm-up evaluations.
        self.warmup = warmup
        ## Result of the last evaluation.
        self.value = value
        ## Sum of all timings.
        self.total = stats['total']
        ## Mean time per evaluation.
        self.mean = stats['mean']
        ## Fastest evaluation.
        self.min = stats['min']
        ## Slowest evaluation.
        self.max = stats['max']
        ## Population standard deviation.
        self.std = stats['std']
        ## Median time per evaluation.
        self.median = stats['median']
        ## Time needed to build the compiled evaluator (`None` if interpreted).
        self.compilation_time = compilation_time

    def to_dict(self):
        return dict(
            strategy=self.strategy,
            iterations=self.iterations,
            warmup=self.warmup,
            timer=TIMER_NAME,
            value=self.value,
            total=self.total,
            mean=self.mean,
            min=self.min,
            max=self.max,
            std=self.std,
            median=self.median,
            compilation_time=self.compilation_time,
        )

    def __repr__(self):
        return ("<BenchmarkResult(%s, n=%d, mean=%.3g s)>"
                % (self.strategy, self.iterations, self.mean))


def benchmark(expr, environment=None, iterations=1000, settings=None,
              strategy='compiled'):
    r"""Time repeated evaluation of an expression.

    @param expr
        The nodes.Expression to evaluate.
    @param environment
        Variable values. Default binds all variables to
        `settings.default_point`.
    @param iterations
        Number of timed evaluations (positive integer).
    @param settings
        config.Settings object; `settings.warmup` evaluations are run first.
    @param strategy
        One of STRATEGIES.

    @b Raises
        errors.InvalidArgumentError for a non-positive iteration count or
        unknown strategy. Evaluation errors abort the benchmark and are
        propagated.
    """
    iterations = require_int(iterations, 1, "iterations")
    if strategy not in STRATEGIES:
        raise InvalidArgumentError("unknown strategy %r" % (strategy,))
    settings = ensure_settings(settings)
    if environment is None:
        environment = default_environment(expr, settings.default_point)
    compilation_time = None
    if strategy == 'compiled':
        start = default_timer()
        f = evaluator(expr)
        compilation_time = default_timer() - start
    else:
        f = lambda env: evaluate(expr, env)
    value = None
    for _ in range(settings.warmup):
        value = f(environment)
    times = []
    for _ in range(iterations):
        start = default_timer()
        value = f(environment)
        times.append(default_timer() - start)
    result = BenchmarkResult(strategy, iterations, settings.warmup, value,
                             summary_statistics(times), compilation_time)
    logger.debug("benchmark %s: %r", expr, result)
    return result


## Edge case expressions checked by stability_tests().
STABILITY_CASES = (
    ('division by zero', "1/0"),
    ('overflow', "1e308 * 1e308"),
    ('underflow', "1e-308 / 1e308"),
    ('NaN handling', "sqrt(-1)"),
)

## Deeply nested expression that must evaluate.
NESTED_CASE = ('nested functions', "sin(cos(tan(exp(ln(42)))))")


## Outcome of a single stability test. `time` is in seconds.
StabilityTest = namedtuple('StabilityTest',
                           ['test_name', 'passed', 'error_message', 'time'])


def _run_stability_test(name, expr, environment, graceful):
    start = default_timer()
    try:
        evaluator(expr)(environment)
    except EngineError as e:
        elapsed = default_timer() - start
        return StabilityTest(name, graceful, str(e), elapsed)
    elapsed = default_timer() - start
    return StabilityTest(name, True, None, elapsed)


def stability_tests(expr, environment=None, settings=None):
    r"""Check that evaluation fails gracefully.

    The expression itself (at `environment`, default all variables at
    `settings.default_point`) and NESTED_CASE must evaluate without error.
    The STABILITY_CASES only need to fail with an engine error instead of
    producing a non-finite value or crashing.

    @return List of StabilityTest tuples.
    """
    settings = ensure_settings(settings)
    if environment is None:
        environment = default_environment(expr, settings.default_point)
    results = [_run_stability_test('basic evaluation', expr, environment, False)]
    for name, text in STABILITY_CASES:
        results.append(_run_stability_test(name, parse(text), {}, True))
    name, text = NESTED_CASE
    results.append(_run_stability_test(name, parse(text), {}, False))
    failed = [t.test_name for t in results if not t.passed]
    if failed:
        logger.info("stability tests failed for %s: %s", expr, ", ".join(failed))
    return results


class Comparison(object):
    r"""Benchmarks of both strategies with speedup and recommendation."""

    def __init__(self, interpreted, compiled, stability=()):
        ## BenchmarkResult of the tree walking evaluation.
        self.interpreted = interpreted
        ## BenchmarkResult of the compiled evaluator.
        self.compiled = compiled
        ## Ratio of mean times interpreted/compiled, `None` if not measurable.
        self.speedup = None
        if compiled.mean > 0:
            self.speedup = interpreted.mean / compiled.mean
        ## List of StabilityTest results.
        self.stability = list(stability)

    @property
    def recommendation(self):
        r"""Human readable advice on which strategy to use."""
        speedup = self.speedup
        if speedup is None:
            return "Insufficient data for recommendation"
        if speedup > 2.0:
            return "Recommend compiled evaluation: %.1fx speedup detected" % speedup
        if speedup > 1.0:
            return "Recommend compiled evaluation: moderate performance improvement"
        return "Recommend interpreted evaluation: similar performance"

    def to_dict(self):
        d = self.compiled.to_dict()
        d.update(
            interpreted=self.interpreted.to_dict(),
            compiled=self.compiled.to_dict(),
            speedup=self.speedup,
            recommendation=self.recommendation,
            stability=[t._asdict() for t in self.stability],
        )
        return d


def compare(expr, environment=None, iterations=1000, settings=None):
    r"""Benchmark both strategies with the same arguments and run the
    stability tests."""
    return Comparison(
        interpreted=benchmark(expr, environment, iterations, settings, 'interpreted'),
        compiled=benchmark(expr, environment, iterations, settings, 'compiled'),
        stability=stability_tests(expr, environment, settings),
    )
