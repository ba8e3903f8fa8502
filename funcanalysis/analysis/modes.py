r"""@package funcanalysis.analysis.modes

The four analysis modes of the `analyze` operation.

The mode number selects one of a closed set of AnalysisMode subclasses:

    0  Evaluate        evaluate at the default point
    1  Simplify        simplified canonical form
    2  Classify        defined/undefined intervals on the default range
    3  CriticalPoints  zeros of the first derivative on the default range

analysis_mode() translates the number once; the returned object's `run()`
method does the work and returns a JSON compatible dict.
"""

import logging

import numpy as np

from ..config import ensure_settings
from ..errors import EvalError, InvalidArgumentError
from ..exprs.evaluators import evaluator, default_environment
from ..exprs.simplify import simplify
from ..autodiff.dual import forward_derivative
from ..autodiff.symbolic import symbolic_derivative
from ..numutils import contiguous_runs, require_int
from .rootfind import find_critical_points
from .sampler import sample_function, detect_breaks


__all__ = [
    "AnalysisMode",
    "Evaluate",
    "Simplify",
    "Classify",
    "CriticalPoints",
    "analysis_mode",
    "primary_variable",
]


logger = logging.getLogger(__name__)


def primary_variable(expr):
    r"""Variable to analyse: `x` if present, else the first free variable."""
    variables = expr.variables()
    if not variables or 'x' in variables:
        return 'x'
    return variables[0]


class AnalysisMode(object):
    r"""Base class of the analysis modes."""

    ## Mode number.
    number = None
    ## Name used in results.
    name = None

    def run(self, expr, iterations, settings=None):
        r"""Perform the analysis.

        @param expr
            The parsed nodes.Expression.
        @param iterations
            Mode specific iteration count.
        @param settings
            config.Settings object or `None` for the defaults.

        @return Dict with the mode specific results.
        """
        raise NotImplementedError

    def __repr__(self):
        return "<%s(mode=%d)>" % (type(self).__name__, self.number)


class Evaluate(AnalysisMode):
    r"""Evaluate with every free variable bound to the default point.

    The expression is evaluated `iterations` times, which is useful for a
    rough consistency check of repeated evaluation.
    """

    number = 0
    name = 'evaluate'

    def run(self, expr, iterations, settings=None):
        settings = ensure_settings(settings)
        iterations = require_int(iterations, 1, "iterations")
        env = default_environment(expr, settings.default_point)
        f = evaluator(expr)
        values = [f(env) for _ in range(iterations)]
        return dict(
            mode=self.name,
            value=float(np.mean(values)),
            environment=env,
            evaluations=iterations,
        )


class Simplify(AnalysisMode):
    r"""Simplify and return the canonical form. Ignores `iterations`."""

    number = 1
    name = 'simplify'

    def run(self, expr, iterations, settings=None):
        result = simplify(expr)
        return dict(
            mode=self.name,
            simplified=str(result),
            nodes_before=expr.node_count(),
            nodes_after=result.node_count(),
        )


class Classify(AnalysisMode):
    r"""Find where the function is defined on the default range.

    The function is evaluated at `iterations` evenly spaced points including
    both endpoints of `settings.default_range`.
    """

    number = 2
    name = 'classify'

    def run(self, expr, iterations, settings=None):
        settings = ensure_settings(settings)
        samples = require_int(iterations, 2, "iterations")
        x_min, x_max = settings.default_range
        var = primary_variable(expr)
        env = default_environment(expr, settings.default_point)
        env.pop(var, None)
        f = evaluator(expr).function(var, env)
        xs = np.linspace(x_min, x_max, samples)
        ys = sample_function(f, xs)
        undefined = [y is None for y in ys]
        return dict(
            mode=self.name,
            variable=var,
            samples=samples,
            range=[x_min, x_max],
            defined_everywhere=not any(undefined),
            undefined_intervals=contiguous_runs(xs, undefined),
            defined_intervals=contiguous_runs(xs, [not u for u in undefined]),
            discontinuities=[[float(xs[i]), float(xs[i+1])]
                             for i in detect_breaks(f, xs, ys)],
        )


class CriticalPoints(AnalysisMode):
    r"""Locate and classify the critical points on the default range.

    `iterations` is the iteration cap per seed interval.
    """

    number = 3
    name = 'critical_points'

    def run(self, expr, iterations, settings=None):
        settings = ensure_settings(settings)
        max_iter = require_int(iterations, 1, "iterations")
        x_min, x_max = settings.default_range
        var = primary_variable(expr)
        env = default_environment(expr, settings.default_point)
        env.pop(var, None)
        dexpr = symbolic_derivative(expr, var)
        result = dict(mode=self.name, variable=var, derivative=str(dexpr),
                      range=[x_min, x_max])
        if not dexpr.depends_on(var):
            # derivative is constant: no isolated critical points
            result.update(critical_points=[], not_found=0, constant_derivative=True)
            return result
        df = evaluator(dexpr).function(var, env)
        def d2f(x):
            point = dict(env)
            point[var] = x
            return forward_derivative(dexpr, point, var)
        search = find_critical_points(
            df, d2f, x_min, x_max, seeds=settings.critical_seeds,
            max_iter=max_iter, tol=settings.tolerance,
            dedup_tol=settings.dedup_tolerance,
        )
        f = evaluator(expr).function(var, env)
        points = []
        for p in search.points:
            try:
                value = f(p.x)
            except EvalError:
                value = None
            points.append(dict(x=p.x, value=value, kind=p.kind))
        result.update(critical_points=points, not_found=search.not_found,
                      constant_derivative=False)
        return result


_MODES = dict((cls.number, cls) for cls in
              (Evaluate, Simplify, Classify, CriticalPoints))


def analysis_mode(number):
    r"""Return the AnalysisMode object for a mode number.

    @b Raises
        errors.InvalidArgumentError for anything but the integers 0 to 3.
    """
    if isinstance(number, bool) or not isinstance(number, (int, np.integer)):
        raise InvalidArgumentError("mode must be an integer, got %r" % (number,))
    try:
        cls = _MODES[int(number)]
    except KeyError:
        raise InvalidArgumentError("unknown analysis mode %d (expected 0 to 3)"
                                   % number)
    logger.debug("analysis mode %d: %s", number, cls.name)
    return cls()
