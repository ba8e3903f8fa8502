r"""@package funcanalysis.api

The four public operations: analyze, differentiate, plot and benchmark.

Each operation takes the expression as text, performs the complete request
and returns a JSON string (see the encoder module). Operations never raise
for problems with the request: parse errors, undefined evaluations, invalid
ranges and so on are reported in the `error` field of the payload.
Unexpected exceptions are logged with their traceback and reported as
``InternalError``.

@b Examples

```
    >>> json.loads(analyze("x^2+2*x+1", 1, 1))['result']['simplified']
    'x^2+2*x+1'
    >>> json.loads(differentiate("x^2", "x", True))['result']['value']
    2.0
```
"""

import logging

from .config import ensure_settings
from .errors import EngineError, EvalError, DifferentiationError
from .errors import InvalidArgumentError
from .exprs.parser import parse
from .exprs.evaluators import default_environment
from .autodiff.dual import forward_derivative
from .autodiff.tape import gradient as reverse_gradient
from .autodiff.symbolic import symbolic_derivative
from .analysis.modes import analysis_mode, primary_variable
from .analysis.sampler import sample
from .analysis.bench import compare
from .encoder import encode_result, encode_error
from .numutils import is_finite_number


__all__ = [
    "analyze",
    "differentiate",
    "plot",
    "benchmark",
]


logger = logging.getLogger(__name__)


def _perform(operation, expression, func, *args):
    r"""Run an operation and encode its outcome."""
    try:
        result = func(*args)
    except EngineError as e:
        logger.info("%s(%r) failed: %s", operation, expression, e)
        return encode_error(operation, expression, e)
    except Exception as e:
        logger.exception("Unexpected failure in %s(%r)", operation, expression)
        return encode_error(operation, expression,
                            dict(type='InternalError', message=str(e)))
    return encode_result(operation, expression, result)


def _parse(expression):
    if not isinstance(expression, str):
        raise InvalidArgumentError("expression must be a string, got %r"
                                   % type(expression).__name__)
    return parse(expression)


def analyze(expression, iterations, mode, settings=None):
    r"""Analyze an expression in one of the four analysis modes.

    @param expression
        Expression text.
    @param iterations
        Mode specific iteration count (see analysis.modes).
    @param mode
        0 (evaluate), 1 (simplify), 2 (classify) or 3 (critical points).
    @param settings
        Optional config.Settings object.
    """
    return _perform('analyze', expression, _analyze, expression, iterations,
                    mode, settings)


def _analyze(expression, iterations, mode, settings):
    expr = _parse(expression)
    analysis = analysis_mode(mode)
    result = analysis.run(expr, iterations, ensure_settings(settings))
    result['parsed'] = str(expr)
    return result


def differentiate(expression, variable='x', forward_mode=True, point=None,
                  settings=None):
    r"""Differentiate an expression.

    The result contains the simplified symbolic derivative and its value at
    the evaluation point, computed with forward mode (`forward_mode=True`)
    or reverse mode automatic differentiation. Reverse mode additionally
    reports the full gradient.

    @param expression
        Expression text.
    @param variable
        Name of the variable to differentiate w.r.t.
    @param forward_mode
        Strategy for the numeric value.
    @param point
        Evaluation point. Either a number (the value of `variable`) or a dict
        of variable values. Unspecified variables are bound to
        `settings.default_point`.
    @param settings
        Optional config.Settings object.
    """
    return _perform('differentiate', expression, _differentiate, expression,
                    variable, forward_mode, point, settings)


def _environment(expr, variable, point, settings):
    env = default_environment(expr, settings.default_point, variable)
    if point is None:
        return env
    if isinstance(point, dict):
        for name, value in point.items():
            if not is_finite_number(value):
                raise InvalidArgumentError("value of '%s' must be a finite number" % name)
            env[name] = float(value)
        return env
    if not is_finite_number(point):
        raise InvalidArgumentError("point must be a finite number or a dict")
    env[variable] = float(point)
    return env


def _differentiate(expression, variable, forward_mode, point, settings):
    settings = ensure_settings(settings)
    expr = _parse(expression)
    if not isinstance(variable, str) or not variable.isidentifier():
        raise InvalidArgumentError("invalid variable name %r" % (variable,))
    env = _environment(expr, variable, point, settings)
    result = dict(variable=variable, point=env,
                  mode='forward' if forward_mode else 'reverse')
    try:
        result['derivative'] = str(symbolic_derivative(expr, variable))
    except DifferentiationError as e:
        result.update(derivative=None, derivative_error=e.to_dict())
    try:
        if forward_mode:
            result['value'] = forward_derivative(expr, env, variable)
        else:
            _, grad = reverse_gradient(expr, env)
            result['value'] = grad.get(variable, 0.0)
            result['gradient'] = grad
    except EvalError as e:
        result.update(value=None, value_error=e.to_dict())
    return result


def plot(expression, x_min, x_max, resolution, with_derivative=False,
         variable=None, settings=None):
    r"""Sample an expression for plotting.

    @param expression
        Expression text.
    @param x_min,x_max
        Sampling range; the grid is `[x_min, x_max)`.
    @param resolution
        Number of points.
    @param with_derivative
        Whether to include the derivative series.
    @param variable
        Variable to vary. Default is `x`, or the only variable there is.
    @param settings
        Optional config.Settings object.
    """
    return _perform('plot', expression, _plot, expression, x_min, x_max,
                    resolution, with_derivative, variable, settings)


def _plot(expression, x_min, x_max, resolution, with_derivative, variable,
          settings):
    expr = _parse(expression)
    if variable is None:
        variable = primary_variable(expr)
    grid = sample(expr, x_min, x_max, resolution, variable=variable,
                  settings=ensure_settings(settings),
                  with_derivative=with_derivative)
    result = grid.to_dict()
    labels = dict(x=variable, y="f(%s)" % variable)
    if with_derivative:
        labels['derivative'] = "f'(%s)" % variable
    result.update(resolution=len(grid), labels=labels)
    return result


def benchmark(expression, iterations, settings=None):
    r"""Benchmark evaluation of an expression at the default point.

    Both the interpreted tree walk and the compiled evaluator are measured.
    The top level statistics are those of the compiled evaluator.
    """
    return _perform('benchmark', expression, _benchmark, expression,
                    iterations, settings)


def _benchmark(expression, iterations, settings):
    expr = _parse(expression)
    return compare(expr, None, iterations, ensure_settings(settings)).to_dict()
