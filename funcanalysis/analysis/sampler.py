r"""@package funcanalysis.analysis.sampler

Sampling a function of one variable on a uniform grid for plotting.

The grid covers the half-open interval `[x_min, x_max)` with exactly
`resolution` points

    x_i = x_min + i * (x_max - x_min) / resolution,   i = 0, ..., resolution-1.

Points at which the function is undefined are not dropped but marked as gaps
(GAP, i.e. `None`), so that a plot can leave them out without shifting the
remaining points. In addition, poles lying *between* two samples are detected
and reported as *breaks*: a plot must not connect the two neighbouring points
of a break.

@b Examples

```
    >>> grid = sample(parse("1/x"), -1, 1, 100)
    >>> len(grid), grid.ys[50] is GAP
    (100, True)
```
"""

import logging

import numpy as np

from ..config import ensure_settings
from ..errors import EvalError, InvalidRangeError
from ..exprs.evaluators import evaluator, default_environment
from ..autodiff.dual import forward_derivative
from ..numutils import is_finite_number


__all__ = [
    "GAP",
    "SampleGrid",
    "sample",
    "sample_function",
    "detect_breaks",
]


logger = logging.getLogger(__name__)


## Marker for points at which the function is undefined.
GAP = None

## Number of bisection steps used to decide whether a sign change is a pole.
BREAK_REFINEMENT = 8


class SampleGrid(object):
    r"""Result of sampling a function.

    The positions `xs` are strictly increasing. Each value in `ys` is either a
    finite float or GAP.
    """

    def __init__(self, xs, ys, breaks=(), derivative=None, variable='x'):
        ## NumPy array of sample positions.
        self.xs = np.asarray(xs, dtype=float)
        ## List of function values (or GAP), one per position.
        self.ys = list(ys)
        ## Indices `i` such that points `i` and `i+1` must not be connected.
        self.breaks = list(breaks)
        ## Optional list of derivative values (or GAP), one per position.
        self.derivative = None if derivative is None else list(derivative)
        ## Name of the sampled variable.
        self.variable = variable

    def __len__(self):
        return len(self.ys)

    def points(self):
        r"""List of `(x, y)` pairs."""
        return [(float(x), y) for x, y in zip(self.xs, self.ys)]

    def gaps(self):
        r"""Indices of all undefined points."""
        return [i for i, y in enumerate(self.ys) if y is GAP]

    def finite_values(self):
        return [y for y in self.ys if y is not GAP]

    @property
    def x_range(self):
        return (float(self.xs[0]), float(self.xs[-1]))

    @property
    def y_range(self):
        r"""`(min, max)` of the defined values or `None` if there are none."""
        values = self.finite_values()
        if not values:
            return None
        return (min(values), max(values))

    def to_dict(self):
        r"""Structure suitable for JSON encoding."""
        d = dict(
            variable=self.variable,
            points=[[x, y] for x, y in self.points()],
            breaks=self.breaks,
            gaps=len(self.gaps()),
            x_range=list(self.x_range),
            y_range=None if self.y_range is None else list(self.y_range),
        )
        if self.derivative is not None:
            d['derivative'] = self.derivative
        return d


def grid_positions(x_min, x_max, resolution):
    r"""Validate the range and return the grid positions."""
    if not (is_finite_number(x_min) and is_finite_number(x_max)):
        raise InvalidRangeError("range bounds must be finite numbers")
    if x_min >= x_max:
        raise InvalidRangeError("x_min (%r) must be less than x_max (%r)"
                                % (x_min, x_max))
    if not is_finite_number(resolution) or resolution != int(resolution):
        raise InvalidRangeError("resolution must be an integer")
    resolution = int(resolution)
    if resolution <= 0:
        raise InvalidRangeError("resolution must be positive")
    x_min = float(x_min)
    step = (float(x_max) - x_min) / resolution
    xs = x_min + np.arange(resolution) * step
    if resolution > 1 and not np.all(np.diff(xs) > 0):
        raise InvalidRangeError("step too small for the given range")
    return xs


def sample_function(f, xs):
    r"""Evaluate `f` at all `xs`, turning evaluation errors into gaps."""
    ys = []
    for x in xs:
        try:
            ys.append(f(float(x)))
        except EvalError:
            ys.append(GAP)
    return ys


def _is_pole(f, x0, y0, x1, y1):
    limit = max(abs(y0), abs(y1))
    for _ in range(BREAK_REFINEMENT):
        xm = 0.5 * (x0 + x1)
        try:
            ym = f(xm)
        except EvalError:
            return True
        if abs(ym) > limit:
            return True
        if ym == 0.0:
            return False
        if (ym < 0) == (y0 < 0):
            x0, y0 = xm, ym
        else:
            x1, y1 = xm, ym
    return False


def detect_breaks(f, xs, ys):
    r"""Find poles between neighbouring samples.

    A break is reported between points `i` and `i+1` if both are defined,
    have opposite signs, and the function value between them exceeds both
    in magnitude (or is undefined). The interval is refined by bisection
    BREAK_REFINEMENT times to catch poles close to one of the samples.
    """
    breaks = []
    for i in range(len(ys) - 1):
        y0, y1 = ys[i], ys[i+1]
        if y0 is GAP or y1 is GAP or y0 * y1 >= 0:
            continue
        if _is_pole(f, float(xs[i]), y0, float(xs[i+1]), y1):
            breaks.append(i)
    return breaks


def sample(expr, x_min, x_max, resolution, variable='x', settings=None,
           with_derivative=False):
    r"""Sample an expression on a uniform grid.

    @param expr
        The nodes.Expression to sample.
    @param x_min,x_max
        Finite bounds with `x_min < x_max`.
    @param resolution
        Number of grid points (positive integer).
    @param variable
        Name of the variable to vary. Other variables are bound to
        `settings.default_point`.
    @param settings
        config.Settings object. Default uses the default settings.
    @param with_derivative
        Whether to also sample the derivative (forward mode).

    @b Raises
        errors.InvalidRangeError for invalid ranges or resolutions.
    """
    settings = ensure_settings(settings)
    xs = grid_positions(x_min, x_max, resolution)
    env = default_environment(expr, settings.default_point)
    env.pop(variable, None)
    f = evaluator(expr).function(variable, env)
    ys = sample_function(f, xs)
    breaks = detect_breaks(f, xs, ys)
    derivative = None
    if with_derivative:
        def df(x):
            point = dict(env)
            point[variable] = x
            return forward_derivative(expr, point, variable)
        derivative = sample_function(df, xs)
    grid = SampleGrid(xs, ys, breaks, derivative, variable)
    logger.debug("sampled %s on [%r, %r) at %d points: %d gaps, %d breaks",
                 expr, x_min, x_max, len(grid), len(grid.gaps()), len(breaks))
    return grid
