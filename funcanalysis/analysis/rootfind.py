r"""@package funcanalysis.analysis.rootfind

Locating critical points (zeros of the first derivative) on an interval.

The interval is divided into a number of seed sub-intervals. On each, a
Newton iteration is started at the midpoint using the first and second
derivative. Newton converges fast but may run away. If the sub-interval
brackets a sign change of the derivative, a runaway Newton step (or a
vanishing second derivative) makes us fall back to `scipy.optimize.brentq`,
which is guaranteed to converge within the bracket. Without a bracket, a
Newton step leaving the sub-interval (padded by half its width on either
side) gives up on that seed.

Every seed is capped at a fixed number of iterations, so the search always
terminates.
"""

from collections import namedtuple
import logging
import math

from scipy.optimize import brentq

from ..errors import EvalError
from ..numutils import deduplicate, sign_change


__all__ = [
    "CriticalPoint",
    "CriticalPointSearch",
    "find_critical_points",
    "classify_critical_point",
]


logger = logging.getLogger(__name__)


## Largest `|f'(x)|` accepted at a converged point. Rejects poles found by
## bisection as well as premature convergence.
RESIDUAL_TOLERANCE = 1e-6

## Second derivatives smaller than this are treated as zero by the
## classification.
CURVATURE_TOLERANCE = 1e-9


## A located critical point with its classification.
CriticalPoint = namedtuple('CriticalPoint', ['x', 'kind'])


class CriticalPointSearch(object):
    r"""Result of find_critical_points()."""

    def __init__(self, points, not_found, seeds):
        ## List of CriticalPoint objects sorted by position.
        self.points = points
        ## Number of seeds that did not converge to a critical point.
        self.not_found = not_found
        ## Number of seed sub-intervals searched.
        self.seeds = seeds

    def positions(self):
        return [p.x for p in self.points]


def _try(f, x):
    try:
        return f(x)
    except EvalError:
        return None


def find_critical_points(df, d2f, x_min, x_max, seeds=24, max_iter=50,
                         tol=1e-10, dedup_tol=1e-6):
    r"""Find and classify the zeros of `df` in `[x_min, x_max]`.

    @param df
        Callable computing the first derivative. May raise
        errors.EvalError where undefined.
    @param d2f
        Callable computing the second derivative, as `df`.
    @param x_min,x_max
        Interval to search.
    @param seeds
        Number of sub-intervals to start a search in.
    @param max_iter
        Maximum number of iterations per seed (Newton and bisection
        combined).
    @param tol
        Convergence tolerance in `x`.
    @param dedup_tol
        Roots closer than this are considered the same.
    """
    edges = [x_min + (x_max - x_min) * i / seeds for i in range(seeds + 1)]
    roots = []
    not_found = 0
    for a, b in zip(edges[:-1], edges[1:]):
        x = _search_interval(df, d2f, a, b, max_iter, tol)
        if x is None or not x_min <= x <= x_max:
            not_found += 1
        else:
            roots.append(x)
    roots = deduplicate(roots, dedup_tol)
    points = [CriticalPoint(x, classify_critical_point(df, d2f, x)) for x in roots]
    logger.debug("critical point search on [%r, %r]: %d found, %d seeds failed",
                 x_min, x_max, len(points), not_found)
    return CriticalPointSearch(points, not_found, seeds)


def _search_interval(df, d2f, a, b, max_iter, tol):
    fa, fb = _try(df, a), _try(df, b)
    bracket = fa is not None and fb is not None and sign_change(fa, fb)
    pad = 0.5 * (b - a)
    x = 0.5 * (a + b)
    steps = 0
    while steps < max_iter:
        steps += 1
        g = _try(df, x)
        if g is None:
            break
        if abs(g) <= tol:
            return x
        h = _try(d2f, x)
        if h is None or h == 0.0:
            break
        x_new = x - g / h
        if not math.isfinite(x_new):
            break
        if bracket and not a <= x_new <= b:
            break
        if not bracket and not a - pad <= x_new <= b + pad:
            return None
        converged = abs(x_new - x) <= tol * max(1.0, abs(x))
        x = x_new
        if converged:
            return _accept(df, x)
    if bracket:
        return _bisect(df, a, b, max_iter - steps, tol)
    return None


def _accept(df, x):
    g = _try(df, x)
    if g is None or abs(g) > RESIDUAL_TOLERANCE:
        return None
    return x


def _bisect(df, a, b, remaining, tol):
    if remaining <= 0:
        return None
    try:
        x, r = brentq(df, a, b, xtol=tol, maxiter=remaining,
                      full_output=True, disp=False)
    except (EvalError, ValueError):
        return None
    if not r.converged:
        return None
    return _accept(df, x)


def classify_critical_point(df, d2f, x):
    r"""Classify a zero of `df` as ``'minimum'``, ``'maximum'`` or ``'inflection'``.

    The sign of the second derivative decides. If it vanishes (or is
    undefined), the signs of the first derivative slightly to the left and
    right of `x` are compared instead.
    """
    h = _try(d2f, x)
    if h is not None and abs(h) > CURVATURE_TOLERANCE:
        return 'minimum' if h > 0 else 'maximum'
    delta = 1e-4 * max(1.0, abs(x))
    left, right = _try(df, x - delta), _try(df, x + delta)
    if left is None or right is None:
        return 'undetermined'
    if left < 0 < right:
        return 'minimum'
    if left > 0 > right:
        return 'maximum'
    return 'inflection'
