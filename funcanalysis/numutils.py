r"""@package funcanalysis.numutils

Miscellaneous numerical utilities and helpers.


@b Examples

```
    >>> clip(3.5, 0, 1)
    1
    >>> deduplicate([1.0, 1.0 + 1e-9, 2.0], 1e-6)
    [1.0, 2.0]
```
"""

import math

import numpy as np

from .errors import InvalidArgumentError


__all__ = [
    "clip",
    "sign_change",
    "deduplicate",
    "summary_statistics",
    "contiguous_runs",
    "is_finite_number",
    "require_int",
]


def clip(x, x_min, x_max):
    r"""Confine a value to an interval."""
    return max(x_min, min(x_max, x))


def sign_change(a, b):
    r"""Whether `a` and `b` have opposite signs or one of them is zero."""
    return a * b <= 0.0


def deduplicate(values, tol):
    r"""Sort values and merge all that are closer than `tol` to their neighbour.

    Of each cluster of nearby values, the first (smallest) one is kept.
    """
    result = []
    for v in sorted(values):
        if result and abs(v - result[-1]) <= tol:
            continue
        result.append(v)
    return result


def summary_statistics(samples):
    r"""Compute mean, min, max, population standard deviation and median.

    @param samples
        Non-empty sequence of numbers.
    @return Dictionary with keys ``total, mean, min, max, std, median``.
    """
    a = np.asarray(samples, dtype=float)
    if a.size == 0:
        raise ValueError("No samples given.")
    return dict(
        total=float(a.sum()),
        mean=clip(float(a.mean()), float(a.min()), float(a.max())),
        min=float(a.min()),
        max=float(a.max()),
        std=float(a.std()),
        median=float(np.median(a)),
    )


def contiguous_runs(xs, flags):
    r"""Return the `[x_start, x_end]` intervals of consecutive `True` flags.

    @param xs
        Sample positions.
    @param flags
        Booleans, one per sample position.
    """
    runs = []
    start = None
    for i, flag in enumerate(flags):
        if flag and start is None:
            start = i
        elif not flag and start is not None:
            runs.append([float(xs[start]), float(xs[i-1])])
            start = None
    if start is not None:
        runs.append([float(xs[start]), float(xs[len(flags)-1])])
    return runs


def is_finite_number(x):
    r"""Whether `x` is a real (non-boolean) number with a finite value."""
    if isinstance(x, bool):
        return False
    try:
        return math.isfinite(x)
    except TypeError:
        return False


def require_int(value, minimum, what):
    r"""Validate an integer count such as an iteration number.

    Python and NumPy integers are accepted, booleans are not.

    @return The value as `int`.

    @b Raises
        errors.InvalidArgumentError if `value` is no integer or less than
        `minimum`.
    """
    if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
        raise InvalidArgumentError("%s must be an integer, got %r" % (what, value))
    if value < minimum:
        raise InvalidArgumentError("%s must be at least %d, got %d"
                                   % (what, minimum, value))
    return int(value)
