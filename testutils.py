r"""@package testutils

Utilities to add more features to `unittest` classes.

This module provides a custom subclass of `unittest.TestCase`, namely
DpkTestCase, which obeys the global configuration settings in TestSettings
and adds assertions for numeric sequences and for the JSON payloads returned
by the funcanalysis.api operations.

This module also introduces a decorator slowtest, which, when applied,
leads to the test being skipped on normal runs. The script starting the test
must set `TestSettings.skipslow` to `False` for the slow tests to be run.
"""

import functools
import json
import math
import sys
import unittest
from timeit import default_timer


__all__ = [
    "DpkTestCase",
    "TestSettings",
    "slowtest",
]


def slowtest(func):
    """Decorator for skipping a test if TestSettings.skipslow is true."""
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        if TestSettings.skipslow:
            raise unittest.SkipTest("skipping slow tests")
        return func(*args, **kwargs)
    return wrapper


class DpkTestCase(unittest.TestCase):
    """Tweaked baseclass for unit tests.

    By deriving from this class, you:
        * Get timed individual tests (needs `verbosity=2`) if
          TestSettings.timing is true.
        * Can use assertListAlmostEqual(), assertRelClose() and the payload
          assertions assertPayloadOk() and assertPayloadError().
    """

    def run(self, result=None):
        start = default_timer()
        outcome = unittest.TestCase.run(self, result)
        if TestSettings.timing and result is not None and getattr(result, 'showAll', False):
            print("(%.4f seconds) ... " % (default_timer() - start),
                  file=sys.stderr, end='')
        return outcome

    def assertIsType(self, obj, cls):
        r"""Assert that an object is exactly of a certain type."""
        self.assertIs(type(obj), cls)

    def assertRelClose(self, a, b, rtol=1e-6, atol=1e-12, msg=None):
        r"""Assert `|a-b| <= max(rtol*max(|a|,|b|), atol)`."""
        if not math.isclose(a, b, rel_tol=rtol, abs_tol=atol):
            raise self.failureException(
                msg or "%r != %r (rtol=%g, atol=%g)" % (a, b, rtol, atol)
            )

    def assertListAlmostEqual(self, a, b, places=None, delta=None):
        r"""Assert that two iterables contain (almost) the same values."""
        if places is not None and delta is not None:
            raise TypeError("Cannot use delta and places at the same time")
        if places is None and delta is None:
            places = 7
        a, b = list(a), list(b)
        if len(a) != len(b):
            raise self.failureException("Lists have different lengths (%d != %d)" % (len(a), len(b)))
        fails = []
        for i, (x, y) in enumerate(zip(a, b)):
            if x == y:
                continue
            if delta is not None:
                if abs(x-y) > delta:
                    fails.append(i)
            elif round(abs(x-y), places) != 0:
                fails.append(i)
        if fails:
            msg = "%d elements differ.\n" % len(fails)
            msg += "\n".join("  [{i}] {a} != {b}".format(i=i, a=a[i], b=b[i])
                             for i in fails[:9])
            raise self.failureException(msg)

    def assertPayloadOk(self, payload):
        r"""Assert a successful operation payload and return its `result`."""
        data = json.loads(payload)
        if not data['ok']:
            raise self.failureException("Operation failed: %r" % (data['error'],))
        return data['result']

    def assertPayloadError(self, payload, error_type):
        r"""Assert a failed operation payload and return its `error`."""
        data = json.loads(payload)
        if data['ok']:
            raise self.failureException("Operation unexpectedly succeeded.")
        self.assertEqual(data['error']['type'], error_type)
        return data['error']


class TestSettings(object):
    """Global settings for tests."""
    ## Stop test run on first fail/error.
    failfast = False
    ## Whether output is buffered.\ Just information, cannot be used to toggle output buffering.
    buffering = False
    ## Whether the timing for each test case should be printed.
    timing = False
    ## Control whether tests marked as slowtest should be skipped.
    skipslow = True
