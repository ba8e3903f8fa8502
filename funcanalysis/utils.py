r"""@package funcanalysis.utils

General utilities for simplifying certain tasks in Python.
"""

from contextlib import contextmanager
from timeit import default_timer
import datetime
import logging


__all__ = [
    "timethis",
    "default_timer",
]


logger = logging.getLogger(__name__)


@contextmanager
def timethis(label, log=None, level=logging.DEBUG):
    r"""Context manager logging the execution time of the code it wraps.

    @param label
        Text describing what is being timed.
    @param log
        Logger to use. Default is the logger of this module.
    @param level
        Logging level. Default is `DEBUG`.
    """
    if log is None:
        log = logger
    start = default_timer()
    try:
        yield
    finally:
        elapsed = datetime.timedelta(seconds=default_timer()-start)
        log.log(level, "%s: elapsed time %s", label, elapsed)
