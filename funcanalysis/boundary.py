r"""@package funcanalysis.boundary

Host facing entry points returning leased result buffers.

A host embedding the engine receives each result as an owned buffer of UTF-8
encoded JSON which it must hand back exactly once via free_string(). Here,
this contract is modelled by LeasedBuffer: reading after release, or
releasing twice, raises BufferReleasedError instead of silently using freed
memory.

@b Examples

```
    >>> buf = analyze_function("x^2", 1, 0)
    >>> json.loads(buf.text())['ok']
    True
    >>> free_string(buf)
    >>> free_string(buf)
    Traceback (most recent call last):
    ...
    BufferReleasedError: buffer already released
```
"""

import logging
import threading

from . import api


__all__ = [
    "LeasedBuffer",
    "BufferReleasedError",
    "analyze_function",
    "compute_derivative",
    "create_plot",
    "benchmark_function",
    "free_string",
]


logger = logging.getLogger(__name__)


class BufferReleasedError(RuntimeError):
    r"""Raised when a released buffer is used or released again."""
    pass


class LeasedBuffer(object):
    r"""UTF-8 encoded result payload owned by the caller until released."""

    def __init__(self, text):
        self._data = text.encode('utf-8')
        self._lock = threading.Lock()
        self._released = False

    @property
    def released(self):
        r"""Whether release() has been called."""
        return self._released

    def _check(self):
        if self._released:
            raise BufferReleasedError("buffer already released")

    def data(self):
        r"""The raw bytes of the payload."""
        with self._lock:
            self._check()
            return self._data

    def text(self):
        r"""The payload decoded as string."""
        return self.data().decode('utf-8')

    def __len__(self):
        return len(self.data())

    def release(self):
        r"""Give the buffer back. May be called exactly once."""
        with self._lock:
            self._check()
            self._released = True
            self._data = None

    def __repr__(self):
        state = "released" if self._released else "%d bytes" % len(self._data)
        return "<LeasedBuffer(%s)>" % state


def analyze_function(expression, iterations, mode):
    r"""Leased variant of api.analyze()."""
    return LeasedBuffer(api.analyze(expression, iterations, mode))


def compute_derivative(expression, variable, forward_mode):
    r"""Leased variant of api.differentiate()."""
    return LeasedBuffer(api.differentiate(expression, variable, forward_mode))


def create_plot(expression, x_min, x_max, resolution):
    r"""Leased variant of api.plot()."""
    return LeasedBuffer(api.plot(expression, x_min, x_max, resolution))


def benchmark_function(expression, iterations):
    r"""Leased variant of api.benchmark()."""
    return LeasedBuffer(api.benchmark(expression, iterations))


def free_string(buffer):
    r"""Release a buffer obtained from one of the functions above.

    Passing `None` is a no-op.
    """
    if buffer is None:
        return
    buffer.release()
    logger.debug("released result buffer")
