r"""@package funcanalysis.config

Engine settings.

Defaults are stored as class attributes of Settings. Instances may override
any of them through keyword arguments or by reading INI style configuration
files with a `[funcanalysis]` section, e.g.

    [funcanalysis]
    default_point = 0.5
    default_range = -5, 5
    warmup = 10

Later files override earlier ones, which allows a shared `funcanalysis.cfg`
next to a personal `funcanalysis.mine.cfg`. Missing files are skipped.

Settings objects are read-only after construction so that one instance can be
shared by concurrent calls.
"""

from configparser import ConfigParser
import math
import os.path as op


__all__ = [
    "Settings",
]


SECTION = 'funcanalysis'


class Settings(object):
    r"""Configuration for the analysis operations."""

    ## Value bound to free variables when no point is given.
    default_point = 1.0
    ## Range used by the classification and critical point modes.
    default_range = (-10.0, 10.0)
    ## Number of sub-intervals seeding the critical point search.
    critical_seeds = 24
    ## Convergence tolerance of the critical point search.
    tolerance = 1e-10
    ## Critical points closer than this are considered identical.
    dedup_tolerance = 1e-6
    ## Untimed evaluations before benchmarking.
    warmup = 5

    _float_keys = ('default_point', 'tolerance', 'dedup_tolerance')
    _int_keys = ('critical_seeds', 'warmup')
    _range_keys = ('default_range',)

    def __init__(self, **kw):
        r"""Create a settings object overriding the given defaults.

        @param **kw
            Any of the class level defaults. Unknown keys raise a `TypeError`.
            Values out of range (e.g. `critical_seeds=0` or an inverted
            `default_range`) raise a `ValueError`.
        """
        for key, value in kw.items():
            if key not in self.keys():
                raise TypeError("Unknown setting: %s" % key)
            object.__setattr__(self, key, self._convert(key, value))

    def __setattr__(self, name, value):
        raise AttributeError("Settings are read-only; use replace().")

    @classmethod
    def keys(cls):
        r"""Names of all available settings."""
        return cls._float_keys + cls._int_keys + cls._range_keys

    @classmethod
    def _convert(cls, key, value):
        if key in cls._float_keys:
            value = float(value)
            if not math.isfinite(value):
                raise ValueError("Setting %s must be finite, got %r" % (key, value))
            if key != 'default_point' and value <= 0:
                raise ValueError("Setting %s must be positive, got %r" % (key, value))
            return value
        if key in cls._int_keys:
            value = int(value)
            minimum = 0 if key == 'warmup' else 1
            if value < minimum:
                raise ValueError("Setting %s must be at least %d, got %d"
                                 % (key, minimum, value))
            return value
        if isinstance(value, str):
            value = value.split(',')
        a, b = (float(v) for v in value)
        if not (math.isfinite(a) and math.isfinite(b) and a < b):
            raise ValueError("Setting %s must be a finite range with min < max, "
                             "got (%r, %r)" % (key, a, b))
        return (a, b)

    def replace(self, **kw):
        r"""Return a copy with some settings changed."""
        values = self.as_dict()
        values.update(kw)
        return type(self)(**values)

    def as_dict(self):
        r"""Current values of all settings."""
        return dict((k, getattr(self, k)) for k in self.keys())

    @classmethod
    def from_config(cls, *filenames, **kw):
        r"""Create settings from configuration files.

        @param *filenames
            INI files to read in order. Files that do not exist are ignored.
        @param **kw
            Explicit overrides taking precedence over the files.
        """
        config = ConfigParser()
        config.read([op.expanduser(f) for f in filenames])
        values = dict()
        if config.has_section(SECTION):
            for key, value in config.items(SECTION):
                values[key] = value
        values.update(kw)
        return cls(**values)

    def __repr__(self):
        return "<Settings(%s)>" % ", ".join(
            "%s=%r" % (k, v) for k, v in sorted(self.as_dict().items())
        )

    def __eq__(self, other):
        if not isinstance(other, Settings):
            return NotImplemented
        return self.as_dict() == other.as_dict()

    def __hash__(self):
        return hash(tuple(sorted(self.as_dict().items())))


def ensure_settings(settings):
    r"""Return the given settings or the defaults if `None`."""
    return Settings() if settings is None else settings
