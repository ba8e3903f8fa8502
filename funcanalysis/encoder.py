r"""@package funcanalysis.encoder

Serialization of operation results into self-contained JSON payloads.

Every payload is a JSON object of one of the two forms

    {"ok": true,  "operation": ..., "expression": ..., "result": {...}}
    {"ok": false, "operation": ..., "expression": ..., "error": {...}}

The output is strict JSON: non-finite floats never appear. Values that are
not finite are encoded as `null`, the same marker used for sampling gaps.
NumPy scalars and arrays are converted to plain Python numbers and lists.
"""

import json
import math

import numpy as np


__all__ = [
    "encode_result",
    "encode_error",
    "to_json_compatible",
]


def to_json_compatible(obj):
    r"""Recursively convert an object into plain, strictly encodable types."""
    if isinstance(obj, dict):
        return dict((str(k), to_json_compatible(v)) for k, v in obj.items())
    if isinstance(obj, (list, tuple)):
        return [to_json_compatible(v) for v in obj]
    if isinstance(obj, np.ndarray):
        return [to_json_compatible(v) for v in obj.tolist()]
    if isinstance(obj, (bool, np.bool_)):
        return bool(obj)
    if isinstance(obj, (int, np.integer)):
        return int(obj)
    if isinstance(obj, (float, np.floating)):
        obj = float(obj)
        return obj if math.isfinite(obj) else None
    if obj is None or isinstance(obj, str):
        return obj
    return str(obj)


def _dumps(payload):
    return json.dumps(to_json_compatible(payload), allow_nan=False)


def encode_result(operation, expression, result):
    r"""Encode a successful result.

    @param operation
        Name of the operation, e.g. ``'analyze'``.
    @param expression
        The expression text as given by the caller.
    @param result
        JSON compatible dict (after to_json_compatible()).
    """
    return _dumps(dict(ok=True, operation=operation, expression=expression,
                       result=result))


def encode_error(operation, expression, error):
    r"""Encode a failure.

    @param error
        An errors.EngineError (using its `to_dict()`) or a dict with at least
        `type` and `message`.
    """
    if not isinstance(error, dict):
        error = error.to_dict()
    return _dumps(dict(ok=False, operation=operation, expression=expression,
                       error=error))
