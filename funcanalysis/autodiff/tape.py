r"""@package funcanalysis.autodiff.tape

Reverse mode automatic differentiation using a tape (Wengert list).

Recording evaluates the expression once and appends one TapeEntry per
primitive operation. Every entry refers to its inputs by index, and inputs
always have smaller indices than the entries using them. The backward pass
then walks the tape in reverse order, starting with an adjoint of 1 for the
output, and accumulates the adjoint of each entry into its inputs using the
local derivative rules of the rules module.

One backward pass yields the derivatives w.r.t. all variables at once, which
is what gradient() returns.

@b Examples

```
    >>> tape = Tape.record(parse("x*y + sin(x)"), dict(x=0.0, y=3.0))
    >>> tape.value
    0.0
    >>> tape.backward().gradient()
    {'x': 4.0, 'y': 0.0}
```
"""

from collections import namedtuple
import math

import numpy as np

from ..errors import DomainViolation, UnsupportedOperator
from ..exprs.evaluators import ArithmeticContext, evaluate
from ..exprs.evaluators import UNARY_FLOAT, BINARY_FLOAT, CALL_FLOAT
from .rules import unary_partial, binary_partials, call_partials


__all__ = [
    "TapeEntry",
    "Tape",
    "Adjoints",
    "TapeContext",
    "reverse_derivative",
    "gradient",
]


## One recorded operation.
##
## `op` is the primitive kind, or ``'const'``/``'var'`` for leaves. For
## ``'var'`` leaves, `inputs` is empty and `name` holds the variable name.
## `active` tells whether the value depends on any variable at all.
TapeEntry = namedtuple('TapeEntry', ['op', 'kind', 'inputs', 'value', 'active', 'name'])


class Tape(object):
    r"""Append-only record of one forward evaluation."""

    def __init__(self):
        self._entries = []
        self._frozen = False
        ## Index of the output entry (set when recording finishes).
        self.output = None

    @classmethod
    def record(cls, expr, environment):
        r"""Evaluate `expr` and return the finished tape.

        @b Raises
            errors.DomainViolation and other evaluation errors exactly as
            evaluators.evaluate() would.
        """
        tape = cls()
        tape.output = evaluate(expr, environment, TapeContext(tape))
        tape.freeze()
        return tape

    def append(self, op, kind, inputs, value, name=None):
        r"""Add an entry and return its index."""
        if self._frozen:
            raise RuntimeError("Cannot append to a finished tape.")
        for i in inputs:
            if not 0 <= i < len(self._entries):
                raise ValueError("Tape inputs must refer to earlier entries.")
        if op == 'var':
            active = True
        else:
            active = any(self._entries[i].active for i in inputs)
        self._entries.append(TapeEntry(op, kind, tuple(inputs), value, active, name))
        return len(self._entries) - 1

    def freeze(self):
        r"""Finish recording. Further appends raise `RuntimeError`."""
        self._frozen = True

    @property
    def entries(self):
        r"""Tuple of all entries in recording order."""
        return tuple(self._entries)

    def __len__(self):
        return len(self._entries)

    def __getitem__(self, idx):
        return self._entries[idx]

    @property
    def value(self):
        r"""Value of the recorded expression."""
        return self._entries[self.output].value

    def backward(self):
        r"""Propagate adjoints from the output back to all entries.

        @return An Adjoints object.
        """
        if self.output is None:
            raise RuntimeError("Nothing recorded.")
        adjoints = np.zeros(len(self._entries))
        adjoints[self.output] = 1.0
        for idx in range(self.output, -1, -1):
            entry = self._entries[idx]
            adj = adjoints[idx]
            if adj == 0.0 or not entry.active or not entry.inputs:
                continue
            for j, p in zip(entry.inputs, self._partials(entry)):
                if self._entries[j].active:
                    adjoints[j] += p * adj
                    if not math.isfinite(adjoints[j]):
                        raise DomainViolation(entry.kind, None, "derivative is not finite")
        return Adjoints(self, adjoints)

    def _partials(self, entry):
        args = [self._entries[j].value for j in entry.inputs]
        need = tuple(self._entries[j].active for j in entry.inputs)
        if entry.op == 'unary':
            return (unary_partial(entry.kind, args[0], entry.value),)
        if entry.op == 'binary':
            return binary_partials(entry.kind, args[0], args[1], entry.value, need)
        if entry.op == 'call':
            return call_partials(entry.kind, args, entry.value, need)
        raise UnsupportedOperator(entry.op)


class Adjoints(object):
    r"""Result of Tape.backward()."""

    def __init__(self, tape, values):
        ## The tape the adjoints belong to.
        self.tape = tape
        ## NumPy array with one adjoint per tape entry.
        self.values = values

    def __getitem__(self, idx):
        return self.values[idx]

    def derivative(self, variable):
        r"""Derivative of the output w.r.t. `variable` (zero if absent)."""
        return self.gradient().get(variable, 0.0)

    def gradient(self):
        r"""Dict mapping each variable name to the output's derivative."""
        result = dict()
        for idx, entry in enumerate(self.tape.entries):
            if entry.op == 'var':
                result[entry.name] = result.get(entry.name, 0.0) + float(self.values[idx])
        return result


class TapeContext(ArithmeticContext):
    r"""Arithmetic context recording onto a Tape.

    Values in this context are tape indices. Each variable gets a single leaf
    entry, no matter how often it occurs in the expression.
    """

    def __init__(self, tape):
        ## The tape being recorded.
        self.tape = tape
        self._leaves = dict()

    def _value(self, idx):
        return self.tape[idx].value

    def constant(self, value):
        return self.tape.append('const', 'const', (), value)

    def variable(self, name, value):
        if name not in self._leaves:
            self._leaves[name] = self.tape.append('var', 'var', (), float(value), name=name)
        return self._leaves[name]

    def unary(self, op, a):
        func = _lookup(UNARY_FLOAT, op)
        return self.tape.append('unary', op, (a,), func(self._value(a)))

    def binary(self, op, a, b):
        func = _lookup(BINARY_FLOAT, op)
        return self.tape.append('binary', op, (a, b),
                                func(self._value(a), self._value(b)))

    def call(self, name, args):
        func = _lookup(CALL_FLOAT, name)
        return self.tape.append('call', name, args,
                                func(*[self._value(a) for a in args]))


def _lookup(table, op):
    try:
        return table[op]
    except KeyError:
        raise UnsupportedOperator(op)


def reverse_derivative(expr, environment, variable):
    r"""Derivative of `expr` w.r.t. `variable` computed in reverse mode.

    Raises the same errors as dual.forward_derivative().
    """
    return Tape.record(expr, environment).backward().derivative(variable)


def gradient(expr, environment):
    r"""Value and all partial derivatives of `expr` in one reverse pass.

    @return Tuple `(value, grad)` where `grad` maps every variable of
        `expr` to its partial derivative.
    """
    tape = Tape.record(expr, environment)
    return tape.value, tape.backward().gradient()
