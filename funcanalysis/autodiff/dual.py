r"""@package funcanalysis.autodiff.dual

Forward mode automatic differentiation using dual numbers.

A DualNumber `a + a' eps` with `eps^2 = 0` carries a value together with its
derivative w.r.t. one chosen input. Propagating such numbers through the
expression tree (via a DualContext) yields the function value and the exact
(up to rounding) derivative in a single pass.

@b Examples

```
    >>> x = DualNumber.variable(2.0)
    >>> y = x * x + 3 * x
    >>> y.value, y.deriv
    (10.0, 7.0)
    >>> forward_derivative(parse("sin(x)*y"), dict(x=0.0, y=2.0), 'x')
    2.0
```
"""

import math

from ..errors import DomainViolation, UnsupportedOperator
from ..exprs.evaluators import ArithmeticContext, evaluate
from ..exprs.evaluators import UNARY_FLOAT, BINARY_FLOAT, CALL_FLOAT
from .rules import unary_partial, binary_partials, call_partials


__all__ = [
    "DualNumber",
    "DualContext",
    "forward_derivative",
    "forward_evaluate",
]


def _lookup(table, op):
    try:
        return table[op]
    except KeyError:
        raise UnsupportedOperator(op)


def _tangent(op, value):
    if not math.isfinite(value):
        raise DomainViolation(op, None, "derivative is not finite")
    return value


class DualNumber(object):
    r"""Number `value + deriv * eps` with `eps^2 = 0`.

    Arithmetic operators work with other dual numbers and with plain numbers
    (treated as constants). All operations are checked, i.e. undefined values
    or derivatives raise errors.DomainViolation.
    """

    __slots__ = ('value', 'deriv', 'active')

    def __init__(self, value, deriv=0.0, active=None):
        ## Function value.
        self.value = float(value)
        ## Derivative w.r.t. the seeded input.
        self.deriv = float(deriv)
        ## Whether the value depends on the seeded input. A zero derivative
        ## does not imply independence, e.g. `x*x` at `x=0`.
        self.active = self.deriv != 0.0 if active is None else bool(active)

    @classmethod
    def variable(cls, value):
        r"""Seed an independent variable (derivative 1)."""
        return cls(value, 1.0, True)

    @classmethod
    def constant(cls, value):
        r"""A value not depending on the seeded input."""
        return cls(value, 0.0, False)

    @staticmethod
    def lift(other):
        r"""Convert plain numbers to constant dual numbers."""
        if isinstance(other, DualNumber):
            return other
        return DualNumber(other, 0.0, False)

    def __repr__(self):
        return "DualNumber(%r, %r)" % (self.value, self.deriv)

    def __eq__(self, other):
        if not isinstance(other, (DualNumber, int, float)):
            return NotImplemented
        other = self.lift(other)
        return self.value == other.value and self.deriv == other.deriv

    def __hash__(self):
        return hash((self.value, self.deriv))

    def apply_unary(self, op):
        r"""Apply the UnaryOp kind `op` using the chain rule."""
        y = _lookup(UNARY_FLOAT, op)(self.value)
        if not self.active:
            return DualNumber(y, 0.0, False)
        dy = unary_partial(op, self.value, y)
        return DualNumber(y, _tangent(op, dy * self.deriv), True)

    def apply_binary(self, op, other):
        r"""Apply the BinaryOp kind `op` with `self` as left operand."""
        other = self.lift(other)
        y = _lookup(BINARY_FLOAT, op)(self.value, other.value)
        need = (self.active, other.active)
        if not any(need):
            return DualNumber(y, 0.0, False)
        da, db = binary_partials(op, self.value, other.value, y, need)
        return DualNumber(y, _combine(op, (da, db), (self, other)), True)

    def __neg__(self):
        return self.apply_unary('neg')

    def __pos__(self):
        return self

    def __abs__(self):
        return self.apply_unary('abs')

    def __add__(self, other):
        return self.apply_binary('add', other)

    def __radd__(self, other):
        return self.lift(other).apply_binary('add', self)

    def __sub__(self, other):
        return self.apply_binary('sub', other)

    def __rsub__(self, other):
        return self.lift(other).apply_binary('sub', self)

    def __mul__(self, other):
        return self.apply_binary('mul', other)

    def __rmul__(self, other):
        return self.lift(other).apply_binary('mul', self)

    def __truediv__(self, other):
        return self.apply_binary('div', other)

    def __rtruediv__(self, other):
        return self.lift(other).apply_binary('div', self)

    def __pow__(self, other):
        return self.apply_binary('pow', other)

    def __rpow__(self, other):
        return self.lift(other).apply_binary('pow', self)

    def sin(self):
        return self.apply_unary('sin')

    def cos(self):
        return self.apply_unary('cos')

    def tan(self):
        return self.apply_unary('tan')

    def exp(self):
        return self.apply_unary('exp')

    def ln(self):
        return self.apply_unary('ln')

    def sqrt(self):
        return self.apply_unary('sqrt')


def _combine(op, partials, inputs):
    r"""Tangent of the output: sum of partial times input tangent."""
    total = 0.0
    for p, x in zip(partials, inputs):
        if x.active:
            total += p * x.deriv
    return _tangent(op, total)


class DualContext(ArithmeticContext):
    r"""Arithmetic context evaluating with dual numbers.

    The variable named `seed` gets derivative 1, all others derivative 0.
    """

    def __init__(self, seed):
        ## Name of the variable to differentiate w.r.t.
        self.seed = seed

    def constant(self, value):
        return DualNumber.constant(value)

    def variable(self, name, value):
        if name == self.seed:
            return DualNumber.variable(value)
        return DualNumber.constant(value)

    def unary(self, op, a):
        return a.apply_unary(op)

    def binary(self, op, a, b):
        return a.apply_binary(op, b)

    def call(self, name, args):
        values = [a.value for a in args]
        y = _lookup(CALL_FLOAT, name)(*values)
        need = tuple(a.active for a in args)
        if not any(need):
            return DualNumber(y, 0.0, False)
        partials = call_partials(name, values, y, need)
        return DualNumber(y, _combine(name, partials, args), True)


def forward_evaluate(expr, environment, variable):
    r"""Return the DualNumber of value and derivative w.r.t. `variable`."""
    return evaluate(expr, environment, DualContext(variable))


def forward_derivative(expr, environment, variable):
    r"""Derivative of `expr` w.r.t. `variable` at the given environment.

    @param expr
        Expression tree to differentiate.
    @param environment
        Mapping of all variable names to values.
    @param variable
        The variable to differentiate w.r.t. It need not occur in `expr`
        (the result is then zero), but other variables must be bound.

    @b Raises
        errors.DomainViolation if the function or its derivative is undefined
        at the given point, errors.UnboundVariable for missing variables.
    """
    return forward_evaluate(expr, environment, variable).deriv
