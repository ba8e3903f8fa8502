r"""@package funcanalysis.autodiff.rules

Local derivative rules shared by forward and reverse mode.

For every primitive operation `y = f(a)` or `y = f(a, b)`, the functions here
compute the partial derivatives of `y` w.r.t. its inputs given the input
values and the already computed output `y`. Forward mode (dual.DualNumber)
multiplies these with the input tangents, reverse mode (tape.Tape) with the
output adjoint.

Points where the function is defined but not differentiable (e.g. `abs` at
zero, `sqrt` at zero) raise errors.DomainViolation.
"""

import math

from ..errors import DomainViolation, UnsupportedOperator


__all__ = [
    "unary_partial",
    "binary_partials",
    "call_partials",
]


def _checked(op, value, arg):
    if not math.isfinite(value):
        raise DomainViolation(op, arg, "derivative is not finite")
    return value


def unary_partial(op, a, y):
    r"""Derivative of the UnaryOp kind `op` at `a`, where `y = op(a)`."""
    if op == 'neg':
        return -1.0
    if op == 'sin':
        return math.cos(a)
    if op == 'cos':
        return -math.sin(a)
    if op == 'tan':
        return _checked('tan', 1.0 + y*y, a)
    if op == 'exp':
        return y
    if op == 'ln':
        return _checked('ln', 1.0 / a, a)
    if op == 'sqrt':
        if y == 0.0:
            raise DomainViolation('sqrt', a, "derivative undefined at zero")
        return _checked('sqrt', 0.5 / y, a)
    if op == 'abs':
        if a == 0.0:
            raise DomainViolation('abs', a, "derivative undefined at zero")
        return math.copysign(1.0, a)
    raise UnsupportedOperator(op)


def _power(a, b):
    try:
        return math.pow(a, b)
    except OverflowError:
        raise DomainViolation('pow', a, "derivative is not finite")


def _pow_partials(a, b, y, need_base, need_exponent):
    da = db = 0.0
    if need_base and b != 0.0:
        if a == 0.0 and b < 1.0:
            raise DomainViolation('pow', a, "derivative undefined at zero")
        da = _checked('pow', b * _power(a, b - 1.0), a)
    if need_exponent:
        if a > 0.0:
            db = _checked('pow', y * math.log(a), a)
        elif not (a == 0.0 and b > 0.0):
            raise DomainViolation(
                'pow', a, "derivative w.r.t. the exponent needs a positive base"
            )
    return da, db


def binary_partials(op, a, b, y, need=(True, True)):
    r"""Partial derivatives of a BinaryOp kind.

    @param op
        Operator kind (``'add'``, ``'sub'``, ``'mul'``, ``'div'``, ``'pow'``).
    @param a,b
        Input values.
    @param y
        Output value `op(a, b)`.
    @param need
        Pair of booleans telling which partials are actually used. A partial
        that is not needed is reported as zero, which avoids spurious domain
        errors, e.g. the derivative of `x^2` w.r.t. the constant exponent at
        negative `x`.

    @return Tuple `(dy/da, dy/db)`.
    """
    if op == 'add':
        return 1.0, 1.0
    if op == 'sub':
        return 1.0, -1.0
    if op == 'mul':
        return b, a
    if op == 'div':
        return _checked('div', 1.0 / b, b), _checked('div', -(a / b) / b, b)
    if op == 'pow':
        return _pow_partials(a, b, y, *need)
    raise UnsupportedOperator(op)


def call_partials(name, args, y, need=(True, True)):
    r"""Partial derivatives of a Call function, one per argument."""
    if name == 'pow':
        return _pow_partials(args[0], args[1], y, *need)
    if name in ('min', 'max'):
        a, b = args
        if a == b:
            raise DomainViolation(
                name, a, "not differentiable where the arguments are equal"
            )
        first = (a < b) if name == 'min' else (a > b)
        return (1.0, 0.0) if first else (0.0, 1.0)
    if name == 'hypot':
        if y == 0.0:
            raise DomainViolation('hypot', 0.0, "derivative undefined at the origin")
        return args[0] / y, args[1] / y
    raise UnsupportedOperator(name)
