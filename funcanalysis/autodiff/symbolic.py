r"""@package funcanalysis.autodiff.symbolic

Symbolic differentiation of expression trees.

symbolic_derivative() builds a new expression tree representing the
derivative by applying the sum, product, quotient, power and chain rules
recursively. The raw result contains many trivial sub expressions (`0*x`,
`x^(2-1)`, ...) and is therefore passed through simplify.simplify().

The derivative tree is valid wherever the derivative exists. Where it does
not, evaluating the tree raises errors.DomainViolation, e.g. the derivative
of `sqrt(x)` is `1/(2*sqrt(x))`, which is undefined at zero.
"""

import logging

from ..errors import UnsupportedDifferentiation
from ..exprs.nodes import Constant, Variable, UnaryOp, BinaryOp, Call
from ..exprs.simplify import simplify


__all__ = [
    "symbolic_derivative",
]


logger = logging.getLogger(__name__)


_ZERO = Constant(0.0)
_ONE = Constant(1.0)


def symbolic_derivative(expr, variable, simplified=True):
    r"""Differentiate an expression tree w.r.t. `variable`.

    @param expr
        The nodes.Expression to differentiate.
    @param variable
        Name of the variable to differentiate w.r.t.
    @param simplified
        Whether to simplify the result. Default is `True`.

    @b Raises
        errors.UnsupportedDifferentiation for functions without a
        differentiation rule (`min`, `max`).
    """
    result = _diff(expr, variable)
    if simplified:
        result = simplify(result)
    logger.debug("d/d%s %s = %s", variable, expr, result)
    return result


def _neg(a):
    return UnaryOp('neg', a)


def _add(a, b):
    return BinaryOp('add', a, b)


def _sub(a, b):
    return BinaryOp('sub', a, b)


def _mul(a, b):
    return BinaryOp('mul', a, b)


def _div(a, b):
    return BinaryOp('div', a, b)


def _pow(a, b):
    return BinaryOp('pow', a, b)


def _diff(node, var):
    if not node.depends_on(var):
        return _ZERO
    if isinstance(node, Variable):
        return _ONE
    if isinstance(node, UnaryOp):
        return _diff_unary(node.op, node.operand, var)
    if isinstance(node, BinaryOp):
        return _diff_binary(node.op, node.left, node.right, var)
    if isinstance(node, Call):
        if node.name == 'pow':
            return _diff_pow(node.args[0], node.args[1], var)
        if node.name == 'hypot':
            a, b = node.args
            return _div(_add(_mul(a, _diff(a, var)), _mul(b, _diff(b, var))), node)
        raise UnsupportedDifferentiation(node.name)
    raise UnsupportedDifferentiation(node.kind)


def _diff_unary(op, u, var):
    du = _diff(u, var)
    if op == 'neg':
        return _neg(du)
    if op == 'sin':
        return _mul(UnaryOp('cos', u), du)
    if op == 'cos':
        return _mul(_neg(UnaryOp('sin', u)), du)
    if op == 'tan':
        return _div(du, _pow(UnaryOp('cos', u), Constant(2)))
    if op == 'exp':
        return _mul(UnaryOp('exp', u), du)
    if op == 'ln':
        return _div(du, u)
    if op == 'sqrt':
        return _div(du, _mul(Constant(2), UnaryOp('sqrt', u)))
    if op == 'abs':
        return _mul(_div(u, UnaryOp('abs', u)), du)
    raise UnsupportedDifferentiation(op)


def _diff_binary(op, u, v, var):
    if op == 'pow':
        return _diff_pow(u, v, var)
    du = _diff(u, var)
    dv = _diff(v, var)
    if op == 'add':
        return _add(du, dv)
    if op == 'sub':
        return _sub(du, dv)
    if op == 'mul':
        return _add(_mul(du, v), _mul(u, dv))
    if op == 'div':
        return _div(_sub(_mul(du, v), _mul(u, dv)), _pow(v, Constant(2)))
    raise UnsupportedDifferentiation(op)


def _diff_pow(u, v, var):
    if not v.depends_on(var):
        # power rule
        return _mul(_mul(v, _pow(u, _sub(v, _ONE))), _diff(u, var))
    if not u.depends_on(var):
        # exponential with constant base
        return _mul(_mul(_pow(u, v), UnaryOp('ln', u)), _diff(v, var))
    # general case: d(u^v) = u^v * (v' ln(u) + v u'/u)
    return _mul(
        _pow(u, v),
        _add(_mul(_diff(v, var), UnaryOp('ln', u)),
             _div(_mul(v, _diff(u, var)), u)),
    )
