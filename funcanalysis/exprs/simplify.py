r"""@package funcanalysis.exprs.simplify

Basic algebraic simplification of expression trees.

This is not a computer algebra system. simplify() performs

    * constant folding, as long as the folded value is defined and finite,
    * identity elimination (`x+0`, `x*1`, `x*0`, `x^1`, `x^0`, `--x`, ...),
    * sign normalization (`x+(-3)` becomes `x-3`, `-1*x` becomes `-x`),
    * polynomial normalization: an expression that is a polynomial in a single
      variable with numeric coefficients is expanded and its terms collected
      and ordered by descending power, provided this does not make the tree
      larger.

It is used on its own (analysis mode 1) and to clean up symbolic derivatives.

@b Examples

```
    >>> str(simplify(parse("1*x^2 + 0 + x*2 + 1")))
    'x^2+2*x+1'
    >>> str(simplify(parse("3*x^(3-1)*1 - 3*1")))
    '3*x^2-3'
```
"""

import math

from ..errors import DomainViolation
from .nodes import Constant, Variable, UnaryOp, BinaryOp, Call
from .evaluators import UNARY_FLOAT, BINARY_FLOAT, CALL_FLOAT


__all__ = [
    "simplify",
    "as_polynomial",
    "from_polynomial",
]


## Maximum number of rule passes before giving up on reaching a fixed point.
MAX_PASSES = 10

## Polynomials of higher degree are not expanded.
MAX_DEGREE = 16


def simplify(expr, polynomials=True):
    r"""Return a simplified, equivalent expression tree.

    @param expr
        Expression to simplify. It is not modified (nodes are immutable).
    @param polynomials
        Whether to try polynomial normalization. Default is `True`.
    """
    result = expr
    for _ in range(MAX_PASSES):
        new = _simplify(result)
        if new == result:
            break
        result = new
    if polynomials:
        result = _normalize_polynomial(result)
    return result


def _plain_const(node, value=None):
    r"""Whether `node` is an unlabelled constant (of the given value)."""
    return (isinstance(node, Constant) and node.label is None
            and (value is None or node.value == value))


def _fold(func, *args):
    r"""Apply a float function to constants, or return None if undefined."""
    try:
        return Constant(func(*[a.value for a in args]))
    except DomainViolation:
        return None


def _negative_product(node):
    r"""Whether `node` is a product with a negative numeric left factor."""
    return (isinstance(node, BinaryOp) and node.op == 'mul'
            and _plain_const(node.left) and node.left.value < 0)


def _simplify(node):
    if isinstance(node, UnaryOp):
        return _simplify_unary(node.op, _simplify(node.operand))
    if isinstance(node, BinaryOp):
        return _simplify_binary(node.op, _simplify(node.left), _simplify(node.right))
    if isinstance(node, Call):
        args = [_simplify(a) for a in node.args]
        if node.name in CALL_FLOAT and all(_plain_const(a) for a in args):
            folded = _fold(CALL_FLOAT[node.name], *args)
            if folded is not None:
                return folded
        return Call(node.name, args)
    return node


def _simplify_unary(op, a):
    if op == 'neg':
        if _plain_const(a):
            return Constant(-a.value)
        if isinstance(a, UnaryOp) and a.op == 'neg':
            return a.operand
        if isinstance(a, BinaryOp) and a.op == 'mul' and _plain_const(a.left):
            return _simplify_binary('mul', Constant(-a.left.value), a.right)
        return UnaryOp('neg', a)
    if op in UNARY_FLOAT and _plain_const(a):
        folded = _fold(UNARY_FLOAT[op], a)
        if folded is not None:
            return folded
    return UnaryOp(op, a)


def _simplify_binary(op, a, b):
    if op in BINARY_FLOAT and _plain_const(a) and _plain_const(b):
        folded = _fold(BINARY_FLOAT[op], a, b)
        if folded is not None:
            return folded
    if op == 'add':
        if _plain_const(a, 0):
            return b
        if _plain_const(b, 0):
            return a
        if _plain_const(b) and b.value < 0:
            return BinaryOp('sub', a, Constant(-b.value))
        if isinstance(b, UnaryOp) and b.op == 'neg':
            return BinaryOp('sub', a, b.operand)
        if isinstance(a, UnaryOp) and a.op == 'neg':
            return BinaryOp('sub', b, a.operand)
        if _negative_product(b):
            return BinaryOp('sub', a, _simplify_unary('neg', b))
    elif op == 'sub':
        if _plain_const(b, 0):
            return a
        if _plain_const(a, 0):
            return _simplify_unary('neg', b)
        if a == b:
            return Constant(0.0)
        if _plain_const(b) and b.value < 0:
            return BinaryOp('add', a, Constant(-b.value))
        if isinstance(b, UnaryOp) and b.op == 'neg':
            return BinaryOp('add', a, b.operand)
        if _negative_product(b):
            return BinaryOp('add', a, _simplify_unary('neg', b))
    elif op == 'mul':
        if _plain_const(a, 0) or _plain_const(b, 0):
            return Constant(0.0)
        if _plain_const(a, 1):
            return b
        if _plain_const(b, 1):
            return a
        if _plain_const(b) and not _plain_const(a):
            a, b = b, a
        if _plain_const(a, -1):
            return _simplify_unary('neg', b)
        if (_plain_const(a) and isinstance(b, BinaryOp) and b.op == 'mul'
                and _plain_const(b.left)):
            folded = _fold(BINARY_FLOAT['mul'], a, b.left)
            if folded is not None:
                return _simplify_binary('mul', folded, b.right)
        if isinstance(a, UnaryOp) and a.op == 'neg' and isinstance(b, UnaryOp) and b.op == 'neg':
            return BinaryOp('mul', a.operand, b.operand)
    elif op == 'div':
        if _plain_const(b, 1):
            return a
        if _plain_const(a, 0) and not _plain_const(b, 0):
            return Constant(0.0)
        if _plain_const(b, -1):
            return _simplify_unary('neg', a)
    elif op == 'pow':
        if _plain_const(b, 1):
            return a
        if _plain_const(b, 0):
            return Constant(1.0)
        if _plain_const(a, 1):
            return Constant(1.0)
    return BinaryOp(op, a, b)


def as_polynomial(expr, variable):
    r"""Return the coefficients of a polynomial in `variable`, or `None`.

    The result is a dict mapping powers to (non-zero) coefficients. `None` is
    returned if the expression is not a polynomial with numeric coefficients
    of degree at most MAX_DEGREE.
    """
    poly = _poly(expr, variable)
    if poly is None or not all(math.isfinite(c) for c in poly.values()):
        return None
    return dict((n, c) for n, c in poly.items() if c != 0.0)


def _poly_add(p, q, sign=1.0):
    r = dict(p)
    for n, c in q.items():
        r[n] = r.get(n, 0.0) + sign * c
    return r


def _poly_mul(p, q):
    r = dict()
    for n1, c1 in p.items():
        for n2, c2 in q.items():
            r[n1+n2] = r.get(n1+n2, 0.0) + c1 * c2
    if r and max(r) > MAX_DEGREE:
        return None
    return r


def _poly(node, var):
    if isinstance(node, Constant):
        return {0: node.value} if node.label is None else None
    if isinstance(node, Variable):
        return {1: 1.0} if node.name == var else None
    if isinstance(node, UnaryOp):
        if node.op != 'neg':
            return None
        p = _poly(node.operand, var)
        return None if p is None else dict((n, -c) for n, c in p.items())
    if isinstance(node, BinaryOp):
        p = _poly(node.left, var)
        if p is None:
            return None
        if node.op == 'pow':
            if not _plain_const(node.right):
                return None
            k = node.right.value
            if k < 0 or k != int(k) or k > MAX_DEGREE:
                return None
            result = {0: 1.0}
            for _ in range(int(k)):
                result = _poly_mul(result, p)
                if result is None:
                    return None
            return result
        q = _poly(node.right, var)
        if q is None:
            return None
        if node.op == 'add':
            return _poly_add(p, q)
        if node.op == 'sub':
            return _poly_add(p, q, -1.0)
        if node.op == 'mul':
            return _poly_mul(p, q)
        if node.op == 'div':
            if list(q) != [0] or q[0] == 0.0:
                return None
            return dict((n, c / q[0]) for n, c in p.items())
    return None


def from_polynomial(coeffs, variable):
    r"""Build the canonical expression for a polynomial.

    Terms are ordered by descending power. Negative coefficients of all but
    the leading term turn into subtractions.
    """
    terms = sorted(((n, c) for n, c in coeffs.items() if c != 0.0), reverse=True)
    if not terms:
        return Constant(0.0)
    x = Variable(variable)
    def monomial(n):
        if n == 1:
            return x
        return BinaryOp('pow', x, Constant(n))
    def term(n, c):
        if n == 0:
            return Constant(c)
        if c == 1.0:
            return monomial(n)
        if c == -1.0:
            return UnaryOp('neg', monomial(n))
        return BinaryOp('mul', Constant(c), monomial(n))
    n, c = terms[0]
    result = term(n, c)
    for n, c in terms[1:]:
        if c < 0:
            result = BinaryOp('sub', result, term(n, -c))
        else:
            result = BinaryOp('add', result, term(n, c))
    return result


def _normalize_polynomial(expr):
    variables = expr.variables()
    if len(variables) != 1:
        return expr
    var = variables[0]
    coeffs = as_polynomial(expr, var)
    if coeffs is None:
        return expr
    canonical = from_polynomial(coeffs, var)
    if canonical.node_count() <= expr.node_count():
        return canonical
    return expr
