r"""@package funcanalysis.exprs.evaluators

Numeric evaluation of expression trees.

There are two ways to evaluate a nodes.Expression:

    * evaluate() walks the tree on every call. The primitive operations are
      delegated to an *arithmetic context*, which allows the very same walk
      to compute plain floats (FloatContext), dual numbers for forward mode
      differentiation or to record a tape for reverse mode differentiation
      (see the funcanalysis.autodiff package).
    * evaluator() takes a snapshot of the tree and turns it into a callable
      Evaluator object built from nested closures. This avoids the dispatch
      overhead of the tree walk and is what the sampler and the benchmark
      harness use for repeated evaluation.

Both report mathematically undefined operations by raising
errors.DomainViolation instead of producing `inf` or `nan`, and missing
variables by raising errors.UnboundVariable.

@b Examples

```
    >>> expr = parse("sqrt(x) + y")
    >>> evaluate(expr, dict(x=4.0, y=1.0))
    3.0
    >>> f = evaluator(expr).function('x', dict(y=1.0))
    >>> f(9.0)
    4.0
```
"""

import math

from ..errors import DomainViolation, UnboundVariable, UnsupportedOperator
from .nodes import Constant, Variable, UnaryOp, BinaryOp, Call


__all__ = [
    "evaluate",
    "evaluator",
    "Evaluator",
    "ArithmeticContext",
    "FloatContext",
    "free_variables",
    "default_environment",
    "UNARY_FLOAT",
    "BINARY_FLOAT",
    "CALL_FLOAT",
]


def _finite(op, value, arg=None):
    r"""Return `value` if it is finite and raise DomainViolation otherwise."""
    if math.isfinite(value):
        return value
    raise DomainViolation(op, arg, "result is not finite")


def _neg(a):
    return -a


def _sin(a):
    return math.sin(a)


def _cos(a):
    return math.cos(a)


def _tan(a):
    if math.cos(a) == 0.0:
        raise DomainViolation('tan', a, "pole of tan")
    return _finite('tan', math.tan(a), a)


def _exp(a):
    try:
        return _finite('exp', math.exp(a), a)
    except OverflowError:
        raise DomainViolation('exp', a, "overflow")


def _ln(a):
    if a <= 0.0:
        raise DomainViolation('ln', a, "logarithm of a non-positive number")
    return math.log(a)


def _sqrt(a):
    if a < 0.0:
        raise DomainViolation('sqrt', a, "square root of a negative number")
    return math.sqrt(a)


def _add(a, b):
    return _finite('add', a + b)


def _sub(a, b):
    return _finite('sub', a - b)


def _mul(a, b):
    return _finite('mul', a * b)


def _div(a, b):
    if b == 0.0:
        raise DomainViolation('div', b, "division by zero")
    return _finite('div', a / b)


def _pow(a, b):
    if a == 0.0 and b < 0.0:
        raise DomainViolation('pow', a, "division by zero")
    if a < 0.0 and b != int(b):
        raise DomainViolation('pow', a, "negative base with non-integer exponent")
    try:
        return _finite('pow', math.pow(a, b), a)
    except OverflowError:
        raise DomainViolation('pow', a, "overflow")


def _hypot(a, b):
    return _finite('hypot', math.hypot(a, b))


## Checked float implementations of the UnaryOp kinds.
UNARY_FLOAT = {
    'neg': _neg,
    'sin': _sin,
    'cos': _cos,
    'tan': _tan,
    'exp': _exp,
    'ln': _ln,
    'sqrt': _sqrt,
    'abs': abs,
}

## Checked float implementations of the BinaryOp kinds.
BINARY_FLOAT = {
    'add': _add,
    'sub': _sub,
    'mul': _mul,
    'div': _div,
    'pow': _pow,
}

## Checked float implementations of the Call functions.
CALL_FLOAT = {
    'pow': _pow,
    'min': min,
    'max': max,
    'hypot': _hypot,
}


class ArithmeticContext(object):
    r"""Interface of the primitive operations used by evaluate().

    Sub classes decide what a "value" is (a float, a dual number, an index
    into a tape, ...) by implementing the five methods below.
    """

    def constant(self, value):
        r"""Value representing a constant."""
        raise NotImplementedError

    def variable(self, name, value):
        r"""Value representing a variable bound to the float `value`."""
        raise NotImplementedError

    def unary(self, op, a):
        r"""Apply the UnaryOp kind `op`."""
        raise NotImplementedError

    def binary(self, op, a, b):
        r"""Apply the BinaryOp kind `op`."""
        raise NotImplementedError

    def call(self, name, args):
        r"""Apply the Call function `name` to a list of values."""
        raise NotImplementedError


class FloatContext(ArithmeticContext):
    r"""Context evaluating with plain IEEE-754 doubles."""

    def constant(self, value):
        return value

    def variable(self, name, value):
        return float(value)

    def unary(self, op, a):
        try:
            func = UNARY_FLOAT[op]
        except KeyError:
            raise UnsupportedOperator(op)
        return func(a)

    def binary(self, op, a, b):
        try:
            func = BINARY_FLOAT[op]
        except KeyError:
            raise UnsupportedOperator(op)
        return func(a, b)

    def call(self, name, args):
        try:
            func = CALL_FLOAT[name]
        except KeyError:
            raise UnsupportedOperator(name)
        return func(*args)


def evaluate(expr, environment=None, ctx=None):
    r"""Evaluate an expression tree.

    @param expr
        The nodes.Expression to evaluate.
    @param environment
        Mapping of variable names to numbers. Not modified.
    @param ctx
        ArithmeticContext to compute with. Default is a FloatContext, in which
        case the result is a float.
    """
    if environment is None:
        environment = {}
    if ctx is None:
        ctx = FloatContext()
    return _walk(expr, environment, ctx)


def _walk(node, env, ctx):
    if isinstance(node, Constant):
        return ctx.constant(node.value)
    if isinstance(node, Variable):
        try:
            value = env[node.name]
        except KeyError:
            raise UnboundVariable(node.name)
        return ctx.variable(node.name, value)
    if isinstance(node, UnaryOp):
        return ctx.unary(node.op, _walk(node.operand, env, ctx))
    if isinstance(node, BinaryOp):
        return ctx.binary(node.op, _walk(node.left, env, ctx),
                          _walk(node.right, env, ctx))
    if isinstance(node, Call):
        return ctx.call(node.name, [_walk(a, env, ctx) for a in node.args])
    raise UnsupportedOperator(type(node).__name__)


def free_variables(expr):
    r"""Sorted names of all variables occurring in an expression."""
    return expr.variables()


def default_environment(expr, point, variable=None, value=None):
    r"""Bind every free variable of `expr` to `point`.

    If `variable` is given, it is bound to `value` instead (and included even
    if it does not occur in the expression).
    """
    env = dict((name, float(point)) for name in expr.variables())
    if variable is not None:
        env[variable] = float(point if value is None else value)
    return env


class Evaluator(object):
    r"""Callable snapshot of an expression tree.

    Upon creation, the tree is translated into nested closures. Calling the
    evaluator with an environment computes the value, exactly as evaluate()
    would, just faster.
    """

    def __init__(self, expr):
        r"""Compile an expression.

        @param expr
            The nodes.Expression to compile.

        @b Raises
            errors.UnsupportedOperator if the tree contains unknown operators.
        """
        ## The expression this evaluator was created for.
        self.expr = expr
        self._f = _compile(expr)

    def __call__(self, environment):
        r"""Evaluate with the given variable environment."""
        return self._f(environment)

    def function(self, variable='x', environment=None):
        r"""Return a callable of one variable.

        The returned function maps `x` to the value of the expression with
        `variable` bound to `x` and all other variables taken from
        `environment`.
        """
        base = dict(environment or {})
        f = self._f
        def fn(x):
            env = dict(base)
            env[variable] = x
            return f(env)
        return fn


def evaluator(expr):
    r"""Create an Evaluator for an expression."""
    return Evaluator(expr)


def _compile(node):
    r"""Turn a tree into a closure taking an environment."""
    if isinstance(node, Constant):
        c = node.value
        return lambda env: c
    if isinstance(node, Variable):
        name = node.name
        def var(env):
            try:
                return float(env[name])
            except KeyError:
                raise UnboundVariable(name)
        return var
    if isinstance(node, UnaryOp):
        try:
            func = UNARY_FLOAT[node.op]
        except KeyError:
            raise UnsupportedOperator(node.op)
        a = _compile(node.operand)
        return lambda env: func(a(env))
    if isinstance(node, BinaryOp):
        try:
            func = BINARY_FLOAT[node.op]
        except KeyError:
            raise UnsupportedOperator(node.op)
        a = _compile(node.left)
        b = _compile(node.right)
        return lambda env: func(a(env), b(env))
    if isinstance(node, Call):
        try:
            func = CALL_FLOAT[node.name]
        except KeyError:
            raise UnsupportedOperator(node.name)
        args = [_compile(arg) for arg in node.args]
        return lambda env: func(*[a(env) for a in args])
    raise UnsupportedOperator(type(node).__name__)
