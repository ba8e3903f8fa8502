r"""@package funcanalysis.exprs.nodes

Abstract syntax tree of parsed expressions.

An expression is a tree of Expression nodes:

    * Constant      a number, optionally labelled (``pi``, ``e``)
    * Variable      a named variable resolved from the environment
    * UnaryOp       negation and the one-argument functions (sin, cos, ...)
    * BinaryOp      add, sub, mul, div and pow
    * Call          functions taking an argument list (min, max, ...)

Nodes are immutable and own their children exclusively, so a tree may be
shared freely between threads and copied by reference. Two nodes compare
equal if they are structurally identical, which is what the parser round-trip
property relies on:

~~~.py
    expr = parse("-x^2 + 3*sin(x)")
    assert parse(str(expr)) == expr
~~~

The string form produced by str() uses the minimal number of parentheses
needed to parse back into the same tree.
"""

import math

import sympy as sp


__all__ = [
    "Expression",
    "Constant",
    "Variable",
    "UnaryOp",
    "BinaryOp",
    "Call",
    "UNARY_FUNCTIONS",
    "BINARY_OPERATORS",
    "CALL_FUNCTIONS",
    "CONSTANTS",
]


## One-argument functions represented as UnaryOp kinds.
UNARY_FUNCTIONS = ('sin', 'cos', 'tan', 'exp', 'ln', 'sqrt', 'abs')

## Binary operator kinds and their symbols.
BINARY_OPERATORS = {
    'add': '+',
    'sub': '-',
    'mul': '*',
    'div': '/',
    'pow': '^',
}

## Functions taking an argument list, with their number of arguments.
CALL_FUNCTIONS = {
    'pow': 2,
    'min': 2,
    'max': 2,
    'hypot': 2,
}

## Named constants recognized by the parser.
CONSTANTS = {
    'pi': math.pi,
    'e': math.e,
}

# Printing precedences. Atoms bind tightest.
_PREC_ADD = 10
_PREC_MUL = 20
_PREC_NEG = 30
_PREC_POW = 40
_PREC_ATOM = 50

_BINARY_PREC = {
    'add': _PREC_ADD,
    'sub': _PREC_ADD,
    'mul': _PREC_MUL,
    'div': _PREC_MUL,
    'pow': _PREC_POW,
}


def format_number(value):
    r"""Format a float such that the lexer reads back the same value.

    Integral values are printed without a decimal point.
    """
    value = float(value)
    if math.isfinite(value) and value == int(value) and abs(value) < 1e16:
        return "%d" % value
    return repr(value)


class Expression(object):
    r"""Base class of all AST nodes."""

    __slots__ = ()

    def __setattr__(self, name, value):
        raise AttributeError("%s nodes are immutable" % type(self).__name__)

    def __delattr__(self, name):
        raise AttributeError("%s nodes are immutable" % type(self).__name__)

    def _init(self, **attrs):
        for name, value in attrs.items():
            object.__setattr__(self, name, value)

    @property
    def kind(self):
        r"""Short name of the node type or operator."""
        raise NotImplementedError

    def children(self):
        r"""Tuple of direct sub expressions."""
        return ()

    def _key(self):
        raise NotImplementedError

    def __eq__(self, other):
        if not isinstance(other, Expression):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self):
        return hash(self._key())

    def __reduce__(self):
        return (type(self), self._args())

    def _args(self):
        raise NotImplementedError

    def traverse_tree(self, include_root=True):
        r"""Generator walking the complete tree in pre-order."""
        if include_root:
            yield self
        for child in self.children():
            for node in child.traverse_tree(include_root=True):
                yield node

    def node_count(self):
        r"""Number of nodes in the tree including this one."""
        return sum(1 for _ in self.traverse_tree())

    def variables(self):
        r"""Sorted list of the names of all variables in the tree."""
        return sorted(set(n.name for n in self.traverse_tree()
                          if isinstance(n, Variable)))

    def depends_on(self, name):
        r"""Whether the variable `name` occurs in this tree."""
        return any(isinstance(n, Variable) and n.name == name
                   for n in self.traverse_tree())

    def is_constant(self, value=None):
        r"""Whether this is a Constant (with the given value, if specified)."""
        return False

    def precedence(self):
        r"""Binding strength used when printing."""
        return _PREC_ATOM

    def str(self):
        r"""Return the expression as parseable text."""
        raise NotImplementedError

    def __str__(self):
        return self.str()

    def __repr__(self):
        return "<%s(%s)>" % (type(self).__name__, self.str())

    def to_sympy(self):
        r"""Convert to an equivalent SymPy expression."""
        raise NotImplementedError


class Constant(Expression):
    r"""A numeric constant.

    The optional `label` is the name of a built-in constant (e.g. ``'pi'``),
    which is used instead of the numeric value when printing.
    """

    __slots__ = ('value', 'label')

    def __init__(self, value, label=None):
        self._init(value=float(value), label=label)

    @property
    def kind(self):
        return 'const'

    def _key(self):
        return ('const', self.value, self.label)

    def _args(self):
        return (self.value, self.label)

    def is_constant(self, value=None):
        return value is None or self.value == value

    def precedence(self):
        if self.label is None and math.copysign(1.0, self.value) < 0:
            return _PREC_NEG
        return _PREC_ATOM

    def str(self):
        if self.label is not None:
            return self.label
        return format_number(self.value)

    def to_sympy(self):
        if self.label == 'pi':
            return sp.pi
        if self.label == 'e':
            return sp.E
        if math.isfinite(self.value) and self.value == int(self.value):
            return sp.Integer(int(self.value))
        return sp.Float(self.value)


class Variable(Expression):
    r"""A variable looked up in the evaluation environment."""

    __slots__ = ('name',)

    def __init__(self, name):
        self._init(name=name)

    @property
    def kind(self):
        return 'var'

    def _key(self):
        return ('var', self.name)

    def _args(self):
        return (self.name,)

    def str(self):
        return self.name

    def to_sympy(self):
        return sp.Symbol(self.name)


class UnaryOp(Expression):
    r"""Negation (kind ``'neg'``) or a one-argument function."""

    __slots__ = ('op', 'operand')

    def __init__(self, op, operand):
        if not isinstance(operand, Expression):
            raise TypeError("operand must be an Expression")
        self._init(op=op, operand=operand)

    @property
    def kind(self):
        return self.op

    def children(self):
        return (self.operand,)

    def _key(self):
        return ('unary', self.op, self.operand._key())

    def _args(self):
        return (self.op, self.operand)

    def precedence(self):
        return _PREC_NEG if self.op == 'neg' else _PREC_ATOM

    def str(self):
        if self.op == 'neg':
            s = self.operand.str()
            p = self.operand.precedence()
            if p < _PREC_NEG or (p == _PREC_NEG and isinstance(self.operand, Constant)):
                return "-(%s)" % s
            return "-" + s
        return "%s(%s)" % (self.op, self.operand.str())

    def to_sympy(self):
        arg = self.operand.to_sympy()
        if self.op == 'neg':
            return -arg
        funcs = dict(sin=sp.sin, cos=sp.cos, tan=sp.tan, exp=sp.exp,
                     ln=sp.log, sqrt=sp.sqrt, abs=sp.Abs)
        try:
            return funcs[self.op](arg)
        except KeyError:
            raise NotImplementedError("No SymPy equivalent for '%s'" % self.op)


class BinaryOp(Expression):
    r"""One of the binary operators ``add sub mul div pow``."""

    __slots__ = ('op', 'left', 'right')

    def __init__(self, op, left, right):
        if not (isinstance(left, Expression) and isinstance(right, Expression)):
            raise TypeError("operands must be Expressions")
        self._init(op=op, left=left, right=right)

    @property
    def kind(self):
        return self.op

    def children(self):
        return (self.left, self.right)

    def _key(self):
        return ('binary', self.op, self.left._key(), self.right._key())

    def _args(self):
        return (self.op, self.left, self.right)

    def precedence(self):
        return _BINARY_PREC.get(self.op, _PREC_ATOM)

    def str(self):
        prec = self.precedence()
        symbol = BINARY_OPERATORS.get(self.op)
        if symbol is None:
            return "%s(%s, %s)" % (self.op, self.left.str(), self.right.str())
        lp = self.left.precedence()
        rp = self.right.precedence()
        if self.op == 'pow':
            # right associative
            wrap_left = lp <= prec
            wrap_right = rp < prec
        else:
            wrap_left = lp < prec
            wrap_right = rp <= prec
        left = self.left.str()
        right = self.right.str()
        if wrap_left:
            left = "(%s)" % left
        if wrap_right:
            right = "(%s)" % right
        return "%s%s%s" % (left, symbol, right)

    def to_sympy(self):
        a = self.left.to_sympy()
        b = self.right.to_sympy()
        if self.op == 'add':
            return a + b
        if self.op == 'sub':
            return a - b
        if self.op == 'mul':
            return a * b
        if self.op == 'div':
            return a / b
        if self.op == 'pow':
            return a ** b
        raise NotImplementedError("No SymPy equivalent for '%s'" % self.op)


class Call(Expression):
    r"""A function applied to an argument list, e.g. ``max(x, 0)``."""

    __slots__ = ('name', 'args')

    def __init__(self, name, args):
        args = tuple(args)
        if not all(isinstance(a, Expression) for a in args):
            raise TypeError("arguments must be Expressions")
        self._init(name=name, args=args)

    @property
    def kind(self):
        return self.name

    def children(self):
        return self.args

    def _key(self):
        return ('call', self.name, tuple(a._key() for a in self.args))

    def _args(self):
        return (self.name, self.args)

    def str(self):
        return "%s(%s)" % (self.name, ", ".join(a.str() for a in self.args))

    def to_sympy(self):
        args = [a.to_sympy() for a in self.args]
        funcs = dict(
            pow=lambda a, b: a ** b,
            min=sp.Min,
            max=sp.Max,
            hypot=lambda a, b: sp.sqrt(a**2 + b**2),
        )
        try:
            return funcs[self.name](*args)
        except KeyError:
            raise NotImplementedError("No SymPy equivalent for '%s'" % self.name)
