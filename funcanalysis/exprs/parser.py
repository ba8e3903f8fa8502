r"""@package funcanalysis.exprs.parser

Precedence climbing (Pratt) parser producing nodes.Expression trees.

Operator binding, from loosest to tightest:

    +  -      binary, left associative
    *  /      binary, left associative
    -  +      unary prefix (a unary plus is dropped)
    ^         binary, right associative

Hence `-x^2` means `-(x^2)` and `2^3^2` means `2^(3^2)`, while `-2*3` is
`(-2)*3`. The right operand of `^` may itself start with a unary minus, as in
`2^-1`.

The one-argument functions of nodes.UNARY_FUNCTIONS (and `log` as an alias of
`ln`) require exactly one parenthesized argument. The functions listed in
nodes.CALL_FUNCTIONS take a comma separated argument list. The identifiers
`pi` and `e` denote the usual constants.

@b Examples

```
    >>> parse("2*(x+1)^2")
    <BinaryOp(2*(x+1)^2)>
    >>> parse("2*(3+")
    Traceback (most recent call last):
    ...
    ParseError: unmatched '(' (at position 2)
```
"""

import logging

from ..errors import ParseError
from .lexer import tokenize
from .nodes import Constant, Variable, UnaryOp, BinaryOp, Call
from .nodes import UNARY_FUNCTIONS, CALL_FUNCTIONS, CONSTANTS


__all__ = [
    "parse",
    "Parser",
]


logger = logging.getLogger(__name__)


## Function names accepted in addition to nodes.UNARY_FUNCTIONS.
FUNCTION_ALIASES = {
    'log': 'ln',
}

# (binding power, right associative)
_INFIX = {
    '+': (10, False),
    '-': (10, False),
    '*': (20, False),
    '/': (20, False),
    '^': (40, True),
}
_PREFIX_BP = 30

_OP_KINDS = {
    '+': 'add',
    '-': 'sub',
    '*': 'mul',
    '/': 'div',
    '^': 'pow',
}


def parse(text):
    r"""Parse an expression string into an AST.

    @return nodes.Expression tree.

    @b Raises
        ParseError on any malformed input. No partial trees are returned.
    """
    return Parser(text).parse()


class Parser(object):
    r"""Single-use parser for one expression string."""

    def __init__(self, text):
        ## The text being parsed.
        self.text = text
        self._tokens = None
        self._i = 0

    def parse(self):
        r"""Parse the text and return the expression tree."""
        if not isinstance(self.text, str):
            raise TypeError("expression must be a string")
        if not self.text.strip():
            raise ParseError(0, "empty expression")
        self._tokens = tokenize(self.text)
        self._i = 0
        self._check_parentheses()
        expr = self._expression(0)
        tok = self._peek()
        if tok.kind != 'end':
            raise ParseError(tok.pos, "unexpected '%s' after complete expression" % tok.text)
        logger.debug("parsed %r -> %s", self.text, expr)
        return expr

    def _check_parentheses(self):
        r"""Report unbalanced parentheses before parsing.

        Checking up front lets the error point at the parenthesis that lacks
        its partner instead of at the place where parsing happened to stop.
        """
        stack = []
        for tok in self._tokens:
            if tok.kind == 'lparen':
                stack.append(tok)
            elif tok.kind == 'rparen':
                if not stack:
                    raise ParseError(tok.pos, "unmatched ')'")
                stack.pop()
        if stack:
            raise ParseError(stack[-1].pos, "unmatched '('")

    def _peek(self):
        return self._tokens[self._i]

    def _next(self):
        tok = self._tokens[self._i]
        if tok.kind != 'end':
            self._i += 1
        return tok

    def _expect(self, kind, what):
        tok = self._next()
        if tok.kind != kind:
            raise self._unexpected(tok, "expected %s" % what)
        return tok

    def _unexpected(self, tok, reason=None):
        if tok.kind == 'end':
            msg = "unexpected end of input"
        else:
            msg = "unexpected '%s'" % tok.text
        if reason:
            msg = "%s, %s" % (msg, reason)
        return ParseError(tok.pos, msg)

    def _expression(self, min_bp):
        left = self._prefix()
        while True:
            tok = self._peek()
            if tok.kind != 'op':
                break
            bp, right_assoc = _INFIX[tok.text]
            if bp < min_bp or (bp == min_bp and not right_assoc):
                break
            self._next()
            right = self._expression(bp if right_assoc else bp + 1)
            left = BinaryOp(_OP_KINDS[tok.text], left, right)
        return left

    def _prefix(self):
        tok = self._next()
        if tok.kind == 'number':
            return Constant(tok.value)
        if tok.is_op('-'):
            return UnaryOp('neg', self._expression(_PREFIX_BP))
        if tok.is_op('+'):
            return self._expression(_PREFIX_BP)
        if tok.kind == 'lparen':
            expr = self._expression(0)
            self._expect('rparen', "')'")
            return expr
        if tok.kind == 'ident':
            return self._identifier(tok)
        raise self._unexpected(tok, "expected a number, variable or '('")

    def _identifier(self, tok):
        name = tok.text
        follows_paren = self._peek().kind == 'lparen'
        func = FUNCTION_ALIASES.get(name, name)
        if func in UNARY_FUNCTIONS:
            if not follows_paren:
                raise ParseError(tok.pos, "function '%s' requires a parenthesized argument" % name)
            args = self._arguments(tok)
            if len(args) != 1:
                raise ParseError(tok.pos, "function '%s' takes exactly one argument (%d given)"
                                 % (name, len(args)))
            return UnaryOp(func, args[0])
        if name in CALL_FUNCTIONS:
            if not follows_paren:
                raise ParseError(tok.pos, "function '%s' requires an argument list" % name)
            args = self._arguments(tok)
            if len(args) != CALL_FUNCTIONS[name]:
                raise ParseError(tok.pos, "function '%s' takes %d arguments (%d given)"
                                 % (name, CALL_FUNCTIONS[name], len(args)))
            return Call(name, args)
        if follows_paren:
            raise ParseError(tok.pos, "unknown function '%s'" % name)
        if name in CONSTANTS:
            return Constant(CONSTANTS[name], label=name)
        return Variable(name)

    def _arguments(self, func_tok):
        r"""Parse a parenthesized, comma separated argument list."""
        self._expect('lparen', "'('")
        if self._peek().kind == 'rparen':
            raise ParseError(self._peek().pos, "missing argument for '%s'" % func_tok.text)
        args = [self._expression(0)]
        while self._peek().kind == 'comma':
            self._next()
            args.append(self._expression(0))
        self._expect('rparen', "')' or ','")
        return args
