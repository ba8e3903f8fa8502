r"""@package funcanalysis.exprs.lexer

Tokenizer for expression strings.

The lexer turns the text into a list of immutable Token objects, always
terminated by a token of kind ``'end'``. Every token knows the character
offset at which it starts so that parse errors can point to the problem.

@b Examples

```
    >>> [t.text for t in tokenize("2*sin(x)")]
    ['2', '*', 'sin', '(', 'x', ')', '']
```
"""

from collections import namedtuple
import math

from ..errors import ParseError


__all__ = [
    "Token",
    "tokenize",
]


## Characters forming single character operator tokens.
OPERATORS = "+-*/^"


class Token(namedtuple('Token', ['kind', 'text', 'pos', 'value'])):
    r"""A lexical unit.

    Attributes are `kind` (one of ``'number'``, ``'ident'``, ``'op'``,
    ``'lparen'``, ``'rparen'``, ``'comma'``, ``'end'``), the original `text`,
    the start position `pos` and, for numbers, the float `value`.
    """
    __slots__ = ()

    def __new__(cls, kind, text, pos, value=None):
        return super(Token, cls).__new__(cls, kind, text, pos, value)

    def is_op(self, *ops):
        r"""Return whether this is one of the given operators."""
        return self.kind == 'op' and self.text in ops


def tokenize(text):
    r"""Split an expression string into tokens.

    @return List of Token objects ending with an ``'end'`` token.

    @b Raises
        ParseError for characters that cannot start a token and for malformed
        numeric literals.
    """
    tokens = []
    i = 0
    n = len(text)
    while i < n:
        c = text[i]
        if c.isspace():
            i += 1
        elif c.isdigit() or c == '.':
            end = _scan_number(text, i)
            literal = text[i:end]
            try:
                value = float(literal)
            except ValueError:
                raise ParseError(i, "malformed number '%s'" % literal)
            if not math.isfinite(value):
                raise ParseError(i, "number out of range '%s'" % literal)
            tokens.append(Token('number', literal, i, value))
            i = end
        elif c.isalpha() or c == '_':
            end = i + 1
            while end < n and (text[end].isalnum() or text[end] == '_'):
                end += 1
            tokens.append(Token('ident', text[i:end], i))
            i = end
        elif c in OPERATORS:
            tokens.append(Token('op', c, i))
            i += 1
        elif c == '(':
            tokens.append(Token('lparen', c, i))
            i += 1
        elif c == ')':
            tokens.append(Token('rparen', c, i))
            i += 1
        elif c == ',':
            tokens.append(Token('comma', c, i))
            i += 1
        else:
            raise ParseError(i, "unexpected character '%s'" % c)
    tokens.append(Token('end', '', n))
    return tokens


def _scan_number(text, start):
    r"""Return the end index of the numeric literal starting at `start`.

    The scan is greedy: all digits and dots are consumed, so that literals
    like ``1.2.3`` end up in one (malformed) token. An exponent is consumed if
    ``e``/``E`` is followed by a digit, or by a sign. A dangling exponent such
    as ``1e+`` is consumed too and then fails to convert.
    """
    n = len(text)
    i = start
    while i < n and (text[i].isdigit() or text[i] == '.'):
        i += 1
    if i < n and text[i] in 'eE':
        j = i + 1
        if j < n and text[j] in '+-':
            j += 1
            while j < n and text[j].isdigit():
                j += 1
            return j
        if j < n and text[j].isdigit():
            while j < n and text[j].isdigit():
                j += 1
            return j
    return i
