r"""@package funcanalysis.exprs

Expression system: parsing text into trees and evaluating them.

An expression is parsed once into an immutable tree of nodes.Expression
objects. Such a tree can then be

    * printed back into (minimally parenthesized) text,
    * evaluated numerically in different arithmetic contexts
      (see evaluators.evaluate()),
    * compiled into a fast callable (see evaluators.evaluator()),
    * simplified (see simplify.simplify()), and
    * differentiated (see the funcanalysis.autodiff package).
"""

from .lexer import tokenize
from .nodes import Expression, Constant, Variable, UnaryOp, BinaryOp, Call
from .parser import parse
from .evaluators import evaluate, evaluator, free_variables
from .simplify import simplify
