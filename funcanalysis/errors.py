r"""@package funcanalysis.errors

Exceptions raised by the engine.

All engine errors derive from EngineError. They are raised where the problem
is detected and travel up to the operation boundary in funcanalysis.api, which
turns them into the `error` field of the returned payload using
EngineError.to_dict().

The hierarchy is:

    EngineError
     +-- ParseError
     +-- EvalError
     |    +-- DomainViolation
     |    +-- UnboundVariable
     |    +-- UnsupportedOperator
     +-- DifferentiationError
     |    +-- UnsupportedDifferentiation
     +-- InvalidRangeError
     +-- InvalidArgumentError
"""


__all__ = [
    "EngineError",
    "ParseError",
    "EvalError",
    "DomainViolation",
    "UnboundVariable",
    "UnsupportedOperator",
    "DifferentiationError",
    "UnsupportedDifferentiation",
    "InvalidRangeError",
    "InvalidArgumentError",
]


class EngineError(Exception):
    r"""Base class of all errors raised by the engine."""

    def to_dict(self):
        r"""Return a JSON compatible description of this error."""
        return dict(type=type(self).__name__, message=str(self))


class ParseError(EngineError):
    r"""Raised for malformed expression text.

    The `position` is the 0-based character offset in the input at which the
    problem was detected.
    """

    def __init__(self, position, reason):
        super().__init__("%s (at position %d)" % (reason, position))
        ## Character offset of the problem.
        self.position = position
        ## Human readable description without the position.
        self.reason = reason

    def to_dict(self):
        d = super().to_dict()
        d.update(position=self.position, reason=self.reason)
        return d


class EvalError(EngineError):
    r"""Base class for failures during numeric evaluation."""
    pass


class DomainViolation(EvalError):
    r"""A mathematically undefined operation was requested.

    Examples are division by zero, the logarithm of a non-positive number, or
    any operation whose result is not a finite number.
    """

    def __init__(self, operation, argument=None, reason=None):
        if reason is None:
            reason = "undefined result"
        msg = "%s: %s" % (operation, reason)
        if argument is not None:
            msg += " (argument %r)" % (argument,)
        super().__init__(msg)
        ## Name of the failing operation, e.g. ``'div'`` or ``'ln'``.
        self.operation = operation
        ## The (first) offending argument, if known.
        self.argument = argument

    def to_dict(self):
        d = super().to_dict()
        d.update(operation=self.operation)
        return d


class UnboundVariable(EvalError):
    r"""Evaluation encountered a variable missing from the environment."""

    def __init__(self, name):
        super().__init__("unbound variable '%s'" % name)
        ## Name of the variable without a value.
        self.name = name

    def to_dict(self):
        d = super().to_dict()
        d.update(name=self.name)
        return d


class UnsupportedOperator(EvalError):
    r"""Evaluation encountered an operator or function it does not know."""

    def __init__(self, kind):
        super().__init__("unsupported operator '%s'" % kind)
        ## The operator kind or function name.
        self.kind = kind

    def to_dict(self):
        d = super().to_dict()
        d.update(kind=self.kind)
        return d


class DifferentiationError(EngineError):
    r"""Base class for failures to build a derivative."""
    pass


class UnsupportedDifferentiation(DifferentiationError):
    r"""No differentiation rule exists for an operator."""

    def __init__(self, kind, strategy='symbolic'):
        super().__init__("no %s differentiation rule for '%s'" % (strategy, kind))
        ## The operator kind or function name.
        self.kind = kind
        ## Which differentiation strategy lacks the rule.
        self.strategy = strategy

    def to_dict(self):
        d = super().to_dict()
        d.update(kind=self.kind, strategy=self.strategy)
        return d


class InvalidRangeError(EngineError):
    r"""Raised for an empty, inverted or non-finite sampling range."""
    pass


class InvalidArgumentError(EngineError):
    r"""Raised for out of range counts, unknown modes and similar."""
    pass
