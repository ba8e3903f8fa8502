#!/usr/bin/env python3

import unittest
import sys
import math

import sympy as sp
from mpmath import mp

from testutils import DpkTestCase
from ..errors import DomainViolation, UnsupportedDifferentiation
from ..exprs.parser import parse
from ..exprs.evaluators import evaluate
from .dual import DualNumber, DualContext, forward_derivative, forward_evaluate
from .tape import Tape, reverse_derivative, gradient
from .symbolic import symbolic_derivative


## Expressions and points at which they are smooth.
SMOOTH_CASES = [
    ("x^3-3*x", 1.7),
    ("sin(x)*exp(-x^2)", 0.3),
    ("ln(x^2+1)/sqrt(x)", 2.0),
    ("tan(x)+cos(2*x)", 0.4),
    ("x^x", 1.5),
    ("2^x - e^(x/2)", 0.7),
    ("hypot(x, 3)", 4.0),
    ("pow(x, 2.5)", 1.3),
    ("1/(1+x^2)", -0.8),
    ("abs(x)*x", -1.2),
]


def mp_derivative(text, x0):
    r"""High precision numerical derivative using mpmath."""
    X = sp.Symbol('x')
    f = sp.lambdify(X, parse(text).to_sympy(), modules='mpmath')
    with mp.workdps(30):
        return float(mp.diff(f, mp.mpf(x0)))


def central_difference(text, x0, h=1e-5):
    expr = parse(text)
    return (evaluate(expr, dict(x=x0+h)) - evaluate(expr, dict(x=x0-h))) / (2*h)


class TestDualNumber(DpkTestCase):
    def test_arithmetic(self):
        x = DualNumber.variable(2.0)
        y = x * x + 3 * x
        self.assertEqual((y.value, y.deriv), (10.0, 7.0))
        y = 1 / x - x / 4 + 2 ** x
        self.assertAlmostEqual(y.value, 0.5 - 0.5 + 4.0)
        self.assertAlmostEqual(y.deriv, -0.25 - 0.25 + 4.0 * math.log(2))
        y = (x - 1) ** 3
        self.assertEqual((y.value, y.deriv), (1.0, 3.0))
        self.assertEqual(-x, DualNumber(-2.0, -1.0))
        self.assertEqual(abs(DualNumber(-2.0, 1.0)), DualNumber(2.0, -1.0))

    def test_functions(self):
        x = DualNumber.variable(0.5)
        self.assertAlmostEqual(x.sin().deriv, math.cos(0.5))
        self.assertAlmostEqual(x.exp().deriv, math.exp(0.5))
        self.assertAlmostEqual(x.ln().deriv, 2.0)
        self.assertAlmostEqual(x.sqrt().deriv, 0.5 / math.sqrt(0.5))

    def test_constants(self):
        c = DualNumber.constant(3.0)
        self.assertEqual((c * c).deriv, 0.0)
        self.assertEqual(c, 3.0)


class TestForwardReverse(DpkTestCase):
    def test_against_mpmath(self):
        for text, x0 in SMOOTH_CASES:
            with self.subTest(text=text):
                expected = mp_derivative(text, x0)
                fwd = forward_derivative(parse(text), dict(x=x0), 'x')
                self.assertRelClose(fwd, expected, rtol=1e-9)

    def test_against_finite_difference(self):
        for text, x0 in SMOOTH_CASES:
            with self.subTest(text=text):
                fwd = forward_derivative(parse(text), dict(x=x0), 'x')
                self.assertRelClose(fwd, central_difference(text, x0), rtol=1e-6)

    def test_modes_agree(self):
        for text, x0 in SMOOTH_CASES:
            with self.subTest(text=text):
                expr = parse(text)
                fwd = forward_derivative(expr, dict(x=x0), 'x')
                rev = reverse_derivative(expr, dict(x=x0), 'x')
                self.assertRelClose(fwd, rev, rtol=1e-12)

    def test_forward_value(self):
        d = forward_evaluate(parse("x^2 + y"), dict(x=3.0, y=1.0), 'y')
        self.assertEqual((d.value, d.deriv), (10.0, 1.0))
        d = evaluate(parse("x*y"), dict(x=3.0, y=2.0), DualContext('x'))
        self.assertEqual((d.value, d.deriv), (6.0, 2.0))

    def test_gradient(self):
        value, grad = gradient(parse("x*y + sin(x)"), dict(x=0.0, y=3.0))
        self.assertEqual(value, 0.0)
        self.assertEqual(grad, dict(x=4.0, y=0.0))

    def test_absent_variable(self):
        expr = parse("y^2")
        env = dict(x=1.0, y=3.0)
        self.assertEqual(forward_derivative(expr, env, 'x'), 0.0)
        self.assertEqual(reverse_derivative(expr, env, 'x'), 0.0)
        self.assertEqual(forward_derivative(expr, env, 'y'), 6.0)

    def test_negative_base_with_constant_exponent(self):
        expr = parse("x^2")
        self.assertEqual(forward_derivative(expr, dict(x=-3.0), 'x'), -6.0)
        self.assertEqual(reverse_derivative(expr, dict(x=-3.0), 'x'), -6.0)

    def test_undefined_derivatives(self):
        for text in ["abs(x)", "sqrt(x)", "x^0.5", "max(x, 0)", "hypot(x, 0)",
                     "sqrt(x*x)", "abs(x^2)", "sqrt(x^2)", "hypot(x*x, 0)"]:
            with self.subTest(text=text):
                expr = parse(text)
                with self.assertRaises(DomainViolation):
                    forward_derivative(expr, dict(x=0.0), 'x')
                with self.assertRaises(DomainViolation):
                    reverse_derivative(expr, dict(x=0.0), 'x')

    def test_zero_tangent_of_dependent_value(self):
        d = forward_evaluate(parse("x*x"), dict(x=0.0), 'x')
        self.assertEqual((d.value, d.deriv), (0.0, 0.0))
        self.assertTrue(d.active)
        d = forward_evaluate(parse("y*0"), dict(x=0.0, y=2.0), 'x')
        self.assertFalse(d.active)

    def test_derivative_overflow(self):
        for text in ["1/x", "x^-1", "2/x + x"]:
            with self.subTest(text=text):
                expr = parse(text)
                with self.assertRaises(DomainViolation):
                    forward_derivative(expr, dict(x=1e-200), 'x')
                with self.assertRaises(DomainViolation):
                    reverse_derivative(expr, dict(x=1e-200), 'x')

    def test_min_max(self):
        self.assertEqual(forward_derivative(parse("max(x, 0)"), dict(x=2.0), 'x'), 1.0)
        self.assertEqual(forward_derivative(parse("min(x, 0)"), dict(x=2.0), 'x'), 0.0)
        self.assertEqual(reverse_derivative(parse("min(x^2, 9)"), dict(x=2.0), 'x'), 4.0)

    def test_undefined_value(self):
        with self.assertRaises(DomainViolation):
            forward_derivative(parse("ln(x)"), dict(x=-1.0), 'x')
        with self.assertRaises(DomainViolation):
            reverse_derivative(parse("ln(x)"), dict(x=-1.0), 'x')


class TestTape(DpkTestCase):
    def test_structure(self):
        tape = Tape.record(parse("x*x + x"), dict(x=2.0))
        self.assertEqual(tape.value, 6.0)
        self.assertEqual(sum(1 for e in tape.entries if e.op == 'var'), 1)
        for idx, entry in enumerate(tape.entries):
            for j in entry.inputs:
                self.assertLess(j, idx)
        self.assertEqual(tape.backward().derivative('x'), 5.0)

    def test_append_only(self):
        tape = Tape.record(parse("x+1"), dict(x=2.0))
        n = len(tape)
        with self.assertRaises(RuntimeError):
            tape.append('const', 'const', (), 1.0)
        tape.backward()
        self.assertEqual(len(tape), n)


class TestSymbolic(DpkTestCase):
    def test_polynomial(self):
        self.assertEqual(str(symbolic_derivative(parse("x^3-3*x"), 'x')), "3*x^2-3")
        self.assertEqual(str(symbolic_derivative(parse("x^2"), 'x')), "2*x")
        self.assertEqual(str(symbolic_derivative(parse("5*x+pi"), 'x')), "5")
        self.assertEqual(str(symbolic_derivative(parse("x^2"), 'y')), "0")

    def test_against_sympy(self):
        X = sp.Symbol('x', real=True)
        for text, x0 in SMOOTH_CASES:
            with self.subTest(text=text):
                expr = parse(text)
                d = symbolic_derivative(expr, 'x')
                f = expr.to_sympy().subs(sp.Symbol('x'), X)
                expected = sp.diff(f, X).subs(X, x0)
                self.assertRelClose(evaluate(d, dict(x=x0)), float(expected),
                                    rtol=1e-9)

    def test_other_variables_are_constant(self):
        d = symbolic_derivative(parse("x^2*y + sin(y)"), 'y')
        self.assertEqual(evaluate(d, dict(x=3.0, y=0.0)), 10.0)

    def test_undefined_at_point(self):
        with self.assertRaises(DomainViolation):
            evaluate(symbolic_derivative(parse("sqrt(x)"), 'x'), dict(x=0.0))
        with self.assertRaises(DomainViolation):
            evaluate(symbolic_derivative(parse("abs(x)"), 'x'), dict(x=0.0))

    def test_unsupported(self):
        with self.assertRaises(UnsupportedDifferentiation) as cm:
            symbolic_derivative(parse("max(x, 1)"), 'x')
        self.assertEqual(cm.exception.kind, 'max')
        with self.assertRaises(UnsupportedDifferentiation):
            symbolic_derivative(parse("2*min(x^2, 1)"), 'x')
        self.assertEqual(str(symbolic_derivative(parse("max(y, 1)"), 'x')), "0")


def run_tests():
    suite = unittest.TestLoader().loadTestsFromModule(sys.modules[__name__])
    return len(unittest.TextTestRunner(verbosity=2).run(suite).failures)


if __name__ == '__main__':
    unittest.main()
