r"""@package funcanalysis.autodiff

Differentiation of expression trees.

Three strategies are available:

    * forward mode automatic differentiation with dual numbers
      (dual.forward_derivative()),
    * reverse mode automatic differentiation with a tape
      (tape.reverse_derivative(), tape.gradient()), and
    * symbolic differentiation producing a new, simplified expression tree
      (symbolic.symbolic_derivative()).

The two automatic modes share the local derivative rules in the rules module
and agree up to rounding.
"""

from .dual import DualNumber, forward_derivative
from .tape import Tape, reverse_derivative, gradient
from .symbolic import symbolic_derivative
