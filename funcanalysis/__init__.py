r"""@package funcanalysis

Function analysis engine.

Given a mathematical expression as text, the engine parses it into an
expression tree (funcanalysis.exprs), evaluates it, differentiates it
symbolically and with forward or reverse mode automatic differentiation
(funcanalysis.autodiff), samples it for plotting and measures its evaluation
cost (funcanalysis.analysis).

The operations meant for applications are in funcanalysis.api. They return
self-contained JSON payloads and never raise for invalid requests.
funcanalysis.boundary wraps the same operations for hosts that require an
explicit release of each result.
"""

__version__ = "0.1.0"
