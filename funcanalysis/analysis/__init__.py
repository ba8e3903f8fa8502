r"""@package funcanalysis.analysis

Numerical analysis of parsed expressions.

    * modes: the four modes of the `analyze` operation
    * rootfind: Newton/bisection search for critical points
    * sampler: uniform grid sampling with gap and pole detection
    * bench: timing of repeated evaluation
"""

from .modes import analysis_mode
from .sampler import sample, SampleGrid, GAP
from .bench import benchmark, compare, BenchmarkResult
