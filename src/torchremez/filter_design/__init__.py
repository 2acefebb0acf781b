"""Parks-McClellan (Remez exchange) design of linear-phase FIR filters."""

from ._barycentric import (
    BarycentricInterpolant,
    barycentric_weights,
    compute_interpolant,
)
from ._batched import batched_remez
from ._coefficient_synthesis import synthesize_coefficients
from ._dense_grid import DenseGrid, build_dense_grid, symmetry_factor
from ._exceptions import (
    AllocationError,
    ConvergenceError,
    FilterDesignError,
    FrequencyOrderError,
    InvalidNumTapsError,
    InvalidSpecificationError,
    InvalidWeightError,
    NumericDegeneracyError,
    NyquistViolationError,
)
from ._extremal_exchange import extremal_exchange, find_local_extrema
from ._filter_specification import FilterSpecification
from ._remez import RemezResult, remez, remez_design
from ._trace import (
    LoggingObserver,
    RemezIteration,
    RemezObserver,
    TraceLevel,
)
from ._weighted_error import error_tolerance, evaluate_weighted_error

__all__ = [
    # Design functions
    "batched_remez",
    "remez",
    "remez_design",
    # Exchange components
    "build_dense_grid",
    "barycentric_weights",
    "compute_interpolant",
    "error_tolerance",
    "evaluate_weighted_error",
    "extremal_exchange",
    "find_local_extrema",
    "symmetry_factor",
    "synthesize_coefficients",
    # Types
    "BarycentricInterpolant",
    "DenseGrid",
    "FilterSpecification",
    "RemezResult",
    # Diagnostics
    "LoggingObserver",
    "RemezIteration",
    "RemezObserver",
    "TraceLevel",
    # Exceptions
    "AllocationError",
    "ConvergenceError",
    "FilterDesignError",
    "FrequencyOrderError",
    "InvalidNumTapsError",
    "InvalidSpecificationError",
    "InvalidWeightError",
    "NumericDegeneracyError",
    "NyquistViolationError",
]
