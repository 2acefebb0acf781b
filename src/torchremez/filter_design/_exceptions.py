"""Exceptions for filter design module."""

from __future__ import annotations

from typing import Optional


class FilterDesignError(Exception):
    """Base exception for filter design errors."""

    pass


class InvalidSpecificationError(FilterDesignError, ValueError):
    """Raised when a filter specification is malformed.

    This occurs when:
    - Band edges, desired gains and weights have inconsistent lengths
    - Grid density is not a positive integer
    - The dense grid is too small for the requested number of taps
    - An initial extremal set has the wrong size or out-of-range indices
    """

    pass


class InvalidNumTapsError(InvalidSpecificationError):
    """Raised when FIR filter tap count is invalid for the requested filter type.

    This occurs when:
    - num_taps is not positive
    - num_taps leaves no approximating functions (a one-tap antisymmetric
      filter)
    - Even num_taps used with a highpass/bandstop gain at Nyquist (Type II
      filter constraint), or an antisymmetric filter asked for non-zero
      gain where it is forced to zero
    """

    pass


class FrequencyOrderError(InvalidSpecificationError):
    """Raised when frequency band edges are not in ascending order.

    Band edges must be strictly increasing, which also rules out
    zero-width, touching and overlapping bands.
    """

    pass


class NyquistViolationError(InvalidSpecificationError):
    """Raised when a band edge lies outside [0, 0.5]."""

    pass


class InvalidWeightError(InvalidSpecificationError):
    """Raised when a band weight is zero, negative or not finite."""

    pass


class ConvergenceError(FilterDesignError):
    """Raised when the Remez exchange fails to reach a fixed point.

    This occurs when:
    - The extremal set still changes after ``maxiter`` iterations
    - The error curve has fewer local extrema than the exchange needs
    """

    def __init__(self, message: str, iterations: Optional[int] = None):
        super().__init__(message)
        self.iterations = iterations


class NumericDegeneracyError(FilterDesignError, ArithmeticError):
    """Raised when the barycentric interpolant cannot be formed.

    This occurs when:
    - Two extremal frequencies map to (nearly) the same Chebyshev abscissa
    - The minimax level denominator vanishes or is not finite
    """

    pass


class AllocationError(FilterDesignError, MemoryError):
    """Raised when the buffers of a design run cannot be allocated."""

    pass
