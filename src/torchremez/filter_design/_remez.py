"""Parks-McClellan (Remez) optimal FIR filter design."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

import torch
from torch import Tensor

from ._barycentric import compute_interpolant
from ._coefficient_synthesis import synthesize_coefficients
from ._dense_grid import DenseGrid, build_dense_grid
from ._exceptions import (
    AllocationError,
    ConvergenceError,
    InvalidSpecificationError,
    NumericDegeneracyError,
)
from ._extremal_exchange import extremal_exchange
from ._filter_specification import FilterSpecification, FilterType
from ._trace import LoggingObserver, RemezIteration, RemezObserver, TraceLevel
from ._weighted_error import error_tolerance, evaluate_weighted_error


@dataclass
class RemezResult:
    """Outcome of a converged design run.

    Parameters
    ----------
    coefficients : Tensor
        Filter coefficients, shape (num_taps,), dtype float64.
    extremal_indices : Tensor
        Converged extremal set as indices into ``grid``.
    deviation : float
        Signed minimax level rho. ``abs(deviation)`` is the maximum weighted
        error of the design.
    iterations : int
        Exchange iterations performed, including the final one that
        confirmed the fixed point.
    grid : DenseGrid
        Dense grid of the run.
    error : Tensor
        Weighted error on ``grid`` of the final interpolant.
    """

    coefficients: Tensor
    extremal_indices: Tensor
    deviation: float
    iterations: int
    grid: DenseGrid
    error: Tensor


def _initial_extremals(
    grid: DenseGrid, r: int, initial_extremals: Optional[Sequence[int]]
) -> Tensor:
    if initial_extremals is None:
        return torch.tensor(
            [(i * (grid.size - 1)) // r for i in range(r + 1)],
            dtype=torch.long,
        )

    iext = torch.as_tensor(initial_extremals, dtype=torch.long).flatten()
    if iext.numel() != r + 1:
        raise InvalidSpecificationError(
            f"initial_extremals must contain {r + 1} grid indices, "
            f"got {iext.numel()}"
        )
    return iext


def _run(
    spec: FilterSpecification,
    maxiter: int,
    observer: RemezObserver,
    initial_extremals: Optional[Sequence[int]],
) -> RemezResult:
    grid = build_dense_grid(spec)
    observer.on_grid(grid, spec.r)

    iext = _initial_extremals(grid, spec.r, initial_extremals)
    tolerance = error_tolerance(grid)
    level = None

    for iteration in range(1, maxiter + 1):
        interpolant = compute_interpolant(grid, iext)

        # Every exchange keeps |rho| non-decreasing in exact arithmetic.
        if level is not None and abs(interpolant.rho) < level - tolerance:
            raise NumericDegeneracyError(
                f"Minimax level fell from {level:.6e} to "
                f"{abs(interpolant.rho):.6e} at iteration {iteration}; "
                "the exchange is limited by rounding error"
            )
        level = abs(interpolant.rho)

        error = evaluate_weighted_error(grid, interpolant)
        new_iext, num_changes = extremal_exchange(
            error, iext, rho=interpolant.rho, tolerance=tolerance
        )

        observer.on_iteration(
            RemezIteration(
                iteration=iteration,
                rho=interpolant.rho,
                num_changes=num_changes,
                extremal_indices=iext,
                new_extremal_indices=new_iext,
                error=error,
            )
        )

        if num_changes == 0:
            break

        iext = new_iext
    else:
        raise ConvergenceError(
            f"Remez algorithm did not converge after {maxiter} iterations. "
            "Try increasing maxiter or relaxing specifications.",
            iterations=maxiter,
        )

    result = RemezResult(
        coefficients=synthesize_coefficients(interpolant, spec),
        extremal_indices=iext,
        deviation=interpolant.rho,
        iterations=iteration,
        grid=grid,
        error=error,
    )
    observer.on_finish(result)

    return result


def remez_design(
    spec: FilterSpecification,
    maxiter: int = 40,
    *,
    trace: TraceLevel = TraceLevel.NONE,
    observer: Optional[RemezObserver] = None,
    initial_extremals: Optional[Sequence[int]] = None,
) -> RemezResult:
    """
    Run the Remez exchange for a filter specification.

    The dense grid is built once and the extremal set is seeded with evenly
    spaced grid indices. Each iteration fits the equal-ripple interpolant,
    evaluates the weighted error on the grid and exchanges the extremal set;
    the run stops when an exchange leaves the set unchanged.

    Parameters
    ----------
    spec : FilterSpecification
        Validated filter specification.
    maxiter : int, optional
        Maximum number of exchange iterations. Default is 40.
    trace : TraceLevel, optional
        Verbosity of the default logging observer. Ignored when
        ``observer`` is given. Default is ``TraceLevel.NONE``.
    observer : RemezObserver, optional
        Receives the grid, every iteration and the final result.
    initial_extremals : sequence of int, optional
        ``r + 1`` grid indices to start from instead of the evenly spaced
        seed, e.g. the ``extremal_indices`` of an earlier run.

    Returns
    -------
    result : RemezResult

    Raises
    ------
    InvalidSpecificationError
        If ``maxiter`` or ``initial_extremals`` is invalid, or the grid is
        too small.
    ConvergenceError
        If the extremal set does not reach a fixed point within ``maxiter``
        iterations. No coefficients are produced.
    NumericDegeneracyError
        If the extremal set collapses onto coincident abscissas, or the
        minimax level decreases between iterations (rounding breakdown).
    AllocationError
        If the run's buffers cannot be allocated.
    """
    if maxiter < 1:
        raise InvalidSpecificationError(
            f"maxiter must be at least 1, got {maxiter}"
        )

    if observer is None:
        observer = LoggingObserver(trace)

    try:
        return _run(spec, maxiter, observer, initial_extremals)
    except (MemoryError, torch.cuda.OutOfMemoryError) as error:
        raise AllocationError(
            f"Could not allocate buffers for a {spec.num_taps}-tap design"
        ) from error


def remez(
    num_taps: int,
    bands: Sequence[float],
    desired: Sequence[float],
    weights: Optional[Sequence[float]] = None,
    filter_type: FilterType = "bandpass",
    maxiter: int = 40,
    grid_density: int = 16,
    *,
    trace: TraceLevel = TraceLevel.NONE,
    observer: Optional[RemezObserver] = None,
    dtype: Optional[torch.dtype] = None,
    device: Optional[torch.device] = None,
) -> Tensor:
    """
    Design an optimal FIR filter using the Parks-McClellan (Remez) algorithm.

    The Parks-McClellan algorithm computes the optimal (in the Chebyshev sense)
    FIR filter that minimizes the maximum weighted error between the desired
    frequency response and the actual frequency response over a set of bands.

    Parameters
    ----------
    num_taps : int
        Number of FIR filter taps (filter length).
    bands : sequence of float
        Band edges as pairs [start1, end1, start2, end2, ...]. Frequencies are
        normalized so that 0.5 is the Nyquist frequency. Edges must be
        strictly increasing.
    desired : sequence of float
        Desired gain in each band. Length must equal len(bands) // 2. For a
        differentiator this is the slope of the desired response.
    weights : sequence of float, optional
        Positive weight for error in each band. Length must equal
        len(bands) // 2. Default is equal weighting (all ones).
    filter_type : {"bandpass", "differentiator", "hilbert"}, optional
        Type of filter:
        - "bandpass": Standard multiband FIR filter (default)
        - "differentiator": Differentiator with 1/f weighting
        - "hilbert": Hilbert transformer (90-degree phase shift)
    maxiter : int, optional
        Maximum number of Remez exchange iterations. Default is 40.
    grid_density : int, optional
        Grid density for frequency sampling. Default is 16.
    trace : TraceLevel, optional
        Logging verbosity of the design run. Default is ``TraceLevel.NONE``.
    observer : RemezObserver, optional
        Custom progress observer; replaces the logging observer.
    dtype : torch.dtype, optional
        Output dtype. Defaults to torch.float64.
    device : torch.device, optional
        Output device. Defaults to CPU.

    Returns
    -------
    h : Tensor
        FIR filter coefficients with shape (num_taps,). The filter has
        linear phase (symmetric coefficients for bandpass, antisymmetric
        for differentiator/hilbert).

    Raises
    ------
    InvalidSpecificationError
        If the band specification, num_taps, grid_density or maxiter is
        invalid. It is also a ``ValueError``.
    ConvergenceError
        If the exchange does not converge within ``maxiter`` iterations.
    NumericDegeneracyError
        If the interpolation becomes numerically degenerate.

    Notes
    -----
    The Remez exchange algorithm iteratively:
    1. Initializes extremal frequencies on a dense grid
    2. Solves for the equal-ripple interpolant via barycentric Lagrange
       interpolation
    3. Finds new extremal points where the weighted error is maximized
    4. Repeats until convergence (extremal points stop changing)

    The resulting filter has equiripple behavior: the approximation error
    oscillates between equal-magnitude extrema within each band.

    Examples
    --------
    >>> import torch
    >>> from torchremez.filter_design import remez
    >>> # Design a lowpass filter with cutoff at 0.2 (0.5 is Nyquist)
    >>> h = remez(51, [0.0, 0.2, 0.3, 0.5], [1.0, 0.0])
    >>> h.shape
    torch.Size([51])

    >>> # Design a bandpass filter
    >>> h = remez(65, [0.0, 0.1, 0.2, 0.35, 0.4, 0.5], [0.0, 1.0, 0.0])
    """
    spec = FilterSpecification.create(
        num_taps,
        bands,
        desired,
        weights=weights,
        filter_type=filter_type,
        grid_density=grid_density,
    )

    if dtype is None:
        dtype = torch.float64
    if device is None:
        device = torch.device("cpu")

    result = remez_design(spec, maxiter, trace=trace, observer=observer)

    return result.coefficients.to(dtype=dtype, device=device)
