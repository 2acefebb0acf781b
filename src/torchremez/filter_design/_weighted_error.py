"""Weighted approximation error over the dense grid."""

from __future__ import annotations

from torch import Tensor

from ._barycentric import BarycentricInterpolant
from ._dense_grid import DenseGrid

# Weighted errors closer than this fraction of the grid's error scale are
# indistinguishable from rounding in the interpolant.
ERROR_RELATIVE_TOLERANCE = 2.0**-40


def evaluate_weighted_error(
    grid: DenseGrid, interpolant: BarycentricInterpolant
) -> Tensor:
    """
    Weighted error ``E = W (D - H)`` of the interpolant on every grid point.

    Parameters
    ----------
    grid : DenseGrid
        Dense frequency grid of the run.
    interpolant : BarycentricInterpolant
        Current interpolant.

    Returns
    -------
    error : Tensor
        Signed weighted error, shape (grid.size,).

    Notes
    -----
    Costs O(grid_size * r) per call, the dominant cost of an iteration.
    """
    response = interpolant(grid.abscissas)
    return grid.weights * (grid.desired - response)


def error_tolerance(grid: DenseGrid) -> float:
    """Absolute weighted error that counts as rounding noise on ``grid``.

    The scale is the largest weight times the largest desired magnitude
    (at least one), so the tolerance tracks how large ``W * H`` can get.
    """
    scale = grid.weights.abs().max() * grid.desired.abs().max().clamp(min=1.0)
    return ERROR_RELATIVE_TOLERANCE * scale.item()
