"""Barycentric Lagrange interpolation on the current extremal set."""

from __future__ import annotations

from dataclasses import dataclass

import torch
from torch import Tensor

from ._dense_grid import DenseGrid
from ._exceptions import InvalidSpecificationError, NumericDegeneracyError


@dataclass
class BarycentricInterpolant:
    """Polynomial through ``(nodes[i], values[i])`` in barycentric form.

    Parameters
    ----------
    nodes : Tensor
        Chebyshev abscissas ``x`` of the extremal frequencies, shape (r + 1,).
    weights : Tensor
        Barycentric weights ``alpha``, shape (r + 1,). Only their ratios
        matter; they are normalized to a maximum magnitude of one.
    values : Tensor
        Interpolant samples ``c`` at the nodes, shape (r + 1,).
    rho : float
        Signed minimax error level. The weighted error at node ``i`` is
        ``(-1)**i * rho``.
    """

    nodes: Tensor
    weights: Tensor
    values: Tensor
    rho: float

    def __call__(self, x: Tensor) -> Tensor:
        """Evaluate the interpolant at abscissas ``x``.

        Abscissas equal to a node return that node's value exactly.
        """
        diff = x.unsqueeze(-1) - self.nodes
        exact = diff == 0
        diff = torch.where(exact, torch.ones_like(diff), diff)

        terms = self.weights / diff
        result = (terms * self.values).sum(dim=-1) / terms.sum(dim=-1)

        hit = exact.any(dim=-1)
        if hit.any():
            node = exact.to(torch.int64).argmax(dim=-1)
            result = torch.where(hit, self.values[node], result)

        return result


def barycentric_weights(nodes: Tensor) -> Tensor:
    """
    Barycentric weights ``alpha[i] = 1 / prod_{j != i} (x[i] - x[j])``.

    The products are accumulated as log-magnitudes and signs, then scaled so
    that the largest weight has magnitude one. The scaling cancels in the
    barycentric formula and in the minimax level.

    Parameters
    ----------
    nodes : Tensor
        Interpolation abscissas, shape (m,).

    Returns
    -------
    alpha : Tensor
        Normalized barycentric weights, shape (m,).

    Raises
    ------
    NumericDegeneracyError
        If two abscissas coincide to within machine precision.
    """
    m = nodes.numel()
    diff = nodes.unsqueeze(1) - nodes.unsqueeze(0)
    diff.fill_diagonal_(1.0)

    tolerance = torch.finfo(nodes.dtype).eps
    off_diagonal = ~torch.eye(m, dtype=torch.bool)
    if bool(((diff.abs() <= tolerance) & off_diagonal).any()):
        raise NumericDegeneracyError(
            "Extremal set contains coincident Chebyshev abscissas; "
            "the barycentric weights are undefined"
        )

    log_magnitude = diff.abs().log().sum(dim=1)
    sign = diff.sign().prod(dim=1)

    return sign * torch.exp(log_magnitude.min() - log_magnitude)


def compute_interpolant(
    grid: DenseGrid, extremal_indices: Tensor
) -> BarycentricInterpolant:
    """
    Fit the equal-ripple interpolant to the current extremal set.

    Computes the barycentric weights of the extremal abscissas, the minimax
    level

    .. math::

        \\rho = \\frac{\\sum_i \\alpha_i D_i}{\\sum_i (-1)^i \\alpha_i / W_i}

    and the samples :math:`c_i = D_i - (-1)^i \\rho / W_i` that make the
    weighted error equal in magnitude and alternating in sign at every
    extremal frequency.

    Parameters
    ----------
    grid : DenseGrid
        Dense frequency grid of the run.
    extremal_indices : Tensor
        Ascending grid indices of the ``r + 1`` extremal frequencies.

    Returns
    -------
    interpolant : BarycentricInterpolant

    Raises
    ------
    InvalidSpecificationError
        If an index lies outside the grid.
    NumericDegeneracyError
        If the extremal abscissas (nearly) coincide or the minimax level is
        undefined.
    """
    if extremal_indices.numel() < 2:
        raise InvalidSpecificationError(
            f"At least 2 extremal frequencies are required, "
            f"got {extremal_indices.numel()}"
        )

    if (
        int(extremal_indices.min()) < 0
        or int(extremal_indices.max()) >= grid.size
    ):
        raise InvalidSpecificationError(
            f"Extremal indices must lie in [0, {grid.size})"
        )

    x = grid.abscissas[extremal_indices]
    alpha = barycentric_weights(x)

    d = grid.desired[extremal_indices]
    w = grid.weights[extremal_indices]

    sign = torch.ones_like(x)
    sign[1::2] = -1.0

    numerator = torch.sum(alpha * d)
    denominator = torch.sum(sign * alpha / w)
    rho = numerator / denominator

    if not bool(torch.isfinite(rho)) or denominator == 0:
        raise NumericDegeneracyError(
            "Minimax level is undefined for the current extremal set"
        )

    c = d - sign * rho / w

    return BarycentricInterpolant(
        nodes=x,
        weights=alpha,
        values=c,
        rho=rho.item(),
    )
