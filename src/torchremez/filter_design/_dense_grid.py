"""Dense frequency grid for the Remez exchange."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Tuple

import torch
from torch import Tensor

from ._exceptions import InvalidSpecificationError
from ._filter_specification import FilterSpecification

# Differentiator bands with a smaller desired slope are weighted absolutely.
DIFFERENTIATOR_RELATIVE_WEIGHT_THRESHOLD = 1e-4


@dataclass
class DenseGrid:
    """Frequency samples with desired response and weight.

    Parameters
    ----------
    frequencies : Tensor
        Grid frequencies in [0, 0.5], non-decreasing, shape (grid_size,).
    desired : Tensor
        Desired response at each frequency, shape (grid_size,). For Type II,
        III and IV filters this is the desired amplitude divided by the
        symmetry factor.
    weights : Tensor
        Error weight at each frequency, shape (grid_size,), multiplied by the
        symmetry factor for Type II, III and IV filters.
    band_ends : Tuple[int, ...]
        Index of the last sample of each band.
    step : float
        Nominal frequency step ``df``.
    """

    frequencies: Tensor
    desired: Tensor
    weights: Tensor
    band_ends: Tuple[int, ...]
    step: float

    @property
    def size(self) -> int:
        """Number of grid points."""
        return self.frequencies.numel()

    @property
    def abscissas(self) -> Tensor:
        """Chebyshev abscissas ``cos(2 pi f)`` of the grid."""
        return torch.cos(2 * math.pi * self.frequencies)


def symmetry_factor(frequencies: Tensor, symmetry_type: int) -> Tensor:
    """Factor ``Q(f)`` that the amplitude of a Type II-IV filter carries.

    Parameters
    ----------
    frequencies : Tensor
        Normalized frequencies (0.5 is Nyquist).
    symmetry_type : int
        Linear-phase FIR type, 1 to 4.

    Returns
    -------
    Tensor
        ``1`` (Type I), ``cos(pi f)`` (Type II), ``sin(2 pi f)`` (Type III)
        or ``sin(pi f)`` (Type IV).
    """
    if symmetry_type == 1:
        return torch.ones_like(frequencies)
    if symmetry_type == 2:
        return torch.cos(math.pi * frequencies)
    if symmetry_type == 3:
        return torch.sin(2 * math.pi * frequencies)
    return torch.sin(math.pi * frequencies)


def _effective_edges(
    spec: FilterSpecification, index: int, df: float
) -> Tuple[float, float]:
    """Band edges moved off the zeros of the symmetry factor."""
    f0, f1 = spec.band(index)
    symmetry_type = spec.symmetry_type

    if symmetry_type in (3, 4) and f0 < df:
        f0 = df
    if symmetry_type in (2, 3) and f1 > 0.5 - df:
        f1 = 0.5 - df

    if f1 < f0:
        raise InvalidSpecificationError(
            f"Band {index} {spec.band(index)} is too narrow for a "
            f"Type {symmetry_type} filter with grid step {df:.3e}"
        )

    return f0, f1


def build_dense_grid(spec: FilterSpecification) -> DenseGrid:
    """
    Lay out the dense frequency grid of a design run.

    Each band ``[f0, f1]`` receives ``round((f1 - f0) / df)`` points (at
    least one) spaced ``df = 0.5 / (grid_density * r)`` apart from ``f0``.
    The last point of every band is overwritten with ``f1`` so that the band
    edge, where the alternation condition must hold, is always on the grid.

    Parameters
    ----------
    spec : FilterSpecification
        Validated filter specification.

    Returns
    -------
    grid : DenseGrid
        The dense grid with desired response and weight per point.

    Raises
    ------
    InvalidSpecificationError
        If a band collapses under the symmetry constraints, or the grid has
        fewer than ``r + 1`` points.

    Examples
    --------
    >>> spec = FilterSpecification.create(21, [0.0, 0.25, 0.3, 0.5], [1.0, 0.0])
    >>> grid = build_dense_grid(spec)
    >>> grid.size
    158
    >>> grid.frequencies[grid.band_ends[0]].item()
    0.25
    """
    df = 0.5 / (spec.grid_density * spec.r)

    frequencies = []
    desired = []
    weights = []
    band_ends = []

    for i in range(spec.num_bands):
        f0, f1 = _effective_edges(spec, i, df)

        num_points = max(1, int((f1 - f0) / df + 0.5))

        band_frequencies = [f0 + j * df for j in range(num_points)]
        band_frequencies[-1] = f1

        frequencies.extend(band_frequencies)
        desired.extend([spec.desired[i]] * num_points)
        weights.extend([spec.weights[i]] * num_points)
        band_ends.append(len(frequencies) - 1)

    frequencies = torch.tensor(frequencies, dtype=torch.float64)
    desired = torch.tensor(desired, dtype=torch.float64)
    weights = torch.tensor(weights, dtype=torch.float64)

    if frequencies.numel() < spec.r + 1:
        raise InvalidSpecificationError(
            f"Dense grid has {frequencies.numel()} points but "
            f"{spec.r + 1} extremal frequencies are required; "
            f"increase grid_density or widen the bands"
        )

    if spec.filter_type == "differentiator":
        relative = desired.abs() >= DIFFERENTIATOR_RELATIVE_WEIGHT_THRESHOLD
        weights = torch.where(relative, weights / frequencies, weights)
        desired = desired * frequencies

    if spec.symmetry_type != 1:
        factor = symmetry_factor(frequencies, spec.symmetry_type)
        desired = desired / factor
        weights = weights * factor

    return DenseGrid(
        frequencies=frequencies,
        desired=desired,
        weights=weights,
        band_ends=tuple(band_ends),
        step=df,
    )
