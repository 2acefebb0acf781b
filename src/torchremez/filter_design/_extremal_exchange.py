"""Remez exchange step: relocate the extremal set onto the error extrema."""

from __future__ import annotations

from typing import List, Optional, Tuple

import torch
from torch import Tensor

from ._exceptions import ConvergenceError


def find_local_extrema(error: Tensor) -> List[int]:
    """
    Grid indices of the local extrema of the weighted error.

    An index is an extremum if its error is a positive strict local maximum
    or a negative strict local minimum. The endpoints are held to the same
    rule against their single neighbour, so an endpoint whose sign differs
    from its neighbour's is kept as the only point of its lobe.

    Parameters
    ----------
    error : Tensor
        Weighted error curve, shape (grid_size,), grid_size >= 2.

    Returns
    -------
    list of int
        Ascending candidate indices.
    """
    left = error[:-2]
    middle = error[1:-1]
    right = error[2:]

    maxima = (middle > 0) & (middle > left) & (middle > right)
    minima = (middle < 0) & (middle < left) & (middle < right)
    interior = (torch.nonzero(maxima | minima).flatten() + 1).tolist()

    def is_endpoint_extremum(end: float, neighbour: float) -> bool:
        return (end > 0 and end > neighbour) or (end < 0 and end < neighbour)

    candidates = []
    if is_endpoint_extremum(error[0].item(), error[1].item()):
        candidates.append(0)
    candidates.extend(interior)
    if is_endpoint_extremum(error[-1].item(), error[-2].item()):
        candidates.append(error.numel() - 1)

    return candidates


def _prune(values: List[float], found: List[int], count: int) -> List[int]:
    """Drop candidates until ``count`` remain with alternating signs."""
    num_extra = len(found) - count

    while num_extra > 0:
        positive = values[found[0]] > 0

        imin = 0
        alternating = True
        for i in range(1, len(found)):
            if abs(values[found[i]]) < abs(values[found[imin]]):
                imin = i

            if positive and values[found[i]] < 0:
                positive = False
            elif not positive and values[found[i]] > 0:
                positive = True
            else:
                # Two neighbours share a sign; keep the larger deviation.
                if abs(values[found[i]]) < abs(values[found[i - 1]]):
                    imin = i
                else:
                    imin = i - 1
                alternating = False
                break

        if alternating and num_extra == 1:
            if abs(values[found[0]]) < abs(values[found[-1]]):
                imin = 0
            else:
                imin = len(found) - 1

        del found[imin]
        num_extra -= 1

    return found


def extremal_exchange(
    error: Tensor,
    extremal_indices: Tensor,
    rho: Optional[float] = None,
    tolerance: float = 0.0,
) -> Tuple[Tensor, int]:
    """
    Replace the extremal set by the alternating extrema of the error curve.

    The local extrema of ``error`` are reduced to ``r + 1`` points whose
    signs alternate. While too many remain, the first pair of neighbours with
    equal sign loses its smaller member; if the list already alternates, the
    smaller of the two end points is dropped when a single excess remains,
    and the globally smallest extremum otherwise. Smaller deviations are
    always removed first, so the largest deviations are retained.

    When the minimax level ``rho`` of the interpolant that produced
    ``error`` is given, the current extremal set joins the candidates with
    its exact errors ``(-1)**i * rho``, and any other extremum must exceed
    ``abs(rho) + tolerance`` to be considered. The result then alternates
    with every error at least ``abs(rho)`` and keeps the largest one, so the
    minimax level of the next interpolant cannot decrease, and extrema at
    rounding-noise level cannot displace the current set.

    Parameters
    ----------
    error : Tensor
        Weighted error curve on the dense grid, shape (grid_size,).
    extremal_indices : Tensor
        Current extremal set, shape (r + 1,).
    rho : float, optional
        Signed minimax level of the interpolant fitted on
        ``extremal_indices``.
    tolerance : float, optional
        Absolute error margin an extremum must clear above ``abs(rho)``.
        Only used together with ``rho``. Default is 0.

    Returns
    -------
    new_extremal_indices : Tensor
        Updated extremal set, shape (r + 1,), dtype ``torch.long``.
    num_changes : int
        Number of positions at which the set changed. Zero means the
        exchange has reached its fixed point.

    Raises
    ------
    ConvergenceError
        If the error curve has fewer than ``r + 1`` usable extrema.

    Examples
    --------
    >>> error = torch.tensor([0.5, 0.1, -0.4, 0.2, 0.3, -0.6, 0.0])
    >>> extremal_exchange(error, torch.tensor([0, 2, 5]))
    (tensor([2, 4, 5]), 2)
    """
    count = extremal_indices.numel()
    previous = extremal_indices.tolist()
    values = error.tolist()
    found = find_local_extrema(error)

    if rho is not None:
        level = abs(rho) + tolerance
        found = [i for i in found if abs(values[i]) > level]

        if rho != 0.0:
            for i, index in enumerate(previous):
                values[index] = rho if i % 2 == 0 else -rho
            found = sorted(set(found).union(previous))

    if len(found) < count:
        raise ConvergenceError(
            f"Error curve has {len(found)} local extrema but "
            f"{count} extremal frequencies are required"
        )

    found = _prune(values, found, count)

    num_changes = sum(1 for a, b in zip(previous, found) if a != b)

    return torch.tensor(found, dtype=torch.long), num_changes
