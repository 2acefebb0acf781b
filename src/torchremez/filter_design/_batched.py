"""Batched Parks-McClellan design.

Each filter of the batch is an independent design run; runs share no state,
so the results do not depend on batch order.
"""

from __future__ import annotations

from typing import Optional, Sequence, Union

import torch
from torch import Tensor

from ._filter_specification import FilterType
from ._remez import remez


def _row(
    values: Optional[Union[Sequence[float], Tensor]],
    index: int,
    batch_size: int,
    name: str,
) -> Optional[list]:
    """Per-filter values from a shared sequence or a (batch, k) tensor."""
    if values is None:
        return None

    if isinstance(values, Tensor) and values.ndim == 2:
        if values.shape[0] != batch_size:
            raise ValueError(
                f"{name} must have shape (batch, num_bands) with "
                f"batch={batch_size}, got {tuple(values.shape)}"
            )
        return values[index].tolist()

    if isinstance(values, Tensor):
        return values.tolist()

    return list(values)


def batched_remez(
    num_taps: int,
    bands: Tensor,
    desired: Union[Sequence[float], Tensor],
    weights: Optional[Union[Sequence[float], Tensor]] = None,
    filter_type: FilterType = "bandpass",
    maxiter: int = 40,
    grid_density: int = 16,
    *,
    dtype: Optional[torch.dtype] = None,
    device: Optional[torch.device] = None,
) -> Tensor:
    """
    Design multiple Parks-McClellan filters with different band edges.

    Parameters
    ----------
    num_taps : int
        Number of taps (same for all filters).
    bands : Tensor
        Band edges, shape ``(batch, 2 * num_bands)``. A 1-D tensor is
        treated as a batch of one.
    desired : sequence of float or Tensor
        Desired gain per band, shared by all filters, or shape
        ``(batch, num_bands)``.
    weights : sequence of float or Tensor, optional
        Weight per band, shared by all filters, or shape
        ``(batch, num_bands)``. Default is equal weighting.
    filter_type : {"bandpass", "differentiator", "hilbert"}, optional
        Filter type (same for all filters). Default is "bandpass".
    maxiter : int, optional
        Maximum number of Remez exchange iterations. Default is 40.
    grid_density : int, optional
        Grid density for frequency sampling. Default is 16.
    dtype : torch.dtype, optional
        Output dtype. Defaults to torch.float64.
    device : torch.device, optional
        Output device. Defaults to CPU.

    Returns
    -------
    filters : Tensor
        Filter coefficients, shape ``(batch, num_taps)``.

    Examples
    --------
    >>> import torch
    >>> from torchremez.filter_design import batched_remez
    >>> edges = torch.tensor([[0.0, 0.1, 0.15, 0.5], [0.0, 0.2, 0.25, 0.5]])
    >>> filters = batched_remez(31, edges, [1.0, 0.0])
    >>> filters.shape
    torch.Size([2, 31])
    """
    if bands.numel() == 0:
        raise ValueError("bands tensor cannot be empty")

    bands = torch.atleast_2d(bands)
    if bands.ndim != 2:
        raise ValueError(
            f"bands must have shape (batch, 2 * num_bands), "
            f"got {tuple(bands.shape)}"
        )

    batch_size = bands.shape[0]

    filters = []
    for i in range(batch_size):
        h = remez(
            num_taps,
            bands[i].tolist(),
            _row(desired, i, batch_size, "desired"),
            weights=_row(weights, i, batch_size, "weights"),
            filter_type=filter_type,
            maxiter=maxiter,
            grid_density=grid_density,
            dtype=dtype,
            device=device,
        )
        filters.append(h)

    return torch.stack(filters, dim=0)
