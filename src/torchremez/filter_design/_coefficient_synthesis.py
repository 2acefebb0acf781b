"""Impulse response of the converged Remez interpolant."""

from __future__ import annotations

import math

import torch
from torch import Tensor

from ._barycentric import BarycentricInterpolant
from ._dense_grid import symmetry_factor
from ._filter_specification import FilterSpecification


def synthesize_coefficients(
    interpolant: BarycentricInterpolant, spec: FilterSpecification
) -> Tensor:
    """
    Convert the converged interpolant into FIR filter coefficients.

    The amplitude response ``A(w) = Q(w) P(cos w)`` is sampled at the
    ``num_taps`` DFT frequencies ``w_m = 2 pi m / num_taps``, combined with
    the linear phase of the filter type and inverse transformed. The first
    half of the impulse response is then mirrored onto the second half
    (negated for antisymmetric types) so that the output is exactly
    symmetric or antisymmetric.

    Parameters
    ----------
    interpolant : BarycentricInterpolant
        Interpolant ``P`` on the converged extremal set.
    spec : FilterSpecification
        Specification the interpolant was designed for.

    Returns
    -------
    h : Tensor
        Filter coefficients, shape (num_taps,), dtype float64.
    """
    num_taps = spec.num_taps

    m = torch.arange(num_taps, dtype=torch.float64)
    omega = 2 * math.pi * m / num_taps

    amplitude = symmetry_factor(m / num_taps, spec.symmetry_type)
    amplitude = amplitude * interpolant(torch.cos(omega))

    # H(w) = exp(-j w (N - 1) / 2) A(w), times j for antisymmetric types.
    phase = torch.polar(torch.ones_like(omega), -omega * (num_taps - 1) / 2)
    response = phase * amplitude
    if spec.antisymmetric:
        response = 1j * response

    h = torch.fft.ifft(response).real.clone()

    half = num_taps // 2
    sign = -1.0 if spec.antisymmetric else 1.0
    if half > 0:
        h[num_taps - half :] = sign * h[:half].flip(0)
    if spec.symmetry_type == 3:
        h[half] = 0.0

    return h
