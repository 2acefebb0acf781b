"""Validated input of a Parks-McClellan design run."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Literal, Optional, Sequence, Tuple

from ._exceptions import (
    FrequencyOrderError,
    InvalidNumTapsError,
    InvalidSpecificationError,
    InvalidWeightError,
    NyquistViolationError,
)

FilterType = Literal["bandpass", "differentiator", "hilbert"]

_FILTER_TYPES = ("bandpass", "differentiator", "hilbert")


@dataclass(frozen=True)
class FilterSpecification:
    """Piecewise frequency-response specification of a linear-phase FIR filter.

    Parameters
    ----------
    num_taps : int
        Filter length.
    bands : tuple of float
        Band edges as pairs ``(start1, end1, start2, end2, ...)`` in
        normalized frequency (0 to 0.5, where 0.5 is Nyquist). Edges must be
        strictly increasing.
    desired : tuple of float
        Desired gain in each band.
    weights : tuple of float
        Positive error weight in each band.
    filter_type : {"bandpass", "differentiator", "hilbert"}
        ``"bandpass"`` covers every multiband design with constant gains
        (lowpass, highpass, bandstop, ...). ``"differentiator"`` and
        ``"hilbert"`` produce antisymmetric impulse responses.
    grid_density : int
        Dense grid points per approximating function and half-band.

    Raises
    ------
    InvalidSpecificationError
        If the specification is malformed. The concrete subclass names the
        offending field.

    Examples
    --------
    >>> spec = FilterSpecification.create(21, [0.0, 0.25, 0.3, 0.5], [1.0, 0.0])
    >>> spec.symmetry_type, spec.r
    (1, 11)
    """

    num_taps: int
    bands: Tuple[float, ...]
    desired: Tuple[float, ...]
    weights: Tuple[float, ...]
    filter_type: FilterType = "bandpass"
    grid_density: int = 16

    @classmethod
    def create(
        cls,
        num_taps: int,
        bands: Sequence[float],
        desired: Sequence[float],
        weights: Optional[Sequence[float]] = None,
        filter_type: FilterType = "bandpass",
        grid_density: int = 16,
    ) -> "FilterSpecification":
        """Build a specification from arbitrary sequences.

        ``weights`` defaults to unit weight in every band.
        """
        if weights is None:
            weights = [1.0] * len(desired)

        return cls(
            num_taps=int(num_taps),
            bands=tuple(float(f) for f in bands),
            desired=tuple(float(d) for d in desired),
            weights=tuple(float(w) for w in weights),
            filter_type=filter_type,
            grid_density=int(grid_density),
        )

    def __post_init__(self) -> None:
        if self.filter_type not in _FILTER_TYPES:
            raise InvalidSpecificationError(
                f"filter_type must be one of {_FILTER_TYPES}, "
                f"got {self.filter_type!r}"
            )

        if self.num_taps < 1:
            raise InvalidNumTapsError(
                f"num_taps must be at least 1, got {self.num_taps}"
            )

        if self.r < 1:
            raise InvalidNumTapsError(
                f"num_taps={self.num_taps} leaves no approximating functions "
                f"for a {self.filter_type} filter"
            )

        if self.grid_density < 1:
            raise InvalidSpecificationError(
                f"grid_density must be at least 1, got {self.grid_density}"
            )

        if len(self.bands) == 0 or len(self.bands) % 2 != 0:
            raise InvalidSpecificationError(
                f"bands must have non-zero even length, got {len(self.bands)}"
            )

        if len(self.desired) != self.num_bands:
            raise InvalidSpecificationError(
                f"Number of desired values ({len(self.desired)}) must equal "
                f"number of bands ({self.num_bands})"
            )

        if len(self.weights) != self.num_bands:
            raise InvalidSpecificationError(
                f"Number of weights ({len(self.weights)}) must equal "
                f"number of bands ({self.num_bands})"
            )

        for i, freq in enumerate(self.bands):
            if not 0.0 <= freq <= 0.5:
                raise NyquistViolationError(
                    f"Band edge {freq} at index {i} must be between 0 and 0.5"
                )

        for i in range(1, len(self.bands)):
            if self.bands[i] <= self.bands[i - 1]:
                raise FrequencyOrderError(
                    f"Band edges must be strictly increasing. "
                    f"Got {self.bands[i]} after {self.bands[i - 1]} "
                    f"at index {i}"
                )

        for i, weight in enumerate(self.weights):
            if not math.isfinite(weight) or weight <= 0:
                raise InvalidWeightError(
                    f"Weight {weight} of band {i} must be positive and finite"
                )

        for i, gain in enumerate(self.desired):
            if not math.isfinite(gain):
                raise InvalidSpecificationError(
                    f"Desired gain {gain} of band {i} must be finite"
                )

        self._check_forced_zeros()

    def _check_forced_zeros(self) -> None:
        """Reject non-zero gain where the filter type forces a zero.

        Even-length symmetric and odd-length antisymmetric filters vanish at
        Nyquist; antisymmetric filters vanish at DC. A differentiator's
        desired response is zero at DC, so only its Nyquist edge is checked.
        """
        symmetry_type = self.symmetry_type

        for i in range(self.num_bands):
            if self.desired[i] == 0.0:
                continue

            f0, f1 = self.band(i)
            if f1 == 0.5 and symmetry_type in (2, 3):
                raise InvalidNumTapsError(
                    f"A {self.num_taps}-tap {self.filter_type} filter is zero "
                    f"at f=0.5, but band {i} ends there with gain "
                    f"{self.desired[i]}; use an "
                    f"{'odd' if symmetry_type == 2 else 'even'} num_taps"
                )
            if (
                f0 == 0.0
                and symmetry_type in (3, 4)
                and self.filter_type != "differentiator"
            ):
                raise InvalidNumTapsError(
                    f"A {self.filter_type} filter is zero at f=0, but band "
                    f"{i} starts there with gain {self.desired[i]}"
                )

    @property
    def num_bands(self) -> int:
        return len(self.bands) // 2

    @property
    def s(self) -> int:
        """1 for odd filter length, 0 for even."""
        return self.num_taps % 2

    @property
    def n(self) -> int:
        """Filter semi-length."""
        return (self.num_taps - self.s) // 2

    @property
    def antisymmetric(self) -> bool:
        return self.filter_type != "bandpass"

    @property
    def symmetry_type(self) -> int:
        """Linear-phase FIR type (1 to 4)."""
        if self.antisymmetric:
            return 3 if self.s else 4
        return 1 if self.s else 2

    @property
    def r(self) -> int:
        """Number of approximating functions (extremal points minus one)."""
        if self.antisymmetric:
            return self.n
        return self.n + self.s

    def band(self, index: int) -> Tuple[float, float]:
        """Lower and upper edge of band ``index``."""
        return self.bands[2 * index], self.bands[2 * index + 1]
