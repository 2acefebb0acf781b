"""Tests for Parks-McClellan (Remez) optimal FIR filter design."""

import math

import numpy as np
import pytest
import torch
from scipy.signal import freqz
from scipy.signal import remez as scipy_remez

from torchremez.filter_design import (
    AllocationError,
    ConvergenceError,
    FilterSpecification,
    FrequencyOrderError,
    InvalidNumTapsError,
    InvalidSpecificationError,
    NumericDegeneracyError,
    remez,
    remez_design,
    symmetry_factor,
)


def _amplitude(
    h: torch.Tensor, frequencies: torch.Tensor, antisymmetric: bool
) -> torch.Tensor:
    """Real amplitude response of a linear-phase filter."""
    centre = (h.numel() - 1) / 2
    t = torch.arange(h.numel(), dtype=torch.float64) - centre
    omega_t = 2 * math.pi * frequencies.unsqueeze(-1) * t
    if antisymmetric:
        return -(h * torch.sin(omega_t)).sum(dim=-1)
    return (h * torch.cos(omega_t)).sum(dim=-1)


class TestRemez:
    """Test remez (Parks-McClellan) optimal FIR filter design."""

    def test_lowpass_matches_scipy(self) -> None:
        """Lowpass filter should match scipy.signal.remez."""
        num_taps = 51
        bands = [0.0, 0.2, 0.3, 0.5]
        desired = [1.0, 0.0]

        h = remez(num_taps, bands, desired)
        h_scipy = scipy_remez(num_taps, bands, desired, fs=1.0)

        assert h.shape == (num_taps,)
        torch.testing.assert_close(
            h, torch.from_numpy(h_scipy), rtol=0, atol=1e-3
        )

    def test_bandpass_matches_scipy(self) -> None:
        """Bandpass filter should match scipy.signal.remez."""
        num_taps = 65
        bands = [0.0, 0.1, 0.2, 0.35, 0.4, 0.5]
        desired = [0.0, 1.0, 0.0]

        h = remez(num_taps, bands, desired)
        h_scipy = scipy_remez(num_taps, bands, desired, fs=1.0)

        assert h.shape == (num_taps,)
        torch.testing.assert_close(
            h, torch.from_numpy(h_scipy), rtol=0, atol=1e-3
        )

    def test_weighted_design_matches_scipy(self) -> None:
        """Weighted design should match scipy.signal.remez."""
        num_taps = 51
        bands = [0.0, 0.2, 0.3, 0.5]
        desired = [1.0, 0.0]
        weights = [1.0, 10.0]

        h = remez(num_taps, bands, desired, weights=weights)
        h_scipy = scipy_remez(num_taps, bands, desired, weight=weights, fs=1.0)

        torch.testing.assert_close(
            h, torch.from_numpy(h_scipy), rtol=0, atol=1e-3
        )

    def test_even_num_taps_type_ii(self) -> None:
        """Even num_taps should work (Type II filter)."""
        num_taps = 50
        bands = [0.0, 0.2, 0.3, 0.5]
        desired = [1.0, 0.0]

        h = remez(num_taps, bands, desired)
        h_scipy = scipy_remez(num_taps, bands, desired, fs=1.0)

        assert h.shape == (num_taps,)
        torch.testing.assert_close(
            h, torch.from_numpy(h_scipy), rtol=0, atol=1e-3
        )

    def test_equiripple_property(self) -> None:
        """Verify equiripple behavior in passbands and stopbands."""
        h = remez(51, [0.0, 0.2, 0.3, 0.5], [1.0, 0.0])

        w, H = freqz(h.numpy(), worN=2048, fs=1.0)

        passband_error = np.abs(np.abs(H[w <= 0.2]) - 1.0)
        stopband_response = np.abs(H[w >= 0.3])

        assert np.max(passband_error) < 0.1
        assert np.max(stopband_response) < 0.1
        # Unit weights: both bands carry the same peak deviation.
        assert np.max(passband_error) == pytest.approx(
            np.max(stopband_response), rel=0.05
        )

    def test_unity_passband_dc_gain(self) -> None:
        """Lowpass filter should have approximately unity DC gain."""
        h = remez(51, [0.0, 0.2, 0.3, 0.5], [1.0, 0.0])
        torch.testing.assert_close(
            h.sum(),
            torch.tensor(1.0, dtype=torch.float64),
            rtol=1e-2,
            atol=1e-3,
        )

    def test_symmetric_coefficients(self) -> None:
        """Bandpass designs are exactly symmetric."""
        for num_taps in [21, 22, 51, 64]:
            h = remez(num_taps, [0.0, 0.2, 0.3, 0.5], [1.0, 0.0])
            assert torch.equal(h, h.flip(0))

    def test_differentiator_type(self) -> None:
        """Differentiator response should follow desired * f."""
        num_taps = 32
        h = remez(num_taps, [0.0, 0.5], [1.0], filter_type="differentiator")

        assert torch.equal(h, -h.flip(0))

        f = torch.linspace(0.02, 0.48, 200, dtype=torch.float64)
        amplitude = _amplitude(h, f, antisymmetric=True)
        torch.testing.assert_close(
            amplitude / f, torch.ones_like(f), rtol=0, atol=1e-2
        )

    def test_hilbert_type(self) -> None:
        """Hilbert transformer should have unit magnitude in band."""
        num_taps = 31
        h = remez(num_taps, [0.05, 0.42], [1.0], filter_type="hilbert")

        assert torch.equal(h, -h.flip(0))
        assert h[num_taps // 2] == 0.0

        w, H = freqz(h.numpy(), worN=2048, fs=1.0)
        in_band = (w >= 0.05) & (w <= 0.42)
        assert np.max(np.abs(np.abs(H[in_band]) - 1.0)) < 0.1

    def test_multiband_filter(self) -> None:
        """Multi-band filter should match scipy.signal.remez."""
        num_taps = 81
        bands = [0.0, 0.1, 0.15, 0.25, 0.3, 0.4, 0.45, 0.5]
        desired = [1.0, 0.0, 1.0, 0.0]
        weights = [1.0, 10.0, 1.0, 10.0]

        h = remez(num_taps, bands, desired, weights=weights)
        h_scipy = scipy_remez(num_taps, bands, desired, weight=weights, fs=1.0)

        torch.testing.assert_close(
            h, torch.from_numpy(h_scipy), rtol=0, atol=1e-3
        )

    def test_high_order_filter(self) -> None:
        """High-order designs stay numerically stable."""
        h = remez(121, [0.0, 0.15, 0.2, 0.5], [1.0, 0.0])

        assert torch.isfinite(h).all()
        w, H = freqz(h.numpy(), worN=4096, fs=1.0)
        assert np.max(np.abs(H[w >= 0.2])) < 1e-3

    @pytest.mark.parametrize("num_taps", [117, 127, 138, 201])
    def test_long_lowpass(self, num_taps) -> None:
        """Long designs whose ripple approaches rounding level converge."""
        h = remez(num_taps, [0.0, 0.2, 0.3, 0.5], [1.0, 0.0])

        assert h.shape == (num_taps,)
        assert torch.equal(h, h.flip(0))

        w, H = freqz(h.numpy(), worN=4096, fs=1.0)
        assert np.max(np.abs(np.abs(H[w <= 0.2]) - 1.0)) < 1e-6
        assert np.max(np.abs(H[w >= 0.3])) < 1e-6

    def test_three_taps(self) -> None:
        """The shortest lowpass converges to the scipy design."""
        h = remez(3, [0.0, 0.2, 0.3, 0.5], [1.0, 0.0])
        h_scipy = scipy_remez(3, [0.0, 0.2, 0.3, 0.5], [1.0, 0.0], fs=1.0)

        assert torch.equal(h, h.flip(0))
        torch.testing.assert_close(
            h, torch.from_numpy(h_scipy), rtol=0, atol=1e-2
        )

    def test_even_length_hilbert(self) -> None:
        """Type IV Hilbert transformers may keep their gain up to Nyquist."""
        num_taps = 30
        h = remez(num_taps, [0.05, 0.5], [1.0], filter_type="hilbert")

        assert torch.equal(h, -h.flip(0))

        w, H = freqz(h.numpy(), worN=2048, fs=1.0)
        in_band = w >= 0.05
        assert np.max(np.abs(np.abs(H[in_band]) - 1.0)) < 0.1

    def test_even_length_highpass_rejected(self) -> None:
        """Even-length symmetric filters cannot pass Nyquist."""
        with pytest.raises(InvalidNumTapsError):
            remez(64, [0.0, 0.2, 0.3, 0.5], [0.0, 1.0])

    def test_grid_density_parameter(self) -> None:
        """Different grid densities give close but valid designs."""
        h1 = remez(31, [0.0, 0.2, 0.3, 0.5], [1.0, 0.0], grid_density=8)
        h2 = remez(31, [0.0, 0.2, 0.3, 0.5], [1.0, 0.0], grid_density=32)

        assert h1.shape == h2.shape == (31,)
        torch.testing.assert_close(h1, h2, rtol=0, atol=1e-2)

    def test_dtype_float32(self) -> None:
        """Should respect float32 dtype parameter."""
        h = remez(31, [0.0, 0.2, 0.3, 0.5], [1.0, 0.0], dtype=torch.float32)
        assert h.dtype == torch.float32

    def test_default_dtype_is_float64(self) -> None:
        """Default dtype should be float64."""
        h = remez(31, [0.0, 0.2, 0.3, 0.5], [1.0, 0.0])
        assert h.dtype == torch.float64

    def test_device_cpu(self) -> None:
        """Should respect device parameter."""
        h = remez(
            31,
            [0.0, 0.2, 0.3, 0.5],
            [1.0, 0.0],
            device=torch.device("cpu"),
        )
        assert h.device.type == "cpu"

    def test_deterministic(self) -> None:
        """Repeated designs are bit-for-bit identical."""
        h1 = remez(21, [0.0, 0.25, 0.3, 0.5], [1.0, 0.0])
        h2 = remez(21, [0.0, 0.25, 0.3, 0.5], [1.0, 0.0])
        assert torch.equal(h1, h2)

    def test_invalid_num_taps_zero(self) -> None:
        """Should raise for zero num_taps."""
        with pytest.raises(ValueError, match="num_taps must be at least 1"):
            remez(0, [0.0, 0.2, 0.3, 0.5], [1.0, 0.0])

    def test_invalid_bands_overlapping(self) -> None:
        """Overlapping bands fail before any grid is built."""
        with pytest.raises(FrequencyOrderError, match="strictly increasing"):
            remez(31, [0.0, 0.3, 0.25, 0.5], [1.0, 0.0])

    def test_invalid_bands_outside_nyquist(self) -> None:
        """Should raise when band edges exceed Nyquist."""
        with pytest.raises(ValueError, match="must be between 0 and 0.5"):
            remez(31, [0.0, 0.2, 0.3, 0.6], [1.0, 0.0])

    def test_invalid_maxiter(self) -> None:
        """maxiter must be positive."""
        with pytest.raises(InvalidSpecificationError, match="maxiter"):
            remez(31, [0.0, 0.2, 0.3, 0.5], [1.0, 0.0], maxiter=0)


class TestRemezDesign:
    """Test the design driver and its result."""

    @pytest.fixture
    def spec(self) -> FilterSpecification:
        return FilterSpecification.create(
            21, [0.0, 0.25, 0.3, 0.5], [1.0, 0.0], [1.0, 1.0]
        )

    def test_alternation_at_convergence(self, spec) -> None:
        """Extremal errors are equal in magnitude and alternate in sign."""
        result = remez_design(spec)

        errors = result.error[result.extremal_indices]
        assert errors.numel() == spec.r + 1

        rho = abs(result.deviation)
        torch.testing.assert_close(
            errors.abs(), torch.full_like(errors, rho), rtol=1e-8, atol=0
        )
        assert torch.all(torch.sign(errors[1:]) == -torch.sign(errors[:-1]))

    def test_peak_error_equals_deviation(self, spec) -> None:
        """The extremal set holds the largest deviations of the grid."""
        result = remez_design(spec)
        assert result.error.abs().max().item() <= abs(result.deviation) * (
            1 + 1e-6
        )

    def test_equal_band_ripple(self, spec) -> None:
        """Passband and stopband ripples are equal for unit weights."""
        result = remez_design(spec)
        f = result.grid.frequencies
        e = result.error.abs()

        rho = abs(result.deviation)
        assert e[f <= 0.25].max().item() == pytest.approx(rho, rel=1e-6)
        assert e[f >= 0.3].max().item() == pytest.approx(rho, rel=1e-6)

        h = result.coefficients
        assert torch.equal(h, h.flip(0))

    def test_amplitude_matches_interpolant(self) -> None:
        """Synthesized taps reproduce the converged response on the grid."""
        for num_taps, filter_type, bands in [
            (21, "bandpass", [0.0, 0.25, 0.3, 0.5]),
            (24, "bandpass", [0.0, 0.25, 0.3, 0.5]),
            (25, "hilbert", [0.05, 0.42]),
            (24, "hilbert", [0.05, 0.5]),
        ]:
            desired = [1.0, 0.0] if filter_type == "bandpass" else [1.0]
            spec = FilterSpecification.create(
                num_taps, bands, desired, filter_type=filter_type
            )
            result = remez_design(spec)
            grid = result.grid

            q = symmetry_factor(grid.frequencies, spec.symmetry_type)
            expected = q * (grid.desired - result.error / grid.weights)
            actual = _amplitude(
                result.coefficients, grid.frequencies, spec.antisymmetric
            )
            torch.testing.assert_close(actual, expected, rtol=0, atol=1e-9)

    def test_iterations_reported(self, spec) -> None:
        result = remez_design(spec)
        assert 1 < result.iterations <= 40

    def test_non_convergence_raises(self) -> None:
        """Exhausting the budget raises instead of returning stale taps."""
        spec = FilterSpecification.create(51, [0.0, 0.2, 0.3, 0.5], [1.0, 0.0])
        with pytest.raises(ConvergenceError) as excinfo:
            remez_design(spec, maxiter=1)
        assert excinfo.value.iterations == 1

    def test_resume_from_converged_set(self, spec) -> None:
        """Seeding with a converged set converges in one iteration."""
        first = remez_design(spec)
        second = remez_design(
            spec, initial_extremals=first.extremal_indices.tolist()
        )

        assert second.iterations == 1
        assert torch.equal(first.extremal_indices, second.extremal_indices)

    def test_degenerate_seed_raises(self, spec) -> None:
        """A seed with identical indices is numerically degenerate."""
        with pytest.raises(NumericDegeneracyError):
            remez_design(spec, initial_extremals=[5] * (spec.r + 1))

    def test_seed_wrong_length_raises(self, spec) -> None:
        with pytest.raises(
            InvalidSpecificationError, match="initial_extremals"
        ):
            remez_design(spec, initial_extremals=[0, 1, 2])

    def test_allocation_failure(self, spec, monkeypatch) -> None:
        """Out-of-memory conditions surface as AllocationError."""

        def fail(*args, **kwargs):
            raise MemoryError

        monkeypatch.setattr(
            "torchremez.filter_design._remez.build_dense_grid", fail
        )
        with pytest.raises(AllocationError):
            remez_design(spec)
