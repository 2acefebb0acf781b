"""Tests for the barycentric interpolation engine."""

import pytest
import torch

from torchremez.filter_design import (
    BarycentricInterpolant,
    FilterSpecification,
    InvalidSpecificationError,
    NumericDegeneracyError,
    barycentric_weights,
    build_dense_grid,
    compute_interpolant,
)


@pytest.fixture
def grid():
    spec = FilterSpecification.create(
        21, [0.0, 0.25, 0.3, 0.5], [1.0, 0.0], [1.0, 3.0]
    )
    return build_dense_grid(spec)


@pytest.fixture
def extremal_indices(grid):
    r = 11
    return torch.tensor(
        [(i * (grid.size - 1)) // r for i in range(r + 1)], dtype=torch.long
    )


class TestBarycentricWeights:
    """Tests for barycentric_weights."""

    def test_matches_product_formula(self) -> None:
        """Weights are proportional to 1 / prod(x_i - x_j)."""
        x = torch.tensor([0.9, 0.3, -0.2, -0.7], dtype=torch.float64)
        expected = torch.empty_like(x)
        for i in range(4):
            p = 1.0
            for j in range(4):
                if j != i:
                    p *= (x[i] - x[j]).item()
            expected[i] = 1.0 / p

        alpha = barycentric_weights(x)
        scale = expected[0] / alpha[0]
        torch.testing.assert_close(alpha * scale, expected)
        assert alpha.abs().max().item() == pytest.approx(1.0)

    def test_coincident_nodes(self) -> None:
        x = torch.tensor([0.5, 0.1, 0.5], dtype=torch.float64)
        with pytest.raises(NumericDegeneracyError):
            barycentric_weights(x)

    def test_many_nodes_finite(self) -> None:
        """Long filters do not overflow the weights."""
        x = torch.cos(torch.linspace(0, torch.pi, 600, dtype=torch.float64))
        alpha = barycentric_weights(x)
        assert torch.isfinite(alpha).all()
        assert (alpha != 0).all()


class TestBarycentricInterpolant:
    """Tests for BarycentricInterpolant evaluation."""

    def test_reproduces_polynomial(self) -> None:
        """Interpolating a cubic through 5 nodes recovers the cubic."""
        nodes = torch.tensor([1.0, 0.6, 0.1, -0.4, -0.9], dtype=torch.float64)
        poly = lambda x: 2 * x**3 - x + 0.5  # noqa: E731
        interpolant = BarycentricInterpolant(
            nodes=nodes,
            weights=barycentric_weights(nodes),
            values=poly(nodes),
            rho=0.0,
        )

        x = torch.linspace(-1, 1, 41, dtype=torch.float64)
        torch.testing.assert_close(interpolant(x), poly(x))

    def test_exact_nodes(self) -> None:
        """Evaluating at a node returns the node value exactly."""
        nodes = torch.tensor([0.8, 0.0, -0.8], dtype=torch.float64)
        values = torch.tensor([1.5, -2.0, 0.25], dtype=torch.float64)
        interpolant = BarycentricInterpolant(
            nodes=nodes,
            weights=barycentric_weights(nodes),
            values=values,
            rho=0.0,
        )
        assert torch.equal(interpolant(nodes), values)


class TestComputeInterpolant:
    """Tests for compute_interpolant."""

    def test_alternating_error_at_nodes(self, grid, extremal_indices) -> None:
        """The weighted error at node i is (-1)**i rho."""
        interpolant = compute_interpolant(grid, extremal_indices)

        d = grid.desired[extremal_indices]
        w = grid.weights[extremal_indices]
        error = w * (d - interpolant.values)

        sign = torch.ones_like(error)
        sign[1::2] = -1.0
        torch.testing.assert_close(
            error, sign * interpolant.rho, rtol=1e-10, atol=1e-12
        )

    def test_rho_matches_linear_system(self, grid, extremal_indices) -> None:
        """rho solves the classical Remez linear system."""
        interpolant = compute_interpolant(grid, extremal_indices)

        x = interpolant.nodes
        m = x.numel()
        d = grid.desired[extremal_indices]
        w = grid.weights[extremal_indices]

        # sum_k a_k T_k(x_i) + (-1)**i rho / w_i = d_i
        a = torch.zeros(m, m, dtype=torch.float64)
        for k in range(m - 1):
            a[:, k] = torch.cos(k * torch.arccos(x))
        sign = torch.ones(m, dtype=torch.float64)
        sign[1::2] = -1.0
        a[:, -1] = sign / w

        solution = torch.linalg.solve(a, d)
        assert interpolant.rho == pytest.approx(solution[-1].item(), rel=1e-8)

    def test_nodes_are_chebyshev_abscissas(
        self, grid, extremal_indices
    ) -> None:
        interpolant = compute_interpolant(grid, extremal_indices)
        torch.testing.assert_close(
            interpolant.nodes,
            torch.cos(2 * torch.pi * grid.frequencies[extremal_indices]),
        )

    def test_identical_indices(self, grid) -> None:
        """An extremal set of identical indices is degenerate."""
        with pytest.raises(NumericDegeneracyError):
            compute_interpolant(grid, torch.full((12,), 5, dtype=torch.long))

    def test_out_of_range(self, grid, extremal_indices) -> None:
        bad = extremal_indices.clone()
        bad[-1] = grid.size
        with pytest.raises(InvalidSpecificationError):
            compute_interpolant(grid, bad)
