"""Diagnostic hooks of the Remez exchange."""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from torch import Tensor

from ._dense_grid import DenseGrid

if TYPE_CHECKING:
    from ._remez import RemezResult

logger = logging.getLogger(__name__)


class TraceLevel(enum.IntEnum):
    """Verbosity of the default :class:`LoggingObserver`."""

    NONE = 0
    SUMMARY = 1
    ITERATION = 2
    DETAIL = 3


@dataclass
class RemezIteration:
    """Snapshot of one exchange iteration.

    Parameters
    ----------
    iteration : int
        One-based iteration number.
    rho : float
        Minimax level of the interpolant fitted in this iteration.
    num_changes : int
        Positions at which the exchange moved the extremal set.
    extremal_indices : Tensor
        Extremal set the interpolant was fitted on.
    new_extremal_indices : Tensor
        Extremal set produced by the exchange.
    error : Tensor
        Weighted error curve of this iteration.
    """

    iteration: int
    rho: float
    num_changes: int
    extremal_indices: Tensor
    new_extremal_indices: Tensor
    error: Tensor


class RemezObserver:
    """Receives the progress of a design run.

    Subclass and override any of the hooks; the defaults do nothing. Hooks
    must not mutate their arguments.
    """

    def on_grid(self, grid: DenseGrid, r: int) -> None:
        pass

    def on_iteration(self, state: RemezIteration) -> None:
        pass

    def on_finish(self, result: "RemezResult") -> None:
        pass


class LoggingObserver(RemezObserver):
    """Writes progress to the module logger at the requested verbosity."""

    def __init__(self, level: TraceLevel = TraceLevel.NONE):
        self.level = TraceLevel(level)

    def on_grid(self, grid: DenseGrid, r: int) -> None:
        if self.level >= TraceLevel.SUMMARY:
            logger.info(
                "remez: %d grid points, df=%.8f, %d extremal frequencies",
                grid.size,
                grid.step,
                r + 1,
            )

    def on_iteration(self, state: RemezIteration) -> None:
        if self.level >= TraceLevel.ITERATION:
            logger.debug(
                "remez: iteration %d rho=%.6e changes=%d max|E|=%.6e",
                state.iteration,
                state.rho,
                state.num_changes,
                state.error.abs().max().item(),
            )
        if self.level >= TraceLevel.DETAIL:
            logger.debug(
                "remez: extremal indices %s",
                state.new_extremal_indices.tolist(),
            )

    def on_finish(self, result: "RemezResult") -> None:
        if self.level >= TraceLevel.SUMMARY:
            logger.info(
                "remez: converged after %d iterations, deviation=%.6e",
                result.iterations,
                result.deviation,
            )
