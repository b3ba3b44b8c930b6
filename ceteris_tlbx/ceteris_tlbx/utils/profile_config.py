"""Shared defaults for split selection, sampling and profile computation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal


QuantileInterpolation = Literal["linear", "lower", "higher", "midpoint", "nearest"]


@dataclass(frozen=True)
class ProfileConfig:
    """Reusable profile settings.

    Attributes:
        grid_points: Number of quantile probabilities per numeric variable.
        interpolation: Quantile method passed to :meth:`pandas.Series.quantile`.
            ``"linear"`` reproduces R's default (type 7) quantiles.
        sample_size: Default number of observations drawn by ``select_sample``.
        neighbours: Default number of rows returned by ``select_neighbours``.
    """

    grid_points: int = 101
    interpolation: QuantileInterpolation = "linear"
    sample_size: int = 300
    neighbours: int = 20


# Default configuration used across the toolbox
DEFAULT_PROFILE_CFG = ProfileConfig()

QUANTILE_INTERPOLATIONS: tuple[str, ...] = ("linear", "lower", "higher", "midpoint", "nearest")
MIN_GRID_POINTS = 2


__all__ = ["DEFAULT_PROFILE_CFG", "MIN_GRID_POINTS", "QUANTILE_INTERPOLATIONS", "ProfileConfig", "QuantileInterpolation"]
