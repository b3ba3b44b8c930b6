"""Candidate split points (grids) for the variables a profile sweeps."""

import logging
from collections.abc import Hashable, Iterable

import numpy as np
import pandas as pd

from ceteris_tlbx.data.tabular_source import TabularSource, as_source
from ceteris_tlbx.data.variable_split import VariableSplit
from ceteris_tlbx.errors import InvalidArgumentError
from ceteris_tlbx.utils.profile_config import (
    DEFAULT_PROFILE_CFG,
    MIN_GRID_POINTS,
    QUANTILE_INTERPOLATIONS,
    QuantileInterpolation,
)

from .base_analyser import BaseAnalyser


logger = logging.getLogger(__name__)


class SplitSelector(BaseAnalyser):
    r"""Compute a grid of representative values for each selected variable.

    Numeric variables get the empirical quantiles at ``grid_points`` evenly
    spaced probabilities :math:`0, \frac{1}{g-1}, \dots, 1`, deduplicated in
    ascending order. All other variables get their distinct observed values in
    first-occurrence order and ignore ``grid_points``. Missing values are
    dropped before either rule is applied.

    With ``interpolation="linear"`` the quantiles match R's default (type 7)
    estimator, e.g. values ``1..10`` with ``grid_points=5`` give
    ``[1.0, 3.25, 5.5, 7.75, 10.0]``.

    Example:
        >>> splits = SplitSelector(apartments, ["surface", "district"], grid_points=11).fit().result()
        >>> splits["district"]
        ('Srodmiescie', 'Ochota', 'Mokotow')
    """

    def __init__(
        self,
        data: object,
        variables: Iterable[Hashable] | None = None,
        grid_points: int = DEFAULT_PROFILE_CFG.grid_points,
        interpolation: QuantileInterpolation = DEFAULT_PROFILE_CFG.interpolation,
    ) -> None:
        """Validate the request; nothing is computed until fit().

        Raises:
            InvalidArgumentError: For unknown variables, fewer than two grid points
                or an unsupported interpolation method.
        """
        self._source: TabularSource = as_source(data)
        self.variables: list[Hashable] = list(self._source.columns if variables is None else variables)
        self.grid_points = grid_points
        self.interpolation = interpolation

        if grid_points < MIN_GRID_POINTS:
            raise InvalidArgumentError(f"grid_points must be >= {MIN_GRID_POINTS}, got {grid_points}")
        if interpolation not in QUANTILE_INTERPOLATIONS:
            raise InvalidArgumentError(
                f"Invalid interpolation='{interpolation}'. Use one of {QUANTILE_INTERPOLATIONS}.",
            )
        self._source.require_columns(self.variables)

        self._splits: VariableSplit | None = None

    @property
    def probabilities(self) -> np.ndarray:
        return np.linspace(0.0, 1.0, self.grid_points)

    def numeric_grid(self, column: pd.Series) -> tuple[float, ...]:
        """Deduplicated empirical quantiles of a numeric column."""
        values = column.dropna().astype(float)
        if values.empty:
            return ()
        quantiles = values.quantile(self.probabilities, interpolation=self.interpolation)
        return tuple(float(q) for q in pd.unique(quantiles.to_numpy()))

    @staticmethod
    def categorical_grid(column: pd.Series) -> tuple:
        """Distinct observed values in first-occurrence order."""
        return tuple(pd.unique(column.dropna()).tolist())

    def fit(self) -> "SplitSelector":
        grids: dict[Hashable, tuple] = {}
        for name in self.variables:
            column = self._source.column(name)
            if self._source.is_numeric(name):
                grids[name] = self.numeric_grid(column)
            else:
                grids[name] = self.categorical_grid(column)
            logger.debug("Split for '%s': %d grid points", name, len(grids[name]))
        self._splits = VariableSplit(grids)
        return self

    def result(self) -> VariableSplit:
        self._check_fitted(self._splits)
        return self._splits


def compute_splits(
    data: object,
    variables: Iterable[Hashable] | None = None,
    grid_points: int = DEFAULT_PROFILE_CFG.grid_points,
    interpolation: QuantileInterpolation = DEFAULT_PROFILE_CFG.interpolation,
) -> VariableSplit:
    """Functional shortcut for ``SplitSelector(...).fit().result()``."""
    return SplitSelector(data, variables, grid_points=grid_points, interpolation=interpolation).fit().result()
