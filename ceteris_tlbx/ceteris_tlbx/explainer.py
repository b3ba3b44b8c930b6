"""Model explainer: a fitted model bundled with its reference data and prediction function."""

import logging
from collections.abc import Hashable, Iterable, Mapping
from typing import Any

import pandas as pd

from ceteris_tlbx.analysis.profile_aggregator import AggregatedCurve, Grouping, ProfileAggregator
from ceteris_tlbx.analysis.profile_builder import PredictFn, ProfileBuilder, default_predict
from ceteris_tlbx.analysis.split_selector import SplitSelector
from ceteris_tlbx.data.profile_table import ProfileTable
from ceteris_tlbx.data.sampling import select_neighbours, select_sample
from ceteris_tlbx.data.tabular_source import TabularSource, as_source
from ceteris_tlbx.data.variable_split import VariableSplit
from ceteris_tlbx.utils.profile_config import DEFAULT_PROFILE_CFG, ProfileConfig


logger = logging.getLogger(__name__)


class ModelExplainer:
    """Wrap a model so profiles can be computed against its reference data.

    The reference ``data`` determines the split grids; profiles are computed for
    whatever observations are passed to :meth:`ceteris_paribus`. The model is only
    ever evaluated through ``predict_fn``; it is never fitted or modified.

    Example:
        >>> explainer = ModelExplainer(lm, apartments[features], label="lm")
        >>> observations = explainer.sample_observations(n=10, random_state=0)
        >>> cp = explainer.ceteris_paribus(observations, variables=["surface", "district"])
        >>> pdp = explainer.aggregate(cp, variables=["surface"])
    """

    def __init__(
        self,
        model: Any,
        data: object,
        predict_fn: PredictFn = default_predict,
        label: str | None = None,
        predict_kwargs: Mapping[str, Any] | None = None,
        config: ProfileConfig = DEFAULT_PROFILE_CFG,
    ) -> None:
        self.model = model
        self._source: TabularSource = as_source(data)
        self.predict_fn = predict_fn
        self.label = label if label is not None else type(model).__name__
        self.predict_kwargs = dict(predict_kwargs or {})
        self.config = config

    @property
    def data(self) -> TabularSource:
        """Reference data used for split selection and sampling."""
        return self._source

    def predict(self, rows: pd.DataFrame) -> Any:
        return self.predict_fn(self.model, rows, **self.predict_kwargs)

    def make_split_selector(
        self,
        variables: Iterable[Hashable] | None = None,
        grid_points: int | None = None,
    ) -> SplitSelector:
        """Instantiate a split selector over the reference data."""
        return SplitSelector(
            self._source,
            variables,
            grid_points=grid_points or self.config.grid_points,
            interpolation=self.config.interpolation,
        )

    def make_profile_builder(self, observations: object, variable_splits: VariableSplit) -> ProfileBuilder:
        """Instantiate a profile builder for ``observations`` using this model."""
        return ProfileBuilder(
            observations,
            variable_splits,
            self.model,
            predict_fn=self.predict_fn,
            predict_kwargs=self.predict_kwargs,
            label=self.label,
        )

    def ceteris_paribus(
        self,
        observations: object,
        variables: Iterable[Hashable] | None = None,
        grid_points: int | None = None,
        variable_splits: VariableSplit | None = None,
    ) -> ProfileTable:
        """Compute ceteris paribus profiles for ``observations``.

        Args:
            observations: Rows to profile (any input accepted by ``as_source``).
            variables: Variables to sweep (defaults to all reference columns).
            grid_points: Overrides ``config.grid_points`` for numeric grids.
            variable_splits: Precomputed grids; skips split selection when given.

        Returns:
            ProfileTable labelled with this explainer's label.
        """
        if variable_splits is None:
            variable_splits = self.make_split_selector(variables, grid_points).fit().result()
        elif variables is not None:
            variable_splits = variable_splits.restrict(variables)
        logger.info("Ceteris paribus for '%s' over %d variables", self.label, len(variable_splits))
        return self.make_profile_builder(observations, variable_splits).fit().result()

    def aggregate(
        self,
        *tables: ProfileTable,
        group_by: Grouping | Hashable | None = None,
        variables: Iterable[Hashable] | None = None,
    ) -> AggregatedCurve:
        """Aggregate profile tables (typically from this and other explainers)."""
        return ProfileAggregator(tables, group_by=group_by, variables=variables).fit().result()

    def sample_observations(self, n: int | None = None, random_state: int | None = None) -> pd.DataFrame:
        return select_sample(self._source, n or self.config.sample_size, random_state=random_state)

    def neighbours_of(
        self,
        observation: object,
        variables: Iterable[Hashable] | None = None,
        n: int | None = None,
    ) -> pd.DataFrame:
        """Reference rows closest to ``observation``."""
        return select_neighbours(self._source, observation, variables, n or self.config.neighbours)
