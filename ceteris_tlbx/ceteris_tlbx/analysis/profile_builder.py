"""Ceteris paribus profiles: sweep one variable at a time and record predictions."""

import logging
from collections.abc import Callable, Hashable, Mapping
from typing import Any

import numpy as np
import pandas as pd

from ceteris_tlbx.data.profile_columns import ProfileColumn
from ceteris_tlbx.data.profile_table import ProfileTable
from ceteris_tlbx.data.tabular_source import TabularSource, as_source
from ceteris_tlbx.data.variable_split import VariableSplit
from ceteris_tlbx.errors import InvalidArgumentError

from .base_analyser import BaseAnalyser


logger = logging.getLogger(__name__)

PredictFn = Callable[..., Any]


def default_predict(model: Any, rows: pd.DataFrame, **kwargs: Any) -> Any:
    """Call ``model.predict(rows)``, as scikit-learn style estimators expect."""
    return model.predict(rows, **kwargs)


class ProfileBuilder(BaseAnalyser):
    """Build the profile table for every observation and every split variable.

    For a variable with ``g`` grid points each observation is repeated ``g`` times
    consecutively and only that variable is overwritten with the grid, so every
    other feature keeps the observation's value. All synthetic rows of one
    variable go to ``predict_fn`` in a single call. Blocks are concatenated in
    ``variable_splits`` order.

    ``predict_fn(model, rows, **predict_kwargs)`` must return one prediction per
    row in row order. A two-dimensional result with several columns (class
    probabilities) produces one block per class, labelled ``"<label>.<class>"``.
    Exceptions raised by ``predict_fn`` propagate unchanged.

    The output grows as observations x grid points x variables; subsample the
    observations (see :func:`~ceteris_tlbx.data.sampling.select_sample`) or lower
    ``grid_points`` to keep it affordable.

    Example:
        >>> splits = compute_splits(apartments, ["surface", "district"])
        >>> table = ProfileBuilder(apartments_test.head(10), splits, lm).fit().result()
        >>> table.profiles.groupby("_vname_").size()
    """

    def __init__(
        self,
        data: object,
        variable_splits: Mapping[Hashable, Any],
        model: Any,
        predict_fn: PredictFn = default_predict,
        predict_kwargs: Mapping[str, Any] | None = None,
        label: str | None = None,
    ) -> None:
        """Validate inputs before any prediction is made.

        Raises:
            InvalidArgumentError: If a split variable is not a column of ``data`` or
                ``data`` uses a reserved profile column name.
        """
        self._source: TabularSource = as_source(data)
        self.variable_splits = (
            variable_splits if isinstance(variable_splits, VariableSplit) else VariableSplit(variable_splits)
        )
        self.model = model
        self.predict_fn = predict_fn
        self.predict_kwargs = dict(predict_kwargs or {})
        self.label = label if label is not None else type(model).__name__

        self._source.require_columns(self.variable_splits)
        reserved = ProfileColumn.reserved()
        clashes = [col for col in self._source.columns if col in reserved]
        if clashes:
            raise InvalidArgumentError(f"Data uses reserved profile column names: {clashes}")

        self._table: ProfileTable | None = None

    def _class_names(self, raw: Any, n_classes: int) -> list[Hashable]:
        if isinstance(raw, pd.DataFrame):
            return raw.columns.tolist()
        classes = getattr(self.model, "classes_", None)
        if classes is not None and len(classes) == n_classes:
            return list(classes)
        return list(range(n_classes))

    def predict(self, rows: pd.DataFrame) -> dict[str, np.ndarray]:
        """Predict ``rows`` and return the predictions keyed by output label."""
        if rows.empty:
            return {self.label: np.empty(0, dtype=float)}

        raw = self.predict_fn(self.model, rows, **self.predict_kwargs)
        values = raw.to_numpy() if isinstance(raw, pd.DataFrame | pd.Series) else np.asarray(raw)
        if values.ndim == 1:
            values = values.reshape(-1, 1)
        if values.ndim != 2 or values.shape[0] != len(rows):
            raise InvalidArgumentError(
                f"predict_fn returned predictions of shape {values.shape} for {len(rows)} rows",
            )

        if values.shape[1] == 1:
            return {self.label: values[:, 0]}
        return {
            f"{self.label}.{name}": values[:, i]
            for i, name in enumerate(self._class_names(raw, values.shape[1]))
        }

    def variable_block(self, vname: Hashable, grid: tuple) -> list[pd.DataFrame]:
        """Profiles of all observations for one variable (one frame per output label)."""
        n_grid = len(grid)
        rows = self._source.repeat_rows(n_grid)
        rows[vname] = list(grid) * self._source.n_rows
        ids = np.repeat(self._source.row_ids().to_numpy(), n_grid)

        predictions = self.predict(rows)
        logger.debug("Variable '%s': %d rows x %d outputs", vname, len(rows), len(predictions))
        return [
            rows.assign(
                **{
                    ProfileColumn.YHAT: yhat,
                    ProfileColumn.VNAME: vname,
                    ProfileColumn.IDS: ids,
                    ProfileColumn.LABEL: label,
                },
            )
            for label, yhat in predictions.items()
        ]

    def observation_frame(self) -> pd.DataFrame:
        """The observations themselves with their own predictions attached."""
        rows = self._source.repeat_rows(1)
        ids = self._source.row_ids().to_numpy()
        frames = [
            rows.assign(**{ProfileColumn.YHAT: yhat, ProfileColumn.IDS: ids, ProfileColumn.LABEL: label})
            for label, yhat in self.predict(rows).items()
        ]
        return pd.concat(frames, ignore_index=True)

    def fit(self) -> "ProfileBuilder":
        logger.info(
            "Computing profiles for %d variables x %d observations (%d synthetic rows)",
            len(self.variable_splits),
            self._source.n_rows,
            self._source.n_rows * self.variable_splits.total_points,
        )
        blocks: list[pd.DataFrame] = []
        for vname, grid in self.variable_splits.items():
            blocks.extend(self.variable_block(vname, grid))

        if blocks:
            profiles = pd.concat(blocks, ignore_index=True)
        else:
            profiles = pd.DataFrame(
                {
                    **{col: pd.Series(dtype=self._source.column(col).dtype) for col in self._source.columns},
                    **ProfileColumn.empty_columns(ProfileColumn.profile_columns()),
                },
            )

        self._table = ProfileTable(
            profiles=profiles,
            observations=self.observation_frame(),
            variable_splits=self.variable_splits,
        )
        return self

    def result(self) -> ProfileTable:
        self._check_fitted(self._table)
        return self._table


def build_profiles(
    data: object,
    variable_splits: Mapping[Hashable, Any],
    model: Any,
    predict_fn: PredictFn = default_predict,
    predict_kwargs: Mapping[str, Any] | None = None,
    label: str | None = None,
) -> ProfileTable:
    """Functional shortcut for ``ProfileBuilder(...).fit().result()``."""
    return ProfileBuilder(
        data,
        variable_splits,
        model,
        predict_fn=predict_fn,
        predict_kwargs=predict_kwargs,
        label=label,
    ).fit().result()
